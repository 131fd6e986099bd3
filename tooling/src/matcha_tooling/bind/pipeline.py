"""`matcha bind` / `matcha build`: resolve targets, build every arch, merge, package, install.

Platforms run one after another (ios, then android); the archs of a platform
build concurrently. Any error aborts the run and no bundle is installed for
the failing platform. $WORK is removed on every exit path unless kept.
"""

from __future__ import annotations

import logging
import posixpath
import sys
import threading
from dataclasses import dataclass, field, replace
from pathlib import Path

from matcha_tooling.bind.bindfile import write_entry_point
from matcha_tooling.bind.coordinator import BuildJob, make_jobs, run_builds
from matcha_tooling.bind.env import android_env, find_ndk_root, ios_env, with_gopath
from matcha_tooling.bind.targets import TargetSet, parse_targets, unknown_tokens
from matcha_tooling.bind.workdir import WorkDir
from matcha_tooling.bundle.aar import build_aar
from matcha_tooling.bundle.install import (
    AndroidBundle,
    IosBundle,
    copy_android_support,
    copy_ios_support,
    install_android,
    install_ios,
    ios_work_layout,
)
from matcha_tooling.bundle.merge import fat_binary_inputs, lipo_create, place_shared_objects
from matcha_tooling.config import load_bind_layout
from matcha_tooling.errors import BindError, ConfigurationError
from matcha_tooling.helpers import getenv, mkdir
from matcha_tooling.toolchain.check import check_toolchain, gomobile_path
from matcha_tooling.toolchain.gobuild import go_build
from matcha_tooling.toolchain.packages import GoPackage, import_all, package_dir, reject_main

log = logging.getLogger(__name__)


@dataclass
class BindOptions:
    targets: str = ""
    output_dir: Path | None = None
    binary_only: bool = False
    keep_work: bool = False
    packages: list[str] = field(default_factory=list)
    timeout: float | None = None
    config: Path | None = None
    project_root: Path = field(default_factory=Path.cwd)


@dataclass
class _Run:
    """State shared by the per-platform steps of one bind run."""

    options: BindOptions
    targets: TargetSet
    layout: dict[str, str]
    work: WorkDir
    gomobile: Path
    packages: list[GoPackage]
    bind_package: str
    support_dir: Path
    output_dir: Path

    @property
    def tags(self) -> list[str]:
        return self.layout["build_tags"].split()


def _build_fn(ctx: _Run, buildmode: str, extra_tags: list[str]):
    """Build callable for the coordinator: one go build per job."""

    def build(job: BuildJob, cancel: threading.Event) -> None:
        mkdir(job.output_path.parent)
        goos = getenv(job.env, "GOOS")
        go_build(
            job.entry_point,
            job.env,
            ctx.work.path,
            f"-buildmode={buildmode}",
            "-o",
            str(job.output_path),
            tags=[*extra_tags, *ctx.tags],
            pkgdir=ctx.gomobile / f"pkg_{goos}_{job.arch}",
            cancel=cancel,
            timeout=ctx.options.timeout,
        )

    return build


def _bind_ios(ctx: _Run) -> IosBundle:
    layout = ctx.layout
    bridge_name = layout["ios_bridge_name"]
    gopath_dir = ctx.work.joinpath("IOS-GOPATH")
    work_out, binary = ios_work_layout(ctx.work.path, bridge_name)

    main_path = write_entry_point(ctx.work.joinpath("src", "iosbin", "main.go"), ctx.bind_package, layout)

    if not ctx.options.binary_only:
        copy_ios_support(
            work_out,
            ctx.support_dir,
            ctx.packages,
            bridge_name=bridge_name,
            bridge_import=layout["bridge_import"],
        )

    def env_for(arch: str) -> dict[str, str]:
        return with_gopath(ios_env(arch, min_version=layout["ios_min_version"]), gopath_dir)

    jobs = make_jobs(ctx.targets, "ios", main_path, env_for, ctx.work.path)
    print(f"🔨 Building ios ({', '.join(j.arch for j in jobs)})...")
    results = run_builds(jobs, _build_fn(ctx, "c-archive", ["ios"]))

    lipo_create(fat_binary_inputs(results), binary, cwd=ctx.work.path)
    installed = install_ios(
        work_out,
        binary,
        ctx.output_dir,
        bridge_name=bridge_name,
        binary_only=ctx.options.binary_only,
    )
    print(f"✅ ios: {installed}")
    return IosBundle(binary=installed, output_dir=ctx.output_dir, archs=sorted(results))


def _bind_android(ctx: _Run) -> AndroidBundle:
    layout = ctx.layout
    gopath_dir = ctx.work.joinpath("ANDROID-GOPATH")
    ndk_root = find_ndk_root(ctx.gomobile)
    android_dir = ctx.work.joinpath("android")

    main_path = write_entry_point(ctx.work.joinpath("androidlib", "main.go"), ctx.bind_package, layout)
    copy_android_support(android_dir, ctx.support_dir, layout["android_java_package"])

    aar_path = ctx.work.mkdir("matcha-android", "MatchaBridge") / layout["android_aar_name"]

    def env_for(arch: str) -> dict[str, str]:
        return with_gopath(android_env(arch, ndk_root=ndk_root, api=layout["android_api"]), gopath_dir)

    jobs = make_jobs(ctx.targets, "android", main_path, env_for, ctx.work.path)
    print(f"🔨 Building android ({', '.join(j.arch for j in jobs)})...")
    results = run_builds(jobs, _build_fn(ctx, "c-shared", []))

    shared = place_shared_objects(results, android_dir)
    build_aar(
        android_dir,
        ctx.packages,
        list(results),
        ctx.work.path,
        aar_path,
        java_package=layout["android_java_package"],
        min_api=layout["android_api"],
        bridge_import=layout["bridge_import"],
    )
    installed = install_android(aar_path, ctx.output_dir, aar_name=layout["android_aar_name"])
    print(f"✅ android: {installed}")
    return AndroidBundle(aar=installed, output_dir=ctx.output_dir, shared_objects=shared)


def _import_paths(packages: list[str]) -> list[str]:
    return [posixpath.normpath(p) for p in packages] or ["."]


def bind(options: BindOptions) -> dict[str, IosBundle | AndroidBundle]:
    """Run the whole pipeline. Returns {platform: bundle}. Raises BindError."""
    targets = parse_targets(options.targets)
    unknown = unknown_tokens(options.targets)
    if unknown:
        print(f"⚠️  Ignoring unknown targets: {' '.join(unknown)}", file=sys.stderr)
    if not len(targets):
        msg = f"no known targets in {options.targets!r}"
        raise ConfigurationError(msg)

    root = options.project_root
    layout = load_bind_layout(options.config, root)
    tags = layout["build_tags"].split()

    with WorkDir(keep=options.keep_work) as work:
        gomobile = gomobile_path()
        check_toolchain(gomobile)

        packages = import_all(_import_paths(options.packages), root, tags=[*tags, "ios"])
        reject_main(packages)
        if not packages:
            msg = "no packages to bind"
            raise ConfigurationError(msg)
        support_dir = package_dir(layout["support_import"], cwd=root)

        ctx = _Run(
            options=options,
            targets=targets,
            layout=layout,
            work=work,
            gomobile=gomobile,
            packages=packages,
            bind_package=packages[0].import_path,
            support_dir=support_dir,
            output_dir=options.output_dir or root / layout["output_dir"],
        )

        bundles: dict[str, IosBundle | AndroidBundle] = {}
        if targets.has_platform("ios"):
            bundles["ios"] = _bind_ios(ctx)
        if targets.has_platform("android"):
            bundles["android"] = _bind_android(ctx)
        return bundles


def build(options: BindOptions) -> dict[str, IosBundle | AndroidBundle]:
    """`matcha build`: binary-only bind into the matcha package's own directory."""
    layout = load_bind_layout(options.config, options.project_root)
    output_dir = package_dir(layout["matcha_import"], cwd=options.project_root)
    return bind(replace(options, output_dir=output_dir, binary_only=True))


def run(options: BindOptions, *, binary: bool = False) -> int:
    """bind (or build when binary=True). Returns 0 or 1; errors go to stderr."""
    try:
        bundles = build(options) if binary else bind(options)
    except BindError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    print(f"🎉 Bind complete: {', '.join(sorted(bundles))}")
    return 0
