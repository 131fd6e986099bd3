"""Assemble bundle directories in $WORK and install them at the output location."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from matcha_tooling.config import ANDROID_SUPPORT_FILES, IOS_SUPPORT_FILES
from matcha_tooling.helpers import copy_dir, copy_dir_contents, copy_file, mkdir, remove_all
from matcha_tooling.toolchain.packages import GoPackage, imports_bridge

log = logging.getLogger(__name__)


@dataclass
class IosBundle:
    """Installed iOS output: the fat binary and, in full mode, the Xcode project dir."""

    binary: Path
    output_dir: Path
    archs: list[str] = field(default_factory=list)


@dataclass
class AndroidBundle:
    """Installed Android output: the .aar plus the per-ABI shared objects it was built from."""

    aar: Path
    output_dir: Path
    shared_objects: dict[str, Path] = field(default_factory=dict)


# --- iOS ---


def ios_work_layout(work_dir: Path, bridge_name: str) -> tuple[Path, Path]:
    """(work output dir, fat binary path) inside work_dir; creates the skeleton."""
    work_out = work_dir / "matcha-ios"
    binary = work_out / bridge_name / bridge_name / f"{bridge_name}.a"
    mkdir(binary.parent)
    return work_out, binary


def copy_ios_support(
    work_out: Path,
    support_dir: Path,
    packages: Iterable[GoPackage],
    *,
    bridge_name: str,
    bridge_import: str,
) -> None:
    """Copy bridge packages' ios/ dirs and the matcha headers into the Xcode project skeleton."""
    for pkg in packages:
        ios_dir = pkg.dir / "ios"
        if imports_bridge(pkg, bridge_import) and ios_dir.is_dir():
            copy_dir_contents(work_out, ios_dir)
    header_dir = work_out / bridge_name / bridge_name
    for src_name, dst_name in IOS_SUPPORT_FILES.items():
        copy_file(header_dir / dst_name, support_dir / src_name)


def ios_binary_install_path(output_dir: Path, bridge_name: str) -> Path:
    return output_dir / "ios" / bridge_name / bridge_name / f"{bridge_name}.a"


def install_ios(
    work_out: Path,
    binary: Path,
    output_dir: Path,
    *,
    bridge_name: str,
    binary_only: bool,
) -> Path:
    """Install the iOS result. Returns the installed binary path.

    Full mode replaces output_dir with the work tree; binary-only mode replaces
    just the fat binary under output_dir/ios/.
    """
    if binary_only:
        dest = ios_binary_install_path(output_dir, bridge_name)
        remove_all(dest)
        copy_file(dest, binary)
        return dest
    remove_all(output_dir)
    copy_dir(output_dir, work_out)
    return output_dir / binary.relative_to(work_out)


# --- Android ---


def copy_android_support(android_dir: Path, support_dir: Path, java_package: str) -> Path:
    """Copy the Java bridge sources into android_dir/src/main/java/<package path>."""
    java_dir = android_dir / "src" / "main" / "java" / Path(*java_package.split("."))
    mkdir(java_dir)
    for name in ANDROID_SUPPORT_FILES:
        copy_file(java_dir / name, support_dir / name)
    return java_dir


def android_aar_install_path(output_dir: Path, aar_name: str) -> Path:
    return output_dir / "android" / aar_name


def install_android(aar: Path, output_dir: Path, *, aar_name: str) -> Path:
    """Replace output_dir/android/<aar_name> with aar."""
    dest = android_aar_install_path(output_dir, aar_name)
    remove_all(dest)
    copy_file(dest, aar)
    return dest
