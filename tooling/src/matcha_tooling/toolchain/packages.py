"""Go package discovery via `go list`."""

from __future__ import annotations

import json
import logging
import subprocess
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from matcha_tooling.errors import ConfigurationError
from matcha_tooling.helpers import merged_environ, stderr_tail

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class GoPackage:
    import_path: str
    name: str
    dir: Path
    imports: tuple[str, ...] = field(default=())


def imports_bridge(pkg: GoPackage, bridge_import: str) -> bool:
    return bridge_import in pkg.imports


def _iter_json_objects(text: str) -> Iterator[dict]:
    """go list -json prints one object after another, not an array."""
    decoder = json.JSONDecoder()
    i = 0
    while True:
        while i < len(text) and text[i].isspace():
            i += 1
        if i >= len(text):
            return
        obj, i = decoder.raw_decode(text, i)
        yield obj


def _go_list(args: list[str], *, cwd: Path, env: dict[str, str] | None = None) -> str:
    cmd = ["go", "list", *args]
    log.debug("run: %s", " ".join(cmd))
    try:
        r = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=merged_environ(env or {}),
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as e:
        msg = "go not found in PATH"
        raise ConfigurationError(msg) from e
    if r.returncode != 0:
        msg = f"go list {' '.join(args)} failed: {stderr_tail(r.stderr)}"
        raise ConfigurationError(msg)
    return r.stdout


def import_all(
    import_paths: Iterable[str],
    src_dir: Path,
    *,
    tags: list[str] | None = None,
    goos: str = "darwin",
    goarch: str = "arm",
) -> list[GoPackage]:
    """Load the packages to bind, as seen from src_dir with the given build context."""
    paths = list(import_paths) or ["."]
    args = ["-json"]
    if tags:
        args.append(f"-tags={' '.join(tags)}")
    args.extend(paths)
    out = _go_list(args, cwd=src_dir, env={"GOOS": goos, "GOARCH": goarch})
    try:
        objs = list(_iter_json_objects(out))
    except json.JSONDecodeError as e:
        msg = f"could not parse go list output: {e}"
        raise ConfigurationError(msg) from e
    pkgs = []
    for obj in objs:
        if obj.get("Error"):
            msg = f"{obj.get('ImportPath', '?')}: {obj['Error'].get('Err', obj['Error'])}"
            raise ConfigurationError(msg)
        pkgs.append(
            GoPackage(
                import_path=obj.get("ImportPath", ""),
                name=obj.get("Name", ""),
                dir=Path(obj.get("Dir", "")),
                imports=tuple(obj.get("Imports") or ()),
            )
        )
    return pkgs


def reject_main(packages: Iterable[GoPackage]) -> None:
    """Binding a main package is not supported. Raises ConfigurationError."""
    for pkg in packages:
        if pkg.name == "main":
            msg = f"binding 'main' package ({pkg.import_path}) is not supported"
            raise ConfigurationError(msg)


def package_dir(import_path: str, *, cwd: Path) -> Path:
    """Source directory of import_path (e.g. the matcha cmd package holding support files)."""
    out = _go_list(["-f", "{{.Dir}}", import_path], cwd=cwd).strip()
    if not out:
        msg = f"package {import_path} not found"
        raise ConfigurationError(msg)
    return Path(out)
