"""Shared helpers for matcha_tooling (env mappings, file copy/remove, command output).

Used by bind, bundle, and toolchain modules.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from collections.abc import Mapping
from pathlib import Path

from matcha_tooling.errors import PackagingError

log = logging.getLogger(__name__)

# --- Env ---


def getenv(env: Mapping[str, str], key: str, default: str = "") -> str:
    """Value of key in an env mapping, else default."""
    return env.get(key, default)


def merged_environ(env: Mapping[str, str], base: Mapping[str, str] | None = None) -> dict[str, str]:
    """os.environ (or base) overlaid with env. env wins."""
    out = dict(os.environ if base is None else base)
    out.update(env)
    return out


def format_env(env: Mapping[str, str]) -> str:
    """KEY=value pairs on one line, sorted, for debug logs."""
    return " ".join(f"{k}={v}" for k, v in sorted(env.items()))


# --- Command ---


def command_output(cmd: list[str], *, cwd: Path | None = None) -> str:
    """Run cmd and return stripped stdout. Raises CalledProcessError / FileNotFoundError."""
    log.debug("run: %s", " ".join(cmd))
    r = subprocess.run(
        cmd,
        cwd=str(cwd) if cwd else None,
        capture_output=True,
        text=True,
        check=True,
    )
    return r.stdout.strip()


def stderr_tail(text: str | None, lines: int = 20) -> str:
    """Last lines of tool output, for error messages."""
    if not text:
        return ""
    return "\n".join(text.strip().splitlines()[-lines:])


# --- File ---


def mkdir(path: Path) -> Path:
    """mkdir -p. Raises PackagingError."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        msg = f"could not create {path}: {e}"
        raise PackagingError(msg) from e
    return path


def copy_file(dst: Path, src: Path) -> Path:
    """Copy src to dst, creating dst's parent. Raises PackagingError."""
    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, dst)
        shutil.copymode(src, dst)
    except OSError as e:
        msg = f"could not copy {src} -> {dst}: {e}"
        raise PackagingError(msg) from e
    log.debug("copied %s -> %s", src, dst)
    return dst


def copy_dir_contents(dst: Path, src: Path) -> None:
    """Copy everything inside src into dst (merging with existing entries). Raises PackagingError."""
    try:
        shutil.copytree(src, dst, dirs_exist_ok=True)
    except (OSError, shutil.Error) as e:
        msg = f"could not copy {src}/ -> {dst}/: {e}"
        raise PackagingError(msg) from e
    log.debug("copied %s/ -> %s/", src, dst)


def copy_dir(dst: Path, src: Path) -> None:
    """Copy tree src to dst; dst must not exist. Raises PackagingError."""
    if dst.exists():
        msg = f"{dst} already exists"
        raise PackagingError(msg)
    copy_dir_contents(dst, src)


def remove_all(path: Path) -> None:
    """rm -rf path. Missing path is fine. Raises PackagingError."""
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        elif path.exists() or path.is_symlink():
            path.unlink()
    except OSError as e:
        msg = f"could not remove {path}: {e}"
        raise PackagingError(msg) from e
