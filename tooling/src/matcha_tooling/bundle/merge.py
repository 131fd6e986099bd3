"""Combine per-arch outputs: lipo for iOS, jniLibs/<abi>/ placement for Android."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Mapping
from pathlib import Path

from matcha_tooling.bind.coordinator import BuildResult
from matcha_tooling.bind.env import android_abi, clang_arch
from matcha_tooling.errors import MergeError
from matcha_tooling.helpers import stderr_tail

log = logging.getLogger(__name__)


def lipo_command(arch_to_path: Mapping[str, Path], output_path: Path) -> list[str]:
    """xcrun lipo -create argv. Archs are sorted by name so the command is stable."""
    cmd = ["xcrun", "lipo", "-create"]
    for arch in sorted(arch_to_path):
        cmd.extend(["-arch", clang_arch(arch), str(arch_to_path[arch])])
    cmd.extend(["-o", str(output_path)])
    return cmd


def lipo_create(arch_to_path: Mapping[str, Path], output_path: Path, *, cwd: Path | None = None) -> Path:
    """Merge per-arch static libraries into one fat binary at output_path. Raises MergeError."""
    if not arch_to_path:
        msg = "no architectures to merge"
        raise MergeError(msg)
    missing = [f"{a} ({p})" for a, p in sorted(arch_to_path.items()) if not Path(p).exists()]
    if missing:
        msg = f"missing per-arch binaries: {', '.join(missing)}"
        raise MergeError(msg)

    cmd = lipo_command(arch_to_path, output_path)
    log.debug("run: %s", " ".join(cmd))
    try:
        r = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as e:
        msg = "xcrun not found; cannot create fat binary"
        raise MergeError(msg) from e
    if r.returncode != 0:
        msg = f"lipo failed (exit {r.returncode}): {stderr_tail(r.stderr or r.stdout)}"
        raise MergeError(msg)
    print(f"🔗 Fat binary ({', '.join(sorted(arch_to_path))}): {output_path}")
    return output_path


def fat_binary_inputs(results: Mapping[str, BuildResult]) -> dict[str, Path]:
    """{arch: path} for lipo, one entry per distinct arch."""
    return {arch: r.output_path for arch, r in results.items()}


def place_shared_objects(results: Mapping[str, BuildResult], android_dir: Path) -> dict[str, Path]:
    """Check each arch's libgojni.so is at android_dir/src/main/jniLibs/<abi>/. Returns {abi: path}."""
    jni_libs = android_dir / "src" / "main" / "jniLibs"
    placed: dict[str, Path] = {}
    for arch in sorted(results):
        abi = android_abi(arch)
        expected = jni_libs / abi / "libgojni.so"
        if Path(results[arch].output_path) != expected:
            msg = f"shared object for {arch} written to {results[arch].output_path}, expected {expected}"
            raise MergeError(msg, arch=arch)
        if not expected.is_file():
            msg = f"shared object missing: {expected}"
            raise MergeError(msg, arch=arch)
        placed[abi] = expected
    return placed
