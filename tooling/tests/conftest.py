"""Pytest fixtures for matcha tooling tests."""

from pathlib import Path

import pytest


@pytest.fixture
def support_dir(tmp_path: Path) -> Path:
    """Fake gomatcha.io/matcha/cmd directory holding the bundle support files."""
    d = tmp_path / "matcha-cmd"
    d.mkdir()
    (d / "matchaforeign.h.support").write_text("// objc header\n")
    (d / "matchago.h.support").write_text("// go header\n")
    for name in ("GoValue.java", "Bridge.java", "Tracker.java"):
        (d / name).write_text(f"package io.gomatcha.bridge; // {name}\n")
    return d


@pytest.fixture
def android_home(tmp_path: Path) -> Path:
    """Fake Android SDK with two platform jars."""
    home = tmp_path / "android-sdk"
    for api in ("19", "26"):
        p = home / "platforms" / f"android-{api}"
        p.mkdir(parents=True)
        (p / "android.jar").write_bytes(b"jar")
    return home


@pytest.fixture
def ndk_root(tmp_path: Path) -> Path:
    """Fake standalone NDK toolchains (<root>/<arch>/bin/<prefix>-clang)."""
    root = tmp_path / "ndk-toolchains"
    prefixes = {
        "arm": "arm-linux-androideabi",
        "arm64": "aarch64-linux-android",
        "386": "i686-linux-android",
        "amd64": "x86_64-linux-android",
    }
    for arch, prefix in prefixes.items():
        bin_dir = root / arch / "bin"
        bin_dir.mkdir(parents=True)
        (bin_dir / f"{prefix}-clang").write_text("")
        (bin_dir / f"{prefix}-clang++").write_text("")
    return root
