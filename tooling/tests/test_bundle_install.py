"""Tests for matcha_tooling.bundle.install."""

from pathlib import Path

import pytest


class TestIosBundle:
    def test_work_layout_creates_skeleton(self, tmp_path: Path) -> None:
        from matcha_tooling.bundle.install import ios_work_layout

        work_out, binary = ios_work_layout(tmp_path, "MatchaBridge")
        assert work_out == tmp_path / "matcha-ios"
        assert binary == work_out / "MatchaBridge" / "MatchaBridge" / "MatchaBridge.a"
        assert binary.parent.is_dir()

    def test_copy_support_headers_and_bridge_ios_dirs(self, tmp_path: Path, support_dir: Path) -> None:
        from matcha_tooling.bundle.install import copy_ios_support, ios_work_layout
        from matcha_tooling.toolchain.packages import GoPackage

        pkg_dir = tmp_path / "app"
        (pkg_dir / "ios" / "App").mkdir(parents=True)
        (pkg_dir / "ios" / "App" / "AppDelegate.m").write_text("// m\n")
        plain = tmp_path / "plain"
        (plain / "ios").mkdir(parents=True)
        (plain / "ios" / "skip.m").write_text("")
        pkgs = [
            GoPackage("example.com/app", "app", pkg_dir, ("gomatcha.io/bridge",)),
            GoPackage("example.com/plain", "plain", plain, ("fmt",)),
        ]
        work_out, _ = ios_work_layout(tmp_path / "work", "MatchaBridge")
        copy_ios_support(work_out, support_dir, pkgs, bridge_name="MatchaBridge", bridge_import="gomatcha.io/bridge")
        headers = work_out / "MatchaBridge" / "MatchaBridge"
        assert (headers / "matchaobjc.h").read_text() == "// objc header\n"
        assert (headers / "matchago.h").read_text() == "// go header\n"
        assert (work_out / "App" / "AppDelegate.m").exists()
        assert not (work_out / "skip.m").exists()

    def test_missing_support_file(self, tmp_path: Path) -> None:
        from matcha_tooling.bundle.install import copy_ios_support, ios_work_layout
        from matcha_tooling.errors import PackagingError

        work_out, _ = ios_work_layout(tmp_path / "work", "MatchaBridge")
        with pytest.raises(PackagingError):
            copy_ios_support(work_out, tmp_path / "none", [], bridge_name="MatchaBridge", bridge_import="x")

    def test_full_install_replaces_output_dir(self, tmp_path: Path) -> None:
        from matcha_tooling.bundle.install import install_ios, ios_work_layout

        work_out, binary = ios_work_layout(tmp_path / "work", "MatchaBridge")
        binary.write_bytes(b"fat")
        out = tmp_path / "Matcha-iOS"
        out.mkdir()
        (out / "stale.txt").write_text("old")
        installed = install_ios(work_out, binary, out, bridge_name="MatchaBridge", binary_only=False)
        assert installed == out / "MatchaBridge" / "MatchaBridge" / "MatchaBridge.a"
        assert installed.read_bytes() == b"fat"
        assert not (out / "stale.txt").exists()

    def test_binary_only_install(self, tmp_path: Path) -> None:
        from matcha_tooling.bundle.install import install_ios, ios_work_layout

        work_out, binary = ios_work_layout(tmp_path / "work", "MatchaBridge")
        binary.write_bytes(b"fat2")
        out = tmp_path / "matcha"
        (out / "other").mkdir(parents=True)
        installed = install_ios(work_out, binary, out, bridge_name="MatchaBridge", binary_only=True)
        assert installed == out / "ios" / "MatchaBridge" / "MatchaBridge" / "MatchaBridge.a"
        assert installed.read_bytes() == b"fat2"
        assert (out / "other").is_dir()


class TestAndroidBundle:
    def test_copy_android_support(self, tmp_path: Path, support_dir: Path) -> None:
        from matcha_tooling.bundle.install import copy_android_support

        java_dir = copy_android_support(tmp_path / "android", support_dir, "io.gomatcha.bridge")
        assert java_dir == tmp_path / "android" / "src" / "main" / "java" / "io" / "gomatcha" / "bridge"
        assert sorted(p.name for p in java_dir.iterdir()) == ["Bridge.java", "GoValue.java", "Tracker.java"]

    def test_install_replaces_existing_aar(self, tmp_path: Path) -> None:
        from matcha_tooling.bundle.install import install_android

        aar = tmp_path / "work" / "matchabridge.aar"
        aar.parent.mkdir()
        aar.write_bytes(b"new")
        out = tmp_path / "out"
        (out / "android").mkdir(parents=True)
        (out / "android" / "matchabridge.aar").write_bytes(b"old")
        dest = install_android(aar, out, aar_name="matchabridge.aar")
        assert dest.read_bytes() == b"new"
