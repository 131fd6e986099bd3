"""Tests for matcha_tooling.bind.workdir."""

from pathlib import Path

import pytest


class TestWorkDir:
    def test_removed_on_success(self, tmp_path: Path) -> None:
        from matcha_tooling.bind.workdir import WorkDir

        with WorkDir(parent=tmp_path) as work:
            path = work.path
            work.mkdir("matcha-ios", "MatchaBridge")
            (work.joinpath("matcha-ios", "x.txt")).write_text("x")
        assert not path.exists()

    def test_removed_on_error(self, tmp_path: Path) -> None:
        from matcha_tooling.bind.workdir import WorkDir

        with pytest.raises(RuntimeError, match="boom"):
            with WorkDir(parent=tmp_path) as work:
                path = work.path
                raise RuntimeError("boom")
        assert not path.exists()

    def test_kept_when_requested(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        from matcha_tooling.bind.workdir import WorkDir

        with WorkDir(keep=True, parent=tmp_path) as work:
            path = work.path
        assert path.is_dir()
        assert f"WORK={path}" in capsys.readouterr().out

    def test_path_outside_block_raises(self, tmp_path: Path) -> None:
        from matcha_tooling.bind.workdir import WorkDir

        work = WorkDir(parent=tmp_path)
        with pytest.raises(RuntimeError):
            _ = work.path
