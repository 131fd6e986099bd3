"""Tests for matcha_tooling.bind.coordinator."""

import threading
from pathlib import Path

import pytest


def _jobs(tmp_path: Path, target_text: str = "ios/arm ios/arm64"):
    from matcha_tooling.bind.coordinator import make_jobs
    from matcha_tooling.bind.targets import parse_targets

    platform = target_text.split()[0].split("/")[0]
    return make_jobs(
        parse_targets(target_text),
        platform,
        tmp_path / "main.go",
        lambda arch: {"GOARCH": arch},
        tmp_path,
    )


class TestMakeJobs:
    def test_one_job_per_arch_sharing_entry_point(self, tmp_path: Path) -> None:
        jobs = _jobs(tmp_path)
        assert [j.arch for j in jobs] == ["arm", "arm64"]
        assert {j.entry_point for j in jobs} == {tmp_path / "main.go"}
        assert jobs[0].output_path != jobs[1].output_path
        assert jobs[1].env == {"GOARCH": "arm64"}

    def test_only_requested_platform(self, tmp_path: Path) -> None:
        from matcha_tooling.bind.coordinator import make_jobs
        from matcha_tooling.bind.targets import parse_targets

        jobs = make_jobs(parse_targets("ios android/386"), "android", tmp_path / "m.go", dict, tmp_path)
        assert [str(j.target) for j in jobs] == ["android/386"]

    def test_env_failure_raises_before_dispatch(self, tmp_path: Path) -> None:
        from matcha_tooling.bind.coordinator import make_jobs
        from matcha_tooling.bind.targets import parse_targets
        from matcha_tooling.errors import ConfigurationError

        def env_for(arch: str) -> dict:
            if arch == "arm64":
                raise ConfigurationError("NDK missing", arch=arch)
            return {}

        with pytest.raises(ConfigurationError, match="NDK missing"):
            make_jobs(parse_targets("android"), "android", tmp_path / "m.go", env_for, tmp_path)


class TestRunBuilds:
    def test_empty_job_list(self) -> None:
        from matcha_tooling.bind.coordinator import run_builds

        assert run_builds([], lambda job, cancel: None) == {}

    def test_success_returns_results_keyed_by_arch(self, tmp_path: Path) -> None:
        from matcha_tooling.bind.coordinator import run_builds

        jobs = _jobs(tmp_path)
        calls = []
        lock = threading.Lock()

        def build(job, cancel) -> None:
            with lock:
                calls.append(job.arch)

        results = run_builds(jobs, build)
        assert sorted(calls) == ["arm", "arm64"]
        assert set(results) == {"arm", "arm64"}
        assert results["arm64"].output_path == tmp_path / "matcha-arm64.a"
        assert all(r.err is None for r in results.values())

    def test_jobs_run_concurrently(self, tmp_path: Path) -> None:
        from matcha_tooling.bind.coordinator import run_builds

        jobs = _jobs(tmp_path, "ios")
        barrier = threading.Barrier(len(jobs), timeout=10)

        # Deadlocks (BrokenBarrierError) unless every job is in flight at once.
        results = run_builds(jobs, lambda job, cancel: barrier.wait())
        assert set(results) == {"arm", "arm64", "386", "amd64"}

    def test_first_error_is_raised_and_siblings_cancelled(self, tmp_path: Path) -> None:
        from matcha_tooling.bind.coordinator import run_builds
        from matcha_tooling.errors import BuildCancelled, TargetError

        jobs = _jobs(tmp_path)
        sibling_saw_cancel = threading.Event()
        sibling_done = threading.Event()

        def build(job, cancel) -> None:
            if job.arch == "arm":
                raise TargetError("undefined: foo", arch="arm")
            try:
                if cancel.wait(timeout=10):
                    sibling_saw_cancel.set()
                    raise BuildCancelled("cancelled", arch=job.arch)
            finally:
                sibling_done.set()

        with pytest.raises(TargetError, match="undefined: foo") as exc_info:
            run_builds(jobs, build)
        assert exc_info.value.arch == "arm"
        assert not isinstance(exc_info.value, BuildCancelled)
        assert sibling_saw_cancel.is_set()
        assert sibling_done.is_set()

    def test_other_exceptions_are_wrapped_with_arch(self, tmp_path: Path) -> None:
        from matcha_tooling.bind.coordinator import run_builds
        from matcha_tooling.errors import TargetError

        jobs = _jobs(tmp_path, "android/arm64")

        def build(job, cancel) -> None:
            raise ValueError("bad flag")

        with pytest.raises(TargetError) as exc_info:
            run_builds(jobs, build)
        assert exc_info.value.arch == "arm64"
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert "[build arm64] bad flag" == str(exc_info.value)

    def test_packaging_error_keeps_its_kind(self, tmp_path: Path) -> None:
        from matcha_tooling.bind.coordinator import run_builds
        from matcha_tooling.errors import PackagingError, TargetError

        def build(job, cancel) -> None:
            raise PackagingError("could not create /x: EACCES")

        with pytest.raises(PackagingError) as exc_info:
            run_builds(_jobs(tmp_path, "ios/arm"), build)
        assert isinstance(exc_info.value, OSError)
        assert not isinstance(exc_info.value, TargetError)
        assert str(exc_info.value) == "[package arm] could not create /x: EACCES"

    def test_target_error_without_arch_gets_one(self, tmp_path: Path) -> None:
        from matcha_tooling.bind.coordinator import run_builds
        from matcha_tooling.errors import TargetError

        def build(job, cancel) -> None:
            raise TargetError("exit 2")

        with pytest.raises(TargetError) as exc_info:
            run_builds(_jobs(tmp_path, "ios/amd64"), build)
        assert exc_info.value.arch == "amd64"

    def test_external_cancel_stops_run(self, tmp_path: Path) -> None:
        from matcha_tooling.bind.coordinator import run_builds
        from matcha_tooling.errors import BuildCancelled

        cancel = threading.Event()
        cancel.set()

        def build(job, cancel) -> None:
            if cancel.is_set():
                raise BuildCancelled("cancelled before start", arch=job.arch)

        with pytest.raises(BuildCancelled):
            run_builds(_jobs(tmp_path), build, cancel=cancel)
