"""Fan out one build per architecture, collect results, stop on first failure.

Each job runs on its own thread and reports exactly one BuildResult. On the
first error the shared cancel event is set, the remaining jobs are drained
(their results discarded) and the error is raised. Results are keyed by arch;
arrival order means nothing.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path

from matcha_tooling.bind.env import arch_output_path
from matcha_tooling.bind.targets import Target, TargetSet
from matcha_tooling.errors import BindError, BuildCancelled, TargetError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildJob:
    target: Target
    entry_point: Path
    env: Mapping[str, str] = field(hash=False)
    output_path: Path

    @property
    def arch(self) -> str:
        return self.target.arch


@dataclass
class BuildResult:
    arch: str
    output_path: Path
    err: BaseException | None = None


BuildFn = Callable[[BuildJob, threading.Event], None]


def make_jobs(
    targets: TargetSet,
    platform: str,
    entry_point: Path,
    env_for: Callable[[str], Mapping[str, str]],
    work_dir: Path,
) -> list[BuildJob]:
    """One BuildJob per requested arch of platform; all share entry_point.

    env_for is called for every arch before anything is dispatched, so a
    missing toolchain fails the platform up front.
    """
    jobs = []
    for arch in targets.archs(platform):
        jobs.append(
            BuildJob(
                target=Target(platform, arch),
                entry_point=entry_point,
                env=env_for(arch),
                output_path=arch_output_path(work_dir, platform, arch),
            )
        )
    return jobs


def _execute(job: BuildJob, build_fn: BuildFn, cancel: threading.Event) -> BuildResult:
    try:
        build_fn(job, cancel)
    except Exception as e:  # reported through the result, raised by the coordinator
        return BuildResult(job.arch, job.output_path, e)
    return BuildResult(job.arch, job.output_path)


def _as_bind_error(result: BuildResult) -> BindError:
    """BindErrors pass through with their arch filled in; anything else becomes a TargetError."""
    err = result.err
    if isinstance(err, BindError):
        if err.arch is None:
            err.arch = result.arch
        return err
    wrapped = TargetError(str(err), arch=result.arch)
    wrapped.__cause__ = err
    return wrapped


def run_builds(
    jobs: list[BuildJob],
    build_fn: BuildFn,
    *,
    cancel: threading.Event | None = None,
) -> dict[str, BuildResult]:
    """Run every job concurrently. Returns {arch: BuildResult} or raises the first error (a BindError)."""
    if not jobs:
        return {}
    cancel = cancel or threading.Event()
    results: dict[str, BuildResult] = {}
    failure: BuildResult | None = None

    log.debug("dispatching %d build(s): %s", len(jobs), ", ".join(str(j.target) for j in jobs))
    # Leaving the with-block waits for every worker, so nothing outlives the call.
    with ThreadPoolExecutor(max_workers=len(jobs), thread_name_prefix="matcha-build") as executor:
        futures = [executor.submit(_execute, job, build_fn, cancel) for job in jobs]
        for future in as_completed(futures):
            result = future.result()
            if failure is not None:
                continue
            if result.err is not None and not isinstance(result.err, BuildCancelled):
                failure = result
                cancel.set()
                log.debug("%s failed; cancelling remaining builds", result.arch)
                continue
            if result.err is not None:
                # Cancelled without a recorded failure: someone else set the token.
                failure = result
                continue
            results[result.arch] = result
            print(f"  ✅ built {result.arch}")

    if failure is not None:
        raise _as_bind_error(failure)
    return results
