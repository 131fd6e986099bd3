"""Run `go build` for one architecture: blocking, cancellable, optional timeout."""

from __future__ import annotations

import logging
import subprocess
import threading
import time
from collections.abc import Mapping
from pathlib import Path

from matcha_tooling.errors import BuildCancelled, TargetError
from matcha_tooling.helpers import format_env, getenv, merged_environ, stderr_tail

log = logging.getLogger(__name__)

POLL_INTERVAL = 0.2


def _stop(proc: subprocess.Popen) -> None:
    proc.terminate()
    try:
        proc.wait(timeout=5)
    except subprocess.TimeoutExpired:
        proc.kill()
        proc.wait()


def _wait(proc: subprocess.Popen, arch: str | None, cancel: threading.Event | None, timeout: float | None) -> int:
    """Poll proc until it exits. Stops it and raises on cancel or timeout."""
    deadline = None if timeout is None else time.monotonic() + timeout
    while True:
        try:
            return proc.wait(timeout=POLL_INTERVAL)
        except subprocess.TimeoutExpired:
            pass
        if cancel is not None and cancel.is_set():
            _stop(proc)
            msg = "cancelled: another architecture failed"
            raise BuildCancelled(msg, arch=arch)
        if deadline is not None and time.monotonic() >= deadline:
            _stop(proc)
            msg = f"go build timed out after {timeout:g}s"
            raise TargetError(msg, arch=arch)


def go_build(
    entry_point: Path,
    env: Mapping[str, str],
    work_dir: Path,
    *extra_flags: str,
    tags: list[str] | None = None,
    pkgdir: Path | None = None,
    cancel: threading.Event | None = None,
    timeout: float | None = None,
) -> None:
    """go build entry_point with env overlaid on os.environ, cwd=work_dir.

    Raises TargetError on a non-zero exit or timeout, BuildCancelled if cancel
    is set before launch or while go is running.
    """
    arch = getenv(env, "GOARCH") or None
    if cancel is not None and cancel.is_set():
        msg = "cancelled before start"
        raise BuildCancelled(msg, arch=arch)

    cmd = ["go", "build"]
    if pkgdir is not None:
        cmd.append(f"-pkgdir={pkgdir}")
    if tags:
        cmd.append(f"-tags={' '.join(tags)}")
    cmd.extend(extra_flags)
    cmd.append(str(entry_point))
    log.debug("%s %s", format_env(env), " ".join(cmd))

    try:
        proc = subprocess.Popen(
            cmd,
            cwd=str(work_dir),
            env=merged_environ(env),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
    except OSError as e:
        msg = f"could not run go: {e}"
        raise TargetError(msg, arch=arch) from e

    # Exiting the with-block closes the pipe and reaps go.
    with proc:
        # Output goes to a reader thread so polling never blocks on a full pipe.
        chunks: list[str] = []
        reader = threading.Thread(target=lambda: chunks.append(proc.stdout.read()), daemon=True)
        reader.start()
        try:
            rc = _wait(proc, arch, cancel, timeout)
        finally:
            if proc.poll() is None:
                _stop(proc)
            reader.join()

    if rc != 0:
        output = stderr_tail("".join(chunks))
        msg = f"go build failed (exit {rc})"
        if output:
            msg = f"{msg}:\n{output}"
        raise TargetError(msg, arch=arch)
