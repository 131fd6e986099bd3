"""Locate $GOPATH/pkg/gomobile and verify the installed toolchain matches `go version`."""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping
from pathlib import Path

from matcha_tooling.errors import ConfigurationError
from matcha_tooling.helpers import command_output

log = logging.getLogger(__name__)


def go_version() -> str:
    """Output of `go version`. Raises ConfigurationError."""
    try:
        return command_output(["go", "version"])
    except FileNotFoundError as e:
        msg = "go not found in PATH"
        raise ConfigurationError(msg) from e
    except subprocess.CalledProcessError as e:
        msg = f"go version failed: {(e.stderr or '').strip()}"
        raise ConfigurationError(msg) from e


def gomobile_path(environ: Mapping[str, str] | None = None) -> Path:
    """<first GOPATH entry>/pkg/gomobile. Falls back to `go env GOPATH`."""
    environ = os.environ if environ is None else environ
    gopath = environ.get("GOPATH", "")
    if not gopath:
        try:
            gopath = command_output(["go", "env", "GOPATH"])
        except (OSError, subprocess.CalledProcessError) as e:
            msg = f"GOPATH is not set and `go env GOPATH` failed: {e}"
            raise ConfigurationError(msg) from e
    first = gopath.split(os.pathsep)[0]
    if not first:
        msg = "GOPATH is empty"
        raise ConfigurationError(msg)
    return Path(first) / "pkg" / "gomobile"


def check_toolchain(gomobile: Path) -> str:
    """Compare <gomobile>/version with `go version`. Returns the version. Raises ConfigurationError."""
    version_file = gomobile / "version"
    try:
        installed = version_file.read_text().strip()
    except OSError as e:
        msg = "toolchain partially installed, run `matcha init`"
        raise ConfigurationError(msg) from e
    current = go_version()
    if installed != current:
        log.debug("installed=%r current=%r", installed, current)
        msg = "toolchain out of date, run `matcha init`"
        raise ConfigurationError(msg)
    return current
