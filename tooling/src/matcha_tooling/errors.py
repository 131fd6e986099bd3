"""Error types for matcha bind/build. Every failure is fatal to the run."""

from __future__ import annotations


class BindError(Exception):
    """Base error: message plus the stage (and arch, if any) that failed."""

    stage: str = "bind"

    def __init__(self, message: str, *, arch: str | None = None, stage: str | None = None) -> None:
        super().__init__(message)
        self.arch = arch
        if stage is not None:
            self.stage = stage

    def __str__(self) -> str:
        msg = super().__str__()
        if self.arch:
            return f"[{self.stage} {self.arch}] {msg}"
        return f"[{self.stage}] {msg}"


class ConfigurationError(BindError):
    """Toolchain, SDK/NDK or config file missing or mismatched."""

    stage = "config"


class TargetError(BindError):
    """A build unit for one architecture failed."""

    stage = "build"


class BuildCancelled(TargetError):
    """A build unit stopped because a sibling failed first."""


class MergeError(BindError):
    """Fat-binary combination (or shared-object placement) failed."""

    stage = "merge"


class PackagingError(BindError, OSError):
    """Directory, file or archive operation failed while assembling a bundle."""

    stage = "package"
