"""Multi-arch bind: target resolution, per-arch environments, concurrent builds."""

from .coordinator import BuildJob, BuildResult, make_jobs, run_builds
from .env import android_abi, android_env, arch_output_path, clang_arch, ios_env
from .targets import (
    DEFAULT_PLATFORMS,
    PLATFORM_ARCHS,
    Target,
    TargetSet,
    parse_targets,
    unknown_tokens,
)
from .workdir import WorkDir

__all__ = [
    "DEFAULT_PLATFORMS",
    "PLATFORM_ARCHS",
    "BuildJob",
    "BuildResult",
    "Target",
    "TargetSet",
    "WorkDir",
    "android_abi",
    "android_env",
    "arch_output_path",
    "clang_arch",
    "ios_env",
    "make_jobs",
    "parse_targets",
    "run_builds",
    "unknown_tokens",
]
