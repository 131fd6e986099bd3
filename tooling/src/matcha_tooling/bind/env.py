"""Per-architecture cross-compile environments for go build (iOS via xcrun, Android via the NDK).

Nothing here invokes the Go compiler; xcrun is queried only for SDK and clang paths.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from matcha_tooling.errors import ConfigurationError
from matcha_tooling.helpers import command_output

log = logging.getLogger(__name__)

CLANG_ARCHS: dict[str, str] = {
    "arm": "armv7",
    "arm64": "arm64",
    "386": "i386",
    "amd64": "x86_64",
}

IOS_SDKS: dict[str, str] = {
    "arm": "iphoneos",
    "arm64": "iphoneos",
    "386": "iphonesimulator",
    "amd64": "iphonesimulator",
}


@dataclass(frozen=True)
class NdkArch:
    abi: str
    tool_prefix: str
    clang_prefix: str


NDK_ARCHS: dict[str, NdkArch] = {
    "arm": NdkArch("armeabi-v7a", "arm-linux-androideabi", "armv7a-linux-androideabi"),
    "arm64": NdkArch("arm64-v8a", "aarch64-linux-android", "aarch64-linux-android"),
    "386": NdkArch("x86", "i686-linux-android", "i686-linux-android"),
    "amd64": NdkArch("x86_64", "x86_64-linux-android", "x86_64-linux-android"),
}


def clang_arch(goarch: str) -> str:
    """GOARCH -> clang/lipo -arch name."""
    try:
        return CLANG_ARCHS[goarch]
    except KeyError:
        msg = f"no clang arch for GOARCH={goarch}"
        raise ConfigurationError(msg, arch=goarch) from None


def android_abi(goarch: str) -> str:
    """GOARCH -> Android ABI directory name."""
    try:
        return NDK_ARCHS[goarch].abi
    except KeyError:
        msg = f"no Android ABI for GOARCH={goarch}"
        raise ConfigurationError(msg, arch=goarch) from None


def with_gopath(
    env: Mapping[str, str], gopath_dir: Path, environ: Mapping[str, str] | None = None
) -> dict[str, str]:
    """Copy of env with GOPATH=<gopath_dir>:<$GOPATH>."""
    environ = os.environ if environ is None else environ
    out = dict(env)
    parts = [str(gopath_dir)]
    if environ.get("GOPATH"):
        parts.append(environ["GOPATH"])
    out["GOPATH"] = os.pathsep.join(parts)
    return out


def arch_output_path(work_dir: Path, platform: str, arch: str) -> Path:
    """Where the build unit for (platform, arch) writes its binary inside work_dir."""
    if platform == "ios":
        return work_dir / f"matcha-{arch}.a"
    if platform == "android":
        return work_dir / "android" / "src" / "main" / "jniLibs" / android_abi(arch) / "libgojni.so"
    msg = f"unknown platform {platform!r}"
    raise ConfigurationError(msg)


# --- iOS ---


def _xcrun(*args: str) -> str:
    try:
        return command_output(["xcrun", *args])
    except FileNotFoundError as e:
        msg = "xcrun not found; iOS builds need Xcode command line tools"
        raise ConfigurationError(msg) from e
    except subprocess.CalledProcessError as e:
        msg = f"xcrun {' '.join(args)} failed: {(e.stderr or '').strip()}"
        raise ConfigurationError(msg) from e


def ios_env(arch: str, *, min_version: str = "8.0") -> dict[str, str]:
    """Env for go build -buildmode=c-archive targeting iOS arch. Raises ConfigurationError."""
    if arch not in IOS_SDKS:
        msg = f"unsupported iOS arch {arch!r}"
        raise ConfigurationError(msg, arch=arch)
    sdk = IOS_SDKS[arch]
    sdk_path = _xcrun("--sdk", sdk, "--show-sdk-path")
    clang = _xcrun("--sdk", sdk, "--find", "clang")
    clangxx = _xcrun("--sdk", sdk, "--find", "clang++")
    if sdk == "iphoneos":
        min_flag = f"-miphoneos-version-min={min_version}"
    else:
        min_flag = f"-mios-simulator-version-min={min_version}"
    flags = f"-isysroot {sdk_path} {min_flag} -arch {clang_arch(arch)}"
    env = {
        "GOOS": "darwin",
        "GOARCH": arch,
        "CC": clang,
        "CXX": clangxx,
        "CGO_CFLAGS": flags,
        "CGO_CXXFLAGS": flags,
        "CGO_LDFLAGS": flags,
        "CGO_ENABLED": "1",
    }
    if arch == "arm":
        env["GOARM"] = "7"
    return env


# --- Android ---


def find_ndk_root(gomobile_path: Path | None, environ: Mapping[str, str] | None = None) -> Path:
    """NDK location: $ANDROID_NDK_HOME, $ANDROID_HOME/ndk-bundle, then <gomobile>/ndk-toolchains."""
    environ = os.environ if environ is None else environ
    candidates: list[Path] = []
    if environ.get("ANDROID_NDK_HOME"):
        candidates.append(Path(environ["ANDROID_NDK_HOME"]))
    if environ.get("ANDROID_HOME"):
        candidates.append(Path(environ["ANDROID_HOME"]) / "ndk-bundle")
    if gomobile_path is not None:
        candidates.append(gomobile_path / "ndk-toolchains")
    for c in candidates:
        if c.is_dir():
            return c
    tried = ", ".join(str(c) for c in candidates) or "(no candidates)"
    msg = f"Android NDK not found (tried {tried}); set ANDROID_NDK_HOME or run `matcha init`"
    raise ConfigurationError(msg)


def _ndk_clang(ndk_root: Path, arch: str, api: str) -> tuple[Path, Path]:
    """(clang, clang++) for arch: unified NDK layout first, then standalone toolchains."""
    cfg = NDK_ARCHS[arch]
    prebuilt = ndk_root / "toolchains" / "llvm" / "prebuilt"
    if prebuilt.is_dir():
        for host in sorted(prebuilt.iterdir()):
            bin_dir = host / "bin"
            cc = bin_dir / f"{cfg.clang_prefix}{api}-clang"
            if cc.exists():
                return cc, bin_dir / f"{cfg.clang_prefix}{api}-clang++"
    bin_dir = ndk_root / arch / "bin"
    return bin_dir / f"{cfg.tool_prefix}-clang", bin_dir / f"{cfg.tool_prefix}-clang++"


def android_env(arch: str, *, ndk_root: Path, api: str = "15") -> dict[str, str]:
    """Env for go build -buildmode=c-shared targeting Android arch. Raises ConfigurationError."""
    if arch not in NDK_ARCHS:
        msg = f"unsupported Android arch {arch!r}"
        raise ConfigurationError(msg, arch=arch)
    if not ndk_root.is_dir():
        msg = f"Android NDK not found at {ndk_root}"
        raise ConfigurationError(msg, arch=arch)
    cc, cxx = _ndk_clang(ndk_root, arch, api)
    if not cc.exists():
        msg = f"NDK compiler not found: {cc}; run `matcha init`"
        raise ConfigurationError(msg, arch=arch)
    env = {
        "GOOS": "android",
        "GOARCH": arch,
        "CC": str(cc),
        "CXX": str(cxx),
        "CGO_ENABLED": "1",
    }
    if arch == "arm":
        env["GOARM"] = "7"
    return env
