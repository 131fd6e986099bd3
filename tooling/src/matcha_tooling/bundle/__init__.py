"""Merge per-arch outputs (lipo, jniLibs) and assemble iOS/Android bundles."""

from .aar import build_aar, find_android_jar
from .install import (
    AndroidBundle,
    IosBundle,
    copy_android_support,
    copy_ios_support,
    install_android,
    install_ios,
    ios_work_layout,
)
from .merge import lipo_create, place_shared_objects

__all__ = [
    "AndroidBundle",
    "IosBundle",
    "build_aar",
    "copy_android_support",
    "copy_ios_support",
    "find_android_jar",
    "install_android",
    "install_ios",
    "ios_work_layout",
    "lipo_create",
    "place_shared_objects",
]
