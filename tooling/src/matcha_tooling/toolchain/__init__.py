"""Go toolchain collaborators: version check, package discovery, go build."""

from .check import check_toolchain, go_version, gomobile_path
from .gobuild import go_build
from .packages import GoPackage, import_all, imports_bridge, package_dir, reject_main

__all__ = [
    "GoPackage",
    "check_toolchain",
    "go_build",
    "go_version",
    "gomobile_path",
    "import_all",
    "imports_bridge",
    "package_dir",
    "reject_main",
]
