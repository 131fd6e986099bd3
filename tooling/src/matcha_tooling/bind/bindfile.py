"""The generated main package every architecture builds from."""

from __future__ import annotations

from pathlib import Path

from matcha_tooling.errors import PackagingError

BIND_FILE = """
package main

import (
	_ "{java_bind_import}"
	_ "{bridge_runtime_import}"
	_ "{package}"
)

import "C"

func main() {{}}
"""


def render_bind_file(package: str, layout: dict[str, str]) -> str:
    return BIND_FILE.format(
        package=package,
        java_bind_import=layout["java_bind_import"],
        bridge_runtime_import=layout["bridge_runtime_import"],
    )


def write_entry_point(path: Path, package: str, layout: dict[str, str]) -> Path:
    """Write the main.go that blank-imports package. Raises PackagingError."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_bind_file(package, layout))
    except OSError as e:
        msg = f"failed to create the binding package at {path}: {e}"
        raise PackagingError(msg) from e
    return path
