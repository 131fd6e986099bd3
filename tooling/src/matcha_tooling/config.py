"""Bind layout configuration (bridge import paths, bundle names, support files).

Defaults match the gomatcha.io/matcha layout; a project may override any key
from a YAML file (matcha.yaml at the project root, or --config).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from matcha_tooling.errors import ConfigurationError

log = logging.getLogger(__name__)

CONFIG_FILE_NAME = "matcha.yaml"

DEFAULT_BIND_LAYOUT: dict[str, str] = {
    "matcha_import": "gomatcha.io/matcha",
    "support_import": "gomatcha.io/matcha/cmd",
    "bridge_import": "gomatcha.io/bridge",
    "bridge_runtime_import": "gomatcha.io/matcha/bridge",
    "java_bind_import": "golang.org/x/mobile/bind/java",
    "output_dir": "Matcha-iOS",
    "ios_bridge_name": "MatchaBridge",
    "ios_min_version": "8.0",
    "android_aar_name": "matchabridge.aar",
    "android_api": "15",
    "android_java_package": "io.gomatcha.bridge",
    "build_tags": "matcha",
}

# support file in the matcha cmd package -> name in the iOS bundle
IOS_SUPPORT_FILES: dict[str, str] = {
    "matchaforeign.h.support": "matchaobjc.h",
    "matchago.h.support": "matchago.h",
}

ANDROID_SUPPORT_FILES: tuple[str, ...] = ("GoValue.java", "Bridge.java", "Tracker.java")


def resolve_bind_layout(layout: dict[str, Any] | None) -> dict[str, str]:
    """Return layout dict with defaults filled. Unknown keys are dropped."""
    if layout is None:
        return dict(DEFAULT_BIND_LAYOUT)
    out = dict(DEFAULT_BIND_LAYOUT)
    out.update({k: str(v) for k, v in layout.items() if k in out})
    return out


def load_bind_layout(path: Path | None, project_root: Path | None = None) -> dict[str, str]:
    """Load overrides from path (or project_root/matcha.yaml when present) and fill defaults.

    An explicit path that does not exist is a ConfigurationError; a missing
    default file is not.
    """
    if path is None:
        if project_root is None:
            return resolve_bind_layout(None)
        path = project_root / CONFIG_FILE_NAME
        if not path.is_file():
            return resolve_bind_layout(None)
    elif not path.is_file():
        msg = f"config file not found: {path}"
        raise ConfigurationError(msg)

    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        msg = f"could not read {path}: {e}"
        raise ConfigurationError(msg) from e
    if not isinstance(data, dict):
        msg = f"{path}: expected a mapping at top level"
        raise ConfigurationError(msg)

    ignored = sorted(k for k in data if k not in DEFAULT_BIND_LAYOUT)
    if ignored:
        log.warning("Ignoring unknown keys in %s: %s", path, ", ".join(ignored))
    log.debug("Loaded bind layout overrides from %s", path)
    return resolve_bind_layout(data)
