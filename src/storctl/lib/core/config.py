# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Config keys, defaults and the config file loader."""

from collections.abc import Mapping
from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml  # pip install pyyaml

from ..errors import ConfigLoadError
from .config_store import ConfigStore
from .paths import config_search_paths

# ---------- Keys ----------

LOG_LEVEL = "storctl.logLevel"
HOST = "storctl.host"
SERVICE = "storctl.service"
OUTPUT_FORMAT = "storctl.output.format"
OUTPUT_TEMPLATE = "storctl.output.template"
OUTPUT_TEMPLATE_TABS = "storctl.output.templateTabs"
OUTPUT_QUIET = "storctl.output.quiet"
DRY_RUN = "storctl.dryRun"
CONTINUE_ON_ERROR = "storctl.continueOnError"
IDEMPOTENT = "storctl.idempotent"
ASYNC = "storctl.async"
PATH_CACHE_ENABLED = "storctl.volume.pathCache.enabled"
REQUIRE_ROOT = "storctl.permissions.requireRoot"
CLIENT_TIMEOUT = "storctl.client.timeout"
DOCS_URL = "storctl.docsURL"
LIBSTORAGE_HOST = "libstorage.host"
LIBSTORAGE_SERVICE = "libstorage.service"

# Defaults for keys that have no command-line flag.
DEFAULTS: dict[str, tuple[Any, type]] = {
    PATH_CACHE_ENABLED: (True, bool),
    REQUIRE_ROOT: (False, bool),
    CLIENT_TIMEOUT: (timedelta(seconds=30), timedelta),
    DOCS_URL: ("", str),
    LIBSTORAGE_HOST: ("", str),
    LIBSTORAGE_SERVICE: ("", str),
}


def register_defaults(store: ConfigStore) -> None:
    """Register the non-flag default keys on *store*."""
    for key, (default, kind) in DEFAULTS.items():
        store.register(key, default, kind)


# ---------- Config file ----------


def find_config_file(environ: Mapping[str, str] | None = None) -> Path | None:
    """Return the first existing config file on the search path, if any."""
    for candidate in config_search_paths(environ):
        if candidate.is_file():
            return candidate
    return None


def _check_keys(data: dict, path: str = "") -> None:
    for key, value in data.items():
        if not isinstance(key, str) or not key:
            where = path or "top level"
            raise ConfigLoadError(f"invalid key {key!r} at {where}: keys must be non-empty strings")
        if isinstance(value, dict):
            _check_keys(value, f"{path}.{key}" if path else key)


def validate_config_file(path: Path) -> dict[str, Any]:
    """Read and validate the YAML config file at *path*.

    The document must be a mapping (or empty) with non-empty string keys at
    every level.  Returns the parsed data.

    Raises:
        ConfigLoadError: when the file cannot be read, is not valid YAML or
            does not have the expected structure.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigLoadError(f"cannot read config file {path}: {exc}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigLoadError(f"invalid YAML in config file {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigLoadError(
            f"invalid config file {path}: expected a mapping, got {type(data).__name__}"
        )
    _check_keys(data)
    return data


def load_config_file(store: ConfigStore, path: Path) -> None:
    """Validate *path* and merge it into the file tier of *store*."""
    store.merge_file(validate_config_file(path), source=Path(path))
