# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Platform-aware path resolution for configuration files."""

import getpass
import os
import sys
from collections.abc import Mapping
from pathlib import Path

from platformdirs import user_config_dir as _user_config_dir

APP_NAME = "storctl"
CONFIG_FILE_NAME = "config.yml"
CONFIG_FILE_ENV = "STORCTL_CONFIG_FILE"


def is_root() -> bool:
    """Return True if the current process is running as root."""
    try:
        return os.geteuid() == 0  # type: ignore[attr-defined]
    except AttributeError:
        return getpass.getuser() == "root"


def user_config_file(environ: Mapping[str, str] | None = None) -> Path:
    """Per-user config file, honoring XDG_CONFIG_HOME when set."""
    xdg_home = (os.environ if environ is None else environ).get("XDG_CONFIG_HOME")
    if xdg_home:
        return Path(xdg_home) / APP_NAME / CONFIG_FILE_NAME
    return Path(_user_config_dir(APP_NAME)) / CONFIG_FILE_NAME


def config_search_paths(environ: Mapping[str, str] | None = None) -> list[Path]:
    """Return the ordered list of paths that will be checked for the config file.

    - If STORCTL_CONFIG_FILE is set, only that single path is considered.
    - Otherwise, check in order:
        1) ${XDG_CONFIG_HOME:-~/.config}/storctl/config.yml
        2) sys.prefix/etc/storctl/config.yml
        3) /etc/storctl/config.yml
    """
    environ = os.environ if environ is None else environ
    env_file = environ.get(CONFIG_FILE_ENV)
    if env_file:
        return [Path(env_file).expanduser()]

    sp_cfg = Path(sys.prefix) / "etc" / APP_NAME / CONFIG_FILE_NAME
    etc_cfg = Path("/etc") / APP_NAME / CONFIG_FILE_NAME
    return [user_config_file(environ), sp_cfg, etc_cfg]
