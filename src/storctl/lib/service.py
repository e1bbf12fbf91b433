# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Host init-system integration for the storctl service unit."""

import shutil
import subprocess
from pathlib import Path

from .errors import InitSystemError

UNIT_NAME = "storctl"

# ``systemctl is-active`` exit code for an inactive unit.
INACTIVE = 3


def detect_init_system() -> str:
    """Return ``"systemd"``, ``"sysv"`` or ``"unknown"`` for the running host."""
    if Path("/run/systemd/system").is_dir():
        return "systemd"
    if shutil.which("update-rc.d") or shutil.which("chkconfig"):
        return "sysv"
    return "unknown"


def run_init_system(verb: str, unit: str = UNIT_NAME, *, check: bool = True) -> int:
    """Run ``systemctl <verb> <unit>`` and return its exit code.

    Raises:
        InitSystemError: when systemctl is missing, or when *check* is set
            and the command exits non-zero.
    """
    systemctl = shutil.which("systemctl")
    if systemctl is None:
        raise InitSystemError(
            f"cannot {verb} {unit}: systemctl not found",
            hint=f"Detected init system: {detect_init_system()}",
        )
    result = subprocess.run(
        [systemctl, verb, unit],
        capture_output=True,
        text=True,
        check=False,
    )
    if check and result.returncode != 0:
        detail = result.stderr.strip() or result.stdout.strip()
        raise InitSystemError(f"systemctl {verb} {unit} failed: {detail or result.returncode}")
    return result.returncode
