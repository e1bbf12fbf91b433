# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Privilege checks for sensitive commands."""

from __future__ import annotations

from collections.abc import Callable, Mapping

from ..lib.core import config as cfg
from ..lib.core.config_store import ConfigStore
from ..lib.core.paths import is_root
from ..lib.errors import PermissionDeniedError

# Command identity -> operation name used in the denial message.
SENSITIVE_OPERATIONS: dict[str, str] = {
    "install": "installed",
    "uninstall": "uninstalled",
    "service start": "started",
    "service stop": "stopped",
    "service restart": "restarted",
}

Policy = Callable[[str], PermissionDeniedError | None]


def allow_all(operation: str) -> PermissionDeniedError | None:
    return None


def require_root(operation: str) -> PermissionDeniedError | None:
    """Deny unless the process runs with an effective uid of 0."""
    if is_root():
        return None
    return PermissionDeniedError(
        f"storctl can only be {operation} by root",
        hint="Re-run the command with sudo.",
    )


class PermissionGate:
    """Decide whether a resolved command may run.

    The gate only consults its policy for the identities listed in
    *operations*; every other command is permitted.
    """

    def __init__(
        self, policy: Policy = allow_all, operations: Mapping[str, str] | None = None
    ) -> None:
        self.policy = policy
        self.operations = dict(SENSITIVE_OPERATIONS if operations is None else operations)

    @classmethod
    def for_config(cls, config: ConfigStore) -> PermissionGate:
        """Build the gate selected by ``storctl.permissions.requireRoot``."""
        policy = require_root if config.get_bool(cfg.REQUIRE_ROOT) else allow_all
        return cls(policy)

    def check(self, identity: str) -> PermissionDeniedError | None:
        operation = self.operations.get(identity)
        if operation is None:
            return None
        return self.policy(operation)
