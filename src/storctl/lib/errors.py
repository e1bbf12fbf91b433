# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Exception hierarchy for storctl.

Every user-facing failure derives from :class:`StorctlError` so the CLI can
render it through the error report before converting it into a control
signal.  Anything that does not derive from it is a defect and propagates to
the top-level runner untouched.

Hierarchy
---------
StorctlError
├── ConfigLoadError
├── ConfigValueError
├── FlagParseError
├── PermissionDeniedError
├── ClientActivationError
├── StorageRequestError
└── InitSystemError
"""

from __future__ import annotations


class StorctlError(Exception):
    """Base exception for all storctl errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


class ConfigLoadError(StorctlError):
    """The config file exists but could not be read or failed validation.

    Fatal: raised straight out of the runner instead of being reported.
    """


class ConfigValueError(StorctlError):
    """A config key holds a value that cannot be read as its registered kind."""

    def __init__(
        self, message: str, *, key: str, tier: str | None = None, hint: str | None = None
    ) -> None:
        super().__init__(message, hint=hint)
        self.key = key
        self.tier = tier


class FlagParseError(StorctlError):
    """Malformed command-line input (unknown flag, bad value, missing argument)."""


class PermissionDeniedError(StorctlError):
    """The resolved command requires a privilege the invocation lacks."""


class ClientActivationError(StorctlError):
    """The remote storage client could not be activated."""


class StorageRequestError(StorctlError):
    """A request to the storage service failed."""

    def __init__(
        self, message: str, *, status_code: int | None = None, hint: str | None = None
    ) -> None:
        super().__init__(message, hint=hint)
        self.status_code = status_code


class InitSystemError(StorctlError):
    """The host init system rejected a service management operation."""
