# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Layered key/value configuration.

Terminology
-----------
- **Key**: a dotted path such as ``storctl.output.format``.  Keys are
  case-insensitive; the spelling used at registration is kept for display.
- **Tier**: one source of values.  Tiers are ordered lowest-priority first:
  ``default`` < ``file`` < ``env`` < ``override`` < ``flag``.
- **Effective value**: the value of the highest tier that holds the key.

The ``override`` tier is written by :meth:`ConfigStore.set` and carries
values the tool derives at runtime; it beats file and environment values
but never an explicit command-line flag.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any

from ..errors import ConfigValueError

TIERS = ("default", "file", "env", "override", "flag")

_TRUE = {"1", "true", "t", "yes", "y", "on"}
_FALSE = {"0", "false", "f", "no", "n", "off", ""}
_DURATION_RE = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


# ---------------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------------


def parse_bool(value: Any) -> bool:
    """Coerce *value* to bool; strings follow the usual true/false spellings."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"invalid boolean value: {value!r}")


def parse_duration(value: Any) -> timedelta:
    """Coerce *value* to a timedelta.

    Bare numbers are seconds.  Strings may chain units: ``250ms``, ``30s``,
    ``5m``, ``1h30m``.
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return timedelta(seconds=value)
    text = str(value).strip()
    try:
        return timedelta(seconds=float(text))
    except ValueError:
        pass
    pos = 0
    seconds = 0.0
    for match in _DURATION_RE.finditer(text):
        if match.start() != pos:
            break
        seconds += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if pos == 0 or pos != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return timedelta(seconds=seconds)


def coerce(value: Any, kind: type) -> Any:
    """Coerce *value* to *kind* (``str``, ``bool``, ``int``, ``timedelta`` or ``list``)."""
    if value is None:
        return None
    if kind is bool:
        return parse_bool(value)
    if kind is int:
        if isinstance(value, bool):
            return int(value)
        return int(str(value).strip()) if isinstance(value, str) else int(value)
    if kind is timedelta:
        return parse_duration(value)
    if kind is list:
        if isinstance(value, str):
            return [v.strip() for v in value.split(",") if v.strip()]
        return list(value)
    if kind is str:
        return value if isinstance(value, str) else str(value)
    return value


# ---------------------------------------------------------------------------
# Nested data helpers
# ---------------------------------------------------------------------------


def flatten(data: Mapping, prefix: str = "") -> dict[str, Any]:
    """Flatten nested mappings into dotted keys.

    ``{"storctl": {"logLevel": "debug"}}`` becomes
    ``{"storctl.logLevel": "debug"}``.  Lists and scalars are leaf values.
    """
    flat: dict[str, Any] = {}
    for key, value in data.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping) and value:
            flat.update(flatten(value, path))
        else:
            flat[path] = value
    return flat


def env_var_name(key: str) -> str:
    """Return the environment variable that feeds *key* (``a.bC`` -> ``A_BC``)."""
    return key.replace(".", "_").upper()


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConfigScope:
    """A snapshot of one tier, for diagnostics."""

    level: str
    source: Path | None
    data: dict


class ConfigStore:
    """Tiered configuration with effective-value reads.

    Usage::

        store = ConfigStore()
        store.register("storctl.logLevel", "warn")
        store.load_env()
        store.merge_file(yaml_data, path)
        store.bind_flags({"storctl.logLevel": "debug"})
        store.get_string("storctl.logLevel")   # "debug"
    """

    def __init__(self) -> None:
        self._tiers: dict[str, dict[str, Any]] = {tier: {} for tier in TIERS}
        self._names: dict[str, str] = {}
        self._kinds: dict[str, type] = {}
        self._file: Path | None = None

    @staticmethod
    def _norm(key: str) -> str:
        return key.lower()

    def _remember(self, key: str) -> str:
        norm = self._norm(key)
        self._names.setdefault(norm, key)
        return norm

    # -- registration / writes ----------------------------------------------

    def register(self, key: str, default: Any, kind: type | None = None) -> None:
        """Declare *key* with its default value.

        *kind* defaults to the type of *default* (``str`` when it is None) and
        drives coercion of environment strings and typed reads.  Registering
        an already known key keeps the first default.
        """
        norm = self._remember(key)
        if norm in self._kinds:
            return
        self._kinds[norm] = kind or (type(default) if default is not None else str)
        self._tiers["default"][norm] = default

    def set(self, key: str, value: Any) -> None:
        """Set a derived value; it beats file and env values but not flags."""
        self.set_tier("override", key, value)

    def set_tier(self, tier: str, key: str, value: Any) -> None:
        """Write *value* for *key* into an explicit *tier*."""
        if tier not in self._tiers:
            raise ValueError(f"unknown config tier: {tier}")
        self._tiers[tier][self._remember(key)] = value

    def merge_file(self, data: Mapping, source: Path | None = None) -> None:
        """Replace the file tier with the flattened contents of *data*."""
        self._tiers["file"] = {self._remember(k): v for k, v in flatten(data).items()}
        self._file = source

    def load_env(self, environ: Mapping[str, str] | None = None) -> None:
        """Rebuild the env tier from the variables matching registered keys."""
        environ = os.environ if environ is None else environ
        tier: dict[str, Any] = {}
        for norm, name in self._names.items():
            raw = environ.get(env_var_name(name))
            if raw is not None:
                tier[norm] = raw
        self._tiers["env"] = tier

    def bind_flags(self, values: Mapping[str, Any]) -> None:
        """Replace the flag tier with explicitly supplied flag values."""
        self._tiers["flag"] = {self._remember(k): v for k, v in values.items()}

    # -- reads ----------------------------------------------------------------

    def __contains__(self, key: str) -> bool:
        norm = self._norm(key)
        return any(norm in values for values in self._tiers.values())

    def source(self, key: str) -> str | None:
        """Return the tier that provides the effective value of *key*."""
        norm = self._norm(key)
        for tier in reversed(TIERS):
            if norm in self._tiers[tier]:
                return tier
        return None

    def _coerce(self, key: str, tier: str | None, value: Any, kind: type) -> Any:
        try:
            return coerce(value, kind)
        except (TypeError, ValueError) as exc:
            name = self._names.get(self._norm(key), key)
            where = f" ({tier} tier)" if tier else ""
            hint = None
            if tier == "env":
                hint = f"Fix or unset the {env_var_name(name)} environment variable."
            elif tier == "file":
                hint = f"Fix {name} in {self._file or 'the config file'}."
            raise ConfigValueError(
                f"invalid value for {name}{where}: {exc}", key=name, tier=tier, hint=hint
            ) from exc

    def get(self, key: str, default: Any = None) -> Any:
        """Return the effective value of *key*, coerced to its registered kind.

        Raises:
            ConfigValueError: when the effective value cannot be coerced.
        """
        tier = self.source(key)
        if tier is None:
            return default
        norm = self._norm(key)
        value = self._tiers[tier][norm]
        kind = self._kinds.get(norm)
        return self._coerce(key, tier, value, kind) if kind is not None else value

    def get_tier(self, tier: str, key: str, default: Any = None) -> Any:
        """Return the raw value of *key* in one *tier* only."""
        return self._tiers[tier].get(self._norm(key), default)

    def _typed(self, key: str, kind: type, empty: Any) -> Any:
        value = self.get(key)
        if value is None:
            return empty
        return self._coerce(key, self.source(key), value, kind)

    def get_string(self, key: str) -> str:
        return self._typed(key, str, "")

    def get_bool(self, key: str) -> bool:
        return self._typed(key, bool, False)

    def get_int(self, key: str) -> int:
        return self._typed(key, int, 0)

    def get_duration(self, key: str) -> timedelta:
        return self._typed(key, timedelta, timedelta())

    def keys(self) -> Iterator[str]:
        """Yield every known key (display spelling), sorted."""
        seen = {norm for values in self._tiers.values() for norm in values}
        yield from sorted(self._names[norm] for norm in seen)

    def resolve(self) -> dict[str, Any]:
        """Return the effective value of every known key."""
        return {key: self.get(key) for key in self.keys()}

    @property
    def file(self) -> Path | None:
        """Path of the config file merged into the file tier, if any."""
        return self._file

    @property
    def scopes(self) -> list[ConfigScope]:
        """Read-only snapshot of every tier (for diagnostics)."""
        return [
            ConfigScope(
                tier,
                self._file if tier == "file" else None,
                {self._names[k]: v for k, v in self._tiers[tier].items()},
            )
            for tier in TIERS
        ]
