# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Request-scoped values carried through one invocation."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any


class Context:
    """Immutable carrier of request-scoped values (``async``, ``logLevel``...).

    :meth:`with_value` returns a new context; holders of the old one keep
    seeing the old values.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values = MappingProxyType(dict(values or {}))

    def with_value(self, key: str, value: Any) -> Context:
        return Context({**self._values, key: value})

    def value(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def __repr__(self) -> str:
        return f"Context({dict(self._values)!r})"
