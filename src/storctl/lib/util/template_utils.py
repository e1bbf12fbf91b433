# SPDX-FileCopyrightText: 2026 Jiri Vyskocil
# SPDX-License-Identifier: Apache-2.0

"""Minimal template rendering via ``{{VAR}}`` token replacement."""

import re

_TOKEN_RE = re.compile(r"\{\{\s*([A-Za-z0-9_.]+)\s*\}\}")


def lookup(record: dict, name: str) -> object:
    """Resolve a dotted *name* (``attachments.0.deviceName``) inside *record*."""
    value: object = record
    for part in name.split("."):
        if isinstance(value, dict):
            value = value.get(part)
        elif isinstance(value, list) and part.isdigit() and int(part) < len(value):
            value = value[int(part)]
        else:
            return None
    return value


def render_tokens(template: str, variables: dict) -> str:
    """Replace ``{{KEY}}`` tokens in *template* with values from *variables*.

    Missing keys render as an empty string; ``None`` values likewise.
    """

    def _sub(match: re.Match) -> str:
        value = lookup(variables, match.group(1))
        return "" if value is None else str(value)

    return _TOKEN_RE.sub(_sub, template)


def token_names(template: str) -> list[str]:
    """Return the token names used in *template*, in order of appearance."""
    return [m.group(1) for m in _TOKEN_RE.finditer(template)]
