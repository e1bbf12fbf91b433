# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Command output in the ``tmpl``, ``json`` and ``jsonp`` formats."""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import TextIO

from .core import config as cfg
from .core.config_store import ConfigStore
from .errors import StorctlError
from .util.template_utils import render_tokens

FORMATS = ("tmpl", "json", "jsonp")


def default_template(columns: Sequence[str]) -> str:
    """Tab-separated ``{{column}}`` tokens for *columns*."""
    return "\t".join("{{%s}}" % c for c in columns)


def _align(rows: list[str]) -> list[str]:
    """Align tab-separated *rows* into columns two spaces apart."""
    cells = [row.split("\t") for row in rows]
    widths: list[int] = []
    for row in cells:
        for i, cell in enumerate(row):
            if i == len(widths):
                widths.append(0)
            widths[i] = max(widths[i], len(cell))
    out = []
    for row in cells:
        padded = [cell.ljust(widths[i]) for i, cell in enumerate(row[:-1])] + row[-1:]
        out.append("  ".join(padded).rstrip())
    return out


def format_records(config: ConfigStore, records: list[dict], columns: Sequence[str]) -> str:
    """Render *records* according to the effective output settings."""
    fmt = config.get_string(cfg.OUTPUT_FORMAT) or "tmpl"
    if fmt == "json":
        return json.dumps(records, default=str)
    if fmt == "jsonp":
        return json.dumps(records, indent=2, default=str)
    if fmt != "tmpl":
        raise StorctlError(
            f"unsupported output format: {fmt}", hint=f"Use one of: {', '.join(FORMATS)}"
        )
    if not records:
        return ""

    custom = config.get_string(cfg.OUTPUT_TEMPLATE)
    template = custom or default_template(columns)
    rows = [render_tokens(template, record) for record in records]
    if not custom and not config.get_bool(cfg.OUTPUT_QUIET):
        rows.insert(0, "\t".join(c.upper() for c in columns))
    if config.get_bool(cfg.OUTPUT_TEMPLATE_TABS):
        rows = _align(rows)
    return "\n".join(rows)


def emit(config: ConfigStore, stream: TextIO, records: list[dict], columns: Sequence[str]) -> None:
    """Write *records* to *stream*; an empty ``tmpl`` listing prints nothing."""
    text = format_records(config, records, columns)
    if text:
        print(text, file=stream)
