# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Pure ANSI color utilities.

The error report and the output formatters use these helpers; every one of
them takes an explicit ``enabled`` flag so callers decide about color once
(see :func:`supports_color`) and pass the decision down.
"""

import os
import re
import sys
from typing import TextIO

RED = "31"
YELLOW = "33"
WHITE = "97"
LIGHT_BLUE = "94"
RED_BG = "41"
BLUE_BG = "44"

_ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*m")


def supports_color(stream: TextIO | None = None) -> bool:
    """Check if *stream* (default: stderr) supports color output.

    Follows the NO_COLOR (https://no-color.org/) and FORCE_COLOR conventions.
    NO_COLOR always wins. FORCE_COLOR (when set and not ``"0"``) forces color
    on even when the stream is not a TTY. Otherwise falls back to ``isatty()``.
    """
    if "NO_COLOR" in os.environ:
        return False
    force = os.environ.get("FORCE_COLOR")
    if force is not None and force != "0":
        return True
    stream = sys.stderr if stream is None else stream
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def color(text: str, code: str, enabled: bool) -> str:
    """Wrap *text* in ANSI escape codes when *enabled* is True.

    Args:
        text: The string to colorize.
        code: ANSI SGR parameter (e.g. ``"31"`` for red).
        enabled: When False the original *text* is returned unchanged.
    """
    if not enabled:
        return text
    return f"\x1b[{code}m{text}\x1b[0m"


def red(text: str, enabled: bool) -> str:
    """Return *text* in red (ANSI 31) when *enabled*."""
    return color(text, RED, enabled)


def yellow(text: str, enabled: bool) -> str:
    """Return *text* in yellow (ANSI 33) when *enabled*."""
    return color(text, YELLOW, enabled)


def red_bg(text: str, enabled: bool) -> str:
    """Return *text* on a red background (ANSI 41) when *enabled*."""
    return color(text, RED_BG, enabled)


def light_blue(text: str, enabled: bool) -> str:
    """Return *text* in light blue (ANSI 94) when *enabled*."""
    return color(text, LIGHT_BLUE, enabled)


def blue_bg(text: str, enabled: bool) -> str:
    """Return *text* on a blue background (ANSI 44) when *enabled*."""
    return color(text, BLUE_BG, enabled)


def strip(text: str) -> str:
    """Remove every SGR escape sequence from *text*."""
    return _ESCAPE_RE.sub("", text)
