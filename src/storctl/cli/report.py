# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""The terminal error report.

One report layout is rendered with color either on or off, so the plain
variant is exactly the colored variant with the escape codes removed.
"""

import sys
from typing import TextIO

from ..lib.util.ansi import blue_bg, light_blue, red, red_bg, yellow


def report_lines(
    message: str, color: bool, hint: str | None = None, docs_url: str | None = None
) -> list[str]:
    """Build the lines of the error report for *message*.

    The documentation line is left out when no *docs_url* is known.
    """
    lines = [
        f"Oops, an {red_bg('error', color)} occurred!",
        "",
        f"  {red(message, color)}",
        "",
    ]
    if hint:
        lines += [f"  {yellow(hint, color)}", ""]
    lines += [
        f"To correct the {red_bg('error', color)} please review:",
        "",
        f"  - Debug output by using the flag \"{light_blue('-l debug', color)}\"",
    ]
    if docs_url:
        lines.append(f"  - The storctl documentation at {blue_bg(docs_url, color)}")
    lines.append("  - The online help below")
    return lines


class ErrorPresenter:
    """Render error reports to a stream.

    *is_terminal* is decided once by the caller (see
    :func:`storctl.lib.util.ansi.supports_color`) and injected here, as is
    the *docs_url* shown in the report.
    """

    def __init__(
        self, is_terminal: bool, stream: TextIO | None = None, docs_url: str | None = None
    ) -> None:
        self.is_terminal = is_terminal
        self.stream = sys.stderr if stream is None else stream
        self.docs_url = docs_url

    def render(self, err: BaseException) -> None:
        hint = getattr(err, "hint", None)
        text = "\n".join(report_lines(str(err), self.is_terminal, hint, self.docs_url))
        self.stream.write(text + "\n")
        self.stream.flush()


def render_error(
    err: BaseException,
    is_terminal: bool,
    stream: TextIO | None = None,
    docs_url: str | None = None,
) -> None:
    """Write the error report for *err* to *stream* (default: stderr)."""
    ErrorPresenter(is_terminal, stream, docs_url).render(err)
