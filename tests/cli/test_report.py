# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Tests for the terminal error report."""

import unittest
from io import StringIO

from storctl.cli.report import ErrorPresenter, render_error
from storctl.lib.errors import PermissionDeniedError
from storctl.lib.util.ansi import strip

DOCS_URL = "https://docs.example.org/storctl"

PLAIN_REPORT = """\
Oops, an error occurred!

  storctl can only be started by root

To correct the error please review:

  - Debug output by using the flag "-l debug"
  - The storctl documentation at https://docs.example.org/storctl
  - The online help below
"""


class ErrorPresenterTests(unittest.TestCase):
    def _render(self, err: Exception, is_terminal: bool) -> str:
        stream = StringIO()
        ErrorPresenter(is_terminal, stream, DOCS_URL).render(err)
        return stream.getvalue()

    def test_plain_report(self) -> None:
        err = PermissionDeniedError("storctl can only be started by root")
        self.assertEqual(self._render(err, False), PLAIN_REPORT)

    def test_colored_report_strips_to_plain(self) -> None:
        err = PermissionDeniedError("storctl can only be started by root")
        colored = self._render(err, True)
        self.assertNotEqual(colored, PLAIN_REPORT)
        self.assertIn("\x1b[41merror\x1b[0m", colored)
        self.assertIn("\x1b[31mstorctl can only be started by root\x1b[0m", colored)
        self.assertIn(f"\x1b[44m{DOCS_URL}\x1b[0m", colored)
        self.assertEqual(strip(colored), PLAIN_REPORT)

    def test_rendering_is_deterministic(self) -> None:
        err = PermissionDeniedError("denied")
        self.assertEqual(self._render(err, True), self._render(err, True))

    def test_hint_is_shown(self) -> None:
        err = PermissionDeniedError("denied", hint="Re-run the command with sudo.")
        text = self._render(err, False)
        self.assertIn("  denied\n\n  Re-run the command with sudo.\n\nTo correct", text)

    def test_docs_line_omitted_without_url(self) -> None:
        stream = StringIO()
        ErrorPresenter(False, stream).render(PermissionDeniedError("denied"))
        text = stream.getvalue()
        self.assertNotIn("documentation", text)
        self.assertIn('"-l debug"\n  - The online help below\n', text)

    def test_render_error_helper(self) -> None:
        stream = StringIO()
        render_error(RuntimeError("boom"), False, stream)
        self.assertIn("  boom\n", stream.getvalue())


if __name__ == "__main__":
    unittest.main()
