# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

import unittest

from storctl.cli.signals import (
    ExitWithCode,
    HelpRequested,
    ReportedError,
    SubcommandHandled,
    exit_code,
)


class ExitCodeTests(unittest.TestCase):
    def test_mapping(self) -> None:
        self.assertEqual(exit_code(None), 0)
        self.assertEqual(exit_code(HelpRequested()), 0)
        self.assertEqual(exit_code(SubcommandHandled()), 0)
        self.assertEqual(exit_code(ReportedError()), 1)
        self.assertEqual(exit_code(ExitWithCode(3)), 3)
        self.assertEqual(exit_code(ExitWithCode(0)), 0)

    def test_rejects_other_values(self) -> None:
        with self.assertRaises(TypeError):
            exit_code("help")  # type: ignore[arg-type]

    def test_signals_are_values(self) -> None:
        self.assertEqual(ExitWithCode(2), ExitWithCode(2))
        self.assertEqual(HelpRequested(), HelpRequested())


if __name__ == "__main__":
    unittest.main()
