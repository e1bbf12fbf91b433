# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""End-to-end tests for the top-level runner."""

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from storctl.cli import main as cli_main
from storctl.cli.lifecycle import Lifecycle
from storctl.cli.main import build_tree
from storctl.cli.permissions import PermissionGate
from storctl.cli.signals import ExitWithCode
from storctl.lib.core import config as cfg
from storctl.lib.errors import ConfigLoadError, PermissionDeniedError, StorageRequestError
from storctl.lib.storage import ErrorStream
from storctl.lib.util.ansi import strip

from cli_test_helpers import (
    HOST,
    MISSING_CONFIG,
    isolated_environ,
    json_routes,
    make_runner,
    mock_service,
)


def _deny(operation: str) -> PermissionDeniedError:
    return PermissionDeniedError(f"storctl can only be {operation} by root")


class ScenarioTests(unittest.TestCase):
    def test_no_arguments_prints_root_usage(self) -> None:
        runner, stdout, stderr = make_runner([])
        self.assertEqual(runner.execute(), 0)
        self.assertIn("usage: storctl [flags] <command>", stdout.getvalue())
        self.assertIn("Available Commands:", stdout.getvalue())
        self.assertEqual(stderr.getvalue(), "")

    def test_group_without_action_prints_its_usage(self) -> None:
        runner, stdout, _ = make_runner(["service"])
        self.assertEqual(runner.execute(), 0)
        self.assertIn("usage: storctl service [flags] <command>", stdout.getvalue())
        self.assertIn("restart", stdout.getvalue())

    def test_permission_denial_plain(self) -> None:
        runner, stdout, stderr = make_runner(
            ["service", "start"], gate=PermissionGate(_deny), is_terminal=False
        )
        self.assertEqual(runner.execute(), 1)
        self.assertIn("Oops, an error occurred!", stderr.getvalue())
        self.assertIn("storctl can only be started by root", stderr.getvalue())
        self.assertNotIn("\x1b[", stderr.getvalue())
        self.assertIn("usage: storctl service start", stdout.getvalue())

    def test_permission_denial_colored(self) -> None:
        plain, _, plain_err = make_runner(["service", "start"], gate=PermissionGate(_deny))
        colored, _, colored_err = make_runner(
            ["service", "start"], gate=PermissionGate(_deny), is_terminal=True
        )
        self.assertEqual(plain.execute(), 1)
        self.assertEqual(colored.execute(), 1)
        self.assertIn("\x1b[", colored_err.getvalue())
        self.assertEqual(strip(colored_err.getvalue()), plain_err.getvalue())

    def test_format_flag_reaches_config(self) -> None:
        runner, stdout, _ = make_runner(["version", "--format=json"])
        self.assertEqual(runner.execute(), 0)
        self.assertEqual(runner.state.config.get(cfg.OUTPUT_FORMAT), "json")
        self.assertEqual(runner.state.flag("format"), "json")
        self.assertTrue(stdout.getvalue().startswith("storctl "))

    def test_missing_config_file_is_skipped(self) -> None:
        runner, _, stderr = make_runner(["version", "--config", MISSING_CONFIG])
        self.assertEqual(runner.execute(), 0)
        self.assertIsNone(runner.state.config.file)
        self.assertEqual(stderr.getvalue(), "")


class PrecedenceTests(unittest.TestCase):
    def _config_file(self, text: str) -> str:
        td = tempfile.TemporaryDirectory()
        self.addCleanup(td.cleanup)
        path = Path(td.name) / "config.yml"
        path.write_text(text, encoding="utf-8")
        return str(path)

    def test_flag_wins_over_file_after_reload(self) -> None:
        path = self._config_file("storctl:\n  output:\n    format: jsonp\n  logLevel: error\n")
        runner, _, _ = make_runner(["env", "-c", path, "-f", "json", "-l", "info"])
        self.assertEqual(runner.execute(), 0)
        self.assertEqual(runner.state.config.get(cfg.OUTPUT_FORMAT), "json")
        self.assertEqual(runner.state.config.get(cfg.LOG_LEVEL), "info")

    def test_file_found_through_environment(self) -> None:
        path = self._config_file("storctl:\n  output:\n    format: jsonp\n")
        runner, stdout, _ = make_runner(
            ["env", "storctl.output.format"], environ={"STORCTL_CONFIG_FILE": path}
        )
        self.assertEqual(runner.execute(), 0)
        self.assertIn('"value": "jsonp"', stdout.getvalue())
        self.assertIn('"source": "file"', stdout.getvalue())

    def test_corrupt_config_propagates(self) -> None:
        path = self._config_file("just a string\n")
        runner, _, stderr = make_runner(["version", "-c", path])
        with self.assertRaises(ConfigLoadError):
            runner.execute()
        self.assertNotIn("Oops", stderr.getvalue())

    def test_main_turns_config_error_into_exit(self) -> None:
        path = self._config_file("[1, 2]\n")
        with (
            mock.patch.dict("os.environ", isolated_environ(), clear=True),
            mock.patch("sys.stderr"),
        ):
            with self.assertRaises(SystemExit) as ctx:
                cli_main.main(["version", "-c", path])
        self.assertIn("expected a mapping", str(ctx.exception.code))


class BadConfigValueTests(unittest.TestCase):
    def test_malformed_host_flag_is_reported(self) -> None:
        runner, stdout, stderr = make_runner(["volume", "ls", "--host", "tcp://[::1"])
        self.assertEqual(runner.execute(), 1)
        self.assertIn("invalid storage host 'tcp://[::1'", stderr.getvalue())
        self.assertNotIn("Traceback", stderr.getvalue())
        self.assertIn("usage: storctl volume ls", stdout.getvalue())
        self.assertIsNone(runner.state.client)

    def test_malformed_timeout_is_reported(self) -> None:
        handler = json_routes({})
        runner, _, stderr = make_runner(
            ["volume", "ls", "--host", HOST],
            environ=isolated_environ(STORCTL_CLIENT_TIMEOUT="abc"),
            lifecycle=mock_service(handler),
        )
        self.assertEqual(runner.execute(), 1)
        self.assertIn(
            "invalid value for storctl.client.timeout (env tier): invalid duration: 'abc'",
            stderr.getvalue(),
        )
        self.assertNotIn("CRITICAL", stderr.getvalue())
        self.assertEqual(handler.requests, [])

    def test_bad_boolean_in_environment_is_reported(self) -> None:
        runner, stdout, stderr = make_runner(
            ["service", "start"],
            environ=isolated_environ(STORCTL_PERMISSIONS_REQUIREROOT="maybe"),
        )
        self.assertEqual(runner.execute(), 1)
        self.assertIn(
            "invalid value for storctl.permissions.requireRoot (env tier)", stderr.getvalue()
        )
        self.assertIn("STORCTL_PERMISSIONS_REQUIREROOT", stderr.getvalue())
        self.assertNotIn("Traceback", stderr.getvalue())
        self.assertIn("usage: storctl service start", stdout.getvalue())

    def test_bad_boolean_in_file_is_reported_from_action(self) -> None:
        td = tempfile.TemporaryDirectory()
        self.addCleanup(td.cleanup)
        path = Path(td.name) / "config.yml"
        path.write_text("storctl:\n  output:\n    quiet: maybe\n", encoding="utf-8")

        tree = build_tree()
        tree.register(
            "", "peek", action=lambda state, args: state.config.get_bool(cfg.OUTPUT_QUIET)
        )
        runner, _, stderr = make_runner(["peek", "-c", str(path)], tree=tree)
        self.assertEqual(runner.execute(), 1)
        self.assertIn("invalid value for storctl.output.quiet (file tier)", stderr.getvalue())
        self.assertIn(str(path), stderr.getvalue())
        self.assertNotIn("CRITICAL", stderr.getvalue())


class ExitTests(unittest.TestCase):
    def test_flag_parse_error_is_reported(self) -> None:
        runner, _, stderr = make_runner(["version", "--bogus"])
        self.assertEqual(runner.execute(), 1)
        self.assertIn("unknown flag: --bogus", stderr.getvalue())

    def test_exit_with_code(self) -> None:
        tree = build_tree()
        tree.register("", "fail", action=lambda state, args: ExitWithCode(7))
        runner, _, _ = make_runner(["fail"], tree=tree)
        self.assertEqual(runner.execute(), 7)

    def test_unexpected_fault_is_logged_and_reraised(self) -> None:
        def boom(state, args):
            raise KeyError("oops")

        tree = build_tree()
        tree.register("", "boom", action=boom)
        runner, _, stderr = make_runner(["boom"], tree=tree)
        with self.assertRaises(KeyError):
            runner.execute()
        self.assertIn("CRITICAL unexpected failure", stderr.getvalue())
        self.assertIn("Traceback", stderr.getvalue())

    def test_async_errors_are_drained(self) -> None:
        stream = ErrorStream()

        def submit(state, args):
            state.errors = stream

            def fail():
                raise StorageRequestError("detach failed")

            stream.submit(fail)

        tree = build_tree()
        tree.register("", "bg", action=submit)
        runner, _, stderr = make_runner(["bg"], tree=tree)
        self.assertEqual(runner.execute(), 0)
        self.assertFalse(stream.running)
        self.assertIn("ERROR async error: detach failed", stderr.getvalue())
        self.assertIsNone(runner.state.errors)

    def test_errors_drained_even_when_action_fails(self) -> None:
        stream = ErrorStream()

        def fail(state, args):
            state.errors = stream
            raise RuntimeError("kaput")

        tree = build_tree()
        tree.register("", "crash", action=fail)
        runner, _, _ = make_runner(["crash"], tree=tree)
        with self.assertRaises(RuntimeError):
            runner.execute()
        self.assertFalse(stream.running)

    def test_lifecycle_can_be_skipped(self) -> None:
        tree = build_tree()
        tree.register("", "raw", action=lambda state, args: None, lifecycle=False)
        lifecycle = mock.Mock(spec=Lifecycle)
        runner, _, _ = make_runner(["raw", "--help"], tree=tree, lifecycle=lifecycle)
        self.assertEqual(runner.execute(), 0)
        lifecycle.run.assert_not_called()

    def test_main_exits_with_code(self) -> None:
        with (
            mock.patch.dict("os.environ", isolated_environ(), clear=True),
            mock.patch("sys.stdout"),
        ):
            with self.assertRaises(SystemExit) as ctx:
                cli_main.main([])
        self.assertEqual(ctx.exception.code, 0)


if __name__ == "__main__":
    unittest.main()
