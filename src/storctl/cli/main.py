# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Top-level storctl runner.

``main()`` is the console entry point.  :class:`Runner` holds everything one
invocation needs (config store, logger, command tree, lifecycle) so tests
can drive it with their own argv, streams and environment.
"""

from __future__ import annotations

import os
import sys
from collections.abc import MutableMapping, Sequence
from typing import TextIO

from ..lib.core import config as cfg
from ..lib.core.config_store import ConfigStore
from ..lib.errors import ConfigLoadError, ConfigValueError, FlagParseError
from ..lib.util.ansi import supports_color
from ..lib.util.logging_utils import get_logger
from .commands import GLOBAL_FLAGS, register_all
from .lifecycle import Lifecycle
from .permissions import PermissionGate
from .signals import ControlSignal, ExitWithCode, ReportedError, SubcommandHandled, exit_code
from .state import InvocationState
from .tree import ArgparseCommandTree, CommandTree

DESCRIPTION = "storctl – manage storage volumes, snapshots and devices"


def build_tree() -> CommandTree:
    """Return the full storctl command tree."""
    tree = ArgparseCommandTree("storctl", short=DESCRIPTION, flags=GLOBAL_FLAGS)
    register_all(tree)
    return tree


class Runner:
    """One storctl invocation, from argv to exit code."""

    def __init__(
        self,
        argv: Sequence[str] | None = None,
        *,
        tree: CommandTree | None = None,
        lifecycle: Lifecycle | None = None,
        gate: PermissionGate | None = None,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
        is_terminal: bool | None = None,
        environ: MutableMapping[str, str] | None = None,
    ) -> None:
        self.argv = list(sys.argv[1:] if argv is None else argv)
        if tree is None:
            tree = lifecycle.tree if lifecycle is not None else build_tree()
        self.tree = tree
        self.lifecycle = lifecycle or Lifecycle(self.tree, gate=gate)
        stderr = sys.stderr if stderr is None else stderr
        if is_terminal is None:
            is_terminal = supports_color(stderr)

        config = ConfigStore()
        for spec in self.tree.flag_specs():
            if spec.key:
                config.register(spec.key, spec.default, spec.kind)
        cfg.register_defaults(config)
        environ = os.environ if environ is None else environ
        config.load_env(environ)

        self.state = InvocationState(
            config=config,
            log=get_logger(stderr),
            stdout=sys.stdout if stdout is None else stdout,
            stderr=stderr,
            is_terminal=is_terminal,
            environ=environ,
        )

    def dispatch(self) -> ControlSignal | None:
        """Resolve argv, run the lifecycle and then the command action."""
        state = self.state
        try:
            resolution = self.tree.resolve(self.argv)
        except FlagParseError as exc:
            state.presenter.render(exc)
            return ReportedError()

        node = resolution.node
        if node.action is None:
            state.stdout.write(self.tree.usage(node))
            return SubcommandHandled()

        state.flags = resolution.flags
        state.config.bind_flags(node.config_values(resolution.flags))

        if node.lifecycle:
            signal = self.lifecycle.run(state, resolution)
            if signal is not None:
                return signal

        state.log.debug("running %s", node.identity or node.name)
        try:
            return node.action(state, resolution.args)
        except ConfigValueError as exc:
            state.presenter.render(exc)
            return ReportedError()

    def execute(self) -> int:
        """Dispatch and return the process exit code.

        Async failures are drained and logged before returning, whatever
        the outcome of the command.

        Raises:
            ConfigLoadError: when the config file is corrupt.
        """
        state = self.state
        try:
            signal = self.dispatch()
            if isinstance(signal, ExitWithCode):
                state.log.debug("exiting with code %d", signal.code)
            return exit_code(signal)
        except ConfigLoadError:
            raise
        except Exception:
            state.log.critical("unexpected failure", exc_info=True)
            raise
        finally:
            self._drain()

    def _drain(self) -> None:
        state = self.state
        if state.errors is not None:
            for err in state.errors.wait():
                state.log.error("async error: %s", err)
            state.errors = None
        if state.client is not None:
            state.client.close()
            state.client = None


def main(argv: Sequence[str] | None = None) -> None:
    runner = Runner(argv)
    try:
        code = runner.execute()
    except ConfigLoadError as exc:
        runner.state.log.critical("error loading config: %s", exc)
        raise SystemExit(f"storctl: {exc}") from exc
    raise SystemExit(code)


if __name__ == "__main__":
    main()
