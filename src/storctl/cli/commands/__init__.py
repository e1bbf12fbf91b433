# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""CLI command modules.

Each module exposes ``register(tree)`` to add its commands to the command
tree.  Actions take ``(state, args)`` and return a control signal or None.
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from ...lib.core import config as cfg
from ...lib.errors import FlagParseError, StorageRequestError, StorctlError
from ..signals import ControlSignal, ReportedError
from ..tree import CommandTree, FlagSpec

if TYPE_CHECKING:
    from ..state import InvocationState

GLOBAL_FLAGS = [
    FlagSpec("config", "c", help="The path to a custom config file", persistent=True),
    FlagSpec(
        "logLevel", "l", key=cfg.LOG_LEVEL, default="warn", persistent=True,
        help="The log level (debug, info, warn, error, fatal, panic)",
    ),
    FlagSpec("host", key=cfg.HOST, help="The storage service host", persistent=True),
    FlagSpec("service", "s", key=cfg.SERVICE, help="The storage service name", persistent=True),
    FlagSpec("help", "h", kind=bool, help="Help for this command", persistent=True),
    FlagSpec("verbose", kind=bool, help="Print verbose help information", persistent=True),
    FlagSpec(
        "format", "f", key=cfg.OUTPUT_FORMAT, default="tmpl", persistent=True,
        choices=("tmpl", "json", "jsonp"), help="The output format",
    ),
    FlagSpec(
        "template", key=cfg.OUTPUT_TEMPLATE, default="", persistent=True,
        help="The {{field}} template to use when --format is set to 'tmpl'",
    ),
    FlagSpec(
        "templateTabs", key=cfg.OUTPUT_TEMPLATE_TABS, kind=bool, default=True, persistent=True,
        help="Align the template output into tab-separated columns",
    ),
    FlagSpec("quiet", "q", key=cfg.OUTPUT_QUIET, kind=bool, default=False, persistent=True,
             help="Suppress table headers"),
    FlagSpec("dryRun", "n", key=cfg.DRY_RUN, kind=bool, default=False, persistent=True,
             help="Show what action(s) will occur, but do not execute them"),
    FlagSpec("continueOnError", key=cfg.CONTINUE_ON_ERROR, kind=bool, default=False,
             persistent=True, help="Continue processing a collection upon error"),
    FlagSpec("idempotent", "i", key=cfg.IDEMPOTENT, kind=bool, default=False, persistent=True,
             help="Make this command idempotent"),
    FlagSpec("async", key=cfg.ASYNC, kind=bool, default=False, persistent=True,
             help="Submit storage operations in the background"),
]


def register_all(tree: CommandTree) -> None:
    """Register every storctl subcommand on *tree*."""
    from . import adapter, device, info, module, service, snapshot, volume

    for mod in (info, service, module, adapter, volume, snapshot, device):
        mod.register(tree)


def reports_errors(
    action: Callable[..., ControlSignal | None],
) -> Callable[..., ControlSignal | None]:
    """Render ``StorctlError`` raised by *action* and return ``ReportedError``."""

    @functools.wraps(action)
    def wrapper(state: InvocationState, args: list[str]) -> ControlSignal | None:
        try:
            return action(state, args)
        except StorctlError as exc:
            state.presenter.render(exc)
            return ReportedError()

    return wrapper


def require_args(args: list[str], what: str, count: int = 1) -> None:
    """Raise ``FlagParseError`` unless at least *count* arguments were given."""
    if len(args) < count:
        raise FlagParseError(f"missing {what}")


def is_dry_run(state: InvocationState, description: str) -> bool:
    """Print *description* and return True when ``--dryRun`` is in effect."""
    if state.config.get_bool(cfg.DRY_RUN):
        state.echo(f"dry run: would {description}")
        return True
    return False


def for_each(
    state: InvocationState, items: Iterable[str], op: Callable[[str], Any]
) -> ControlSignal | None:
    """Apply *op* to every item, honoring ``--continueOnError``.

    Without the flag the first failure propagates.  With it, each failure is
    rendered and processing continues; the result is ``ReportedError`` if
    anything failed.
    """
    keep_going = state.config.get_bool(cfg.CONTINUE_ON_ERROR)
    failed = False
    for item in items:
        try:
            op(item)
        except StorageRequestError as exc:
            if not keep_going:
                raise
            state.presenter.render(exc)
            failed = True
    return ReportedError() if failed else None
