# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Informational commands: version and env."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...lib.core.version import format_version_string, get_version_info
from ...lib.output import emit
from ..tree import CommandTree
from . import reports_errors

if TYPE_CHECKING:
    from ..state import InvocationState


def register(tree: CommandTree) -> None:
    """Register informational subcommands (version, env)."""
    tree.register("", "version", action=_cmd_version, short="Print the version")
    tree.register(
        "", "env", action=_cmd_env, short="Print the effective configuration",
        args_usage="[key...]",
    )


def _cmd_version(state: InvocationState, args: list[str]) -> None:
    version, branch = get_version_info()
    state.echo(f"storctl {format_version_string(version, branch)}")


@reports_errors
def _cmd_env(state: InvocationState, args: list[str]) -> None:
    """Show the effective value and source tier of every config key."""
    wanted = {a.lower() for a in args}
    records = [
        {"key": key, "value": value, "source": state.config.source(key)}
        for key, value in state.config.resolve().items()
        if not wanted or key.lower() in wanted
    ]
    emit(state.config, state.stdout, records, ("key", "value", "source"))
