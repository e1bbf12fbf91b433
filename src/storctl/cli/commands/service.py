# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Service management commands: install, uninstall and ``service *``."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...lib import service as initsys
from ..signals import ExitWithCode
from ..tree import CommandTree
from . import is_dry_run, reports_errors

if TYPE_CHECKING:
    from ..state import InvocationState


def register(tree: CommandTree) -> None:
    """Register install/uninstall and the service command group."""
    tree.register("", "install", action=_cmd_install, short="Enable the storctl service")
    tree.register("", "uninstall", action=_cmd_uninstall, short="Disable the storctl service")

    tree.register("", "service", short="The service controller")
    tree.register("service", "start", action=_systemctl("start"), short="Start the service")
    tree.register("service", "stop", action=_systemctl("stop"), short="Stop the service")
    tree.register(
        "service", "restart", action=_systemctl("restart"), short="Restart the service"
    )
    tree.register("service", "status", action=_cmd_status, short="Print the service status")
    tree.register(
        "service", "initsys", action=_cmd_initsys, short="Print the detected init system"
    )


def _systemctl(verb: str):
    @reports_errors
    def action(state: InvocationState, args: list[str]) -> None:
        if is_dry_run(state, f"{verb} the {initsys.UNIT_NAME} service"):
            return None
        initsys.run_init_system(verb)
        state.log.info("service %s: ok", verb)
        return None

    action.__name__ = f"_cmd_{verb}"
    return action


_cmd_install = _systemctl("enable")
_cmd_uninstall = _systemctl("disable")


@reports_errors
def _cmd_status(state: InvocationState, args: list[str]) -> ExitWithCode | None:
    """Print the unit state; an inactive unit exits with code 3."""
    code = initsys.run_init_system("is-active", check=False)
    if code == 0:
        state.echo(f"{initsys.UNIT_NAME} is running")
        return None
    state.echo(f"{initsys.UNIT_NAME} is stopped")
    return ExitWithCode(code)


def _cmd_initsys(state: InvocationState, args: list[str]) -> None:
    state.echo(initsys.detect_init_system())
