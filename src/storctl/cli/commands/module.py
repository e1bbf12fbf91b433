# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Module commands: types and instances."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...lib.errors import FlagParseError
from ...lib.output import emit
from ..tree import CommandTree, FlagSpec
from . import for_each, is_dry_run, reports_errors, require_args

if TYPE_CHECKING:
    from ..state import InvocationState


def register(tree: CommandTree) -> None:
    tree.register("", "module", short="The module manager", aliases=("m",))
    tree.register(
        "module", "types", action=_cmd_types, needs_client=True,
        short="List the available module types", aliases=("type",),
    )
    tree.register("module", "instance", short="The module instance manager", aliases=("i",))
    tree.register(
        "module instance", "ls", action=_cmd_instances, needs_client=True,
        short="List the running module instances", aliases=("list", "get"),
    )
    tree.register(
        "module instance", "create", action=_cmd_create, needs_client=True,
        short="Create a new module instance", aliases=("new",),
        flags=[
            FlagSpec("typeName", "t", help="The name of the module type"),
            FlagSpec("name", help="The name of the new module instance"),
            FlagSpec("address", "a", help="The address of the new module instance"),
            FlagSpec("option", "o", kind=list,
                     help="A key=value module option (repeatable)"),
            FlagSpec("start", kind=bool, help="Start the instance once it is created"),
        ],
    )
    tree.register(
        "module instance", "start", action=_cmd_start, needs_client=True,
        short="Start one or more module instances", args_usage="<name>...",
    )


@reports_errors
def _cmd_types(state: InvocationState, args: list[str]) -> None:
    emit(state.config, state.stdout, state.client.modules(), ("name", "description"))


@reports_errors
def _cmd_instances(state: InvocationState, args: list[str]) -> None:
    emit(
        state.config, state.stdout, state.client.module_instances(),
        ("name", "typeName", "address", "isStarted"),
    )


def _options(pairs: list[str]) -> dict[str, str]:
    opts: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise FlagParseError(f"invalid module option {pair!r}: expected key=value")
        opts[key] = value
    return opts


@reports_errors
def _cmd_create(state: InvocationState, args: list[str]) -> None:
    type_name = state.flag("typeName")
    address = state.flag("address")
    if not type_name or not address:
        raise FlagParseError("module instance create requires --typeName and --address")
    name = state.flag("name") or type_name
    opts = _options(state.flag("option", []))
    if is_dry_run(state, f"create module instance {name} ({type_name}) at {address}"):
        return None
    state.client.module_create(type_name, name, address, config=opts)
    if state.flag("start"):
        state.client.module_start(name)
    return None


@reports_errors
def _cmd_start(state: InvocationState, args: list[str]):
    require_args(args, "module instance name")
    if is_dry_run(state, f"start module instance(s) {', '.join(args)}"):
        return None
    return for_each(state, args, state.client.module_start)
