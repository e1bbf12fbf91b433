# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Storage adapter commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...lib.output import emit
from ..tree import CommandTree
from . import reports_errors

if TYPE_CHECKING:
    from ..state import InvocationState


def register(tree: CommandTree) -> None:
    tree.register("", "adapter", short="The adapter manager", aliases=("a",))
    tree.register(
        "adapter", "types", action=_cmd_types, needs_client=True,
        short="List the available adapter types", aliases=("type",),
    )
    tree.register(
        "adapter", "instances", action=_cmd_instances, needs_client=True,
        short="List the configured adapter instances", aliases=("instance", "services"),
    )


@reports_errors
def _cmd_types(state: InvocationState, args: list[str]) -> None:
    records = state.client.executors()
    emit(state.config, state.stdout, records, ("name", "lastModified"))


@reports_errors
def _cmd_instances(state: InvocationState, args: list[str]) -> None:
    records = [
        {"name": name, "driver": (info or {}).get("driver", "")}
        for name, info in state.client.services().items()
    ]
    emit(state.config, state.stdout, records, ("name", "driver"))
