# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Snapshot commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...lib.output import emit
from ..tree import CommandTree, FlagSpec
from . import for_each, is_dry_run, reports_errors, require_args

if TYPE_CHECKING:
    from ..state import InvocationState

COLUMNS = ("id", "name", "volumeID", "status")


def register(tree: CommandTree) -> None:
    tree.register("", "snapshot", short="The snapshot manager", aliases=("s", "snapshots"))
    tree.register(
        "snapshot", "ls", action=_cmd_list, needs_client=True,
        short="List snapshots", aliases=("list", "get", "inspect"), args_usage="[snapshot...]",
    )
    tree.register(
        "snapshot", "new", action=_cmd_create, needs_client=True,
        short="Create snapshots of volumes", aliases=("create",), args_usage="<volume>...",
        flags=[
            FlagSpec("snapshotName", help="The name of the new snapshot"),
            FlagSpec("description", help="A description of the new snapshot"),
        ],
    )
    tree.register(
        "snapshot", "rm", action=_cmd_remove, needs_client=True,
        short="Remove snapshots", aliases=("remove", "delete"), args_usage="<snapshot>...",
    )
    tree.register(
        "snapshot", "copy", action=_cmd_copy, needs_client=True,
        short="Copy snapshots", aliases=("cp",), args_usage="<snapshot>...",
        flags=[
            FlagSpec("destinationName", help="The name of the copied snapshot"),
            FlagSpec("destinationRegion", help="The region to copy the snapshot to"),
        ],
    )


@reports_errors
def _cmd_list(state: InvocationState, args: list[str]) -> None:
    snaps = [
        s for s in state.client.snapshots()
        if not args or s.get("id") in args or s.get("name") in args
    ]
    emit(state.config, state.stdout, snaps, COLUMNS)


@reports_errors
def _cmd_create(state: InvocationState, args: list[str]):
    require_args(args, "volume ID")

    def create(volume_id: str) -> None:
        if is_dry_run(state, f"snapshot volume {volume_id}"):
            return
        state.client.snapshot_create(
            volume_id,
            name=state.flag("snapshotName", ""),
            description=state.flag("description", ""),
        )

    return for_each(state, args, create)


@reports_errors
def _cmd_remove(state: InvocationState, args: list[str]):
    require_args(args, "snapshot ID")

    def remove(snapshot_id: str) -> None:
        if not is_dry_run(state, f"remove snapshot {snapshot_id}"):
            state.client.snapshot_remove(snapshot_id)

    return for_each(state, args, remove)


@reports_errors
def _cmd_copy(state: InvocationState, args: list[str]):
    require_args(args, "snapshot ID")

    def copy(snapshot_id: str) -> None:
        if is_dry_run(state, f"copy snapshot {snapshot_id}"):
            return
        state.client.snapshot_copy(
            snapshot_id,
            name=state.flag("destinationName", ""),
            region=state.flag("destinationRegion", ""),
        )

    return for_each(state, args, copy)
