# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Volume commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...lib.core import config as cfg
from ...lib.errors import StorageRequestError
from ...lib.output import emit
from ..tree import CommandTree, FlagSpec
from . import for_each, is_dry_run, reports_errors, require_args

if TYPE_CHECKING:
    from ..state import InvocationState

COLUMNS = ("id", "name", "status", "size")

_FORCE = FlagSpec("force", kind=bool, help="Force the operation")


def register(tree: CommandTree) -> None:
    tree.register("", "volume", short="The volume manager", aliases=("v", "volumes"))
    tree.register(
        "volume", "ls", action=_cmd_list, needs_client=True,
        short="List volumes", aliases=("list", "get", "inspect"), args_usage="[volume...]",
        flags=[
            FlagSpec("attached", kind=bool, help="Only list attached volumes"),
            FlagSpec("available", kind=bool, help="Only list available volumes"),
        ],
    )
    tree.register(
        "volume", "new", action=_cmd_create, needs_client=True,
        short="Create a new volume", aliases=("create",), args_usage="<name>...",
        flags=[
            FlagSpec("type", help="The type of the volume"),
            FlagSpec("size", kind=int, help="The size of the volume in GB"),
            FlagSpec("iops", kind=int, help="The IOPS of the volume"),
            FlagSpec("availabilityZone", help="The availability zone"),
            FlagSpec("encrypted", kind=bool, help="Create an encrypted volume"),
            FlagSpec("encryptionKey", help="The encryption key to use"),
        ],
    )
    tree.register(
        "volume", "rm", action=_cmd_remove, needs_client=True,
        short="Remove volumes", aliases=("remove", "delete"), args_usage="<volume>...",
        flags=[_FORCE],
    )
    tree.register(
        "volume", "attach", action=_action("attach"), needs_client=True,
        short="Attach volumes", args_usage="<volume>...", flags=[_FORCE],
    )
    tree.register(
        "volume", "detach", action=_action("detach"), needs_client=True,
        short="Detach volumes", args_usage="<volume>...", flags=[_FORCE],
    )
    tree.register(
        "volume", "mount", action=_action("mount"), needs_client=True,
        short="Attach and mount volumes", args_usage="<volume>...",
        flags=[
            FlagSpec("fsType", help="The file system type"),
            FlagSpec("mountOptions", help="Comma-separated mount options"),
            FlagSpec("overwriteFs", kind=bool, help="Overwrite an existing file system"),
        ],
    )
    tree.register(
        "volume", "unmount", action=_action("unmount"), needs_client=True,
        short="Unmount and detach volumes", aliases=("umount",), args_usage="<volume>...",
    )
    tree.register(
        "volume", "path", action=_cmd_path, needs_client=True,
        short="Print the mount path of volumes", args_usage="<volume>...",
    )


def _matches(volume: dict, wanted: list[str]) -> bool:
    return not wanted or volume.get("id") in wanted or volume.get("name") in wanted


@reports_errors
def _cmd_list(state: InvocationState, args: list[str]) -> None:
    volumes = state.client.volumes(
        attached=bool(state.flag("attached")), available=bool(state.flag("available"))
    )
    emit(state.config, state.stdout, [v for v in volumes if _matches(v, args)], COLUMNS)


@reports_errors
def _cmd_create(state: InvocationState, args: list[str]):
    require_args(args, "volume name")
    existing = set()
    if state.config.get_bool(cfg.IDEMPOTENT):
        existing = {v.get("name") for v in state.client.volumes()}

    def create(name: str) -> None:
        if name in existing:
            state.log.info("volume %s already exists", name)
            return
        if is_dry_run(state, f"create volume {name}"):
            return
        state.client.volume_create(
            name,
            type=state.flag("type"),
            size=state.flag("size"),
            iops=state.flag("iops"),
            availabilityZone=state.flag("availabilityZone"),
            encrypted=state.flag("encrypted"),
            encryptionKey=state.flag("encryptionKey"),
        )

    return for_each(state, args, create)


@reports_errors
def _cmd_remove(state: InvocationState, args: list[str]):
    require_args(args, "volume ID")
    idempotent = state.config.get_bool(cfg.IDEMPOTENT)

    def remove(volume_id: str) -> None:
        if is_dry_run(state, f"remove volume {volume_id}"):
            return
        try:
            state.client.volume_remove(volume_id, force=bool(state.flag("force")))
        except StorageRequestError as exc:
            if idempotent and exc.status_code == 404:
                state.log.info("volume %s already removed", volume_id)
                return
            raise

    return for_each(state, args, remove)


def _action(action: str):
    @reports_errors
    def run(state: InvocationState, args: list[str]):
        require_args(args, "volume ID")
        opts = {
            name: state.flag(name)
            for name in ("force", "fsType", "mountOptions", "overwriteFs")
            if state.flag(name) is not None
        }

        def apply(volume_id: str) -> None:
            if is_dry_run(state, f"{action} volume {volume_id}"):
                return
            state.client.volume_action(volume_id, action, **opts)

        return for_each(state, args, apply)

    run.__name__ = f"_cmd_{action}"
    return run


@reports_errors
def _cmd_path(state: InvocationState, args: list[str]) -> None:
    require_args(args, "volume ID")
    volumes = [v for v in state.client.volumes(attached=True) if _matches(v, args)]
    emit(state.config, state.stdout, volumes, ("id", "name", "path"))
