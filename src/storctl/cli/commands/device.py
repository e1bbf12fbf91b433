# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Device commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...lib.output import emit
from ..tree import CommandTree, FlagSpec
from . import is_dry_run, reports_errors, require_args

if TYPE_CHECKING:
    from ..state import InvocationState

_FS_TYPE = FlagSpec("fsType", help="The file system type")


def register(tree: CommandTree) -> None:
    tree.register("", "device", short="The device manager", aliases=("d", "devices"))
    tree.register(
        "device", "ls", action=_cmd_list, needs_client=True,
        short="List mounted devices", aliases=("list", "get"),
    )
    tree.register(
        "device", "mount", action=_cmd_mount, needs_client=True,
        short="Mount a device", args_usage="<device> <mountPoint>",
        flags=[_FS_TYPE, FlagSpec("mountOptions", help="Comma-separated mount options"),
               FlagSpec("mountLabel", help="The SELinux mount label")],
    )
    tree.register(
        "device", "unmount", action=_cmd_unmount, needs_client=True,
        short="Unmount a device", aliases=("umount",), args_usage="<mountPoint>",
    )
    tree.register(
        "device", "format", action=_cmd_format, needs_client=True,
        short="Format a device", args_usage="<device>",
        flags=[_FS_TYPE, FlagSpec("overwriteFs", kind=bool,
                                  help="Overwrite an existing file system")],
    )


@reports_errors
def _cmd_list(state: InvocationState, args: list[str]) -> None:
    emit(state.config, state.stdout, state.client.devices(), ("device", "mountPoint"))


@reports_errors
def _cmd_mount(state: InvocationState, args: list[str]) -> None:
    require_args(args, "device and mount point", 2)
    device, mount_point = args[0], args[1]
    if is_dry_run(state, f"mount {device} at {mount_point}"):
        return None
    state.client.device_op(
        "mount",
        deviceName=device,
        mountPoint=mount_point,
        fsType=state.flag("fsType"),
        mountOptions=state.flag("mountOptions"),
        mountLabel=state.flag("mountLabel"),
    )
    return None


@reports_errors
def _cmd_unmount(state: InvocationState, args: list[str]) -> None:
    require_args(args, "mount point")
    if is_dry_run(state, f"unmount {args[0]}"):
        return None
    state.client.device_op("unmount", mountPoint=args[0])
    return None


@reports_errors
def _cmd_format(state: InvocationState, args: list[str]) -> None:
    require_args(args, "device")
    if is_dry_run(state, f"format {args[0]}"):
        return None
    state.client.device_op(
        "format",
        deviceName=args[0],
        fsType=state.flag("fsType"),
        overwriteFs=bool(state.flag("overwriteFs")),
    )
    return None
