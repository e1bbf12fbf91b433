# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Tests for the storctl subcommands against a mocked storage service."""

import json
import unittest
from unittest import mock

from storctl.lib.errors import InitSystemError

from cli_test_helpers import HOST, json_routes, make_runner, mock_service

VOLUMES = {
    "ebs": {
        "vol-1": {"id": "vol-1", "name": "data", "status": "attached", "size": 10},
        "vol-2": {"id": "vol-2", "name": "logs", "status": "available", "size": 20},
    }
}


def _run(argv: list[str], routes: dict | None = None):
    """Run *argv* against a mocked service; returns (code, stdout, stderr, handler)."""
    handler = json_routes(routes or {})
    runner, stdout, stderr = make_runner(
        ["--host", HOST, *argv], lifecycle=mock_service(handler)
    )
    return runner.execute(), stdout.getvalue(), stderr.getvalue(), handler


def _bodies(handler, method: str) -> list[tuple[str, dict]]:
    return [
        (str(r.url.path) + ("?" + r.url.query.decode() if r.url.query else ""),
         json.loads(r.content) if r.content else {})
        for r in handler.requests
        if r.method == method
    ]


class VolumeCommandTests(unittest.TestCase):
    def test_ls_table(self) -> None:
        code, out, _, _ = _run(["volume", "ls"], {("GET", "/volumes"): (200, VOLUMES)})
        self.assertEqual(code, 0)
        lines = out.splitlines()
        self.assertEqual(lines[0].split(), ["ID", "NAME", "STATUS", "SIZE"])
        self.assertEqual(lines[1].split(), ["vol-1", "data", "attached", "10"])

    def test_ls_filter_and_json(self) -> None:
        code, out, _, _ = _run(
            ["v", "ls", "logs", "-f", "json"], {("GET", "/volumes"): (200, VOLUMES)}
        )
        self.assertEqual(code, 0)
        self.assertEqual([v["id"] for v in json.loads(out)], ["vol-2"])

    def test_ls_attached_query(self) -> None:
        _, _, _, handler = _run(
            ["volume", "ls", "--attached"], {("GET", "/volumes"): (200, VOLUMES)}
        )
        self.assertEqual(handler.requests[-1].url.params["attachments"], "true")

    def test_create(self) -> None:
        code, _, _, handler = _run(
            ["volume", "new", "scratch", "--size", "5", "--type", "gp2"],
            {("POST", "/volumes/ebs"): (200, {"id": "vol-3"})},
        )
        self.assertEqual(code, 0)
        self.assertEqual(
            _bodies(handler, "POST"), [("/volumes/ebs", {"name": "scratch", "size": 5, "type": "gp2"})]
        )

    def test_create_idempotent_skips_existing(self) -> None:
        code, _, _, handler = _run(
            ["volume", "create", "data", "-i"], {("GET", "/volumes"): (200, VOLUMES)}
        )
        self.assertEqual(code, 0)
        self.assertEqual(_bodies(handler, "POST"), [])

    def test_create_requires_name(self) -> None:
        code, _, err, _ = _run(["volume", "new"])
        self.assertEqual(code, 1)
        self.assertIn("missing volume name", err)

    def test_remove_missing_volume_fails(self) -> None:
        code, _, err, _ = _run(["volume", "rm", "vol-9"])
        self.assertEqual(code, 1)
        self.assertIn("status 404", err)

    def test_remove_missing_volume_idempotent(self) -> None:
        code, _, err, _ = _run(["volume", "rm", "vol-9", "--idempotent"])
        self.assertEqual(code, 0)
        self.assertEqual(err, "")

    def test_attach_continue_on_error(self) -> None:
        routes = {("POST", "/volumes/ebs/vol-2"): (200, {"id": "vol-2"})}
        code, _, err, handler = _run(
            ["volume", "attach", "vol-9", "vol-2", "--continueOnError"], routes
        )
        self.assertEqual(code, 1)
        self.assertEqual(err.count("Oops"), 1)
        self.assertEqual(
            [path for path, _ in _bodies(handler, "POST")],
            ["/volumes/ebs/vol-9?attach=", "/volumes/ebs/vol-2?attach="],
        )

    def test_attach_stops_at_first_error(self) -> None:
        code, _, _, handler = _run(["volume", "attach", "vol-9", "vol-2"])
        self.assertEqual(code, 1)
        self.assertEqual(len(_bodies(handler, "POST")), 1)

    def test_mount_options(self) -> None:
        routes = {("POST", "/volumes/ebs/vol-1"): (200, {})}
        _, _, _, handler = _run(["volume", "mount", "vol-1", "--fsType", "xfs"], routes)
        self.assertEqual(_bodies(handler, "POST"), [("/volumes/ebs/vol-1?mount=", {"fsType": "xfs"})])

    def test_dry_run_does_not_mutate(self) -> None:
        code, out, _, handler = _run(["volume", "detach", "vol-1", "-n"])
        self.assertEqual(code, 0)
        self.assertIn("dry run: would detach volume vol-1", out)
        self.assertEqual(_bodies(handler, "POST"), [])

    def test_path(self) -> None:
        vols = {"ebs": {"vol-1": {"id": "vol-1", "name": "data", "path": "/mnt/data"}}}
        _, out, _, _ = _run(["volume", "path", "vol-1", "-q"], {("GET", "/volumes"): (200, vols)})
        self.assertEqual(out.split(), ["vol-1", "data", "/mnt/data"])

    def test_missing_host(self) -> None:
        runner, stdout, stderr = make_runner(["volume", "ls"])
        self.assertEqual(runner.execute(), 1)
        self.assertIn("no storage service host configured", stderr.getvalue())
        self.assertIn("usage: storctl volume ls", stdout.getvalue())


class SnapshotDeviceModuleTests(unittest.TestCase):
    def test_snapshot_new(self) -> None:
        routes = {("POST", "/volumes/ebs/vol-1"): (200, {})}
        _, _, _, handler = _run(
            ["snapshot", "new", "vol-1", "--snapshotName", "nightly"], routes
        )
        self.assertEqual(
            _bodies(handler, "POST"), [("/volumes/ebs/vol-1?snapshot=", {"snapshotName": "nightly"})]
        )

    def test_snapshot_copy(self) -> None:
        routes = {("POST", "/snapshots/ebs/snap-1"): (200, {})}
        code, _, _, handler = _run(
            ["snapshot", "copy", "snap-1", "--destinationRegion", "eu-west-1"], routes
        )
        self.assertEqual(code, 0)
        self.assertEqual(
            _bodies(handler, "POST"),
            [("/snapshots/ebs/snap-1?copy=", {"destinationRegion": "eu-west-1"})],
        )

    def test_device_mount_requires_two_args(self) -> None:
        code, _, err, _ = _run(["device", "mount", "/dev/xvdb"])
        self.assertEqual(code, 1)
        self.assertIn("missing device and mount point", err)

    def test_device_format(self) -> None:
        routes = {("POST", "/devices"): (200, {})}
        _, _, _, handler = _run(["device", "format", "/dev/xvdb", "--fsType", "ext4"], routes)
        self.assertEqual(
            _bodies(handler, "POST"),
            [("/devices?format=", {"deviceName": "/dev/xvdb", "fsType": "ext4", "overwriteFs": False})],
        )

    def test_module_instance_create(self) -> None:
        routes = {("POST", "/modules/instances"): (200, {})}
        code, _, _, handler = _run(
            ["module", "instance", "create", "-t", "docker", "-a", "tcp://:7980",
             "-o", "mode=ro", "-o", "debug=1"],
            routes,
        )
        self.assertEqual(code, 0)
        self.assertEqual(
            _bodies(handler, "POST"),
            [("/modules/instances", {
                "typeName": "docker", "name": "docker", "address": "tcp://:7980",
                "config": {"mode": "ro", "debug": "1"},
            })],
        )

    def test_module_instance_create_bad_option(self) -> None:
        code, _, err, _ = _run(
            ["m", "i", "create", "-t", "docker", "-a", "tcp://:7980", "-o", "oops"]
        )
        self.assertEqual(code, 1)
        self.assertIn("expected key=value", err)

    def test_adapter_instances(self) -> None:
        _, out, _, _ = _run(["adapter", "instances", "-q"])
        self.assertEqual(out.split(), ["ebs", "ebs"])


class LocalCommandTests(unittest.TestCase):
    def test_env_shows_sources(self) -> None:
        runner, stdout, _ = make_runner(["env", "storctl.logLevel", "-f", "json", "-l", "info"])
        self.assertEqual(runner.execute(), 0)
        self.assertEqual(
            json.loads(stdout.getvalue()),
            [{"key": "storctl.logLevel", "value": "info", "source": "flag"}],
        )

    def test_service_start(self) -> None:
        with mock.patch("storctl.lib.service.run_init_system", return_value=0) as run:
            runner, _, _ = make_runner(["service", "start"])
            self.assertEqual(runner.execute(), 0)
        run.assert_called_once_with("start")

    def test_install_dry_run(self) -> None:
        with mock.patch("storctl.lib.service.run_init_system") as run:
            runner, stdout, _ = make_runner(["install", "--dryRun"])
            self.assertEqual(runner.execute(), 0)
        run.assert_not_called()
        self.assertIn("dry run: would enable the storctl service", stdout.getvalue())

    def test_service_status_inactive(self) -> None:
        with mock.patch("storctl.lib.service.run_init_system", return_value=3):
            runner, stdout, _ = make_runner(["service", "status"])
            self.assertEqual(runner.execute(), 3)
        self.assertIn("storctl is stopped", stdout.getvalue())

    def test_init_system_failure_is_reported(self) -> None:
        with mock.patch(
            "storctl.lib.service.run_init_system",
            side_effect=InitSystemError("cannot start storctl: systemctl not found"),
        ):
            runner, _, stderr = make_runner(["service", "start"])
            self.assertEqual(runner.execute(), 1)
        self.assertIn("systemctl not found", stderr.getvalue())


if __name__ == "__main__":
    unittest.main()
