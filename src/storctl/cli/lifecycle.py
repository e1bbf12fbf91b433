# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""The pre-execution lifecycle every command passes through.

Steps run in a fixed order and each returns a control signal or None; the
first signal ends the pipeline:

1. load the config file (fatal on corruption)
2. apply the effective log level
3. force derived settings for CLI runs
4. short-circuit on ``--help``
5. check permissions
6. activate the storage client (only for commands that need it)
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import httpx

from ..lib import storage
from ..lib.core import config as cfg
from ..lib.core.paths import CONFIG_FILE_ENV
from ..lib.errors import ClientActivationError, ConfigValueError, StorctlError
from ..lib.util.logging_utils import level_name, parse_level
from .permissions import PermissionGate
from .signals import ControlSignal, HelpRequested, ReportedError
from .state import InvocationState
from .tree import CommandTree, Resolution

Step = Callable[[InvocationState, Resolution], "ControlSignal | None"]

HELP_FLAGS = ("help", "verbose")


class Lifecycle:
    """Ordered pre-action pipeline.

    *gate* defaults to the gate selected by the effective config at step 5;
    *activate* and *client_factory* are the storage client boundary.
    """

    def __init__(
        self,
        tree: CommandTree,
        gate: PermissionGate | None = None,
        activate: Callable = storage.activate,
        client_factory: Callable = storage.StorageClient,
    ) -> None:
        self.tree = tree
        self.gate = gate
        self.activate = activate
        self.client_factory = client_factory

    @property
    def steps(self) -> list[tuple[str, Step]]:
        return [
            ("config", self.load_config_file),
            ("log-level", self.apply_log_level),
            ("overrides", self.apply_overrides),
            ("help", self.check_help),
            ("permissions", self.check_permissions),
            ("activate", self.activate_client),
        ]

    def run(self, state: InvocationState, resolution: Resolution) -> ControlSignal | None:
        """Run the steps in order and return the first signal, if any.

        A config value that cannot be read is reported like any other step
        failure.
        """
        for name, step in self.steps:
            try:
                signal = step(state, resolution)
            except ConfigValueError as exc:
                state.log.debug("lifecycle step %s: %s", name, exc)
                signal = self._report(state, resolution, exc)
            if signal is not None:
                state.log.debug("lifecycle stopped at %s: %s", name, signal)
                return signal
        return None

    # -- steps ----------------------------------------------------------------

    def load_config_file(self, state: InvocationState, resolution: Resolution) -> None:
        """Merge the config file into the file tier, if one exists.

        Raises:
            ConfigLoadError: when the file exists but cannot be read or is
                invalid.
        """
        explicit = state.flag("config")
        path = Path(explicit).expanduser() if explicit else cfg.find_config_file(state.environ)
        if path is None or not path.is_file():
            return None
        cfg.load_config_file(state.config, path)
        state.environ[CONFIG_FILE_ENV] = str(path)
        # re-apply env and flags so both still beat the file values
        state.config.load_env(state.environ)
        state.config.bind_flags(resolution.node.config_values(resolution.flags))
        state.log.debug("loaded config file %s", path)
        return None

    def apply_log_level(self, state: InvocationState, resolution: Resolution) -> None:
        level = parse_level(state.config.get(cfg.LOG_LEVEL))
        if level is None:
            return None
        name = level_name(level)
        state.log.setLevel(level)
        state.config.set(cfg.LOG_LEVEL, name)
        state.ctx = state.ctx.with_value("logLevel", name)
        state.log.info("updated log level to %s", name)
        return None

    def apply_overrides(self, state: InvocationState, resolution: Resolution) -> None:
        state.config.set(cfg.PATH_CACHE_ENABLED, False)
        host = state.config.get_string(cfg.HOST)
        if host:
            state.config.set(cfg.LIBSTORAGE_HOST, host)
        service = state.config.get_string(cfg.SERVICE)
        if service:
            state.config.set(cfg.LIBSTORAGE_SERVICE, service)
        docs_url = state.config.get_string(cfg.DOCS_URL)
        if docs_url:
            state.docs_url = docs_url
        return None

    def check_help(self, state: InvocationState, resolution: Resolution) -> ControlSignal | None:
        if any(state.flag(name) for name in HELP_FLAGS):
            state.stdout.write(self.tree.help_text(resolution.node))
            return HelpRequested()
        return None

    def check_permissions(
        self, state: InvocationState, resolution: Resolution
    ) -> ControlSignal | None:
        gate = self.gate or PermissionGate.for_config(state.config)
        err = gate.check(resolution.node.identity)
        if err is None:
            return None
        return self._report(state, resolution, err)

    def activate_client(
        self, state: InvocationState, resolution: Resolution
    ) -> ControlSignal | None:
        node = resolution.node
        if not node.needs_client:
            return None
        if state.config.get_bool(cfg.ASYNC):
            state.ctx = state.ctx.with_value("async", True)
        state.log.debug("activating storage client for %s", node.identity)
        try:
            state.ctx, state.config, state.errors = self.activate(state.ctx, state.config)
            state.log.debug("creating storage client for %s", node.identity)
            state.client = self.client_factory(state.ctx, state.config, state.errors)
        except ClientActivationError as exc:
            return self._report(state, resolution, exc)
        except (StorctlError, httpx.HTTPError, httpx.InvalidURL) as exc:
            wrapped = ClientActivationError(f"storage client activation failed: {exc}")
            wrapped.hint = getattr(exc, "hint", None)
            return self._report(state, resolution, wrapped)
        return None

    def _report(
        self, state: InvocationState, resolution: Resolution, err: StorctlError
    ) -> ControlSignal:
        state.presenter.render(err)
        state.echo()
        state.stdout.write(self.tree.help_text(resolution.node))
        return ReportedError()
