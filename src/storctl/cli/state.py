# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Per-invocation state shared by the lifecycle and command actions."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from typing import Any, TextIO

from ..lib.context import Context
from ..lib.core.config_store import ConfigStore
from ..lib.core.version import get_docs_url
from ..lib.storage import ErrorStream, StorageClient
from .report import ErrorPresenter


@dataclass
class InvocationState:
    """Everything one run of storctl carries from argv to exit.

    Created once by the runner and passed by reference; lifecycle steps and
    actions mutate it in place (``ctx``, ``client``, ``errors``...).
    """

    config: ConfigStore
    log: logging.Logger
    ctx: Context = field(default_factory=Context)
    stdout: TextIO = field(default_factory=lambda: sys.stdout)
    stderr: TextIO = field(default_factory=lambda: sys.stderr)
    is_terminal: bool = False
    environ: MutableMapping[str, str] = field(default_factory=lambda: os.environ)
    flags: dict[str, Any] = field(default_factory=dict)
    client: StorageClient | None = None
    errors: ErrorStream | None = None
    docs_url: str | None = field(default_factory=get_docs_url)

    @property
    def presenter(self) -> ErrorPresenter:
        return ErrorPresenter(self.is_terminal, self.stderr, self.docs_url)

    def flag(self, name: str, default: Any = None) -> Any:
        """Return the value of flag *name* if it was supplied, else *default*."""
        return self.flags.get(name, default)

    def echo(self, text: str = "") -> None:
        print(text, file=self.stdout)
