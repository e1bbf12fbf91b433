# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Control signals: typed early exits returned up to the runner.

Lifecycle steps and command actions return one of these values (or None)
to stop execution.  Nothing in between interprets them; the runner consumes
the signal once and turns it into the process exit code.
"""

from __future__ import annotations

from dataclasses import dataclass

SUCCESS = 0
REPORTED_ERROR = 1


@dataclass(frozen=True)
class HelpRequested:
    """Help text was printed; nothing else runs."""


@dataclass(frozen=True)
class SubcommandHandled:
    """Usage for a command without an action was printed."""


@dataclass(frozen=True)
class ReportedError:
    """A user-facing error was already rendered at the point of detection."""


@dataclass(frozen=True)
class ExitWithCode:
    """Exit with an explicit process exit code."""

    code: int


ControlSignal = HelpRequested | SubcommandHandled | ReportedError | ExitWithCode


def exit_code(signal: ControlSignal | None) -> int:
    """Map *signal* (or its absence) to a process exit code."""
    if signal is None or isinstance(signal, (HelpRequested, SubcommandHandled)):
        return SUCCESS
    if isinstance(signal, ReportedError):
        return REPORTED_ERROR
    if isinstance(signal, ExitWithCode):
        return signal.code
    raise TypeError(f"not a control signal: {signal!r}")
