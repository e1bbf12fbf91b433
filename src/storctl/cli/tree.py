# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""The command tree: registration, argv resolution and help text.

:class:`CommandTree` owns the node hierarchy and the walk that turns argv
into one command node.  Flag parsing and help rendering are left to a
concrete implementation; :class:`ArgparseCommandTree` is the one storctl
ships.  Nothing outside this module sees argparse types.
"""

from __future__ import annotations

import abc
import argparse
import re
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from ..lib.core.config_store import parse_duration
from ..lib.errors import FlagParseError

if TYPE_CHECKING:
    from .signals import ControlSignal
    from .state import InvocationState

Action = Callable[["InvocationState", list[str]], "ControlSignal | None"]

_NUMBER_RE = re.compile(r"^-\d+$|^-\d*\.\d+$")


@dataclass(frozen=True)
class FlagSpec:
    """One command-line flag.

    Flags with a ``key`` feed that config key through the flag tier; the
    default is registered in the default tier.  ``persistent`` flags are
    visible to every descendant of the declaring node.
    """

    name: str
    short: str | None = None
    key: str | None = None
    kind: type = str
    default: Any = None
    help: str = ""
    choices: tuple[str, ...] | None = None
    persistent: bool = False
    metavar: str | None = None

    @property
    def takes_value(self) -> bool:
        return self.kind is not bool

    @property
    def option_strings(self) -> list[str]:
        opts = [f"--{self.name}"]
        if self.short:
            opts.append(f"-{self.short}")
        return opts


@dataclass(eq=False)
class CommandNode:
    """One command in the tree."""

    name: str
    short: str = ""
    parent: CommandNode | None = field(default=None, repr=False)
    children: dict[str, CommandNode] = field(default_factory=dict, repr=False)
    flags: list[FlagSpec] = field(default_factory=list)
    action: Action | None = field(default=None, repr=False)
    aliases: tuple[str, ...] = ()
    lifecycle: bool = True
    needs_client: bool = False
    args_usage: str = ""

    @property
    def path(self) -> tuple[str, ...]:
        """Names from the root down to this node."""
        names: list[str] = []
        node: CommandNode | None = self
        while node is not None:
            names.append(node.name)
            node = node.parent
        return tuple(reversed(names))

    @property
    def identity(self) -> str:
        """Space-joined path without the root name (``"service start"``)."""
        return " ".join(self.path[1:])

    def child(self, token: str) -> CommandNode | None:
        """Return the child named (or aliased) *token*."""
        found = self.children.get(token)
        if found is not None:
            return found
        for node in self.children.values():
            if token in node.aliases:
                return node
        return None

    def inherited_flags(self) -> list[FlagSpec]:
        """Persistent flags declared by ancestors, root first."""
        chain: list[CommandNode] = []
        node = self.parent
        while node is not None:
            chain.append(node)
            node = node.parent
        return [spec for anc in reversed(chain) for spec in anc.flags if spec.persistent]

    def visible_flags(self) -> list[FlagSpec]:
        """Every flag valid on this node: inherited persistent flags, then local."""
        return self.inherited_flags() + list(self.flags)

    def find_flag(self, token: str) -> FlagSpec | None:
        """Return the visible flag matching *token* (``--name``, ``--name=v`` or ``-x``)."""
        if token.startswith("--"):
            name = token[2:].split("=", 1)[0]
            return next((f for f in self.visible_flags() if f.name == name), None)
        short = token[1:2]
        return next((f for f in self.visible_flags() if f.short == short), None)

    def consumes_next(self, token: str) -> bool:
        """Whether flag *token* takes its value from the following argv token.

        Short clusters such as ``-ql`` are read letter by letter; the first
        letter that takes a value swallows the rest of the cluster, or the
        next token when it is the last letter.
        """
        if token.startswith("--"):
            spec = self.find_flag(token)
            return spec is not None and spec.takes_value and "=" not in token
        for pos in range(1, len(token)):
            spec = self.find_flag("-" + token[pos])
            if spec is None:
                return False
            if spec.takes_value:
                return pos == len(token) - 1
        return False

    def config_values(self, flags: dict[str, Any]) -> dict[str, Any]:
        """Map parsed *flags* onto their config keys."""
        return {
            spec.key: flags[spec.name]
            for spec in self.visible_flags()
            if spec.key and spec.name in flags
        }


@dataclass
class Resolution:
    """The outcome of resolving argv: one node, its flags and leftover args."""

    node: CommandNode
    args: list[str]
    flags: dict[str, Any]


class CommandTree(abc.ABC):
    """A fixed hierarchy of commands.

    Subclasses provide flag parsing and help rendering on top of some
    argument-parsing library.
    """

    def __init__(self, name: str, short: str = "", flags: Sequence[FlagSpec] = ()) -> None:
        self.root = CommandNode(name=name, short=short, flags=list(flags))

    # -- registration -----------------------------------------------------------

    def find(self, path: Sequence[str] | str) -> CommandNode:
        """Return the node at *path* (names below the root, or a space-joined string)."""
        names = path.split() if isinstance(path, str) else list(path)
        node = self.root
        for name in names:
            child = node.children.get(name)
            if child is None:
                raise KeyError(f"no such command: {' '.join(names)}")
            node = child
        return node

    def register(
        self,
        parent_path: Sequence[str] | str,
        name: str,
        flags: Sequence[FlagSpec] = (),
        action: Action | None = None,
        **options: Any,
    ) -> CommandNode:
        """Add a command named *name* below *parent_path* and return it.

        *options* are passed to :class:`CommandNode` (``short``, ``aliases``,
        ``needs_client``, ``lifecycle``, ``args_usage``).

        Raises:
            ValueError: when the parent already has a child (or alias) with
                that name.
        """
        parent = self.find(parent_path)
        node = CommandNode(name=name, parent=parent, flags=list(flags), action=action, **options)
        for token in (name, *node.aliases):
            if parent.child(token) is not None:
                raise ValueError(f"duplicate command {token!r} under {' '.join(parent.path)!r}")
        parent.children[name] = node
        self._invalidate(node)
        return node

    def nodes(self) -> Iterator[CommandNode]:
        """Walk the tree depth-first, root included."""
        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(list(node.children.values())))

    def flag_specs(self) -> Iterator[FlagSpec]:
        for node in self.nodes():
            yield from node.flags

    # -- resolution -------------------------------------------------------------

    def walk(self, argv: Sequence[str]) -> tuple[CommandNode, list[str]]:
        """Consume command-name tokens from *argv*.

        Returns the deepest matching node and the remaining tokens (flags
        and arguments, in their original order).  Flag tokens known at the
        current depth are skipped together with their value.
        """
        node = self.root
        rest: list[str] = []
        i = 0
        while i < len(argv):
            token = argv[i]
            if token == "--":
                break
            if token.startswith("-") and token != "-":
                rest.append(token)
                i += 1
                if node.consumes_next(token) and i < len(argv):
                    rest.append(argv[i])
                    i += 1
                continue
            child = node.child(token)
            if child is None:
                break
            node = child
            i += 1
        rest.extend(argv[i:])
        return node, rest

    def resolve(self, argv: Sequence[str]) -> Resolution:
        """Resolve *argv* into exactly one command node.

        Raises:
            FlagParseError: when the remaining tokens do not parse against the
                node's flags.
        """
        node, rest = self.walk(list(argv))
        if "--" in rest:
            cut = rest.index("--")
            rest, passthrough = rest[:cut], rest[cut + 1 :]
        else:
            passthrough = []
        flags, args = self.parse_flags(node, rest)
        return Resolution(node=node, args=args + passthrough, flags=flags)

    # -- library specific -------------------------------------------------------

    def _invalidate(self, node: CommandNode) -> None:
        """Hook for implementations that cache per-node parsers."""

    @abc.abstractmethod
    def parse_flags(self, node: CommandNode, tokens: list[str]) -> tuple[dict[str, Any], list[str]]:
        """Parse *tokens* against *node*'s visible flags.

        Returns the explicitly supplied flag values (by flag name) and the
        positional arguments.
        """

    @abc.abstractmethod
    def help_text(self, node: CommandNode) -> str:
        """Full help text for *node*."""

    @abc.abstractmethod
    def usage(self, node: CommandNode) -> str:
        """Usage text for *node* (usage line plus available commands)."""


# ---------------------------------------------------------------------------
# argparse implementation
# ---------------------------------------------------------------------------


class _Parser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of printing and exiting."""

    def error(self, message: str):  # type: ignore[override]
        raise FlagParseError(message, hint=f"Run '{self.prog} --help' for usage.")


def _duration_value(text: str) -> timedelta:
    try:
        return parse_duration(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


class ArgparseCommandTree(CommandTree):
    """:class:`CommandTree` backed by one ``argparse`` parser per node."""

    def __init__(self, name: str, short: str = "", flags: Sequence[FlagSpec] = ()) -> None:
        super().__init__(name, short, flags)
        self._parsers: dict[int, _Parser] = {}

    def _invalidate(self, node: CommandNode) -> None:
        self._parsers.clear()

    @staticmethod
    def _add_flag(group: Any, spec: FlagSpec) -> None:
        kwargs: dict[str, Any] = {
            "dest": spec.name,
            "default": argparse.SUPPRESS,
            "help": spec.help,
        }
        if spec.kind is bool:
            if spec.default is True:
                kwargs["action"] = argparse.BooleanOptionalAction
            else:
                kwargs["action"] = "store_true"
        elif spec.kind is list:
            kwargs["action"] = "append"
            kwargs["metavar"] = spec.metavar or spec.name.upper()
        else:
            kwargs["type"] = {int: int, timedelta: _duration_value}.get(spec.kind, spec.kind)
            kwargs["metavar"] = spec.metavar or spec.name.upper()
            if spec.choices:
                kwargs["choices"] = spec.choices
                kwargs["metavar"] = "{" + ",".join(spec.choices) + "}"
        if spec.default not in (None, "", False, [], ()) and spec.kind is not bool:
            kwargs["help"] = f"{spec.help} (default: {spec.default})"
        group.add_argument(*spec.option_strings, **kwargs)

    def _commands_epilog(self, node: CommandNode) -> str:
        if not node.children:
            return ""
        width = max(len(name) for name in node.children) + 2
        lines = ["Available Commands:"]
        for name, child in node.children.items():
            lines.append(f"  {name.ljust(width)}{child.short}")
        lines.append("")
        lines.append(f"Use \"{' '.join(node.path)} <command> --help\" for more information.")
        return "\n".join(lines)

    def _usage_line(self, node: CommandNode) -> str:
        parts = [" ".join(node.path), "[flags]"]
        if node.children:
            parts.append("<command>")
        if node.args_usage:
            parts.append(node.args_usage)
        return " ".join(parts)

    def parser(self, node: CommandNode) -> argparse.ArgumentParser:
        """Build (or return the cached) parser for *node*."""
        cached = self._parsers.get(id(node))
        if cached is not None:
            return cached
        parser = _Parser(
            prog=" ".join(node.path),
            usage=self._usage_line(node),
            description=node.short or None,
            epilog=self._commands_epilog(node) or None,
            formatter_class=argparse.RawDescriptionHelpFormatter,
            add_help=False,
            allow_abbrev=False,
        )
        if node.flags:
            local = parser.add_argument_group("Flags")
            for spec in node.flags:
                self._add_flag(local, spec)
        inherited = node.inherited_flags()
        if inherited:
            group = parser.add_argument_group("Global Flags")
            for spec in inherited:
                self._add_flag(group, spec)
        self._parsers[id(node)] = parser
        return parser

    def parse_flags(self, node: CommandNode, tokens: list[str]) -> tuple[dict[str, Any], list[str]]:
        namespace, extras = self.parser(node).parse_known_args(tokens)
        for token in extras:
            if token.startswith("-") and token != "-" and not _NUMBER_RE.match(token):
                raise FlagParseError(
                    f"unknown flag: {token}",
                    hint=f"Run '{' '.join(node.path)} --help' for usage.",
                )
        return vars(namespace), extras

    def help_text(self, node: CommandNode) -> str:
        return self.parser(node).format_help()

    def usage(self, node: CommandNode) -> str:
        text = self.parser(node).format_usage()
        epilog = self._commands_epilog(node)
        return f"{text}\n{epilog}\n" if epilog else text
