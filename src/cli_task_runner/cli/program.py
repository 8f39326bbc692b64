"""Argparse-backed CLI front end with chainable command handles.

Commands are declared with a compact syntax string (``"deploy <env> [files...]"``)
and option flag specs (``("-f, --force", "skip confirmation")``). When a
command fires, its bound action is called with the positional values followed
by a dict of the options that were set.
"""

from __future__ import annotations

import argparse
import asyncio
import inspect
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

__all__ = [
    "ArgumentSpec",
    "CommandHandle",
    "OptionFlags",
    "Program",
    "parse_option_flags",
    "parse_syntax",
]

_ARGUMENT_TOKEN = re.compile(
    r"^(?P<open>[<\[])(?P<name>[^<>\[\]\s.]+)(?P<variadic>\.\.\.)?(?P<close>[>\]])$"
)
_VALUE_PLACEHOLDER = re.compile(r"\s*(?P<value><[^<>]+>|\[[^\[\]]+\])\s*$")
_FLAG = re.compile(r"^-{1,2}[A-Za-z0-9][\w-]*$")


@dataclass(frozen=True)
class ArgumentSpec:
    """One positional argument parsed from a command syntax string."""

    name: str
    required: bool
    variadic: bool = False

    @property
    def nargs(self) -> Optional[str]:
        if self.variadic:
            return "+" if self.required else "*"
        return None if self.required else "?"


@dataclass(frozen=True)
class OptionFlags:
    """Parsed form of a flag string such as ``"-e, --env <name>"``."""

    flags: Tuple[str, ...]
    key: str
    value: Optional[str] = None  # "required" | "optional" | None for booleans
    metavar: Optional[str] = None
    negated: bool = False


def parse_syntax(syntax: str) -> Tuple[str, List[ArgumentSpec]]:
    """Split ``syntax`` into the command name and its positional arguments."""
    if not isinstance(syntax, str) or not syntax.strip():
        raise ValueError("command syntax must be a non-empty string")
    name, *tokens = syntax.split()
    if name[0] in "<[-":
        raise ValueError(f"command syntax must start with a name, got '{name}'")

    arguments: List[ArgumentSpec] = []
    for index, token in enumerate(tokens):
        match = _ARGUMENT_TOKEN.match(token)
        if match is None or (match["open"] == "<") != (match["close"] == ">"):
            raise ValueError(f"invalid argument '{token}' in '{syntax}'")
        variadic = bool(match["variadic"])
        if variadic and index != len(tokens) - 1:
            raise ValueError(f"only the last argument may be variadic in '{syntax}'")
        arguments.append(
            ArgumentSpec(name=match["name"], required=match["open"] == "<", variadic=variadic)
        )
    return name, arguments


def parse_option_flags(flags: str) -> OptionFlags:
    """Parse a commander-style flag string into argparse ingredients."""
    if not isinstance(flags, str) or not flags.strip():
        raise ValueError("option flags must be a non-empty string")
    value = metavar = None
    placeholder = _VALUE_PLACEHOLDER.search(flags)
    if placeholder is not None:
        raw = placeholder["value"]
        value = "required" if raw.startswith("<") else "optional"
        metavar = raw[1:-1]
        flags = flags[: placeholder.start()]

    names = tuple(f for f in re.split(r"[\s,|]+", flags.strip()) if f)
    if not names or not all(_FLAG.match(f) for f in names):
        raise ValueError(f"invalid option flags '{flags.strip()}'")
    long_names = [f for f in names if f.startswith("--")]
    primary = (long_names[0] if long_names else names[0]).lstrip("-")

    negated = value is None and primary.startswith("no-")
    if negated:
        primary = primary[3:]
    return OptionFlags(
        flags=names,
        key=primary.replace("-", "_"),
        value=value,
        metavar=metavar,
        negated=negated,
    )


class CommandHandle:
    """Registration handle for a single sub-command."""

    def __init__(
        self, name: str, parser: argparse.ArgumentParser, arguments: Sequence[ArgumentSpec]
    ) -> None:
        self.name = name
        self.arguments = tuple(arguments)
        self._parser = parser
        self._option_keys: Dict[str, None] = {}
        self._action: Optional[Callable[..., Any]] = None

        for index, argument in enumerate(self.arguments):
            kwargs: Dict[str, Any] = {"metavar": argument.name}
            if argument.nargs is not None:
                kwargs["nargs"] = argument.nargs
            parser.add_argument(f"_arg{index}", **kwargs)
        self.option("-v, --verbose", "print extra details such as the resolved configuration")

    def description(self, text: str) -> "CommandHandle":
        self._parser.description = text
        return self

    def option(self, flags: str, *spec: Any) -> "CommandHandle":
        """Register an option: ``(flags, description, default)`` or
        ``(flags, description, coerce, default)``."""
        parsed = parse_option_flags(flags)
        description = spec[0] if spec else None
        coerce: Optional[Callable[[str], Any]] = None
        default: Any = argparse.SUPPRESS
        rest = spec[1:]
        if rest and callable(rest[0]):
            coerce, rest = rest[0], rest[1:]
        if rest:
            default = rest[0]

        kwargs: Dict[str, Any] = {"dest": parsed.key, "help": description}
        if parsed.value is None:
            kwargs["action"] = "store_false" if parsed.negated else "store_true"
            kwargs["default"] = default if rest or not parsed.negated else True
        else:
            kwargs["metavar"] = parsed.metavar
            kwargs["default"] = default
            if coerce is not None:
                kwargs["type"] = coerce
            if parsed.value == "optional":
                kwargs["nargs"] = "?"
                kwargs["const"] = True
        self._parser.add_argument(*parsed.flags, **kwargs)
        self._option_keys[parsed.key] = None
        return self

    def action(self, fn: Callable[..., Any]) -> "CommandHandle":
        if not callable(fn):
            raise ValueError(f"action for command '{self.name}' must be callable")
        self._action = fn
        return self

    def invoke(self, namespace: argparse.Namespace) -> Any:
        if self._action is None:
            raise RuntimeError(f"no action bound to command '{self.name}'")
        positional = [
            getattr(namespace, f"_arg{index}", None) for index in range(len(self.arguments))
        ]
        options = {
            key: getattr(namespace, key)
            for key in self._option_keys
            if hasattr(namespace, key)
        }
        return self._action(*positional, options)


class Program:
    """Top-level CLI program holding one sub-parser per command."""

    def __init__(self, prog: Optional[str] = None, description: Optional[str] = None) -> None:
        self.parser = argparse.ArgumentParser(
            prog=prog,
            description=description,
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self._subparsers = self.parser.add_subparsers(dest="_command", metavar="<command>")
        self._commands: Dict[str, CommandHandle] = {}

    @property
    def commands(self) -> Dict[str, CommandHandle]:
        return dict(self._commands)

    def version(self, version: str) -> "Program":
        self.parser.add_argument(
            "-V", "--version", action="version", version=f"%(prog)s {version}"
        )
        return self

    def command(self, syntax: str) -> CommandHandle:
        name, arguments = parse_syntax(syntax)
        if name in self._commands:
            raise ValueError(f"command '{name}' is already registered")
        parser = self._subparsers.add_parser(
            name,
            help=syntax,
            conflict_handler="resolve",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        handle = CommandHandle(name, parser, arguments)
        self._commands[name] = handle
        return handle

    def discard(self, name: str) -> None:
        """Forget command ``name`` so it can no longer be parsed or dispatched."""
        self._commands.pop(name, None)
        self._subparsers.choices.pop(name, None)
        self._subparsers._choices_actions = [
            action for action in self._subparsers._choices_actions if action.dest != name
        ]

    async def dispatch(self, argv: Optional[Sequence[str]] = None) -> Any:
        """Parse ``argv`` and run the matching command's action.

        Returns whatever the action returns (awaited when it is awaitable), or
        ``None`` after printing help when no command was given.
        """
        return await self._run(self.parser.parse_args(argv))

    def parse(self, argv: Optional[Sequence[str]] = None) -> Any:
        # argparse may exit (--help, --version, usage errors); keep that outside the loop.
        namespace = self.parser.parse_args(argv)
        return asyncio.run(self._run(namespace))

    async def _run(self, namespace: argparse.Namespace) -> Any:
        name = getattr(namespace, "_command", None)
        if not name:
            self.parser.print_help()
            return None
        result = self._commands[name].invoke(namespace)
        if inspect.isawaitable(result):
            result = await result
        return result
