"""Declarative task and command data structures shared across layers."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    Awaitable,
    Callable,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    Union,
)

__all__ = [
    "CommandDescriptor",
    "Configuration",
    "FailurePolicy",
    "Invocation",
    "OptionSpec",
    "Step",
    "Task",
    "TaskLogger",
    "ToolIdentity",
]

# Opaque to the engine: whatever the configurator returns.
Configuration = Any
OptionSpec = Tuple[Any, ...]

MaybeAwaitable = Union[Awaitable[Any], Any]
StepCallable = Callable[[Configuration], MaybeAwaitable]
InvocationCallable = Callable[["Invocation"], MaybeAwaitable]


class FailurePolicy(str, Enum):
    """How a task execution reacts to a failed phase."""

    SOFT = "soft"
    FAST = "fast"


@dataclass(frozen=True)
class ToolIdentity:
    """Tool metadata reported in the welcome banner of every task."""

    package_name: str = ""
    version: str = ""
    script_name: str = ""


@dataclass(frozen=True)
class Invocation:
    """Positional arguments and options derived from one CLI call."""

    positional_args: Tuple[Any, ...] = ()
    options: Mapping[str, Any] = field(default_factory=dict)

    @property
    def verbose(self) -> bool:
        return bool(self.options.get("verbose"))

    @classmethod
    def from_args(cls, args: Sequence[Any]) -> "Invocation":
        """Split raw handler arguments: the last one is always the options."""
        if not args:
            return cls()
        *positional, options = args
        if isinstance(options, argparse.Namespace):
            options = vars(options)
        if not isinstance(options, Mapping):
            raise TypeError(
                f"last CLI argument must be an options mapping, got {type(options).__name__}"
            )
        return cls(positional_args=tuple(positional), options=dict(options))


@dataclass(frozen=True)
class Step:
    """One ordered unit of work inside a task.

    ``run`` receives the task configuration and may be a plain function or a
    coroutine function. ``error_message`` replaces the raised error's message
    when the failure is reported.
    """

    start_message: str
    run: StepCallable
    error_message: Optional[str] = None
    completion_message: Optional[str] = None

    def __post_init__(self) -> None:
        if not callable(self.run):
            raise ValueError(f"step '{self.start_message}' has no callable run")


@dataclass(frozen=True)
class Task:
    """A named, declarative execution unit.

    Tasks are built once at startup and never mutated; each CLI invocation
    creates a new execution of the same declaration.
    """

    name: str
    steps: Sequence[Step]
    start_message: Optional[str] = None
    prerequisite_checker: Optional[InvocationCallable] = None
    configurator: Optional[InvocationCallable] = None
    cleanup: Optional[StepCallable] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("task name must not be empty")
        steps = tuple(self.steps)
        for index, step in enumerate(steps):
            if not isinstance(step, Step):
                raise ValueError(
                    f"task '{self.name}': step {index} is {type(step).__name__}, expected Step"
                )
        object.__setattr__(self, "steps", steps)


@dataclass(frozen=True)
class CommandDescriptor:
    """Declarative binding of a CLI syntax, option flags and a task."""

    syntax: str
    action: Task
    options: Sequence[OptionSpec] = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CommandDescriptor":
        """Build a descriptor from a plain ``{"syntax", "options", "action"}`` dict."""
        return cls(
            syntax=data.get("syntax"),  # type: ignore[arg-type]
            action=data.get("action"),  # type: ignore[arg-type]
            options=tuple(data.get("options") or ()),
        )


class TaskLogger(Protocol):
    """Sink for the observable events of a task execution."""

    def welcome(self, meta: ToolIdentity, message: Optional[str]) -> None: ...

    def start_step(self, message: Optional[str]) -> None: ...

    def end_step(self, message: Optional[str]) -> None: ...

    def error(self, message: str, error: BaseException) -> None: ...

    def log(self, value: Any) -> None: ...

    def success(self, message: str) -> None: ...
