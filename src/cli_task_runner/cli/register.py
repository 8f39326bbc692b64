"""Bridge from declarative command descriptors to live CLI commands.

Registering a descriptor is equivalent to::

    program.command(syntax).option(*options[0]).option(*options[1])...action(handler)

where ``handler`` runs the descriptor's task through a ``TaskRunner``.
"""

from __future__ import annotations

import logging
from functools import reduce
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Union

from ..exceptions import RegistrationFailure
from ..runner import TaskRunner
from ..shared import CommandDescriptor, FailurePolicy, Task, TaskLogger
from .program import CommandHandle, Program, parse_option_flags, parse_syntax

__all__ = ["coerce_descriptor", "register_command", "register_commands"]

logger = logging.getLogger(__name__)

DescriptorLike = Union[CommandDescriptor, Mapping[str, Any]]


def coerce_descriptor(command: DescriptorLike) -> CommandDescriptor:
    """Validate ``command`` and return it as a ``CommandDescriptor``."""
    if isinstance(command, Mapping):
        command = CommandDescriptor.from_mapping(command)
    if not isinstance(command, CommandDescriptor):
        raise RegistrationFailure(
            f"expected a command descriptor, got {type(command).__name__}"
        )

    syntax = command.syntax
    if not isinstance(syntax, str) or not syntax.strip():
        raise RegistrationFailure("missing syntax")
    if not isinstance(command.action, Task):
        raise RegistrationFailure("action must be a Task", syntax)
    for option in command.options:
        if (
            isinstance(option, (str, bytes))
            or not isinstance(option, Sequence)
            or not option
            or not isinstance(option[0], str)
        ):
            raise RegistrationFailure(
                f"option spec {option!r} must be a sequence starting with a flag string",
                syntax,
            )
    try:
        parse_syntax(syntax)
        for option in command.options:
            parse_option_flags(option[0])
    except ValueError as exc:
        raise RegistrationFailure(str(exc), syntax) from exc
    return command


def _apply_option(handle: CommandHandle, option: Sequence[Any]) -> CommandHandle:
    return handle.option(*option)


def register_command(
    program: Program, runner: TaskRunner
) -> Callable[[DescriptorLike], CommandHandle]:
    """Return a function registering one descriptor with ``program``."""

    def register(command: DescriptorLike) -> CommandHandle:
        descriptor = coerce_descriptor(command)
        try:
            handle = program.command(descriptor.syntax)
        except ValueError as exc:
            raise RegistrationFailure(str(exc), descriptor.syntax) from exc
        try:
            handle = reduce(_apply_option, descriptor.options, handle)
            handle.action(runner.handler(descriptor.action))
        except ValueError as exc:
            # a half-built command must not stay dispatchable
            program.discard(handle.name)
            raise RegistrationFailure(str(exc), descriptor.syntax) from exc
        logger.debug(
            "Registered command %s -> task %s", handle.name, descriptor.action.name
        )
        return handle

    return register


def register_commands(
    program: Program,
    commands: Iterable[DescriptorLike],
    *,
    package_name: str = "",
    version: str = "",
    task_logger: Optional[TaskLogger] = None,
    failure_policy: FailurePolicy = FailurePolicy.SOFT,
) -> List[CommandHandle]:
    """Register every descriptor, sharing one tool identity across tasks.

    Any malformed descriptor raises ``RegistrationFailure`` before a single
    command can be invoked.
    """
    runner = TaskRunner(
        task_logger,
        package_name=package_name,
        version=version,
        failure_policy=failure_policy,
    )
    descriptors = [coerce_descriptor(command) for command in commands]
    seen = set(program.commands)
    for descriptor in descriptors:
        name = parse_syntax(descriptor.syntax)[0]
        if name in seen:
            raise RegistrationFailure(
                f"command '{name}' is already registered", descriptor.syntax
            )
        seen.add(name)
    register = register_command(program, runner)
    return [register(descriptor) for descriptor in descriptors]
