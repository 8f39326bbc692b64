"""
Shared types used by the runner and the CLI layer.

Keeping them here lets the registration bridge and the task runner agree on
the declaration format without importing each other.
"""

from .outcome import Failed, Ok, Outcome, TaskExecution
from .types import (
    CommandDescriptor,
    Configuration,
    FailurePolicy,
    Invocation,
    OptionSpec,
    Step,
    Task,
    TaskLogger,
    ToolIdentity,
)

__all__ = [
    "CommandDescriptor",
    "Configuration",
    "FailurePolicy",
    "Failed",
    "Invocation",
    "Ok",
    "OptionSpec",
    "Outcome",
    "Step",
    "Task",
    "TaskExecution",
    "TaskLogger",
    "ToolIdentity",
]
