"""cli-task-runner public API surface.

Tools declare their commands as ``CommandDescriptor`` records whose action is
a ``Task``; ``run_cli`` registers them and runs the selected task.
Everything not re-exported here should be considered internal.
"""

from .cli import Program, register_command, register_commands, run_cli
from .exceptions import (
    CleanupFailure,
    CommandFailed,
    ConfigurationFailure,
    PrerequisiteFailure,
    RegistrationFailure,
    StepFailure,
    TaskRunnerError,
)
from .runner import TaskRunner, parse_cli_args, task_runner
from .shared import (
    CommandDescriptor,
    FailurePolicy,
    Invocation,
    Step,
    Task,
    TaskExecution,
    TaskLogger,
    ToolIdentity,
)
from .utils.console_logger import ConsoleLogger
from .version import __version__

__all__ = [
    "CleanupFailure",
    "CommandDescriptor",
    "CommandFailed",
    "ConfigurationFailure",
    "ConsoleLogger",
    "FailurePolicy",
    "Invocation",
    "PrerequisiteFailure",
    "Program",
    "RegistrationFailure",
    "Step",
    "StepFailure",
    "Task",
    "TaskExecution",
    "TaskLogger",
    "TaskRunner",
    "TaskRunnerError",
    "ToolIdentity",
    "__version__",
    "parse_cli_args",
    "register_command",
    "register_commands",
    "run_cli",
    "task_runner",
]
