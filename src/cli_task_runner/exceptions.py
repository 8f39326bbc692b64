"""
Common exception hierarchy for cli-task-runner.

Prerequisite, configuration, step and cleanup failures are normally reported
through the task logger and swallowed; they are only raised when a runner is
configured to fail fast. Registration failures are always fatal at startup.
"""

from __future__ import annotations

from typing import Optional


class TaskRunnerError(Exception):
    """Base exception for all cli-task-runner errors."""

    pass


class PrerequisiteFailure(TaskRunnerError):
    """Raised when the prerequisite checker returns falsy or raises."""

    def __init__(self, message: str = "Prerequisites are not satisfied") -> None:
        super().__init__(message)


class ConfigurationFailure(TaskRunnerError):
    """Raised when the configurator raises."""

    pass


class StepFailure(TaskRunnerError):
    """Raised when a single step's ``run`` raises."""

    def __init__(self, step_index: int, start_message: str, message: str) -> None:
        super().__init__(f"step {step_index} ({start_message}) failed: {message}")
        self.step_index = step_index
        self.start_message = start_message
        self.message = message


class CleanupFailure(TaskRunnerError):
    """Raised when the task cleanup routine raises."""

    pass


class RegistrationFailure(TaskRunnerError):
    """Raised at startup when a command descriptor is malformed."""

    def __init__(self, message: str, syntax: Optional[str] = None) -> None:
        label = f"'{syntax}': " if syntax else ""
        super().__init__(f"cannot register command {label}{message}")
        self.syntax = syntax
        self.reason = message


class CommandFailed(TaskRunnerError):
    """Raised by the shell helpers when a command exits non-zero."""

    def __init__(self, command: str, code: int, output: str = "") -> None:
        super().__init__(output.strip() or f"command failed with code {code}: {command}")
        self.command = command
        self.code = code
        self.output = output
