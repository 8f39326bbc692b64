"""Sequential, fail-soft execution of declarative tasks.

An execution always walks the same phases in the same order::

    welcome -> prerequisites -> configuration -> steps[0..n] -> cleanup?

Each phase yields an ``Ok``/``Failed`` outcome that only decides what gets
logged. Under ``FailurePolicy.SOFT`` a failure never stops the pipeline;
under ``FailurePolicy.FAST`` the first failure is raised once it has been
reported (cleanup still runs when the step phase had started).
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Sequence, Type

from ..exceptions import (
    CleanupFailure,
    ConfigurationFailure,
    PrerequisiteFailure,
    StepFailure,
    TaskRunnerError,
)
from ..shared import (
    Failed,
    FailurePolicy,
    Invocation,
    Ok,
    Outcome,
    Step,
    Task,
    TaskExecution,
    TaskLogger,
    ToolIdentity,
)
from ..utils.console_logger import ConsoleLogger

__all__ = ["TaskRunner", "parse_cli_args", "task_runner"]

logger = logging.getLogger(__name__)

CHECKING_PREREQUISITES = "checking prerequisites..."
PREREQUISITES_OK = "All good - moving on"
PREREQUISITES_FAILED = "Prerequisites are not satisfied"
GATHERING_CONFIGURATION = "Gathering configuration"
CONFIGURATION_RETRIEVED = "configuration retrieved"
CLEANING_UP = "cleaning up..."
CLEANUP_DONE = "done !"


def parse_cli_args(args: Sequence[Any]) -> Invocation:
    """Return the invocation for raw handler arguments ``(*positional, options)``."""
    return Invocation.from_args(args)


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


async def _call(fn: Callable[[Any], Any], arg: Any) -> Any:
    result = fn(arg)
    if inspect.isawaitable(result):
        result = await result
    return result


def _always_true(_invocation: Invocation) -> bool:
    return True


def _empty_configuration(_invocation: Invocation) -> dict:
    return {}


class TaskRunner:
    """Runs tasks against a task logger on behalf of one CLI tool."""

    def __init__(
        self,
        logger: Optional[TaskLogger] = None,
        *,
        package_name: str = "",
        version: str = "",
        failure_policy: FailurePolicy = FailurePolicy.SOFT,
    ) -> None:
        self.logger = logger if logger is not None else ConsoleLogger()
        self.package_name = package_name
        self.version = version
        self.failure_policy = FailurePolicy(failure_policy)

    @property
    def fail_fast(self) -> bool:
        return self.failure_policy is FailurePolicy.FAST

    def handler(self, task: Task) -> Callable[..., Awaitable[TaskExecution]]:
        """Return the CLI action callable for ``task``."""

        async def run_task(*args: Any) -> TaskExecution:
            return await self.execute(task, args)

        run_task.__name__ = f"run_{task.name}"
        return run_task

    async def execute(self, task: Task, raw_args: Sequence[Any]) -> TaskExecution:
        execution = TaskExecution(task_name=task.name)
        identity = ToolIdentity(
            package_name=self.package_name,
            version=self.version,
            script_name=task.name,
        )
        self.logger.welcome(identity, task.start_message)

        invocation = parse_cli_args(raw_args)
        logger.debug(
            "Task %s invoked with %d positional argument(s)",
            task.name,
            len(invocation.positional_args),
        )

        execution.prerequisites = await self._check_prerequisites(task, invocation)
        self._raise_if_fast(execution.prerequisites, PrerequisiteFailure)

        execution.configuration = await self._gather_configuration(task, invocation)
        self._raise_if_fast(execution.configuration, ConfigurationFailure)
        configuration = (
            execution.configuration.value
            if isinstance(execution.configuration, Ok)
            else None
        )

        try:
            for index, step in enumerate(task.steps):
                outcome = await self._run_step(configuration, step)
                execution.steps.append(outcome)
                if self.fail_fast and isinstance(outcome, Failed):
                    raise StepFailure(
                        index, step.start_message, outcome.message
                    ) from outcome.error
        finally:
            if task.cleanup is not None:
                execution.cleanup = await self._clean_up(task.cleanup, configuration)

        self._raise_if_fast(execution.cleanup, CleanupFailure)
        if execution.failed:
            logger.info(
                "Task %s finished with %d failure(s)", task.name, len(execution.failures)
            )
        return execution

    async def _check_prerequisites(self, task: Task, invocation: Invocation) -> Outcome:
        self.logger.start_step(CHECKING_PREREQUISITES)
        checker = task.prerequisite_checker or _always_true
        try:
            proceed = await _call(checker, invocation)
        except Exception as exc:
            return self._report(_describe(exc), exc)
        if not proceed:
            return self._report(PREREQUISITES_FAILED, PrerequisiteFailure())
        self.logger.end_step(PREREQUISITES_OK)
        return Ok(True)

    async def _gather_configuration(self, task: Task, invocation: Invocation) -> Outcome:
        self.logger.start_step(GATHERING_CONFIGURATION)
        configurator = task.configurator or _empty_configuration
        try:
            configuration = await _call(configurator, invocation)
        except Exception as exc:
            outcome: Outcome = self._report(_describe(exc), exc)
        else:
            if invocation.verbose:
                self.logger.log(configuration)
            outcome = Ok(configuration)
        self.logger.end_step(CONFIGURATION_RETRIEVED)
        return outcome

    async def _run_step(self, configuration: Any, step: Step) -> Outcome:
        self.logger.start_step(step.start_message)
        try:
            await _call(step.run, configuration)
        except Exception as exc:
            outcome: Outcome = self._report(step.error_message or _describe(exc), exc)
        else:
            outcome = Ok()
        self.logger.end_step(step.completion_message)
        return outcome

    async def _clean_up(self, cleanup: Callable[[Any], Any], configuration: Any) -> Outcome:
        self.logger.log(CLEANING_UP)
        try:
            await _call(cleanup, configuration)
        except Exception as exc:
            return self._report(_describe(exc), CleanupFailure(_describe(exc)), cause=exc)
        self.logger.success(CLEANUP_DONE)
        return Ok()

    def _report(
        self, message: str, error: BaseException, cause: Optional[BaseException] = None
    ) -> Failed:
        if cause is not None:
            error.__cause__ = cause
        self.logger.error(message, error)
        return Failed(error=error, message=message)

    def _raise_if_fast(
        self, outcome: Optional[Outcome], error_type: Type[TaskRunnerError]
    ) -> None:
        if not self.fail_fast or not isinstance(outcome, Failed):
            return
        if isinstance(outcome.error, error_type):
            raise outcome.error
        raise error_type(outcome.message) from outcome.error


def task_runner(
    task: Task,
    package_name: str = "",
    version: str = "",
    logger: Optional[TaskLogger] = None,
    failure_policy: FailurePolicy = FailurePolicy.SOFT,
) -> Callable[..., Awaitable[TaskExecution]]:
    """Shortcut for ``TaskRunner(...).handler(task)``."""
    runner = TaskRunner(
        logger,
        package_name=package_name,
        version=version,
        failure_policy=failure_policy,
    )
    return runner.handler(task)
