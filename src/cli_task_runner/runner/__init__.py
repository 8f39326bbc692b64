"""Task execution engine."""

from .task_runner import TaskRunner, parse_cli_args, task_runner

__all__ = ["TaskRunner", "parse_cli_args", "task_runner"]
