"""Rich console implementation of the task logger.

Every call is also forwarded to the ``cli_task_runner.tasks`` logger so task
progress ends up in the structured log next to the rest of the run.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.traceback import Traceback

from ..shared import ToolIdentity

__all__ = ["ConsoleLogger"]

_log = logging.getLogger("cli_task_runner.tasks")


def _title(meta: ToolIdentity) -> str:
    title = " ".join(p for p in (meta.package_name, meta.version) if p)
    if meta.script_name:
        title = f"{title} • {meta.script_name}" if title else meta.script_name
    return title


class ConsoleLogger:
    """Human-readable task progress on a rich console."""

    def __init__(
        self, console: Optional[Console] = None, *, show_tracebacks: bool = False
    ) -> None:
        self.console = console or Console()
        self.show_tracebacks = show_tracebacks

    def welcome(self, meta: ToolIdentity, message: Optional[str]) -> None:
        title = _title(meta)
        self.console.print(Rule(f"[bold]{escape(title)}[/bold]" if title else ""))
        if message:
            self.console.print(escape(message))
        _log.info("Starting %s", meta.script_name, extra={"tool": title})

    def start_step(self, message: Optional[str]) -> None:
        if message:
            self.console.print(f"[cyan]›[/cyan] {escape(message)}")
        _log.info("step started: %s", message)

    def end_step(self, message: Optional[str]) -> None:
        self.console.print(f"  [green]✓[/green] {escape(message or 'done')}")
        _log.info("step ended: %s", message)

    def error(self, message: str, error: BaseException) -> None:
        self.console.print(f"  [red]✗ {escape(message)}[/red]")
        detail = str(error)
        if detail and detail != message:
            self.console.print(f"    [dim]{type(error).__name__}: {escape(detail)}[/dim]")
        if self.show_tracebacks and error.__traceback__ is not None:
            self.console.print(
                Traceback.from_exception(type(error), error, error.__traceback__)
            )
        _log.error(
            "%s",
            message,
            exc_info=(type(error), error, error.__traceback__),
        )

    def log(self, value: Any) -> None:
        # Rich pretty-prints containers; plain strings go through untouched.
        self.console.print(escape(value) if isinstance(value, str) else value)
        _log.info("%s", value)

    def success(self, message: str) -> None:
        self.console.print(f"[bold green]{escape(message)}[/bold green]")
        _log.info("%s", message)
