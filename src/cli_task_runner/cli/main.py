"""CLI entrypoint for tools declared as a list of command descriptors."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence

from rich.console import Console
from rich.markup import escape

from ..config import load_config
from ..exceptions import RegistrationFailure, TaskRunnerError
from ..shared import TaskLogger
from ..utils.console_logger import ConsoleLogger
from ..utils.structured_logging import setup_logging
from .program import Program
from .register import DescriptorLike, register_commands

__all__ = ["EXIT_INTERRUPTED", "EXIT_REGISTRATION", "EXIT_TASK_FAILED", "run_cli"]

logger = logging.getLogger(__name__)

EXIT_TASK_FAILED = 1
EXIT_REGISTRATION = 2
EXIT_INTERRUPTED = 130


def run_cli(
    commands: Iterable[DescriptorLike],
    version: str,
    *,
    package_name: Optional[str] = None,
    description: Optional[str] = None,
    argv: Optional[Sequence[str]] = None,
    config_path: Optional[Path] = None,
    console: Optional[Console] = None,
    task_logger: Optional[TaskLogger] = None,
) -> int:
    """Register ``commands``, parse ``argv`` and run the selected task.

    Returns the process exit code: 0 once the task ran (failed phases are
    reported, not fatal, unless the failure policy is ``fast``), 1 when a task
    failure escaped, 2 when settings are invalid or a descriptor could not be
    registered or the arguments could not be parsed (argparse has already
    printed the usage message). ``--help`` and ``--version`` return 0.
    """
    console = console or Console()
    try:
        settings = load_config(yaml_path=config_path)
        log_settings = settings["logging"]
        setup_logging(
            log_settings["level"],
            logs_dir=log_settings.get("logs_dir"),
            debug=log_settings["debug"],
        )
    except ValueError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        return EXIT_REGISTRATION

    task_logger = task_logger or ConsoleLogger(
        console, show_tracebacks=settings["console"]["show_tracebacks"]
    )

    program = Program(prog=package_name, description=description).version(version)
    try:
        register_commands(
            program,
            commands,
            package_name=package_name or program.parser.prog,
            version=version,
            task_logger=task_logger,
            failure_policy=settings["failure_policy"],
        )
    except RegistrationFailure as exc:
        logger.error("Startup aborted: %s", exc)
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return EXIT_REGISTRATION

    try:
        program.parse(argv)
    except TaskRunnerError as exc:
        logger.error("Task aborted: %s", exc)
        return EXIT_TASK_FAILED
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted[/yellow]")
        return EXIT_INTERRUPTED
    except SystemExit as exc:
        # argparse exits for --help, --version and usage errors
        return _exit_code(exc)
    return 0


def _exit_code(exc: SystemExit) -> int:
    if exc.code is None:
        return 0
    if isinstance(exc.code, int):
        return exc.code
    return EXIT_REGISTRATION
