"""Structured logging utilities for cli-task-runner."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

__all__ = ["JSONFormatter", "LOG_FILE_NAME", "setup_logging"]

LOG_FILE_NAME = "cli-task-runner.jsonl"
TASK_LOGGER_NAME = "cli_task_runner.tasks"

_NOISY_THIRD_PARTY_LOGGERS = ("asyncio", "urllib3")


class JSONFormatter(logging.Formatter):
    """Format log records as JSON Lines."""

    def format(
        self, record: logging.LogRecord
    ) -> str:  # noqa: D401 - short override doc
        entry = {
            "timestamp": _to_iso_millis(datetime.now(timezone.utc)),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _LOG_RECORD_IGNORED_FIELDS:
                continue
            entry[key] = _json_safe(value)

        return json.dumps(entry)


_LOG_RECORD_IGNORED_FIELDS = {
    "name",
    "msg",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "thread",
    "threadName",
    "taskName",
    "exc_info",
    "exc_text",
    "stack_info",
    "message",
}


class _SkipTaskProgress(logging.Filter):
    """Task progress is already rendered by the console logger."""

    def filter(self, record: logging.LogRecord) -> bool:
        return not record.name.startswith(TASK_LOGGER_NAME)


def setup_logging(
    level: Union[str, int] = "INFO",
    logs_dir: Optional[Path] = None,
    debug: bool = False,
) -> Optional[Path]:
    """Configure root logging for one CLI run.

    Diagnostics go to stderr (warnings and above, everything with ``debug``).
    When ``logs_dir`` is set, every record at ``level`` or above is also
    appended as JSON to ``logs_dir/cli-task-runner.jsonl``; that path is
    returned.
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    file_level = _coerce_level(level)
    console_level = logging.DEBUG if debug else logging.WARNING
    root_logger.setLevel(min(file_level, console_level))

    for handler in _build_console_handlers(console_level):
        root_logger.addHandler(handler)

    log_path = None
    if logs_dir is not None:
        log_path = _prepare_log_file(Path(logs_dir))
        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        file_handler.setLevel(file_level)
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    _limit_third_party_noise()
    return log_path


def _coerce_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        raise ValueError(f"unknown log level: {level}")
    return resolved


def _prepare_log_file(logs_dir: Path) -> Path:
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir / LOG_FILE_NAME


def _build_console_handlers(console_level: int) -> List[logging.Handler]:
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(
        logging.Formatter("%(levelname)s %(name)s: %(message)s")
    )
    console_handler.addFilter(_SkipTaskProgress())
    return [console_handler]


def _limit_third_party_noise() -> None:
    for name in _NOISY_THIRD_PARTY_LOGGERS:
        noisy_logger = logging.getLogger(name)
        noisy_logger.setLevel(logging.WARNING)


def _to_iso_millis(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def _json_safe(value: object) -> object:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value
