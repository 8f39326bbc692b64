from __future__ import annotations

import logging
from typing import Any, Iterator, List, Optional, Tuple

import pytest

from cli_task_runner.shared import ToolIdentity


class RecordingLogger:
    """Task logger double that keeps every call in order."""

    def __init__(self) -> None:
        self.calls: List[Tuple[Any, ...]] = []

    def welcome(self, meta: ToolIdentity, message: Optional[str]) -> None:
        self.calls.append(("welcome", meta, message))

    def start_step(self, message: Optional[str]) -> None:
        self.calls.append(("start_step", message))

    def end_step(self, message: Optional[str]) -> None:
        self.calls.append(("end_step", message))

    def error(self, message: str, error: BaseException) -> None:
        self.calls.append(("error", message, error))

    def log(self, value: Any) -> None:
        self.calls.append(("log", value))

    def success(self, message: str) -> None:
        self.calls.append(("success", message))

    def named(self, kind: str) -> List[Tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == kind]

    def messages(self) -> List[Tuple[Any, Any]]:
        return [(call[0], call[1]) for call in self.calls if call[0] != "welcome"]


@pytest.fixture
def recorder() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    # run_cli reconfigures the root logger; keep tests independent of each other.
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
