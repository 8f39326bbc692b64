"""Phase outcomes and the per-execution report built from them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, List, Optional, TypeVar, Union

__all__ = ["Failed", "Ok", "Outcome", "TaskExecution"]

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T = None  # type: ignore[assignment]

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failed:
    error: BaseException
    message: str = ""

    @property
    def ok(self) -> bool:
        return False


Outcome = Union[Ok[Any], Failed]


@dataclass
class TaskExecution:
    """What happened during one run of a task.

    ``cleanup`` stays ``None`` when the task declares no cleanup routine or the
    step phase never started.
    """

    task_name: str
    prerequisites: Optional[Outcome] = None
    configuration: Optional[Outcome] = None
    steps: List[Outcome] = field(default_factory=list)
    cleanup: Optional[Outcome] = None

    @property
    def failures(self) -> List[Failed]:
        phases = [self.prerequisites, self.configuration, *self.steps, self.cleanup]
        return [p for p in phases if isinstance(p, Failed)]

    @property
    def failed(self) -> bool:
        return bool(self.failures)
