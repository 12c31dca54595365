"""Task bookkeeping for the cooperative scheduler."""

from __future__ import annotations

from collections.abc import Generator
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from tickflow.errors import InterpreterInvariantError

if TYPE_CHECKING:
    from tickflow._internals.time_queue import PendingCompletion
    from tickflow.errors import TaskFault


class TaskState(Enum):
    CREATED = "created"
    RUNNING = "running"
    SUSPENDED = "suspended"
    COMPLETED = "completed"
    FAULTED = "faulted"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskState.COMPLETED, TaskState.FAULTED)


_ALLOWED_TRANSITIONS: dict[TaskState, frozenset[TaskState]] = {
    TaskState.CREATED: frozenset({TaskState.RUNNING}),
    TaskState.RUNNING: frozenset(
        {TaskState.SUSPENDED, TaskState.COMPLETED, TaskState.FAULTED}
    ),
    TaskState.SUSPENDED: frozenset({TaskState.RUNNING}),
    TaskState.COMPLETED: frozenset(),
    TaskState.FAULTED: frozenset(),
}


@dataclass
class TaskRecord:
    task_id: int
    name: str
    # innermost generator last; nested programs push a frame
    frames: list[Generator[Any, Any, Any]] = field(default_factory=list, repr=False)
    state: TaskState = TaskState.CREATED
    result: Any = None
    fault: TaskFault | None = None
    pending: PendingCompletion | None = None
    # task id this task is suspended on, if it yielded a handle
    awaiting: int | None = None
    waiters: list[TaskRecord] = field(default_factory=list, repr=False)
    observed: bool = False

    def transition(self, new_state: TaskState) -> None:
        if new_state not in _ALLOWED_TRANSITIONS[self.state]:
            raise InterpreterInvariantError(
                f"Task {self.task_id} cannot move from {self.state.value} to {new_state.value}"
            )
        self.state = new_state


@dataclass(frozen=True)
class TaskHandle:
    """Caller-facing handle for a submitted task."""

    task_id: int
    name: str
    _record: TaskRecord = field(repr=False, compare=False)

    @property
    def state(self) -> TaskState:
        return self._record.state

    @property
    def done(self) -> bool:
        return self._record.state.is_terminal


__all__ = ["TaskHandle", "TaskRecord", "TaskState"]
