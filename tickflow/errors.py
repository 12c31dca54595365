"""Error types raised by tickflow."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tickflow._vendor import TraceError


class TickflowError(Exception):
    """Base class for errors raised by tickflow."""


class InvalidDelay(TickflowError, ValueError):
    """Raised when a delay duration is negative or not finite."""

    def __init__(self, delay: object) -> None:
        self.delay = delay
        super().__init__(f"delay must be a finite number >= 0, got {delay!r}")


class TaskFault(TickflowError):
    """Wrapper for an exception raised inside a task body.

    The fault is captured when the body raises and stored on the task until a
    caller observes it through ``Scheduler.await_result``.

    Attributes:
        task_id: Identifier of the faulted task.
        cause: The original exception raised by the body.
        trace: Formatted traceback captured at the point of failure.
    """

    def __init__(
        self,
        task_id: int,
        cause: BaseException,
        trace: TraceError | None = None,
    ) -> None:
        self.task_id = task_id
        self.cause = cause
        self.trace = trace
        super().__init__(f"Task {task_id} faulted: {type(cause).__name__}: {cause}")
        self.__cause__ = cause

    def format_full(self) -> str:
        """Format the fault together with the captured traceback."""
        if self.trace is None:
            return str(self)
        return f"{self}\n{self.trace}"


class ResultNotReady(TickflowError, TimeoutError):
    """Raised when ``await_result`` runs out of time budget before the task ends.

    Hint: call ``run_until_idle()`` or pass a larger ``budget``.
    """

    def __init__(self, task_id: int, state: object, current_time: float) -> None:
        self.task_id = task_id
        self.state = state
        self.current_time = current_time
        super().__init__(
            f"Task {task_id} is still {state} at t={current_time:g}\n"
            "Hint: advance time with `run_until_idle()` or pass a larger `budget`"
        )


class InterpreterInvariantError(TickflowError):
    """Raised when the scheduler reaches an invalid state."""


__all__ = [
    "InterpreterInvariantError",
    "InvalidDelay",
    "ResultNotReady",
    "TaskFault",
    "TickflowError",
]
