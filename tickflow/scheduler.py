"""Single-threaded cooperative scheduler.

Tasks run synchronously until they yield a ``Delay``; the delay is parked in
the ``TimerQueue`` and control returns to whoever drove the scheduler. Time
only moves inside ``run_until_idle`` and ``await_result``, which drain due
completions and resume the waiting tasks one at a time.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Generator, Iterator
from typing import Any

from tickflow._internals.time_queue import PendingCompletion, TimerQueue
from tickflow._internals.validation import ensure_time
from tickflow._vendor import Err, FrozenDict, Ok, Result, trace_err
from tickflow.do import DoFunction
from tickflow.effects import DelayEffect, GetTimeEffect
from tickflow.errors import InterpreterInvariantError, ResultNotReady, TaskFault
from tickflow.program import GeneratorProgram, Program
from tickflow.task import TaskHandle, TaskRecord, TaskState

logger = logging.getLogger(__name__)

TimeSource = Callable[[], float]

_UNOBSERVED_GUIDANCE = (
    "Observe every task outcome with one of:\n"
    "  - scheduler.await_result(handle)\n"
    "  - scheduler.await_result_safe(handle)\n"
    "  - value = yield handle  (inside another task, with try/except)"
)


def _to_generator(body: Any) -> tuple[Generator[Any, Any, Any], str | None]:
    if isinstance(body, GeneratorProgram):
        return body.to_generator(), body.name
    if isinstance(body, Program):
        return body.to_generator(), None
    if isinstance(body, DoFunction):
        return _to_generator(body())
    if inspect.isgenerator(body):
        return body, body.__name__
    raise TypeError(
        f"task body must be a Program, a @do function or a generator, got {type(body).__name__}"
    )


class Scheduler:
    """Cooperative executor for ``@do`` programs over a logical clock.

    Args:
        start_time: Initial logical time.
        time_source: Optional host clock. When set, time never advances past
            ``time_source()`` unless an explicit ``until`` or ``budget`` says so.
        warn_on_unobserved_faults: Log a warning from ``shutdown()`` when
            faulted tasks were never observed.
    """

    def __init__(
        self,
        *,
        start_time: float = 0.0,
        time_source: TimeSource | None = None,
        warn_on_unobserved_faults: bool = True,
    ) -> None:
        self._queue = TimerQueue(start_time=start_time)
        self._time_source = time_source
        self._warn_on_unobserved_faults = warn_on_unobserved_faults
        self._next_task_id = 1
        self._tasks: dict[int, TaskRecord] = {}
        self._current: TaskRecord | None = None

    def __enter__(self) -> Scheduler:
        return self

    def __exit__(self, ty, val, tb) -> None:
        self.shutdown()

    @property
    def current_time(self) -> float:
        return self._queue.current_time

    @property
    def pending_count(self) -> int:
        return len(self._queue)

    # --- Submission

    def submit(self, body: Any, *, name: str | None = None) -> TaskHandle:
        """Start ``body`` and run it until its first suspension or completion.

        Called from inside a running task, the new task is only queued: it
        stays ``CREATED`` and starts at the current logical time once the
        submitting task has yielded control back to the scheduler.
        """
        generator, default_name = _to_generator(body)
        task_id = self._next_task_id
        self._next_task_id += 1

        record = TaskRecord(
            task_id=task_id,
            name=name or default_name or f"task-{task_id}",
            frames=[generator],
        )
        self._tasks[task_id] = record
        logger.debug("Submitted task %d (%s) at t=%g", task_id, record.name, self.current_time)

        if self._current is not None:
            record.pending = self._queue.schedule(0.0, task_id, Ok(None))
            logger.debug(
                "Task %d (%s) deferred until task %d yields",
                task_id,
                record.name,
                self._current.task_id,
            )
        else:
            record.transition(TaskState.RUNNING)
            self._step(record, Ok(None))
        return TaskHandle(task_id=task_id, name=record.name, _record=record)

    # --- Task execution

    def _step(self, record: TaskRecord, payload: Result[Any]) -> None:
        # Run ``record`` until it suspends or reaches a terminal state.
        previous, self._current = self._current, record
        try:
            while True:
                frame = record.frames[-1]
                try:
                    if isinstance(payload, Err):
                        yielded = frame.throw(payload.error)
                    else:
                        yielded = frame.send(payload.value)
                except StopIteration as stop:
                    record.frames.pop()
                    if not record.frames:
                        self._complete(record, stop.value)
                        return
                    payload = Ok(stop.value)
                    continue
                except Exception as exc:
                    record.frames.pop()
                    if not record.frames:
                        self._fault(record, exc)
                        return
                    payload = Err(exc)
                    continue

                if isinstance(yielded, DelayEffect):
                    self._suspend(record, yielded)
                    return
                if isinstance(yielded, TaskHandle):
                    outcome = self._join(record, yielded)
                    if outcome is None:
                        return
                    payload = outcome
                    continue
                payload = self._interpret(record, yielded)
        finally:
            self._current = previous

    def _interpret(self, record: TaskRecord, yielded: Any) -> Result[Any]:
        if isinstance(yielded, GetTimeEffect):
            return Ok(self.current_time)
        if isinstance(yielded, Program):
            record.frames.append(yielded.to_generator())
            return Ok(None)
        if inspect.isgenerator(yielded):
            record.frames.append(yielded)
            return Ok(None)
        return Err(
            TypeError(
                f"Task {record.task_id} yielded unsupported value {yielded!r}; "
                "yield Delay(...), GetTime(), a Program or a TaskHandle"
            )
        )

    def _join(self, record: TaskRecord, handle: TaskHandle) -> Result[Any] | None:
        # None means ``record`` is now parked on the other task.
        target = handle._record
        if target is record:
            return Err(RuntimeError(f"Task {record.task_id} cannot await itself"))
        if target.state.is_terminal:
            return self._take_outcome(target)
        if self._tasks.get(handle.task_id) is not target:
            return Err(ValueError(f"Task {handle.task_id} does not belong to this scheduler"))

        blocker: TaskRecord | None = target
        while blocker is not None and blocker.awaiting is not None:
            if blocker.awaiting == record.task_id:
                return Err(
                    RuntimeError(
                        f"Task {record.task_id} awaiting task {target.task_id} would deadlock"
                    )
                )
            blocker = self._tasks.get(blocker.awaiting)

        target.waiters.append(record)
        record.awaiting = target.task_id
        record.transition(TaskState.SUSPENDED)
        logger.debug(
            "Task %d (%s) waiting on task %d (%s)",
            record.task_id,
            record.name,
            target.task_id,
            target.name,
        )
        return None

    def _take_outcome(self, record: TaskRecord) -> Result[Any]:
        record.observed = True
        if self._tasks.get(record.task_id) is record:
            del self._tasks[record.task_id]
        if record.state is TaskState.FAULTED:
            if record.fault is None:
                raise InterpreterInvariantError(f"Task {record.task_id} faulted without a fault")
            return Err(record.fault.cause)
        return Ok(record.result)

    def _wake_waiters(self, record: TaskRecord) -> None:
        if not record.waiters:
            return
        waiters, record.waiters = record.waiters, []
        outcome = self._take_outcome(record)
        for waiter in waiters:
            waiter.awaiting = None
            waiter.pending = self._queue.schedule(0.0, waiter.task_id, outcome)
            logger.debug(
                "Task %d (%s) finished; waking task %d at t=%g",
                record.task_id,
                record.name,
                waiter.task_id,
                self.current_time,
            )

    def _suspend(self, record: TaskRecord, effect: DelayEffect) -> None:
        if record.pending is not None:
            raise InterpreterInvariantError(
                f"Task {record.task_id} already waits on completion #{record.pending.sequence}"
            )
        record.pending = self._queue.schedule(effect.seconds, record.task_id, Ok(effect.seconds))
        record.transition(TaskState.SUSPENDED)
        logger.debug(
            "Task %d (%s) suspended until t=%g",
            record.task_id,
            record.name,
            record.pending.due_time,
        )

    def _complete(self, record: TaskRecord, value: Any) -> None:
        record.transition(TaskState.COMPLETED)
        record.result = value
        logger.debug(
            "Task %d (%s) completed at t=%g", record.task_id, record.name, self.current_time
        )
        self._wake_waiters(record)

    def _fault(self, record: TaskRecord, exc: Exception) -> None:
        record.transition(TaskState.FAULTED)
        record.fault = TaskFault(record.task_id, exc, trace_err(exc))
        logger.debug(
            "Task %d (%s) faulted at t=%g: %r",
            record.task_id,
            record.name,
            self.current_time,
            exc,
        )
        self._wake_waiters(record)

    def _resume(self, completion: PendingCompletion) -> None:
        record = self._tasks.get(completion.task_id)
        if record is None or record.pending is not completion:
            logger.warning(
                "Dropping completion #%d: task %d is not waiting on it",
                completion.sequence,
                completion.task_id,
            )
            return
        record.pending = None
        record.transition(TaskState.RUNNING)
        logger.debug(
            "Resuming task %d (%s) at t=%g", record.task_id, record.name, self.current_time
        )
        self._step(record, completion.payload)

    # --- Driving the loop

    def _resolve_limit(self, until: float | None) -> float | None:
        if until is not None:
            return ensure_time(until, name="until")
        if self._time_source is not None:
            host_time = ensure_time(self._time_source(), name="time_source()")
            return max(host_time, self.current_time)
        return None

    def _completions(self, limit: float | None) -> Iterator[PendingCompletion]:
        if limit is not None:
            yield from self._queue.advance_time(limit)
            return
        while not self._queue.is_empty():
            yield from self._queue.advance_time(self._queue.next_due_time())

    def _ensure_host_context(self, operation: str) -> None:
        if self._current is not None:
            raise RuntimeError(
                f"{operation}() cannot be called from inside task {self._current.task_id}; "
                "yield its handle or program instead"
            )

    def run_until_idle(self, until: float | None = None) -> int:
        """Fire due completions and resume their tasks; return how many fired.

        Without ``until`` (and without a time source) logical time jumps from
        one due completion to the next until the timer queue is empty. With a
        limit, everything due at or before it fires and the clock ends there.
        """
        self._ensure_host_context("run_until_idle")
        limit = self._resolve_limit(until)
        if limit is not None and limit < self.current_time:
            raise ValueError(
                f"until must be >= current_time ({self.current_time!r}), got {until!r}"
            )
        fired = 0
        for completion in self._completions(limit):
            self._resume(completion)
            fired += 1
        return fired

    # --- Observing outcomes

    def await_result(self, handle: TaskHandle, budget: float | None = None) -> Any:
        """Drive the scheduler until ``handle`` finishes and return its value.

        Raises:
            TaskFault: The task body raised; ``__cause__`` is the original error.
            ResultNotReady: ``budget`` (logical time) ran out first.
        """
        self._ensure_host_context("await_result")
        record = handle._record
        if not record.state.is_terminal:
            if self._tasks.get(handle.task_id) is not record:
                raise ValueError(f"Task {handle.task_id} does not belong to this scheduler")
            if budget is None:
                limit = self._resolve_limit(None)
            else:
                seconds = ensure_time(budget, name="budget")
                if seconds < 0:
                    raise ValueError(f"budget must be >= 0, got {budget!r}")
                limit = self.current_time + seconds
                if self._time_source is not None:
                    limit = min(limit, self._resolve_limit(None))

            for completion in self._completions(limit):
                self._resume(completion)
                if record.state.is_terminal:
                    break

            if not record.state.is_terminal:
                raise ResultNotReady(handle.task_id, record.state.value, self.current_time)

        return self._observe(record)

    def await_result_safe(self, handle: TaskHandle, budget: float | None = None) -> Result[Any]:
        """Like ``await_result`` but return ``Ok(value)`` or ``Err(fault)``."""
        try:
            return Ok(self.await_result(handle, budget))
        except TaskFault as fault:
            return Err(fault)

    def _observe(self, record: TaskRecord) -> Any:
        # observed terminal tasks live on only through their handles
        outcome = self._take_outcome(record)
        if isinstance(outcome, Err):
            raise record.fault
        return outcome.value

    # --- Diagnostics

    def unobserved_faults(self) -> tuple[TaskHandle, ...]:
        return tuple(
            TaskHandle(task_id=record.task_id, name=record.name, _record=record)
            for record in self._tasks.values()
            if record.state is TaskState.FAULTED and not record.observed
        )

    def snapshot(self) -> FrozenDict:
        """Map of live task id to state."""
        return FrozenDict({task_id: record.state for task_id, record in self._tasks.items()})

    def shutdown(self) -> int:
        """Report faulted tasks nobody observed and return their count."""
        unobserved = self.unobserved_faults()
        suspended = sum(
            1 for record in self._tasks.values() if record.state is TaskState.SUSPENDED
        )
        if suspended:
            logger.debug("Shutting down with %d suspended task(s)", suspended)
        if unobserved and self._warn_on_unobserved_faults:
            details = "\n".join(
                f"  - task {handle.task_id} ({handle.name}): "
                f"{type(handle._record.fault.cause).__name__}: {handle._record.fault.cause}"
                for handle in unobserved
            )
            logger.warning(
                "%d faulted task(s) were never observed; their exceptions went unnoticed:\n"
                "%s\n%s",
                len(unobserved),
                details,
                _UNOBSERVED_GUIDANCE,
            )
        return len(unobserved)


__all__ = ["Scheduler", "TimeSource"]
