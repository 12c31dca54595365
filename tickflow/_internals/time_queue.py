"""Min-heap queue of time-ordered pending completions."""

from __future__ import annotations

import heapq
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from tickflow._internals.validation import ensure_delay, ensure_time
from tickflow._vendor import Result


@dataclass(frozen=True)
class PendingCompletion:
    """A scheduled delivery of ``payload`` to task ``task_id``."""

    due_time: float
    sequence: int
    task_id: int
    payload: Result[Any]


class TimerQueue:
    """Pending completions ordered by (due time, insertion order).

    Equal due times fire first-scheduled, first-fired. The queue owns the
    logical clock: time only moves through ``advance_time``.
    """

    def __init__(self, *, start_time: float = 0.0) -> None:
        self._current_time = ensure_time(start_time, name="start_time")
        self._sequence = 0
        self._items: list[tuple[float, int, PendingCompletion]] = []

    @property
    def current_time(self) -> float:
        return self._current_time

    def schedule(self, delay: float, task_id: int, payload: Result[Any]) -> PendingCompletion:
        seconds = ensure_delay(delay)
        self._sequence += 1
        completion = PendingCompletion(
            due_time=self._current_time + seconds,
            sequence=self._sequence,
            task_id=task_id,
            payload=payload,
        )
        heapq.heappush(self._items, (completion.due_time, completion.sequence, completion))
        return completion

    def advance_time(self, to_time: float) -> Iterator[PendingCompletion]:
        """Return a lazy iterator over every completion due at or before ``to_time``.

        The bound is checked immediately. Each completion is removed from the
        queue as it is yielded and the clock is moved to its due time, so work
        scheduled by the consumer during iteration is measured from the firing
        time and fires in the same pass if it falls due by ``to_time``. Once
        the iterator is exhausted the clock reads ``to_time``.
        """
        target = ensure_time(to_time, name="to_time")
        if target < self._current_time:
            raise ValueError(
                f"to_time must be >= current_time ({self._current_time!r}), got {to_time!r}"
            )
        return self._drain(target)

    def _drain(self, target: float) -> Iterator[PendingCompletion]:
        while self._items and self._items[0][0] <= target:
            _, _, completion = heapq.heappop(self._items)
            self._current_time = completion.due_time
            yield completion
        self._current_time = target

    def next_due_time(self) -> float | None:
        if not self._items:
            return None
        return self._items[0][0]

    def is_empty(self) -> bool:
        return not self._items

    def __len__(self) -> int:
        return len(self._items)


__all__ = ["PendingCompletion", "TimerQueue"]
