"""Effects a task body can yield.

Usage:
    @do
    def get_all_data():
        yield Delay(10000)  # suspends the task, never the thread
        return "Found Data"

    @do
    def run():
        data = yield get_all_data()
        now = yield GetTime()
        return f"{data} at {now}"
"""

from __future__ import annotations

from dataclasses import dataclass

from tickflow._internals.validation import ensure_delay


class EffectBase:
    """Marker base for values the scheduler interprets when a body yields them."""

    __slots__ = ()


@dataclass(frozen=True)
class DelayEffect(EffectBase):
    """Suspend the current task for ``seconds`` of logical time.

    The task resumes once the scheduler's clock reaches the due time. The
    yield expression evaluates to the elapsed duration.
    """

    seconds: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "seconds", ensure_delay(self.seconds, name="seconds"))


@dataclass(frozen=True)
class GetTimeEffect(EffectBase):
    """Read the scheduler's current logical time without suspending."""


def delay(seconds: float) -> DelayEffect:
    return DelayEffect(seconds=seconds)


def get_time() -> GetTimeEffect:
    return GetTimeEffect()


def Delay(seconds: float) -> DelayEffect:  # noqa: N802
    return DelayEffect(seconds=seconds)


def GetTime() -> GetTimeEffect:  # noqa: N802
    return GetTimeEffect()


__all__ = [
    "Delay",
    "DelayEffect",
    "EffectBase",
    "GetTime",
    "GetTimeEffect",
    "delay",
    "get_time",
]
