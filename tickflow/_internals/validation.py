"""Number checks shared by delays, deadlines and time bounds."""

from __future__ import annotations

import math

from tickflow.errors import InvalidDelay


def ensure_time(value: float, *, name: str) -> float:
    """Return ``value`` as a float, rejecting bools, non-numbers, NaN and inf."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise TypeError(f"{name} must be float, got {type(value).__name__}")
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value!r}")
    return float(value)


def ensure_delay(value: float, *, name: str = "delay") -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise TypeError(f"{name} must be float, got {type(value).__name__}")
    if not math.isfinite(value) or value < 0:
        raise InvalidDelay(value)
    return float(value)
