"""
Vendored minimal result types.

``Result``/``Ok``/``Err`` carry completion payloads through the timer queue
and back out of ``Scheduler.await_result_safe``. ``TraceError`` keeps the
formatted traceback of a task fault after the generator frame is gone.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar

from frozendict import frozendict

# =========================================================
# Type Vars
# =========================================================
T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class Result(Generic[T_co]):
    """Sum type representing either a successful value or an error."""

    __slots__ = ()

    def is_ok(self) -> bool:
        """Return ``True`` when the result is successful."""

        return isinstance(self, Ok)

    def is_err(self) -> bool:
        """Return ``True`` when the result represents a failure."""

        return isinstance(self, Err)

    def unwrap_err(self) -> Exception:
        """Return the error or raise ``RuntimeError`` if this is a success."""

        if isinstance(self, Err):
            return self.error
        raise RuntimeError("Called unwrap_err on Ok value")

# =========================================================
# Result / Error
# =========================================================
@dataclass(frozen=True)
class TraceError(Exception):
    """Exception with formatted traceback."""

    exc: BaseException
    tb: str

    def __str__(self) -> str:
        lines: list[str] = []
        lines.append(f"[{self.exc.__class__.__name__}] {self.exc}")
        if self.tb:
            lines.append("----- Exception Traceback -----")
            lines.append(self.tb.rstrip())
        return "\n".join(lines)


def trace_err(e: BaseException) -> TraceError:
    """Create TraceError from exception."""
    tb_str = "".join(traceback.format_exception(e.__class__, e, e.__traceback__))
    return TraceError(e, tb_str)


@dataclass(frozen=True)
class Ok(Result[T], Generic[T]):
    """Success result."""
    value: T


@dataclass(frozen=True)
class Err(Result[NoReturn]):
    """Error result."""
    error: Exception


FrozenDict = frozendict

__all__ = [
    "Err",
    "FrozenDict",
    "Ok",
    "Result",
    "TraceError",
    "trace_err",
]
