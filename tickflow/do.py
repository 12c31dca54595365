"""
The do decorator for tickflow.

This module provides the @do decorator that converts generator functions
into factories of lazy Programs.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Generator
from functools import wraps
from typing import Any, Generic, ParamSpec, TypeVar

from tickflow.program import EffectGenerator, GeneratorProgram, Program

P = ParamSpec("P")
T = TypeVar("T")


class DoFunction(Generic[P, T]):
    """Callable returned by ``@do``; each call builds a new Program."""

    def __init__(self, func: Callable[P, EffectGenerator[T]]) -> None:
        @wraps(func)
        def generator_wrapper(
            *args: P.args, **kwargs: P.kwargs
        ) -> Generator[Any, Any, T]:
            gen_or_value = func(*args, **kwargs)
            if not inspect.isgenerator(gen_or_value):
                return gen_or_value
            return (yield from gen_or_value)

        self._generator_wrapper = generator_wrapper
        self.original_func = func

        for attr in ("__doc__", "__module__", "__name__", "__qualname__", "__annotations__"):
            value = getattr(func, attr, None)
            if value is not None:
                setattr(self, attr, value)

        try:
            signature = inspect.signature(func)
        except (TypeError, ValueError):
            signature = None
        if signature is not None:
            setattr(self, "__signature__", signature)

    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> Program[T]:
        wrapper = self._generator_wrapper
        return GeneratorProgram(
            lambda: wrapper(*args, **kwargs),
            name=getattr(self, "__name__", None),
        )

    def __repr__(self) -> str:
        return f"<do {getattr(self, '__qualname__', self.original_func)!r}>"


def do(func: Callable[P, EffectGenerator[T]]) -> DoFunction[P, T]:
    """
    Decorator that converts a generator function into a Program factory.

    Calling the decorated function runs nothing: it returns a Program that
    the scheduler turns into a fresh generator on every submission, so the
    same Program can be submitted more than once.

    Inside the body:
    - ``yield Delay(d)`` suspends the task without blocking the thread.
    - ``value = yield other()`` awaits another program inline; its exception
      is raised at the ``yield`` and can be caught with try/except.
    - ``now = yield GetTime()`` reads the logical clock.

    Usage:
        @do
        def get_all_data() -> EffectGenerator[str]:
            yield Delay(10000)
            return "Found Data"

        handle = scheduler.submit(get_all_data())
    """

    return DoFunction(func)


__all__ = ["DoFunction", "do"]
