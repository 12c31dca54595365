"""
Program class for tickflow.

A Program is a lazy, reusable description of a task body. Nothing runs until
the scheduler asks for a fresh generator with ``to_generator()``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Generator
from dataclasses import dataclass, field
from typing import Any, Generic, TypeAlias, TypeVar

from tickflow.effects import EffectBase

T = TypeVar("T")

EffectGenerator: TypeAlias = Generator["EffectBase | Program[Any]", Any, T]


class Program(ABC, Generic[T]):
    """Lazy computation that yields effects or nested programs and returns ``T``."""

    @abstractmethod
    def to_generator(self) -> Generator[EffectBase | Program[Any], Any, T]:
        """Create a fresh generator for one execution of this program."""

    @staticmethod
    def pure(value: T) -> Program[T]:
        def pure_generator() -> Generator[Any, Any, T]:
            return value
            yield  # pragma: no cover

        return GeneratorProgram(pure_generator)


@dataclass(frozen=True)
class GeneratorProgram(Program[T]):
    """Program backed by a zero-argument generator factory."""

    factory: Callable[[], Generator[Any, Any, T]]
    name: str | None = field(default=None, compare=False)

    def to_generator(self) -> Generator[Any, Any, T]:
        return self.factory()


__all__ = ["EffectGenerator", "GeneratorProgram", "Program"]
