from __future__ import annotations

import math

import pytest

from tickflow import (
    Delay,
    DelayEffect,
    EffectGenerator,
    GetTime,
    GetTimeEffect,
    InvalidDelay,
    Program,
    do,
)


class TestDelayEffect:
    def test_delay_factory_creates_effect(self) -> None:
        effect = Delay(1.5)
        assert isinstance(effect, DelayEffect)
        assert effect.seconds == 1.5

    def test_delay_coerces_int_to_float(self) -> None:
        assert Delay(10000).seconds == 10000.0

    @pytest.mark.parametrize("value", [-1, -0.001, math.nan, math.inf])
    def test_delay_rejects_invalid_seconds(self, value: float) -> None:
        with pytest.raises(InvalidDelay):
            Delay(value)

    def test_invalid_delay_is_a_value_error(self) -> None:
        with pytest.raises(ValueError):
            Delay(-1)

    def test_delay_rejects_non_numeric(self) -> None:
        with pytest.raises(TypeError, match="seconds must be float"):
            Delay("5")  # type: ignore[arg-type]


def test_get_time_factory_creates_effect() -> None:
    assert isinstance(GetTime(), GetTimeEffect)


class TestDoDecorator:
    def test_calling_a_do_function_runs_nothing(self) -> None:
        calls: list[str] = []

        @do
        def body() -> EffectGenerator[str]:
            calls.append("ran")
            yield Delay(1)
            return "done"

        program = body()

        assert isinstance(program, Program)
        assert calls == []

    def test_each_to_generator_call_is_fresh(self) -> None:
        @do
        def body() -> EffectGenerator[int]:
            yield Delay(1)
            return 1

        program = body()
        first = program.to_generator()
        second = program.to_generator()

        assert first is not second
        assert isinstance(next(first), DelayEffect)
        assert isinstance(next(second), DelayEffect)

    def test_preserves_function_metadata(self) -> None:
        @do
        def get_all_data() -> EffectGenerator[str]:
            """Fetch data."""
            yield Delay(1)
            return "Found Data"

        assert get_all_data.__name__ == "get_all_data"
        assert get_all_data.__doc__ == "Fetch data."
        assert get_all_data().name == "get_all_data"

    def test_non_generator_function_returns_value(self) -> None:
        @do
        def plain(x: int) -> EffectGenerator[int]:
            return x * 2  # type: ignore[return-value]

        gen = plain(21).to_generator()
        with pytest.raises(StopIteration) as stop:
            next(gen)
        assert stop.value.value == 42


def test_pure_program_returns_without_yielding() -> None:
    gen = Program.pure(42).to_generator()
    with pytest.raises(StopIteration) as stop:
        next(gen)
    assert stop.value.value == 42
