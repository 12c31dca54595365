"""
tickflow - cooperative tasks with non-blocking delays over a logical clock.

Example:
    >>> from tickflow import Delay, Scheduler, do
    >>>
    >>> @do
    ... def get_all_data():
    ...     yield Delay(10000)
    ...     return "Found Data"
    >>>
    >>> scheduler = Scheduler()
    >>> handle = scheduler.submit(get_all_data())
    >>> scheduler.run_until_idle()
    1
    >>> scheduler.await_result(handle)
    'Found Data'
"""

from tickflow._internals import PendingCompletion, TimerQueue
from tickflow._vendor import Err, FrozenDict, Ok, Result, TraceError
from tickflow.do import DoFunction, do
from tickflow.effects import (
    Delay,
    DelayEffect,
    EffectBase,
    GetTime,
    GetTimeEffect,
    delay,
    get_time,
)
from tickflow.errors import (
    InterpreterInvariantError,
    InvalidDelay,
    ResultNotReady,
    TaskFault,
    TickflowError,
)
from tickflow.program import EffectGenerator, GeneratorProgram, Program
from tickflow.scheduler import Scheduler, TimeSource
from tickflow.task import TaskHandle, TaskState

__all__ = [
    "Delay",
    "DelayEffect",
    "DoFunction",
    "EffectBase",
    "EffectGenerator",
    "Err",
    "FrozenDict",
    "GeneratorProgram",
    "GetTime",
    "GetTimeEffect",
    "InterpreterInvariantError",
    "InvalidDelay",
    "Ok",
    "PendingCompletion",
    "Program",
    "Result",
    "ResultNotReady",
    "Scheduler",
    "TaskFault",
    "TaskHandle",
    "TaskState",
    "TickflowError",
    "TimeSource",
    "TimerQueue",
    "TraceError",
    "delay",
    "do",
    "get_time",
]
