"""Execution of compiled machine definitions."""

from .instance import MAX_TRANSIENT_STEPS, InstanceStatus, RuntimeInstance, instantiate
from .timers import (
    AsyncioTimerService,
    ManualTimerService,
    ThreadingTimerService,
    TimerHandle,
    TimerService,
)

__all__ = [
    "instantiate",
    "RuntimeInstance",
    "InstanceStatus",
    "MAX_TRANSIENT_STEPS",
    "TimerService",
    "TimerHandle",
    "ThreadingTimerService",
    "AsyncioTimerService",
    "ManualTimerService",
]
