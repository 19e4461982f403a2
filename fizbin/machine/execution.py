"""Machine execution functionality."""

from collections.abc import Iterable, Mapping
from typing import Any

from ..core.types import Event
from ..runtime.instance import RuntimeInstance, instantiate
from ..runtime.timers import ManualTimerService, TimerService
from .builder import MachineBuilder


class MachineExecution(MachineBuilder):
    """Machine execution functionality."""

    def instantiate(
        self,
        auto_start: bool = True,
        *,
        timers: TimerService | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> RuntimeInstance:
        """Create a running instance of this machine.

        Args:
            auto_start: Start the instance immediately
            timers: Timer service for timed transitions
            context: Values overriding the initial context

        Returns:
            The new instance
        """
        return instantiate(
            self.definition, auto_start, timers=timers, context=context
        )

    def run(
        self,
        script: Iterable[str | int | float | Event],
        *,
        context: Mapping[str, Any] | None = None,
    ) -> RuntimeInstance:
        """Drive a fresh instance through a script on a virtual clock.

        Strings and :class:`Event` objects are sent as events; numbers
        advance the clock by that many milliseconds, firing any timers
        that fall due.

        Example:
            machine.run(["motion", 5000, "motion"])

        Returns:
            The instance after the script, left running
        """
        clock = ManualTimerService()
        instance = self.instantiate(timers=clock, context=context)
        for step in script:
            if isinstance(step, bool):
                raise TypeError(f"Invalid script step: {step!r}")
            if isinstance(step, (int, float)):
                clock.advance(step)
            else:
                instance.send(step)
        return instance
