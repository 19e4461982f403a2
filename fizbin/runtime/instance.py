"""Running instances of compiled machine definitions."""

import copy
import itertools
import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from enum import Enum
from typing import Any

from ..core.context import Context
from ..core.exceptions import ConfigError
from ..core.types import (
    Action,
    CompiledDefinition,
    Event,
    StateDefinition,
    Transition,
)
from .timers import ThreadingTimerService, TimerHandle, TimerService

logger = logging.getLogger(__name__)

# Upper bound on transitions taken while settling after a single step
MAX_TRANSIENT_STEPS = 100

TransitionListener = Callable[["RuntimeInstance", Transition, Event], None]


class InstanceStatus(Enum):
    """Lifecycle of a runtime instance."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    STOPPED = "stopped"


class RuntimeInstance:
    """A running state machine.

    Instances own their context and current state; the definition they
    run is shared and never modified. Events are delivered with
    :meth:`send`, timed transitions are scheduled with the instance's
    timer service, and :meth:`stop` cancels everything pending.

    Events that no transition of the current state accepts are ignored.
    """

    def __init__(
        self,
        definition: CompiledDefinition,
        *,
        timers: TimerService | None = None,
        context: Mapping[str, Any] | None = None,
    ):
        self.definition = definition
        self.timers = timers if timers is not None else ThreadingTimerService()

        values = copy.deepcopy(dict(definition.context))
        if context:
            values.update(context)
        self.context = Context(values=values)

        self._state: str | None = None
        self._status = InstanceStatus.NOT_STARTED
        self._pending: dict[int, tuple[Transition, TimerHandle]] = {}
        self._timer_keys = itertools.count()
        self._listeners: list[TransitionListener] = []
        self._lock = threading.RLock()

    @property
    def state(self) -> str | None:
        """Name of the current state, None before start."""
        return self._state

    @property
    def status(self) -> InstanceStatus:
        return self._status

    @property
    def is_running(self) -> bool:
        return self._status is InstanceStatus.RUNNING

    @property
    def history(self) -> list[str]:
        """States entered so far, in order."""
        return list(self.context.state_history)

    @property
    def in_terminal_state(self) -> bool:
        return self._state is not None and self.definition.is_terminal(self._state)

    @property
    def events(self) -> list[str]:
        """Events the current state has transitions for."""
        if not self.is_running or self.in_terminal_state:
            return []
        return self._current().accepted_events

    @property
    def pending_timers(self) -> int:
        return len(self._pending)

    def can(self, event: str) -> bool:
        """Check whether an event would be handled in the current state."""
        return event in self.events or (
            self.is_running
            and not self.in_terminal_state
            and event in self.definition.updates
        )

    def subscribe(self, listener: TransitionListener) -> Callable[[], None]:
        """Call ``listener(instance, transition, event)`` after every transition.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def snapshot(self) -> dict[str, Any]:
        """Plain-data view of the instance for display or logging."""
        return {
            "machine": self.definition.id,
            "state": self._state,
            "status": self._status.value,
            "context": copy.deepcopy(self.context.as_dict()),
            "history": self.history,
        }

    def start(self) -> "RuntimeInstance":
        """Enter the initial state and settle transient transitions.

        Starting an instance that already started is a no-op.

        Raises:
            ConfigError: If transient transitions never settle
        """
        with self._lock:
            if self._status is not InstanceStatus.NOT_STARTED:
                return self
            self._status = InstanceStatus.RUNNING
            event = Event("start")
            self._enter(self.definition.initial, event)
            self._settle(event, entered=True)
            return self

    def send(self, event: str | Event, payload: Any = None) -> bool:
        """Deliver an event to the instance.

        The first transition of the current state matching the event
        whose guard holds is taken. Without one, a matching context
        update runs instead. Anything else is ignored.

        Args:
            event: Event name or :class:`Event`
            payload: Data attached to the event when a name is given

        Returns:
            True if the event changed the state or context
        """
        if not isinstance(event, Event):
            event = Event(event, payload)

        with self._lock:
            if not self.is_running:
                logger.debug(
                    "Machine '%s' is %s, ignoring event '%s'",
                    self.definition.id,
                    self._status.value,
                    event.type,
                )
                return False

            current = self._current()
            if current.terminal:
                logger.debug(
                    "Machine '%s' is in terminal state '%s', ignoring event '%s'",
                    self.definition.id,
                    current.name,
                    event.type,
                )
                return False

            transition = self._first_enabled(current.events.get(event.type, ()), event)
            if transition is not None:
                self._take(transition, event)
                self._settle(event, entered=True)
                return True

            updates = self.definition.updates.get(event.type)
            if updates is not None:
                self._run(updates, event)
                self._settle(event, entered=False)
                return True

            logger.debug(
                "Machine '%s' ignored event '%s' in state '%s'",
                self.definition.id,
                event.type,
                current.name,
            )
            return False

    def stop(self) -> None:
        """Cancel pending timers; later events are ignored. Idempotent."""
        with self._lock:
            if self._status is InstanceStatus.STOPPED:
                return
            self._cancel_timers()
            self._status = InstanceStatus.STOPPED
            logger.debug("Machine '%s' stopped in state '%s'", self.definition.id, self._state)

    def _current(self) -> StateDefinition:
        if self._state is None:
            raise RuntimeError("Instance has not been started")
        return self.definition.state(self._state)

    def _run(self, actions: Iterable[Action], event: Event) -> None:
        for action in actions:
            result = action(self.context, event)
            if isinstance(result, Mapping):
                self.context.update(result)

    def _first_enabled(
        self, transitions: Iterable[Transition], event: Event
    ) -> Transition | None:
        for transition in transitions:
            if transition.guard is None or transition.guard(self.context, event):
                return transition
        return None

    def _enter(self, state: str, event: Event) -> None:
        self._state = state
        self.context.state_history.append(state)
        self._run(self.definition.state(state).entry, event)

    def _take(self, transition: Transition, event: Event) -> None:
        # Timers of the source state stay armed if an exit or transition action raises
        self._run(self._current().exit, event)
        self._run(transition.actions, event)
        self._cancel_timers()
        self._enter(transition.target, event)
        logger.debug("Machine '%s': %s", self.definition.id, transition.describe())
        for listener in list(self._listeners):
            listener(self, transition, event)

    def _settle(self, event: Event, *, entered: bool) -> None:
        """Follow transient transitions until none is enabled.

        Timers with a zero or negative delay fire here too, right after
        transients, whenever a state has just been entered. Timers of
        the final state are scheduled only if the state changed.
        """
        for _ in range(MAX_TRANSIENT_STEPS):
            if not self.is_running:
                return
            current = self._current()
            transition = self._first_enabled(current.transients, Event.transient())
            if transition is None and entered and not current.terminal:
                for timer in current.timers:
                    if timer.delay_ms is not None and timer.delay_ms <= 0:
                        if timer.guard is None or timer.guard(
                            self.context, Event.timer(timer.delay_ms)
                        ):
                            transition = timer
                            break
            if transition is None:
                if entered:
                    self._schedule_timers(current)
                return
            self._take(transition, event)
            entered = True

        raise ConfigError(
            f"Transient transitions of machine '{self.definition.id}' did not settle "
            f"after {MAX_TRANSIENT_STEPS} steps (cycle through state '{self._state}')"
        )

    def _schedule_timers(self, state: StateDefinition) -> None:
        if state.terminal:
            return
        for transition in state.timers:
            if transition.delay_ms is None or transition.delay_ms <= 0:
                continue
            key = next(self._timer_keys)
            handle = self.timers.schedule(
                transition.delay_ms,
                lambda key=key: self._fire_timer(key),
            )
            self._pending[key] = (transition, handle)

    def _cancel_timers(self) -> None:
        for _, handle in self._pending.values():
            self.timers.cancel(handle)
        self._pending.clear()

    def _fire_timer(self, key: int) -> None:
        with self._lock:
            # Cancelled or re-armed timers are no longer pending under their key
            entry = self._pending.pop(key, None)
            if entry is None or not self.is_running:
                return
            transition, handle = entry
            if handle.cancelled or self._state != transition.source:
                return

            event = Event.timer(transition.delay_ms or 0)
            if transition.guard is not None and not transition.guard(self.context, event):
                logger.debug(
                    "Machine '%s': timer guard failed for %s",
                    self.definition.id,
                    transition.describe(),
                )
                return
            self._take(transition, event)
            self._settle(event, entered=True)

    def __repr__(self) -> str:
        return (
            f"RuntimeInstance(machine={self.definition.id!r}, state={self._state!r}, "
            f"status={self._status.value})"
        )


def instantiate(
    definition: CompiledDefinition,
    auto_start: bool = True,
    *,
    timers: TimerService | None = None,
    context: Mapping[str, Any] | None = None,
) -> RuntimeInstance:
    """Create a running instance of a compiled definition.

    Args:
        definition: Compiled machine definition
        auto_start: Start the instance immediately
        timers: Timer service for timed transitions (a threading-based
            service when not provided)
        context: Values overriding the definition's initial context

    Raises:
        ConfigError: If starting the instance hits a transient cycle
    """
    instance = RuntimeInstance(definition, timers=timers, context=context)
    if auto_start:
        instance.start()
    return instance
