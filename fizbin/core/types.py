"""Type definitions for compiled state machines."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

TRANSIENT_EVENT = "always"


class TriggerKind(Enum):
    """What causes a transition to fire."""

    EVENT = "event"
    TIMER = "timer"
    TRANSIENT = "transient"


@dataclass(frozen=True)
class Event:
    """An event delivered to a running machine.

    Timer and transient transitions are delivered as internal events:
    ``after:<ms>`` and ``always`` respectively.
    """

    type: str
    payload: Any = None

    @classmethod
    def timer(cls, delay_ms: float) -> "Event":
        return cls(type=f"after:{delay_ms:g}")

    @classmethod
    def transient(cls) -> "Event":
        return cls(type=TRANSIENT_EVENT)


@dataclass(frozen=True)
class Guard:
    """A resolved guard condition.

    ``expression`` is the name or expression as authored; ``negate`` is
    set for guards authored with ``unless``.
    """

    expression: str
    negate: bool = False
    fn: Callable[..., Any] | None = field(default=None, compare=False, repr=False)

    @property
    def label(self) -> str:
        return f"!{self.expression}" if self.negate else self.expression

    def __call__(self, context: Any, event: Event) -> bool:
        if self.fn is None:
            raise RuntimeError(f"Guard '{self.expression}' was never resolved")
        result = bool(self.fn(context, event))
        return not result if self.negate else result


@dataclass(frozen=True)
class Action:
    """A resolved, named side effect."""

    name: str
    fn: Callable[..., Any] | None = field(default=None, compare=False, repr=False)

    def __call__(self, context: Any, event: Event) -> Any:
        if self.fn is None:
            raise RuntimeError(f"Action '{self.name}' was never resolved")
        return self.fn(context, event)


@dataclass(frozen=True)
class Transition:
    """A single-source, single-target transition after expansion."""

    source: str
    target: str
    kind: TriggerKind
    event: str | None = None
    delay_ms: float | None = None
    guard: Guard | None = None
    actions: tuple[Action, ...] = ()
    wildcard: bool = False
    index: int = 0

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target

    def describe(self) -> str:
        """Short human readable description used in errors and logs."""
        if self.kind is TriggerKind.EVENT:
            trigger = self.event
        elif self.kind is TriggerKind.TIMER:
            trigger = f"after {self.delay_ms:g}ms"
        else:
            trigger = TRANSIENT_EVENT
        guard = f" [{self.guard.label}]" if self.guard else ""
        return f"#{self.index} {self.source} -> {self.target} on {trigger}{guard}"


@dataclass(frozen=True)
class StateDefinition:
    """Compiled view of one state and its outgoing transitions."""

    name: str
    terminal: bool = False
    events: Mapping[str, tuple[Transition, ...]] = field(default_factory=dict)
    timers: tuple[Transition, ...] = ()
    transients: tuple[Transition, ...] = ()
    entry: tuple[Action, ...] = ()
    exit: tuple[Action, ...] = ()

    @property
    def accepted_events(self) -> list[str]:
        return list(self.events)


@dataclass(frozen=True)
class CompiledDefinition:
    """Immutable, executable form of a machine configuration.

    Shared freely between runtime instances and renderers; neither
    mutates it.
    """

    id: str
    initial: str
    states: tuple[str, ...]
    state_map: Mapping[str, StateDefinition]
    transitions: tuple[Transition, ...]
    context: Mapping[str, Any] = field(default_factory=dict)
    updates: Mapping[str, tuple[Action, ...]] = field(default_factory=dict)
    target: str | None = None
    description: str | None = None

    def state(self, name: str) -> StateDefinition:
        """Get the definition of a state by name."""
        try:
            return self.state_map[name]
        except KeyError:
            raise KeyError(f"State '{name}' not found in machine '{self.id}'") from None

    def is_terminal(self, name: str) -> bool:
        return self.state(name).terminal

    @property
    def terminal_states(self) -> list[str]:
        return [name for name in self.states if self.state_map[name].terminal]

    @property
    def events(self) -> list[str]:
        """All event names known to the machine, in authoring order."""
        seen: dict[str, None] = {}
        for transition in self.transitions:
            if transition.event is not None:
                seen.setdefault(transition.event, None)
        for name in self.updates:
            seen.setdefault(name, None)
        return list(seen)

    def __contains__(self, name: object) -> bool:
        return name in self.state_map
