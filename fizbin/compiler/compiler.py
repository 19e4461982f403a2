"""Compilation of machine configurations into executable definitions."""

import copy
import logging
import math
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from ..core.exceptions import ConfigError
from ..core.registry import ActionTable
from ..core.types import (
    Action,
    CompiledDefinition,
    Guard,
    StateDefinition,
    Transition,
    TriggerKind,
)
from ..serialization.msgspec_serializer import MsgspecSerializer
from ..serialization.types import StateMachineConfig, TransitionSpec, as_name_list
from .expansion import (
    WILDCARD,
    classify,
    describe_spec,
    expand_sources,
    find_terminal_states,
)

logger = logging.getLogger(__name__)


class _Resolver:
    """Resolves names once per compilation so repeated names share objects."""

    def __init__(self, table: ActionTable, known_terms: list[str]):
        self.table = table
        self.known_terms = known_terms
        self._actions: dict[str, Action] = {}
        self._guards: dict[tuple[str, bool], Guard] = {}

    def actions(self, names: str | list[str] | None) -> tuple[Action, ...]:
        resolved = []
        for name in as_name_list(names):
            if name not in self._actions:
                self._actions[name] = Action(name, self.table.resolve_action(name))
            resolved.append(self._actions[name])
        return tuple(resolved)

    def guard(self, spec: TransitionSpec) -> Guard | None:
        if spec.when is not None:
            key = (spec.when, False)
        elif spec.unless is not None:
            key = (spec.unless, True)
        else:
            return None
        if key not in self._guards:
            expression, negate = key
            fn = self.table.resolve_guard(expression, self.known_terms)
            self._guards[key] = Guard(expression, negate, fn)
        return self._guards[key]


def _check_states(config: StateMachineConfig) -> None:
    if not config.states:
        raise ConfigError(f"Machine '{config.id}' has no states")

    seen: set[str] = set()
    for state in config.states:
        if not state or state == WILDCARD:
            raise ConfigError(f"Invalid state name: {state!r}")
        if state in seen:
            raise ConfigError(f"Duplicate state name: '{state}'")
        seen.add(state)

    if config.initial not in seen:
        raise ConfigError(
            f"Initial state '{config.initial}' not found in states of machine '{config.id}'"
        )
    for state in config.terminal:
        if state not in seen:
            raise ConfigError(f"Terminal state '{state}' not found in states")
    if config.target is not None and config.target not in seen:
        raise ConfigError(f"Target state '{config.target}' not found in states")
    for hooks, label in ((config.on_entry, "on_entry"), (config.on_exit, "on_exit")):
        for state in hooks:
            if state != WILDCARD and state not in seen:
                raise ConfigError(f"{label} refers to unknown state '{state}'")


def _check_transition(spec: TransitionSpec, index: int, states: set[str]) -> None:
    where = describe_spec(spec, index)
    if spec.to not in states:
        raise ConfigError(f"Unknown target state '{spec.to}'", where)
    if isinstance(spec.from_, str):
        sources = [] if spec.from_ == WILDCARD else [spec.from_]
    else:
        if not spec.from_:
            raise ConfigError("Transition has an empty source list", where)
        sources = spec.from_
    for source in sources:
        if source not in states:
            raise ConfigError(f"Unknown source state '{source}'", where)
    if spec.timer is not None and not math.isfinite(spec.timer):
        raise ConfigError(f"Timer delay must be finite, got {spec.timer}", where)


def _check_reachable(earlier: list[Transition], transition: Transition) -> None:
    """Reject a transition that an unguarded earlier one always pre-empts."""
    for previous in earlier:
        if previous.guard is None:
            raise ConfigError(
                f"Unreachable transition: '{previous.source}' already has an "
                f"unconditional transition on the same trigger ({previous.describe()})",
                transition.describe(),
            )


def _hooks(
    resolver: _Resolver, hooks: Mapping[str, str | list[str]], state: str
) -> tuple[Action, ...]:
    return resolver.actions(as_name_list(hooks.get(WILDCARD))) + resolver.actions(
        as_name_list(hooks.get(state))
    )


def compile(
    config: StateMachineConfig | Mapping[str, Any],
    table: ActionTable | None = None,
) -> CompiledDefinition:
    """Compile a machine configuration into an immutable definition.

    Wildcard and multi-source transitions are expanded into one
    transition per source state, every transition is classified by its
    trigger, and all action and guard names are resolved against
    ``table``.

    Args:
        config: Configuration, or a plain mapping with the same shape
        table: Actions and guards referenced by name in the configuration

    Returns:
        The compiled definition

    Raises:
        ConfigError: If the configuration is structurally invalid
        ResolutionError: If an action or guard name cannot be resolved
    """
    if not isinstance(config, StateMachineConfig):
        config = MsgspecSerializer().convert(config)
    if table is None:
        table = ActionTable()

    _check_states(config)
    state_names = set(config.states)
    resolver = _Resolver(table, list(config.context))

    transitions: list[Transition] = []
    for index, spec in enumerate(config.transitions):
        _check_transition(spec, index, state_names)
        kind = classify(spec, index)
        guard = resolver.guard(spec)
        actions = resolver.actions(spec.actions)
        for source, wildcard in expand_sources(spec, config.states):
            transitions.append(
                Transition(
                    source=source,
                    target=spec.to,
                    kind=kind,
                    event=spec.evt if kind is TriggerKind.EVENT else None,
                    delay_ms=spec.timer if kind is TriggerKind.TIMER else None,
                    guard=guard,
                    actions=actions,
                    wildcard=wildcard,
                    index=index,
                )
            )

    terminal = find_terminal_states(config.states, config.terminal, transitions)

    state_map: dict[str, StateDefinition] = {}
    for state in config.states:
        outgoing = [t for t in transitions if t.source == state]
        events: dict[str, list[Transition]] = {}
        for transition in outgoing:
            if transition.kind is TriggerKind.EVENT and transition.event is not None:
                earlier = events.setdefault(transition.event, [])
                _check_reachable(earlier, transition)
                earlier.append(transition)
        state_map[state] = StateDefinition(
            name=state,
            terminal=state in terminal,
            events=MappingProxyType({k: tuple(v) for k, v in events.items()}),
            timers=tuple(t for t in outgoing if t.kind is TriggerKind.TIMER),
            transients=tuple(t for t in outgoing if t.kind is TriggerKind.TRANSIENT),
            entry=_hooks(resolver, config.on_entry, state),
            exit=_hooks(resolver, config.on_exit, state),
        )

    updates = {
        event: resolver.actions(names) for event, names in config.updates.items()
    }

    definition = CompiledDefinition(
        id=config.id,
        initial=config.initial,
        states=tuple(config.states),
        state_map=MappingProxyType(state_map),
        transitions=tuple(transitions),
        context=MappingProxyType(copy.deepcopy(config.context)),
        updates=MappingProxyType(updates),
        target=config.target,
        description=config.description,
    )
    logger.debug(
        "Compiled machine '%s': %d states, %d transitions (%d authored)",
        definition.id,
        len(definition.states),
        len(definition.transitions),
        len(config.transitions),
    )
    return definition
