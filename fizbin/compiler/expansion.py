"""Normalization of authored transitions into single-source transitions."""

from collections.abc import Iterable, Sequence

from ..core.exceptions import ConfigError
from ..core.types import Transition, TriggerKind
from ..serialization.types import TransitionSpec

WILDCARD = "*"


def describe_spec(spec: TransitionSpec, index: int) -> str:
    """Identify an authored transition in error messages."""
    source = spec.from_ if isinstance(spec.from_, str) else "[" + ", ".join(spec.from_) + "]"
    return f"#{index} {source} -> {spec.to}"


def classify(spec: TransitionSpec, index: int) -> TriggerKind:
    """Decide what triggers an authored transition.

    An event wins over a timer, a timer over a guard-only (transient)
    transition. Specs naming both an event and a timer, or both ``when``
    and ``unless``, are ambiguous.

    Raises:
        ConfigError: If the transition is ambiguous or has no trigger at all
    """
    where = describe_spec(spec, index)
    if spec.evt is not None and spec.timer is not None:
        raise ConfigError("Transition has both an event and a timer trigger", where)
    if spec.when is not None and spec.unless is not None:
        raise ConfigError("Transition has both 'when' and 'unless' guards", where)

    if spec.evt is not None:
        if not spec.evt:
            raise ConfigError("Transition event name is empty", where)
        return TriggerKind.EVENT
    if spec.timer is not None:
        return TriggerKind.TIMER
    if spec.when is not None or spec.unless is not None:
        return TriggerKind.TRANSIENT
    raise ConfigError("Transition has no event, timer or guard", where)


def expand_sources(spec: TransitionSpec, states: Sequence[str]) -> list[tuple[str, bool]]:
    """List the concrete source states of an authored transition.

    Returns:
        ``(source, wildcard)`` pairs in state order. ``*`` expands to
        every state except the target and flags each pair as wildcard.
    """
    if spec.from_ == WILDCARD:
        return [(state, True) for state in states if state != spec.to]
    if isinstance(spec.from_, str):
        return [(spec.from_, False)]
    return [(state, False) for state in spec.from_]


def find_terminal_states(
    states: Sequence[str], marked: Iterable[str], transitions: Iterable[Transition]
) -> set[str]:
    """Explicitly marked states plus states without any outgoing transition."""
    terminal = set(marked)
    has_way_out = {transition.source for transition in transitions}
    terminal.update(state for state in states if state not in has_way_out)
    return terminal
