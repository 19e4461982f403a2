"""Rendering of compiled definitions into graph descriptions."""

from ..core.exceptions import ConfigError
from ..core.types import CompiledDefinition, Transition, TriggerKind
from .base import START_NODE, EdgeKind, GraphDescription, GraphEdge, GraphNode

INITIAL_LABEL = "initialState"

_EDGE_KINDS = {
    TriggerKind.EVENT: EdgeKind.EVENT,
    TriggerKind.TIMER: EdgeKind.TIMER,
    TriggerKind.TRANSIENT: EdgeKind.TRANSIENT,
}


def format_delay(delay_ms: float) -> str:
    """Format a millisecond delay as seconds, e.g. ``5000`` -> ``"5 secs"``.

    Up to three fractional digits are kept, trailing zeros dropped and
    thousands separated with commas.
    """
    seconds = f"{delay_ms / 1000:,.3f}".rstrip("0").rstrip(".")
    if seconds in ("-0", ""):
        seconds = "0"
    return f"{seconds} secs"


def transition_label(transition: Transition) -> str:
    """Label for a transition edge.

    The trigger (event name or timer delay) comes first; a guard follows
    in brackets, separated by a space when there is a trigger.
    """
    if transition.kind is TriggerKind.EVENT:
        label = transition.event or ""
    elif transition.kind is TriggerKind.TIMER:
        label = format_delay(transition.delay_ms or 0)
    else:
        label = ""
    if transition.guard is not None:
        space = " " if label else ""
        label = f"{label}{space}[{transition.guard.label}]"
    return label


def render(
    definition: CompiledDefinition, highlight_state: str | None = None
) -> GraphDescription:
    """Describe a compiled definition as a directed graph.

    Args:
        definition: Compiled machine definition
        highlight_state: State to mark as current, typically the live
            state of a running instance

    Returns:
        Nodes (start marker first, then one per state) and edges (the
        initial edge first, then one per expanded transition)

    Raises:
        ConfigError: If ``highlight_state`` is not a state of the machine
    """
    if highlight_state is not None and highlight_state not in definition:
        raise ConfigError(
            f"Cannot highlight unknown state '{highlight_state}' "
            f"of machine '{definition.id}'"
        )

    nodes = [GraphNode(id=START_NODE, label="start", start=True)]
    for name in definition.states:
        nodes.append(
            GraphNode(
                id=name,
                label=name,
                terminal=definition.is_terminal(name),
                current=name == highlight_state,
                target=name == definition.target,
            )
        )

    edges = [
        GraphEdge(
            source=START_NODE,
            target=definition.initial,
            label=INITIAL_LABEL,
            kind=EdgeKind.INITIAL,
            dashed=True,
        )
    ]
    for transition in definition.transitions:
        edges.append(
            GraphEdge(
                source=transition.source,
                target=transition.target,
                label=transition_label(transition),
                kind=_EDGE_KINDS[transition.kind],
                greyed=transition.wildcard,
                highlighted=highlight_state is not None
                and transition.source == highlight_state,
            )
        )

    return GraphDescription(
        name=definition.id,
        nodes=tuple(nodes),
        edges=tuple(edges),
        title=definition.description,
    )
