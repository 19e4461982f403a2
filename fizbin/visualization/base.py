"""Tool-agnostic graph description and the visualization backend interface."""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

import msgspec

if TYPE_CHECKING:
    from ..core.types import CompiledDefinition

START_NODE = "__start__"

_UNSAFE = re.compile(r"\W")


def safe_id(name: str) -> str:
    """Identifier usable by diagram languages that reject spaces and punctuation."""
    alias = _UNSAFE.sub("_", name)
    if not alias or alias[0].isdigit():
        alias = f"s_{alias}"
    return alias


class EdgeKind(Enum):
    """What an edge in the graph stands for."""

    INITIAL = "initial"
    EVENT = "event"
    TIMER = "timer"
    TRANSIENT = "transient"


@dataclass(frozen=True)
class GraphNode:
    """A node in the graph: the synthetic start marker or a state."""

    id: str
    label: str
    start: bool = False
    terminal: bool = False
    current: bool = False
    target: bool = False


@dataclass(frozen=True)
class GraphEdge:
    """A directed, labeled edge between two nodes."""

    source: str
    target: str
    label: str
    kind: EdgeKind
    dashed: bool = False
    greyed: bool = False
    highlighted: bool = False


@dataclass(frozen=True)
class GraphDescription:
    """Ordered nodes and edges of a machine, ready for a layout tool."""

    name: str
    nodes: tuple[GraphNode, ...]
    edges: tuple[GraphEdge, ...]
    direction: str = "LR"
    title: str | None = None

    def node(self, node_id: str) -> GraphNode:
        for node in self.nodes:
            if node.id == node_id:
                return node
        raise KeyError(f"Node '{node_id}' not found")

    def edges_between(self, source: str, target: str) -> list[GraphEdge]:
        return [e for e in self.edges if e.source == source and e.target == target]

    @property
    def current(self) -> str | None:
        return next((node.id for node in self.nodes if node.current), None)

    def to_dict(self) -> dict[str, Any]:
        """Plain-data form, e.g. for JSON output."""
        return msgspec.to_builtins(self)


@dataclass
class VisualizationOptions:
    """Styling shared by the text backends."""

    direction: str = "LR"
    font_size: int = 14
    edge_font_size: int = 10
    node_shape: str = "circle"
    terminal_shape: str = "doublecircle"
    node_color: str = "cornsilk"
    current_color: str = "palegreen"
    target_color: str = "gold"
    edge_color: str = "blue"
    wildcard_color: str = "grey"
    highlight_color: str = "red"
    timer_style: str = "dotted"
    show_start: bool = True
    show_title: bool = True
    extra: dict[str, Any] = field(default_factory=dict)


class VisualizationBackend(ABC):
    """Base class for text visualization backends."""

    def __init__(self, options: VisualizationOptions | None = None):
        self.options = options or VisualizationOptions()

    @abstractmethod
    def render_graph(self, graph: GraphDescription) -> str:
        """Turn a graph description into this backend's text format."""
        ...

    @abstractmethod
    def save(self, content: str, filename: str, format: str = "png") -> None:
        """Save rendered text, converting it to ``format`` where possible."""
        ...

    def visualize(
        self, definition: "CompiledDefinition", highlight_state: str | None = None
    ) -> str:
        """Render a compiled definition directly to text."""
        from .renderer import render

        return self.render_graph(render(definition, highlight_state))

    def get_node_style(self, node: GraphNode) -> dict[str, str]:
        """Style attributes for a node."""
        style: dict[str, str] = {}
        if node.start:
            style["shape"] = "box"
            return style
        style["shape"] = (
            self.options.terminal_shape if node.terminal else self.options.node_shape
        )
        style["style"] = "filled"
        if node.current:
            style["fillcolor"] = self.options.current_color
        elif node.target:
            style["fillcolor"] = self.options.target_color
        else:
            style["fillcolor"] = self.options.node_color
        return style

    def get_edge_style(self, edge: GraphEdge) -> dict[str, str]:
        """Style attributes for an edge."""
        style: dict[str, str] = {}
        if edge.dashed:
            style["style"] = "dashed"
        elif edge.kind is EdgeKind.TIMER:
            style["style"] = self.options.timer_style
        if edge.highlighted:
            style["color"] = self.options.highlight_color
            style["penwidth"] = "2"
        elif edge.greyed:
            style["color"] = self.options.wildcard_color
        return style
