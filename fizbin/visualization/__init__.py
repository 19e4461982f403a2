"""Graph rendering and text visualization backends."""

from .base import (
    START_NODE,
    EdgeKind,
    GraphDescription,
    GraphEdge,
    GraphNode,
    VisualizationBackend,
    VisualizationOptions,
)
from .graphviz import GraphvizBackend
from .mermaid import MermaidBackend
from .plantuml import PlantUmlBackend
from .renderer import INITIAL_LABEL, format_delay, render, transition_label

BACKENDS: dict[str, type[VisualizationBackend]] = {
    "graphviz": GraphvizBackend,
    "dot": GraphvizBackend,
    "mermaid": MermaidBackend,
    "plantuml": PlantUmlBackend,
}

__all__ = [
    "render",
    "format_delay",
    "transition_label",
    "INITIAL_LABEL",
    "START_NODE",
    "EdgeKind",
    "GraphNode",
    "GraphEdge",
    "GraphDescription",
    "VisualizationOptions",
    "VisualizationBackend",
    "GraphvizBackend",
    "MermaidBackend",
    "PlantUmlBackend",
    "BACKENDS",
]
