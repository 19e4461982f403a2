"""Machine visualization functionality."""

from typing import Any

from ..runtime.instance import RuntimeInstance
from ..visualization import (
    BACKENDS,
    GraphDescription,
    VisualizationBackend,
    VisualizationOptions,
    render,
)
from .execution import MachineExecution


class MachineVisualization(MachineExecution):
    """Machine visualization functionality."""

    def graph(self, highlight_state: str | None = None) -> GraphDescription:
        """Describe the machine as a tool-agnostic graph."""
        return render(self.definition, highlight_state)

    def visualize(
        self,
        *,
        backend: str = "graphviz",
        highlight_state: str | None = None,
        instance: RuntimeInstance | None = None,
        **kwargs: Any,
    ) -> str:
        """Visualize the machine as a state diagram.

        Args:
            backend: Visualization backend ("graphviz", "mermaid" or "plantuml")
            highlight_state: State to mark as current
            instance: Running instance whose current state is highlighted
            **kwargs: Additional visualization options (filename, format, options)

        Returns:
            String representation of the visualization
        """
        options = kwargs.get("options")
        filename = kwargs.get("filename")
        format = kwargs.get("format", "png")

        if options is None:
            options = VisualizationOptions()

        if instance is not None and highlight_state is None:
            highlight_state = instance.state

        backend_class = BACKENDS.get(backend.lower())
        if backend_class is None:
            raise ValueError(f"Unknown backend: {backend}")
        viz: VisualizationBackend = backend_class(options)

        content = viz.render_graph(self.graph(highlight_state))

        if filename:
            viz.save(content, filename, format)

        return content

    def to_dot(self, **kwargs: Any) -> str:
        """Generate a Graphviz DOT diagram."""
        return self.visualize(backend="graphviz", **kwargs)

    def to_mermaid(self, **kwargs: Any) -> str:
        """Generate a Mermaid state diagram."""
        return self.visualize(backend="mermaid", **kwargs)

    def to_plantuml(self, **kwargs: Any) -> str:
        """Generate a PlantUML state diagram."""
        return self.visualize(backend="plantuml", **kwargs)
