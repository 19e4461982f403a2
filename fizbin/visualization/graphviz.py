"""Graphviz (DOT) visualization backend."""

import logging
import re
import subprocess
from typing import Any

from .base import EdgeKind, GraphDescription, VisualizationBackend

logger = logging.getLogger(__name__)

_BARE = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$|^-?[0-9]+(\.[0-9]+)?$")


def quote(value: str) -> str:
    """Quote a DOT identifier or attribute value."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def format_attrs(attrs: dict[str, Any]) -> str:
    """Format an attribute mapping as ``[k=v ...]``; labels are always quoted."""
    parts = []
    for key, value in attrs.items():
        text = str(value)
        bare = key != "label" and _BARE.match(text)
        parts.append(f"{key}={text if bare else quote(text)}")
    return "[" + " ".join(parts) + "]"


class GraphvizBackend(VisualizationBackend):
    """Renders machines as DOT digraphs laid out left to right."""

    def render_graph(self, graph: GraphDescription) -> str:
        opts = self.options
        lines = [
            f"digraph {quote(graph.name)} {{",
            f"  rankdir={opts.direction or graph.direction}",
            "  compound=true",
        ]
        if graph.title and opts.show_title:
            lines.append(f"  label={quote(graph.title)} labelloc=t")
        lines.append(
            f"  node [fontsize={opts.font_size} shape={opts.node_shape} style=filled "
            f"color=black fillcolor={opts.node_color}]"
        )
        lines.append(f"  edge [color={opts.edge_color} fontsize={opts.edge_font_size}]")

        for node in graph.nodes:
            if node.start and not opts.show_start:
                continue
            attrs: dict[str, Any] = {"label": node.label}
            attrs.update(self.get_node_style(node))
            if node.target:
                attrs["penwidth"] = "3"
            lines.append(f"  {quote(node.id)} {format_attrs(attrs)}")

        for edge in graph.edges:
            if edge.kind is EdgeKind.INITIAL and not opts.show_start:
                continue
            attrs = {"label": edge.label}
            attrs.update(self.get_edge_style(edge))
            if edge.dashed:
                attrs["fontsize"] = opts.edge_font_size
            lines.append(
                f"  {quote(edge.source)} -> {quote(edge.target)} {format_attrs(attrs)}"
            )

        lines.append("}")
        return "\n".join(lines) + "\n"

    def to_source(self, content: str) -> Any:
        """Wrap DOT text in a :class:`graphviz.Source` for notebooks and rendering."""
        try:
            import graphviz
        except ImportError as e:
            raise ImportError(
                "Rendering requires the graphviz package. "
                "Install with: pip install fizbin[viz]"
            ) from e
        return graphviz.Source(content)

    def save(self, content: str, filename: str, format: str = "png") -> None:
        """Save DOT source and render it with the ``dot`` executable.

        Falls back to the graphviz Python package when ``dot`` is not on
        the path; if neither works, only the ``.dot`` file is kept.
        """
        dot_file = f"{filename}.dot"
        with open(dot_file, "w") as f:
            f.write(content)

        if format == "dot":
            return

        output_file = f"{filename}.{format}"
        try:
            subprocess.run(
                ["dot", f"-T{format}", dot_file, "-o", output_file],
                check=True,
                capture_output=True,
            )
            return
        except (FileNotFoundError, subprocess.CalledProcessError) as e:
            logger.debug("dot executable failed (%s), trying graphviz package", e)

        try:
            import graphviz

            graphviz.Source(content).render(filename, format=format, cleanup=True)
        except ImportError:
            logger.warning(
                "Could not render Graphviz diagram; install Graphviz or the graphviz "
                "package. DOT source saved to %s",
                dot_file,
            )
