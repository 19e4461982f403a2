"""Mermaid state diagram visualization backend."""

import logging
import subprocess

from .base import EdgeKind, GraphDescription, VisualizationBackend, safe_id

logger = logging.getLogger(__name__)


class MermaidBackend(VisualizationBackend):
    """Renders machines as Mermaid ``stateDiagram-v2`` text."""

    def render_graph(self, graph: GraphDescription) -> str:
        opts = self.options
        lines: list[str] = []
        if graph.title and opts.show_title:
            lines.extend(["---", f"title: {graph.title}", "---"])
        lines.append("stateDiagram-v2")
        lines.append(f"    direction {opts.direction or graph.direction}")

        states = [node for node in graph.nodes if not node.start]
        for node in states:
            if safe_id(node.id) != node.label:
                lines.append(f'    state "{node.label}" as {safe_id(node.id)}')

        for edge in graph.edges:
            if edge.kind is EdgeKind.INITIAL:
                if opts.show_start:
                    lines.append(f"    [*] --> {safe_id(edge.target)}")
                continue
            arrow = f"    {safe_id(edge.source)} --> {safe_id(edge.target)}"
            label = edge.label.replace("\n", " ")
            lines.append(f"{arrow} : {label}" if label else arrow)

        for node in states:
            if node.terminal:
                lines.append(f"    {safe_id(node.id)} --> [*]")

        current = [safe_id(node.id) for node in states if node.current]
        target = [safe_id(node.id) for node in states if node.target and not node.current]
        if current:
            lines.append(f"    classDef current fill:{opts.current_color}")
            lines.append(f"    class {','.join(current)} current")
        if target:
            lines.append(f"    classDef target fill:{opts.target_color}")
            lines.append(f"    class {','.join(target)} target")

        return "\n".join(lines) + "\n"

    def save(self, content: str, filename: str, format: str = "png") -> None:
        """Save Mermaid source and render it with mermaid-cli (``mmdc``)."""
        mmd_file = f"{filename}.mmd"
        with open(mmd_file, "w") as f:
            f.write(content)

        if format == "mmd":
            return

        try:
            subprocess.run(
                ["mmdc", "-i", mmd_file, "-o", f"{filename}.{format}"],
                check=True,
                capture_output=True,
            )
        except (FileNotFoundError, subprocess.CalledProcessError):
            logger.warning(
                "Could not render Mermaid diagram; install mermaid-cli with "
                "'npm install -g @mermaid-js/mermaid-cli'. Mermaid source saved to %s",
                mmd_file,
            )
