"""PlantUML state diagram visualization backend."""

import logging
import subprocess

from .base import EdgeKind, GraphDescription, VisualizationBackend, safe_id

logger = logging.getLogger(__name__)


class PlantUmlBackend(VisualizationBackend):
    """Renders machines as PlantUML state diagrams."""

    def render_graph(self, graph: GraphDescription) -> str:
        opts = self.options
        lines = [
            "@startuml",
            "skinparam State {",
            "  AttributeFontSize 9",
            f"  BackgroundColor {opts.node_color}",
            f"  ArrowColor {opts.edge_color}",
            "  BorderColor Black",
            "}",
        ]
        if opts.direction.upper() == "LR":
            lines.append("left to right direction")
        if graph.title and opts.show_title:
            lines.append(f"title {graph.title}")

        for node in graph.nodes:
            if node.start:
                continue
            color = ""
            if node.current:
                color = f" #{opts.current_color}"
            elif node.target:
                color = f" #{opts.target_color}"
            lines.append(f'state "{node.label}" as {safe_id(node.id)}{color}')

        for edge in graph.edges:
            if edge.kind is EdgeKind.INITIAL:
                if opts.show_start:
                    lines.append(f"[*] --> {safe_id(edge.target)}")
                continue
            styles = []
            if edge.highlighted:
                styles.append(f"#{opts.highlight_color},bold")
            elif edge.greyed:
                styles.append(f"#{opts.wildcard_color}")
            if edge.kind is EdgeKind.TIMER:
                styles.append(opts.timer_style)
            arrow = f"-[{','.join(styles)}]->" if styles else "-->"
            line = f"{safe_id(edge.source)} {arrow} {safe_id(edge.target)}"
            lines.append(f"{line} : {edge.label}" if edge.label else line)

        for node in graph.nodes:
            if node.terminal:
                lines.append(f"{safe_id(node.id)} --> [*]")

        lines.append("@enduml")
        return "\n".join(lines) + "\n"

    def save(self, content: str, filename: str, format: str = "png") -> None:
        """Save PlantUML source and render it with the ``plantuml`` command."""
        puml_file = f"{filename}.puml"
        with open(puml_file, "w") as f:
            f.write(content)

        if format == "puml":
            return

        try:
            subprocess.run(
                ["plantuml", f"-t{format}", puml_file],
                check=True,
                capture_output=True,
            )
        except (FileNotFoundError, subprocess.CalledProcessError):
            logger.warning(
                "Could not render PlantUML diagram; install plantuml. "
                "PlantUML source saved to %s",
                puml_file,
            )
