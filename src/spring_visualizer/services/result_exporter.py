import json
import logging
from pathlib import Path
from typing import Dict

from pyvis.network import Network

from spring_visualizer.models.domain_models import DependencyGraph, EdgeKind
from spring_visualizer.services.statistics_generator import StatisticsGenerator

logger = logging.getLogger(__name__)

EDGE_COLORS: Dict[EdgeKind, str] = {
    EdgeKind.IMPORT: "#28a9e0",
    EdgeKind.BEAN: "#6b1d1d",
    EdgeKind.AUTOWIRED: "#374151",
}


class ResultExporter:
    """Writes analysis results to files."""

    def export_results(self, dependency_graph: DependencyGraph, dot_text: str, output_path: Path) -> None:
        """Write the DOT graph, the graph as JSON and its statistics into a directory."""
        output_path.mkdir(parents=True, exist_ok=True)
        (output_path / 'components.dot').write_text(dot_text, encoding='utf-8')
        self._export_json(dependency_graph.to_dict(), output_path / 'dependency_graph.json')
        stats = StatisticsGenerator().generate_statistics(dependency_graph)
        self._export_json(stats, output_path / 'statistics.json')
        logger.info(f"Exported results to {output_path}")

    def export_html(self, dependency_graph: DependencyGraph, output_html_path: Path) -> None:
        """Export the graph to an interactive HTML page with the DOT colors."""
        net = Network(height="900px", width="100%", directed=True, notebook=False, cdn_resources="remote")
        net.barnes_hut()

        for node in dependency_graph.nodes.values():
            title = node.tag if not node.package else f"{node.tag}\n{node.package}"
            net.add_node(
                node.name,
                label=node.name,
                color=node.color,
                title=title,
                shapeProperties={"borderDashes": node.is_placeholder},
            )

        for edge in dependency_graph.edges:
            net.add_edge(edge.source, edge.target, title=edge.label, label=edge.label,
                         color=EDGE_COLORS[edge.kind])

        net.set_options("""
        var options = {
          "physics": {
            "enabled": true,
            "stabilization": {"iterations": 100}
          },
          "interaction": {
            "multiselect": true,
            "selectConnectedEdges": false
          }
        }
        """)

        output_html_path.parent.mkdir(parents=True, exist_ok=True)
        net.write_html(str(output_html_path))
        logger.info(f"Exported component graph to {output_html_path}")

    def _export_json(self, data: Dict, path: Path) -> None:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
