from typing import Dict, Any
from spring_visualizer.models.domain_models import DependencyGraph

class StatisticsGenerator:
    """Generates summary statistics for a component graph."""

    def generate_statistics(self, dependency_graph: DependencyGraph) -> Dict[str, Any]:
        return {
            'total_nodes': len(dependency_graph.nodes),
            'total_edges': len(dependency_graph.edges),
            'node_tags': self._count_node_tags(dependency_graph),
            'edge_kinds': self._count_edge_kinds(dependency_graph),
            'unresolved': [node.name for node in dependency_graph.placeholders()],
            'component_scans': len(dependency_graph.component_scans),
            'uncovered_components': [node.name for node in dependency_graph.uncovered_components()],
        }

    def _count_node_tags(self, dependency_graph: DependencyGraph) -> Dict[str, int]:
        tags = {}
        for node in dependency_graph.nodes.values():
            tags[node.tag] = tags.get(node.tag, 0) + 1
        return tags

    def _count_edge_kinds(self, dependency_graph: DependencyGraph) -> Dict[str, int]:
        kinds = {}
        for edge in dependency_graph.edges:
            kinds[edge.kind.value] = kinds.get(edge.kind.value, 0) + 1
        return kinds
