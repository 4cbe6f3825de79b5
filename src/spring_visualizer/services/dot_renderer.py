import re
from typing import List

from spring_visualizer.models.analyzer_config import AnalyzerConfig, FEATURE_COMPONENT_SCAN
from spring_visualizer.models.domain_models import (
    DependencyGraph, EdgeKind, GraphNode, STEREOTYPE_PRECEDENCE, UNRESOLVED_COLOR, UNRESOLVED_TAG
)

_PLAIN_ID_RE = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')
_DOT_KEYWORDS = {'node', 'edge', 'graph', 'digraph', 'subgraph', 'strict'}
_EDGE_FEATURES = {
    EdgeKind.IMPORT: 'import',
    EdgeKind.BEAN: 'bean',
    EdgeKind.AUTOWIRED: 'autowired',
}
INDENT = "    "


def quote_id(identifier: str) -> str:
    """Return a DOT identifier, quoting it unless it is a plain name."""
    if _PLAIN_ID_RE.match(identifier) and identifier.lower() not in _DOT_KEYWORDS:
        return identifier
    escaped = identifier.replace('\\', '\\\\').replace('"', '\\"')
    return f'"{escaped}"'


def _quote_attr(value: str) -> str:
    escaped = value.replace('\\', '\\\\').replace('"', '\\"')
    return f'"{escaped}"'


class DotRenderer:
    """Renders a dependency graph as Graphviz DOT text.

    Output is a pure function of the graph and the configured features:
    the legend comes first, then nodes and edges in insertion order.
    """

    def __init__(self, config: AnalyzerConfig):
        self.config = config

    def render(self, graph: DependencyGraph) -> str:
        lines = ["digraph Components {"]
        lines.extend(self._legend())
        lines.append("")
        lines.append(f"{INDENT}// Components")
        for node in graph.nodes.values():
            lines.append(f"{INDENT}{quote_id(node.name)} {self._node_style(node)};")
        lines.append("")
        lines.append(f"{INDENT}// Relations")
        for edge in graph.edges:
            if not self.config.has_feature(_EDGE_FEATURES[edge.kind]):
                continue
            lines.append(
                f"{INDENT}{quote_id(edge.source)} -> {quote_id(edge.target)} [label={_quote_attr(edge.label)}];"
            )
        if self.config.has_feature(FEATURE_COMPONENT_SCAN) and graph.component_scans:
            lines.append("")
            lines.extend(self._component_scans(graph))
        lines.append("}")
        return "\n".join(lines) + "\n"

    def _legend(self) -> List[str]:
        lines = [f"{INDENT}// Legend"]
        legend_ids = []
        for stereotype in STEREOTYPE_PRECEDENCE:
            legend_ids.append(quote_id(stereotype.label))
            lines.append(f'{INDENT}{quote_id(stereotype.label)} [fillcolor="{stereotype.color}",style=filled];')
        legend_ids.append(quote_id(UNRESOLVED_TAG))
        lines.append(f'{INDENT}{quote_id(UNRESOLVED_TAG)} [fillcolor="{UNRESOLVED_COLOR}",style="filled,dashed"];')

        lines.append("")
        lines.append(f"{INDENT}// Align legend")
        for current, following in zip(legend_ids, legend_ids[1:]):
            lines.append(f"{INDENT}{current} -> {following} [style=invis];")
        return lines

    def _node_style(self, node: GraphNode) -> str:
        if node.is_placeholder:
            return f'[fillcolor="{node.color}",style="filled,dashed"]'
        return f'[fillcolor="{node.color}",style=filled]'

    def _component_scans(self, graph: DependencyGraph) -> List[str]:
        lines = [f"{INDENT}// Component scans"]
        emitted_packages = set()
        for record in graph.component_scans:
            package_id = quote_id(record.package)
            if record.package not in emitted_packages:
                emitted_packages.add(record.package)
                lines.append(f"{INDENT}{package_id} [shape=folder,style=filled];")
                for node in graph.covered_by(record.package):
                    lines.append(f'{INDENT}{package_id} -> {quote_id(node.name)} [label="contains"];')
            lines.append(f'{INDENT}{quote_id(record.source)} -> {package_id} [label="@ComponentScan"];')
        return lines
