import logging
from typing import Iterable, Optional

from spring_visualizer.models.domain_models import (
    AutowiredDependency, BeanFactoryMethod, ComponentEntity, ComponentScanDirective,
    ConfigurationEntity, DependencyGraph, EdgeKind, Entity, FileEntities, ImportDirective,
    Stereotype
)
from spring_visualizer.models.analyzer_config import AnalyzerConfig

logger = logging.getLogger(__name__)

IMPORT_LABEL = "@Import"
BEAN_LABEL = "@Bean"
AUTOWIRED_LABEL = "@Autowired"
CONSTRUCTOR_AUTOWIRED_LABEL = "@Autowired (CI)"


class DependencyGraphBuilder:
    """Builds the component graph from classified entities of every file.

    Batches are applied in the order given. Nodes are keyed by simple class
    name: the first reference to an unknown class adds an unresolved
    placeholder, and a later stereotype for that name upgrades the same node
    in place, keeping its position and edges.
    """

    def __init__(self, config: AnalyzerConfig):
        self.config = config

    def build_dependency_graph(self, batches: Iterable[FileEntities]) -> DependencyGraph:
        """Build dependency graph from per-file entity batches."""
        graph = DependencyGraph()
        for batch in batches:
            logger.debug(f"Applying {len(batch.entities)} entities from {batch.path}")
            for entity in batch.entities:
                self.apply_entity(graph, entity, batch.package)
        return graph

    def apply_entity(self, graph: DependencyGraph, entity: Entity, package: str = "") -> None:
        if isinstance(entity, ConfigurationEntity):
            self._merge_stereotype(graph, entity.class_name, Stereotype.CONFIGURATION, entity.package or package)
        elif isinstance(entity, ComponentEntity):
            self._merge_stereotype(graph, entity.class_name, entity.stereotype, entity.package or package)
        elif isinstance(entity, ImportDirective):
            graph.add_edge(entity.source, entity.target, EdgeKind.IMPORT, IMPORT_LABEL)
        elif isinstance(entity, BeanFactoryMethod):
            graph.add_edge(entity.source, entity.target, EdgeKind.BEAN, BEAN_LABEL)
        elif isinstance(entity, AutowiredDependency):
            label = CONSTRUCTOR_AUTOWIRED_LABEL if entity.constructor_injection else AUTOWIRED_LABEL
            graph.add_edge(entity.source, entity.target, EdgeKind.AUTOWIRED, label)
        elif isinstance(entity, ComponentScanDirective):
            graph.ensure_node(entity.source)
            graph.add_component_scan(entity.source, entity.package)
        else:
            raise TypeError(f"Unsupported entity {entity!r}")

    def _merge_stereotype(self, graph: DependencyGraph, class_name: str,
                          stereotype: Stereotype, package: Optional[str]) -> None:
        node = graph.ensure_node(class_name)
        if node.package is not None and package is not None and node.package != package:
            logger.warning(f"{class_name} is declared in {node.package} and {package}; both map to one node")
        if node.stereotype is None or stereotype.precedence < node.stereotype.precedence:
            if node.stereotype is not None:
                logger.debug(f"{class_name}: {stereotype.label} overrides {node.stereotype.label}")
            node.stereotype = stereotype
        if node.package is None:
            node.package = package
