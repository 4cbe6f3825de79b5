from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Set, Tuple, Optional, Union


@dataclass(frozen=True)
class StringLiteral:
    value: str


@dataclass(frozen=True)
class ClassReference:
    name: str
    is_class_literal: bool = True

    @property
    def simple_name(self) -> str:
        return self.name.rsplit('.', 1)[-1]


@dataclass(frozen=True)
class LiteralValue:
    text: str


@dataclass(frozen=True)
class ValueList:
    items: Tuple['AnnotationValue', ...] = ()


AnnotationValue = Union[StringLiteral, ClassReference, LiteralValue, ValueList]


class AnnotationKind(Enum):
    CONFIGURATION = "Configuration"
    SPRING_BOOT_APPLICATION = "SpringBootApplication"
    COMPONENT = "Component"
    SERVICE = "Service"
    REPOSITORY = "Repository"
    CONTROLLER = "Controller"
    REST_CONTROLLER = "RestController"
    IMPORT = "Import"
    COMPONENT_SCAN = "ComponentScan"
    BEAN = "Bean"
    AUTOWIRED = "Autowired"
    OPAQUE = "opaque"

    @classmethod
    def from_name(cls, simple_name: str) -> 'AnnotationKind':
        for kind in cls:
            if kind.value == simple_name and kind is not cls.OPAQUE:
                return kind
        return cls.OPAQUE


@dataclass(frozen=True)
class Annotation:
    name: str
    arguments: Tuple[AnnotationValue, ...] = ()
    keywords: Tuple[Tuple[str, AnnotationValue], ...] = ()

    @property
    def simple_name(self) -> str:
        return self.name.rsplit('.', 1)[-1]

    @property
    def kind(self) -> AnnotationKind:
        return AnnotationKind.from_name(self.simple_name)

    def keyword(self, key: str) -> Optional[AnnotationValue]:
        for name, value in self.keywords:
            if name == key:
                return value
        return None

    def value(self) -> Optional[AnnotationValue]:
        """Return the single positional argument or the ``value`` keyword."""
        if len(self.arguments) == 1:
            return self.arguments[0]
        if self.arguments:
            return ValueList(self.arguments)
        return self.keyword('value')

    @property
    def has_arguments(self) -> bool:
        return bool(self.arguments or self.keywords)


class DeclarationKind(Enum):
    CLASS = "class"
    FIELD = "field"
    CONSTRUCTOR_PARAMETER = "constructor_parameter"
    METHOD_PARAMETER = "method_parameter"
    METHOD = "method"


@dataclass(frozen=True)
class Declaration:
    kind: DeclarationKind
    class_name: str
    package: str = ""
    type_name: str = ""
    member_name: str = ""
    annotations: Tuple[Annotation, ...] = ()
    owner_annotations: Tuple[Annotation, ...] = ()
    parameters: Tuple['Declaration', ...] = ()
    line: int = 0

    def has_annotation(self, kind: AnnotationKind) -> bool:
        return any(annotation.kind is kind for annotation in self.annotations)

    def owner_has_annotation(self, kind: AnnotationKind) -> bool:
        return any(annotation.kind is kind for annotation in self.owner_annotations)

    def annotations_of(self, kind: AnnotationKind) -> List[Annotation]:
        return [annotation for annotation in self.annotations if annotation.kind is kind]


class Stereotype(Enum):
    SPRING_BOOT_APPLICATION = "SpringBootApplication"
    CONTROLLER = "Controller"
    SERVICE = "Service"
    REPOSITORY = "Repository"
    CONFIGURATION = "Configuration"
    COMPONENT = "Component"

    @property
    def color(self) -> str:
        return STEREOTYPE_COLORS[self]

    @property
    def precedence(self) -> int:
        """Lower wins when a class carries several stereotypes."""
        return STEREOTYPE_PRECEDENCE.index(self)

    @property
    def label(self) -> str:
        return f"@{self.value}"


STEREOTYPE_PRECEDENCE: Tuple[Stereotype, ...] = (
    Stereotype.SPRING_BOOT_APPLICATION,
    Stereotype.CONTROLLER,
    Stereotype.SERVICE,
    Stereotype.REPOSITORY,
    Stereotype.CONFIGURATION,
    Stereotype.COMPONENT,
)

STEREOTYPE_COLORS: Dict[Stereotype, str] = {
    Stereotype.SPRING_BOOT_APPLICATION: "#2c9162",
    Stereotype.CONFIGURATION: "#28a9e0",
    Stereotype.CONTROLLER: "#7050bf",
    Stereotype.SERVICE: "#a81347",
    Stereotype.REPOSITORY: "#e06907",
    Stereotype.COMPONENT: "#ffc400",
}

UNRESOLVED_TAG = "unresolved"
UNRESOLVED_COLOR = "#d3d3d3"


def most_specific(stereotypes: List[Stereotype]) -> Optional[Stereotype]:
    """Pick the stereotype that wins for coloring, or None for an empty list."""
    if not stereotypes:
        return None
    return min(stereotypes, key=lambda stereotype: stereotype.precedence)


@dataclass(frozen=True)
class ConfigurationEntity:
    class_name: str
    package: str = ""


@dataclass(frozen=True)
class ComponentEntity:
    class_name: str
    stereotype: Stereotype
    package: str = ""


@dataclass(frozen=True)
class ImportDirective:
    source: str
    target: str


@dataclass(frozen=True)
class ComponentScanDirective:
    source: str
    package: str


@dataclass(frozen=True)
class BeanFactoryMethod:
    source: str
    target: str
    method_name: str
    bean_name: str
    parameter_types: Tuple[str, ...] = ()


@dataclass(frozen=True)
class AutowiredDependency:
    source: str
    target: str
    constructor_injection: bool = False
    member_name: str = ""


Entity = Union[
    ConfigurationEntity,
    ComponentEntity,
    ImportDirective,
    ComponentScanDirective,
    BeanFactoryMethod,
    AutowiredDependency,
]


@dataclass(frozen=True)
class SourceFile:
    path: str
    package: str
    text: str


@dataclass(frozen=True)
class FileEntities:
    """Entities classified from one source file, in declaration order."""
    path: str
    package: str
    entities: Tuple[Entity, ...] = ()


class EdgeKind(Enum):
    IMPORT = "import"
    BEAN = "bean"
    AUTOWIRED = "autowired"


@dataclass
class GraphNode:
    name: str
    stereotype: Optional[Stereotype] = None
    package: Optional[str] = None

    @property
    def is_placeholder(self) -> bool:
        return self.stereotype is None

    @property
    def tag(self) -> str:
        return self.stereotype.label if self.stereotype else UNRESOLVED_TAG

    @property
    def color(self) -> str:
        return self.stereotype.color if self.stereotype else UNRESOLVED_COLOR


@dataclass(frozen=True)
class GraphEdge:
    source: str
    target: str
    kind: EdgeKind
    label: str


@dataclass(frozen=True)
class ScanRecord:
    source: str
    package: str


@dataclass
class DependencyGraph:
    nodes: Dict[str, GraphNode] = field(default_factory=dict)  # insertion ordered
    edges: List[GraphEdge] = field(default_factory=list)
    component_scans: List[ScanRecord] = field(default_factory=list)
    _edge_keys: Set[GraphEdge] = field(default_factory=set, repr=False, compare=False)

    def ensure_node(self, class_name: str) -> GraphNode:
        """Return the node for a class, adding a placeholder if it is new."""
        node = self.nodes.get(class_name)
        if node is None:
            node = GraphNode(name=class_name)
            self.nodes[class_name] = node
        return node

    def add_edge(self, source: str, target: str, kind: EdgeKind, label: str) -> GraphEdge:
        """Add an edge, creating missing endpoints first. Repeated edges are kept once."""
        self.ensure_node(source)
        self.ensure_node(target)
        edge = GraphEdge(source=source, target=target, kind=kind, label=label)
        if edge not in self._edge_keys:
            self._edge_keys.add(edge)
            self.edges.append(edge)
        return edge

    def add_component_scan(self, source: str, package: str) -> None:
        record = ScanRecord(source=source, package=package)
        if record not in self.component_scans:
            self.component_scans.append(record)

    def outgoing(self, class_name: str) -> List[GraphEdge]:
        return [edge for edge in self.edges if edge.source == class_name]

    def placeholders(self) -> List[GraphNode]:
        return [node for node in self.nodes.values() if node.is_placeholder]

    def covered_by(self, package: str) -> List[GraphNode]:
        """Stereotyped nodes whose package lies under the given prefix."""
        return [
            node for node in self.nodes.values()
            if not node.is_placeholder and node.package is not None
            and _package_under(node.package, package)
        ]

    def uncovered_components(self) -> List[GraphNode]:
        """Stereotyped nodes that no recorded component scan reaches.

        Classes that declare a scan, and @Import targets, are registered
        without being scanned.
        """
        if not self.component_scans:
            return []
        registered = {record.source for record in self.component_scans}
        registered.update(edge.target for edge in self.edges if edge.kind is EdgeKind.IMPORT)
        uncovered = []
        for node in self.nodes.values():
            if node.is_placeholder or node.name in registered or node.package is None:
                continue
            if not any(_package_under(node.package, record.package) for record in self.component_scans):
                uncovered.append(node)
        return uncovered

    def to_dict(self) -> Dict:
        """Convert DependencyGraph to a JSON-serializable dictionary."""
        return {
            "nodes": [
                {"name": node.name, "tag": node.tag, "package": node.package}
                for node in self.nodes.values()
            ],
            "edges": [
                {"source": edge.source, "target": edge.target,
                 "kind": edge.kind.value, "label": edge.label}
                for edge in self.edges
            ],
            "component_scans": [
                {"source": record.source, "package": record.package}
                for record in self.component_scans
            ],
        }


def _package_under(package: str, prefix: str) -> bool:
    # the default package prefix covers everything
    return not prefix or package == prefix or package.startswith(prefix + '.')
