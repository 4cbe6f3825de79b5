import logging
import threading
from typing import Callable, Iterator, List, Optional, Tuple

from tree_sitter import Language, Parser, Node

from spring_visualizer.errors import AnnotationSyntaxError, SourceParseError
from spring_visualizer.processors.base_processor import BaseFileProcessor, ScannedFile
from spring_visualizer.models.domain_models import Annotation, Declaration, DeclarationKind
from spring_visualizer.models.analyzer_config import AnalyzerConfig
from spring_visualizer.services.annotation_parser import JavaAnnotationParser
from spring_visualizer.services.type_resolver import JavaTypeResolver

logger = logging.getLogger(__name__)

CLASS_NODE_TYPES = ('class_declaration', 'interface_declaration', 'enum_declaration', 'record_declaration')
ANNOTATION_NODE_TYPES = ('annotation', 'marker_annotation')
PARAMETER_NODE_TYPES = ('formal_parameter', 'spread_parameter')


class JavaFileProcessor(BaseFileProcessor):
    """Scans Java source files into annotated declarations."""

    def __init__(self, config: AnalyzerConfig, language: Language):
        super().__init__(config, language)
        self.annotation_parser = JavaAnnotationParser()
        self.type_resolver = JavaTypeResolver()
        self._local = threading.local()

    @property
    def parser(self) -> Parser:
        """Tree-sitter parsers are not shared between threads."""
        parser = getattr(self._local, 'parser', None)
        if parser is None:
            parser = Parser(self.language)
            self._local.parser = parser
        return parser

    def process_source(self, path: str, content: str, package: str = "") -> ScannedFile:
        """Scan a single Java file.

        The package argument overrides the file's own package declaration
        when the caller already knows it.
        """
        try:
            source = content.encode('utf-8')
        except UnicodeEncodeError as e:
            raise SourceParseError(path, str(e)) from e
        tree = self.parser.parse(source)
        root_node = tree.root_node
        if root_node.has_error:
            logger.warning(f"Syntax errors in {path}; damaged declarations are skipped")

        package = package or self._extract_package(root_node, source)
        return ScannedFile(path, package, lambda: self._iter_declarations(path, root_node, source, package))

    def _extract_package(self, root_node: Node, source: bytes) -> str:
        """Extract package declaration."""
        for child in root_node.named_children:
            if child.type == 'package_declaration':
                for name_node in child.named_children:
                    if name_node.type in ('scoped_identifier', 'identifier'):
                        return self._text(name_node, source)
        return ""

    def _iter_declarations(self, path: str, root_node: Node, source: bytes, package: str) -> Iterator[Declaration]:
        for child in root_node.named_children:
            if child.type in CLASS_NODE_TYPES:
                yield from self._iter_class(path, child, source, package)

    def _iter_class(self, path: str, class_node: Node, source: bytes, package: str) -> Iterator[Declaration]:
        class_name = self._get_class_name(class_node, source)
        if not class_name:
            logger.debug(f"{path}:{self._line(class_node)}: {class_node.type} without a name")
            return

        try:
            annotations = self._extract_annotations(class_node, source)
        except AnnotationSyntaxError as e:
            logger.warning(f"{path}:{self._line(class_node)}: skipping class {class_name}: {e}")
        else:
            yield Declaration(
                kind=DeclarationKind.CLASS,
                class_name=class_name,
                package=package,
                type_name=class_name,
                annotations=annotations,
                line=self._line(class_node),
            )

        body = class_node.child_by_field_name('body')
        if body is None:
            return
        for member in self._body_members(body):
            if member.type in CLASS_NODE_TYPES:
                yield from self._iter_class(path, member, source, package)
            elif member.type in ('field_declaration', 'constant_declaration'):
                yield from self._guarded(path, member, class_name, self._field_declarations, source, package)
            elif member.type == 'constructor_declaration':
                yield from self._guarded(path, member, class_name, self._constructor_declarations, source, package)
            elif member.type == 'method_declaration':
                yield from self._guarded(path, member, class_name, self._method_declarations, source, package)

    def _body_members(self, body: Node) -> Iterator[Node]:
        for child in body.named_children:
            if child.type == 'enum_body_declarations':
                yield from child.named_children
            else:
                yield child

    def _guarded(self, path: str, node: Node, class_name: str,
                 extractor: Callable[[Node, str, bytes, str], Iterator[Declaration]],
                 source: bytes, package: str) -> List[Declaration]:
        """Run one member extractor, dropping the member if its annotations are malformed."""
        try:
            return list(extractor(node, class_name, source, package))
        except AnnotationSyntaxError as e:
            logger.warning(f"{path}:{self._line(node)}: skipping {node.type} in {class_name}: {e}")
            return []

    def _field_declarations(self, field_node: Node, class_name: str, source: bytes, package: str) -> Iterator[Declaration]:
        annotations = self._extract_annotations(field_node, source)
        type_name = self._type_of(field_node.child_by_field_name('type'), source)
        for declarator in field_node.children_by_field_name('declarator'):
            name_node = declarator.child_by_field_name('name')
            yield Declaration(
                kind=DeclarationKind.FIELD,
                class_name=class_name,
                package=package,
                type_name=type_name,
                member_name=self._text(name_node, source) if name_node else "",
                annotations=annotations,
                line=self._line(field_node),
            )

    def _constructor_declarations(self, constructor_node: Node, class_name: str, source: bytes, package: str) -> Iterator[Declaration]:
        owner_annotations = self._extract_annotations(constructor_node, source)
        for name, type_name, annotations, line in self._extract_parameters(constructor_node, source):
            yield Declaration(
                kind=DeclarationKind.CONSTRUCTOR_PARAMETER,
                class_name=class_name,
                package=package,
                type_name=type_name,
                member_name=name,
                annotations=annotations,
                owner_annotations=owner_annotations,
                line=line,
            )

    def _method_declarations(self, method_node: Node, class_name: str, source: bytes, package: str) -> Iterator[Declaration]:
        annotations = self._extract_annotations(method_node, source)
        name_node = method_node.child_by_field_name('name')
        parameters = tuple(
            Declaration(
                kind=DeclarationKind.METHOD_PARAMETER,
                class_name=class_name,
                package=package,
                type_name=type_name,
                member_name=name,
                annotations=parameter_annotations,
                owner_annotations=annotations,
                line=line,
            )
            for name, type_name, parameter_annotations, line in self._extract_parameters(method_node, source)
        )
        yield Declaration(
            kind=DeclarationKind.METHOD,
            class_name=class_name,
            package=package,
            type_name=self._type_of(method_node.child_by_field_name('type'), source),
            member_name=self._text(name_node, source) if name_node else "",
            annotations=annotations,
            parameters=parameters,
            line=self._line(method_node),
        )
        yield from parameters

    def _extract_parameters(self, node: Node, source: bytes) -> List[Tuple[str, str, Tuple[Annotation, ...], int]]:
        """Extract (name, type, annotations, line) for every declared parameter."""
        parameters = []
        parameter_list = node.child_by_field_name('parameters')
        if parameter_list is None:
            return parameters
        for child in parameter_list.named_children:
            if child.type not in PARAMETER_NODE_TYPES:
                continue
            type_node = child.child_by_field_name('type')
            name_node = child.child_by_field_name('name')
            if child.type == 'spread_parameter':
                type_node, name_node = self._spread_parts(child)
            parameters.append((
                self._text(name_node, source) if name_node else "",
                self._type_of(type_node, source),
                self._extract_annotations(child, source),
                self._line(child),
            ))
        return parameters

    def _spread_parts(self, spread_node: Node) -> Tuple[Optional[Node], Optional[Node]]:
        type_node = None
        name_node = None
        for child in spread_node.named_children:
            if child.type == 'modifiers':
                continue
            if child.type == 'variable_declarator':
                name_node = child.child_by_field_name('name')
            elif type_node is None:
                type_node = child
        return type_node, name_node

    def _extract_annotations(self, node: Node, source: bytes) -> Tuple[Annotation, ...]:
        """Parse the annotations in a declaration's modifier list."""
        tokens = []
        for child in node.children:
            if child.type == 'modifiers':
                for modifier in child.children:
                    if modifier.type in ANNOTATION_NODE_TYPES:
                        tokens.append(self._text(modifier, source))
        return self.annotation_parser.parse_many(tokens)

    def _get_class_name(self, class_node: Node, source: bytes) -> Optional[str]:
        name_node = class_node.child_by_field_name('name')
        return self._text(name_node, source) if name_node else None

    def _type_of(self, type_node: Optional[Node], source: bytes) -> str:
        if type_node is None:
            return ""
        return self.type_resolver.simple_type_name(self._text(type_node, source))

    @staticmethod
    def _text(node: Node, source: bytes) -> str:
        return source[node.start_byte:node.end_byte].decode('utf-8', errors='replace')

    @staticmethod
    def _line(node: Node) -> int:
        return node.start_point[0] + 1
