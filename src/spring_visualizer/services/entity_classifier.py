import logging
from typing import Iterable, Iterator, List, Optional

from spring_visualizer.models.analyzer_config import AnalyzerConfig
from spring_visualizer.models.domain_models import (
    Annotation, AnnotationKind, AnnotationValue, AutowiredDependency, BeanFactoryMethod,
    ClassReference, ComponentEntity, ComponentScanDirective, ConfigurationEntity, Declaration,
    DeclarationKind, Entity, ImportDirective, StringLiteral, ValueList, most_specific
)

logger = logging.getLogger(__name__)

SCAN_PACKAGE_KEYS = ('value', 'basePackages')


class SpringEntityClassifier:
    """Maps annotated declarations onto Spring graph entities.

    Works on one file at a time and names every target by its simple class
    name; nothing is resolved across files here.
    """

    def __init__(self, config: AnalyzerConfig):
        self.config = config

    def classify_all(self, declarations: Iterable[Declaration]) -> List[Entity]:
        entities: List[Entity] = []
        for declaration in declarations:
            entities.extend(self.classify(declaration))
        return entities

    def classify(self, declaration: Declaration) -> Iterator[Entity]:
        if declaration.kind is DeclarationKind.CLASS:
            yield from self._classify_class(declaration)
        elif declaration.kind is DeclarationKind.METHOD:
            yield from self._classify_method(declaration)
        elif declaration.kind is DeclarationKind.FIELD:
            if declaration.has_annotation(AnnotationKind.AUTOWIRED) and declaration.type_name:
                yield AutowiredDependency(
                    source=declaration.class_name,
                    target=declaration.type_name,
                    member_name=declaration.member_name,
                )
        elif declaration.kind is DeclarationKind.CONSTRUCTOR_PARAMETER:
            if self._is_autowired_parameter(declaration) and declaration.type_name:
                yield AutowiredDependency(
                    source=declaration.class_name,
                    target=declaration.type_name,
                    constructor_injection=True,
                    member_name=declaration.member_name,
                )
        elif declaration.kind is DeclarationKind.METHOD_PARAMETER:
            # @Bean parameters are reported with the method itself
            if declaration.owner_has_annotation(AnnotationKind.BEAN):
                return
            if self._is_autowired_parameter(declaration) and declaration.type_name:
                yield AutowiredDependency(
                    source=declaration.class_name,
                    target=declaration.type_name,
                    member_name=declaration.member_name,
                )

    def _classify_class(self, declaration: Declaration) -> Iterator[Entity]:
        class_name = declaration.class_name
        stereotypes = [
            self.config.stereotype_annotations[annotation.simple_name]
            for annotation in declaration.annotations
            if annotation.simple_name in self.config.stereotype_annotations
        ]

        if declaration.has_annotation(AnnotationKind.CONFIGURATION):
            yield ConfigurationEntity(class_name=class_name, package=declaration.package)
        stereotype = most_specific(stereotypes)
        if stereotype is not None:
            yield ComponentEntity(class_name=class_name, stereotype=stereotype, package=declaration.package)

        for annotation in declaration.annotations:
            if annotation.kind is AnnotationKind.IMPORT:
                for target in self._class_references(annotation.value()):
                    yield ImportDirective(source=class_name, target=target)
            elif annotation.kind is AnnotationKind.COMPONENT_SCAN:
                for package in self._scanned_packages(annotation, declaration):
                    yield ComponentScanDirective(source=class_name, package=package)
            elif annotation.kind is AnnotationKind.SPRING_BOOT_APPLICATION:
                # the application class scans its own package
                yield ComponentScanDirective(source=class_name, package=declaration.package)

    def _classify_method(self, declaration: Declaration) -> Iterator[Entity]:
        bean_annotations = declaration.annotations_of(AnnotationKind.BEAN)
        if not bean_annotations:
            return
        if not declaration.type_name or declaration.type_name == 'void':
            logger.debug(f"Ignoring @Bean method {declaration.class_name}.{declaration.member_name} without a return type")
            return

        parameter_types = tuple(p.type_name for p in declaration.parameters if p.type_name)
        yield BeanFactoryMethod(
            source=declaration.class_name,
            target=declaration.type_name,
            method_name=declaration.member_name,
            bean_name=self._bean_name(bean_annotations[0]) or declaration.member_name,
            parameter_types=parameter_types,
        )
        for parameter in declaration.parameters:
            if not parameter.type_name:
                continue
            # parameters are dependencies of the produced bean, not of the configuration class
            yield AutowiredDependency(
                source=declaration.type_name,
                target=parameter.type_name,
                constructor_injection=True,
                member_name=parameter.member_name,
            )

    def _is_autowired_parameter(self, declaration: Declaration) -> bool:
        return (declaration.has_annotation(AnnotationKind.AUTOWIRED)
                or declaration.owner_has_annotation(AnnotationKind.AUTOWIRED))

    def _bean_name(self, annotation: Annotation) -> Optional[str]:
        """Explicit bean name from ``@Bean("x")``, ``@Bean(name = "x")`` or ``@Bean({"x", "y"})``."""
        for value in (annotation.value(), annotation.keyword('name')):
            names = self._string_literals(value)
            if names:
                return names[0]
        return None

    def _scanned_packages(self, annotation: Annotation, declaration: Declaration) -> List[str]:
        packages: List[str] = []
        for key in SCAN_PACKAGE_KEYS:
            value = annotation.value() if key == 'value' else annotation.keyword(key)
            for package in self._string_literals(value):
                if package not in packages:
                    packages.append(package)

        for class_name in self._class_references(annotation.keyword('basePackageClasses')):
            if class_name == declaration.class_name:
                if declaration.package not in packages:
                    packages.append(declaration.package)
            else:
                logger.debug(f"Cannot resolve package of {class_name} in @ComponentScan on {declaration.class_name}")

        if not packages and not self._has_scan_arguments(annotation):
            packages.append(declaration.package)
        return packages

    def _has_scan_arguments(self, annotation: Annotation) -> bool:
        if annotation.arguments:
            return any(not isinstance(value, ValueList) or value.items for value in annotation.arguments)
        return any(key in SCAN_PACKAGE_KEYS + ('basePackageClasses',) for key, _ in annotation.keywords)

    def _class_references(self, value: Optional[AnnotationValue]) -> List[str]:
        if isinstance(value, ClassReference) and value.is_class_literal:
            return [value.simple_name]
        if isinstance(value, ValueList):
            names = []
            for item in value.items:
                names.extend(self._class_references(item))
            return names
        return []

    def _string_literals(self, value: Optional[AnnotationValue]) -> List[str]:
        if isinstance(value, StringLiteral):
            return [value.value]
        if isinstance(value, ValueList):
            return [item.value for item in value.items if isinstance(item, StringLiteral)]
        return []
