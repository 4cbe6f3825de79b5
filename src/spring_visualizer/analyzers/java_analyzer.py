import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import tree_sitter_java
from tree_sitter import Language

from spring_visualizer.analyzers.base_analyzer import BaseCodeAnalyzer
from spring_visualizer.errors import ProjectPathError, SourceParseError
from spring_visualizer.models.domain_models import DependencyGraph, FileEntities, SourceFile
from spring_visualizer.models.analyzer_config import AnalyzerConfig
from spring_visualizer.processors.java_processor import JavaFileProcessor
from spring_visualizer.services.entity_classifier import SpringEntityClassifier
from spring_visualizer.services.dependency_graph_builder import DependencyGraphBuilder
from spring_visualizer.services.dot_renderer import DotRenderer
from spring_visualizer.services.statistics_generator import StatisticsGenerator
from spring_visualizer.services.result_exporter import ResultExporter

logger = logging.getLogger(__name__)

class JavaCodeAnalyzer(BaseCodeAnalyzer):
    """Analyzer for Spring applications written in Java."""

    def __init__(self, config: Optional[AnalyzerConfig] = None):
        super().__init__(config or AnalyzerConfig())

        # Initialize Tree-sitter components
        try:
            self.language = Language(tree_sitter_java.language())
        except Exception as e:
            logger.error(f"Failed to initialize Tree-sitter for Java: {e}")
            raise

        # Initialize services
        self.file_processor = JavaFileProcessor(self.config, self.language)
        self.entity_classifier = SpringEntityClassifier(self.config)
        self.dependency_graph_builder = DependencyGraphBuilder(self.config)
        self.dot_renderer = DotRenderer(self.config)
        self.statistics_generator = StatisticsGenerator()
        self.result_exporter = ResultExporter()

    def parse_project(self, root: Path) -> DependencyGraph:
        """Parse a Java project directory."""
        logger.info(f"Starting to parse Java project at {root}")
        sources = self.collect_sources(root)
        logger.info(f"Found {len(sources)} Java files")
        if not sources:
            logger.warning("No Java files found")
        return self.analyze_sources(sources)

    def collect_sources(self, root: Path) -> List[SourceFile]:
        """Load every Java file under root, ordered by relative path."""
        if not root.exists():
            raise ProjectPathError(f"Project path {root} does not exist")
        if not os.access(root, os.R_OK):
            raise ProjectPathError(f"Project path {root} is not readable")
        if root.is_file():
            return [SourceFile(path=root.name, package="", text=self._read_file_content(root))]

        try:
            java_files = sorted(
                (path for path in root.rglob(f"*{self.config.file_extension}")
                 if path.is_file() and not self._is_skipped(path.relative_to(root))),
                key=lambda path: path.relative_to(root).as_posix(),
            )
        except OSError as e:
            raise ProjectPathError(f"Cannot walk project path {root}: {e}") from e

        sources = []
        for java_file in java_files:
            relative_path = java_file.relative_to(root).as_posix()
            try:
                content = self._read_file_content(java_file)
            except OSError as e:
                logger.warning(f"Cannot read {relative_path}: {e}")
                continue
            sources.append(SourceFile(path=relative_path, package="", text=content))
        return sources

    def analyze_sources(self, sources: Iterable[SourceFile]) -> DependencyGraph:
        """Classify every file, then fold the batches in the order given."""
        sources = list(sources)
        if self.config.max_workers > 1 and len(sources) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                # map() yields in submission order whatever order workers finish in
                batches = list(executor.map(self.analyze_source, sources))
        else:
            batches = [self.analyze_source(source) for source in sources]

        dependency_graph = self.dependency_graph_builder.build_dependency_graph(batches)
        logger.info(f"Built component graph with {len(dependency_graph.nodes)} nodes and {len(dependency_graph.edges)} edges")
        return dependency_graph

    def analyze_source(self, source: SourceFile) -> FileEntities:
        """Scan and classify one file; failures yield an empty batch."""
        try:
            scanned = self.file_processor.process_source(source.path, source.text, source.package)
            entities = self.entity_classifier.classify_all(scanned)
        except SourceParseError as e:
            logger.warning(str(e))
            return FileEntities(path=source.path, package=source.package)
        except Exception as e:
            logger.warning(f"Skipping {source.path}: {e}")
            return FileEntities(path=source.path, package=source.package)
        logger.debug(f"{source.path}: {len(entities)} entities")
        return FileEntities(path=source.path, package=scanned.package, entities=tuple(entities))

    def render(self, dependency_graph: DependencyGraph) -> str:
        return self.dot_renderer.render(dependency_graph)

    def export_results(self, dependency_graph: DependencyGraph, output_path: Path) -> None:
        self.result_exporter.export_results(dependency_graph, self.render(dependency_graph), output_path)

    def export_html(self, dependency_graph: DependencyGraph, output_html_path: Path) -> None:
        self.result_exporter.export_html(dependency_graph, output_html_path)

    def generate_statistics(self, dependency_graph: DependencyGraph) -> Dict:
        return self.statistics_generator.generate_statistics(dependency_graph)

    def _is_skipped(self, relative_path: Path) -> bool:
        return any(part in self.config.skip_dirs for part in relative_path.parts[:-1])

    def _read_file_content(self, file_path: Path) -> str:
        """Read file content with encoding fallback."""
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return f.read()
        except UnicodeDecodeError:
            with open(file_path, 'r', encoding='latin1') as f:
                return f.read()
