from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable

from spring_visualizer.models.domain_models import DependencyGraph, SourceFile
from spring_visualizer.models.analyzer_config import AnalyzerConfig

class BaseCodeAnalyzer(ABC):
    """Abstract base class for component graph analyzers across languages."""

    def __init__(self, config: AnalyzerConfig):
        self.config = config

    @abstractmethod
    def parse_project(self, root: Path) -> DependencyGraph:
        """Parse a project directory and return its component graph."""
        pass

    @abstractmethod
    def analyze_sources(self, sources: Iterable[SourceFile]) -> DependencyGraph:
        """Build the component graph from already loaded source files."""
        pass

    @abstractmethod
    def render(self, dependency_graph: DependencyGraph) -> str:
        """Render the graph in the textual output format."""
        pass

    @abstractmethod
    def export_results(self, dependency_graph: DependencyGraph, output_path: Path) -> None:
        """Export analysis results to the specified output path."""
        pass

    @abstractmethod
    def generate_statistics(self, dependency_graph: DependencyGraph) -> Dict:
        """Generate analysis statistics for the project."""
        pass
