from abc import ABC, abstractmethod
from typing import Callable, Iterator

from tree_sitter import Language, Node
from spring_visualizer.models.domain_models import Declaration
from spring_visualizer.models.analyzer_config import AnalyzerConfig


class ScannedFile:
    """Declarations of one source file.

    Iterating walks the syntax tree again, so the sequence can be consumed
    any number of times and always yields the same declarations.
    """

    def __init__(self, path: str, package: str, walker: Callable[[], Iterator[Declaration]]):
        self.path = path
        self.package = package
        self._walker = walker

    def __iter__(self) -> Iterator[Declaration]:
        return self._walker()


class BaseFileProcessor(ABC):
    """Abstract base class for scanning source files of different languages."""

    def __init__(self, config: AnalyzerConfig, language: Language):
        self.config = config
        self.language = language

    @abstractmethod
    def process_source(self, path: str, content: str, package: str = "") -> ScannedFile:
        """Scan one file's text into its declarations."""
        pass

    @abstractmethod
    def _extract_package(self, root_node: Node, source: bytes) -> str:
        """Extract package or module declaration."""
        pass
