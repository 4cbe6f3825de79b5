from typing import Optional

from spring_visualizer.analyzers.java_analyzer import JavaCodeAnalyzer
from spring_visualizer.analyzers.base_analyzer import BaseCodeAnalyzer
from spring_visualizer.errors import ConfigurationError
from spring_visualizer.models.analyzer_config import AnalyzerConfig, ALL_FEATURES
from spring_visualizer.factory.config_builder import AnalyzerConfigBuilder

class AnalyzerFactory:
    """Factory for creating language-specific component analyzers."""

    @staticmethod
    def create_analyzer(language: str, config: Optional[AnalyzerConfig] = None) -> BaseCodeAnalyzer:
        """Create an analyzer for the specified language."""
        language = language.lower()
        if language == 'java':
            return JavaCodeAnalyzer(config or AnalyzerConfig())
        else:
            raise ConfigurationError(f"Unsupported language: {language}")

    @staticmethod
    def create_default_analyzer() -> BaseCodeAnalyzer:
        """Create a default analyzer (Java)."""
        return JavaCodeAnalyzer(AnalyzerConfig())

    @staticmethod
    def create_full_analyzer() -> BaseCodeAnalyzer:
        """Create an analyzer that renders every relation, component scans included."""
        config = AnalyzerConfigBuilder().with_features(ALL_FEATURES).build()
        return JavaCodeAnalyzer(config)
