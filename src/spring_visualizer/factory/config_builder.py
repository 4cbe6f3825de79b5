from typing import Dict, Iterable, Set
from spring_visualizer.errors import ConfigurationError
from spring_visualizer.models.analyzer_config import AnalyzerConfig, ALL_FEATURES
from spring_visualizer.models.domain_models import Stereotype

class AnalyzerConfigBuilder:
    """Builder pattern for creating analyzer configuration."""

    def __init__(self):
        self.config_data = {}

    def with_features(self, features: Iterable[str]) -> 'AnalyzerConfigBuilder':
        requested = {feature.strip().lower() for feature in features if feature.strip()}
        unknown = requested - ALL_FEATURES
        if unknown:
            raise ConfigurationError(
                f"unknown feature(s) {', '.join(sorted(unknown))}; "
                f"expected any of {', '.join(sorted(ALL_FEATURES))}"
            )
        self.config_data['features'] = frozenset(requested)
        return self

    def with_custom_stereotype_annotations(self, annotations: Dict[str, Stereotype]) -> 'AnalyzerConfigBuilder':
        merged = dict(AnalyzerConfig().stereotype_annotations)
        merged.update({name.lstrip('@'): stereotype for name, stereotype in annotations.items()})
        self.config_data['stereotype_annotations'] = merged
        return self

    def with_max_workers(self, max_workers: int) -> 'AnalyzerConfigBuilder':
        if max_workers < 1:
            raise ConfigurationError(f"max_workers must be at least 1, got {max_workers}")
        self.config_data['max_workers'] = max_workers
        return self

    def with_skip_dirs(self, skip_dirs: Set[str]) -> 'AnalyzerConfigBuilder':
        self.config_data['skip_dirs'] = frozenset(skip_dirs)
        return self

    def build(self) -> AnalyzerConfig:
        return AnalyzerConfig(**self.config_data)
