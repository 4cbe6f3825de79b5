from dataclasses import dataclass, field
from typing import Dict, FrozenSet
from spring_visualizer.models.domain_models import Stereotype

FEATURE_IMPORT = 'import'
FEATURE_COMPONENT_SCAN = 'componentscan'
FEATURE_AUTOWIRED = 'autowired'
FEATURE_BEAN = 'bean'
ALL_FEATURES: FrozenSet[str] = frozenset({FEATURE_IMPORT, FEATURE_COMPONENT_SCAN, FEATURE_AUTOWIRED, FEATURE_BEAN})
DEFAULT_FEATURES: FrozenSet[str] = frozenset({FEATURE_IMPORT, FEATURE_AUTOWIRED, FEATURE_BEAN})


@dataclass(frozen=True)
class AnalyzerConfig:
    """Configuration for the Spring component analyzer."""
    file_extension: str = '.java'
    stereotype_annotations: Dict[str, Stereotype] = field(default_factory=lambda: {
        'SpringBootApplication': Stereotype.SPRING_BOOT_APPLICATION,
        'Configuration': Stereotype.CONFIGURATION,
        'Controller': Stereotype.CONTROLLER,
        'RestController': Stereotype.CONTROLLER,
        'Service': Stereotype.SERVICE,
        'Repository': Stereotype.REPOSITORY,
        'Component': Stereotype.COMPONENT,
    })
    # Edge kinds written by the renderer; the graph itself always holds every kind.
    features: FrozenSet[str] = DEFAULT_FEATURES
    max_workers: int = 1
    skip_dirs: FrozenSet[str] = frozenset({
        '.git', '.idea', 'env', '.github', '.gitlab', 'target', 'build',
        'out', 'bin', '.vscode', 'node_modules', '__pycache__', '.gradle'
    })

    def has_feature(self, feature: str) -> bool:
        return feature in self.features
