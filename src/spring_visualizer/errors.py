class SpringVisualizerError(Exception):
    """Base class for errors raised by the analyzer."""


class AnnotationSyntaxError(SpringVisualizerError):
    """An annotation token could not be interpreted."""

    def __init__(self, text: str, reason: str):
        super().__init__(f"Cannot parse annotation {text!r}: {reason}")
        self.text = text
        self.reason = reason


class SourceParseError(SpringVisualizerError):
    """A source file could not be scanned at all."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot scan {path}: {reason}")
        self.path = path


class ProjectPathError(SpringVisualizerError):
    """The project root is missing or unreadable."""


class ConfigurationError(SpringVisualizerError):
    """The analyzer was configured with invalid options."""
