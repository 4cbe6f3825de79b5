"""Static Spring component graph extraction from Java sources."""

__version__ = "0.1.0"
