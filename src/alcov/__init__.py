"""Coverage conversion for AL test runs: dumps in, Cobertura/JUnit/XUnit out."""

from alcov._meta import __version__, logger

__all__ = ["__version__", "logger"]
