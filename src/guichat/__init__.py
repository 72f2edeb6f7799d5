"""guichat - GUI chat protocol and plugin execution engine."""

__version__ = "0.1.0"
