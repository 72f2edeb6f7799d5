"""Command-line interface for guichat."""
