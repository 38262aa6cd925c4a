"""Command-line interface for alcov."""
