"""Renderers that turn in-memory models into files and terminal output."""
