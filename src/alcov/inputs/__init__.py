"""Readers for the external formats alcov consumes."""
