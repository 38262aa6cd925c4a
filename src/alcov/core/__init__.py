"""Core configuration, data model and pipeline for alcov."""
