"""Pure transformations between alcov's data models."""
