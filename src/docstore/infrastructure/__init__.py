"""Infrastructure layer: SQL generation and schema lifecycle."""
