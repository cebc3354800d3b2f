"""Command-line interface for DocStore."""
