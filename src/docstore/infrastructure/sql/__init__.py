"""
SQL module for centralized SQL generation.

This module provides reusable utilities for building SQL statements with
proper identifier validation and quoting, schema qualification, and
dialect-specific syntax.
"""

from .core.identifier import (
    qualify_table,
    quote_identifier,
    quote_literal,
    validate_identifier,
    validate_json_path,
)
from .dialects import PostgreSQLDialect, SQLiteDialect, get_dialect

__all__ = [
    "quote_identifier",
    "qualify_table",
    "quote_literal",
    "validate_identifier",
    "validate_json_path",
    "PostgreSQLDialect",
    "SQLiteDialect",
    "get_dialect",
]
