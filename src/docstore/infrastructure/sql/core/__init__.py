"""Core SQL utilities package."""

from .identifier import (
    qualify_table,
    quote_identifier,
    quote_literal,
    validate_identifier,
    validate_json_path,
)

__all__ = [
    "quote_identifier",
    "qualify_table",
    "quote_literal",
    "validate_identifier",
    "validate_json_path",
]
