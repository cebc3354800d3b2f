"""
SQL identifier handling utilities.

Provides validation, quoting and qualification of SQL identifiers (table,
column and index names) plus string-literal quoting for the few values that
must be embedded in DDL text, such as JSON path expressions.
"""

import re
from typing import Optional

from docstore.errors import InvalidIdentifierError

# PostgreSQL truncates identifiers beyond NAMEDATALEN - 1 bytes
MAX_IDENTIFIER_LENGTH = 63

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# $, $.member, $.a.b, $.items[0]; quoted members are not supported
_JSON_PATH_RE = re.compile(r"^\$(\.[A-Za-z_][A-Za-z0-9_]*|\[[0-9]+\])*$")


def validate_identifier(name: str, kind: str = "identifier") -> str:
    """
    Ensure a name is safe to use as a SQL identifier.

    Args:
        name: Candidate identifier
        kind: What the identifier names, used in the error message

    Returns:
        The unchanged name

    Raises:
        InvalidIdentifierError: If the name is empty, too long or contains
            characters outside ``[A-Za-z0-9_]``

    Examples:
        >>> validate_identifier("users")
        'users'
        >>> validate_identifier("users; DROP TABLE x")
        Traceback (most recent call last):
        ...
        docstore.errors.InvalidIdentifierError: Invalid identifier ...
    """
    if not name or not isinstance(name, str):
        raise InvalidIdentifierError(kind, name, "must be a non-empty string")
    if len(name) > MAX_IDENTIFIER_LENGTH:
        raise InvalidIdentifierError(
            kind, name, f"too long (max {MAX_IDENTIFIER_LENGTH} characters)"
        )
    if not _IDENTIFIER_RE.match(name):
        raise InvalidIdentifierError(
            kind, name, "only letters, digits and underscores are allowed"
        )
    return name


def validate_json_path(path: str) -> str:
    """
    Ensure a JSON path uses the supported member/array-index subset.

    Examples:
        >>> validate_json_path("$.address.city")
        '$.address.city'
        >>> validate_json_path("$.tags[0]")
        '$.tags[0]'
    """
    if not path or not isinstance(path, str):
        raise InvalidIdentifierError("json path", path, "must be a non-empty string")
    if not _JSON_PATH_RE.match(path):
        raise InvalidIdentifierError(
            "json path",
            path,
            "expected '$' followed by '.member' or '[index]' segments",
        )
    return path


def quote_identifier(name: str, dialect: str = "postgresql") -> str:
    """
    Quote a SQL identifier (table or column name).

    Args:
        name: The identifier to quote
        dialect: Database dialect ("postgresql", "sqlite")

    Returns:
        Properly quoted identifier

    Examples:
        >>> quote_identifier("company_id")
        '"company_id"'
        >>> quote_identifier('odd"name')
        '"odd""name"'
    """
    # Both supported dialects use ANSI double quotes
    escaped = name.replace('"', '""')
    return f'"{escaped}"'


def qualify_table(
    table: str, schema: Optional[str] = None, dialect: str = "postgresql"
) -> str:
    """
    Create a fully qualified table name with optional schema prefix.

    Examples:
        >>> qualify_table("users", schema="public")
        '"public"."users"'
        >>> qualify_table("users")
        '"users"'
    """
    quoted_table = quote_identifier(table, dialect)
    if schema and str(schema).strip():
        return f"{quote_identifier(schema, dialect)}.{quoted_table}"
    return quoted_table


def quote_literal(value: str) -> str:
    """
    Quote a string literal for embedding in DDL text.

    Examples:
        >>> quote_literal("$.name")
        "'$.name'"
        >>> quote_literal("it's")
        "'it''s'"
    """
    escaped = value.replace("'", "''")
    return f"'{escaped}'"
