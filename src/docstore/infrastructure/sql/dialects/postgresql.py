"""
PostgreSQL-specific SQL dialect implementation.

Computed index columns are STORED generated columns built from
``jsonb_path_query_first`` so the JSON path syntax matches the one callers
register. The JSON validity guard uses the ``IS JSON`` predicate, which
requires PostgreSQL 16 or newer.
"""

import uuid
from typing import Any, Optional

from ..core.identifier import qualify_table, quote_identifier, quote_literal
from .base import DOCUMENT_COLUMN, ID_COLUMN, BaseDialect, Probe


class PostgreSQLDialect(BaseDialect):
    """PostgreSQL SQL dialect implementation."""

    name = "postgresql"
    default_schema = "public"

    def quote(self, identifier: str) -> str:
        """Quote an identifier using PostgreSQL syntax (double quotes)."""
        return quote_identifier(identifier, dialect=self.name)

    def qualify(self, table: str, schema: Optional[str] = None) -> str:
        """Create a fully qualified table reference."""
        return qualify_table(table, schema, dialect=self.name)

    def bind_id(self, document_id: uuid.UUID) -> Any:
        # psycopg adapts uuid.UUID to the native uuid type
        return document_id

    def json_value(self, json_path: str, column: str = DOCUMENT_COLUMN) -> str:
        return (
            f"(jsonb_path_query_first(CAST({self.quote(column)} AS jsonb), "
            f"{quote_literal(json_path)}) #>> '{{}}')"
        )

    def json_valid(self, column: str = DOCUMENT_COLUMN) -> str:
        return f"({self.quote(column)} IS JSON)"

    def table_exists_probe(self, schema: str, table: str) -> Probe:
        return (
            "SELECT 1 FROM information_schema.tables "
            "WHERE table_schema = :schema_name AND table_name = :table_name",
            {"schema_name": schema, "table_name": table},
        )

    def column_exists_probe(self, schema: str, table: str, column: str) -> Probe:
        return (
            "SELECT 1 FROM information_schema.columns "
            "WHERE table_schema = :schema_name AND table_name = :table_name "
            "AND column_name = :column_name",
            {"schema_name": schema, "table_name": table, "column_name": column},
        )

    def build_create_table(self, schema: str, table: str) -> str:
        qualified_table = self.qualify(table, schema)
        pk_name = self.quote(f"pk_{table}")
        lines = [
            f"CREATE TABLE IF NOT EXISTS {qualified_table} (",
            f"  {self.quote(ID_COLUMN)} UUID NOT NULL,",
            f"  {self.quote(DOCUMENT_COLUMN)} TEXT NOT NULL,",
            f"  CONSTRAINT {pk_name} PRIMARY KEY ({self.quote(ID_COLUMN)})",
            ")",
        ]
        return "\n".join(lines)

    def build_add_computed_column(
        self,
        schema: str,
        table: str,
        column: str,
        json_path: str,
        value_type: str = "text",
    ) -> str:
        """
        Build the STORED generated column for an index.

        ``#>>`` yields text, so a ``numeric`` column casts it; comparisons
        such as ``age > :min_age`` then bind against a number, not a string.
        """
        expression = self.json_value(json_path)
        if value_type == "numeric":
            expression = f"(CAST({expression} AS NUMERIC))"
        return (
            f"ALTER TABLE {self.qualify(table, schema)} "
            f"ADD COLUMN IF NOT EXISTS {self.quote(column)} {value_type.upper()} "
            f"GENERATED ALWAYS AS {expression} STORED"
        )

    def build_create_index(
        self, schema: str, table: str, column: str, index_name: str, unique: bool
    ) -> str:
        unique_str = "UNIQUE " if unique else ""
        return (
            f"CREATE {unique_str}INDEX IF NOT EXISTS {self.quote(index_name)} "
            f"ON {self.qualify(table, schema)} ({self.quote(column)})"
        )
