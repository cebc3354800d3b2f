"""
SQLite-specific SQL dialect implementation.

Used for local development and the test suite. Computed index columns are
VIRTUAL generated columns over ``json_extract`` (SQLite can only add VIRTUAL
generated columns with ALTER TABLE).
"""

from typing import Optional

from ..core.identifier import qualify_table, quote_identifier, quote_literal
from .base import DOCUMENT_COLUMN, ID_COLUMN, BaseDialect, Probe


class SQLiteDialect(BaseDialect):
    """SQLite SQL dialect implementation."""

    name = "sqlite"
    default_schema = "main"

    def quote(self, identifier: str) -> str:
        return quote_identifier(identifier, dialect=self.name)

    def qualify(self, table: str, schema: Optional[str] = None) -> str:
        return qualify_table(table, schema, dialect=self.name)

    def json_value(self, json_path: str, column: str = DOCUMENT_COLUMN) -> str:
        return f"json_extract({self.quote(column)}, {quote_literal(json_path)})"

    def json_valid(self, column: str = DOCUMENT_COLUMN) -> str:
        return f"json_valid({self.quote(column)})"

    def table_exists_probe(self, schema: str, table: str) -> Probe:
        return (
            f"SELECT 1 FROM {self.quote(schema)}.sqlite_master "
            "WHERE type = 'table' AND name = :table_name",
            {"table_name": table},
        )

    def column_exists_probe(self, schema: str, table: str, column: str) -> Probe:
        return (
            "SELECT 1 FROM pragma_table_xinfo(:table_name, :schema_name) "
            "WHERE name = :column_name",
            {"schema_name": schema, "table_name": table, "column_name": column},
        )

    def build_create_table(self, schema: str, table: str) -> str:
        lines = [
            f"CREATE TABLE IF NOT EXISTS {self.qualify(table, schema)} (",
            f"  {self.quote(ID_COLUMN)} TEXT NOT NULL PRIMARY KEY,",
            f"  {self.quote(DOCUMENT_COLUMN)} TEXT NOT NULL",
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
        # Untyped "text" columns keep the JSON type json_extract returns
        declared = " NUMERIC" if value_type == "numeric" else ""
        return (
            f"ALTER TABLE {self.qualify(table, schema)} "
            f"ADD COLUMN {self.quote(column)}{declared} "
            f"GENERATED ALWAYS AS ({self.json_value(json_path)}) VIRTUAL"
        )

    def build_create_index(
        self, schema: str, table: str, column: str, index_name: str, unique: bool
    ) -> str:
        # SQLite qualifies the index name, never the indexed table
        unique_str = "UNIQUE " if unique else ""
        return (
            f"CREATE {unique_str}INDEX IF NOT EXISTS "
            f"{self.qualify(index_name, schema)} "
            f"ON {self.quote(table)} ({self.quote(column)})"
        )
