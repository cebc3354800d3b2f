"""
Dialect protocol shared by the SQL generators.

A dialect knows how to spell the document table, its computed index columns
and the catalog probes that make DDL re-runnable on one database engine.
"""

import uuid
from typing import Any, Dict, Optional, Protocol, Tuple

# Reserved column names of every collection table
ID_COLUMN = "_id"
DOCUMENT_COLUMN = "_document"

Probe = Tuple[str, Dict[str, Any]]


class Dialect(Protocol):
    """Protocol for SQL dialects."""

    name: str
    default_schema: str

    def quote(self, identifier: str) -> str: ...
    def qualify(self, table: str, schema: Optional[str] = None) -> str: ...
    def bind_id(self, document_id: uuid.UUID) -> Any: ...
    def json_value(self, json_path: str, column: str = DOCUMENT_COLUMN) -> str: ...
    def json_valid(self, column: str = DOCUMENT_COLUMN) -> str: ...
    def table_exists_probe(self, schema: str, table: str) -> Probe: ...
    def column_exists_probe(self, schema: str, table: str, column: str) -> Probe: ...
    def build_create_table(self, schema: str, table: str) -> str: ...
    def build_add_computed_column(
        self,
        schema: str,
        table: str,
        column: str,
        json_path: str,
        value_type: str = "text",
    ) -> str: ...
    def build_create_index(
        self, schema: str, table: str, column: str, index_name: str, unique: bool
    ) -> str: ...
    def build_select_documents(
        self,
        schema: str,
        table: str,
        where: Optional[str] = None,
        suffix: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> str: ...
    def build_insert_document(self, schema: str, table: str) -> str: ...


class BaseDialect:
    """Statement shapes common to the supported dialects."""

    name = "ansi"
    default_schema = ""

    def quote(self, identifier: str) -> str:
        raise NotImplementedError

    def qualify(self, table: str, schema: Optional[str] = None) -> str:
        raise NotImplementedError

    def bind_id(self, document_id: uuid.UUID) -> Any:
        return str(document_id)

    def json_value(self, json_path: str, column: str = DOCUMENT_COLUMN) -> str:
        raise NotImplementedError

    def json_valid(self, column: str = DOCUMENT_COLUMN) -> str:
        raise NotImplementedError

    def build_select_documents(
        self,
        schema: str,
        table: str,
        where: Optional[str] = None,
        suffix: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> str:
        """
        Build the document SELECT.

        ``where`` and ``suffix`` are trusted query fragments and are inserted
        verbatim; values that come from outside must be passed as bound
        parameters instead.
        """
        lines = [
            f"SELECT {self.quote(ID_COLUMN)}, {self.quote(DOCUMENT_COLUMN)} "
            f"FROM {self.qualify(table, schema)}"
        ]
        if where is not None:
            lines.append(f"WHERE {self.json_valid()} AND ({where})")
        if suffix is not None:
            lines.append(suffix)
        if limit is not None:
            lines.append(f"LIMIT {int(limit)}")
        return "\n".join(lines)

    def build_insert_document(self, schema: str, table: str) -> str:
        quoted_cols = ", ".join(self.quote(c) for c in (ID_COLUMN, DOCUMENT_COLUMN))
        return (
            f"INSERT INTO {self.qualify(table, schema)} ({quoted_cols}) "
            "VALUES (:doc_id, :doc_body)"
        )

    def build_select_by_id(self, schema: str, table: str) -> str:
        return (
            f"SELECT {self.quote(ID_COLUMN)}, {self.quote(DOCUMENT_COLUMN)} "
            f"FROM {self.qualify(table, schema)} "
            f"WHERE {self.quote(ID_COLUMN)} = :doc_id"
        )
