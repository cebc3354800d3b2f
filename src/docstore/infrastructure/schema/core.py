"""Core schema types for DocStore collections."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from docstore.errors import IndexConflictError, InvalidIdentifierError
from docstore.infrastructure.sql.core.identifier import (
    validate_identifier,
    validate_json_path,
)
from docstore.infrastructure.sql.dialects.base import DOCUMENT_COLUMN, ID_COLUMN

_NON_IDENTIFIER_CHARS = re.compile(r"[^a-z0-9_]", re.IGNORECASE)

RESERVED_COLUMNS = frozenset({ID_COLUMN, DOCUMENT_COLUMN})

# Type of the computed column; "text" keeps the extracted value as a string
VALUE_TYPES = ("text", "numeric")


def derive_column_name(json_path: str) -> str:
    """
    Derive a column name from a JSON path.

    Every character outside ``[A-Za-z0-9_]`` becomes an underscore.

    Examples:
        >>> derive_column_name("$.name")
        '__name'
        >>> derive_column_name("$.address.city")
        '__address_city'
    """
    return _NON_IDENTIFIER_CHARS.sub("_", json_path)


@dataclass(frozen=True)
class IndexDefinition:
    """Secondary index on a value extracted from each document."""

    collection: str
    json_path: str
    column_name: str
    is_unique: bool = False
    value_type: str = "text"

    @classmethod
    def create(
        cls,
        collection: str,
        json_path: str,
        column_name: Optional[str] = None,
        unique: bool = False,
        value_type: str = "text",
    ) -> "IndexDefinition":
        """Validate inputs and derive the column name when none is given.

        Raises:
            InvalidIdentifierError: For unsafe names or paths, a reserved
                column, an unknown value type, or an index name over the
                identifier length limit
        """
        validate_identifier(collection, "collection name")
        validate_json_path(json_path)
        column = column_name or derive_column_name(json_path)
        validate_identifier(column, "column name")
        if column in RESERVED_COLUMNS:
            raise InvalidIdentifierError(
                "column name", column, "reserved for the document table"
            )
        if value_type not in VALUE_TYPES:
            raise InvalidIdentifierError(
                "value type", value_type, f"expected one of {list(VALUE_TYPES)}"
            )
        definition = cls(
            collection=collection,
            json_path=json_path,
            column_name=column,
            is_unique=bool(unique),
            value_type=value_type,
        )
        validate_identifier(definition.index_name, "index name")
        return definition

    @property
    def index_name(self) -> str:
        """Schema-wide index name.

        The collection length prefix keeps names of different
        ``(collection, column)`` pairs apart, e.g. ``a_b``/``c`` gives
        ``idx_3_a_b_c`` while ``a``/``b_c`` gives ``idx_1_a_b_c``.
        """
        return f"idx_{len(self.collection)}_{self.collection}_{self.column_name}"


@dataclass
class IndexSet:
    """
    Ordered index definitions per collection.

    Column names are unique within a collection. Re-adding an identical
    definition is a no-op; anything else that reuses a column name raises
    ``IndexConflictError``.
    """

    _by_collection: Dict[str, Dict[str, IndexDefinition]] = field(default_factory=dict)

    def add(self, definition: IndexDefinition) -> bool:
        """Add a definition, returning False when it was already present."""
        columns = self._by_collection.setdefault(definition.collection, {})
        existing = columns.get(definition.column_name)
        if existing is None:
            columns[definition.column_name] = definition
            return True
        if existing == definition:
            return False
        if existing.json_path != definition.json_path:
            message = (
                f"Column '{definition.column_name}' of collection "
                f"'{definition.collection}' is already bound to path "
                f"'{existing.json_path}', cannot rebind to '{definition.json_path}'"
            )
        else:
            message = (
                f"Index '{definition.column_name}' of collection "
                f"'{definition.collection}' is already registered with "
                f"unique={existing.is_unique}, value_type={existing.value_type!r}"
            )
        raise IndexConflictError(definition.collection, definition.column_name, message)

    def for_collection(self, collection: str) -> List[IndexDefinition]:
        return list(self._by_collection.get(collection, {}).values())

    def __iter__(self):
        for columns in self._by_collection.values():
            yield from columns.values()

    def __len__(self) -> int:
        return sum(len(columns) for columns in self._by_collection.values())

    @classmethod
    def of(cls, definitions: Iterable[IndexDefinition]) -> "IndexSet":
        index_set = cls()
        for definition in definitions:
            index_set.add(definition)
        return index_set


@dataclass(frozen=True)
class DdlStep:
    """
    One re-runnable schema change.

    ``probe`` returns a row when the change is already applied, in which case
    ``statements`` are skipped. Statements run in order.
    """

    description: str
    probe: str
    probe_params: Dict[str, Any]
    statements: Tuple[str, ...]


__all__ = [
    "RESERVED_COLUMNS",
    "VALUE_TYPES",
    "derive_column_name",
    "IndexDefinition",
    "IndexSet",
    "DdlStep",
]
