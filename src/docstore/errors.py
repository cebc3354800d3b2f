"""
Exception hierarchy for DocStore.

Every error raised by the store derives from ``DocStoreError`` so callers can
catch the whole family at once. Driver exceptions are chained as
``__cause__``; messages never carry statement text.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class DocStoreError(Exception):
    """Base exception for document store failures."""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to structured dict for logging."""
        payload: Dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": str(self),
        }
        cause = self.__cause__
        if cause is not None:
            payload["original_error_type"] = type(cause).__name__
        return payload


class ConnectionFailureError(DocStoreError):
    """Raised when a database connection cannot be acquired."""


class InvalidIdentifierError(DocStoreError, ValueError):
    """Raised when a table, column, index name or JSON path is unsafe."""

    def __init__(self, kind: str, value: Any, reason: str):
        self.kind = kind
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {kind} {value!r}: {reason}")


class IndexConflictError(DocStoreError):
    """Raised when an index registration clashes with an existing one."""

    def __init__(self, collection: str, column_name: str, message: str):
        self.collection = collection
        self.column_name = column_name
        super().__init__(message)


class SchemaCreationError(DocStoreError):
    """Raised when table or index DDL fails for a collection."""

    def __init__(self, schema_name: str, collection: str, message: str):
        self.schema_name = schema_name
        self.collection = collection
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload.update(schema_name=self.schema_name, collection=self.collection)
        return payload


class MalformedStoredDocumentError(DocStoreError):
    """Raised when a stored document body is not valid JSON."""

    def __init__(self, collection: str, document_id: Optional[Any], detail: str):
        self.collection = collection
        self.document_id = document_id
        self.detail = detail
        super().__init__(
            f"Stored document {document_id} in collection '{collection}' "
            f"is not valid JSON: {detail}"
        )


class ConstraintViolationError(DocStoreError):
    """Raised when a write collides with a unique index or identifier."""

    def __init__(self, collection: str, message: str):
        self.collection = collection
        super().__init__(message)


class IndexConfigError(DocStoreError):
    """Raised when the index configuration file is missing or invalid."""


__all__ = [
    "DocStoreError",
    "ConnectionFailureError",
    "InvalidIdentifierError",
    "IndexConflictError",
    "SchemaCreationError",
    "MalformedStoredDocumentError",
    "ConstraintViolationError",
    "IndexConfigError",
]
