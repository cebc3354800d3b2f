"""DocStore: schemaless JSON documents in lazily created relational tables."""

__version__ = "0.1.0"

from docstore.errors import (
    ConnectionFailureError,
    ConstraintViolationError,
    DocStoreError,
    IndexConfigError,
    IndexConflictError,
    InvalidIdentifierError,
    MalformedStoredDocumentError,
    SchemaCreationError,
)
from docstore.infrastructure.schema import IndexDefinition, SchemaRegistry
from docstore.store import Document, DocumentStore

__all__ = [
    "Document",
    "DocumentStore",
    "IndexDefinition",
    "SchemaRegistry",
    "DocStoreError",
    "ConnectionFailureError",
    "ConstraintViolationError",
    "IndexConfigError",
    "IndexConflictError",
    "InvalidIdentifierError",
    "MalformedStoredDocumentError",
    "SchemaCreationError",
]
