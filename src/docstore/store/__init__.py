"""Document read/write operations."""

from .document_store import DocumentStore
from .models import Document

__all__ = ["Document", "DocumentStore"]
