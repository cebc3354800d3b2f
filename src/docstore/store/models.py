"""Document value returned by store reads."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, Optional

from docstore.errors import MalformedStoredDocumentError


@dataclass(frozen=True)
class Document:
    """
    A stored document.

    Attributes:
        id: Identifier generated when the document was inserted.
        body: Parsed JSON value; None when the stored text is malformed.
        error: Set instead of ``body`` for a malformed row in ``get_many``.
    """

    id: uuid.UUID
    body: Any
    error: Optional[MalformedStoredDocumentError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


__all__ = ["Document"]
