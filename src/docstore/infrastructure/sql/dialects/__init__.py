"""SQL dialects for the supported database engines."""

from typing import Dict, Type

from .base import DOCUMENT_COLUMN, ID_COLUMN, BaseDialect, Dialect
from .postgresql import PostgreSQLDialect
from .sqlite import SQLiteDialect

_DIALECTS: Dict[str, Type[BaseDialect]] = {
    PostgreSQLDialect.name: PostgreSQLDialect,
    SQLiteDialect.name: SQLiteDialect,
}


def get_dialect(name: str) -> BaseDialect:
    """Return the dialect for a SQLAlchemy dialect name (e.g. ``engine.dialect.name``)."""
    try:
        return _DIALECTS[name]()
    except KeyError:
        available = sorted(_DIALECTS)
        raise ValueError(
            f"Unsupported database dialect '{name}'. Available: {available}"
        ) from None


__all__ = [
    "ID_COLUMN",
    "DOCUMENT_COLUMN",
    "Dialect",
    "BaseDialect",
    "PostgreSQLDialect",
    "SQLiteDialect",
    "get_dialect",
]
