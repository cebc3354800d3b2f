"""Engine and connection helpers shared by the schema registry and the store."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from docstore.errors import ConnectionFailureError


def connection_target(engine: AsyncEngine) -> str:
    """Identify the database behind an engine, without credentials."""
    return engine.url.render_as_string(hide_password=True)


def normalize_database_uri(uri: str) -> str:
    """
    Map plain PostgreSQL URIs onto the async psycopg driver.

    Examples:
        >>> normalize_database_uri("postgres://u:p@db/app")
        'postgresql+psycopg://u:p@db/app'
        >>> normalize_database_uri("sqlite+aiosqlite:///./docstore.db")
        'sqlite+aiosqlite:///./docstore.db'
    """
    for prefix in ("postgres://", "postgresql://"):
        if uri.startswith(prefix):
            return "postgresql+psycopg://" + uri[len(prefix):]
    if uri.startswith("sqlite:///"):
        return "sqlite+aiosqlite:///" + uri[len("sqlite:///"):]
    return uri


def build_engine(
    uri: str, pool_size: Optional[int] = None, echo: bool = False
) -> AsyncEngine:
    """Create an async engine; pool sizing only applies to server databases."""
    url = normalize_database_uri(uri)
    kwargs = {"echo": echo, "pool_pre_ping": True}
    if pool_size and not url.startswith("sqlite"):
        kwargs["pool_size"] = pool_size
    return create_async_engine(url, **kwargs)


@asynccontextmanager
async def acquire_connection(engine: AsyncEngine) -> AsyncIterator[AsyncConnection]:
    """Acquire a connection for one logical operation and always release it."""
    try:
        connection = await engine.connect()
    except (OperationalError, InterfaceError, OSError) as e:
        raise ConnectionFailureError(
            f"Database connection failed: {connection_target(engine)}"
        ) from e
    try:
        yield connection
    finally:
        await connection.close()


__all__ = [
    "connection_target",
    "normalize_database_uri",
    "build_engine",
    "acquire_connection",
]
