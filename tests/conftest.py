"""Pytest configuration and shared fixtures for the DocStore suite.

Behavioural tests run against SQLite files created in ``tmp_path`` through
the aiosqlite driver. Tests marked ``postgres`` run only when
DOCSTORE_TEST_POSTGRES_URI points at a disposable PostgreSQL 16+ database.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Optional local overrides for the test run (e.g. DOCSTORE_TEST_POSTGRES_URI)
_TEST_ENV_FILE = Path(__file__).parent.parent / ".env.test"
if _TEST_ENV_FILE.exists():
    load_dotenv(_TEST_ENV_FILE, override=True)

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

from docstore.config import get_settings
from docstore.infrastructure.schema.registry import SchemaRegistry
from docstore.store import DocumentStore

POSTGRES_ENV = "DOCSTORE_TEST_POSTGRES_URI"


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Skip PostgreSQL-backed tests unless a test database is configured."""
    if os.getenv(POSTGRES_ENV):
        return
    skip_postgres = pytest.mark.skip(
        reason=f"Set {POSTGRES_ENV} to run PostgreSQL-backed tests."
    )
    for item in items:
        if "postgres" in item.keywords:
            item.add_marker(skip_postgres)


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch):
    """Keep DOCSTORE_* variables of the developer shell out of the tests."""
    for name in list(os.environ):
        if name.startswith("DOCSTORE_") and name != POSTGRES_ENV:
            monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sqlite_uri(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'documents.db'}"


@pytest_asyncio.fixture
async def engine(sqlite_uri: str):
    engine = create_async_engine(sqlite_uri)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def registry() -> SchemaRegistry:
    """A private registry so tests never share created keys."""
    return SchemaRegistry()


@pytest.fixture
def store(engine, registry: SchemaRegistry) -> DocumentStore:
    return DocumentStore(engine, registry=registry)
