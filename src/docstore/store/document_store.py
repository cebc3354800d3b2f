"""
JSON document store on top of a relational database.

Each collection lives in its own table with an ``_id`` key and a ``_document``
text column. Tables and their computed index columns are created on first
use through the shared ``SchemaRegistry``; every operation ensures the schema
before it runs its data statement.

Trust boundary: the ``where`` and ``suffix`` fragments accepted by the read
operations are inserted into the statement verbatim. Anything influenced by
outside input must go through ``params``, which are always bound.
"""

from __future__ import annotations

import asyncio
import json
import uuid
from typing import Any, Awaitable, Dict, Iterable, List, Mapping, Optional, TypeVar, Union

from sqlalchemy import text
from sqlalchemy.engine import Row
from sqlalchemy.exc import DataError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine

from docstore.config.index_config import load_index_definitions
from docstore.config.settings import Settings, get_settings
from docstore.errors import (
    ConstraintViolationError,
    IndexConflictError,
    MalformedStoredDocumentError,
)
from docstore.infrastructure.db import acquire_connection, build_engine
from docstore.infrastructure.schema.core import IndexDefinition, IndexSet
from docstore.infrastructure.schema.ddl_generator import (
    generate_collection_ddl,
    render_ddl,
)
from docstore.infrastructure.schema.registry import SchemaRegistry, default_registry
from docstore.infrastructure.sql.core.identifier import (
    validate_identifier,
    validate_json_path,
)
from docstore.infrastructure.sql.dialects import get_dialect
from docstore.utils.logging import get_logger

from .models import Document

structured_logger = get_logger(__name__)

T = TypeVar("T")

Params = Optional[Mapping[str, Any]]


def json_dumps(obj: Any) -> str:
    # NaN and Infinity are not JSON; reject them before anything is written
    return json.dumps(obj, ensure_ascii=False, allow_nan=False)


def _as_uuid(value: Any) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))


class DocumentStore:
    """Read and write JSON documents in lazily created collection tables."""

    def __init__(
        self,
        engine: AsyncEngine,
        schema: Optional[str] = None,
        registry: Optional[SchemaRegistry] = None,
        indexes: Iterable[IndexDefinition] = (),
        owns_engine: bool = False,
    ):
        self.engine = engine
        self.dialect = get_dialect(engine.dialect.name)
        self.schema = validate_identifier(
            schema or self.dialect.default_schema, "schema name"
        )
        self.registry = registry or default_registry()
        self._indexes = IndexSet.of(indexes)
        self._owns_engine = owns_engine
        self._logger = structured_logger.bind(schema_name=self.schema)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "DocumentStore":
        """Build a store, its engine and its index definitions from settings."""
        settings = settings or get_settings()
        engine = build_engine(
            settings.get_database_connection_string(),
            pool_size=settings.pool_size,
            echo=settings.echo_sql,
        )
        indexes: List[IndexDefinition] = []
        if settings.indexes_config:
            indexes = load_index_definitions(settings.indexes_config)
        return cls(
            engine,
            schema=settings.database_schema,
            indexes=indexes,
            owns_engine=True,
        )

    async def dispose(self) -> None:
        """Dispose the engine if this store created it."""
        if self._owns_engine:
            await self.engine.dispose()

    async def __aenter__(self) -> "DocumentStore":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.dispose()

    # ------------------------------------------------------------------
    # Index registration
    # ------------------------------------------------------------------

    @property
    def indexes(self) -> List[IndexDefinition]:
        return list(self._indexes)

    def register_index(
        self,
        collection: str,
        json_path: str,
        column_name: Optional[str] = None,
        unique: bool = False,
        value_type: str = "text",
    ) -> IndexDefinition:
        """
        Register a secondary index on a JSON path of a collection.

        Must happen before the collection is first used in this process: the
        computed column is only added when the table is ensured.

        ``value_type`` sets the column type. On PostgreSQL a ``"text"`` column
        compares as a string, so use ``"numeric"`` for predicates such as
        ``age > :min_age`` with a number bound to ``min_age``.

        Raises:
            InvalidIdentifierError: For unsafe names or paths, an unknown
                value type, or an index name that is too long
            IndexConflictError: If the column name is already bound differently,
                or the collection schema was already created
        """
        definition = IndexDefinition.create(
            collection, json_path, column_name, unique, value_type
        )
        registered = {d.column_name: d for d in self._indexes.for_collection(collection)}
        if registered.get(definition.column_name) == definition:
            return definition
        if self.registry.is_created(self.engine, self.schema, collection):
            raise IndexConflictError(
                collection,
                definition.column_name,
                f"Collection '{collection}' is already initialized; register "
                "indexes before the first operation on it",
            )
        self._indexes.add(definition)
        self._logger.info(
            "index.registered",
            collection=collection,
            json_path=definition.json_path,
            column_name=definition.column_name,
            unique=definition.is_unique,
            value_type=definition.value_type,
        )
        return definition

    def json_value(self, json_path: str) -> str:
        """SQL expression extracting ``json_path`` from the document body, for filters."""
        return self.dialect.json_value(validate_json_path(json_path))

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    async def ensure_collection(
        self, collection: str, *, timeout: Optional[float] = None
    ) -> bool:
        """Create the collection table and indexes if needed; True if this call created them."""
        return await self._run(self._ensure(collection), timeout)

    def preview_ddl(self, collection: str) -> List[str]:
        """Render the DDL that ensuring the collection would run."""
        steps = generate_collection_ddl(
            self.dialect,
            self.schema,
            collection,
            self._indexes.for_collection(collection),
        )
        return render_ddl(steps)

    async def _ensure(self, collection: str) -> bool:
        validate_identifier(collection, "collection name")
        return await self.registry.ensure_created(
            self.engine,
            self.schema,
            collection,
            self._indexes.for_collection(collection),
            dialect=self.dialect,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_one(
        self,
        collection: str,
        where: Optional[str] = None,
        suffix: Optional[str] = None,
        params: Params = None,
        *,
        timeout: Optional[float] = None,
    ) -> Optional[Document]:
        """
        Fetch the first matching document.

        Args:
            collection: Collection name
            where: Trusted predicate, combined with a JSON validity guard
            suffix: Trusted clause appended after the predicate (e.g. ORDER BY)
            params: Values bound to ``:name`` placeholders
            timeout: Seconds before the operation is cancelled

        Returns:
            The document, or None when no row matches

        Raises:
            MalformedStoredDocumentError: If the stored body is not valid JSON
        """
        return await self._run(self._get_one(collection, where, suffix, params), timeout)

    async def _get_one(
        self, collection: str, where: Optional[str], suffix: Optional[str], params: Params
    ) -> Optional[Document]:
        await self._ensure(collection)
        sql = self.dialect.build_select_documents(
            self.schema, collection, where=where, suffix=suffix, limit=1
        )
        rows = await self._fetch(sql, params)
        if not rows:
            return None
        document = self._to_document(collection, rows[0])
        if document.error is not None:
            raise document.error
        return document

    async def get_many(
        self,
        collection: str,
        where: Optional[str] = None,
        suffix: Optional[str] = None,
        params: Params = None,
        *,
        timeout: Optional[float] = None,
    ) -> List[Document]:
        """
        Fetch every matching document.

        A row whose body does not parse is returned as a ``Document`` with
        ``body=None`` and ``error`` set; the remaining rows are still parsed.
        """
        return await self._run(self._get_many(collection, where, suffix, params), timeout)

    async def _get_many(
        self, collection: str, where: Optional[str], suffix: Optional[str], params: Params
    ) -> List[Document]:
        await self._ensure(collection)
        sql = self.dialect.build_select_documents(
            self.schema, collection, where=where, suffix=suffix
        )
        rows = await self._fetch(sql, params)
        return [self._to_document(collection, row) for row in rows]

    async def get_by_id(
        self,
        collection: str,
        document_id: Union[uuid.UUID, str],
        *,
        timeout: Optional[float] = None,
    ) -> Optional[Document]:
        """Fetch a document by the identifier returned from ``insert``."""
        return await self._run(self._get_by_id(collection, document_id), timeout)

    async def _get_by_id(
        self, collection: str, document_id: Union[uuid.UUID, str]
    ) -> Optional[Document]:
        key = _as_uuid(document_id)
        await self._ensure(collection)
        sql = self.dialect.build_select_by_id(self.schema, collection)
        rows = await self._fetch(sql, {"doc_id": self.dialect.bind_id(key)})
        if not rows:
            return None
        document = self._to_document(collection, rows[0])
        if document.error is not None:
            raise document.error
        return document

    async def _fetch(self, sql: str, params: Params) -> List[Row]:
        async with acquire_connection(self.engine) as connection:
            result = await connection.execute(text(sql), dict(params or {}))
            return list(result.all())

    def _to_document(self, collection: str, row: Row) -> Document:
        document_id = _as_uuid(row[0])
        try:
            body = json.loads(row[1])
        except (TypeError, ValueError) as e:
            error = MalformedStoredDocumentError(collection, document_id, str(e))
            self._logger.warning(
                "document.malformed",
                collection=collection,
                document_id=str(document_id),
                detail=str(e),
            )
            return Document(id=document_id, body=None, error=error)
        return Document(id=document_id, body=body)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def insert(
        self, collection: str, document: Any, *, timeout: Optional[float] = None
    ) -> uuid.UUID:
        """
        Insert a document and return its generated identifier.

        ``document`` is any JSON-serializable value; Pydantic models are
        dumped in JSON mode first.

        Raises:
            TypeError: If the value is not JSON-serializable (nothing is written)
            ValueError: If the value holds NaN or Infinity (nothing is written)
            ConstraintViolationError: On a unique index or identifier collision,
                or a value a numeric index column cannot hold
        """
        return await self._run(self._insert(collection, document), timeout)

    async def _insert(self, collection: str, document: Any) -> uuid.UUID:
        document_id = uuid.uuid4()
        if hasattr(document, "model_dump"):
            document = document.model_dump(mode="json")
        body = json_dumps(document)

        await self._ensure(collection)

        sql = self.dialect.build_insert_document(self.schema, collection)
        params: Dict[str, Any] = {
            "doc_id": self.dialect.bind_id(document_id),
            "doc_body": body,
        }
        async with acquire_connection(self.engine) as connection:
            try:
                async with connection.begin():
                    await connection.execute(text(sql), params)
            except IntegrityError as e:
                self._logger.warning(
                    "document.constraint_violation",
                    collection=collection,
                    document_id=str(document_id),
                )
                raise ConstraintViolationError(
                    collection,
                    f"Insert into collection '{collection}' violates a unique constraint",
                ) from e
            except DataError as e:
                self._logger.warning(
                    "document.constraint_violation",
                    collection=collection,
                    document_id=str(document_id),
                    reason="index_value_type",
                )
                raise ConstraintViolationError(
                    collection,
                    "Document does not fit the typed index columns of collection "
                    f"'{collection}'",
                ) from e

        self._logger.debug(
            "document.inserted", collection=collection, document_id=str(document_id)
        )
        return document_id

    @staticmethod
    async def _run(operation: Awaitable[T], timeout: Optional[float]) -> T:
        if timeout is None:
            return await operation
        return await asyncio.wait_for(operation, timeout)


__all__ = ["DocumentStore", "json_dumps"]
