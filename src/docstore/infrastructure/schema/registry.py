"""Process-wide registry of collections whose schema has been created.

Creation is a per-key single flight: the first caller for a
``(target, schema, collection)`` key runs the DDL while later callers for the
same key wait on a one-shot signal. Callers for other keys never wait.
Signals are ``concurrent.futures.Future`` objects so that stores running on
different threads or event loops still share one flight per key.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import threading
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from docstore.errors import SchemaCreationError
from docstore.infrastructure.db import acquire_connection, connection_target
from docstore.infrastructure.sql.dialects import BaseDialect, get_dialect
from docstore.utils.logging import get_logger

from .core import DdlStep, IndexDefinition
from .ddl_generator import generate_collection_ddl

logger = get_logger(__name__)


@dataclass(frozen=True)
class SchemaKey:
    """Cache key for one collection table on one database."""

    target: str
    schema_name: str
    collection: str


class SchemaRegistry:
    """Tracks created collection tables and serializes their first creation."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._created: Set[SchemaKey] = set()
        self._inflight: Dict[SchemaKey, concurrent.futures.Future] = {}

    def key_for(self, engine: AsyncEngine, schema_name: str, collection: str) -> SchemaKey:
        return SchemaKey(connection_target(engine), schema_name, collection)

    def is_created(self, engine: AsyncEngine, schema_name: str, collection: str) -> bool:
        key = self.key_for(engine, schema_name, collection)
        with self._lock:
            return key in self._created

    def reset(self) -> None:
        """Forget every created key. Flights already running are unaffected."""
        with self._lock:
            self._created.clear()

    async def ensure_created(
        self,
        engine: AsyncEngine,
        schema_name: str,
        collection: str,
        indexes: Iterable[IndexDefinition] = (),
        dialect: Optional[BaseDialect] = None,
    ) -> bool:
        """
        Make sure the collection table and its indexes exist.

        Args:
            engine: Engine of the target database
            schema_name: Database schema holding the table
            collection: Collection (table) name
            indexes: Registered index definitions; other collections' are ignored
            dialect: SQL dialect, derived from the engine when omitted

        Returns:
            True when this call ran the DDL, False when the schema was already
            known or another caller created it

        Raises:
            InvalidIdentifierError: Before any DDL, for unsafe names or paths
            ConnectionFailureError: If no connection could be acquired
            SchemaCreationError: If the DDL failed; the key stays unmarked
        """
        key = self.key_for(engine, schema_name, collection)
        while True:
            with self._lock:
                if key in self._created:
                    return False
                flight = self._inflight.get(key)
                owner = flight is None
                if owner:
                    flight = concurrent.futures.Future()
                    self._inflight[key] = flight

            if owner:
                return await self._run_flight(key, flight, engine, indexes, dialect)

            logger.debug(
                "schema.ensure.waiting",
                schema_name=schema_name,
                collection=collection,
            )
            try:
                await asyncio.shield(asyncio.wrap_future(flight))
            except asyncio.CancelledError:
                # The owner was cancelled before committing: start over
                if flight.cancelled():
                    continue
                raise
            return False

    async def _run_flight(
        self,
        key: SchemaKey,
        flight: concurrent.futures.Future,
        engine: AsyncEngine,
        indexes: Iterable[IndexDefinition],
        dialect: Optional[BaseDialect],
    ) -> bool:
        try:
            dialect = dialect or get_dialect(engine.dialect.name)
            steps = generate_collection_ddl(
                dialect, key.schema_name, key.collection, list(indexes)
            )
            applied = await self._apply_steps(engine, key, steps)
        except asyncio.CancelledError:
            with self._lock:
                self._inflight.pop(key, None)
            flight.cancel()
            raise
        except BaseException as exc:
            with self._lock:
                self._inflight.pop(key, None)
            flight.set_exception(exc)
            raise

        with self._lock:
            self._created.add(key)
            self._inflight.pop(key, None)
        flight.set_result(True)
        logger.info(
            "schema.ensure.created",
            schema_name=key.schema_name,
            collection=key.collection,
            steps_total=len(steps),
            steps_applied=len(applied),
        )
        return True

    async def _apply_steps(
        self, engine: AsyncEngine, key: SchemaKey, steps: List[DdlStep]
    ) -> List[DdlStep]:
        """Run the steps in one transaction, skipping those already applied."""
        applied: List[DdlStep] = []
        async with acquire_connection(engine) as connection:
            try:
                async with connection.begin():
                    for step in steps:
                        result = await connection.execute(
                            text(step.probe), step.probe_params
                        )
                        if result.first() is not None:
                            logger.debug(
                                "schema.ensure.step_skipped",
                                collection=key.collection,
                                step=step.description,
                            )
                            continue
                        for statement in step.statements:
                            await connection.exec_driver_sql(statement)
                        applied.append(step)
            except SQLAlchemyError as e:
                logger.error(
                    "schema.ensure.failed",
                    schema_name=key.schema_name,
                    collection=key.collection,
                    error_type=type(e).__name__,
                )
                raise SchemaCreationError(
                    key.schema_name,
                    key.collection,
                    f"Failed to create schema for collection "
                    f"'{key.schema_name}.{key.collection}'",
                ) from e
        return applied


_DEFAULT_REGISTRY = SchemaRegistry()


def default_registry() -> SchemaRegistry:
    """Return the process-wide registry shared by stores by default."""
    return _DEFAULT_REGISTRY


__all__ = [
    "SchemaKey",
    "SchemaRegistry",
    "default_registry",
]
