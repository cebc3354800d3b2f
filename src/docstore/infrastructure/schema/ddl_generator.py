"""DDL generation for document collections.

Every step is guarded by a catalog probe and uses ``IF NOT EXISTS`` forms
where the dialect has them, so the whole sequence can be replayed against a
database that already holds some or all of the schema.
"""

from __future__ import annotations

from typing import Iterable, List

from docstore.infrastructure.sql.core.identifier import (
    validate_identifier,
    validate_json_path,
)
from docstore.infrastructure.sql.dialects.base import Dialect

from .core import DdlStep, IndexDefinition


def generate_create_table_step(dialect: Dialect, schema: str, collection: str) -> DdlStep:
    """Generate the table step for a collection."""
    validate_identifier(schema, "schema name")
    validate_identifier(collection, "collection name")
    probe, params = dialect.table_exists_probe(schema, collection)
    return DdlStep(
        description=f"table {schema}.{collection}",
        probe=probe,
        probe_params=params,
        statements=(dialect.build_create_table(schema, collection),),
    )


def generate_index_step(dialect: Dialect, schema: str, index: IndexDefinition) -> DdlStep:
    """Generate the computed column + index step for one definition."""
    validate_identifier(index.column_name, "column name")
    validate_identifier(index.index_name, "index name")
    validate_json_path(index.json_path)
    probe, params = dialect.column_exists_probe(schema, index.collection, index.column_name)
    return DdlStep(
        description=f"index {index.index_name}",
        probe=probe,
        probe_params=params,
        statements=(
            dialect.build_add_computed_column(
                schema,
                index.collection,
                index.column_name,
                index.json_path,
                index.value_type,
            ),
            dialect.build_create_index(
                schema,
                index.collection,
                index.column_name,
                index.index_name,
                index.is_unique,
            ),
        ),
    )


def generate_collection_ddl(
    dialect: Dialect,
    schema: str,
    collection: str,
    indexes: Iterable[IndexDefinition] = (),
) -> List[DdlStep]:
    """Generate all steps for a collection: the table first, then one step per index.

    Definitions that belong to other collections are ignored. Every
    identifier is validated before any step is returned.
    """
    steps = [generate_create_table_step(dialect, schema, collection)]
    for index in indexes:
        if index.collection != collection:
            continue
        steps.append(generate_index_step(dialect, schema, index))
    return steps


def render_ddl(steps: Iterable[DdlStep]) -> List[str]:
    """Render steps as plain SQL text for previews."""
    sqls: List[str] = []
    for step in steps:
        for statement in step.statements:
            sqls.append(f"{statement};")
    return sqls


__all__ = [
    "generate_create_table_step",
    "generate_index_step",
    "generate_collection_ddl",
    "render_ddl",
]
