"""Collection schema lifecycle: index definitions, DDL generation and the creation registry."""

from .core import DdlStep, IndexDefinition, IndexSet, derive_column_name
from .ddl_generator import (
    generate_collection_ddl,
    generate_create_table_step,
    generate_index_step,
    render_ddl,
)
from .registry import SchemaKey, SchemaRegistry, default_registry

__all__ = [
    "DdlStep",
    "IndexDefinition",
    "IndexSet",
    "derive_column_name",
    "generate_collection_ddl",
    "generate_create_table_step",
    "generate_index_step",
    "render_ddl",
    "SchemaKey",
    "SchemaRegistry",
    "default_registry",
]
