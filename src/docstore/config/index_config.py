"""
YAML index configuration for DocStore.

Index definitions can be declared once in a file instead of in code::

    indexes:
      - collection: users
        path: $.name
        unique: true
      - collection: users
        path: $.age
        column: age
        value_type: numeric

The file is validated with Pydantic; identifier safety is checked when the
definitions are converted to ``IndexDefinition`` objects.
"""

from pathlib import Path
from typing import List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError

from docstore.errors import DocStoreError, IndexConfigError
from docstore.infrastructure.schema.core import IndexDefinition, IndexSet
from docstore.utils.logging import get_logger

logger = get_logger(__name__)


class IndexEntry(BaseModel):
    """Schema for one index entry."""

    collection: str = Field(..., min_length=1, description="Collection name")
    path: str = Field(..., min_length=1, description="JSON path inside each document")
    column: Optional[str] = Field(
        None, description="Computed column name (derived from path when omitted)"
    )
    unique: bool = Field(False, description="Create a UNIQUE index")
    value_type: Literal["text", "numeric"] = Field(
        "text", description="Type of the computed column"
    )

    model_config = {"extra": "forbid", "str_strip_whitespace": True}


class IndexesConfig(BaseModel):
    """Schema for the complete index configuration file."""

    indexes: List[IndexEntry] = Field(default_factory=list)

    model_config = {"extra": "forbid"}


def load_index_definitions(config_path: Union[str, Path]) -> List[IndexDefinition]:
    """
    Load and validate index definitions from a YAML file.

    Behavior:
    - Missing file: raises IndexConfigError
    - Empty file: returns an empty list
    - Invalid YAML, schema violations, unsafe names or conflicting entries:
      raises IndexConfigError naming the file

    Args:
        config_path: Path to the YAML file

    Returns:
        Index definitions in file order, duplicates removed
    """
    path = Path(config_path)
    if not path.exists():
        logger.error("configuration.indexes_not_found", config_path=str(path))
        raise IndexConfigError(f"Index configuration file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(
            "configuration.yaml_parse_error", config_path=str(path), error=str(e)
        )
        raise IndexConfigError(f"Invalid YAML in index configuration {path}: {e}") from e

    if raw_config is None:
        return []

    try:
        config = IndexesConfig.model_validate(raw_config)
    except ValidationError as e:
        logger.error(
            "configuration.validation_failed", config_path=str(path), error=str(e)
        )
        raise IndexConfigError(f"Index configuration validation failed for {path}: {e}") from e

    index_set = IndexSet()
    definitions: List[IndexDefinition] = []
    for entry in config.indexes:
        try:
            definition = IndexDefinition.create(
                entry.collection,
                entry.path,
                entry.column,
                entry.unique,
                entry.value_type,
            )
            if index_set.add(definition):
                definitions.append(definition)
        except DocStoreError as e:
            raise IndexConfigError(f"Invalid index entry in {path}: {e}") from e

    logger.info(
        "configuration.indexes_loaded",
        config_path=str(path),
        index_count=len(definitions),
        collections=sorted({d.collection for d in definitions}),
    )
    return definitions
