"""
Tests for YAML index configuration loading.
"""

from pathlib import Path

import pytest

from docstore.config.index_config import load_index_definitions
from docstore.errors import IndexConfigError


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "indexes.yml"
    path.write_text(content, encoding="utf-8")
    return path


class TestLoadIndexDefinitions:
    def test_loads_entries_in_order(self, tmp_path):
        path = _write(
            tmp_path,
            """
indexes:
  - collection: users
    path: $.name
    unique: true
  - collection: users
    path: $.age
    column: age
  - collection: orders
    path: $.customer.id
""",
        )

        definitions = load_index_definitions(path)

        assert [(d.collection, d.column_name, d.is_unique) for d in definitions] == [
            ("users", "__name", True),
            ("users", "age", False),
            ("orders", "__customer_id", False),
        ]

    def test_duplicate_entries_are_collapsed(self, tmp_path):
        path = _write(
            tmp_path,
            "indexes:\n"
            "  - {collection: users, path: $.name}\n"
            "  - {collection: users, path: $.name}\n",
        )
        assert len(load_index_definitions(path)) == 1

    def test_empty_file(self, tmp_path):
        assert load_index_definitions(_write(tmp_path, "")) == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(IndexConfigError) as exc_info:
            load_index_definitions(tmp_path / "nope.yml")
        assert "not found" in str(exc_info.value)

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(IndexConfigError):
            load_index_definitions(_write(tmp_path, "indexes: [unclosed"))

    def test_unknown_field(self, tmp_path):
        path = _write(
            tmp_path, "indexes:\n  - {collection: users, path: $.name, clustered: true}\n"
        )
        with pytest.raises(IndexConfigError) as exc_info:
            load_index_definitions(path)
        assert "validation failed" in str(exc_info.value)

    def test_unsafe_path(self, tmp_path):
        path = _write(
            tmp_path, "indexes:\n  - collection: users\n    path: \"$.name') --\"\n"
        )
        with pytest.raises(IndexConfigError):
            load_index_definitions(path)

    def test_conflicting_entries(self, tmp_path):
        path = _write(
            tmp_path,
            "indexes:\n"
            "  - {collection: users, path: $.name, column: name}\n"
            "  - {collection: users, path: $.full_name, column: name}\n",
        )
        with pytest.raises(IndexConfigError):
            load_index_definitions(path)

    def test_value_type(self, tmp_path):
        path = _write(
            tmp_path,
            "indexes:\n"
            "  - {collection: users, path: $.age, column: age, value_type: numeric}\n"
            "  - {collection: users, path: $.name}\n",
        )
        age, name = load_index_definitions(path)
        assert age.value_type == "numeric"
        assert name.value_type == "text"

    def test_unknown_value_type(self, tmp_path):
        path = _write(
            tmp_path, "indexes:\n  - {collection: users, path: $.age, value_type: float}\n"
        )
        with pytest.raises(IndexConfigError):
            load_index_definitions(path)
