"""
Unit tests for PostgreSQL and SQLite dialect statement shapes.
"""

import uuid

import pytest

from docstore.infrastructure.sql.dialects import (
    PostgreSQLDialect,
    SQLiteDialect,
    get_dialect,
)


class TestGetDialect:
    def test_known_dialects(self):
        assert isinstance(get_dialect("postgresql"), PostgreSQLDialect)
        assert isinstance(get_dialect("sqlite"), SQLiteDialect)

    def test_unknown_dialect(self):
        with pytest.raises(ValueError) as exc_info:
            get_dialect("mssql")
        assert "mssql" in str(exc_info.value)


class TestPostgreSQLDialect:
    """Tests for PostgreSQL statement generation."""

    def setup_method(self):
        self.dialect = PostgreSQLDialect()

    def test_create_table_is_idempotent(self):
        sql = self.dialect.build_create_table("public", "users")
        assert sql.startswith('CREATE TABLE IF NOT EXISTS "public"."users" (')
        assert '"_id" UUID NOT NULL' in sql
        assert '"_document" TEXT NOT NULL' in sql
        assert 'CONSTRAINT "pk_users" PRIMARY KEY ("_id")' in sql

    def test_computed_column_uses_json_path(self):
        sql = self.dialect.build_add_computed_column("public", "users", "name", "$.name")
        assert sql == (
            'ALTER TABLE "public"."users" ADD COLUMN IF NOT EXISTS "name" TEXT '
            'GENERATED ALWAYS AS (jsonb_path_query_first(CAST("_document" AS jsonb), '
            "'$.name') #>> '{}') STORED"
        )

    def test_numeric_computed_column_casts_extracted_text(self):
        sql = self.dialect.build_add_computed_column(
            "public", "users", "age", "$.age", value_type="numeric"
        )
        assert sql == (
            'ALTER TABLE "public"."users" ADD COLUMN IF NOT EXISTS "age" NUMERIC '
            'GENERATED ALWAYS AS (CAST((jsonb_path_query_first(CAST("_document" AS jsonb), '
            "'$.age') #>> '{}') AS NUMERIC)) STORED"
        )

    def test_unique_index(self):
        sql = self.dialect.build_create_index(
            "public", "users", "name", "idx_users_name", unique=True
        )
        assert sql == (
            'CREATE UNIQUE INDEX IF NOT EXISTS "idx_users_name" '
            'ON "public"."users" ("name")'
        )

    def test_plain_index(self):
        sql = self.dialect.build_create_index(
            "public", "users", "age", "idx_users_age", unique=False
        )
        assert sql.startswith("CREATE INDEX IF NOT EXISTS")

    def test_probes_bind_names_as_parameters(self):
        probe, params = self.dialect.column_exists_probe("public", "users", "name")
        assert "information_schema.columns" in probe
        assert ":column_name" in probe
        assert params == {
            "schema_name": "public",
            "table_name": "users",
            "column_name": "name",
        }

    def test_bind_id_keeps_uuid(self):
        value = uuid.uuid4()
        assert self.dialect.bind_id(value) is value

    def test_select_wraps_filter_with_json_guard(self):
        sql = self.dialect.build_select_documents(
            "public", "users", where="age > :min_age", suffix="ORDER BY age", limit=1
        )
        assert sql.splitlines() == [
            'SELECT "_id", "_document" FROM "public"."users"',
            'WHERE ("_document" IS JSON) AND (age > :min_age)',
            "ORDER BY age",
            "LIMIT 1",
        ]


class TestSQLiteDialect:
    """Tests for SQLite statement generation."""

    def setup_method(self):
        self.dialect = SQLiteDialect()

    def test_create_table(self):
        sql = self.dialect.build_create_table("main", "users")
        assert sql.startswith('CREATE TABLE IF NOT EXISTS "main"."users" (')
        assert '"_id" TEXT NOT NULL PRIMARY KEY' in sql

    def test_computed_column_is_virtual(self):
        sql = self.dialect.build_add_computed_column("main", "users", "name", "$.name")
        assert sql == (
            'ALTER TABLE "main"."users" ADD COLUMN "name" GENERATED ALWAYS AS '
            "(json_extract(\"_document\", '$.name')) VIRTUAL"
        )

    def test_numeric_computed_column_declares_affinity(self):
        sql = self.dialect.build_add_computed_column(
            "main", "users", "age", "$.age", value_type="numeric"
        )
        assert sql.startswith('ALTER TABLE "main"."users" ADD COLUMN "age" NUMERIC GENERATED')

    def test_index_qualifies_index_name_not_table(self):
        sql = self.dialect.build_create_index(
            "main", "users", "name", "idx_users_name", unique=True
        )
        assert sql == (
            'CREATE UNIQUE INDEX IF NOT EXISTS "main"."idx_users_name" '
            'ON "users" ("name")'
        )

    def test_select_without_filter_has_no_guard(self):
        sql = self.dialect.build_select_documents("main", "users")
        assert sql == 'SELECT "_id", "_document" FROM "main"."users"'

    def test_select_with_filter(self):
        sql = self.dialect.build_select_documents("main", "users", where="1 = 1")
        assert 'WHERE json_valid("_document") AND (1 = 1)' in sql

    def test_insert_binds_values(self):
        sql = self.dialect.build_insert_document("main", "users")
        assert sql == (
            'INSERT INTO "main"."users" ("_id", "_document") '
            "VALUES (:doc_id, :doc_body)"
        )

    def test_bind_id_is_text(self):
        value = uuid.uuid4()
        assert self.dialect.bind_id(value) == str(value)
