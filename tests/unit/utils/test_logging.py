"""
Tests for the structlog setup: redaction and handler scoping.
"""

import json
import logging

import pytest

from docstore.utils import logging as docstore_logging
from docstore.utils.logging import (
    REDACTED_VALUE,
    configure_logging,
    get_logger,
    sanitization_processor,
)


class TestSanitizationProcessor:
    def test_redacts_database_uris(self):
        event = sanitization_processor(
            None,
            "info",
            {
                "event": "configuration.loaded",
                "DATABASE_URI": "postgresql://u:p@db/app",
                "docstore_database_uri": "postgresql://u:p@db/app",
                "collection": "users",
            },
        )

        assert event["DATABASE_URI"] == REDACTED_VALUE
        assert event["docstore_database_uri"] == REDACTED_VALUE
        assert event["collection"] == "users"
        assert event["event"] == "configuration.loaded"

    def test_redacts_nested_credentials(self):
        event = sanitization_processor(
            None, "info", {"event": "x", "connection": {"password": "p", "host": "db"}}
        )
        assert event["connection"] == {"password": REDACTED_VALUE, "host": "db"}

    def test_leaves_similar_names_alone(self):
        event = sanitization_processor(None, "info", {"database_uri_scheme": "sqlite"})
        assert event["database_uri_scheme"] == "sqlite"


class TestGetLogger:
    def test_renders_sanitized_json(self, caplog):
        caplog.set_level(logging.INFO, logger="docstore")
        logger = get_logger("docstore.tests")

        logger.info("schema.ensure.created", collection="users", api_key="k")

        (record,) = [r for r in caplog.records if r.name == "docstore.tests"]
        payload = json.loads(record.getMessage())
        assert payload["event"] == "schema.ensure.created"
        assert payload["collection"] == "users"
        assert payload["api_key"] == REDACTED_VALUE
        assert payload["level"] == "info"
        assert payload["logger"] == "docstore.tests"

    def test_below_level_is_dropped(self, caplog):
        caplog.set_level(logging.WARNING, logger="docstore")
        get_logger("docstore.tests").info("document.inserted")
        assert [r for r in caplog.records if r.name == "docstore.tests"] == []


@pytest.fixture
def restore_docstore_logger():
    docstore_logger = logging.getLogger("docstore")
    saved = (list(docstore_logger.handlers), docstore_logger.level, docstore_logger.propagate)
    yield docstore_logger
    for handler in docstore_logger.handlers:
        if handler not in saved[0]:
            docstore_logger.removeHandler(handler)
            handler.close()
    docstore_logging._installed_handlers.clear()
    docstore_logger.setLevel(saved[1])
    docstore_logger.propagate = saved[2]


class TestConfigureLogging:
    def test_only_the_docstore_logger_gets_handlers(self, restore_docstore_logger):
        root_handlers = list(logging.getLogger().handlers)

        configure_logging()

        assert logging.getLogger().handlers == root_handlers
        assert any(
            isinstance(h, logging.StreamHandler) for h in restore_docstore_logger.handlers
        )
        assert restore_docstore_logger.propagate is False

    def test_reconfiguring_replaces_handlers(self, restore_docstore_logger):
        configure_logging()
        count = len(restore_docstore_logger.handlers)

        configure_logging()

        assert len(restore_docstore_logger.handlers) == count

    def test_log_level_from_environment(self, restore_docstore_logger, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")
        configure_logging()
        assert restore_docstore_logger.level == logging.WARNING
