"""Structured logging framework using structlog.

This module provides the logging setup of DocStore with:
- ISO-8601 timestamps
- JSON rendering for structured logs
- Automatic sanitization of sensitive fields
- Stderr output plus optional daily log files

Loggers are plain ``logging`` loggers under the ``docstore`` namespace wrapped
with the processor chain below, so importing DocStore leaves the root logger
and the global structlog configuration of the host application alone. Only
``configure_logging()`` (called by the CLI) attaches handlers, and only to the
``docstore`` logger.

Configuration:
- LOG_LEVEL: Set log level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Default: INFO
- LOG_TO_FILE: Enable file logging (1, true, yes). Default: disabled
- LOG_FILE_DIR: Directory for log files. Default: logs/

Usage:
    >>> from docstore.utils.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("document.inserted", collection="users")
"""

import logging
import os
import re
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, MutableMapping

import structlog
from structlog.types import EventDict, Processor

ROOT_LOGGER_NAME = "docstore"

# Sensitive key patterns for sanitization
SENSITIVE_PATTERNS = [
    re.compile(r".*password.*", re.IGNORECASE),
    re.compile(r".*token.*", re.IGNORECASE),
    re.compile(r".*api_key.*", re.IGNORECASE),
    re.compile(r".*secret.*", re.IGNORECASE),
    re.compile(r"^DATABASE_URI$", re.IGNORECASE),
    re.compile(r"^DOCSTORE_DATABASE_URI$", re.IGNORECASE),
]

REDACTED_VALUE = "[REDACTED]"


def sanitize_for_logging(data: Dict[str, Any]) -> Dict[str, Any]:
    """Redact sensitive values from a dictionary before logging.

    Example:
        >>> sanitize_for_logging({"password": "secret123", "user": "admin"})
        {'password': '[REDACTED]', 'user': 'admin'}
    """
    sanitized: Dict[str, Any] = {}
    for key, value in data.items():
        if any(pattern.match(key) for pattern in SENSITIVE_PATTERNS):
            sanitized[key] = REDACTED_VALUE
        elif isinstance(value, dict):
            sanitized[key] = sanitize_for_logging(value)
        else:
            sanitized[key] = value
    return sanitized


def sanitization_processor(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> MutableMapping[str, Any]:
    """Structlog processor that redacts sensitive fields before rendering."""
    return sanitize_for_logging(dict(event_dict))


PROCESSORS: List[Processor] = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    sanitization_processor,
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.JSONRenderer(),
]

# Handlers installed by configure_logging(), replaced on reconfiguration
_installed_handlers: List[logging.Handler] = []

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def _get_log_level() -> int:
    """Get log level from settings, falling back to the LOG_LEVEL variable."""
    from docstore.config.settings import get_settings

    try:
        level_name = get_settings().LOG_LEVEL.upper()
    except ValueError:
        # Logging must come up even when the settings are invalid
        level_name = os.getenv("LOG_LEVEL", "INFO").upper()

    return getattr(logging, level_name, logging.INFO)


def _should_log_to_file() -> bool:
    """Check if file logging is enabled via environment."""
    log_to_file = os.getenv("LOG_TO_FILE", "").lower()
    return log_to_file in ("1", "true", "yes")


def _get_log_file_path() -> Path:
    """Get the log file path with date-based naming."""
    log_dir = Path(os.getenv("LOG_FILE_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)

    # Format: docstore-YYYYMMDD.log
    date_str = datetime.now().strftime("%Y%m%d")
    return log_dir / f"docstore-{date_str}.log"


def configure_logging() -> None:
    """Attach stderr (and optional file) handlers to the ``docstore`` logger.

    Calling it again replaces the handlers it installed before.
    """
    level = _get_log_level()
    docstore_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in _installed_handlers:
        docstore_logger.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter("%(message)s"))
    _installed_handlers.append(stream_handler)

    if _should_log_to_file():
        file_handler = TimedRotatingFileHandler(
            filename=str(_get_log_file_path()),
            when="midnight",
            interval=1,
            backupCount=30,  # 30-day retention
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        _installed_handlers.append(file_handler)

    for handler in _installed_handlers:
        handler.setLevel(level)
        docstore_logger.addHandler(handler)
    docstore_logger.setLevel(level)
    # Rendered records stop at the docstore logger
    docstore_logger.propagate = False


def get_logger(name: str) -> Any:
    """Get a structlog BoundLogger over the stdlib logger ``name``.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("schema.ensure.created", collection="users")
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
    )
