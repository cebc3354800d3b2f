"""Configuration management for DocStore.

Usage:
    >>> from docstore.config import get_settings
    >>> settings = get_settings()
    >>> settings.get_database_connection_string()
    'sqlite+aiosqlite:///./docstore.db'

Index definitions declared in YAML are loaded with
``docstore.config.index_config.load_index_definitions``.
"""

from docstore.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
