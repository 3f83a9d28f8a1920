"""Configuration service for trino-graphql-mcp.

This module provides configuration management and database connection utilities
for the trino-graphql-mcp application. It centralizes environment variable
handling, metadata cache selection and database engine creation.
"""

from __future__ import annotations

import os

import sqlalchemy as sa

from trino_graphql_mcp.schema_tools.cache import FileMetadataCache, MetadataCache
from trino_graphql_mcp.schema_tools.constants import Constants, JoinStrategy
from trino_graphql_mcp.schema_tools.models import SchemaGenerationConfig

ENV_PREFIX = "TRINO_GRAPHQL_"
_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


def _env(name: str) -> str | None:
    return os.getenv(f"{ENV_PREFIX}{name}")


class ConfigService:
    """Service for managing configuration and database connections."""

    @staticmethod
    def get_database_url() -> str:
        """Get database URL from environment variable.

        Returns:
            Database URL string, e.g. ``trino://user@host:8080/``

        Raises:
            ValueError: If TRINO_GRAPHQL_DATABASE_URL environment variable is not set
        """
        database_url = _env("DATABASE_URL")
        if not database_url:
            error_msg = "TRINO_GRAPHQL_DATABASE_URL environment variable not set"
            raise ValueError(error_msg)
        return database_url

    @staticmethod
    def create_database_engine(url: str) -> sa.Engine:
        """Create SQLAlchemy database engine.

        Args:
            url: Database connection URL

        Returns:
            SQLAlchemy Engine instance with connection liveness checks enabled
        """
        return sa.create_engine(url, pool_pre_ping=True)

    @staticmethod
    def create_metadata_cache(config: SchemaGenerationConfig) -> MetadataCache:
        """Return the file-backed metadata cache rooted at the schema folder."""
        return FileMetadataCache(config.schema_folder)

    # ---- typed readers ---------------------------------------------------
    @staticmethod
    def get_bool(name: str, default: bool) -> bool:
        """Read a boolean flag; accepts 1/true/yes/on (case-insensitive)."""
        val = _env(name)
        if val is None or not val.strip():
            return default
        return val.strip().lower() in _TRUE_VALUES

    @staticmethod
    def get_int(name: str, default: int) -> int:
        """Read an integer; malformed values fall back to ``default``."""
        val = _env(name)
        if val is None:
            return default
        try:
            return int(val)
        except ValueError:
            return default

    @staticmethod
    def get_list(name: str) -> list[str] | None:
        """Read a comma-separated list; unset or blank yields None."""
        val = _env(name)
        if val is None:
            return None
        items = [item.strip() for item in val.split(",") if item.strip()]
        return items or None

    @staticmethod
    def get_join_strategy() -> JoinStrategy:
        """Join detection scope; unknown values fall back to same_schema."""
        val = (_env("JOIN_STRATEGY") or "").strip().lower()
        try:
            return JoinStrategy(val)
        except ValueError:
            return JoinStrategy.SAME_SCHEMA

    # ---- schema generation -------------------------------------------------
    @staticmethod
    def get_generation_config() -> SchemaGenerationConfig:
        """Collect schema generation settings from the environment.

        Returns:
            SchemaGenerationConfig populated from TRINO_GRAPHQL_* variables
        """
        default_limit = ConfigService.get_int("DEFAULT_LIMIT", Constants.DEFAULT_ROW_LIMIT)
        return SchemaGenerationConfig(
            include_catalogs=ConfigService.get_list("INCLUDE_CATALOGS"),
            exclude_catalogs=ConfigService.get_list("EXCLUDE_CATALOGS"),
            include_schemas=ConfigService.get_list("INCLUDE_SCHEMAS"),
            exclude_schemas=ConfigService.get_list("EXCLUDE_SCHEMAS"),
            replace_invalid_characters=ConfigService.get_bool("REPLACE_INVALID_CHARACTERS", False),
            ignore_invalid_names=ConfigService.get_bool("IGNORE_INVALID_NAMES", True),
            ignore_cache=ConfigService.get_bool("IGNORE_CACHE", False),
            schema_folder=_env("SCHEMA_FOLDER") or Constants.DEFAULT_SCHEMA_FOLDER,
            default_limit=max(0, default_limit),
            join_strategy=ConfigService.get_join_strategy(),
        )
