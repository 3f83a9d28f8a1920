"""Constants and enums for schema generation.

This module contains the identifier grammar, generation defaults, and the
fixed name/type sets used by discovery and join detection.
"""

from __future__ import annotations

from enum import Enum
import re
from typing import Final


class Constants:
    """Configuration constants for schema generation."""

    # Defaults
    DEFAULT_SCHEMA_FOLDER: Final[str] = "/etc/schema"
    DEFAULT_ROW_LIMIT: Final[int] = 1000
    TYPE_NAME_SEPARATOR: Final[str] = "_"

    # Identifier grammar of the produced API
    VALID_NAME_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[_A-Za-z][_0-9A-Za-z]*$")
    ESCAPE_TOKEN_PATTERN: Final[re.Pattern[str]] = re.compile(r"_U([0-9A-Fa-f]{4,6})_")
    # Underscore opening a ``_U<HEX>`` run inside a raw name
    TOKEN_PREFIX_PATTERN: Final[re.Pattern[str]] = re.compile(r"_(?=U[0-9A-Fa-f]{4,6})")
    # GraphQL reserves names starting with a double underscore for introspection
    RESERVED_NAME_PREFIX: Final[str] = "__"

    # Cache leaf keys
    CATALOGS_KEY: Final[str] = "catalogs"
    SCHEMAS_KEY: Final[str] = "schemas"
    TABLES_KEY: Final[str] = "tables"
    COLUMNS_KEY: Final[str] = "columns"
    JOINS_KEY: Final[str] = "joins"

    # Schemas never considered during join detection
    SYSTEM_SCHEMAS: Final[frozenset[str]] = frozenset(
        {"information_schema", "pg_catalog", "system", "sys"}
    )

    # Native types that never take part in a join
    NON_JOINABLE_TYPES: Final[frozenset[str]] = frozenset(
        {
            "date",
            "timestamp",
            "time",
            "timestamp with time zone",
            "boolean",
            "json",
            "jsonb",
            "interval",
            "blob",
            "array",
            "map",
            "row",
            "struct",
            "decimal",
            "float",
            "real",
        }
    )
    NON_JOINABLE_TYPE_PREFIXES: Final[tuple[str, ...]] = ("varchar",)


class JoinStrategy(Enum):
    """Column grouping scope used by join detection."""

    SAME_SCHEMA = "same_schema"  # Group columns per schema (default)
    GLOBAL = "global"  # Group columns across the whole catalog


__all__ = [
    "Constants",
    "JoinStrategy",
]
