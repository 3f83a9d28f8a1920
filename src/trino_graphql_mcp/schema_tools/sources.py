"""Metadata source adapters.

This module provides the boundary to the query engine. Every method accepts
and returns raw (restored) names; sanitization is the caller's concern.

Classes:
- MetadataSource: Protocol consumed by discovery, join detection and queries
- SqlAlchemyMetadataSource: Trino implementation backed by a SQLAlchemy engine
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from fastmcp.utilities.logging import get_logger
import sqlalchemy as sa
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .exceptions import DiscoveryError
from .quoting import qualified_name, quote_identifier

_logger = get_logger(__name__)


class MetadataSource(Protocol):
    """Discovery and execution operations offered by the query engine."""

    def list_catalogs(self) -> list[str]: ...

    def list_schemas(self, catalog: str) -> list[str]: ...

    def list_tables(self, catalog: str, schema: str) -> list[str]: ...

    def describe_columns(self, catalog: str, schema: str, table: str) -> list[dict[str, str]]:
        """Return ``[{"name": ..., "native_type": ...}]`` in table order."""
        ...

    def list_catalog_columns(self, catalog: str) -> list[dict[str, str]]:
        """Return every column of a catalog as ``schema/table/column/native_type`` dicts."""
        ...

    def execute_query(
        self, text: str, params: Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]: ...


class SqlAlchemyMetadataSource:
    """Metadata source talking to Trino through a SQLAlchemy engine.

    Each call acquires its own connection from the engine's pool inside a
    ``with`` block, so the connection is returned to the pool even when the
    statement fails or the caller is cancelled.

    Attributes:
        engine: SQLAlchemy engine connected to Trino (``trino://...``)
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    # ---- discovery -----------------------------------------------------
    def list_catalogs(self) -> list[str]:
        return self._scalars("SHOW CATALOGS")

    def list_schemas(self, catalog: str) -> list[str]:
        return self._scalars(f"SHOW SCHEMAS FROM {quote_identifier(catalog)}")

    def list_tables(self, catalog: str, schema: str) -> list[str]:
        return self._scalars(f"SHOW TABLES FROM {qualified_name(catalog, schema)}")

    def describe_columns(self, catalog: str, schema: str, table: str) -> list[dict[str, str]]:
        statement = f"DESCRIBE {qualified_name(catalog, schema, table)}"
        rows = self._mappings(statement)
        return [{"name": str(row["Column"]), "native_type": str(row["Type"])} for row in rows]

    def list_catalog_columns(self, catalog: str) -> list[dict[str, str]]:
        statement = (
            "SELECT table_schema, table_name, column_name, data_type "
            f"FROM {qualified_name(catalog, 'information_schema', 'columns')}"
        )
        rows = self._mappings(statement)
        return [
            {
                "schema": str(row["table_schema"]),
                "table": str(row["table_name"]),
                "column": str(row["column_name"]),
                "native_type": str(row["data_type"]),
            }
            for row in rows
        ]

    # ---- execution -----------------------------------------------------
    def execute_query(
        self, text: str, params: Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Execute a bound statement and return rows as dictionaries.

        Raises:
            SQLAlchemyError: Propagated unchanged; the caller decides how to report it
        """
        with self.engine.connect() as conn:
            result = conn.execute(sa.text(text), dict(params or {}))
            return [dict(row) for row in result.mappings()]

    # ---- internals -----------------------------------------------------
    def _scalars(self, statement: str) -> list[str]:
        _logger.debug("Executing: %s", statement)
        try:
            with self.engine.connect() as conn:
                return [str(value) for value in conn.execute(sa.text(statement)).scalars()]
        except SQLAlchemyError as e:
            raise DiscoveryError(f"{statement}: {e}") from e

    def _mappings(self, statement: str) -> list[sa.RowMapping]:
        _logger.debug("Executing: %s", statement)
        try:
            with self.engine.connect() as conn:
                return list(conn.execute(sa.text(statement)).mappings())
        except SQLAlchemyError as e:
            raise DiscoveryError(f"{statement}: {e}") from e
