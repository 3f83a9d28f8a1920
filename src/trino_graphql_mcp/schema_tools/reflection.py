"""Metadata discovery over catalogs, schemas, tables and columns.

This module provides the MetadataWalker class that turns the engine's
four-level namespace into a typed discovery tree. Every listing is served
from the metadata cache when possible; on a miss the metadata source is
queried with restored (engine-native) names and the result is written back
to the cache, including the empty result of a failed query.

Classes:
- MetadataWalker: Cached, fail-safe discovery with include/exclude filtering
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from fastmcp.utilities.logging import get_logger

from .cache import MetadataCache
from .constants import Constants
from .exceptions import DiscoveryError
from .identifiers import is_valid_name, restore, sanitize
from .models import (
    CatalogMetadata,
    CatalogNode,
    ColumnMetadata,
    SchemaGenerationConfig,
    SchemaNode,
    TableNode,
)
from .sources import MetadataSource

# Logger
_logger = get_logger("schema_tools.reflection")


def _matches(name: str, candidates: Sequence[str]) -> bool:
    """Case-insensitive membership check against the listed and restored name."""
    wanted = {candidate.lower() for candidate in candidates}
    return name.lower() in wanted or restore(name).lower() in wanted


class MetadataWalker:
    """Cached discovery of engine metadata.

    Names returned by the ``list_*`` methods are sanitized when
    ``config.replace_invalid_characters`` is enabled and passed through
    unchanged otherwise. Arguments to the ``list_*`` methods are the names as
    previously listed; when sanitization is enabled they are restored before
    reaching the metadata source.

    Attributes:
        source: Metadata source used on cache misses
        cache: Metadata cache keyed by the sanitized path
        config: Discovery configuration
    """

    def __init__(
        self,
        source: MetadataSource,
        cache: MetadataCache,
        config: SchemaGenerationConfig | None = None,
    ) -> None:
        """Initialize the metadata walker.

        Args:
            source: Metadata source (engine adapter)
            cache: Metadata cache backend
            config: Discovery configuration; defaults are used when omitted
        """
        self.source = source
        self.cache = cache
        self.config = config or SchemaGenerationConfig()

    # ---- listings ----------------------------------------------------------
    def list_catalogs(self) -> list[str]:
        """List catalog names."""
        return self._cached_names(
            (Constants.CATALOGS_KEY,),
            "SHOW CATALOGS",
            self.source.list_catalogs,
        )

    def list_schemas(self, catalog: str) -> list[str]:
        """List schema names of ``catalog``."""
        return self._cached_names(
            (sanitize(catalog), Constants.SCHEMAS_KEY),
            f"SHOW SCHEMAS FROM {catalog}",
            lambda: self.source.list_schemas(self._engine_name(catalog)),
        )

    def list_tables(self, catalog: str, schema: str) -> list[str]:
        """List table names of ``catalog.schema``."""
        return self._cached_names(
            (sanitize(catalog), sanitize(schema), Constants.TABLES_KEY),
            f"SHOW TABLES FROM {catalog}.{schema}",
            lambda: self.source.list_tables(self._engine_name(catalog), self._engine_name(schema)),
        )

    def list_columns(self, catalog: str, schema: str, table: str) -> list[ColumnMetadata]:
        """List the columns of ``catalog.schema.table`` in table order."""
        path = (sanitize(catalog), sanitize(schema), sanitize(table), Constants.COLUMNS_KEY)
        cached = self._read_cache(path)
        if cached is not None:
            return [ColumnMetadata.from_dict(item) for item in cached]

        label = f"{catalog}.{schema}.{table}"
        _logger.info("DESCRIBE %s", label)
        try:
            described = self.source.describe_columns(
                self._engine_name(catalog), self._engine_name(schema), self._engine_name(table)
            )
        except DiscoveryError as e:
            _logger.error("%s %s", label, e)
            self.cache.put(path, [])
            return []

        columns = [
            ColumnMetadata(
                catalog=catalog,
                schema=schema,
                table=table,
                column=self._listed_name(item["name"]),
                native_type=item["native_type"],
            )
            for item in described
        ]
        self.cache.put(path, [column.to_dict() for column in columns])
        return columns

    def list_catalog_columns(self, catalog: str) -> list[ColumnMetadata]:
        """List every column of ``catalog`` in one round trip (join detection input).

        Not cached: detection always works from fresh metadata. A failed
        query yields an empty list.
        """
        _logger.info("LIST COLUMNS %s", catalog)
        try:
            rows = self.source.list_catalog_columns(self._engine_name(catalog))
        except DiscoveryError as e:
            _logger.error("%s %s", catalog, e)
            return []
        return [
            ColumnMetadata(
                catalog=catalog,
                schema=self._listed_name(row["schema"]),
                table=self._listed_name(row["table"]),
                column=self._listed_name(row["column"]),
                native_type=row["native_type"],
            )
            for row in rows
        ]

    # ---- filtering ---------------------------------------------------------
    def catalog_allowed(self, catalog: str) -> bool:
        """Apply catalog exclude/include lists and the name validity policy."""
        cfg = self.config
        if cfg.exclude_catalogs and _matches(catalog, cfg.exclude_catalogs):
            return False
        if cfg.include_catalogs and not _matches(catalog, cfg.include_catalogs):
            return False
        return self.name_allowed(catalog)

    def schema_allowed(self, schema: str) -> bool:
        """Apply schema exclude/include lists and the name validity policy."""
        cfg = self.config
        if cfg.exclude_schemas and _matches(schema, cfg.exclude_schemas):
            return False
        if cfg.include_schemas and not _matches(schema, cfg.include_schemas):
            return False
        return self.name_allowed(schema)

    def name_allowed(self, name: str) -> bool:
        """Return False for grammar-violating names when they are to be ignored."""
        return not self.config.ignore_invalid_names or is_valid_name(name)

    # ---- discovery tree ----------------------------------------------------
    def discover(self) -> list[CatalogNode]:
        """Walk catalogs, schemas and tables that pass filtering.

        Column-level validity is left to the schema assembler so that a
        table whose every column is invalid can be recognized and skipped.

        Returns:
            Discovery tree in source order
        """
        tree: list[CatalogNode] = []
        for catalog in self.list_catalogs():
            if not self.catalog_allowed(catalog):
                _logger.debug("Skipping catalog %s", catalog)
                continue
            schemas: list[SchemaNode] = []
            for schema in self.list_schemas(catalog):
                if not self.schema_allowed(schema):
                    _logger.debug("Skipping schema %s.%s", catalog, schema)
                    continue
                tables = [
                    TableNode(name=table, columns=tuple(self.list_columns(catalog, schema, table)))
                    for table in self.list_tables(catalog, schema)
                    if self.name_allowed(table)
                ]
                schemas.append(SchemaNode(name=schema, tables=tuple(tables)))
            tree.append(CatalogNode(catalog=CatalogMetadata(name=catalog), schemas=tuple(schemas)))
        return tree

    # ---- internals ---------------------------------------------------------
    def _listed_name(self, name: str) -> str:
        return sanitize(name) if self.config.replace_invalid_characters else name

    def _engine_name(self, name: str) -> str:
        # Only names sanitized by discovery carry escape tokens to decode
        return restore(name) if self.config.replace_invalid_characters else name

    def _read_cache(self, path: tuple[str, ...]) -> Any | None:
        if self.config.ignore_cache:
            return None
        cached = self.cache.get(path)
        if cached is not None:
            _logger.debug("Cache hit: %s", "/".join(path))
        return cached

    def _cached_names(
        self,
        path: tuple[str, ...],
        label: str,
        fetch: Callable[[], list[str]],
    ) -> list[str]:
        cached = self._read_cache(path)
        if cached is not None:
            return [str(name) for name in cached]

        _logger.info("%s", label)
        try:
            names = [self._listed_name(name) for name in fetch()]
        except DiscoveryError as e:
            _logger.error("%s failed: %s", label, e)
            self.cache.put(path, [])
            return []
        self.cache.put(path, names)
        return names
