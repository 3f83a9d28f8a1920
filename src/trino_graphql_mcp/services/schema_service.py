"""Schema service for trino-graphql-mcp.

This module provides the main business logic orchestration for one Trino
engine. It coordinates the metadata walker, schema assembler, GraphQL
renderer, query runner and join detector, and owns the currently active
generated schema.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
import threading
import time
from typing import Any

from fastmcp.utilities.logging import get_logger
from graphql import GraphQLSchema, graphql_sync
import sqlalchemy as sa

from trino_graphql_mcp.execute.models import FilterPredicate, QueryTableResult
from trino_graphql_mcp.execute.runner import run_table_query
from trino_graphql_mcp.models import SchemaSummary, TableField
from trino_graphql_mcp.relations import (
    JoinCandidateItem,
    JoinDetectionResult,
    create_join_detector,
)
from trino_graphql_mcp.schema_tools.assembler import SchemaAssembler
from trino_graphql_mcp.schema_tools.cache import MetadataCache
from trino_graphql_mcp.schema_tools.constants import Constants
from trino_graphql_mcp.schema_tools.graphql_schema import GraphQLSchemaRenderer, render_sdl
from trino_graphql_mcp.schema_tools.identifiers import sanitize
from trino_graphql_mcp.schema_tools.models import (
    GeneratedSchema,
    RootField,
    SchemaGenerationConfig,
)
from trino_graphql_mcp.schema_tools.reflection import MetadataWalker
from trino_graphql_mcp.schema_tools.sources import MetadataSource, SqlAlchemyMetadataSource
from trino_graphql_mcp.services.config_service import ConfigService

_logger = get_logger(__name__)


@dataclass(frozen=True)
class SchemaSnapshot:
    """Generated schema and the executable GraphQL schema rendered from it.

    Published as one object so readers always see a matching pair.
    """

    generated: GeneratedSchema
    graphql: GraphQLSchema
    built_at: float
    elapsed_ms: float = 0.0

    def summary(self) -> SchemaSummary:
        return SchemaSummary.from_generated(
            self.generated, elapsed_ms=self.elapsed_ms, built_at=self.built_at
        )


class SchemaService:
    """Service for orchestrating schema generation and table queries.

    The active schema is replaced as a whole by :meth:`rebuild_schema`;
    readers never observe a partially built schema.
    """

    def __init__(
        self,
        source: MetadataSource,
        cache: MetadataCache,
        config: SchemaGenerationConfig | None = None,
        engine: sa.Engine | None = None,
    ) -> None:
        """Initialize schema service with a metadata source and cache.

        Args:
            source: Metadata source used for discovery and query execution
            cache: Metadata cache backend
            config: Generation configuration; defaults are used when omitted
            engine: Engine backing ``source``, disposed on shutdown when given
        """
        self.source = source
        self.cache = cache
        self.config = config or SchemaGenerationConfig()
        self.engine = engine
        self.walker = MetadataWalker(source, cache, self.config)

        self._build_lock = threading.Lock()
        self._snapshot: SchemaSnapshot | None = None

    # ---- schema lifecycle -------------------------------------------------
    def rebuild_schema(self, *, ignore_cache: bool = False) -> SchemaSummary:
        """Regenerate the schema from scratch and swap it in.

        Args:
            ignore_cache: Bypass cached metadata for this build only

        Returns:
            Summary of the new schema

        Raises:
            TypeNameCollisionError: If two tables produce the same generated name
        """
        with self._build_lock:
            snapshot = self._build(ignore_cache=ignore_cache)
            self._snapshot = snapshot

        _logger.info(
            "Schema generated with %d root fields in %.1f ms",
            len(snapshot.generated.root_fields),
            snapshot.elapsed_ms,
        )
        return snapshot.summary()

    def snapshot(self) -> SchemaSnapshot:
        """Return the active schema pair, building the first one on demand."""
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot
        with self._build_lock:
            snapshot = self._snapshot
            if snapshot is None:
                snapshot = self._build(ignore_cache=False)
                self._snapshot = snapshot
        return snapshot

    @property
    def generated_schema(self) -> GeneratedSchema:
        """Active generated schema, built on first access."""
        return self.snapshot().generated

    @property
    def graphql_schema(self) -> GraphQLSchema:
        """Active executable GraphQL schema, built on first access."""
        return self.snapshot().graphql

    def schema_sdl(self) -> str:
        """Return the active schema in SDL form."""
        return render_sdl(self.snapshot().graphql)

    def summary(self) -> SchemaSummary:
        return self.snapshot().summary()

    def execute_graphql(
        self,
        query: str,
        variables: Mapping[str, Any] | None = None,
        operation_name: str | None = None,
    ) -> dict[str, Any]:
        """Execute a GraphQL query document against the active schema.

        Table fields run their translated queries synchronously. Subscriptions
        are not served here.

        Returns:
            The formatted execution result (``data`` and, on failure, ``errors``)
        """
        result = graphql_sync(
            self.snapshot().graphql,
            query,
            variable_values=dict(variables) if variables is not None else None,
            operation_name=operation_name,
        )
        return result.formatted

    # ---- discovery --------------------------------------------------------
    def list_catalogs(self) -> list[str]:
        return self.walker.list_catalogs()

    def list_schemas(self, catalog: str) -> list[str]:
        return self.walker.list_schemas(catalog)

    def list_tables(self, catalog: str, schema: str) -> list[str]:
        return self.walker.list_tables(catalog, schema)

    def describe_table(self, name: str) -> TableField:
        """Describe the object type behind a root field.

        Raises:
            ValueError: If no root field has that name
        """
        generated = self.snapshot().generated
        root = self._root_field(name, generated)
        table_type = generated.object_type(root.type_name)
        return TableField.from_table_type(table_type, root.description)

    # ---- queries ----------------------------------------------------------
    def query_table(
        self,
        name: str,
        limit: int | None = None,
        filters: Sequence[FilterPredicate | Mapping[str, Any]] | None = None,
    ) -> QueryTableResult:
        """Query the table behind root field ``name``.

        Raises:
            ValueError: If no root field has that name
            InvalidFilterError: If a filter is malformed
            UnsupportedOperatorError: If a filter uses an untranslated operator
        """
        root = self._root_field(name)
        return run_table_query(
            root=root,
            source=self.source,
            limit=limit,
            filters=filters,
            default_limit=self.config.default_limit,
        )

    def resolve_table_rows(
        self,
        root: RootField,
        limit: int | None,
        filters: list[dict[str, Any]] | None,
    ) -> list[dict[str, Any]]:
        """Row resolver used by the GraphQL table fields.

        Raises:
            RuntimeError: If the engine reported an execution error
        """
        result = run_table_query(
            root=root,
            source=self.source,
            limit=limit,
            filters=filters,
            default_limit=self.config.default_limit,
        )
        if result.status == "error":
            msg = f"Query on {root.name} failed: {result.execution_error}"
            raise RuntimeError(msg)
        return result.rows

    # ---- joins ------------------------------------------------------------
    def detect_joins(self, catalog: str, *, refresh: bool = False) -> JoinDetectionResult:
        """Detect join candidates in ``catalog`` and cache them.

        Args:
            catalog: Catalog name as listed by discovery
            refresh: Recompute even when cached candidates exist
        """
        strategy = self.config.join_strategy
        path = (sanitize(catalog), Constants.JOINS_KEY)
        if not refresh and not self.config.ignore_cache:
            cached = self.cache.get(path)
            if cached is not None:
                _logger.debug("Join candidates for %s served from cache", catalog)
                return JoinDetectionResult.from_cache(catalog, strategy.value, cached)

        candidates = create_join_detector(strategy, self.walker).detect(catalog)
        result = JoinDetectionResult(
            catalog=catalog,
            strategy=strategy.value,
            candidates=[JoinCandidateItem.from_candidate(c) for c in candidates],
        )
        self.cache.put(path, result.to_cache())
        return result

    # ---- internals --------------------------------------------------------
    def _build(self, *, ignore_cache: bool) -> SchemaSnapshot:
        start = time.perf_counter()
        walker = self.walker
        if ignore_cache and not self.config.ignore_cache:
            walker = MetadataWalker(
                self.source, self.cache, replace(self.config, ignore_cache=True)
            )
        generated = SchemaAssembler(walker, self.config).build_schema()
        graphql_schema = self._renderer().render(generated)
        return SchemaSnapshot(
            generated=generated,
            graphql=graphql_schema,
            built_at=time.time(),
            elapsed_ms=(time.perf_counter() - start) * 1000.0,
        )

    def _renderer(self) -> GraphQLSchemaRenderer:
        return GraphQLSchemaRenderer(
            self.resolve_table_rows,
            list_catalogs=self.list_catalogs,
            list_schemas=self.list_schemas,
            list_tables=self.list_tables,
        )

    def _root_field(self, name: str, generated: GeneratedSchema | None = None) -> RootField:
        if generated is None:
            generated = self.snapshot().generated
        try:
            return generated.root_field(name)
        except KeyError:
            msg = f"Unknown table field: {name}"
            raise ValueError(msg) from None

    @classmethod
    def from_database_url(
        cls, database_url: str, config: SchemaGenerationConfig | None = None
    ) -> SchemaService:
        """Create SchemaService from a database URL.

        Args:
            database_url: SQLAlchemy URL of the Trino coordinator
            config: Generation configuration; read from the environment when omitted

        Returns:
            SchemaService instance backed by a file metadata cache
        """
        config = config or ConfigService.get_generation_config()
        engine = ConfigService.create_database_engine(database_url)
        return cls(
            SqlAlchemyMetadataSource(engine),
            ConfigService.create_metadata_cache(config),
            config,
            engine=engine,
        )

    @classmethod
    def from_environment(cls) -> SchemaService:
        """Create SchemaService from environment configuration.

        Raises:
            ValueError: If required environment variables are not set
        """
        return cls.from_database_url(ConfigService.get_database_url())
