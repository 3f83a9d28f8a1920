"""MCP tool registration for schema generation and discovery.

Exposes a `register_schema_tools` function that attaches tools to a FastMCP
instance while delegating actual logic to the SchemaService obtained via
`SchemaServiceManager`.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastmcp import Context, FastMCP
from fastmcp.utilities.logging import get_logger
from pydantic import Field

from trino_graphql_mcp.models import InitStatus, SchemaSummary, TableField
from trino_graphql_mcp.schema_tools.exceptions import SchemaGenerationError
from trino_graphql_mcp.services.schema_service import SchemaService
from trino_graphql_mcp.services.schema_service_manager import SchemaServiceManager

_logger = get_logger(__name__)


def register_schema_tools(mcp: FastMCP, manager: SchemaServiceManager | None = None) -> None:
    """Register schema discovery and generation tools.

    Tools resolve the schema service on every call, so they fail fast with a
    readable message while the first schema is still being generated.
    """

    mgr = manager or SchemaServiceManager.get_instance()

    async def _service(ctx: Context) -> SchemaService:
        try:
            return await mgr.get_schema_service()
        except (RuntimeError, ValueError) as exc:
            await ctx.error(f"Schema service not ready: {exc}")
            raise

    @mcp.tool
    async def get_init_status(_ctx: Context) -> InitStatus:  # pyright: ignore[reportUnusedFunction]
        """Initialization status for first-step readiness checks.

        Use this as your first action. If phase != READY, relay the description to the user and
        instruct them to retry later.
        """
        state = mgr.status()
        return InitStatus(
            phase=state.phase.name,
            attempts=state.attempts,
            started_at=state.started_at,
            completed_at=state.completed_at,
            error_message=state.error_message,
            description=state.description,
        )

    @mcp.tool
    async def list_catalogs(ctx: Context) -> list[str]:  # pyright: ignore[reportUnusedFunction]
        """List Trino catalogs (cached discovery)."""
        schema_service = await _service(ctx)
        return schema_service.list_catalogs()

    @mcp.tool
    async def list_schemas(  # pyright: ignore[reportUnusedFunction]
        ctx: Context,
        catalog: Annotated[str, Field(description="Catalog name as returned by list_catalogs")],
    ) -> list[str]:
        """List the schemas of a catalog (cached discovery)."""
        schema_service = await _service(ctx)
        return schema_service.list_schemas(catalog)

    @mcp.tool
    async def list_tables(  # pyright: ignore[reportUnusedFunction]
        ctx: Context,
        catalog: Annotated[str, Field(description="Catalog name as returned by list_catalogs")],
        schema: Annotated[str, Field(description="Schema name as returned by list_schemas")],
    ) -> list[str]:
        """List the tables of a schema (cached discovery)."""
        schema_service = await _service(ctx)
        return schema_service.list_tables(catalog, schema)

    @mcp.tool
    async def describe_table(  # pyright: ignore[reportUnusedFunction]
        ctx: Context,
        name: Annotated[
            str,
            Field(description="Root field name, e.g. 'hive_sales_orders' (catalog_schema_table)"),
        ],
    ) -> TableField:
        """Describe the generated object type of one table: fields, output and Trino types."""
        schema_service = await _service(ctx)
        try:
            return schema_service.describe_table(name)
        except ValueError as exc:
            await ctx.error(str(exc))
            raise

    @mcp.tool
    async def get_graphql_schema(ctx: Context) -> str:  # pyright: ignore[reportUnusedFunction]
        """Return the generated GraphQL schema in SDL form."""
        schema_service = await _service(ctx)
        return schema_service.schema_sdl()

    @mcp.tool
    async def execute_graphql(  # pyright: ignore[reportUnusedFunction]
        ctx: Context,
        query: Annotated[
            str,
            Field(description="GraphQL query, e.g. '{ hive_sales_orders(limit: 5) { id } }'"),
        ],
        variables: Annotated[
            dict[str, Any] | None,
            Field(description="Values for the variables declared by the query"),
        ] = None,
        operation_name: Annotated[
            str | None,
            Field(description="Operation to run when the document holds several"),
        ] = None,
    ) -> dict[str, Any]:
        """Run a GraphQL query against the generated schema.

        Returns the standard response with ``data`` and, when something failed, ``errors``.
        """
        schema_service = await _service(ctx)
        _logger.info("execute_graphql: %d characters", len(query))
        return schema_service.execute_graphql(query, variables, operation_name)

    @mcp.tool
    async def rebuild_schema(  # pyright: ignore[reportUnusedFunction]
        ctx: Context,
        *,
        ignore_cache: Annotated[
            bool,
            Field(description="Re-read metadata from Trino instead of the cache", default=False),
        ] = False,
    ) -> SchemaSummary:
        """Regenerate the whole schema from metadata and make it active."""
        schema_service = await _service(ctx)
        _logger.info("Rebuilding schema (ignore_cache=%s)", ignore_cache)
        try:
            return schema_service.rebuild_schema(ignore_cache=ignore_cache)
        except SchemaGenerationError as exc:
            await ctx.error(f"Schema rebuild failed: {exc}")
            raise

    # Hint to static analyzers that nested functions are intentionally used
    _ = (
        get_init_status,
        list_catalogs,
        list_schemas,
        list_tables,
        describe_table,
        get_graphql_schema,
        execute_graphql,
        rebuild_schema,
    )
