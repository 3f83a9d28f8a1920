"""MCP tool registration for table queries (query_table).

Provides a single tool `query_table(table, limit, filters)` that translates
structured filters into a bound Trino query for one generated root field and
returns a typed result payload.
"""

from __future__ import annotations

from typing import Annotated

from fastmcp import Context, FastMCP
from fastmcp.utilities.logging import get_logger
from pydantic import Field

from trino_graphql_mcp.execute.models import FilterPredicate, QueryTableResult
from trino_graphql_mcp.schema_tools.exceptions import FilterError
from trino_graphql_mcp.services.schema_service_manager import SchemaServiceManager

_logger = get_logger(__name__)


def register_query_table_tool(mcp: FastMCP, manager: SchemaServiceManager | None = None) -> None:
    """Register the table query tool.

    Filter problems are reported through the context and re-raised so that
    only the offending request fails.
    """

    mgr = manager or SchemaServiceManager.get_instance()

    @mcp.tool
    async def query_table(
        ctx: Context,
        table: Annotated[
            str,
            Field(description="Root field name, e.g. 'hive_sales_orders' (catalog_schema_table)"),
        ],
        limit: Annotated[
            int | None,
            Field(ge=0, description="Maximum rows to return; server default when omitted"),
        ] = None,
        filters: Annotated[
            list[FilterPredicate] | None,
            Field(
                description=(
                    "Conditions joined with AND. Each needs field, operator (eq, lt, gt, like) "
                    "and exactly one of stringValue, intValue, floatValue, booleanValue, "
                    "dateValue."
                )
            ),
        ] = None,
    ) -> QueryTableResult:  # pyright: ignore[reportUnusedFunction]
        """Query one generated table with optional filters and a row limit.

        Values are bound as parameters. On engine errors the result has status 'error'
        and execution_error set.
        """
        _logger.info("query_table: %s (limit=%s, %d filters)", table, limit, len(filters or []))

        # Resolve services
        try:
            schema_service = await mgr.get_schema_service()
        except (RuntimeError, ValueError) as exc:
            await ctx.error(f"Schema service not ready: {exc}")
            raise

        try:
            return schema_service.query_table(table, limit, filters)
        except FilterError as exc:
            await ctx.error(f"Invalid filter: {exc}")
            raise
        except ValueError as exc:
            await ctx.error(str(exc))
            raise

    _ = query_table
