"""MCP tool registration for heuristic join detection (detect_joins)."""

from __future__ import annotations

from typing import Annotated

from fastmcp import Context, FastMCP
from fastmcp.utilities.logging import get_logger
from pydantic import Field

from trino_graphql_mcp.relations.models import JoinDetectionResult
from trino_graphql_mcp.services.schema_service_manager import SchemaServiceManager

_logger = get_logger(__name__)


def register_join_tools(mcp: FastMCP, manager: SchemaServiceManager | None = None) -> None:
    """Register the join detection tool."""

    mgr = manager or SchemaServiceManager.get_instance()

    @mcp.tool
    async def detect_joins(
        ctx: Context,
        catalog: Annotated[str, Field(description="Catalog name as returned by list_catalogs")],
        *,
        refresh: Annotated[
            bool,
            Field(description="Recompute instead of returning cached candidates", default=False),
        ] = False,
    ) -> JoinDetectionResult:  # pyright: ignore[reportUnusedFunction]
        """Suggest joinable column pairs in a catalog from naming conventions.

        Candidates are heuristics (shared names, <table>_id -> <table>s.id); verify them
        before relying on a join.
        """
        _logger.info("detect_joins: %s (refresh=%s)", catalog, refresh)
        try:
            schema_service = await mgr.get_schema_service()
        except (RuntimeError, ValueError) as exc:
            await ctx.error(f"Schema service not ready: {exc}")
            raise
        return schema_service.detect_joins(catalog, refresh=refresh)

    _ = detect_joins
