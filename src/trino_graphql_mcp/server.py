"""FastMCP server implementation for trino-graphql-mcp."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import dotenv
from fastmcp import FastMCP
from fastmcp.utilities.logging import get_logger
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse

from trino_graphql_mcp.execute.mcp_tools import register_query_table_tool
from trino_graphql_mcp.relations.mcp_tools import register_join_tools
from trino_graphql_mcp.schema_tools.mcp_tools import register_schema_tools
from trino_graphql_mcp.services.schema_service_manager import SchemaServiceManager

# Load environment variables
dotenv.load_dotenv()

# Configure a module-level logger for local server logs.
_logger = get_logger(__name__)


# -- Context Manager for SchemaService initialization -------------------
@asynccontextmanager
async def lifespan(_mcp_instance: FastMCP) -> AsyncGenerator[None]:
    """FastMCP lifespan context manager for schema service initialization."""
    manager = SchemaServiceManager.get_instance()
    try:
        _logger.info("Starting schema generation in background during lifespan startup")
        manager.start_background_initialization()
        yield
    except Exception:
        _logger.exception("Error during SchemaService initialization")
    finally:
        _logger.info("Shutting down SchemaService during lifespan shutdown")
        await manager.shutdown()


# Create the main MCP server instance with lifespan
mcp = FastMCP(
    instructions=(
        "This exposes Trino catalogs as a generated GraphQL schema. Use get_init_status "
        "first, discover tables with list_catalogs/list_schemas/list_tables, inspect "
        "fields with describe_table, read rows with query_table or execute_graphql "
        "and find join candidates with detect_joins."
    ),
    lifespan=lifespan,
)

# -- Tool Registration -------------------------------------------------------
register_schema_tools(mcp)
register_query_table_tool(mcp)
register_join_tools(mcp)


# -- Health Check ----------------------------------------------------------
@mcp.custom_route("/health", methods=["GET"])
async def health_check(_request: Request) -> JSONResponse:
    state = SchemaServiceManager.get_instance().status()
    return JSONResponse({"status": "healthy", "service": "mcp-server", "phase": state.phase.name})


# -- Schema SDL --------------------------------------------------------------
@mcp.custom_route("/schema.graphqls", methods=["GET"])
async def schema_sdl(_request: Request) -> PlainTextResponse:
    manager = SchemaServiceManager.get_instance()
    try:
        schema_service = await manager.get_schema_service()
    except RuntimeError as exc:
        return PlainTextResponse(str(exc), status_code=503)
    return PlainTextResponse(schema_service.schema_sdl())


# -- GraphQL endpoint --------------------------------------------------------
@mcp.custom_route("/graphql", methods=["POST"])
async def graphql_endpoint(request: Request) -> JSONResponse:
    """Execute a GraphQL query posted as ``{"query", "variables", "operationName"}``."""
    manager = SchemaServiceManager.get_instance()
    try:
        schema_service = await manager.get_schema_service()
    except RuntimeError as exc:
        return JSONResponse({"errors": [{"message": str(exc)}]}, status_code=503)

    try:
        payload = await request.json()
    except ValueError:
        return _bad_request("Request body must be a JSON object")
    if not isinstance(payload, dict):
        return _bad_request("Request body must be a JSON object")
    query = payload.get("query")
    if not isinstance(query, str) or not query.strip():
        return _bad_request("Missing 'query'")
    variables = payload.get("variables")
    if variables is not None and not isinstance(variables, dict):
        return _bad_request("'variables' must be an object")

    # Table resolvers block on the engine
    result = await asyncio.to_thread(
        schema_service.execute_graphql, query, variables, payload.get("operationName")
    )
    return JSONResponse(result)


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse({"errors": [{"message": message}]}, status_code=400)


# -- Main Entrypoint -------------------------------------------------------

# Use fastmcp command to start the server
# fastmcp run
