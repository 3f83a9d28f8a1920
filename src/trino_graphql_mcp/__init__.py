"""trino-graphql-mcp package for exposing Trino metadata as GraphQL.

Provides Model Context Protocol (FastMCP) server capabilities for generating a
GraphQL schema from Trino catalogs, querying tables through structured
filters and suggesting join candidates.
"""

from trino_graphql_mcp.models import InitStatus, SchemaSummary, TableField
from trino_graphql_mcp.services import ConfigService, SchemaService

__all__ = [  # noqa: RUF022
    # Core models
    "InitStatus",
    "SchemaSummary",
    "TableField",
    # Services
    "ConfigService",
    "SchemaService",
]
