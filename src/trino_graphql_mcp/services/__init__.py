"""Services package for trino-graphql-mcp.

This package contains service classes that handle business logic and orchestration
for the trino-graphql-mcp application. Services coordinate the schema_tools,
execute and relations modules.

Main Components:
- ConfigService: Configuration and database connection management
- SchemaService: Schema generation, table queries and join detection for one engine
- SchemaServiceManager: Process-wide singleton with background initialization
"""

from .config_service import ConfigService
from .schema_service import SchemaService
from .schema_service_manager import SchemaServiceManager

__all__ = [
    "ConfigService",
    "SchemaService",
    "SchemaServiceManager",
]
