"""Schema generation module for trino-graphql-mcp.

Turns Trino metadata into a GraphQL schema. This module includes the
identifier codec, the native type mapper, cached metadata discovery and
schema assembly.

Main Components:
- MetadataWalker: Cached discovery of catalogs, schemas, tables and columns
- SchemaAssembler: Builds a GeneratedSchema from the discovery tree
- GraphQLSchemaRenderer: Renders a GeneratedSchema with graphql-core
- sanitize / restore: Reversible mapping between engine names and API names
- map_type: Native type descriptor to output type
- Exceptions: Structured error handling for different failure modes

Example Usage:
    >>> import sqlalchemy as sa
    >>> from trino_graphql_mcp.schema_tools import (
    ...     MemoryMetadataCache, MetadataWalker, SchemaAssembler, SqlAlchemyMetadataSource
    ... )
    >>>
    >>> engine = sa.create_engine("trino://user@localhost:8080/")
    >>> walker = MetadataWalker(SqlAlchemyMetadataSource(engine), MemoryMetadataCache())
    >>> generated = SchemaAssembler(walker).build_schema()
"""

from .assembler import SchemaAssembler, SchemaBuilder, generated_type_name, is_exposable_name
from .cache import FileMetadataCache, MemoryMetadataCache, MetadataCache
from .constants import Constants, JoinStrategy
from .exceptions import (
    DiscoveryError,
    FilterError,
    InvalidFilterError,
    SchemaGenerationError,
    TypeNameCollisionError,
    UnsupportedOperatorError,
)
from .graphql_schema import GraphQLSchemaRenderer, render_sdl
from .identifiers import is_valid_name, restore, sanitize
from .models import (
    CatalogMetadata,
    ColumnMetadata,
    GeneratedSchema,
    GeneratedTableType,
    ListType,
    ObjectType,
    RootField,
    ScalarKind,
    ScalarType,
    SchemaGenerationConfig,
)
from .reflection import MetadataWalker
from .sources import MetadataSource, SqlAlchemyMetadataSource
from .type_mapping import KEY_VALUE_TYPE, map_type

__all__ = [
    "KEY_VALUE_TYPE",
    "CatalogMetadata",
    "ColumnMetadata",
    "Constants",
    "DiscoveryError",
    "FileMetadataCache",
    "FilterError",
    "GeneratedSchema",
    "GeneratedTableType",
    "GraphQLSchemaRenderer",
    "InvalidFilterError",
    "JoinStrategy",
    "ListType",
    "MemoryMetadataCache",
    "MetadataCache",
    "MetadataSource",
    "MetadataWalker",
    "ObjectType",
    "RootField",
    "ScalarKind",
    "ScalarType",
    "SchemaAssembler",
    "SchemaBuilder",
    "SchemaGenerationConfig",
    "SchemaGenerationError",
    "SqlAlchemyMetadataSource",
    "TypeNameCollisionError",
    "UnsupportedOperatorError",
    "generated_type_name",
    "is_exposable_name",
    "is_valid_name",
    "map_type",
    "restore",
    "sanitize",
]
