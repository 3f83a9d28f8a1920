"""Data models for schema generation.

This module contains the data classes used to represent discovered metadata,
the output type descriptors derived from native column types, and the
generated schema handed to the transport layer.

Models:
- CatalogMetadata: A discovered catalog name as listed
- ColumnMetadata: One discovered column with its native type
- CatalogNode / SchemaNode / TableNode: Discovery tree produced by the walker
- ScalarType / ListType / ObjectType: Output type descriptors (``OutputType``)
- FieldDefinition: A named, typed field of a generated object type
- GeneratedTableType: Object type generated for one table
- RootField: Query/subscription entry point exposing one table
- GeneratedSchema: Complete, ordered result of one schema build
- SchemaGenerationConfig: Configuration for discovery and schema assembly
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from .constants import Constants, JoinStrategy


@dataclass(frozen=True)
class CatalogMetadata:
    """A catalog as listed by discovery.

    Attributes:
        name: Catalog name as listed (already sanitized when sanitization is enabled)
    """

    name: str


@dataclass(frozen=True)
class ColumnMetadata:
    """A single discovered column.

    Attributes:
        catalog: Catalog name (sanitized when sanitization is enabled)
        schema: Schema name
        table: Table name
        column: Column name
        native_type: Engine-native type descriptor, e.g. ``array(varchar)``
    """

    catalog: str
    schema: str
    table: str
    column: str
    native_type: str

    @property
    def table_name(self) -> str:
        return f"{self.catalog}.{self.schema}.{self.table}"

    @property
    def full_name(self) -> str:
        return f"{self.table_name}.{self.column}"

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ColumnMetadata:
        return cls(
            catalog=str(data["catalog"]),
            schema=str(data["schema"]),
            table=str(data["table"]),
            column=str(data["column"]),
            native_type=str(data["native_type"]),
        )


@dataclass(frozen=True)
class TableNode:
    """A discovered table and its columns."""

    name: str
    columns: tuple[ColumnMetadata, ...]


@dataclass(frozen=True)
class SchemaNode:
    """A discovered schema and the tables that passed filtering."""

    name: str
    tables: tuple[TableNode, ...]


@dataclass(frozen=True)
class CatalogNode:
    """A discovered catalog and the schemas that passed filtering."""

    catalog: CatalogMetadata
    schemas: tuple[SchemaNode, ...]

    @property
    def name(self) -> str:
        return self.catalog.name


class ScalarKind(Enum):
    """Scalar kinds of the produced API."""

    STRING = "String"
    INT = "Int"
    FLOAT = "Float"
    BOOLEAN = "Boolean"


@dataclass(frozen=True)
class ScalarType:
    kind: ScalarKind

    def describe(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class ListType:
    of: OutputType

    def describe(self) -> str:
        return f"[{self.of.describe()}]"


@dataclass(frozen=True)
class ObjectType:
    """Named object type; fields keep declaration order."""

    name: str
    fields: tuple[tuple[str, OutputType], ...]

    def describe(self) -> str:
        return self.name


OutputType = ScalarType | ListType | ObjectType

STRING = ScalarType(ScalarKind.STRING)
INT = ScalarType(ScalarKind.INT)
FLOAT = ScalarType(ScalarKind.FLOAT)
BOOLEAN = ScalarType(ScalarKind.BOOLEAN)


@dataclass(frozen=True)
class FieldDefinition:
    """A field of a generated table type."""

    name: str
    type: OutputType
    native_type: str

    @property
    def description(self) -> str:
        return f"Trino type: {self.native_type}"


@dataclass(frozen=True)
class GeneratedTableType:
    """Object type generated for one table.

    Attributes:
        type_name: Sanitized ``catalog_schema_table`` name
        catalog: Catalog the table belongs to
        schema: Schema the table belongs to
        table: Table name
        fields: Column fields in discovery order
    """

    type_name: str
    catalog: str
    schema: str
    table: str
    fields: tuple[FieldDefinition, ...]


@dataclass(frozen=True)
class RootField:
    """Query/subscription root field for one table.

    Each root field returns a list of ``type_name`` objects and accepts an
    optional ``limit`` and an optional list of filter predicates.
    """

    name: str
    type_name: str
    catalog: str
    schema: str
    table: str

    @property
    def description(self) -> str:
        return f"Catalog: {self.catalog}, Schema: {self.schema}, Table: {self.table}"


@dataclass(frozen=True)
class GeneratedSchema:
    """Result of one schema build, ordered by name."""

    root_fields: tuple[RootField, ...]
    object_types: tuple[GeneratedTableType, ...]

    def root_field(self, name: str) -> RootField:
        for root in self.root_fields:
            if root.name == name:
                return root
        raise KeyError(name)

    def object_type(self, type_name: str) -> GeneratedTableType:
        for table_type in self.object_types:
            if table_type.type_name == type_name:
                return table_type
        raise KeyError(type_name)

    @property
    def root_field_names(self) -> list[str]:
        return [root.name for root in self.root_fields]


@dataclass
class SchemaGenerationConfig:
    """Configuration for metadata discovery and schema assembly.

    Attributes:
        include_catalogs: Optional whitelist of catalogs
        exclude_catalogs: Optional blacklist of catalogs
        include_schemas: Optional whitelist of schemas
        exclude_schemas: Optional blacklist of schemas
        replace_invalid_characters: Sanitize discovered names during discovery
        ignore_invalid_names: Drop objects whose names violate the grammar
        ignore_cache: Bypass cached metadata and always query the engine
        schema_folder: Root folder of the file-backed metadata cache
        default_limit: Row cap applied when a request omits ``limit``
        join_strategy: Column grouping scope for join detection
    """

    include_catalogs: list[str] | None = None
    exclude_catalogs: list[str] | None = None
    include_schemas: list[str] | None = None
    exclude_schemas: list[str] | None = None
    replace_invalid_characters: bool = False
    ignore_invalid_names: bool = True
    ignore_cache: bool = False
    schema_folder: str = Constants.DEFAULT_SCHEMA_FOLDER
    default_limit: int = Constants.DEFAULT_ROW_LIMIT
    join_strategy: JoinStrategy = field(default=JoinStrategy.SAME_SCHEMA)
