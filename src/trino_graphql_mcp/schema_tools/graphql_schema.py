"""Rendering of a GeneratedSchema into an executable GraphQL schema.

The rendered schema has:
- A ``Query`` root with ``catalogs``, ``schemas(catalog)`` and
  ``tables(catalog, schema)`` discovery fields plus one field per table
- A ``Subscription`` root mirroring the table fields
- The ``FilterOperator`` enum and ``FilterInput`` input type used by the
  ``filters`` argument of every table field
- One object type per table and the shared ``KeyValue`` type for map columns

Table and discovery resolution is delegated to callables supplied by the
caller, so the schema can be printed without a live engine.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Mapping
from decimal import Decimal
from typing import Any

from graphql import (
    GraphQLArgument,
    GraphQLBoolean,
    GraphQLEnumType,
    GraphQLEnumValue,
    GraphQLField,
    GraphQLFloat,
    GraphQLInputField,
    GraphQLInputObjectType,
    GraphQLInt,
    GraphQLList,
    GraphQLNonNull,
    GraphQLObjectType,
    GraphQLOutputType,
    GraphQLResolveInfo,
    GraphQLSchema,
    GraphQLString,
    print_schema,
)

from trino_graphql_mcp.execute.models import OPERATOR_DESCRIPTIONS, FilterOperator

from .models import (
    FieldDefinition,
    GeneratedSchema,
    GeneratedTableType,
    ListType,
    ObjectType,
    OutputType,
    RootField,
    ScalarKind,
    ScalarType,
)
from .type_mapping import KEY_VALUE_TYPE

TableResolver = Callable[
    [RootField, int | None, list[dict[str, Any]] | None], list[dict[str, Any]]
]
NameLister = Callable[..., list[str]]

_SCALARS: dict[ScalarKind, GraphQLOutputType] = {
    ScalarKind.STRING: GraphQLString,
    ScalarKind.INT: GraphQLInt,
    ScalarKind.FLOAT: GraphQLFloat,
    ScalarKind.BOOLEAN: GraphQLBoolean,
}

FILTER_OPERATOR_ENUM = GraphQLEnumType(
    "FilterOperator",
    {
        operator.name: GraphQLEnumValue(operator.value, description=OPERATOR_DESCRIPTIONS[operator])
        for operator in FilterOperator
    },
    description="SQL-compatible filter operations",
)

FILTER_INPUT_TYPE = GraphQLInputObjectType(
    "FilterInput",
    {
        "field": GraphQLInputField(GraphQLNonNull(GraphQLString), description="Column name"),
        "operator": GraphQLInputField(
            GraphQLNonNull(FILTER_OPERATOR_ENUM), description="Filter operation"
        ),
        "stringValue": GraphQLInputField(GraphQLString),
        "intValue": GraphQLInputField(GraphQLInt),
        "floatValue": GraphQLInputField(GraphQLFloat),
        "booleanValue": GraphQLInputField(GraphQLBoolean),
        "dateValue": GraphQLInputField(GraphQLString, description="ISO 8601 date"),
        "values": GraphQLInputField(
            GraphQLList(GraphQLString), description="List of values for IN, BETWEEN, etc."
        ),
    },
)


def _scalar_value(value: Any) -> Any:
    """Coerce engine values the built-in scalars cannot serialize."""
    if value is None or isinstance(value, str | bool | int | float):
        return value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, bytes):
        return value.hex()
    return str(value)


def _key_values(value: Any) -> Any:
    """Turn a map value into a list of ``KeyValue`` entries."""
    if isinstance(value, Mapping):
        return [
            {"key": _scalar_value(key), "value": _scalar_value(item)}
            for key, item in value.items()
        ]
    return value


def _column_resolver(definition: FieldDefinition) -> Callable[..., Any]:
    name = definition.name
    is_map = definition.type == ListType(KEY_VALUE_TYPE)
    is_scalar = isinstance(definition.type, ScalarType)

    def resolve(source: Any, _info: GraphQLResolveInfo) -> Any:
        value = source.get(name) if isinstance(source, Mapping) else getattr(source, name, None)
        if is_map:
            return _key_values(value)
        if is_scalar:
            return _scalar_value(value)
        return value

    return resolve


class GraphQLSchemaRenderer:
    """Render a GeneratedSchema with graphql-core.

    Attributes:
        table_resolver: Called with ``(root_field, limit, filters)`` for table fields
        list_catalogs: Resolver for the ``catalogs`` field
        list_schemas: Resolver for ``schemas(catalog)``
        list_tables: Resolver for ``tables(catalog, schema)``
    """

    def __init__(
        self,
        table_resolver: TableResolver | None = None,
        *,
        list_catalogs: NameLister | None = None,
        list_schemas: NameLister | None = None,
        list_tables: NameLister | None = None,
    ) -> None:
        self.table_resolver = table_resolver
        self.list_catalogs = list_catalogs
        self.list_schemas = list_schemas
        self.list_tables = list_tables
        self._object_types: dict[str, GraphQLObjectType] = {}

    def render(self, generated: GeneratedSchema) -> GraphQLSchema:
        """Build the executable GraphQL schema."""
        self._object_types = {}
        table_types = [self._table_type(table_type) for table_type in generated.object_types]

        query_fields: dict[str, GraphQLField] = self._discovery_fields()
        subscription_fields: dict[str, GraphQLField] = {}
        for root in generated.root_fields:
            query_fields[root.name] = self._root_field(root)
            subscription_fields[root.name] = self._root_field(root, subscription=True)

        query = GraphQLObjectType("Query", query_fields)
        subscription = (
            GraphQLObjectType("Subscription", subscription_fields) if subscription_fields else None
        )
        return GraphQLSchema(
            query=query,
            subscription=subscription,
            types=[FILTER_INPUT_TYPE, *table_types],
        )

    # ---- types ---------------------------------------------------------
    def _output_type(self, output: OutputType) -> GraphQLOutputType:
        if isinstance(output, ScalarType):
            return _SCALARS[output.kind]
        if isinstance(output, ListType):
            return GraphQLList(self._output_type(output.of))
        return self._object_type(output)

    def _object_type(self, output: ObjectType) -> GraphQLObjectType:
        existing = self._object_types.get(output.name)
        if existing is not None:
            return existing
        created = GraphQLObjectType(
            output.name,
            lambda: {name: GraphQLField(self._output_type(of)) for name, of in output.fields},
        )
        self._object_types[output.name] = created
        return created

    def _table_type(self, table_type: GeneratedTableType) -> GraphQLObjectType:
        fields = {
            definition.name: GraphQLField(
                self._output_type(definition.type),
                description=definition.description,
                resolve=_column_resolver(definition),
            )
            for definition in table_type.fields
        }
        created = GraphQLObjectType(table_type.type_name, fields)
        self._object_types[table_type.type_name] = created
        return created

    # ---- root fields ---------------------------------------------------
    def _root_field(self, root: RootField, *, subscription: bool = False) -> GraphQLField:
        args = {
            "limit": GraphQLArgument(GraphQLInt, description="Limit number of rows"),
            "filters": GraphQLArgument(
                GraphQLList(FILTER_INPUT_TYPE), description="Filter selection"
            ),
        }
        output = GraphQLList(self._object_types[root.type_name])

        def resolve(
            _source: Any,
            _info: GraphQLResolveInfo,
            limit: int | None = None,
            filters: list[dict[str, Any]] | None = None,
        ) -> list[dict[str, Any]]:
            if self.table_resolver is None:
                msg = f"No table resolver configured for {root.name}"
                raise RuntimeError(msg)
            return self.table_resolver(root, limit, filters)

        if not subscription:
            return GraphQLField(output, args=args, description=root.description, resolve=resolve)

        async def subscribe(
            source: Any,
            info: GraphQLResolveInfo,
            limit: int | None = None,
            filters: list[dict[str, Any]] | None = None,
        ) -> AsyncIterator[list[dict[str, Any]]]:
            yield resolve(source, info, limit, filters)

        return GraphQLField(
            output,
            args=args,
            description=root.description,
            resolve=lambda rows, _info, **_kwargs: rows,
            subscribe=subscribe,
        )

    def _discovery_fields(self) -> dict[str, GraphQLField]:
        names = GraphQLList(GraphQLString)
        required = GraphQLNonNull(GraphQLString)

        def catalogs(_source: Any, _info: GraphQLResolveInfo) -> list[str]:
            return self.list_catalogs() if self.list_catalogs else []

        def schemas(_source: Any, _info: GraphQLResolveInfo, catalog: str) -> list[str]:
            return self.list_schemas(catalog) if self.list_schemas else []

        def tables(
            _source: Any, _info: GraphQLResolveInfo, catalog: str, schema: str
        ) -> list[str]:
            return self.list_tables(catalog, schema) if self.list_tables else []

        return {
            "catalogs": GraphQLField(names, resolve=catalogs),
            "schemas": GraphQLField(
                names, args={"catalog": GraphQLArgument(required)}, resolve=schemas
            ),
            "tables": GraphQLField(
                names,
                args={
                    "catalog": GraphQLArgument(required),
                    "schema": GraphQLArgument(required),
                },
                resolve=tables,
            ),
        }


def render_sdl(schema: GraphQLSchema) -> str:
    """Print the schema in SDL form."""
    return print_schema(schema)
