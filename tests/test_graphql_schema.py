from __future__ import annotations

import asyncio
import inspect
from decimal import Decimal
from typing import Any

from conftest import FakeMetadataSource
from graphql import graphql_sync, parse, subscribe

from trino_graphql_mcp.schema_tools.assembler import SchemaAssembler
from trino_graphql_mcp.schema_tools.cache import MemoryMetadataCache
from trino_graphql_mcp.schema_tools.graphql_schema import GraphQLSchemaRenderer, render_sdl
from trino_graphql_mcp.schema_tools.models import (
    GeneratedSchema,
    RootField,
    SchemaGenerationConfig,
)
from trino_graphql_mcp.schema_tools.reflection import MetadataWalker

CATALOGS = {
    "hive": {
        "sales": {
            "orders": [
                ("order_id", "integer"),
                ("amount", "decimal(10,2)"),
                ("tags", "array(varchar)"),
                ("attrs", "map(varchar,varchar)"),
            ]
        }
    }
}


def _generated(source: FakeMetadataSource) -> tuple[MetadataWalker, GeneratedSchema]:
    walker = MetadataWalker(source, MemoryMetadataCache())
    return walker, SchemaAssembler(walker).build_schema()


def test_sdl_exposes_roots_and_filter_types() -> None:
    _walker, generated = _generated(FakeMetadataSource(CATALOGS))
    sdl = render_sdl(GraphQLSchemaRenderer().render(generated))

    assert "type Query {" in sdl
    assert "type Subscription {" in sdl
    assert "hive_sales_orders(" in sdl
    assert "limit: Int" in sdl
    assert "filters: [FilterInput]" in sdl
    assert "): [hive_sales_orders]" in sdl
    assert '"""Limit number of rows"""' in sdl
    assert "type hive_sales_orders {" in sdl
    assert "order_id: Int" in sdl
    assert "amount: String" in sdl
    assert "tags: [String]" in sdl
    assert "attrs: [KeyValue]" in sdl
    assert "type KeyValue {" in sdl
    assert "enum FilterOperator {" in sdl
    assert "NOT_BETWEEN" in sdl
    assert "input FilterInput {" in sdl
    assert "operator: FilterOperator!" in sdl
    assert "values: [String]" in sdl
    assert "catalogs: [String]" in sdl
    assert "schemas(catalog: String!): [String]" in sdl
    assert "tables(catalog: String!, schema: String!): [String]" in sdl
    assert '"""Trino type: decimal(10,2)"""' in sdl
    assert '"""Catalog: hive, Schema: sales, Table: orders"""' in sdl


def test_no_tables_means_no_subscription_root() -> None:
    _walker, generated = _generated(FakeMetadataSource({}))
    sdl = render_sdl(GraphQLSchemaRenderer().render(generated))
    assert "type Subscription" not in sdl
    assert "catalogs: [String]" in sdl


def test_query_resolves_rows_and_converts_values() -> None:
    walker, generated = _generated(FakeMetadataSource(CATALOGS))
    calls: list[tuple[str, int | None, Any]] = []

    def resolve(root: RootField, limit: int | None, filters: Any) -> list[dict[str, Any]]:
        calls.append((root.name, limit, filters))
        return [
            {
                "order_id": 7,
                "amount": Decimal("12.50"),
                "tags": ["a", "b"],
                "attrs": {"color": "red"},
            }
        ]

    schema = GraphQLSchemaRenderer(resolve, list_catalogs=walker.list_catalogs).render(generated)
    result = graphql_sync(
        schema,
        """
        {
          catalogs
          hive_sales_orders(limit: 5, filters: [{field: "order_id", operator: GT, intValue: 1}]) {
            order_id amount tags attrs { key value }
          }
        }
        """,
    )

    assert result.errors is None
    assert result.data == {
        "catalogs": ["hive"],
        "hive_sales_orders": [
            {
                "order_id": 7,
                "amount": "12.50",
                "tags": ["a", "b"],
                "attrs": [{"key": "color", "value": "red"}],
            }
        ],
    }
    name, limit, filters = calls[0]
    assert (name, limit) == ("hive_sales_orders", 5)
    assert filters[0]["operator"] == "gt"
    assert filters[0]["intValue"] == 1


def test_resolver_errors_become_graphql_errors() -> None:
    _walker, generated = _generated(FakeMetadataSource(CATALOGS))

    def failing(root: RootField, limit: int | None, filters: Any) -> list[dict[str, Any]]:
        msg = "boom"
        raise RuntimeError(msg)

    schema = GraphQLSchemaRenderer(failing).render(generated)
    result = graphql_sync(schema, "{ hive_sales_orders { order_id } }")
    assert result.errors
    assert "boom" in result.errors[0].message


def test_subscription_emits_rows_once() -> None:
    _walker, generated = _generated(FakeMetadataSource(CATALOGS))

    def resolve(root: RootField, limit: int | None, filters: Any) -> list[dict[str, Any]]:
        return [{"order_id": 1}]

    schema = GraphQLSchemaRenderer(resolve).render(generated)

    async def collect() -> list[Any]:
        stream = subscribe(schema, parse("subscription { hive_sales_orders { order_id } }"))
        if inspect.isawaitable(stream):
            stream = await stream
        return [item.data async for item in stream]  # type: ignore[union-attr]

    assert asyncio.run(collect()) == [{"hive_sales_orders": [{"order_id": 1}]}]


def test_reserved_and_invalid_column_names_never_reach_the_schema() -> None:
    source = FakeMetadataSource(
        {
            "druid": {
                "druid": {
                    "wiki": [("__time", "timestamp"), ("page", "varchar"), ("bad-name", "int")],
                    "other": [("id", "integer")],
                }
            }
        }
    )
    config = SchemaGenerationConfig(ignore_invalid_names=False)
    walker = MetadataWalker(source, MemoryMetadataCache(), config)
    generated = SchemaAssembler(walker).build_schema()
    assert [f.name for f in generated.object_type("druid_druid_wiki").fields] == ["page"]

    def resolve(root: RootField, _limit: int | None, _filters: Any) -> list[dict[str, Any]]:
        return [{"id": 1}] if root.table == "other" else [{"page": "Main"}]

    schema = GraphQLSchemaRenderer(resolve).render(generated)
    result = graphql_sync(schema, "{ druid_druid_other { id } druid_druid_wiki { page } }")

    assert result.errors is None
    assert result.data == {
        "druid_druid_other": [{"id": 1}],
        "druid_druid_wiki": [{"page": "Main"}],
    }
    assert "__time" not in render_sdl(schema)
