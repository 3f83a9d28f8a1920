from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from trino_graphql_mcp.schema_tools.exceptions import DiscoveryError


class FakeMetadataSource:
    """In-memory metadata source.

    ``catalogs`` maps catalog -> schema -> table -> [(column, native_type), ...].
    Names listed in ``failing`` raise DiscoveryError when queried.
    """

    def __init__(
        self,
        catalogs: dict[str, dict[str, dict[str, list[tuple[str, str]]]]],
        *,
        failing: set[str] | None = None,
        rows: list[dict[str, Any]] | None = None,
    ) -> None:
        self.catalogs = catalogs
        self.failing = failing or set()
        self.rows = rows or []
        self.calls: list[tuple[Any, ...]] = []

    def _check(self, *names: str) -> None:
        for name in names:
            if name in self.failing:
                raise DiscoveryError(f"access denied: {name}")

    def list_catalogs(self) -> list[str]:
        self.calls.append(("catalogs",))
        return list(self.catalogs)

    def list_schemas(self, catalog: str) -> list[str]:
        self.calls.append(("schemas", catalog))
        self._check(catalog)
        return list(self.catalogs[catalog])

    def list_tables(self, catalog: str, schema: str) -> list[str]:
        self.calls.append(("tables", catalog, schema))
        self._check(catalog, schema)
        return list(self.catalogs[catalog][schema])

    def describe_columns(self, catalog: str, schema: str, table: str) -> list[dict[str, str]]:
        self.calls.append(("columns", catalog, schema, table))
        self._check(catalog, schema, table)
        return [
            {"name": name, "native_type": native_type}
            for name, native_type in self.catalogs[catalog][schema][table]
        ]

    def list_catalog_columns(self, catalog: str) -> list[dict[str, str]]:
        self.calls.append(("catalog_columns", catalog))
        self._check(catalog)
        return [
            {"schema": schema, "table": table, "column": name, "native_type": native_type}
            for schema, tables in self.catalogs[catalog].items()
            for table, columns in tables.items()
            for name, native_type in columns
        ]

    def execute_query(
        self, text: str, params: Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        self.calls.append(("query", text, dict(params or {})))
        return [dict(row) for row in self.rows]


SALES_CATALOGS: dict[str, dict[str, dict[str, list[tuple[str, str]]]]] = {
    "hive": {
        "sales": {
            "orders": [("order_id", "integer"), ("amount", "double"), ("status", "varchar")],
        },
    },
}


@pytest.fixture
def sales_source() -> FakeMetadataSource:
    return FakeMetadataSource(SALES_CATALOGS)


@pytest.fixture
def make_source() -> type[FakeMetadataSource]:
    return FakeMetadataSource
