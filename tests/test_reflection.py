from __future__ import annotations

from pathlib import Path

from conftest import FakeMetadataSource

from trino_graphql_mcp.schema_tools.cache import FileMetadataCache, MemoryMetadataCache
from trino_graphql_mcp.schema_tools.models import ColumnMetadata, SchemaGenerationConfig
from trino_graphql_mcp.schema_tools.reflection import MetadataWalker

CATALOGS = {
    "hive": {
        "sales": {
            "orders": [("order_id", "integer"), ("status", "varchar")],
            "order-items": [("item id", "bigint")],
        },
        "hr": {"people": [("id", "integer")]},
    },
    "my-lake": {"raw": {"events": [("payload", "json")]}},
    "system": {"runtime": {"nodes": [("node_id", "varchar")]}},
}


def _walker(
    source: FakeMetadataSource,
    cache: MemoryMetadataCache | None = None,
    **config: object,
) -> MetadataWalker:
    return MetadataWalker(
        source,
        cache if cache is not None else MemoryMetadataCache(),
        SchemaGenerationConfig(**config),  # type: ignore[arg-type]
    )


def test_listings_are_served_from_cache_after_first_call() -> None:
    source = FakeMetadataSource(CATALOGS)
    cache = MemoryMetadataCache()
    walker = _walker(source, cache)

    assert walker.list_catalogs() == ["hive", "my-lake", "system"]
    assert walker.list_schemas("hive") == ["sales", "hr"]
    assert walker.list_tables("hive", "sales") == ["orders", "order-items"]
    first_calls = len(source.calls)

    assert walker.list_catalogs() == ["hive", "my-lake", "system"]
    assert walker.list_schemas("hive") == ["sales", "hr"]
    assert walker.list_tables("hive", "sales") == ["orders", "order-items"]
    assert len(source.calls) == first_calls

    assert ("catalogs",) in cache.keys()
    assert ("hive", "schemas") in cache.keys()
    assert ("hive", "sales", "tables") in cache.keys()


def test_columns_are_cached_under_sanitized_path() -> None:
    source = FakeMetadataSource(CATALOGS)
    cache = MemoryMetadataCache()
    walker = _walker(source, cache)

    columns = walker.list_columns("hive", "sales", "order-items")
    assert columns == [ColumnMetadata("hive", "sales", "order-items", "item id", "bigint")]
    assert ("hive", "sales", "order_U002D_items", "columns") in cache.keys()

    assert walker.list_columns("hive", "sales", "order-items") == columns
    assert source.calls.count(("columns", "hive", "sales", "order-items")) == 1


def test_ignore_cache_always_queries_but_still_writes() -> None:
    source = FakeMetadataSource(CATALOGS)
    cache = MemoryMetadataCache()
    cache.put(("catalogs",), ["stale"])
    walker = _walker(source, cache, ignore_cache=True)

    assert walker.list_catalogs() == ["hive", "my-lake", "system"]
    assert walker.list_catalogs() == ["hive", "my-lake", "system"]
    assert source.calls.count(("catalogs",)) == 2
    assert cache.get(("catalogs",)) == ["hive", "my-lake", "system"]


def test_discovery_failure_is_cached_as_empty() -> None:
    source = FakeMetadataSource(CATALOGS, failing={"hr"})
    cache = MemoryMetadataCache()
    walker = _walker(source, cache)

    assert walker.list_tables("hive", "hr") == []
    assert cache.get(("hive", "hr", "tables")) == []
    assert walker.list_tables("hive", "hr") == []
    assert source.calls.count(("tables", "hive", "hr")) == 1


def test_failed_describe_yields_no_columns() -> None:
    source = FakeMetadataSource(CATALOGS, failing={"people"})
    walker = _walker(source)
    assert walker.list_columns("hive", "hr", "people") == []


def test_sanitized_names_are_restored_before_reaching_the_source() -> None:
    source = FakeMetadataSource(CATALOGS)
    walker = _walker(source, replace_invalid_characters=True, ignore_invalid_names=False)

    assert walker.list_catalogs() == ["hive", "my_U002D_lake", "system"]
    assert walker.list_schemas("my_U002D_lake") == ["raw"]
    assert ("schemas", "my-lake") in source.calls

    tables = walker.list_tables("hive", "sales")
    assert tables == ["orders", "order_U002D_items"]
    columns = walker.list_columns("hive", "sales", "order_U002D_items")
    assert ("columns", "hive", "sales", "order-items") in source.calls
    assert [c.column for c in columns] == ["item_U0020_id"]


def test_raw_names_reach_the_source_unchanged_without_sanitization() -> None:
    source = FakeMetadataSource({"c": {"s": {"t_U0041_": [("id", "integer")]}}})
    walker = _walker(source)

    assert walker.list_tables("c", "s") == ["t_U0041_"]
    columns = walker.list_columns("c", "s", "t_U0041_")
    assert ("columns", "c", "s", "t_U0041_") in source.calls
    assert [c.column for c in columns] == ["id"]


def test_invalid_names_are_dropped_from_discovery() -> None:
    source = FakeMetadataSource(CATALOGS)
    walker = _walker(source)

    tree = walker.discover()
    assert [node.name for node in tree] == ["hive", "system"]
    sales = next(s for s in tree[0].schemas if s.name == "sales")
    assert [t.name for t in sales.tables] == ["orders"]


def test_include_and_exclude_lists() -> None:
    source = FakeMetadataSource(CATALOGS)
    walker = _walker(source, exclude_catalogs=["SYSTEM"], exclude_schemas=["hr"])
    tree = walker.discover()
    assert [node.name for node in tree] == ["hive"]
    assert [s.name for s in tree[0].schemas] == ["sales"]

    walker = _walker(FakeMetadataSource(CATALOGS), include_catalogs=["hive"])
    assert [node.name for node in walker.discover()] == ["hive"]

    walker = _walker(FakeMetadataSource(CATALOGS), include_schemas=["hr"])
    tree = walker.discover()
    assert [s.name for node in tree for s in node.schemas] == ["hr"]


def test_include_list_matches_restored_names() -> None:
    source = FakeMetadataSource(CATALOGS)
    walker = _walker(source, replace_invalid_characters=True, include_catalogs=["my-lake"])
    assert [node.name for node in walker.discover()] == ["my_U002D_lake"]


def test_excluded_catalog_is_never_descended() -> None:
    source = FakeMetadataSource(CATALOGS)
    walker = _walker(source, exclude_catalogs=["system"])
    walker.discover()
    assert ("schemas", "system") not in source.calls


def test_catalog_columns_for_join_detection() -> None:
    source = FakeMetadataSource(CATALOGS)
    walker = _walker(source)
    columns = walker.list_catalog_columns("hive")
    assert ColumnMetadata("hive", "hr", "people", "id", "integer") in columns
    assert len(columns) == 4


def test_catalog_columns_failure_is_empty() -> None:
    source = FakeMetadataSource(CATALOGS, failing={"hive"})
    assert _walker(source).list_catalog_columns("hive") == []


def test_file_cache_round_trip(tmp_path: Path) -> None:
    cache = FileMetadataCache(tmp_path)
    source = FakeMetadataSource(CATALOGS)
    walker = MetadataWalker(source, cache, SchemaGenerationConfig(schema_folder=str(tmp_path)))

    walker.list_columns("hive", "sales", "orders")
    file = tmp_path / "hive" / "sales" / "orders" / "columns.json"
    assert file.is_file()
    assert not list(file.parent.glob("*.tmp"))

    fresh = MetadataWalker(
        FakeMetadataSource({}), FileMetadataCache(tmp_path), SchemaGenerationConfig()
    )
    assert [c.column for c in fresh.list_columns("hive", "sales", "orders")] == [
        "order_id",
        "status",
    ]


def test_file_cache_ignores_corrupt_entries(tmp_path: Path) -> None:
    cache = FileMetadataCache(tmp_path)
    (tmp_path / "catalogs.json").write_text("{not json", encoding="utf-8")
    assert cache.get(("catalogs",)) is None
    cache.put(("catalogs",), ["hive"])
    assert cache.get(("catalogs",)) == ["hive"]

