from __future__ import annotations

import pytest

from trino_graphql_mcp.schema_tools.models import (
    BOOLEAN,
    FLOAT,
    INT,
    STRING,
    ListType,
    ObjectType,
)
from trino_graphql_mcp.schema_tools.type_mapping import KEY_VALUE_TYPE, map_type


@pytest.mark.parametrize(
    ("native_type", "expected"),
    [
        ("boolean", BOOLEAN),
        ("integer", INT),
        ("bigint", STRING),
        ("double", FLOAT),
        ("varchar", STRING),
        ("decimal(10,2)", STRING),
        ("array(varchar)", ListType(STRING)),
        ("map(varchar,varchar)", ListType(KEY_VALUE_TYPE)),
    ],
)
def test_literal_cases(native_type: str, expected: object) -> None:
    assert map_type(native_type) == expected


@pytest.mark.parametrize("native_type", ["tinyint", "smallint", "int"])
def test_small_integers_map_to_int(native_type: str) -> None:
    assert map_type(native_type) is INT


@pytest.mark.parametrize("native_type", ["real", "float"])
def test_fractional_types_map_to_float(native_type: str) -> None:
    assert map_type(native_type) is FLOAT


@pytest.mark.parametrize(
    "native_type",
    ["char", "varbinary", "json", "uuid", "ipaddress", "date", "time", "timestamp", "interval"],
)
def test_text_like_types_map_to_string(native_type: str) -> None:
    assert map_type(native_type) is STRING


def test_case_and_whitespace_are_ignored() -> None:
    assert map_type("  BOOLEAN ") is BOOLEAN
    assert map_type("Array(Integer)") == ListType(INT)
    assert map_type("DECIMAL(38, 0)") is STRING


def test_nested_arrays_unwrap_recursively() -> None:
    assert map_type("array(array(bigint))") == ListType(ListType(STRING))
    assert map_type("array(map(varchar, array(integer)))") == ListType(ListType(KEY_VALUE_TYPE))


def test_map_ignores_declared_key_and_value_types() -> None:
    assert map_type("map(integer, array(double))") == ListType(KEY_VALUE_TYPE)


def test_unknown_types_fall_back_to_string() -> None:
    assert map_type("row(a integer, b varchar)") is STRING
    assert map_type("varchar(255)") is STRING
    assert map_type("hyperloglog") is STRING


def test_key_value_is_a_single_definition() -> None:
    first = map_type("map(varchar,varchar)")
    second = map_type("map(bigint,double)")
    assert isinstance(first, ListType)
    assert isinstance(second, ListType)
    assert first.of is second.of is KEY_VALUE_TYPE
    assert KEY_VALUE_TYPE == ObjectType("KeyValue", (("key", STRING), ("value", STRING)))


def test_describe() -> None:
    assert map_type("array(integer)").describe() == "[Int]"
    assert map_type("map(varchar,varchar)").describe() == "[KeyValue]"
