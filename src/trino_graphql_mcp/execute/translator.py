"""Translation of structured filters into bound Trino query text.

Identifiers arrive in their sanitized form and are restored and quoted
before being embedded. Filter values are never inlined; each one becomes a
named bind parameter (``:p0``, ``:p1``...) executed through
``sqlalchemy.text``.

Operator mapping:
- ``eq``   -> ``"field" = :p``
- ``lt``   -> ``"field" < :p``
- ``gt``   -> ``"field" > :p``
- ``like`` -> ``"field" LIKE :p`` with the value wrapped in ``%...%``
Every other operator, including the declared ``neq``/``in``/``between``
family, is rejected as unsupported.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any

from fastmcp.utilities.logging import get_logger
from pydantic import ValidationError

from trino_graphql_mcp.schema_tools.constants import Constants
from trino_graphql_mcp.schema_tools.exceptions import (
    InvalidFilterError,
    UnsupportedOperatorError,
)
from trino_graphql_mcp.schema_tools.identifiers import restore
from trino_graphql_mcp.schema_tools.quoting import qualified_name, quote_identifier

from .models import FilterOperator, FilterPredicate, TranslatedQuery

_logger = get_logger(__name__)

TABLE_ALIAS = "t1"

_VALUE_FIELDS: tuple[str, ...] = (
    "string_value",
    "int_value",
    "float_value",
    "boolean_value",
    "date_value",
    "values",
)

_COMPARISONS: dict[FilterOperator, str] = {
    FilterOperator.EQ: "=",
    FilterOperator.LT: "<",
    FilterOperator.GT: ">",
    FilterOperator.LIKE: "LIKE",
}


def coerce_predicate(predicate: FilterPredicate | Mapping[str, Any]) -> FilterPredicate:
    """Accept a FilterPredicate or a raw ``FilterInput`` mapping.

    Raises:
        InvalidFilterError: If the mapping does not describe a filter
    """
    if isinstance(predicate, FilterPredicate):
        return predicate
    try:
        return FilterPredicate.model_validate(dict(predicate))
    except ValidationError as e:
        msg = f"Invalid filter: {dict(predicate)}: {e}"
        raise InvalidFilterError(msg) from e


def extract_value(predicate: FilterPredicate) -> Any:
    """Return the single populated value of a predicate.

    Date values are parsed into ``datetime.date`` so they bind as dates.

    Raises:
        InvalidFilterError: If zero or several value fields are populated
    """
    populated = [name for name in _VALUE_FIELDS if getattr(predicate, name) is not None]
    if len(populated) != 1:
        msg = (
            f"Invalid filter on '{predicate.field}': expected exactly one value, "
            f"got {len(populated)}"
        )
        raise InvalidFilterError(msg)

    name = populated[0]
    value = getattr(predicate, name)
    if name == "date_value":
        try:
            return date.fromisoformat(value)
        except ValueError as e:
            msg = f"Invalid filter on '{predicate.field}': dateValue '{value}' is not ISO 8601"
            raise InvalidFilterError(msg) from e
    return value


def resolve_operator(operator: str) -> FilterOperator:
    """Map operator text to a translatable FilterOperator.

    Matching is case-insensitive so both enum values (``gt``) and enum names
    (``GT``) are accepted.

    Raises:
        UnsupportedOperatorError: For unknown or untranslated operators
    """
    try:
        resolved = FilterOperator(operator.strip().lower())
    except ValueError as e:
        msg = f"Unsupported operator: {operator}"
        raise UnsupportedOperatorError(msg) from e
    if resolved not in _COMPARISONS:
        msg = f"Unsupported operator: {operator}"
        raise UnsupportedOperatorError(msg)
    return resolved


def translate(
    catalog: str,
    schema: str,
    table: str,
    limit: int | None,
    predicates: Sequence[FilterPredicate | Mapping[str, Any]] | None = None,
) -> TranslatedQuery:
    """Translate filters and a row cap into a bound query for one table.

    Args:
        catalog: Sanitized catalog name
        schema: Sanitized schema name
        table: Sanitized table name
        limit: Row cap; the default limit is used when None
        predicates: Filters conjoined with ``AND``

    Returns:
        Query text with named bind parameters and their values

    Raises:
        InvalidFilterError: If a predicate has no (or several) values, or limit is negative
        UnsupportedOperatorError: If a predicate uses an untranslated operator

    Example:
        >>> q = translate("hive", "sales", "orders", 10, [{"field": "age", "operator": "gt",
        ...                                                "intValue": 25}])
        >>> q.text
        'SELECT t1.* FROM "hive"."sales"."orders" t1 WHERE "age" > :p0 LIMIT 10'
        >>> q.params
        {'p0': 25}
    """
    row_limit = Constants.DEFAULT_ROW_LIMIT if limit is None else int(limit)
    if row_limit < 0:
        msg = f"Invalid limit: {limit}"
        raise InvalidFilterError(msg)

    source = qualified_name(restore(catalog), restore(schema), restore(table))
    sql = f"SELECT {TABLE_ALIAS}.* FROM {source} {TABLE_ALIAS}"

    conditions: list[str] = []
    params: dict[str, Any] = {}
    for index, raw in enumerate(predicates or ()):
        predicate = coerce_predicate(raw)
        value = extract_value(predicate)
        operator = resolve_operator(predicate.operator)
        if isinstance(value, list):
            msg = (
                f"Invalid filter on '{predicate.field}': "
                f"operator '{operator.value}' takes a single value"
            )
            raise InvalidFilterError(msg)

        param = f"p{index}"
        column = quote_identifier(restore(predicate.field))
        if operator is FilterOperator.LIKE:
            value = f"%{value}%"
        conditions.append(f"{column} {_COMPARISONS[operator]} :{param}")
        params[param] = value

    if conditions:
        sql += " WHERE " + " AND ".join(conditions)
    sql += f" LIMIT {row_limit}"

    _logger.info("%s", sql)
    return TranslatedQuery(text=sql, params=params)
