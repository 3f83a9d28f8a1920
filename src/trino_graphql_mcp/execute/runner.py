"""Execution flow for table queries.

This module provides a small, dependency-injected runner that:
- Translates structured filters into a bound query for one table
- Executes it through the metadata source's connection pool
- Re-sanitizes result column names so rows match the generated object type
- Returns a concise, typed result payload
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
import time
from typing import Any

from fastmcp.utilities.logging import get_logger
from sqlalchemy.exc import SQLAlchemyError

from trino_graphql_mcp.execute.models import FilterPredicate, QueryTableResult
from trino_graphql_mcp.execute.translator import translate
from trino_graphql_mcp.schema_tools.identifiers import sanitize
from trino_graphql_mcp.schema_tools.models import RootField
from trino_graphql_mcp.schema_tools.sources import MetadataSource

_logger = get_logger(__name__)


def sanitize_row_keys(rows: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Rewrite every row's column names through the identifier codec."""
    return [{sanitize(str(key)): value for key, value in row.items()} for row in rows]


def run_table_query(
    *,
    root: RootField,
    source: MetadataSource,
    limit: int | None,
    filters: Sequence[FilterPredicate | Mapping[str, Any]] | None,
    default_limit: int,
) -> QueryTableResult:
    """Query one generated table with filters and a row cap.

    Filter problems raise before anything is executed; engine failures are
    reported in the returned payload with ``status="error"``.

    Raises:
        InvalidFilterError: If a filter has no (or several) values
        UnsupportedOperatorError: If a filter uses an untranslated operator
    """
    row_limit = default_limit if limit is None else limit
    query = translate(root.catalog, root.schema, root.table, row_limit, filters)

    start = time.perf_counter()
    try:
        raw_rows = source.execute_query(query.text, query.params)
    except SQLAlchemyError as exc:
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        _logger.warning("Execution error on %s: %s", root.name, exc)
        return QueryTableResult(
            table=root.name,
            sql=query.text,
            row_limit=row_limit,
            elapsed_ms=elapsed_ms,
            status="error",
            execution_error=str(exc),
        )

    rows = sanitize_row_keys(raw_rows)
    elapsed_ms = (time.perf_counter() - start) * 1000.0
    _logger.info("%s: %d rows in %.1f ms", root.name, len(rows), elapsed_ms)
    return QueryTableResult(
        table=root.name,
        sql=query.text,
        row_limit=row_limit,
        rows=rows,
        rows_returned=len(rows),
        elapsed_ms=elapsed_ms,
    )
