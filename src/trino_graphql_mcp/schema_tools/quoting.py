"""Identifier quoting for engine-native query text."""

from __future__ import annotations

from sqlglot import expressions as sgl_exp

DIALECT = "trino"


def quote_identifier(name: str) -> str:
    """Quote a raw identifier for embedding in Trino SQL.

    Colons are backslash-escaped because the statement is always wrapped in
    ``sqlalchemy.text``, which would otherwise read ``:name`` as a bind
    parameter.

    Example:
        >>> quote_identifier('order items')
        '"order items"'
    """
    quoted = sgl_exp.to_identifier(name, quoted=True).sql(dialect=DIALECT)
    return quoted.replace(":", "\\:")


def qualified_name(*parts: str) -> str:
    """Join quoted identifiers with dots, e.g. ``"hive"."sales"."orders"``."""
    return ".".join(quote_identifier(part) for part in parts)
