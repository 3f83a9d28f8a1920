"""Models for table queries with structured filters.

Provides the filter predicate accepted from clients, the bound query produced
by the translator and the result payload returned to the transport.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class FilterOperator(Enum):
    """Filter operations declared by the ``FilterOperator`` API enum."""

    EQ = "eq"  # Equal to (=)
    NEQ = "neq"  # Not equal to (!= or <>)
    GT = "gt"  # Greater than (>)
    GTE = "gte"  # Greater than or equal (>=)
    LT = "lt"  # Less than (<)
    LTE = "lte"  # Less than or equal (<=)
    LIKE = "like"  # String match (LIKE)
    NOT_LIKE = "not_like"  # Not string match (NOT LIKE)
    IN = "in"  # In list (IN)
    NOT_IN = "not_in"  # Not in list (NOT IN)
    IS_NULL = "is_null"  # Is NULL
    IS_NOT_NULL = "is_not_null"  # Is NOT NULL
    BETWEEN = "between"  # Between values
    NOT_BETWEEN = "not_between"  # Not between values


OPERATOR_DESCRIPTIONS: dict[FilterOperator, str] = {
    FilterOperator.EQ: "Equal to (=)",
    FilterOperator.NEQ: "Not equal to (!= or <>)",
    FilterOperator.GT: "Greater than (>)",
    FilterOperator.GTE: "Greater than or equal (>=)",
    FilterOperator.LT: "Less than (<)",
    FilterOperator.LTE: "Less than or equal (<=)",
    FilterOperator.LIKE: "String match (LIKE)",
    FilterOperator.NOT_LIKE: "Not string match (NOT LIKE)",
    FilterOperator.IN: "In list (IN)",
    FilterOperator.NOT_IN: "Not in list (NOT IN)",
    FilterOperator.IS_NULL: "Is NULL",
    FilterOperator.IS_NOT_NULL: "Is NOT NULL",
    FilterOperator.BETWEEN: "Between values",
    FilterOperator.NOT_BETWEEN: "Not between values",
}


class FilterPredicate(BaseModel):
    """One client-supplied filter condition.

    Exactly one of the value fields must be set. ``operator`` is kept as
    free text so that unknown operators surface as an unsupported-operator
    error from the translator rather than a validation error.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    field: str = Field(description="Column name (sanitized form as exposed by the schema)")
    operator: str = Field(description="Filter operation, e.g. 'eq', 'gt', 'like'")
    string_value: str | None = Field(default=None, alias="stringValue")
    int_value: int | None = Field(default=None, alias="intValue")
    float_value: float | None = Field(default=None, alias="floatValue")
    boolean_value: bool | None = Field(default=None, alias="booleanValue")
    date_value: str | None = Field(default=None, alias="dateValue", description="ISO 8601 date")
    values: list[str] | None = Field(
        default=None, description="List of values for IN, BETWEEN, etc."
    )


@dataclass(frozen=True)
class TranslatedQuery:
    """Engine-native query text with its bound parameters."""

    text: str
    params: dict[str, Any] = field(default_factory=dict)


class QueryTableResult(BaseModel):
    """Structured response from the query_table tool."""

    table: str = Field(description="Root field name of the queried table")
    sql: str = Field(description="Executed query text; values are bound, not inlined")
    row_limit: int = Field(description="Row cap applied to the query")
    rows: list[dict[str, Any]] = Field(
        default_factory=list, description="Result rows keyed by sanitized column names"
    )
    rows_returned: int = 0
    elapsed_ms: float = 0.0
    timestamp: str = Field(
        default_factory=lambda: datetime.now(UTC).isoformat(),
        description="UTC ISO8601 timestamp of completion",
    )
    status: Literal["ok", "error"] = Field(default="ok", description="Overall status of the call")
    execution_error: str | None = Field(
        default=None, description="Optional execution error message"
    )
