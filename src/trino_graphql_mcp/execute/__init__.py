"""Table query package: filter translation and execution.

Exports typed models, the translator and the runner. The FastMCP
registration helper lives in ``execute.mcp_tools``.
"""

from __future__ import annotations

from .models import FilterOperator, FilterPredicate, QueryTableResult, TranslatedQuery
from .runner import run_table_query, sanitize_row_keys
from .translator import translate

__all__ = [
    "FilterOperator",
    "FilterPredicate",
    "QueryTableResult",
    "TranslatedQuery",
    "run_table_query",
    "sanitize_row_keys",
    "translate",
]
