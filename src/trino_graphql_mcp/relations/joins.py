"""Heuristic join candidate detection.

Candidates are inferred from column naming conventions only; they are
suggestions and are never validated against foreign-key constraints.

Two strategies share one contract:
- GlobalJoinDetector groups columns by name across the whole catalog
- SameSchemaJoinDetector groups columns by name within each schema (default)

Both report ``<table>_id`` columns that point at an ``id`` column of a table
named after the prefix (singular or with a trailing ``s``), and pairs of
same-named columns that pass :func:`is_joinable`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
import re

from fastmcp.utilities.logging import get_logger

from trino_graphql_mcp.schema_tools.constants import Constants, JoinStrategy
from trino_graphql_mcp.schema_tools.models import ColumnMetadata
from trino_graphql_mcp.schema_tools.reflection import MetadataWalker

_logger = get_logger(__name__)

ID_SUFFIX = "_id"
_TYPE_BASE_SPLIT = re.compile(r"[\s(]")


class JoinBasis(Enum):
    """Naming heuristic that produced a candidate."""

    EXACT_NAME = "exact_name"
    NORMALIZED_NAME = "normalized_name"
    FOREIGN_KEY_SUFFIX = "foreign_key_suffix"


@dataclass(frozen=True)
class JoinCandidate:
    """Two columns that are likely joinable."""

    left: ColumnMetadata
    right: ColumnMetadata
    basis: JoinBasis

    def to_dict(self) -> dict[str, object]:
        return {
            "left": self.left.to_dict(),
            "right": self.right.to_dict(),
            "basis": self.basis.value,
        }


def normalize_column_name(name: str) -> str:
    """Strip underscores and lowercase, e.g. ``Dept_Id`` -> ``deptid``."""
    return name.replace("_", "").lower()


def is_joinable(column1: str, column2: str) -> JoinBasis | None:
    """Decide whether two column names look joinable.

    Returns:
        The matching basis, or None when the names are unrelated
    """
    if column1.lower() == column2.lower():
        return JoinBasis.EXACT_NAME
    if normalize_column_name(column1) == normalize_column_name(column2):
        return JoinBasis.NORMALIZED_NAME
    if column1.endswith(ID_SUFFIX) and column2.endswith(ID_SUFFIX):
        prefix1 = column1[: -len(ID_SUFFIX)]
        prefix2 = column2[: -len(ID_SUFFIX)]
        if prefix1.lower() == prefix2.lower():
            return JoinBasis.NORMALIZED_NAME
    return None


def is_joinable_type(native_type: str) -> bool:
    """Return False for temporal, boolean, semi-structured, fractional and varchar types."""
    normalized = native_type.strip().lower()
    if normalized.startswith(Constants.NON_JOINABLE_TYPE_PREFIXES):
        return False
    base = _TYPE_BASE_SPLIT.split(normalized, maxsplit=1)[0]
    return (
        normalized not in Constants.NON_JOINABLE_TYPES
        and base not in Constants.NON_JOINABLE_TYPES
    )


def joinable_columns(columns: Iterable[ColumnMetadata]) -> list[ColumnMetadata]:
    """Drop system-schema columns and columns of non-joinable types."""
    return [
        column
        for column in columns
        if column.schema.lower() not in Constants.SYSTEM_SCHEMAS
        and is_joinable_type(column.native_type)
    ]


def format_join_candidate(candidate: JoinCandidate) -> str:
    """Render a candidate as one human-readable line."""
    arrow = "→" if candidate.basis is JoinBasis.FOREIGN_KEY_SUFFIX else "↔"

    def label(column: ColumnMetadata) -> str:
        return f"{column.full_name} ({column.native_type})"

    return f"{label(candidate.left)} {arrow} {label(candidate.right)}"


def _sort_key(candidate: JoinCandidate) -> tuple[str, str, str]:
    return (candidate.left.full_name, candidate.right.full_name, candidate.basis.value)


class JoinDetector(ABC):
    """Base class for join detection strategies.

    Attributes:
        walker: Metadata walker providing the catalog's column listing
    """

    strategy: JoinStrategy

    def __init__(self, walker: MetadataWalker) -> None:
        self.walker = walker

    def detect(self, catalog: str) -> list[JoinCandidate]:
        """Detect join candidates in ``catalog``.

        Returns:
            Candidates ordered by left column, right column and basis
        """
        columns = joinable_columns(self.walker.list_catalog_columns(catalog))
        _logger.info(
            "Detecting joins for catalog %s (%s, %d columns)",
            catalog,
            self.strategy.value,
            len(columns),
        )
        candidates = self.detect_in_columns(columns)
        _logger.info("Found %d join candidates in %s", len(candidates), catalog)
        return candidates

    def detect_in_columns(self, columns: Sequence[ColumnMetadata]) -> list[JoinCandidate]:
        """Run the strategy over an already filtered column list."""
        found: set[JoinCandidate] = set()
        for group in self.group(columns):
            found.update(self._foreign_key_candidates(group))
            found.update(self._shared_name_candidates(group))
        return sorted(found, key=_sort_key)

    @abstractmethod
    def group(self, columns: Sequence[ColumnMetadata]) -> list[list[ColumnMetadata]]:
        """Split columns into the scopes within which joins are searched."""

    # ---- heuristics ----------------------------------------------------
    @staticmethod
    def _foreign_key_candidates(columns: Sequence[ColumnMetadata]) -> list[JoinCandidate]:
        id_columns: dict[str, list[ColumnMetadata]] = defaultdict(list)
        for column in columns:
            if column.column.lower() == "id":
                id_columns[column.table.lower()].append(column)

        candidates: list[JoinCandidate] = []
        for column in columns:
            if not column.column.lower().endswith(ID_SUFFIX):
                continue
            ref_name = column.column[: -len(ID_SUFFIX)].lower()
            if not ref_name:
                continue
            for table_name in (ref_name, f"{ref_name}s"):
                for target in id_columns.get(table_name, []):
                    candidates.append(
                        JoinCandidate(column, target, JoinBasis.FOREIGN_KEY_SUFFIX)
                    )
        return candidates

    @staticmethod
    def _shared_name_candidates(columns: Sequence[ColumnMetadata]) -> list[JoinCandidate]:
        by_name: dict[str, list[ColumnMetadata]] = defaultdict(list)
        for column in columns:
            by_name[column.column].append(column)

        candidates: list[JoinCandidate] = []
        for same_named in by_name.values():
            if len(same_named) < 2:
                continue
            for i, first in enumerate(same_named):
                for second in same_named[i + 1 :]:
                    basis = is_joinable(first.column, second.column)
                    if basis is not None:
                        candidates.append(JoinCandidate(first, second, basis))
        return candidates


class GlobalJoinDetector(JoinDetector):
    """Search join candidates across every schema of the catalog."""

    strategy = JoinStrategy.GLOBAL

    def group(self, columns: Sequence[ColumnMetadata]) -> list[list[ColumnMetadata]]:
        return [list(columns)]


class SameSchemaJoinDetector(JoinDetector):
    """Search join candidates only between tables of the same schema."""

    strategy = JoinStrategy.SAME_SCHEMA

    def group(self, columns: Sequence[ColumnMetadata]) -> list[list[ColumnMetadata]]:
        by_schema: dict[str, list[ColumnMetadata]] = defaultdict(list)
        for column in columns:
            by_schema[column.schema].append(column)
        return [by_schema[schema] for schema in sorted(by_schema)]


def create_join_detector(strategy: JoinStrategy, walker: MetadataWalker) -> JoinDetector:
    """Return the detector implementing ``strategy``."""
    if strategy is JoinStrategy.GLOBAL:
        return GlobalJoinDetector(walker)
    return SameSchemaJoinDetector(walker)
