"""Heuristic join detection over discovered catalog columns."""

from __future__ import annotations

from .joins import (
    GlobalJoinDetector,
    JoinBasis,
    JoinCandidate,
    JoinDetector,
    SameSchemaJoinDetector,
    create_join_detector,
    format_join_candidate,
    is_joinable,
    is_joinable_type,
    joinable_columns,
)
from .models import JoinCandidateItem, JoinDetectionResult

__all__ = [
    "GlobalJoinDetector",
    "JoinBasis",
    "JoinCandidate",
    "JoinCandidateItem",
    "JoinDetectionResult",
    "JoinDetector",
    "SameSchemaJoinDetector",
    "create_join_detector",
    "format_join_candidate",
    "is_joinable",
    "is_joinable_type",
    "joinable_columns",
]
