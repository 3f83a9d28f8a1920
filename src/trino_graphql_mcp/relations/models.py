"""Response models for the detect_joins tool."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from .joins import JoinCandidate, format_join_candidate


class JoinCandidateItem(BaseModel):
    """One suggested join, flattened for transport."""

    left: str = Field(description="Fully qualified column, catalog.schema.table.column")
    left_type: str
    right: str = Field(description="Fully qualified column, catalog.schema.table.column")
    right_type: str
    basis: str = Field(description="exact_name, normalized_name or foreign_key_suffix")
    display: str = Field(description="Human-readable rendering of the candidate")

    @classmethod
    def from_candidate(cls, candidate: JoinCandidate) -> JoinCandidateItem:
        return cls(
            left=candidate.left.full_name,
            left_type=candidate.left.native_type,
            right=candidate.right.full_name,
            right_type=candidate.right.native_type,
            basis=candidate.basis.value,
            display=format_join_candidate(candidate),
        )


class JoinDetectionResult(BaseModel):
    """Structured response from the detect_joins tool."""

    catalog: str
    strategy: str = Field(description="same_schema or global")
    candidates: list[JoinCandidateItem] = Field(default_factory=list)
    cached: bool = Field(default=False, description="True when served from the metadata cache")

    def to_cache(self) -> list[dict[str, Any]]:
        return [item.model_dump() for item in self.candidates]

    @classmethod
    def from_cache(
        cls, catalog: str, strategy: str, items: list[dict[str, Any]]
    ) -> JoinDetectionResult:
        return cls(
            catalog=catalog,
            strategy=strategy,
            candidates=[JoinCandidateItem.model_validate(item) for item in items],
            cached=True,
        )
