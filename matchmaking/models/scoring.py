"""
Scoring models - per-criterion scores and pairwise match results.
"""
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from .enums import MatchCriterion


class CriterionScore(BaseModel):
    """
    Score for one matching criterion.

    ``weighted_score`` is ``score * normalized_weight``, where the normalized
    weights of all applicable criteria in a result sum to 1.
    """
    criterion: MatchCriterion
    weight: float = Field(default=0.0, ge=0, description="Configured weight")
    normalized_weight: float = Field(
        default=0.0,
        ge=0, le=1,
        description="Share of the weight among applicable criteria"
    )
    score: float = Field(ge=0, le=100)
    weighted_score: float = Field(default=0.0, ge=0, le=100)
    matched: bool = False
    applicable: bool = Field(
        default=True,
        description="False when the client expressed no preference"
    )
    reason: Optional[str] = Field(default=None, description="Human-readable explanation")


class MatchResult(BaseModel):
    """Complete match result between a client and a property."""
    client_id: str
    property_id: str
    overall_score: int = Field(ge=0, le=100, description="0-100 percentage")
    breakdown: list[CriterionScore] = Field(default_factory=list)
    matched_criteria: int = Field(default=0, description="Applicable criteria that matched")
    total_criteria: int = Field(default=0, description="Applicable criteria evaluated")
    calculated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def get_criterion(self, criterion: str) -> Optional[CriterionScore]:
        """Get the breakdown row for a criterion."""
        for row in self.breakdown:
            if row.criterion == criterion:
                return row
        return None

    @property
    def applicable_breakdown(self) -> list[CriterionScore]:
        return [row for row in self.breakdown if row.applicable]
