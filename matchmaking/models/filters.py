"""
Filter and option models for match queries.
"""
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class MatchFilters(BaseModel):
    """Filters applied to a matching run."""
    min_score: Optional[float] = Field(
        default=None,
        ge=0, le=100,
        description="Drop results below this overall score"
    )
    client_statuses: Optional[list[str]] = None
    property_statuses: Optional[list[str]] = None
    assigned_to_user_id: Optional[str] = Field(
        default=None,
        description="Keep pairs where the client or the property is assigned to this user"
    )
    property_types: Optional[list[str]] = None
    intents: Optional[list[str]] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None


class MatchOptions(BaseModel):
    """Paging and sorting for match lists."""
    limit: Optional[int] = Field(default=None, ge=0)
    offset: int = Field(default=0, ge=0)
    sort_by: Literal["score", "date", "price", "name"] = "score"
    sort_order: Literal["asc", "desc"] = "desc"
    include_breakdown: bool = True
    min_score_threshold: Optional[float] = Field(default=None, ge=0, le=100)
