"""
Analytics models - dashboard aggregates over many match results.
"""
from typing import Optional

from pydantic import BaseModel, Field

from .scoring import MatchResult


class ClientSummary(BaseModel):
    """Summary of a client for dashboard display."""
    id: str
    client_name: str = ""
    full_name: Optional[str] = None
    intent: Optional[str] = None
    budget_min: Optional[float] = None
    budget_max: Optional[float] = None
    client_status: Optional[str] = None
    best_match_score: Optional[int] = None
    match_count: Optional[int] = None


class PropertySummary(BaseModel):
    """Summary of a property for dashboard display."""
    id: str
    property_name: str = ""
    price: Optional[float] = None
    property_type: Optional[str] = None
    bedrooms: Optional[float] = None
    area: Optional[str] = None
    address_city: Optional[str] = None
    property_status: Optional[str] = None
    image_url: Optional[str] = None


class PropertyWithMatchStats(PropertySummary):
    """Property with interest statistics."""
    match_count: int = Field(default=0, description="Clients matching at or above threshold")
    average_match_score: int = Field(default=0, description="Average over those matches")
    top_match_score: int = Field(default=0, description="Highest individual match score")


class MatchDistribution(BaseModel):
    """
    Histogram bucket for overall scores.
    ``min`` is inclusive, ``max`` is exclusive except for the last bucket.
    """
    range: str
    min: int
    max: int
    count: int = 0


class TopMatch(BaseModel):
    """A match result with client and property details attached."""
    result: MatchResult
    client: ClientSummary
    property: PropertySummary


class MatchAnalytics(BaseModel):
    """Complete analytics data for the matchmaking dashboard."""
    top_matches: list[TopMatch] = Field(default_factory=list)
    match_distribution: list[MatchDistribution] = Field(default_factory=list)
    unmatched_clients: list[ClientSummary] = Field(default_factory=list)
    hot_properties: list[PropertyWithMatchStats] = Field(default_factory=list)

    total_clients: int = 0
    total_properties: int = 0
    total_matches: int = Field(default=0, description="Number of results rolled up")
    average_match_score: int = 0
    clients_with_matches: int = Field(
        default=0,
        description="Clients with at least one match at or above threshold"
    )
    threshold: float = 50.0


class MatchSummaryStats(BaseModel):
    """Quick stats for dashboard widgets."""
    total_clients: int
    total_properties: int
    matches_above_threshold: int
    matches_above_strong: int
    average_score: int
