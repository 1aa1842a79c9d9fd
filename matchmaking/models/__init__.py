"""
Pydantic models for the matchmaking engine.
All data contracts are defined here for strict validation.
"""

from .preferences import ClientPropertyPreferences
from .client import ClientForMatching
from .property import PropertyForMatching
from .scoring import CriterionScore, MatchResult
from .filters import MatchFilters, MatchOptions
from .analytics import (
    ClientSummary,
    PropertySummary,
    PropertyWithMatchStats,
    MatchDistribution,
    TopMatch,
    MatchAnalytics,
    MatchSummaryStats,
)

__all__ = [
    # Inputs
    "ClientPropertyPreferences",
    "ClientForMatching",
    "PropertyForMatching",
    # Scoring
    "CriterionScore",
    "MatchResult",
    # Queries
    "MatchFilters",
    "MatchOptions",
    # Analytics
    "ClientSummary",
    "PropertySummary",
    "PropertyWithMatchStats",
    "MatchDistribution",
    "TopMatch",
    "MatchAnalytics",
    "MatchSummaryStats",
]
