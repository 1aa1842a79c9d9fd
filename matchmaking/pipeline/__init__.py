"""Pipeline modules for matchmaking."""

from .calculator import MatchCalculator, calculate_match_score, calculate_batch_matches
from .analytics import AnalyticsBuilder, build_match_analytics
from .orchestrator import run_match_analytics, get_match_summary_stats

__all__ = [
    "MatchCalculator",
    "calculate_match_score",
    "calculate_batch_matches",
    "AnalyticsBuilder",
    "build_match_analytics",
    "run_match_analytics",
    "get_match_summary_stats",
]
