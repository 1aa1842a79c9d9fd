"""
Configuration and environment handling for the matchmaking engine.
"""
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables
load_dotenv()


def _env_list(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip().upper() for item in raw.split(",") if item.strip()]


class ThresholdConfig(BaseModel):
    """Score thresholds used by analytics and summaries."""
    match_threshold: float = Field(
        default_factory=lambda: float(os.getenv("MATCHMAKING_MATCH_THRESHOLD", "50")),
        ge=0, le=100,
        description="A pair at or above this score counts as a match"
    )
    strong_threshold: float = Field(
        default_factory=lambda: float(os.getenv("MATCHMAKING_STRONG_THRESHOLD", "80")),
        ge=0, le=100,
        description="A pair at or above this score counts as a strong match"
    )


class ScoringConfig(BaseModel):
    """Match calculation configuration."""
    weights_override: Optional[dict[str, float]] = Field(
        default=None,
        description="Override default criterion weights"
    )
    no_preference_score: float = Field(
        default_factory=lambda: float(os.getenv("MATCHMAKING_NO_PREFERENCE_SCORE", "50")),
        ge=0, le=100,
        description="Overall score when no criterion is applicable"
    )
    budget_tolerance_percent: float = Field(
        default_factory=lambda: float(os.getenv("MATCHMAKING_BUDGET_TOLERANCE", "0")),
        ge=0,
        description="Symmetric tolerance before a price counts as out of budget"
    )

    @field_validator("weights_override")
    @classmethod
    def check_weights(cls, v: Optional[dict[str, float]]) -> Optional[dict[str, float]]:
        if v is None:
            return v
        for criterion, weight in v.items():
            if weight < 0:
                raise ValueError(f"weight for {criterion} must not be negative")
        return v


class AnalyticsConfig(BaseModel):
    """Dashboard rollup limits."""
    top_matches_limit: int = Field(default=20, ge=0)
    unmatched_clients_limit: int = Field(default=10, ge=0)
    hot_properties_limit: int = Field(default=10, ge=0)


class ScopeConfig(BaseModel):
    """Which records take part in a dashboard run."""
    client_statuses: list[str] = Field(
        default_factory=lambda: _env_list("MATCHMAKING_CLIENT_STATUSES", "LEAD,ACTIVE")
    )
    property_statuses: list[str] = Field(
        default_factory=lambda: _env_list("MATCHMAKING_PROPERTY_STATUSES", "ACTIVE,PENDING")
    )
    same_organization_only: bool = Field(default=True)


class Config(BaseModel):
    """Main configuration."""
    thresholds: ThresholdConfig = Field(default_factory=ThresholdConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)
    scope: ScopeConfig = Field(default_factory=ScopeConfig)


# Singleton config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the singleton config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Drop the singleton so the next get_config() re-reads the environment."""
    global _config
    _config = None
