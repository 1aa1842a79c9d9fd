"""
Client models - prospective client attributes needed for matching.
"""
import json
from decimal import Decimal
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .preferences import ClientPropertyPreferences
from .property import coerce_number, require_identity


class ClientForMatching(BaseModel):
    """
    Client data needed for matching calculations.
    Read-only snapshot supplied by the caller for one matching run.
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    client_name: str = ""
    full_name: Optional[str] = None
    intent: Optional[str] = None
    purpose: Optional[str] = None
    budget_min: Optional[Union[Decimal, float]] = None
    budget_max: Optional[Union[Decimal, float]] = None

    # Array, JSON-encoded array or comma-separated string; resolved by
    # parse_areas_of_interest before scoring.
    areas_of_interest: Optional[Union[list[Any], str]] = None

    property_preferences: Optional[ClientPropertyPreferences] = None
    client_status: Optional[str] = None
    assigned_to: Optional[str] = None
    organization_id: Optional[str] = Field(default=None, alias="organizationId")

    @field_validator("id", mode="before")
    @classmethod
    def validate_id(cls, v: Any) -> str:
        return require_identity(v)

    @field_validator("budget_min", "budget_max", mode="before")
    @classmethod
    def parse_budget(cls, v: Any) -> Optional[Union[Decimal, float]]:
        return coerce_number(v)

    @field_validator("property_preferences", mode="before")
    @classmethod
    def parse_preferences(cls, v: Any) -> Any:
        """Decode JSON strings; anything that is not an object means no preferences."""
        if v is None:
            return None
        if isinstance(v, str):
            try:
                v = json.loads(v)
            except json.JSONDecodeError:
                return None
        if isinstance(v, (dict, ClientPropertyPreferences)):
            return v
        return None
