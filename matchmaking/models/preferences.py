"""
Preferences models - the structured property preferences stored on a client.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ClientPropertyPreferences(BaseModel):
    """
    Structured preferences from the client's property_preferences JSON field.

    Every field is optional. ``None`` means the client expressed no preference
    for that criterion, which keeps the criterion out of the overall score.
    """
    model_config = ConfigDict(extra="ignore")

    # Room requirements
    bedrooms_min: Optional[float] = None
    bedrooms_max: Optional[float] = None
    bathrooms_min: Optional[float] = None
    bathrooms_max: Optional[float] = None

    # Size requirements
    size_min_sqm: Optional[float] = None
    size_max_sqm: Optional[float] = None

    # Floor preferences
    floor_min: Optional[float] = None
    floor_max: Optional[float] = None
    ground_floor_only: Optional[bool] = None

    # Hard requirements
    requires_elevator: Optional[bool] = None
    requires_parking: Optional[bool] = None
    requires_pet_friendly: Optional[bool] = None

    # Soft preferences
    furnished_preference: Optional[str] = Field(
        default=None,
        description="NO, PARTIALLY, FULLY or ANY"
    )
    heating_preferences: Optional[list[str]] = None
    energy_class_min: Optional[str] = None
    condition_preferences: Optional[list[str]] = None

    # Amenities
    amenities_required: Optional[list[str]] = Field(
        default=None,
        description="Must have these"
    )
    amenities_preferred: Optional[list[str]] = Field(
        default=None,
        description="Nice to have"
    )

    @field_validator(
        "bedrooms_min", "bedrooms_max", "bathrooms_min", "bathrooms_max",
        "size_min_sqm", "size_max_sqm", "floor_min", "floor_max",
        mode="before",
    )
    @classmethod
    def parse_bound(cls, v):
        """Unparseable numeric bounds count as no preference."""
        if v is None or v == "":
            return None
        if isinstance(v, bool):
            return None
        try:
            return float(v)
        except (ValueError, TypeError):
            return None

    @field_validator(
        "heating_preferences", "condition_preferences",
        "amenities_required", "amenities_preferred",
        mode="before",
    )
    @classmethod
    def parse_string_list(cls, v):
        """Accept a single string or a list, dropping non-string entries."""
        if v is None:
            return None
        if isinstance(v, str):
            return [v] if v.strip() else []
        if isinstance(v, (list, tuple, set)):
            return [item for item in v if isinstance(item, str) and item.strip()]
        return None
