"""
Property models - listing attributes needed for matching.
"""
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


def coerce_number(v: Any) -> Optional[Union[Decimal, float]]:
    """
    Lenient numeric coercion for record fields.

    Numbers and Decimals pass through, numeric strings become Decimal,
    anything else becomes None instead of failing validation.
    """
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float, Decimal)):
        return v
    if isinstance(v, str):
        cleaned = v.strip().replace(" ", "").replace(",", "")
        if not cleaned:
            return None
        try:
            return Decimal(cleaned)
        except InvalidOperation:
            return None
    return None


def require_identity(v: Any) -> str:
    """Ids are opaque strings but must be present and non-blank."""
    if v is None:
        raise ValueError("record id is required")
    text = str(v).strip()
    if not text:
        raise ValueError("record id must not be blank")
    return text


class PropertyForMatching(BaseModel):
    """
    Property data needed for matching calculations.
    Read-only snapshot supplied by the caller for one matching run.
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    property_name: str = ""
    price: Optional[Union[Decimal, float]] = None
    property_type: Optional[str] = None
    transaction_type: Optional[str] = None
    property_status: Optional[str] = None

    # Location, most specific first
    area: Optional[str] = None
    address_city: Optional[str] = None
    address_state: Optional[str] = None
    municipality: Optional[str] = None

    # Rooms
    bedrooms: Optional[float] = None
    bathrooms: Optional[float] = None

    # Size
    size_net_sqm: Optional[Union[Decimal, float]] = None
    size_gross_sqm: Optional[Union[Decimal, float]] = None
    square_feet: Optional[Union[Decimal, float]] = None

    # Features
    floor: Optional[str] = None
    elevator: Optional[bool] = None
    accepts_pets: Optional[bool] = None
    furnished: Optional[str] = None
    heating_type: Optional[str] = None
    energy_cert_class: Optional[str] = None
    condition: Optional[str] = None

    # Either ["pool", "gym"] or {"pool": true, "gym": false}
    amenities: Optional[Union[dict[str, Any], list[Any]]] = None

    # Meta
    assigned_to: Optional[str] = None
    organization_id: Optional[str] = Field(default=None, alias="organizationId")
    image_url: Optional[str] = Field(default=None, alias="imageUrl")

    @field_validator("id", mode="before")
    @classmethod
    def validate_id(cls, v: Any) -> str:
        return require_identity(v)

    @field_validator(
        "price", "size_net_sqm", "size_gross_sqm", "square_feet",
        "bedrooms", "bathrooms",
        mode="before",
    )
    @classmethod
    def parse_number(cls, v: Any) -> Optional[Union[Decimal, float]]:
        return coerce_number(v)

    @field_validator("floor", mode="before")
    @classmethod
    def parse_floor_text(cls, v: Any) -> Optional[str]:
        """Floors arrive as text or as bare numbers."""
        if v is None or isinstance(v, bool):
            return None
        return str(v)

    @field_validator("elevator", "accepts_pets", mode="before")
    @classmethod
    def parse_flag(cls, v: Any) -> Optional[bool]:
        if v is None or isinstance(v, bool):
            return v
        if isinstance(v, str):
            lowered = v.strip().lower()
            if lowered in ("true", "yes", "1", "ναι"):
                return True
            if lowered in ("false", "no", "0", "οχι", "όχι"):
                return False
            return None
        if isinstance(v, (int, float)):
            return bool(v)
        return None
