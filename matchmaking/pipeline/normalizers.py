"""
Normalizers - turn loosely-typed client/property fields into comparable values.

Nothing in here raises on malformed data: unparseable values become None
and unknown enum spellings pass through unchanged.
"""
import json
import logging
import math
import re
import unicodedata
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

from ..models.client import ClientForMatching
from ..models.preferences import ClientPropertyPreferences
from ..models.property import PropertyForMatching


logger = logging.getLogger(__name__)

SQFT_TO_SQM = 0.092903


# ============================================
# NUMBERS
# ============================================

def to_number(value: Any) -> Optional[float]:
    """
    Convert a Decimal, number or numeric string to float.

    Returns None for None, booleans, NaN and anything unparseable.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, Decimal):
        try:
            number = float(value)
        except (ValueError, OverflowError):
            return None
    elif isinstance(value, str):
        cleaned = value.strip().replace(" ", "").replace(",", "")
        if not cleaned:
            return None
        try:
            number = float(Decimal(cleaned))
        except (InvalidOperation, ValueError, OverflowError):
            return None
    else:
        return None

    if math.isnan(number) or math.isinf(number):
        return None
    return number


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up, so 62.5 -> 63."""
    # Float noise is trimmed first: 62.49999999999999 counts as a half
    text = repr(round(float(value), 6))
    return int(Decimal(text).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


# Keys are accent-free lowercase
FLOOR_NAMES: dict[str, float] = {
    "ground": 0,
    "ground floor": 0,
    "ισογειο": 0,
    "basement": -1,
    "υπογειο": -1,
    "penthouse": 99,
    "ρετιρε": 99,
    "mezzanine": 0.5,
    "ημιωροφος": 0.5,
    "ημιοροφος": 0.5,
}

_NUMBER_RE = re.compile(r"^[+-]?\d+(\.\d+)?$")


def parse_floor(floor: Any) -> Optional[float]:
    """
    Parse a floor label to a number.

    Handles "1", "-1", "0.5", "Ground", "Ισόγειο", "Basement", "Penthouse",
    "Mezzanine" and the Greek equivalents, ignoring case and accents.
    Anything else yields None, never 0.
    """
    if floor is None or isinstance(floor, bool):
        return None
    if isinstance(floor, (int, float)):
        return float(floor)

    normalized = _strip_accents(str(floor).strip().lower())
    if not normalized:
        return None

    if normalized in FLOOR_NAMES:
        return float(FLOOR_NAMES[normalized])

    if _NUMBER_RE.match(normalized):
        return float(normalized)
    return None


# ============================================
# PREFERENCES
# ============================================

def extract_preferences(client: ClientForMatching) -> ClientPropertyPreferences:
    """Get the client's structured preferences, empty when none were stored."""
    return client.property_preferences or ClientPropertyPreferences()


def get_bedroom_range(prefs: ClientPropertyPreferences) -> tuple[Optional[float], Optional[float]]:
    return prefs.bedrooms_min, prefs.bedrooms_max


def get_bathroom_range(prefs: ClientPropertyPreferences) -> tuple[Optional[float], Optional[float]]:
    return prefs.bathrooms_min, prefs.bathrooms_max


def get_size_range(prefs: ClientPropertyPreferences) -> tuple[Optional[float], Optional[float]]:
    return prefs.size_min_sqm, prefs.size_max_sqm


def get_floor_range(
    prefs: ClientPropertyPreferences,
) -> tuple[Optional[float], Optional[float], bool]:
    """Returns (min, max, ground_only)."""
    return prefs.floor_min, prefs.floor_max, bool(prefs.ground_floor_only)


# ============================================
# LOCATION
# ============================================

_LOCATION_PREFIX_RE = re.compile(r"^(city of|municipality of|δημος|νομος)\b\s*")
_LOCATION_SUFFIX_RE = re.compile(r"\s*\b(city|municipality|δημος)$")


def normalize_location(location: Any) -> str:
    """
    Normalize a location string for comparison.

    Lowercases, trims, strips accents and drops location-type words such as
    "city of" or "δήμος" from either end. Applying it twice gives the same
    result as applying it once.
    """
    if not location or not isinstance(location, str):
        return ""

    text = _strip_accents(location.lower().strip())
    text = " ".join(text.split())

    # Repeat until stable so "Δήμος Αθηναίων Δήμος" is fully stripped in one call
    previous = None
    while previous != text:
        previous = text
        text = _LOCATION_PREFIX_RE.sub("", text)
        text = _LOCATION_SUFFIX_RE.sub("", text)
        text = text.strip()
    return text


def get_property_locations(property: PropertyForMatching) -> list[str]:
    """All normalized, de-duplicated location identifiers of a property."""
    locations = []
    for raw in (property.area, property.address_city, property.municipality, property.address_state):
        normalized = normalize_location(raw)
        if normalized and normalized not in locations:
            locations.append(normalized)
    return locations


def _normalize_area_list(items: list[Any]) -> list[str]:
    result = []
    for item in items:
        normalized = normalize_location(item) if isinstance(item, str) else ""
        if normalized and normalized not in result:
            result.append(normalized)
    return result


def parse_areas_of_interest(areas: Any) -> list[str]:
    """
    Resolve a client's areas of interest to a list of normalized locations.

    Accepts an array, a JSON-encoded array, or a comma-separated string.
    Malformed JSON falls back to the comma split.
    """
    if not areas:
        return []

    if isinstance(areas, (list, tuple)):
        return _normalize_area_list(list(areas))

    if isinstance(areas, str):
        text = areas.strip()
        if text.startswith("[") or text.startswith('"'):
            try:
                parsed = json.loads(text)
            except json.JSONDecodeError:
                logger.debug(f"areas_of_interest is not valid JSON, splitting on commas: {text!r}")
            else:
                if isinstance(parsed, list):
                    return _normalize_area_list(parsed)
                if isinstance(parsed, str):
                    return _normalize_area_list(parsed.split(","))
                return []
        return _normalize_area_list(text.split(","))

    return []


# ============================================
# AMENITIES
# ============================================

PARKING_AMENITIES = frozenset({"parking", "garage", "parking_space"})

_TRUTHY_AMENITY_VALUES = frozenset({"true", "yes", "1", "present"})

_AMENITY_SEPARATOR_RE = re.compile(r"[\s-]+")
_AMENITY_INVALID_RE = re.compile(r"[^a-z0-9_]")


def normalize_amenity_key(key: str) -> str:
    """'Swimming Pool', 'swimming-pool' and 'SWIMMING_POOL' all become 'swimming_pool'."""
    text = key.lower().strip()
    text = _AMENITY_SEPARATOR_RE.sub("_", text)
    return _AMENITY_INVALID_RE.sub("", text)


def _amenity_present(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value > 0
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY_AMENITY_VALUES
    return False


def extract_property_amenities(amenities: Any) -> set[str]:
    """
    Extract amenities as a set of normalized keys.

    Accepts ["pool", "gym"] or {"pool": true, "gym": false}; only present
    amenities are returned.
    """
    result: set[str] = set()
    if not amenities:
        return result

    if isinstance(amenities, (list, tuple, set)):
        for name in amenities:
            if isinstance(name, str):
                key = normalize_amenity_key(name)
                if key:
                    result.add(key)
        return result

    if isinstance(amenities, dict):
        for name, value in amenities.items():
            if isinstance(name, str) and _amenity_present(value):
                key = normalize_amenity_key(name)
                if key:
                    result.add(key)
    return result


def parse_amenity_preferences(
    required: Optional[list[str]],
    preferred: Optional[list[str]],
) -> tuple[set[str], set[str]]:
    """Returns (required, preferred) as sets of normalized keys."""
    required_keys = {normalize_amenity_key(a) for a in (required or [])}
    preferred_keys = {normalize_amenity_key(a) for a in (preferred or [])}
    required_keys.discard("")
    preferred_keys.discard("")
    # A required amenity is not also counted as a bonus
    return required_keys, preferred_keys - required_keys


# ============================================
# SIZE
# ============================================

def get_property_size_sqm(property: PropertyForMatching) -> Optional[float]:
    """
    Property size in square meters.
    Tries net size, then gross size, then converts square feet.
    """
    net = to_number(property.size_net_sqm)
    if net:
        return net

    gross = to_number(property.size_gross_sqm)
    if gross:
        return gross

    square_feet = to_number(property.square_feet)
    if square_feet:
        return round(square_feet * SQFT_TO_SQM, 2)

    return None


# ============================================
# BUDGET
# ============================================

def get_budget_range(client: ClientForMatching) -> tuple[Optional[float], Optional[float]]:
    """Returns (budget_min, budget_max) as numbers."""
    return to_number(client.budget_min), to_number(client.budget_max)


def is_price_in_budget(
    price: Optional[float],
    budget_min: Optional[float],
    budget_max: Optional[float],
    tolerance_percent: float = 0,
) -> bool:
    """
    Check whether a price falls within budget.

    The tolerance widens both bounds by the same percentage, so 5% on a max
    of 300000 allows up to 315000 and 5% on a min of 200000 allows down to
    190000. Without any bounds every price is in budget.
    """
    if price is None:
        return False

    if budget_min is None and budget_max is None:
        return True

    tolerance = tolerance_percent / 100

    if budget_min is not None and price < budget_min * (1 - tolerance):
        return False

    if budget_max is not None and price > budget_max * (1 + tolerance):
        return False

    return True


# ============================================
# ENUMS
# ============================================

FURNISHED_MAPPINGS: dict[str, str] = {
    "NO": "NO",
    "UNFURNISHED": "NO",
    "NONE": "NO",
    "PARTIALLY": "PARTIALLY",
    "PARTIAL": "PARTIALLY",
    "SEMI": "PARTIALLY",
    "SEMI_FURNISHED": "PARTIALLY",
    "PARTIALLY_FURNISHED": "PARTIALLY",
    "FULLY": "FULLY",
    "FULL": "FULLY",
    "YES": "FULLY",
    "FURNISHED": "FULLY",
    "FULLY_FURNISHED": "FULLY",
    "ANY": "ANY",
}

HEATING_MAPPINGS: dict[str, str] = {
    "AUTONOMOUS": "AUTONOMOUS",
    "INDIVIDUAL": "AUTONOMOUS",
    "CENTRAL": "CENTRAL",
    "COMMUNAL": "CENTRAL",
    "NATURAL_GAS": "NATURAL_GAS",
    "GAS": "NATURAL_GAS",
    "HEAT_PUMP": "HEAT_PUMP",
    "HEATPUMP": "HEAT_PUMP",
    "ELECTRIC": "ELECTRIC",
    "ELECTRICAL": "ELECTRIC",
    "NONE": "NONE",
    "NO": "NONE",
}

CONDITION_MAPPINGS: dict[str, str] = {
    "EXCELLENT": "EXCELLENT",
    "NEW": "EXCELLENT",
    "VERY_GOOD": "VERY_GOOD",
    "VERYGOOD": "VERY_GOOD",
    "GOOD": "GOOD",
    "AVERAGE": "GOOD",
    "NEEDS_RENOVATION": "NEEDS_RENOVATION",
    "NEEDSRENOVATION": "NEEDS_RENOVATION",
    "RENOVATE": "NEEDS_RENOVATION",
    "FIXER": "NEEDS_RENOVATION",
}

ENERGY_CLASS_MAPPINGS: dict[str, str] = {
    "A_PLUS": "A_PLUS",
    "APLUS": "A_PLUS",
    "A": "A",
    "B": "B",
    "C": "C",
    "D": "D",
    "E": "E",
    "F": "F",
    "G": "G",
    "H": "H",
    "IN_PROGRESS": "IN_PROGRESS",
    "INPROGRESS": "IN_PROGRESS",
    "PENDING": "IN_PROGRESS",
}

_ENUM_SEPARATOR_RE = re.compile(r"[\s_-]+")


def _enum_key(value: str) -> str:
    return _ENUM_SEPARATOR_RE.sub("_", value.strip().upper()).strip("_")


def _normalize_enum(value: Any, mappings: dict[str, str]) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    if not value.strip():
        return None
    return mappings.get(_enum_key(value), value)


def normalize_furnished(value: Any) -> Optional[str]:
    return _normalize_enum(value, FURNISHED_MAPPINGS)


def normalize_heating(value: Any) -> Optional[str]:
    return _normalize_enum(value, HEATING_MAPPINGS)


def normalize_condition(value: Any) -> Optional[str]:
    return _normalize_enum(value, CONDITION_MAPPINGS)


def normalize_energy_class(value: Any) -> Optional[str]:
    """'A+', 'a plus' and 'A_PLUS' all map to A_PLUS."""
    if value is None:
        return None
    text = str(value)
    if not text.strip():
        return None
    key = _enum_key(text.replace("+", "_PLUS"))
    return ENERGY_CLASS_MAPPINGS.get(key, value)
