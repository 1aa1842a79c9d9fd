"""
Criterion scorers - one pure function per matching criterion.

Every scorer takes (client, prefs, property) and returns a CriterionScore
with a 0-100 score. When the client expressed no preference, or the
criterion does not apply to this kind of property, the score is returned
with ``applicable=False`` and is left out of the overall score.

Weights are filled in by the calculator.
"""
from typing import Callable, Optional

from ..models.client import ClientForMatching
from ..models.preferences import ClientPropertyPreferences
from ..models.property import PropertyForMatching
from ..models.scoring import CriterionScore
from .normalizers import (
    PARKING_AMENITIES,
    extract_property_amenities,
    get_bathroom_range,
    get_bedroom_range,
    get_budget_range,
    get_floor_range,
    get_property_locations,
    get_property_size_sqm,
    get_size_range,
    is_price_in_budget,
    normalize_condition,
    normalize_energy_class,
    normalize_furnished,
    normalize_heating,
    parse_amenity_preferences,
    parse_areas_of_interest,
    parse_floor,
    to_number,
)
from .weights import (
    AMENITIES_SCORING,
    BEDROOMS_SCORING,
    BUDGET_SCORING,
    BUILDING_CRITERIA,
    FLOOR_SCORING,
    INTENT_TO_TRANSACTION,
    INTENTS_WITHOUT_TRANSACTION,
    LOCATION_SCORING,
    NON_BUILDING_TYPES,
    PURPOSE_TO_PROPERTY_TYPE,
    SALE_TRANSACTIONS,
    SIZE_SCORING,
    SOFT_MISMATCH_SCORING,
    UNKNOWN_SCORE,
    condition_rank,
    energy_class_rank,
    meets_energy_requirement,
)


Scorer = Callable[[ClientForMatching, ClientPropertyPreferences, PropertyForMatching], CriterionScore]


# ============================================
# HELPERS
# ============================================

def create_score(
    criterion: str,
    score: float,
    reason: str,
    matched: bool = False,
) -> CriterionScore:
    """Build an applicable criterion score, clamped to 0-100. Only the caller decides `matched`."""
    score = round(max(0.0, min(100.0, score)), 2)
    return CriterionScore(
        criterion=criterion,
        score=score,
        matched=matched,
        applicable=True,
        reason=reason,
    )


def not_applicable(criterion: str, reason: str) -> CriterionScore:
    return CriterionScore(
        criterion=criterion,
        score=0,
        matched=False,
        applicable=False,
        reason=reason,
    )


def _upper(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip().upper()
    return text or None


def _is_non_building(property: PropertyForMatching) -> bool:
    return _upper(property.property_type) in NON_BUILDING_TYPES


def _skip_for_property_type(criterion: str, property: PropertyForMatching) -> Optional[CriterionScore]:
    if criterion in BUILDING_CRITERIA and _is_non_building(property):
        return not_applicable(criterion, f"Not relevant for {_upper(property.property_type)}")
    return None


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def _range_distance(value: float, low: Optional[float], high: Optional[float]) -> float:
    """How far a value sits outside [low, high]; 0 when inside."""
    if low is not None and value < low:
        return low - value
    if high is not None and value > high:
        return value - high
    return 0.0


def _in_range(value: float, low: Optional[float], high: Optional[float]) -> bool:
    return (low is None or value >= low) and (high is None or value <= high)


# ============================================
# BUDGET & LOCATION
# ============================================

def score_budget(
    client: ClientForMatching,
    prefs: ClientPropertyPreferences,
    property: PropertyForMatching,
    tolerance_percent: float = 0,
) -> CriterionScore:
    """
    Full score inside the budget, linear decay outside it.

    Over budget the score reaches 0 at MAX_OVER_PERCENT past budget_max;
    under budget it reaches 0 at MAX_UNDER_PERCENT below budget_min.
    Both bands start after the tolerance.
    """
    criterion = "budget"
    budget_min, budget_max = get_budget_range(client)

    if budget_min is None and budget_max is None:
        return not_applicable(criterion, "No budget constraints")

    price = to_number(property.price)
    if price is None:
        return create_score(criterion, UNKNOWN_SCORE, "Property has no price listed")

    if is_price_in_budget(price, budget_min, budget_max, tolerance_percent):
        return create_score(criterion, BUDGET_SCORING["WITHIN_RANGE"], "Price within budget", True)

    if budget_max is not None and price > budget_max:
        if budget_max <= 0:
            return create_score(criterion, 0, "Over budget")
        over_percent = (price - budget_max) / budget_max * 100
        excess = over_percent - tolerance_percent
        score = 100 - excess / BUDGET_SCORING["MAX_OVER_PERCENT"] * 100
        return create_score(criterion, score, f"{round(over_percent)}% over budget")

    if budget_min is not None and price < budget_min:
        if budget_min <= 0:
            return create_score(criterion, 0, "Under budget")
        under_percent = (budget_min - price) / budget_min * 100
        shortfall = under_percent - tolerance_percent
        score = 100 - shortfall / BUDGET_SCORING["MAX_UNDER_PERCENT"] * 100
        return create_score(criterion, score, f"{round(under_percent)}% under budget")

    return create_score(criterion, UNKNOWN_SCORE, "Budget could not be compared")


def score_location(
    client: ClientForMatching,
    prefs: ClientPropertyPreferences,
    property: PropertyForMatching,
) -> CriterionScore:
    """
    Exact match between any normalized area of interest and any normalized
    property location field. Substrings do not count, so "Νέα Σμύρνη" does
    not match "Σμύρνη".
    """
    criterion = "location"
    client_areas = parse_areas_of_interest(client.areas_of_interest)

    if not client_areas:
        return not_applicable(criterion, "No location preference")

    property_locations = get_property_locations(property)
    if not property_locations:
        return create_score(criterion, UNKNOWN_SCORE, "Property has no location data")

    for area in client_areas:
        if area in property_locations:
            return create_score(criterion, LOCATION_SCORING["EXACT_MATCH"], f"Exact match: {area}", True)

    return create_score(criterion, LOCATION_SCORING["NO_MATCH"], "Location not in areas of interest")


# ============================================
# INTENT & TYPE
# ============================================

def score_transaction_type(
    client: ClientForMatching,
    prefs: ClientPropertyPreferences,
    property: PropertyForMatching,
) -> CriterionScore:
    """BUY clients should see SALE listings, RENT clients RENTAL listings."""
    criterion = "transaction_type"
    intent = _upper(client.intent)

    if intent is None:
        return not_applicable(criterion, "No client intent")
    if intent in INTENTS_WITHOUT_TRANSACTION:
        return not_applicable(criterion, f"{intent} clients are not looking for listings")

    transaction_type = _upper(property.transaction_type)
    if transaction_type is None:
        return create_score(criterion, UNKNOWN_SCORE, "Transaction type not specified")

    compatible = INTENT_TO_TRANSACTION.get(intent)
    if compatible is None:
        if intent == transaction_type:
            return create_score(criterion, 100, f"{intent} matches {transaction_type}", True)
        return create_score(criterion, UNKNOWN_SCORE, f"Unrecognized intent {intent}")

    if transaction_type in compatible:
        return create_score(criterion, 100, f"{intent} matches {transaction_type}", True)

    return create_score(criterion, 0, f"{intent} incompatible with {transaction_type}")


def score_property_type(
    client: ClientForMatching,
    prefs: ClientPropertyPreferences,
    property: PropertyForMatching,
) -> CriterionScore:
    """RESIDENTIAL purpose should match APARTMENT, HOUSE, etc."""
    criterion = "property_type"
    purpose = _upper(client.purpose)

    if purpose is None:
        return not_applicable(criterion, "No client purpose")

    property_type = _upper(property.property_type)
    if property_type is None:
        return create_score(criterion, UNKNOWN_SCORE, "Property type not specified")

    compatible = PURPOSE_TO_PROPERTY_TYPE.get(purpose)
    if compatible is None:
        if purpose == property_type:
            return create_score(criterion, 100, f"{property_type} matches {purpose}", True)
        return create_score(criterion, UNKNOWN_SCORE, f"Unrecognized purpose {purpose}")

    if property_type in compatible:
        return create_score(criterion, 100, f"{property_type} matches {purpose}", True)

    if property_type == "OTHER" or purpose == "OTHER":
        return create_score(criterion, UNKNOWN_SCORE, "Generic property type")

    return create_score(criterion, 0, f"{property_type} doesn't match {purpose}")


# ============================================
# RANGES
# ============================================

def _room_subscore(
    label: str,
    value: Optional[float],
    low: Optional[float],
    high: Optional[float],
) -> tuple[float, bool, str]:
    if value is None:
        return UNKNOWN_SCORE, False, f"{label} count unknown"
    if _in_range(value, low, high):
        return BEDROOMS_SCORING["WITHIN_RANGE"], True, f"{_format_number(value)} {label} within range"
    diff = _range_distance(value, low, high)
    score = max(0.0, BEDROOMS_SCORING["WITHIN_RANGE"] - diff * BEDROOMS_SCORING["SCORE_PER_ROOM_DIFF"])
    return score, False, f"{_format_number(value)} {label} ({_format_number(diff)} off preference)"


def score_bedrooms(
    client: ClientForMatching,
    prefs: ClientPropertyPreferences,
    property: PropertyForMatching,
) -> CriterionScore:
    """
    Room counts. Bedrooms and, when the client gave a range, bathrooms are
    scored separately and averaged; each loses 25 points per room outside
    the range.
    """
    criterion = "bedrooms"
    bed_min, bed_max = get_bedroom_range(prefs)
    bath_min, bath_max = get_bathroom_range(prefs)
    wants_bedrooms = bed_min is not None or bed_max is not None
    wants_bathrooms = bath_min is not None or bath_max is not None

    if not wants_bedrooms and not wants_bathrooms:
        return not_applicable(criterion, "No room preference")

    skipped = _skip_for_property_type(criterion, property)
    if skipped:
        return skipped

    parts = []
    if wants_bedrooms:
        parts.append(_room_subscore("bedrooms", to_number(property.bedrooms), bed_min, bed_max))
    if wants_bathrooms:
        parts.append(_room_subscore("bathrooms", to_number(property.bathrooms), bath_min, bath_max))

    score = sum(part[0] for part in parts) / len(parts)
    matched = all(part[1] for part in parts)
    reason = "; ".join(part[2] for part in parts)
    return create_score(criterion, score, reason, matched)


def score_size(
    client: ClientForMatching,
    prefs: ClientPropertyPreferences,
    property: PropertyForMatching,
) -> CriterionScore:
    """Size in sqm; 0 once the deviation reaches MAX_DEVIATION_PERCENT."""
    criterion = "size"
    size_min, size_max = get_size_range(prefs)

    if size_min is None and size_max is None:
        return not_applicable(criterion, "No size preference")

    size = get_property_size_sqm(property)
    if size is None:
        return create_score(criterion, UNKNOWN_SCORE, "Size unknown")

    if _in_range(size, size_min, size_max):
        return create_score(criterion, SIZE_SCORING["WITHIN_RANGE"], f"{_format_number(size)} sqm within range", True)

    deviation_percent = 100.0
    if size_min is not None and size < size_min and size_min > 0:
        deviation_percent = (size_min - size) / size_min * 100
    elif size_max is not None and size > size_max and size_max > 0:
        deviation_percent = (size - size_max) / size_max * 100

    if deviation_percent >= SIZE_SCORING["MAX_DEVIATION_PERCENT"]:
        return create_score(criterion, 0, f"{round(deviation_percent)}% outside size range")

    score = 100 - deviation_percent / SIZE_SCORING["MAX_DEVIATION_PERCENT"] * 100
    return create_score(criterion, score, f"{_format_number(size)} sqm ({round(deviation_percent)}% off)")


def score_floor(
    client: ClientForMatching,
    prefs: ClientPropertyPreferences,
    property: PropertyForMatching,
) -> CriterionScore:
    """Floor range, or a binary ground-floor-only requirement."""
    criterion = "floor"
    floor_min, floor_max, ground_only = get_floor_range(prefs)

    if floor_min is None and floor_max is None and not ground_only:
        return not_applicable(criterion, "No floor preference")

    skipped = _skip_for_property_type(criterion, property)
    if skipped:
        return skipped

    floor = parse_floor(property.floor)
    if floor is None:
        return create_score(criterion, UNKNOWN_SCORE, "Floor level unknown")

    if ground_only:
        if floor == 0:
            return create_score(criterion, FLOOR_SCORING["GROUND_FLOOR_MATCH"], "Ground floor", True)
        return create_score(
            criterion, FLOOR_SCORING["GROUND_FLOOR_MISMATCH"],
            f"Floor {_format_number(floor)} (need ground)",
        )

    if _in_range(floor, floor_min, floor_max):
        return create_score(criterion, FLOOR_SCORING["WITHIN_RANGE"], f"Floor {_format_number(floor)} within range", True)

    diff = _range_distance(floor, floor_min, floor_max)
    score = FLOOR_SCORING["WITHIN_RANGE"] - diff * FLOOR_SCORING["SCORE_PER_FLOOR_DIFF"]
    return create_score(criterion, score, f"Floor {_format_number(floor)} ({_format_number(diff)} floors off)")


# ============================================
# AMENITIES
# ============================================

def score_amenities(
    client: ClientForMatching,
    prefs: ClientPropertyPreferences,
    property: PropertyForMatching,
) -> CriterionScore:
    """
    Required amenities dominate: any missing one caps the score at
    REQUIRED_WEIGHT times the fraction present. With all required present
    the preferred fraction adds up to PREFERRED_WEIGHT on top.
    """
    criterion = "amenities"
    required, preferred = parse_amenity_preferences(prefs.amenities_required, prefs.amenities_preferred)

    if not required and not preferred:
        return not_applicable(criterion, "No amenity preferences")

    if property.amenities is None:
        return create_score(criterion, UNKNOWN_SCORE, "Amenities unknown")

    available = extract_property_amenities(property.amenities)
    required_met = len(required & available)
    preferred_met = len(preferred & available)

    if required and required_met < len(required):
        score = required_met / len(required) * AMENITIES_SCORING["REQUIRED_WEIGHT"]
        missing = sorted(required - available)
        return create_score(
            criterion, score,
            f"Missing {len(missing)} required amenities: {', '.join(missing)}",
        )

    if not required:
        score = preferred_met / len(preferred) * 100
        return create_score(
            criterion, score,
            f"{preferred_met}/{len(preferred)} preferred amenities",
            preferred_met == len(preferred),
        )

    if not preferred:
        return create_score(criterion, 100, "All required amenities present", True)

    score = (
        AMENITIES_SCORING["REQUIRED_WEIGHT"]
        + preferred_met / len(preferred) * AMENITIES_SCORING["PREFERRED_WEIGHT"]
    )
    return create_score(
        criterion, score,
        f"All required met, {preferred_met}/{len(preferred)} preferred",
        True,
    )


# ============================================
# SOFT PREFERENCES
# ============================================

def score_condition(
    client: ClientForMatching,
    prefs: ClientPropertyPreferences,
    property: PropertyForMatching,
) -> CriterionScore:
    criterion = "condition"
    wanted = [normalize_condition(c) for c in (prefs.condition_preferences or [])]
    wanted = [c for c in wanted if c]

    if not wanted:
        return not_applicable(criterion, "No condition preference")

    skipped = _skip_for_property_type(criterion, property)
    if skipped:
        return skipped

    condition = normalize_condition(property.condition)
    if not condition:
        return create_score(criterion, UNKNOWN_SCORE, "Property condition unknown")

    if condition in wanted:
        return create_score(criterion, 100, f"Condition: {condition}", True)

    # A property in better shape than anything asked for still suits
    property_rank = condition_rank(condition)
    wanted_ranks = [r for r in (condition_rank(c) for c in wanted) if r is not None]
    if property_rank is not None and wanted_ranks and property_rank < min(wanted_ranks):
        return create_score(
            criterion, SOFT_MISMATCH_SCORING["CONDITION_BETTER_THAN_WANTED"],
            f"Condition {condition} better than preferred",
            True,
        )

    return create_score(criterion, SOFT_MISMATCH_SCORING["CONDITION"], f"Condition {condition} not preferred")


def score_furnished(
    client: ClientForMatching,
    prefs: ClientPropertyPreferences,
    property: PropertyForMatching,
) -> CriterionScore:
    """
    An explicit "ANY" is a stated preference that every property satisfies,
    unlike a missing preference which leaves the criterion out.
    """
    criterion = "furnished"
    wanted = normalize_furnished(prefs.furnished_preference)

    if not wanted:
        return not_applicable(criterion, "No furnished preference")

    skipped = _skip_for_property_type(criterion, property)
    if skipped:
        return skipped

    if wanted == "ANY":
        return create_score(criterion, 100, "Any furnishing accepted", True)

    status = normalize_furnished(property.furnished)
    if not status:
        return create_score(criterion, UNKNOWN_SCORE, "Furnished status unknown")

    if status == wanted:
        return create_score(criterion, 100, f"Furnished: {status}", True)

    if {status, wanted} == {"FULLY", "PARTIALLY"}:
        return create_score(
            criterion, SOFT_MISMATCH_SCORING["FURNISHED_ADJACENT"],
            f"Furnished: {status} (wanted {wanted})",
        )

    return create_score(criterion, SOFT_MISMATCH_SCORING["FURNISHED"], f"Furnished: {status} (wanted {wanted})")


def score_heating(
    client: ClientForMatching,
    prefs: ClientPropertyPreferences,
    property: PropertyForMatching,
) -> CriterionScore:
    criterion = "heating"
    wanted = [normalize_heating(h) for h in (prefs.heating_preferences or [])]
    wanted = [h for h in wanted if h]

    if not wanted:
        return not_applicable(criterion, "No heating preference")

    skipped = _skip_for_property_type(criterion, property)
    if skipped:
        return skipped

    heating = normalize_heating(property.heating_type)
    if not heating:
        return create_score(criterion, UNKNOWN_SCORE, "Heating type unknown")

    if heating in wanted:
        return create_score(criterion, 100, f"Heating: {heating}", True)

    return create_score(criterion, SOFT_MISMATCH_SCORING["HEATING"], f"Heating: {heating} (not preferred)")


def score_energy_class(
    client: ClientForMatching,
    prefs: ClientPropertyPreferences,
    property: PropertyForMatching,
) -> CriterionScore:
    """Minimum energy class; each class below it costs ENERGY_CLASS_PER_STEP."""
    criterion = "energy_class"
    min_class = normalize_energy_class(prefs.energy_class_min)

    if not min_class:
        return not_applicable(criterion, "No energy class requirement")

    skipped = _skip_for_property_type(criterion, property)
    if skipped:
        return skipped

    property_class = normalize_energy_class(property.energy_cert_class)
    if not property_class or property_class == "IN_PROGRESS":
        return create_score(criterion, UNKNOWN_SCORE, "Energy class unknown")

    if meets_energy_requirement(property_class, min_class):
        return create_score(criterion, 100, f"Energy class: {property_class}", True)

    property_rank = energy_class_rank(property_class)
    min_rank = energy_class_rank(min_class)
    if property_rank is None or min_rank is None:
        return create_score(criterion, UNKNOWN_SCORE, f"Energy class {property_class} not comparable")

    steps = property_rank - min_rank
    score = max(
        SOFT_MISMATCH_SCORING["ENERGY_CLASS_FLOOR"],
        100 - steps * SOFT_MISMATCH_SCORING["ENERGY_CLASS_PER_STEP"],
    )
    return create_score(criterion, score, f"Energy class {property_class} below {min_class}")


# ============================================
# HARD REQUIREMENTS
# ============================================

def score_elevator(
    client: ClientForMatching,
    prefs: ClientPropertyPreferences,
    property: PropertyForMatching,
) -> CriterionScore:
    criterion = "elevator"

    if not prefs.requires_elevator:
        return not_applicable(criterion, "No elevator requirement")

    if property.elevator is None:
        return create_score(criterion, UNKNOWN_SCORE, "Elevator status unknown")

    if property.elevator:
        return create_score(criterion, 100, "Has elevator", True)

    return create_score(criterion, 0, "No elevator (required)")


def score_pet_friendly(
    client: ClientForMatching,
    prefs: ClientPropertyPreferences,
    property: PropertyForMatching,
) -> CriterionScore:
    criterion = "pet_friendly"

    if not prefs.requires_pet_friendly:
        return not_applicable(criterion, "No pet requirement")

    if _upper(property.transaction_type) in SALE_TRANSACTIONS:
        return not_applicable(criterion, "Pet policy does not apply to sales")

    if property.accepts_pets is None:
        return create_score(criterion, UNKNOWN_SCORE, "Pet policy unknown")

    if property.accepts_pets:
        return create_score(criterion, 100, "Pet-friendly", True)

    return create_score(criterion, 0, "Not pet-friendly (required)")


def score_parking(
    client: ClientForMatching,
    prefs: ClientPropertyPreferences,
    property: PropertyForMatching,
) -> CriterionScore:
    criterion = "parking"

    if not prefs.requires_parking:
        return not_applicable(criterion, "No parking requirement")

    if _upper(property.property_type) == "PARKING":
        return create_score(criterion, 100, "Is a parking space", True)

    if property.amenities is None:
        return create_score(criterion, UNKNOWN_SCORE, "Parking availability unknown")

    if extract_property_amenities(property.amenities) & PARKING_AMENITIES:
        return create_score(criterion, 100, "Has parking", True)

    return create_score(criterion, 0, "No parking (required)")


# Evaluation order of the breakdown
SCORERS: dict[str, Scorer] = {
    "budget": score_budget,
    "location": score_location,
    "transaction_type": score_transaction_type,
    "property_type": score_property_type,
    "bedrooms": score_bedrooms,
    "size": score_size,
    "amenities": score_amenities,
    "condition": score_condition,
    "furnished": score_furnished,
    "floor": score_floor,
    "elevator": score_elevator,
    "pet_friendly": score_pet_friendly,
    "heating": score_heating,
    "energy_class": score_energy_class,
    "parking": score_parking,
}
