"""
Criterion weights, per-criterion scoring constants and compatibility tables.
"""
from typing import Optional

from ..models.enums import CONDITION_ORDER, ENERGY_CLASS_ORDER


# Relative importance of each criterion. Only the weights of the criteria
# applicable to a pair are used, renormalized to sum to 1.
DEFAULT_WEIGHTS: dict[str, float] = {
    "budget": 20,
    "location": 18,
    "transaction_type": 12,
    "property_type": 10,
    "bedrooms": 8,
    "size": 7,
    "amenities": 5,
    "condition": 3,
    "furnished": 3,
    "floor": 3,
    "elevator": 3,
    "pet_friendly": 2,
    "heating": 2,
    "energy_class": 2,
    "parking": 2,
}

CRITERIA: tuple[str, ...] = tuple(DEFAULT_WEIGHTS)

# Score given when the client has a preference but the property lacks the data
UNKNOWN_SCORE = 50

BUDGET_SCORING = {
    "WITHIN_RANGE": 100,
    # Linear decay to 0 at this many percent over budget_max
    "MAX_OVER_PERCENT": 20,
    # Linear decay to 0 at this many percent under budget_min
    "MAX_UNDER_PERCENT": 50,
}

LOCATION_SCORING = {
    "EXACT_MATCH": 100,
    "NO_MATCH": 0,
}

BEDROOMS_SCORING = {
    "WITHIN_RANGE": 100,
    "SCORE_PER_ROOM_DIFF": 25,
}

SIZE_SCORING = {
    "WITHIN_RANGE": 100,
    "MAX_DEVIATION_PERCENT": 30,
}

FLOOR_SCORING = {
    "WITHIN_RANGE": 100,
    "SCORE_PER_FLOOR_DIFF": 20,
    "GROUND_FLOOR_MATCH": 100,
    "GROUND_FLOOR_MISMATCH": 0,
}

AMENITIES_SCORING = {
    # Share of the score carried by required amenities once any are listed
    "REQUIRED_WEIGHT": 70,
    "PREFERRED_WEIGHT": 30,
}

# Soft preferences never fall below these on a mismatch
SOFT_MISMATCH_SCORING = {
    "HEATING": 30,
    "CONDITION": 25,
    "CONDITION_BETTER_THAN_WANTED": 80,
    "FURNISHED_ADJACENT": 60,
    "FURNISHED": 20,
    "ENERGY_CLASS_PER_STEP": 25,
    "ENERGY_CLASS_FLOOR": 20,
}

INTENT_TO_TRANSACTION: dict[str, tuple[str, ...]] = {
    "BUY": ("SALE", "EXCHANGE"),
    "INVEST": ("SALE",),
    "RENT": ("RENTAL", "SHORT_TERM"),
    "LEASE": ("RENTAL",),
}

# Sellers are not looking for listings; transaction type does not apply to them
INTENTS_WITHOUT_TRANSACTION = frozenset({"SELL"})

PURPOSE_TO_PROPERTY_TYPE: dict[str, tuple[str, ...]] = {
    "RESIDENTIAL": ("RESIDENTIAL", "APARTMENT", "HOUSE", "MAISONETTE", "RENTAL", "VACATION"),
    "COMMERCIAL": ("COMMERCIAL", "WAREHOUSE", "INDUSTRIAL"),
    "LAND": ("LAND", "PLOT", "FARM"),
    "PARKING": ("PARKING",),
    "OTHER": ("OTHER",),
}

# Property types without a building, where room/floor/finish preferences do not
# apply. Hard requirements (elevator, parking, pets) still apply to them.
NON_BUILDING_TYPES = frozenset({"LAND", "PLOT", "PARKING"})

BUILDING_CRITERIA = frozenset({
    "bedrooms", "floor", "furnished", "heating", "energy_class", "condition",
})

# Pet policy is a landlord rule; it does not apply to listings for sale
SALE_TRANSACTIONS = frozenset({"SALE", "EXCHANGE"})


def get_weight(criterion: str, weights: Optional[dict[str, float]] = None) -> float:
    """Weight for a criterion, from an override table when given."""
    if weights and criterion in weights:
        return float(weights[criterion])
    return float(DEFAULT_WEIGHTS.get(criterion, 0))


def energy_class_rank(energy_class: Optional[str]) -> Optional[int]:
    """0 for A_PLUS, increasing as efficiency drops; None when unranked."""
    if energy_class in ENERGY_CLASS_ORDER:
        return ENERGY_CLASS_ORDER.index(energy_class)
    return None


def condition_rank(condition: Optional[str]) -> Optional[int]:
    """0 for EXCELLENT, increasing as condition worsens; None when unranked."""
    if condition in CONDITION_ORDER:
        return CONDITION_ORDER.index(condition)
    return None


def meets_energy_requirement(property_class: str, min_class: str) -> bool:
    """True when the property's class is at least as good as the minimum."""
    property_rank = energy_class_rank(property_class)
    min_rank = energy_class_rank(min_class)
    if property_rank is None or min_rank is None:
        return property_class == min_class
    return property_rank <= min_rank
