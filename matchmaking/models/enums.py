"""
Enum vocabularies shared by clients, properties and scoring.

Intent, purpose, property type and the other listing vocabularies are kept
as plain strings on the models so unrecognized spellings can flow through to
the normalizers instead of failing validation.
"""
from typing import Literal


MatchCriterion = Literal[
    "budget",
    "location",
    "transaction_type",
    "property_type",
    "bedrooms",
    "size",
    "amenities",
    "condition",
    "furnished",
    "floor",
    "elevator",
    "pet_friendly",
    "heating",
    "energy_class",
    "parking",
]

# Best first. IN_PROGRESS has no rank.
ENERGY_CLASS_ORDER: tuple[str, ...] = ("A_PLUS", "A", "B", "C", "D", "E", "F", "G", "H")

# Best first.
CONDITION_ORDER: tuple[str, ...] = ("EXCELLENT", "VERY_GOOD", "GOOD", "NEEDS_RENOVATION")
