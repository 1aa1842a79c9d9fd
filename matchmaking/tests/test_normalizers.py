"""
Tests for the normalizers.
"""
from decimal import Decimal

import pytest
from hypothesis import example, given, settings, strategies as st

from matchmaking.models.client import ClientForMatching
from matchmaking.models.property import PropertyForMatching
from matchmaking.pipeline.normalizers import (
    extract_property_amenities,
    get_budget_range,
    get_property_locations,
    get_property_size_sqm,
    is_price_in_budget,
    normalize_amenity_key,
    normalize_condition,
    normalize_energy_class,
    normalize_furnished,
    normalize_heating,
    normalize_location,
    parse_amenity_preferences,
    parse_areas_of_interest,
    parse_floor,
    round_half_up,
    to_number,
)


class TestToNumber:
    """Tests for numeric coercion."""

    def test_numbers_and_decimals(self):
        assert to_number(5) == 5.0
        assert to_number(2.5) == 2.5
        assert to_number(Decimal("250000.50")) == 250000.5

    def test_none_and_malformed_return_none(self):
        assert to_number(None) is None
        assert to_number("abc") is None
        assert to_number("") is None
        assert to_number(Decimal("NaN")) is None
        assert to_number({"value": 1}) is None

    def test_booleans_are_not_numbers(self):
        assert to_number(True) is None

    def test_numeric_strings(self):
        assert to_number("300 000") == 300000.0
        assert to_number("1,250") == 1250.0


class TestRoundHalfUp:
    """Tests for half-up rounding of scores."""

    @pytest.mark.parametrize("value, expected", [
        (62.5, 63),
        (60.5, 61),
        (0.5, 1),
        (62.49, 62),
        (62.49999999999999, 63),
        (100, 100),
        (0, 0),
    ])
    def test_values(self, value, expected):
        assert round_half_up(value) == expected


class TestParseFloor:
    """Tests for floor label parsing."""

    @pytest.mark.parametrize("label, expected", [
        ("Ground", 0),
        ("ground", 0),
        ("Ισόγειο", 0),
        ("ΙΣΟΓΕΙΟ", 0),
        ("Basement", -1),
        ("Υπόγειο", -1),
        ("-1", -1),
        ("Penthouse", 99),
        ("Ρετιρέ", 99),
        ("Mezzanine", 0.5),
        ("Ημιώροφος", 0.5),
        ("0.5", 0.5),
        ("3", 3),
        (" 12 ", 12),
    ])
    def test_known_labels(self, label, expected):
        assert parse_floor(label) == expected

    @pytest.mark.parametrize("label", ["garbage", "", "   ", None, "3rd floor"])
    def test_unparseable_is_none_not_zero(self, label):
        assert parse_floor(label) is None


class TestNormalizeLocation:
    """Tests for location normalization."""

    def test_accents_and_case(self):
        assert normalize_location("Κολωνάκι") == "κολωνακι"
        assert normalize_location("  KOLONAKI ") == "kolonaki"

    def test_strips_location_type_words(self):
        assert normalize_location("City of Athens") == "athens"
        assert normalize_location("Municipality of Glyfada") == "glyfada"
        assert normalize_location("Δήμος Αθηναίων") == "αθηναιων"
        assert normalize_location("Νομός Αττικής") == "αττικης"
        assert normalize_location("Athens City") == "athens"

    def test_does_not_strip_inside_words(self):
        assert normalize_location("Velocity") == "velocity"

    @settings(max_examples=500)
    @given(text=st.text())
    @example(text="Δήμος Δήμος Αθηναίων")
    @example(text="municipality of  Kifisia  municipality")
    @example(text="  Νέα   Σμύρνη ")
    @example(text="city")
    def test_idempotent(self, text):
        once = normalize_location(text)
        assert normalize_location(once) == once

    def test_empty_input(self):
        assert normalize_location(None) == ""
        assert normalize_location("") == ""


class TestPropertyLocations:
    """Tests for property location extraction."""

    def test_deduplicated_and_normalized(self):
        prop = PropertyForMatching(
            id="p1",
            area="Κολωνάκι",
            address_city="Athens",
            municipality="Δήμος Athens",
            address_state="Αττική",
        )

        assert get_property_locations(prop) == ["κολωνακι", "athens", "αττικη"]

    def test_no_location_fields(self):
        assert get_property_locations(PropertyForMatching(id="p1")) == []


class TestParseAreasOfInterest:
    """Tests for areas-of-interest parsing."""

    def test_array(self):
        assert parse_areas_of_interest(["Κολωνάκι", "Glyfada", ""]) == ["κολωνακι", "glyfada"]

    def test_json_string(self):
        assert parse_areas_of_interest('["Κολωνάκι", "Kifisia"]') == ["κολωνακι", "kifisia"]

    def test_comma_separated(self):
        assert parse_areas_of_interest("Κολωνάκι, Glyfada ,") == ["κολωνακι", "glyfada"]

    def test_malformed_json_falls_back_to_comma_split(self):
        assert parse_areas_of_interest('["Κολωνάκι", Glyfada') == ['["κολωνακι"', "glyfada"]

    def test_empty(self):
        assert parse_areas_of_interest(None) == []
        assert parse_areas_of_interest("") == []
        assert parse_areas_of_interest([]) == []


class TestAmenities:
    """Tests for amenity normalization."""

    def test_key_canonicalization(self):
        assert normalize_amenity_key("Swimming Pool") == "swimming_pool"
        assert normalize_amenity_key("swimming-pool") == "swimming_pool"
        assert normalize_amenity_key("SWIMMING_POOL") == "swimming_pool"

    def test_array_format(self):
        assert extract_property_amenities(["Pool", "Air Conditioning"]) == {"pool", "air_conditioning"}

    def test_object_format_keeps_only_present(self):
        amenities = {"pool": True, "gym": False, "Garden": "yes", "sauna": None}
        assert extract_property_amenities(amenities) == {"pool", "garden"}

    def test_missing(self):
        assert extract_property_amenities(None) == set()

    def test_preferences_do_not_double_count(self):
        required, preferred = parse_amenity_preferences(["Pool"], ["pool", "Gym"])

        assert required == {"pool"}
        assert preferred == {"gym"}


class TestSizeAndBudget:
    """Tests for size and budget helpers."""

    def test_size_fallback_chain(self):
        assert get_property_size_sqm(PropertyForMatching(id="p", size_net_sqm=80, size_gross_sqm=95)) == 80
        assert get_property_size_sqm(PropertyForMatching(id="p", size_gross_sqm=95)) == 95
        assert get_property_size_sqm(PropertyForMatching(id="p", square_feet=1000)) == pytest.approx(92.9, abs=0.01)
        assert get_property_size_sqm(PropertyForMatching(id="p")) is None

    def test_budget_range_from_decimals(self):
        client = ClientForMatching(id="c", budget_min=Decimal("200000"), budget_max=300000)
        assert get_budget_range(client) == (200000.0, 300000.0)

    def test_malformed_budget_is_none(self):
        client = ClientForMatching(id="c", budget_min="not a number")
        assert get_budget_range(client) == (None, None)

    def test_budget_tolerance_symmetry(self):
        assert is_price_in_budget(314999, 200000, 300000, 5) is True
        assert is_price_in_budget(315001, 200000, 300000, 5) is False
        assert is_price_in_budget(190001, 200000, 300000, 5) is True
        assert is_price_in_budget(189999, 200000, 300000, 5) is False

    def test_no_bounds_accepts_any_price(self):
        assert is_price_in_budget(10, None, None) is True

    def test_missing_price_is_not_in_budget(self):
        assert is_price_in_budget(None, 1, 2) is False

    def test_without_tolerance(self):
        assert is_price_in_budget(300000, 200000, 300000) is True
        assert is_price_in_budget(300001, 200000, 300000) is False


class TestEnumNormalizers:
    """Tests for enum normalization."""

    def test_furnished(self):
        assert normalize_furnished("unfurnished") == "NO"
        assert normalize_furnished("Semi") == "PARTIALLY"
        assert normalize_furnished("fully furnished") == "FULLY"

    def test_heating(self):
        assert normalize_heating("heat pump") == "HEAT_PUMP"
        assert normalize_heating("Gas") == "NATURAL_GAS"
        assert normalize_heating("communal") == "CENTRAL"

    def test_condition(self):
        assert normalize_condition("very-good") == "VERY_GOOD"
        assert normalize_condition("fixer") == "NEEDS_RENOVATION"

    def test_energy_class(self):
        assert normalize_energy_class("A+") == "A_PLUS"
        assert normalize_energy_class("b") == "B"
        assert normalize_energy_class("pending") == "IN_PROGRESS"

    def test_unknown_values_pass_through(self):
        assert normalize_heating("wood stove") == "wood stove"
        assert normalize_condition("Shell") == "Shell"
        assert normalize_furnished("Designer") == "Designer"
        assert normalize_energy_class("Z") == "Z"

    def test_empty(self):
        assert normalize_heating(None) is None
        assert normalize_furnished("") is None
