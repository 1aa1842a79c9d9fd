"""
Tests for the per-criterion scorers.
"""
import pytest

from matchmaking.models.client import ClientForMatching
from matchmaking.models.preferences import ClientPropertyPreferences
from matchmaking.models.property import PropertyForMatching
from matchmaking.pipeline.scorers import (
    SCORERS,
    create_score,
    score_amenities,
    score_bedrooms,
    score_budget,
    score_condition,
    score_elevator,
    score_energy_class,
    score_floor,
    score_furnished,
    score_heating,
    score_location,
    score_parking,
    score_pet_friendly,
    score_property_type,
    score_size,
    score_transaction_type,
)
from matchmaking.pipeline.weights import CRITERIA


def make_client(**kwargs) -> ClientForMatching:
    return ClientForMatching(id="c1", **kwargs)


def make_property(**kwargs) -> PropertyForMatching:
    return PropertyForMatching(id="p1", **kwargs)


def prefs(**kwargs) -> ClientPropertyPreferences:
    return ClientPropertyPreferences(**kwargs)


NO_PREFS = ClientPropertyPreferences()


class TestScorerRegistry:
    """Tests for the scorer table."""

    def test_one_scorer_per_criterion(self):
        assert tuple(SCORERS) == CRITERIA
        assert len(SCORERS) == 15

    def test_create_score_clamps(self):
        assert create_score("budget", 140, "x").score == 100
        assert create_score("budget", -10, "x").score == 0

    def test_create_score_trusts_matched_flag(self):
        assert create_score("budget", 95, "x").matched is False
        assert create_score("budget", 100, "x", True).matched is True


class TestBudgetScorer:
    """Tests for budget scoring."""

    @pytest.fixture
    def client(self):
        return make_client(budget_min=200000, budget_max=300000)

    def test_no_budget_not_applicable(self):
        result = score_budget(make_client(), NO_PREFS, make_property(price=1))
        assert result.applicable is False

    def test_within_range(self, client):
        result = score_budget(client, NO_PREFS, make_property(price=250000))
        assert result.score == 100
        assert result.matched is True

    def test_bounds_inclusive(self, client):
        assert score_budget(client, NO_PREFS, make_property(price=300000)).score == 100
        assert score_budget(client, NO_PREFS, make_property(price=200000)).score == 100

    def test_over_budget_decays_linearly(self, client):
        # 10% over a 20% band
        result = score_budget(client, NO_PREFS, make_property(price=330000))
        assert result.score == pytest.approx(50)
        assert result.matched is False

    def test_far_over_budget_is_zero(self, client):
        assert score_budget(client, NO_PREFS, make_property(price=400000)).score == 0

    def test_under_budget_decays_slower(self, client):
        # 25% under a 50% band
        result = score_budget(client, NO_PREFS, make_property(price=150000))
        assert result.score == pytest.approx(50)

    def test_slightly_over_budget_is_not_matched(self, client):
        result = score_budget(client, NO_PREFS, make_property(price=303000))
        assert result.score == pytest.approx(95)
        assert result.matched is False

    def test_zero_min_with_negative_price(self):
        result = score_budget(make_client(budget_min=0), NO_PREFS, make_property(price=-1))
        assert result.applicable is True
        assert result.score == 0

    def test_only_max(self):
        client = make_client(budget_max=100000)
        assert score_budget(client, NO_PREFS, make_property(price=10)).score == 100

    def test_missing_price_is_neutral(self, client):
        result = score_budget(client, NO_PREFS, make_property())
        assert result.applicable is True
        assert result.score == 50

    def test_tolerance_widens_full_score(self, client):
        result = score_budget(client, NO_PREFS, make_property(price=310000), tolerance_percent=5)
        assert result.score == 100

    def test_decay_starts_after_tolerance(self, client):
        # 15% over, 10% past the tolerance
        result = score_budget(client, NO_PREFS, make_property(price=345000), tolerance_percent=5)
        assert result.score == pytest.approx(50)


class TestLocationScorer:
    """Tests for location scoring."""

    def test_no_areas_not_applicable(self):
        result = score_location(make_client(), NO_PREFS, make_property(area="Glyfada"))
        assert result.applicable is False

    def test_exact_match_after_normalization(self):
        client = make_client(areas_of_interest=["Κολωνάκι"])
        result = score_location(client, NO_PREFS, make_property(area="κολωνακι"))
        assert result.score == 100
        assert result.matched is True

    def test_match_on_any_field(self):
        client = make_client(areas_of_interest="Voula, Athens")
        result = score_location(client, NO_PREFS, make_property(area="Pangrati", address_city="City of Athens"))
        assert result.score == 100

    def test_substring_does_not_match(self):
        client = make_client(areas_of_interest=["Σμύρνη"])
        result = score_location(client, NO_PREFS, make_property(area="Νέα Σμύρνη"))
        assert result.score == 0

    def test_property_without_location_is_neutral(self):
        client = make_client(areas_of_interest=["Glyfada"])
        assert score_location(client, NO_PREFS, make_property()).score == 50


class TestTypeScorers:
    """Tests for transaction and property type scoring."""

    @pytest.mark.parametrize("intent, transaction, expected", [
        ("BUY", "SALE", 100),
        ("BUY", "EXCHANGE", 100),
        ("BUY", "RENTAL", 0),
        ("RENT", "RENTAL", 100),
        ("rent", "short_term", 100),
        ("INVEST", "RENTAL", 0),
        ("LEASE", "RENTAL", 100),
    ])
    def test_intent_compatibility(self, intent, transaction, expected):
        result = score_transaction_type(
            make_client(intent=intent), NO_PREFS, make_property(transaction_type=transaction)
        )
        assert result.score == expected

    def test_sell_intent_not_applicable(self):
        result = score_transaction_type(
            make_client(intent="SELL"), NO_PREFS, make_property(transaction_type="SALE")
        )
        assert result.applicable is False

    def test_no_intent_not_applicable(self):
        result = score_transaction_type(make_client(), NO_PREFS, make_property(transaction_type="SALE"))
        assert result.applicable is False

    def test_unknown_transaction_is_neutral(self):
        result = score_transaction_type(make_client(intent="BUY"), NO_PREFS, make_property())
        assert result.score == 50

    @pytest.mark.parametrize("purpose, property_type, expected", [
        ("RESIDENTIAL", "APARTMENT", 100),
        ("RESIDENTIAL", "HOUSE", 100),
        ("RESIDENTIAL", "COMMERCIAL", 0),
        ("COMMERCIAL", "WAREHOUSE", 100),
        ("LAND", "PLOT", 100),
        ("RESIDENTIAL", "OTHER", 50),
    ])
    def test_purpose_compatibility(self, purpose, property_type, expected):
        result = score_property_type(
            make_client(purpose=purpose), NO_PREFS, make_property(property_type=property_type)
        )
        assert result.score == expected

    def test_no_purpose_not_applicable(self):
        result = score_property_type(make_client(), NO_PREFS, make_property(property_type="HOUSE"))
        assert result.applicable is False


class TestRangeScorers:
    """Tests for bedrooms, size and floor scoring."""

    def test_bedrooms_within_range(self):
        result = score_bedrooms(make_client(), prefs(bedrooms_min=2), make_property(bedrooms=3))
        assert result.score == 100
        assert result.matched is True

    def test_bedrooms_per_room_penalty(self):
        result = score_bedrooms(make_client(), prefs(bedrooms_min=3, bedrooms_max=4), make_property(bedrooms=1))
        assert result.score == 50

    def test_bedrooms_floor_at_zero(self):
        result = score_bedrooms(make_client(), prefs(bedrooms_min=6), make_property(bedrooms=1))
        assert result.score == 0

    def test_bathrooms_averaged_with_bedrooms(self):
        result = score_bedrooms(
            make_client(),
            prefs(bedrooms_min=2, bathrooms_min=2),
            make_property(bedrooms=2, bathrooms=1),
        )
        assert result.score == pytest.approx(87.5)
        assert result.matched is False

    def test_bedrooms_unknown_is_neutral(self):
        result = score_bedrooms(make_client(), prefs(bedrooms_min=2), make_property())
        assert result.score == 50

    def test_bedrooms_skipped_for_land(self):
        result = score_bedrooms(make_client(), prefs(bedrooms_min=2), make_property(property_type="LAND"))
        assert result.applicable is False

    def test_size_within_range(self):
        result = score_size(make_client(), prefs(size_min_sqm=70, size_max_sqm=100), make_property(size_net_sqm=85))
        assert result.score == 100

    def test_size_deviation(self):
        # 15% under a 30% band
        result = score_size(make_client(), prefs(size_min_sqm=100), make_property(size_net_sqm=85))
        assert result.score == pytest.approx(50)

    def test_size_near_range_is_not_matched(self):
        # 5% over a 30% band
        result = score_size(make_client(), prefs(size_max_sqm=100), make_property(size_net_sqm=105))
        assert result.score == pytest.approx(83.33)
        assert result.matched is False

    def test_size_too_far_is_zero(self):
        result = score_size(make_client(), prefs(size_max_sqm=100), make_property(size_gross_sqm=140))
        assert result.score == 0

    def test_size_unknown_is_neutral(self):
        assert score_size(make_client(), prefs(size_min_sqm=50), make_property()).score == 50

    def test_floor_range(self):
        result = score_floor(make_client(), prefs(floor_min=2, floor_max=4), make_property(floor="3"))
        assert result.score == 100

    def test_floor_penalty_per_floor(self):
        result = score_floor(make_client(), prefs(floor_min=3), make_property(floor="1"))
        assert result.score == 60

    def test_ground_floor_only(self):
        assert score_floor(make_client(), prefs(ground_floor_only=True), make_property(floor="Ισόγειο")).score == 100
        assert score_floor(make_client(), prefs(ground_floor_only=True), make_property(floor="1")).score == 0

    def test_unparseable_floor_is_neutral(self):
        result = score_floor(make_client(), prefs(floor_min=1), make_property(floor="garbage"))
        assert result.score == 50


class TestAmenitiesScorer:
    """Tests for amenity scoring."""

    def test_no_preferences_not_applicable(self):
        assert score_amenities(make_client(), NO_PREFS, make_property(amenities=["pool"])).applicable is False

    def test_all_required_present(self):
        result = score_amenities(make_client(), prefs(amenities_required=["pool"]), make_property(amenities=["Pool"]))
        assert result.score == 100
        assert result.matched is True

    def test_missing_required_caps_score(self):
        result = score_amenities(
            make_client(),
            prefs(amenities_required=["pool", "garden"], amenities_preferred=["gym"]),
            make_property(amenities={"pool": True, "gym": True}),
        )
        assert result.score == 35
        assert result.matched is False

    def test_required_and_half_preferred(self):
        result = score_amenities(
            make_client(),
            prefs(amenities_required=["pool"], amenities_preferred=["gym", "sauna"]),
            make_property(amenities=["pool", "gym"]),
        )
        assert result.score == 85

    def test_only_preferred(self):
        result = score_amenities(
            make_client(),
            prefs(amenities_preferred=["gym", "sauna"]),
            make_property(amenities=["gym"]),
        )
        assert result.score == 50
        assert result.matched is False

    def test_all_preferred_is_matched(self):
        result = score_amenities(make_client(), prefs(amenities_preferred=["gym"]), make_property(amenities=["gym"]))
        assert result.score == 100
        assert result.matched is True

    def test_unknown_amenities_are_neutral(self):
        result = score_amenities(make_client(), prefs(amenities_required=["pool"]), make_property())
        assert result.score == 50


class TestSoftPreferenceScorers:
    """Tests for condition, furnished, heating and energy class."""

    def test_condition_match(self):
        result = score_condition(make_client(), prefs(condition_preferences=["good"]), make_property(condition="GOOD"))
        assert result.score == 100

    def test_condition_better_than_wanted(self):
        result = score_condition(
            make_client(), prefs(condition_preferences=["GOOD"]), make_property(condition="EXCELLENT")
        )
        assert result.score == 80
        assert result.matched is True

    def test_condition_worse_than_wanted(self):
        result = score_condition(
            make_client(), prefs(condition_preferences=["GOOD"]), make_property(condition="NEEDS_RENOVATION")
        )
        assert result.score == 25

    def test_furnished_any_is_applicable(self):
        result = score_furnished(make_client(), prefs(furnished_preference="ANY"), make_property())
        assert result.applicable is True
        assert result.score == 100

    def test_furnished_missing_not_applicable(self):
        result = score_furnished(make_client(), NO_PREFS, make_property(furnished="FULLY"))
        assert result.applicable is False

    def test_furnished_adjacent(self):
        result = score_furnished(
            make_client(), prefs(furnished_preference="FULLY"), make_property(furnished="partially")
        )
        assert result.score == 60

    def test_furnished_mismatch(self):
        result = score_furnished(make_client(), prefs(furnished_preference="FULLY"), make_property(furnished="NO"))
        assert result.score == 20

    def test_heating(self):
        wanted = prefs(heating_preferences=["AUTONOMOUS", "heat pump"])
        assert score_heating(make_client(), wanted, make_property(heating_type="HEAT_PUMP")).score == 100
        assert score_heating(make_client(), wanted, make_property(heating_type="CENTRAL")).score == 30
        assert score_heating(make_client(), wanted, make_property()).score == 50

    def test_energy_class_meets_minimum(self):
        result = score_energy_class(make_client(), prefs(energy_class_min="B"), make_property(energy_cert_class="A+"))
        assert result.score == 100

    def test_energy_class_steps_below(self):
        result = score_energy_class(make_client(), prefs(energy_class_min="B"), make_property(energy_cert_class="D"))
        assert result.score == 50

    def test_energy_class_floor(self):
        result = score_energy_class(make_client(), prefs(energy_class_min="A"), make_property(energy_cert_class="H"))
        assert result.score == 20

    def test_energy_class_in_progress_is_neutral(self):
        result = score_energy_class(
            make_client(), prefs(energy_class_min="B"), make_property(energy_cert_class="IN_PROGRESS")
        )
        assert result.score == 50

    def test_building_preferences_skipped_for_parking(self):
        result = score_heating(
            make_client(), prefs(heating_preferences=["CENTRAL"]), make_property(property_type="PARKING")
        )
        assert result.applicable is False


class TestHardRequirementScorers:
    """Tests for elevator, pets and parking."""

    def test_elevator_failed_requirement(self):
        result = score_elevator(make_client(), prefs(requires_elevator=True), make_property(elevator=False))
        assert result.score == 0
        assert result.matched is False
        assert result.applicable is True

    def test_elevator_present(self):
        result = score_elevator(make_client(), prefs(requires_elevator=True), make_property(elevator=True))
        assert result.score == 100

    def test_elevator_unknown_is_neutral(self):
        assert score_elevator(make_client(), prefs(requires_elevator=True), make_property()).score == 50

    def test_elevator_not_required(self):
        result = score_elevator(make_client(), prefs(requires_elevator=False), make_property(elevator=False))
        assert result.applicable is False

    def test_pets_on_rental(self):
        wanted = prefs(requires_pet_friendly=True)
        assert score_pet_friendly(
            make_client(), wanted, make_property(transaction_type="RENTAL", accepts_pets=True)
        ).score == 100
        assert score_pet_friendly(
            make_client(), wanted, make_property(transaction_type="RENTAL", accepts_pets=False)
        ).score == 0

    def test_pets_not_applicable_for_sale(self):
        result = score_pet_friendly(
            make_client(), prefs(requires_pet_friendly=True),
            make_property(transaction_type="SALE", accepts_pets=False),
        )
        assert result.applicable is False

    def test_parking_from_amenities(self):
        wanted = prefs(requires_parking=True)
        assert score_parking(make_client(), wanted, make_property(amenities=["Garage"])).score == 100
        assert score_parking(make_client(), wanted, make_property(amenities=["pool"])).score == 0
        assert score_parking(make_client(), wanted, make_property()).score == 50

    def test_parking_space_listing(self):
        result = score_parking(make_client(), prefs(requires_parking=True), make_property(property_type="PARKING"))
        assert result.score == 100
