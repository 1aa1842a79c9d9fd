"""
Match calculator - combines criterion scores into one match result.
"""
import logging
from datetime import datetime, timezone
from functools import partial
from typing import Any, Iterable, Optional, Union

from ..models.client import ClientForMatching
from ..models.filters import MatchOptions
from ..models.property import PropertyForMatching
from ..models.scoring import CriterionScore, MatchResult
from .normalizers import extract_preferences, round_half_up, to_number
from .scorers import SCORERS, Scorer, score_budget
from .weights import get_weight


logger = logging.getLogger(__name__)

ClientRecord = Union[ClientForMatching, dict[str, Any]]
PropertyRecord = Union[PropertyForMatching, dict[str, Any]]


def as_client(record: ClientRecord) -> ClientForMatching:
    """
    Validate a client record.

    Raises:
        pydantic.ValidationError: required identity missing or malformed
        TypeError: record is neither a model nor a mapping
    """
    if isinstance(record, ClientForMatching):
        return record
    if isinstance(record, dict):
        return ClientForMatching.model_validate(record)
    raise TypeError(f"Expected a client record, got {type(record).__name__}")


def as_property(record: PropertyRecord) -> PropertyForMatching:
    """
    Validate a property record.

    Raises:
        pydantic.ValidationError: required identity missing or malformed
        TypeError: record is neither a model nor a mapping
    """
    if isinstance(record, PropertyForMatching):
        return record
    if isinstance(record, dict):
        return PropertyForMatching.model_validate(record)
    raise TypeError(f"Expected a property record, got {type(record).__name__}")


class MatchCalculator:
    """
    Deterministic client-property match calculator.

    Only applicable criteria count: their weights are renormalized to sum
    to 1, so a client with two preferences is judged on those two alone.
    """

    def __init__(
        self,
        weights: Optional[dict[str, float]] = None,
        no_preference_score: float = 50,
        budget_tolerance_percent: float = 0,
    ):
        """
        Args:
            weights: Per-criterion weight overrides
            no_preference_score: Overall score when nothing is applicable
            budget_tolerance_percent: Symmetric tolerance on budget bounds

        Raises:
            ValueError: a weight override is negative
        """
        for criterion, weight in (weights or {}).items():
            if weight < 0:
                raise ValueError(f"weight for {criterion} must not be negative")

        self.weights = weights or {}
        self.no_preference_score = no_preference_score
        self.budget_tolerance_percent = budget_tolerance_percent

        self.scorers: dict[str, Scorer] = dict(SCORERS)
        if budget_tolerance_percent:
            self.scorers["budget"] = partial(score_budget, tolerance_percent=budget_tolerance_percent)

    @classmethod
    def from_config(cls, config) -> "MatchCalculator":
        """Build a calculator from the scoring section of a Config."""
        return cls(
            weights=config.scoring.weights_override,
            no_preference_score=config.scoring.no_preference_score,
            budget_tolerance_percent=config.scoring.budget_tolerance_percent,
        )

    def calculate(
        self,
        client: ClientRecord,
        property: PropertyRecord,
        now: Optional[datetime] = None,
    ) -> MatchResult:
        """
        Calculate the match between one client and one property.

        Args:
            client: Client model or raw record
            property: Property model or raw record
            now: Timestamp to stamp on the result (defaults to the current time)

        Returns:
            MatchResult with the full criterion breakdown
        """
        client = as_client(client)
        property = as_property(property)
        prefs = extract_preferences(client)

        raw_scores = [scorer(client, prefs, property) for scorer in self.scorers.values()]
        breakdown = self._apply_weights(raw_scores)
        applicable = [row for row in breakdown if row.applicable]

        if any(row.normalized_weight > 0 for row in applicable):
            overall = round_half_up(sum(row.weighted_score for row in applicable))
        else:
            overall = round_half_up(self.no_preference_score)

        result = MatchResult(
            client_id=client.id,
            property_id=property.id,
            overall_score=max(0, min(100, overall)),
            breakdown=breakdown,
            matched_criteria=sum(1 for row in applicable if row.matched),
            total_criteria=len(applicable),
            calculated_at=now or datetime.now(timezone.utc),
        )

        logger.debug(
            f"Match {client.id} x {property.id}: {result.overall_score}% "
            f"({result.matched_criteria}/{result.total_criteria} criteria)"
        )
        return result

    def _apply_weights(self, scores: list[CriterionScore]) -> list[CriterionScore]:
        """Attach configured and renormalized weights to every criterion."""
        weighted = []
        applicable_total = sum(
            get_weight(s.criterion, self.weights) for s in scores if s.applicable
        )

        for s in scores:
            weight = get_weight(s.criterion, self.weights)
            if s.applicable and applicable_total > 0:
                normalized = weight / applicable_total
            else:
                normalized = 0.0
            weighted.append(s.model_copy(update={
                "weight": weight,
                "normalized_weight": round(normalized, 6),
                "weighted_score": round(min(100.0, s.score * normalized), 4),
            }))

        return weighted

    def calculate_batch(
        self,
        clients: Iterable[ClientRecord],
        properties: Iterable[PropertyRecord],
        now: Optional[datetime] = None,
    ) -> list[MatchResult]:
        """Match every client against every property."""
        clients = [as_client(c) for c in clients]
        properties = [as_property(p) for p in properties]
        now = now or datetime.now(timezone.utc)

        logger.info(f"Calculating {len(clients) * len(properties)} matches")
        return [
            self.calculate(client, property, now=now)
            for client in clients
            for property in properties
        ]

    def find_matching_properties(
        self,
        client: ClientRecord,
        properties: Iterable[PropertyRecord],
        min_score: float = 0,
        limit: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> list[MatchResult]:
        """Best matching properties for a client, highest score first."""
        client = as_client(client)
        results = [self.calculate(client, p, now=now) for p in properties]
        results = [r for r in results if r.overall_score >= min_score]
        results.sort(key=lambda r: (-r.overall_score, r.property_id))
        return results[:limit] if limit else results

    def find_matching_clients(
        self,
        property: PropertyRecord,
        clients: Iterable[ClientRecord],
        min_score: float = 0,
        limit: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> list[MatchResult]:
        """Best matching clients for a property, highest score first."""
        property = as_property(property)
        results = [self.calculate(c, property, now=now) for c in clients]
        results = [r for r in results if r.overall_score >= min_score]
        results.sort(key=lambda r: (-r.overall_score, r.client_id))
        return results[:limit] if limit else results


def sort_results(
    results: list[MatchResult],
    options: MatchOptions,
    clients: Optional[dict[str, ClientForMatching]] = None,
    properties: Optional[dict[str, PropertyForMatching]] = None,
) -> list[MatchResult]:
    """
    Filter, sort and page match results.

    Sorting by price or name needs the property/client lookups; results
    without a value sort last. Ties fall back to client and property id.
    """
    clients = clients or {}
    properties = properties or {}

    if options.min_score_threshold is not None:
        results = [r for r in results if r.overall_score >= options.min_score_threshold]

    reverse = options.sort_order == "desc"

    def primary(result: MatchResult):
        if options.sort_by == "score":
            return result.overall_score
        if options.sort_by == "date":
            return result.calculated_at.timestamp()
        if options.sort_by == "price":
            prop = properties.get(result.property_id)
            return to_number(prop.price) if prop else None
        client = clients.get(result.client_id)
        if client is None:
            return None
        return (client.full_name or client.client_name or "").lower()

    present = [r for r in results if primary(r) is not None]
    missing = [r for r in results if primary(r) is None]

    # Stable sorts: ids first, then the primary key
    present.sort(key=lambda r: (r.client_id, r.property_id))
    present.sort(key=primary, reverse=reverse)
    missing.sort(key=lambda r: (r.client_id, r.property_id))

    ordered = present + missing
    end = options.offset + options.limit if options.limit is not None else None
    page = ordered[options.offset:end]

    if not options.include_breakdown:
        page = [r.model_copy(update={"breakdown": []}) for r in page]
    return page


def calculate_match_score(
    client: ClientRecord,
    property: PropertyRecord,
    now: Optional[datetime] = None,
) -> MatchResult:
    """Score one pair with default weights."""
    return MatchCalculator().calculate(client, property, now=now)


def calculate_batch_matches(
    clients: Iterable[ClientRecord],
    properties: Iterable[PropertyRecord],
    now: Optional[datetime] = None,
) -> list[MatchResult]:
    """Score the full client x property cross product with default weights."""
    return MatchCalculator().calculate_batch(clients, properties, now=now)
