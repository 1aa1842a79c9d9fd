"""
Analytics rollup - fold many match results into dashboard aggregates.
"""
import logging
from collections import defaultdict
from typing import Iterable, Optional

import numpy as np

from ..models.analytics import (
    ClientSummary,
    MatchAnalytics,
    MatchDistribution,
    MatchSummaryStats,
    PropertySummary,
    PropertyWithMatchStats,
    TopMatch,
)
from ..models.client import ClientForMatching
from ..models.property import PropertyForMatching
from ..models.scoring import MatchResult
from .calculator import ClientRecord, PropertyRecord, as_client, as_property
from .normalizers import round_half_up, to_number


logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 50.0
DEFAULT_STRONG_THRESHOLD = 80.0

# (label, inclusive min, exclusive max); the last bucket also includes its max
DISTRIBUTION_BUCKETS: tuple[tuple[str, int, int], ...] = (
    ("0-25%", 0, 26),
    ("26-50%", 26, 51),
    ("51-75%", 51, 76),
    ("76-100%", 76, 100),
)


def empty_distribution() -> list[MatchDistribution]:
    return [
        MatchDistribution(range=label, min=low, max=high, count=0)
        for label, low, high in DISTRIBUTION_BUCKETS
    ]


def build_distribution(scores: Iterable[float]) -> list[MatchDistribution]:
    """
    Histogram of overall scores.
    Every score from 0 to 100 lands in exactly one bucket.
    """
    buckets = empty_distribution()
    last = len(buckets) - 1

    for score in scores:
        for i, bucket in enumerate(buckets):
            if bucket.min <= score < bucket.max or (i == last and score == bucket.max):
                bucket.count += 1
                break

    return buckets


def summarize_client(
    client: ClientForMatching,
    best_match_score: Optional[int] = None,
    match_count: Optional[int] = None,
) -> ClientSummary:
    return ClientSummary(
        id=client.id,
        client_name=client.client_name,
        full_name=client.full_name,
        intent=client.intent,
        budget_min=to_number(client.budget_min),
        budget_max=to_number(client.budget_max),
        client_status=client.client_status,
        best_match_score=best_match_score,
        match_count=match_count,
    )


def summarize_property(property: PropertyForMatching) -> PropertySummary:
    return PropertySummary(
        id=property.id,
        property_name=property.property_name,
        price=to_number(property.price),
        property_type=property.property_type,
        bedrooms=to_number(property.bedrooms),
        area=property.area,
        address_city=property.address_city,
        property_status=property.property_status,
        image_url=property.image_url,
    )


def select_top_matches(
    results: list[MatchResult],
    limit: int,
    min_score: float = 0,
) -> list[MatchResult]:
    """
    Highest scores first. Ties go to the most recent calculation, then to
    client and property id so the order never depends on input order.
    """
    eligible = [r for r in results if r.overall_score >= min_score]
    eligible.sort(key=lambda r: (
        -r.overall_score,
        -r.calculated_at.timestamp(),
        r.client_id,
        r.property_id,
    ))
    return eligible[:limit]


class AnalyticsBuilder:
    """
    Builds MatchAnalytics from a batch of results.
    All results are held in memory; callers chunk very large corpora.
    """

    def __init__(
        self,
        threshold: float = DEFAULT_THRESHOLD,
        top_matches_limit: int = 20,
        unmatched_clients_limit: int = 10,
        hot_properties_limit: int = 10,
    ):
        """
        Args:
            threshold: A result at or above this score counts as a match
            top_matches_limit: Max top matches returned
            unmatched_clients_limit: Max unmatched clients returned
            hot_properties_limit: Max hot properties returned
        """
        self.threshold = threshold
        self.top_matches_limit = top_matches_limit
        self.unmatched_clients_limit = unmatched_clients_limit
        self.hot_properties_limit = hot_properties_limit

    @classmethod
    def from_config(cls, config) -> "AnalyticsBuilder":
        return cls(
            threshold=config.thresholds.match_threshold,
            top_matches_limit=config.analytics.top_matches_limit,
            unmatched_clients_limit=config.analytics.unmatched_clients_limit,
            hot_properties_limit=config.analytics.hot_properties_limit,
        )

    def build(
        self,
        results: list[MatchResult],
        clients: Iterable[ClientRecord],
        properties: Iterable[PropertyRecord],
    ) -> MatchAnalytics:
        """
        Roll results up into dashboard analytics.

        Args:
            results: Match results to aggregate
            clients: Clients the results were computed for
            properties: Properties the results were computed for

        Returns:
            MatchAnalytics
        """
        client_map = {c.id: c for c in (as_client(c) for c in clients)}
        property_map = {p.id: p for p in (as_property(p) for p in properties)}

        logger.info(
            f"Building analytics for {len(results)} results "
            f"({len(client_map)} clients, {len(property_map)} properties)"
        )

        scores = [r.overall_score for r in results]
        average = round_half_up(np.mean(scores)) if scores else 0

        clients_with_matches = len({
            r.client_id for r in results if r.overall_score >= self.threshold
        })

        return MatchAnalytics(
            top_matches=self._top_matches(results, client_map, property_map),
            match_distribution=build_distribution(scores),
            unmatched_clients=self._unmatched_clients(results, client_map),
            hot_properties=self._hot_properties(results, property_map),
            total_clients=len(client_map),
            total_properties=len(property_map),
            total_matches=len(results),
            average_match_score=average,
            clients_with_matches=clients_with_matches,
            threshold=self.threshold,
        )

    def _top_matches(
        self,
        results: list[MatchResult],
        client_map: dict[str, ClientForMatching],
        property_map: dict[str, PropertyForMatching],
    ) -> list[TopMatch]:
        top = []
        for result in select_top_matches(results, self.top_matches_limit, self.threshold):
            client = client_map.get(result.client_id)
            property = property_map.get(result.property_id)
            top.append(TopMatch(
                result=result,
                client=summarize_client(client) if client else ClientSummary(id=result.client_id),
                property=summarize_property(property) if property else PropertySummary(id=result.property_id),
            ))
        return top

    def _unmatched_clients(
        self,
        results: list[MatchResult],
        client_map: dict[str, ClientForMatching],
    ) -> list[ClientSummary]:
        """Clients whose best result stays below the threshold, worst first."""
        best_scores: dict[str, int] = {}
        for r in results:
            if r.overall_score > best_scores.get(r.client_id, -1):
                best_scores[r.client_id] = r.overall_score

        unmatched = []
        for client_id, client in client_map.items():
            best = best_scores.get(client_id, 0)
            if best < self.threshold:
                unmatched.append(summarize_client(client, best_match_score=best, match_count=0))

        unmatched.sort(key=lambda c: (c.best_match_score, c.id))
        return unmatched[:self.unmatched_clients_limit]

    def _hot_properties(
        self,
        results: list[MatchResult],
        property_map: dict[str, PropertyForMatching],
    ) -> list[PropertyWithMatchStats]:
        """Properties with the most clients at or above the threshold."""
        matching_scores: dict[str, list[int]] = defaultdict(list)
        for r in results:
            if r.overall_score >= self.threshold:
                matching_scores[r.property_id].append(r.overall_score)

        hot = []
        for property_id, property_scores in matching_scores.items():
            prop = property_map.get(property_id)
            summary = summarize_property(prop) if prop else PropertySummary(id=property_id)
            hot.append(PropertyWithMatchStats(
                **summary.model_dump(),
                match_count=len(property_scores),
                average_match_score=round_half_up(np.mean(property_scores)),
                top_match_score=max(property_scores),
            ))

        hot.sort(key=lambda p: (-p.match_count, p.id))
        return hot[:self.hot_properties_limit]


def build_match_analytics(
    results: list[MatchResult],
    clients: Iterable[ClientRecord],
    properties: Iterable[PropertyRecord],
    threshold: float = DEFAULT_THRESHOLD,
    top_matches_limit: int = 20,
    unmatched_clients_limit: int = 10,
    hot_properties_limit: int = 10,
) -> MatchAnalytics:
    """Functional wrapper around AnalyticsBuilder."""
    builder = AnalyticsBuilder(
        threshold=threshold,
        top_matches_limit=top_matches_limit,
        unmatched_clients_limit=unmatched_clients_limit,
        hot_properties_limit=hot_properties_limit,
    )
    return builder.build(results, clients, properties)


def summarize(
    results: list[MatchResult],
    total_clients: int,
    total_properties: int,
    threshold: float = DEFAULT_THRESHOLD,
    strong_threshold: float = DEFAULT_STRONG_THRESHOLD,
) -> MatchSummaryStats:
    """Quick counts for dashboard widgets."""
    scores = [r.overall_score for r in results]
    return MatchSummaryStats(
        total_clients=total_clients,
        total_properties=total_properties,
        matches_above_threshold=sum(1 for s in scores if s >= threshold),
        matches_above_strong=sum(1 for s in scores if s >= strong_threshold),
        average_score=round_half_up(np.mean(scores)) if scores else 0,
    )
