"""
Pipeline orchestrator - runs a full dashboard matching pass.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional, TypeVar

from pydantic import ValidationError

from ..config import Config, get_config
from ..models.analytics import MatchAnalytics, MatchSummaryStats
from ..models.client import ClientForMatching
from ..models.filters import MatchFilters
from ..models.property import PropertyForMatching
from ..models.scoring import MatchResult
from .analytics import AnalyticsBuilder, empty_distribution, summarize
from .calculator import ClientRecord, MatchCalculator, PropertyRecord, as_client, as_property


logger = logging.getLogger(__name__)

T = TypeVar("T")


def _load_records(
    records: Iterable,
    loader: Callable[..., T],
    kind: str,
    skip_invalid: bool,
) -> list[T]:
    """Validate records, optionally dropping malformed ones with a warning."""
    loaded = []
    for index, record in enumerate(records):
        try:
            loaded.append(loader(record))
        except (ValidationError, TypeError) as e:
            if not skip_invalid:
                raise
            logger.warning(f"Skipping invalid {kind} record #{index}: {e}")
    return loaded


def _status_allowed(status: Optional[str], allowed: Optional[list[str]]) -> bool:
    """Records without a status are kept."""
    if not allowed or status is None:
        return True
    return status.upper() in {s.upper() for s in allowed}


def _in_list(value: Optional[str], allowed: Optional[list[str]]) -> bool:
    if not allowed:
        return True
    if value is None:
        return False
    return value.upper() in {a.upper() for a in allowed}


def scope_clients(
    clients: list[ClientForMatching],
    config: Config,
    filters: MatchFilters,
) -> list[ClientForMatching]:
    statuses = filters.client_statuses or config.scope.client_statuses
    return [
        c for c in clients
        if _status_allowed(c.client_status, statuses) and _in_list(c.intent, filters.intents)
    ]


def scope_properties(
    properties: list[PropertyForMatching],
    config: Config,
    filters: MatchFilters,
) -> list[PropertyForMatching]:
    statuses = filters.property_statuses or config.scope.property_statuses
    return [
        p for p in properties
        if _status_allowed(p.property_status, statuses) and _in_list(p.property_type, filters.property_types)
    ]


def _pair_allowed(
    client: ClientForMatching,
    property: PropertyForMatching,
    config: Config,
    filters: MatchFilters,
) -> bool:
    if config.scope.same_organization_only and client.organization_id != property.organization_id:
        return False
    if filters.assigned_to_user_id and filters.assigned_to_user_id not in (client.assigned_to, property.assigned_to):
        return False
    return True


def _as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _result_allowed(result: MatchResult, filters: MatchFilters) -> bool:
    if filters.min_score is not None and result.overall_score < filters.min_score:
        return False
    calculated_at = _as_utc(result.calculated_at)
    if filters.date_from and calculated_at < _as_utc(filters.date_from):
        return False
    if filters.date_to and calculated_at > _as_utc(filters.date_to):
        return False
    return True


def calculate_scoped_matches(
    clients: list[ClientForMatching],
    properties: list[PropertyForMatching],
    calculator: MatchCalculator,
    config: Config,
    filters: MatchFilters,
    now: datetime,
) -> list[MatchResult]:
    """Score every allowed client-property pair and apply result filters."""
    results = []
    for client in clients:
        for property in properties:
            if not _pair_allowed(client, property, config, filters):
                continue
            result = calculator.calculate(client, property, now=now)
            if _result_allowed(result, filters):
                results.append(result)
    return results


def run_match_analytics(
    clients: Iterable[ClientRecord],
    properties: Iterable[PropertyRecord],
    filters: Optional[MatchFilters] = None,
    config: Optional[Config] = None,
    now: Optional[datetime] = None,
    skip_invalid: bool = False,
) -> MatchAnalytics:
    """
    Run the full dashboard matching pass.

    Pipeline steps:
    1. Validate client and property records
    2. Keep clients/properties in the configured statuses
    3. Score every pair within the same organization
    4. Roll the results up into analytics

    Args:
        clients: Client models or raw records
        properties: Property models or raw records
        filters: Optional match filters
        config: Configuration (uses the singleton if None)
        now: Timestamp for every result, for reproducible runs
        skip_invalid: Drop malformed records instead of raising

    Returns:
        MatchAnalytics for the scoped records
    """
    config = config or get_config()
    filters = filters or MatchFilters()
    now = now or datetime.now(timezone.utc)

    # Step 1: Validate
    client_models = _load_records(clients, as_client, "client", skip_invalid)
    property_models = _load_records(properties, as_property, "property", skip_invalid)

    # Step 2: Scope
    scoped_clients = scope_clients(client_models, config, filters)
    scoped_properties = scope_properties(property_models, config, filters)
    logger.info(
        f"Matching {len(scoped_clients)}/{len(client_models)} clients against "
        f"{len(scoped_properties)}/{len(property_models)} properties"
    )

    if not scoped_clients or not scoped_properties:
        return MatchAnalytics(
            match_distribution=empty_distribution(),
            total_clients=len(scoped_clients),
            total_properties=len(scoped_properties),
            threshold=config.thresholds.match_threshold,
        )

    # Step 3: Score
    calculator = MatchCalculator.from_config(config)
    results = calculate_scoped_matches(
        scoped_clients, scoped_properties, calculator, config, filters, now
    )
    logger.info(f"Calculated {len(results)} matches")

    # Step 4: Roll up
    builder = AnalyticsBuilder.from_config(config)
    return builder.build(results, scoped_clients, scoped_properties)


def get_match_summary_stats(
    clients: Iterable[ClientRecord],
    properties: Iterable[PropertyRecord],
    filters: Optional[MatchFilters] = None,
    config: Optional[Config] = None,
    now: Optional[datetime] = None,
) -> MatchSummaryStats:
    """Summary counts for a dashboard widget."""
    config = config or get_config()
    filters = filters or MatchFilters()
    now = now or datetime.now(timezone.utc)

    scoped_clients = scope_clients([as_client(c) for c in clients], config, filters)
    scoped_properties = scope_properties([as_property(p) for p in properties], config, filters)

    calculator = MatchCalculator.from_config(config)
    results = calculate_scoped_matches(
        scoped_clients, scoped_properties, calculator, config, filters, now
    )
    return summarize(
        results,
        total_clients=len(scoped_clients),
        total_properties=len(scoped_properties),
        threshold=config.thresholds.match_threshold,
        strong_threshold=config.thresholds.strong_threshold,
    )
