"""Scrape and Analyze operations shared by the HTTP server and the CLI job."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from maps_leads.collect.collector import ListCollector, ListingSource
from maps_leads.collect.maps_page import MapsPage
from maps_leads.core.config import Settings, get_settings
from maps_leads.core.errors import ClientInputError
from maps_leads.core.phone import PhoneValidator
from maps_leads.etl import aggregate
from maps_leads.etl.aggregate import FilterConfig
from maps_leads.etl.enrich import EnrichmentPipeline
from maps_leads.models import EnrichedRecord

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100

SourceFactory = Callable[[str, Settings], ListingSource]


def open_maps_page(query: str, settings: Settings) -> ListingSource:
    return MapsPage(query, settings=settings).open()


def _validate_limit(limit: Any) -> int:
    if isinstance(limit, bool):
        raise ClientInputError("limit must be numeric")
    try:
        value = int(limit)
    except (TypeError, ValueError) as exc:
        raise ClientInputError("limit must be numeric") from exc
    if value <= 0:
        raise ClientInputError("limit must be positive")
    return value


def scrape(
    query: Optional[str],
    limit: Any = DEFAULT_LIMIT,
    filters: Optional[FilterConfig] = None,
    *,
    settings: Optional[Settings] = None,
    source_factory: Optional[SourceFactory] = None,
    pipeline: Optional[EnrichmentPipeline] = None,
) -> Dict[str, Any]:
    """Collect up to ``limit`` listings for ``query``, enrich, filter and summarise them.

    Input problems raise ClientInputError before any browser session is
    opened. Source failures propagate as CollaboratorError; the collector
    closes the session either way. The result may be shorter than ``limit``
    when the source stops producing new listings.
    """
    if not isinstance(query, str) or not query.strip():
        raise ClientInputError("query is required")
    query = query.strip()
    target = _validate_limit(DEFAULT_LIMIT if limit is None else limit)
    criteria = filters or FilterConfig()

    settings = settings or get_settings()
    factory = source_factory or open_maps_page
    pipeline = pipeline or EnrichmentPipeline(validator=PhoneValidator(settings.default_phone_region))

    logger.info("Starting scrape for query=%s limit=%d", query, target)
    source = factory(query, settings)
    try:
        collector = ListCollector(source, stagnation_mode=settings.stagnation_mode, max_polls=settings.max_polls)
    except Exception:
        source.close()
        raise
    result = collector.collect(target, settings.poll_interval_ms, settings.max_attempts)
    logger.info("Collection finished: outcome=%s records=%d polls=%d", result.outcome, len(result.records), result.polls)

    extracted_at = datetime.now(timezone.utc)
    enriched = pipeline.enrich(result.records[:target], extracted_at=extracted_at)
    businesses = aggregate.filter_records(enriched, criteria)

    return {
        "businesses": [record.to_dict() for record in businesses],
        "stats": aggregate.summarize(businesses),
        "query": query,
        "extractedAt": extracted_at.isoformat(),
    }


def analyze(businesses: Any) -> Dict[str, Any]:
    """Compute the analysis block for caller-supplied enriched records."""
    if businesses is None or not isinstance(businesses, list):
        raise ClientInputError("businesses must be a list")

    records = [EnrichedRecord.from_dict(item) for item in businesses if isinstance(item, dict)]
    return aggregate.analyze(records)
