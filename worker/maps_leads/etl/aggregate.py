"""Filtering and summary statistics over enriched records."""

from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from maps_leads.core.errors import ClientInputError
from maps_leads.core.scoring import HIGH_OPPORTUNITY_THRESHOLD
from maps_leads.models import NO_PHONE, PRESENCE_TYPES, PRIORITIES, EnrichedRecord

logger = logging.getLogger(__name__)

TOP_CATEGORIES = 5


@dataclass(frozen=True)
class FilterConfig:
    needs_website: Optional[bool] = None
    min_rating: Optional[float] = None
    min_reviews: Optional[int] = None
    categories: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, payload: Optional[Dict[str, Any]]) -> "FilterConfig":
        """Parse the ``filters`` object of a scrape request."""
        if payload is None:
            return cls()
        if not isinstance(payload, dict):
            raise ClientInputError("filters must be an object")

        needs_website = payload.get("needsWebsite")
        if needs_website is not None and not isinstance(needs_website, bool):
            raise ClientInputError("filters.needsWebsite must be a boolean")

        min_rating = payload.get("minRating")
        if min_rating is not None:
            min_rating = _finite_number(min_rating, "filters.minRating must be numeric")

        min_reviews = payload.get("minReviews")
        if min_reviews is not None:
            number = _finite_number(min_reviews, "filters.minReviews must be an integer")
            if not number.is_integer():
                raise ClientInputError("filters.minReviews must be an integer")
            min_reviews = int(number)

        categories = payload.get("categories") or ()
        if isinstance(categories, str):
            categories = (categories,)
        if not isinstance(categories, (list, tuple)) or not all(isinstance(item, str) for item in categories):
            raise ClientInputError("filters.categories must be a list of strings")

        return cls(
            needs_website=needs_website,
            min_rating=min_rating,
            min_reviews=min_reviews,
            categories=tuple(item for item in categories if item.strip()),
        )


def _finite_number(value: Any, message: str) -> float:
    if isinstance(value, bool):
        raise ClientInputError(message)
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ClientInputError(message) from exc
    if not math.isfinite(number):
        raise ClientInputError(message)
    return number


def _with_presence(records: Iterable[EnrichedRecord]) -> List[EnrichedRecord]:
    return [record for record in records if record.web_presence is not None]


def _matches_category(category: Optional[str], wanted: Iterable[str]) -> bool:
    lowered = (category or "").lower()
    return bool(lowered) and any(item.lower() in lowered for item in wanted)


def filter_records(records: Iterable[EnrichedRecord], criteria: Optional[FilterConfig] = None) -> List[EnrichedRecord]:
    """Apply the configured filters; unset options let every record through."""
    criteria = criteria or FilterConfig()
    candidates = list(records)
    result = _with_presence(candidates)
    if len(result) != len(candidates):
        logger.debug("Dropped %d records without web presence", len(candidates) - len(result))

    if criteria.needs_website is not None:
        result = [r for r in result if r.web_presence.needs_website == criteria.needs_website]
    if criteria.min_rating is not None:
        result = [r for r in result if r.rating is not None and r.rating >= criteria.min_rating]
    if criteria.min_reviews is not None:
        result = [r for r in result if (r.review_count or 0) >= criteria.min_reviews]
    if criteria.categories:
        result = [r for r in result if _matches_category(r.category, criteria.categories)]
    return result


def summarize(records: Iterable[EnrichedRecord]) -> Dict[str, Any]:
    """Headline counts for a result set.

    ``averageRating`` counts records without a rating as 0 so that the mean is
    taken over the whole set.
    """
    kept = _with_presence(records)
    total = len(kept)
    rating_sum = sum(record.rating or 0 for record in kept)
    return {
        "total": total,
        "needsWebsite": sum(1 for record in kept if record.web_presence.needs_website),
        "withPhone": sum(1 for record in kept if record.phone_normalized and record.phone_normalized != NO_PHONE),
        "highOpportunity": sum(1 for record in kept if record.opportunity_score >= HIGH_OPPORTUNITY_THRESHOLD),
        "averageRating": round(rating_sum / total, 2) if total else 0,
    }


def analyze(records: Iterable[EnrichedRecord]) -> Dict[str, Any]:
    kept = _with_presence(records)
    total = len(kept)

    by_priority = {priority: 0 for priority in PRIORITIES}
    presence = {presence_type: 0 for presence_type in PRESENCE_TYPES}
    categories: Counter = Counter()
    for record in kept:
        by_priority[record.web_presence.priority] = by_priority.get(record.web_presence.priority, 0) + 1
        presence[record.web_presence.type] = presence.get(record.web_presence.type, 0) + 1
        if record.category and record.category.strip():
            categories[record.category.strip()] += 1

    # Counter keeps insertion order and sorted() is stable, so ties stay first-seen first.
    ranked = sorted(categories.items(), key=lambda item: item[1], reverse=True)
    score_sum = sum(record.opportunity_score for record in kept)

    return {
        "total": total,
        "byPriority": by_priority,
        "averageScore": round(score_sum / total, 2) if total else 0,
        "topCategories": [{"category": name, "count": count} for name, count in ranked[:TOP_CATEGORIES]],
        "webPresence": presence,
    }
