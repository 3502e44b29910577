"""Sales-opportunity scoring for enriched listings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

from maps_leads.models import NO_PHONE, WebPresence

HIGH_VALUE_CATEGORIES: Tuple[str, ...] = (
    "dentist",
    "doctor",
    "clinic",
    "lawyer",
    "attorney",
    "plumber",
    "electrician",
    "contractor",
    "roofing",
    "real estate",
    "accountant",
    "chiropractor",
    "veterinar",
    "salon",
    "gym",
    "restaurant",
    "auto repair",
)

HIGH_OPPORTUNITY_THRESHOLD = 70


@dataclass(frozen=True)
class ScoringConfig:
    needs_website_points: int = 40
    phone_points: int = 20
    category_points: int = 25
    description_points: int = 10
    professional_penalty: int = 30
    description_min_length: int = 50
    high_value_categories: Tuple[str, ...] = HIGH_VALUE_CATEGORIES


class Scorable(Protocol):
    web_presence: Optional[WebPresence]
    phone_normalized: str
    category: Optional[str]
    description: Optional[str]


class OpportunityScorer:
    def __init__(self, config: Optional[ScoringConfig] = None) -> None:
        self.config = config or ScoringConfig()

    def score(self, record: Scorable) -> int:
        """Return an integer in [0, 100]; 0 when the record has no web presence."""
        presence = getattr(record, "web_presence", None)
        if presence is None:
            return 0

        cfg = self.config
        total = 0
        if presence.needs_website:
            total += cfg.needs_website_points
        if record.phone_normalized and record.phone_normalized != NO_PHONE:
            total += cfg.phone_points
        if self.is_high_value_category(record.category):
            total += cfg.category_points
        if len(record.description or "") > cfg.description_min_length:
            total += cfg.description_points
        if presence.type == "professional":
            total -= cfg.professional_penalty

        return max(0, min(100, total))

    def is_high_value_category(self, category: Optional[str]) -> bool:
        lowered = (category or "").lower()
        if not lowered:
            return False
        return any(candidate.lower() in lowered for candidate in self.config.high_value_categories)

