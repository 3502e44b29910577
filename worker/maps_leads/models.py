"""Core data models shared by the listing collection and enrichment pipeline."""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, Dict, Optional

NO_PHONE = "No phone available"
NO_WEBSITE = "No website available"

PRESENCE_TYPES = ("none", "social_only", "basic_platform", "professional")
PRIORITIES = ("high", "medium", "low")


@dataclass(slots=True)
class RawRecord:
    """One listing card as read from a single snapshot of the result feed."""

    title: Optional[str] = None
    address: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    category: Optional[str] = None
    phone_raw: Optional[str] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    hours: Optional[str] = None
    link: Optional[str] = None


@dataclass(frozen=True, slots=True)
class WebPresence:
    type: str
    needs_website: bool
    priority: str

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "needsWebsite": self.needs_website, "priority": self.priority}

    @classmethod
    def from_dict(cls, payload: Any) -> Optional["WebPresence"]:
        if not isinstance(payload, dict):
            return None
        presence_type = payload.get("type")
        priority = payload.get("priority")
        needs_website = payload.get("needsWebsite")
        if presence_type not in PRESENCE_TYPES or priority not in PRIORITIES or not isinstance(needs_website, bool):
            return None
        return cls(type=presence_type, needs_website=needs_website, priority=priority)


_RAW_KEYS = {
    "title": "title",
    "address": "address",
    "description": "description",
    "website": "website",
    "category": "category",
    "phone_raw": "phoneRaw",
    "rating": "rating",
    "review_count": "reviewCount",
    "hours": "hours",
    "link": "link",
}


@dataclass(frozen=True, slots=True)
class EnrichedRecord:
    """A raw record after phone validation, web presence classification and scoring."""

    title: str
    phone_normalized: str
    web_presence: Optional[WebPresence]
    opportunity_score: int
    extracted_at: Optional[datetime] = None
    address: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    category: Optional[str] = None
    phone_raw: Optional[str] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    hours: Optional[str] = None
    link: Optional[str] = None

    @classmethod
    def from_raw(
        cls,
        raw: RawRecord,
        *,
        phone_normalized: str,
        web_presence: WebPresence,
        opportunity_score: int,
        extracted_at: datetime,
    ) -> "EnrichedRecord":
        values = {field.name: getattr(raw, field.name) for field in fields(RawRecord)}
        return cls(
            phone_normalized=phone_normalized,
            web_presence=web_presence,
            opportunity_score=opportunity_score,
            extracted_at=extracted_at,
            **values,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize into the camelCase JSON shape returned to API callers."""
        payload: Dict[str, Any] = {key: getattr(self, attr) for attr, key in _RAW_KEYS.items()}
        payload["phoneNormalized"] = self.phone_normalized
        payload["webPresence"] = self.web_presence.to_dict() if self.web_presence else None
        payload["opportunityScore"] = self.opportunity_score
        payload["extractedAt"] = self.extracted_at.isoformat() if self.extracted_at else None
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "EnrichedRecord":
        """Rebuild a record from its JSON shape; a malformed webPresence becomes None."""
        values = {attr: payload.get(key) for attr, key in _RAW_KEYS.items()}
        values["title"] = str(values["title"] or "")
        values["rating"] = safe_float(values["rating"])
        values["review_count"] = safe_int(values["review_count"])

        score = safe_int(payload.get("opportunityScore")) or 0
        extracted_raw = payload.get("extractedAt")
        extracted_at = None
        if isinstance(extracted_raw, str):
            try:
                extracted_at = datetime.fromisoformat(extracted_raw)
            except ValueError:
                extracted_at = None

        return cls(
            phone_normalized=str(payload.get("phoneNormalized") or NO_PHONE),
            web_presence=WebPresence.from_dict(payload.get("webPresence")),
            opportunity_score=score,
            extracted_at=extracted_at,
            **values,
        )


def safe_float(value: Any) -> Optional[float]:
    """Lenient float parse for scraped or caller-supplied numbers; accepts a decimal comma."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().replace(",", ".")
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def safe_int(value: Any) -> Optional[int]:
    """Lenient int parse; strings like "(1,234)" drop their brackets and thousands separators."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        value = value.strip().strip("()").replace(",", "").replace(" ", "")
        if not value:
            return None
    number = safe_float(value)
    return int(number) if number is not None else None
