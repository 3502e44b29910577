"""Utilities for transforming rendered Google Maps result cards into RawRecord objects."""

import logging
import re
from typing import Any, List, Optional

from bs4 import BeautifulSoup, Tag

from maps_leads.models import RawRecord, safe_float, safe_int

logger = logging.getLogger(__name__)

CARD_SELECTOR = ".Nv2PK"
PHONE_TEXT_REGEX = re.compile(r"^\+?\(?\d{1,4}\)?[\d\s.-]{7,}$")
HOURS_PREFIXES = ("open", "closed", "opens", "closes")
_SEPARATOR = "·"


def parse_listing_cards(html: str) -> List[RawRecord]:
    """Extract every listing card in a results page snapshot, in document order."""
    if not html:
        return []

    soup = BeautifulSoup(html, "html.parser")
    records = [_parse_card(card) for card in soup.select(CARD_SELECTOR)]
    logger.debug("Parsed %d listing cards from snapshot", len(records))
    return records


def _parse_card(card: Tag) -> RawRecord:
    link_node = card.select_one("a.hfpxzc[href]")
    website_node = card.select_one("a.lcr4fd[href]")

    return RawRecord(
        title=_text(card.select_one(".qBF1Pd")),
        address=_clean(_text(card.select_one(".W4Efsd:last-child > .W4Efsd:nth-of-type(1) > span:last-child"))),
        description=_clean(_text(card.select_one(".W4Efsd:last-child > .W4Efsd:nth-of-type(2)")), first_only=True),
        website=_strip_or_none(website_node.get("href")) if website_node else None,
        category=_clean(_text(card.select_one(".W4Efsd:last-child > .W4Efsd:nth-of-type(1) > span:first-child"))),
        phone_raw=_find_span_text(card, lambda text: bool(PHONE_TEXT_REGEX.match(text))),
        rating=safe_float(_text(card.select_one(".MW4etd"))),
        review_count=safe_int(_text(card.select_one(".UY7F9"))),
        hours=_find_span_text(card, lambda text: text.lower().startswith(HOURS_PREFIXES)),
        link=_strip_or_none(link_node.get("href")) if link_node else None,
    )


def _find_span_text(card: Tag, predicate) -> Optional[str]:
    for span in card.select(".W4Efsd span"):
        text = _clean(span.get_text(" ", strip=True))
        if text and predicate(text):
            return text
    return None


def _text(node: Optional[Tag]) -> Optional[str]:
    if node is None:
        return None
    return node.get_text(" ", strip=True)


def _clean(value: Optional[str], *, first_only: bool = False) -> Optional[str]:
    """Drop the middle-dot separators Maps puts between inline fields."""
    if value is None:
        return None
    cleaned = value.replace(_SEPARATOR, "", 1) if first_only else value.replace(_SEPARATOR, "")
    return _strip_or_none(re.sub(r"\s+", " ", cleaned))


def _strip_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    value_str = str(value).strip()
    return value_str or None
