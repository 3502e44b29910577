"""Playwright-backed listing source for the Google Maps search results feed."""

from __future__ import annotations

import logging
from typing import List, Optional
from urllib.parse import quote

from playwright.sync_api import Error as PlaywrightError, sync_playwright

from maps_leads.core.config import Settings, get_settings
from maps_leads.core.errors import CollaboratorError
from maps_leads.etl.transform import parse_listing_cards
from maps_leads.models import RawRecord

logger = logging.getLogger(__name__)

SEARCH_URL = "https://www.google.com/maps/search/{query}"
FEED_SELECTOR = ".m6QErb[aria-label]"
BROWSER_ARGS = ["--disable-setuid-sandbox", "--no-sandbox"]

_EXTENT_SCRIPT = "(selector) => { const feed = document.querySelector(selector); return feed ? feed.scrollHeight : 0; }"
_ADVANCE_SCRIPT = "(selector) => { const feed = document.querySelector(selector); if (feed) { feed.scrollTo(0, feed.scrollHeight); } }"


class MapsPage:
    """One browser session showing the Maps results for a single query.

    Implements the ``ListingSource`` trio: ``snapshot`` parses the rendered
    cards, ``extent`` reads the feed's scrollHeight and ``advance`` scrolls the
    feed to the bottom so Maps loads the next batch.
    """

    def __init__(self, query: str, *, settings: Optional[Settings] = None, feed_selector: str = FEED_SELECTOR) -> None:
        self.query = query
        self.settings = settings or get_settings()
        self.feed_selector = feed_selector
        self._playwright = None
        self._browser = None
        self._page = None

    def open(self) -> "MapsPage":
        url = SEARCH_URL.format(query=quote(self.query))
        try:
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(headless=self.settings.headless, args=BROWSER_ARGS)
            self._page = self._browser.new_page(user_agent=self.settings.user_agent)
            logger.info("Opening %s", url)
            self._page.goto(url, wait_until="domcontentloaded", timeout=self.settings.navigation_timeout_ms)
            self._page.wait_for_timeout(self.settings.settle_ms)
        except PlaywrightError as exc:
            self.close()
            raise CollaboratorError(f"Failed to open Maps results for {self.query!r}: {exc}") from exc
        return self

    def snapshot(self) -> List[RawRecord]:
        try:
            html = self._require_page().content()
        except PlaywrightError as exc:
            raise CollaboratorError(f"Failed to read Maps results: {exc}") from exc
        return parse_listing_cards(html)

    def extent(self) -> float:
        try:
            value = self._require_page().evaluate(_EXTENT_SCRIPT, self.feed_selector)
        except PlaywrightError as exc:
            raise CollaboratorError(f"Failed to measure Maps results feed: {exc}") from exc
        return float(value or 0)

    def advance(self) -> None:
        try:
            self._require_page().evaluate(_ADVANCE_SCRIPT, self.feed_selector)
        except PlaywrightError as exc:
            raise CollaboratorError(f"Failed to scroll Maps results feed: {exc}") from exc

    def _require_page(self):
        if self._page is None:
            raise CollaboratorError("Maps page is not open")
        return self._page

    def close(self) -> None:
        if self._browser is not None:
            self._browser.close()
            self._browser = None
            self._page = None
        if self._playwright is not None:
            self._playwright.stop()
            self._playwright = None

    def __enter__(self) -> "MapsPage":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: D401
        self.close()
