"""Classify a listing's website into a web presence category."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from maps_leads.models import NO_WEBSITE, WebPresence

SOCIAL_PLATFORMS: Tuple[str, ...] = (
    "facebook.com",
    "://fb.com/",
    "://www.fb.com/",
    "instagram.com",
    "twitter.com",
    "linkedin.com",
    "tiktok.com",
    "youtube.com",
    "pinterest.com",
    "://wa.me/",
)

SITE_BUILDERS: Tuple[str, ...] = (
    "wix.com",
    "wixsite.com",
    "squarespace.com",
    "wordpress.com",
    "weebly.com",
    "godaddysites.com",
    "business.site",
    "sites.google.com",
    "myshopify.com",
    "jimdo",
    "webflow.io",
    "carrd.co",
)


@dataclass(frozen=True)
class PresenceConfig:
    social_platforms: Tuple[str, ...] = SOCIAL_PLATFORMS
    site_builders: Tuple[str, ...] = SITE_BUILDERS
    no_website: str = NO_WEBSITE


class WebPresenceClassifier:
    """Deterministic classification, first match wins: none, social_only, basic_platform, professional."""

    def __init__(self, config: Optional[PresenceConfig] = None) -> None:
        self.config = config or PresenceConfig()

    def classify(self, website: Optional[str]) -> WebPresence:
        value = (website or "").strip()
        if not value or value.lower() == self.config.no_website.lower():
            return WebPresence(type="none", needs_website=True, priority="high")

        # Short hosts are listed as "://host/" so they only match as a whole host; the
        # trailing slash lets them match a bare "https://host" too.
        lowered = value.lower() + "/"
        if any(platform.lower() in lowered for platform in self.config.social_platforms):
            return WebPresence(type="social_only", needs_website=True, priority="high")

        if any(builder.lower() in lowered for builder in self.config.site_builders):
            return WebPresence(type="basic_platform", needs_website=False, priority="medium")

        return WebPresence(type="professional", needs_website=False, priority="low")
