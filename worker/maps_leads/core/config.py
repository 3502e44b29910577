"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

from maps_leads.core.errors import ConfigError

logger = logging.getLogger(__name__)

STAGNATION_MODES = ("strict", "tolerant")
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 11_10) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/100.0.4882.194 Safari/537.36"
)


@dataclass(frozen=True)
class Settings:
    port: int = 3000
    default_phone_region: str = "US"
    poll_interval_ms: int = 2000
    max_attempts: int = 3
    max_polls: int = 200
    stagnation_mode: str = "tolerant"
    headless: bool = True
    navigation_timeout_ms: int = 60000
    settle_ms: int = 5000
    user_agent: str = DEFAULT_USER_AGENT


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {value}")
    return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    region_raw = os.getenv("DEFAULT_PHONE_REGION")
    default_phone_region = region_raw.strip().upper() if region_raw and region_raw.strip() else "US"

    stagnation_mode = (os.getenv("STAGNATION_MODE") or "tolerant").strip().lower()
    if stagnation_mode not in STAGNATION_MODES:
        raise ConfigError(f"STAGNATION_MODE must be one of {', '.join(STAGNATION_MODES)}, got {stagnation_mode!r}")

    max_polls = _get_int("COLLECT_MAX_POLLS", 200)
    if max_polls < 1:
        raise ConfigError("COLLECT_MAX_POLLS must be at least 1")

    max_attempts = _get_int("COLLECT_MAX_ATTEMPTS", 3)
    if max_attempts == 0:
        logger.warning("COLLECT_MAX_ATTEMPTS=0; collection stops after the first stagnant poll.")

    return Settings(
        port=_get_int("PORT", 3000),
        default_phone_region=default_phone_region,
        poll_interval_ms=_get_int("POLL_INTERVAL_MS", 2000),
        max_attempts=max_attempts,
        max_polls=max_polls,
        stagnation_mode=stagnation_mode,
        headless=os.getenv("HEADLESS", "true").lower() in {"1", "true", "yes"},
        navigation_timeout_ms=_get_int("NAVIGATION_TIMEOUT_MS", 60000),
        settle_ms=_get_int("SETTLE_MS", 5000),
        user_agent=os.getenv("MAPS_USER_AGENT") or DEFAULT_USER_AGENT,
    )
