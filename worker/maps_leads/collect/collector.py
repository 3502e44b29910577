"""Incremental collection loop over a "load more on scroll" listing source."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import List, Protocol

from maps_leads.core.config import STAGNATION_MODES
from maps_leads.core.errors import CollaboratorError
from maps_leads.models import RawRecord

logger = logging.getLogger(__name__)

CONVERGED = "converged"
STAGNANT = "stagnant"
EXHAUSTED = "exhausted"

DEFAULT_MAX_POLLS = 200


class ListingSource(Protocol):
    """Collaborator wrapping a live result list (one session per collection)."""

    def snapshot(self) -> List[RawRecord]:
        """Return the full set of records currently visible."""

    def extent(self) -> float:
        """Return a scalar measure of how much content has loaded."""

    def advance(self) -> None:
        """Ask the source to load more content."""

    def close(self) -> None:
        """Release the underlying session."""


@dataclass
class CollectionResult:
    outcome: str
    records: List[RawRecord] = field(default_factory=list)
    polls: int = 0
    stagnant_attempts: int = 0

    def __len__(self) -> int:
        return len(self.records)


class ListCollector:
    """Poll a listing source until it yields enough records, stalls, or runs out of attempts.

    Each poll replaces the working record set with a fresh snapshot; records are
    never merged across polls because the source may reorder or regenerate them.

    ``strict`` mode stops on the first poll where the extent did not grow.
    ``tolerant`` mode counts such polls and gives up after ``max_attempts`` of
    them, since slow loads can produce a false "no new content" reading. Growth
    never counts against the cap. ``max_polls`` bounds the loop even for a
    source whose extent grows forever without ever reaching the target.

    The collector owns the source: ``collect`` closes it on every exit path.
    """

    def __init__(self, source: ListingSource, *, stagnation_mode: str = "tolerant", max_polls: int = DEFAULT_MAX_POLLS) -> None:
        if stagnation_mode not in STAGNATION_MODES:
            raise ValueError(f"stagnation_mode must be one of {', '.join(STAGNATION_MODES)}")
        if max_polls < 1:
            raise ValueError("max_polls must be at least 1")
        self.source = source
        self.stagnation_mode = stagnation_mode
        self.max_polls = max_polls

    def collect(self, target_count: int, poll_interval_ms: int, max_attempts: int) -> CollectionResult:
        try:
            return self._poll(target_count, poll_interval_ms, max_attempts)
        except CollaboratorError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise CollaboratorError(f"Listing source failed: {exc}") from exc
        finally:
            self._release()

    def _poll(self, target_count: int, poll_interval_ms: int, max_attempts: int) -> CollectionResult:
        previous_extent = self.source.extent()
        records: List[RawRecord] = []
        attempts = 0
        polls = 0

        while True:
            records = list(self.source.snapshot())
            polls += 1
            logger.debug("Poll %d: %d records (target=%d, extent=%s)", polls, len(records), target_count, previous_extent)

            if len(records) >= target_count:
                logger.info("Collection converged with %d records after %d polls", len(records), polls)
                return CollectionResult(CONVERGED, records, polls, attempts)

            if polls >= self.max_polls:
                logger.warning("Collection hit the poll ceiling (%d) with %d records", self.max_polls, len(records))
                return CollectionResult(EXHAUSTED, records, polls, attempts)

            self.source.advance()
            time.sleep(poll_interval_ms / 1000)
            current_extent = self.source.extent()

            if current_extent == previous_extent:
                if self.stagnation_mode == "strict":
                    logger.info("Source stopped growing; returning %d records (strict mode)", len(records))
                    return CollectionResult(STAGNANT, records, polls, attempts)

                attempts += 1
                logger.debug("No new content (attempt %d/%d)", attempts, max_attempts)
                if attempts >= max_attempts:
                    logger.info("Collection exhausted %d stagnant attempts with %d records", attempts, len(records))
                    return CollectionResult(EXHAUSTED, records, polls, attempts)

            previous_extent = current_extent

    def _release(self) -> None:
        try:
            self.source.close()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to close listing source: %s", exc)
