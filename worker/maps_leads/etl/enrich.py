"""Enrichment pipeline: phone validation, web presence classification, scoring, timestamping."""

from __future__ import annotations

import dataclasses
import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from maps_leads.core.phone import PhoneValidator
from maps_leads.core.scoring import OpportunityScorer
from maps_leads.core.web_presence import WebPresenceClassifier
from maps_leads.models import EnrichedRecord, RawRecord

logger = logging.getLogger(__name__)


class EnrichmentPipeline:
    def __init__(
        self,
        *,
        validator: Optional[PhoneValidator] = None,
        classifier: Optional[WebPresenceClassifier] = None,
        scorer: Optional[OpportunityScorer] = None,
    ) -> None:
        self.validator = validator or PhoneValidator()
        self.classifier = classifier or WebPresenceClassifier()
        self.scorer = scorer or OpportunityScorer()

    def enrich(self, records: Iterable[RawRecord], *, extracted_at: Optional[datetime] = None) -> List[EnrichedRecord]:
        """Enrich every titled record; all records of one run share the same timestamp."""
        extracted_at = extracted_at or datetime.now(timezone.utc)
        enriched: List[EnrichedRecord] = []
        skipped = 0

        for raw in records:
            if not raw.title or not raw.title.strip():
                skipped += 1
                continue
            enriched.append(self.enrich_one(raw, extracted_at))

        if skipped:
            logger.info("Discarded %d untitled records before enrichment", skipped)
        logger.info("Enriched %d records", len(enriched))
        return enriched

    def enrich_one(self, raw: RawRecord, extracted_at: datetime) -> EnrichedRecord:
        record = EnrichedRecord.from_raw(
            raw,
            phone_normalized=self.validator.validate(raw.phone_raw),
            web_presence=self.classifier.classify(raw.website),
            opportunity_score=0,
            extracted_at=extracted_at,
        )
        return dataclasses.replace(record, opportunity_score=self.scorer.score(record))
