"""
Lead Enricher
=============

Applies every signal extractor to every business record and layers the
resulting EnrichmentBlock on top of the (untouched) input record.

Usage:
    enricher = LeadEnricher()
    enriched = enricher.enrich_leads(records, now=run_started_at)
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from .enrichment_models import EnrichedRecord, EnrichmentBlock
from .signals import (
    DEFAULT_COMPLAINT_KEYWORDS,
    calculate_response_rate,
    calculate_review_trend,
    enrich_contact_info,
    estimate_business_size,
    extract_negative_keywords,
    get_last_negative_review,
)
from ..data.data_models import BusinessRecord, ensure_utc
from ..reviews.sentiment import SentimentAnalyzer

logger = logging.getLogger(__name__)


class LeadEnricher:
    """
    Stage 1: derive review signals for each business.

    Records are independent of each other; the output keeps input order.
    """

    PROGRESS_EVERY = 10

    def __init__(
        self,
        analyzer: Optional[SentimentAnalyzer] = None,
        keywords: Optional[Sequence[str]] = None,
    ):
        self.analyzer = analyzer or SentimentAnalyzer()
        self.keywords = tuple(keywords) if keywords is not None else DEFAULT_COMPLAINT_KEYWORDS

    def enrich_lead(self, record: BusinessRecord, now: datetime) -> EnrichedRecord:
        """Build the enrichment block for one record."""
        now = ensure_utc(now)
        reviews = record.reviews

        enrichment = EnrichmentBlock(
            contact_info=enrich_contact_info(record),
            review_trend=calculate_review_trend(reviews),
            business_size=estimate_business_size(record.total_reviews),
            response_rate=calculate_response_rate(reviews),
            negative_review_keywords=tuple(
                extract_negative_keywords(reviews, self.analyzer, self.keywords)
            ),
            last_negative_review=get_last_negative_review(reviews, now),
        )

        # Sentiment is always derived here, whatever the provider sent
        scored_reviews = tuple(
            replace(r, sentiment=self.analyzer.analyze(r.text)) for r in reviews
        )
        base = replace(record, reviews=scored_reviews)

        logger.debug(
            f"Enriched {record.id}: trend={enrichment.review_trend.trend.value}",
            extra={"lead_id": record.id},
        )

        return EnrichedRecord(base=base, enrichment=enrichment)

    def enrich_leads(
        self,
        records: Sequence[BusinessRecord],
        now: Optional[datetime] = None,
    ) -> List[EnrichedRecord]:
        """
        Enrich a full batch against a single reference time.

        Args:
            records: Business records in acquisition order
            now: Reference time for recency signals (default: current UTC time)

        Returns:
            Enriched records, same order as the input
        """
        now = ensure_utc(now) if now else datetime.now(timezone.utc)
        total = len(records)
        logger.info(f"Enriching {total} leads...")

        enriched = []
        for idx, record in enumerate(records, 1):
            enriched.append(self.enrich_lead(record, now))
            if idx % self.PROGRESS_EVERY == 0:
                logger.info(f"Processed {idx}/{total}...")

        logger.info(f"Enrichment complete: {len(enriched)} leads")
        return enriched
