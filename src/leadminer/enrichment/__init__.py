"""
LeadMiner Enrichment
====================

Deterministic review signals for business records.

Modules:
    enrichment_models - Signal dataclasses, EnrichmentBlock, EnrichedRecord
    signals           - Pure extractor functions + complaint lexicon
    enricher          - LeadEnricher, applies all extractors to a batch
"""

from .enrichment_models import (
    ContactInfo,
    ReviewTrend,
    BusinessSize,
    ResponseRate,
    KeywordCount,
    LastNegativeReview,
    EnrichmentBlock,
    EnrichedRecord,
    TrendDirection,
    TrendSeverity,
)
from .signals import DEFAULT_COMPLAINT_KEYWORDS
from .enricher import LeadEnricher

__all__ = [
    "ContactInfo",
    "ReviewTrend",
    "BusinessSize",
    "ResponseRate",
    "KeywordCount",
    "LastNegativeReview",
    "EnrichmentBlock",
    "EnrichedRecord",
    "TrendDirection",
    "TrendSeverity",
    "DEFAULT_COMPLAINT_KEYWORDS",
    "LeadEnricher",
]
