"""
Enrichment Data Models
======================

One dataclass per derived signal, grouped in an EnrichmentBlock and
attached to the untouched base record through EnrichedRecord.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..data.data_models import BusinessRecord, format_timestamp


class TrendDirection(str, Enum):
    WORSENING = "worsening"
    IMPROVING = "improving"
    STABLE = "stable"
    INSUFFICIENT_DATA = "insufficient_data"


class TrendSeverity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MODERATE = "moderate"


class SizeTier(str, Enum):
    VERY_SMALL = "very_small"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    VERY_LARGE = "very_large"


class Engagement(str, Enum):
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"


class Recency(str, Enum):
    VERY_RECENT = "very_recent"
    RECENT = "recent"
    OLD = "old"


class EmailProvenance(str, Enum):
    EXPLICIT = "explicit"
    ESTIMATED = "estimated"


@dataclass(frozen=True)
class ContactInfo:
    phone: Optional[str]
    email: Optional[str]
    website: Optional[str]
    has_contact: bool
    email_type: Optional[EmailProvenance] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "phone": self.phone,
            "email": self.email,
            "website": self.website,
            "hasContact": self.has_contact,
        }
        if self.email_type is not None:
            data["emailType"] = self.email_type.value
        return data


@dataclass(frozen=True)
class ReviewTrend:
    """Newer-half vs older-half rating comparison."""
    trend: TrendDirection
    change: float = 0.0
    recent_avg: Optional[float] = None
    older_avg: Optional[float] = None
    severity: Optional[TrendSeverity] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"trend": self.trend.value, "change": self.change}
        if self.trend != TrendDirection.INSUFFICIENT_DATA:
            data["recentAvg"] = self.recent_avg
            data["olderAvg"] = self.older_avg
            data["trendScore"] = self.severity.value if self.severity else None
        return data


@dataclass(frozen=True)
class BusinessSize:
    size: SizeTier
    category: str
    total_reviews: int
    size_score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "size": self.size.value,
            "category": self.category,
            "totalReviews": self.total_reviews,
            "sizeScore": self.size_score,
        }


@dataclass(frozen=True)
class ResponseRate:
    rate: float
    responded: int
    total: int
    percentage: str
    engagement: Engagement

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rate": self.rate,
            "responded": self.responded,
            "total": self.total,
            "percentage": self.percentage,
            "engagement": self.engagement.value,
        }


@dataclass(frozen=True)
class KeywordCount:
    word: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"word": self.word, "count": self.count}


@dataclass(frozen=True)
class LastNegativeReview:
    date: datetime
    days_ago: int
    recency: Recency

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": format_timestamp(self.date),
            "daysAgo": self.days_ago,
            "recency": self.recency.value,
        }


@dataclass(frozen=True)
class EnrichmentBlock:
    """
    All derived signals for one business.

    Every sub-block is optional so partially enriched records (e.g. loaded
    from an older file) still flow through scoring and export.
    """
    contact_info: Optional[ContactInfo] = None
    review_trend: Optional[ReviewTrend] = None
    business_size: Optional[BusinessSize] = None
    response_rate: Optional[ResponseRate] = None
    negative_review_keywords: Tuple[KeywordCount, ...] = field(default_factory=tuple)
    last_negative_review: Optional[LastNegativeReview] = None

    def to_dict(self) -> Dict[str, Any]:
        def dump(block):
            return block.to_dict() if block is not None else None

        return {
            "contactInfo": dump(self.contact_info),
            "reviewTrend": dump(self.review_trend),
            "businessSize": dump(self.business_size),
            "responseRate": dump(self.response_rate),
            "negativeReviewKeywords": [k.to_dict() for k in self.negative_review_keywords],
            "lastNegativeReview": dump(self.last_negative_review),
        }


@dataclass(frozen=True)
class EnrichedRecord:
    """Base record plus its enrichment block."""
    base: BusinessRecord
    enrichment: EnrichmentBlock

    @property
    def id(self) -> str:
        return self.base.id

    @property
    def name(self) -> str:
        return self.base.name

    def to_dict(self) -> Dict[str, Any]:
        data = self.base.to_dict()
        data["enrichment"] = self.enrichment.to_dict()
        return data
