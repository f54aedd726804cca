"""
LeadMiner Data Models
=====================

Immutable dataclasses for the business records flowing through the pipeline.
Raw provider payloads are validated by record_schema and converted into
these models; later stages layer their results on top by composition
(see enrichment_models.EnrichedRecord and scoring.lead_scorer.ScoredRecord).

Models:
    - LeadSource: Provider tag
    - Review: Single customer review
    - BusinessRecord: Business listing with its scraped reviews
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple, Dict, Any

from ..reviews.review_models import SentimentResult


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC so comparisons with 'now' are safe."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """ISO-8601 with a trailing Z, matching what providers emit."""
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


# Reviews rated at or below this count as negative
NEGATIVE_RATING_MAX = 2


class LeadSource(str, Enum):
    """Where a business record was acquired."""
    GOOGLE_MAPS = "google_maps"
    TRIPADVISOR = "tripadvisor"
    DEMO = "demo"


@dataclass(frozen=True)
class Review:
    """
    A single customer review.

    owner_response is only as good as the provider: when the scraper never
    reports replies it stays False for every review.
    """
    rating: int
    text: str = ""
    date: Optional[datetime] = None
    owner_response: bool = False
    sentiment: Optional[SentimentResult] = None

    def __post_init__(self):
        object.__setattr__(self, "date", ensure_utc(self.date))

    @property
    def is_negative_rating(self) -> bool:
        return self.rating <= NEGATIVE_RATING_MAX

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "rating": self.rating,
            "text": self.text,
            "date": format_timestamp(self.date),
        }
        if self.owner_response:
            data["ownerResponse"] = True
        if self.sentiment is not None:
            data["sentiment"] = self.sentiment.to_dict()
        return data


@dataclass(frozen=True)
class BusinessRecord:
    """Business listing as acquired from a provider or the demo generator."""
    id: str
    source: LeadSource
    name: str
    rating: float
    total_reviews: int
    category: str
    address: str
    url: str
    scraped_at: datetime
    phone: Optional[str] = None
    website: Optional[str] = None
    email: Optional[str] = None
    reviews: Tuple[Review, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "scraped_at", ensure_utc(self.scraped_at))
        object.__setattr__(self, "reviews", tuple(self.reviews))
        object.__setattr__(self, "total_reviews", max(0, int(self.total_reviews)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source.value,
            "name": self.name,
            "rating": self.rating,
            "totalReviews": self.total_reviews,
            "category": self.category,
            "address": self.address,
            "phone": self.phone,
            "website": self.website,
            "email": self.email,
            "reviews": [r.to_dict() for r in self.reviews],
            "url": self.url,
            "scrapedAt": format_timestamp(self.scraped_at),
        }
