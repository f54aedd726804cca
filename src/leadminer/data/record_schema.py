"""
Raw Record Schemas
==================

Pydantic models validating loosely-shaped business records coming from a
scraping provider or from a previously saved JSON file, before they are
frozen into data_models.BusinessRecord.

Missing or malformed data is tolerated (no reviews, non-object review
entries, unparseable counts or dates); only the identity fields (id, name)
are required.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .data_models import BusinessRecord, LeadSource, Review
from ..errors import RecordValidationError

logger = logging.getLogger(__name__)


_SOURCE_PREFIXES = {
    "gm_": LeadSource.GOOGLE_MAPS,
    "ta_": LeadSource.TRIPADVISOR,
}


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)):
        # Epoch milliseconds (JS Date.now())
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Unparseable date '{value}', treating as missing")
        return None


class RawReview(BaseModel):
    """Review as emitted by a provider."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    rating: Optional[int] = None
    text: Optional[str] = None
    date: Optional[datetime] = None
    owner_response: Optional[Any] = Field(default=None, alias="ownerResponse")
    response: Optional[Any] = None

    @field_validator("rating", mode="before")
    @classmethod
    def clamp_rating(cls, value: Any) -> Optional[int]:
        if value is None or value == "":
            return None
        try:
            rating = int(round(float(value)))
        except (TypeError, ValueError, OverflowError):
            return None
        return max(1, min(5, rating))

    @field_validator("text", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return str(value)

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, value: Any) -> Optional[datetime]:
        return _parse_datetime(value)

    @property
    def has_owner_response(self) -> bool:
        return bool(self.owner_response or self.response)

    def to_review(self) -> Review:
        return Review(
            rating=self.rating,
            text=self.text or "",
            date=self.date,
            owner_response=self.has_owner_response,
        )


class RawBusinessRecord(BaseModel):
    """Business record as emitted by a provider or loaded from disk."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    name: str
    source: Optional[LeadSource] = None
    rating: Optional[float] = None
    total_reviews: Optional[int] = Field(default=None, alias="totalReviews")
    category: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    email: Optional[str] = None
    url: Optional[str] = None
    scraped_at: Optional[datetime] = Field(default=None, alias="scrapedAt")
    reviews: Optional[List[RawReview]] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("rating", mode="before")
    @classmethod
    def lenient_rating(cls, value: Any) -> Optional[float]:
        try:
            return float(value) if value not in (None, "") else None
        except (TypeError, ValueError):
            return None

    @field_validator("total_reviews", mode="before")
    @classmethod
    def lenient_total(cls, value: Any) -> Optional[int]:
        try:
            return int(float(value)) if value not in (None, "") else None
        except (TypeError, ValueError, OverflowError):
            return None

    @field_validator("category", "address", "url", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return str(value)

    @field_validator("reviews", mode="before")
    @classmethod
    def drop_malformed_reviews(cls, value: Any) -> Optional[List[Any]]:
        if value is None:
            return None
        if not isinstance(value, list):
            logger.debug(f"Ignoring non-list reviews field ({type(value).__name__})")
            return None
        kept = [r for r in value if isinstance(r, dict)]
        if len(kept) < len(value):
            logger.debug(f"Dropped {len(value) - len(kept)} malformed review entries")
        return kept

    @field_validator("scraped_at", mode="before")
    @classmethod
    def parse_scraped_at(cls, value: Any) -> Optional[datetime]:
        return _parse_datetime(value)

    @field_validator("phone", "website", "email", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Optional[str]:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return str(value)

    def resolve_source(self) -> LeadSource:
        if self.source is not None:
            return self.source
        for prefix, source in _SOURCE_PREFIXES.items():
            if self.id.startswith(prefix):
                return source
        return LeadSource.DEMO

    def to_record(self, now: Optional[datetime] = None) -> BusinessRecord:
        reviews = []
        for raw in self.reviews or []:
            if raw.rating is None:
                logger.debug(f"Dropping review without rating for {self.id}")
                continue
            reviews.append(raw.to_review())

        return BusinessRecord(
            id=self.id,
            source=self.resolve_source(),
            name=self.name,
            rating=self.rating or 0.0,
            total_reviews=self.total_reviews or 0,
            category=self.category or "Business",
            address=self.address or "",
            url=self.url or "",
            scraped_at=self.scraped_at or now or datetime.now(timezone.utc),
            phone=self.phone,
            website=self.website,
            email=self.email,
            reviews=tuple(reviews),
        )


def parse_record(payload: Dict[str, Any], now: Optional[datetime] = None) -> BusinessRecord:
    """
    Validate one raw payload and freeze it into a BusinessRecord.

    Raises:
        RecordValidationError: If identity fields are missing or malformed
    """
    try:
        raw = RawBusinessRecord.model_validate(payload)
    except ValidationError as e:
        ident = payload.get("id", "?") if isinstance(payload, dict) else "?"
        raise RecordValidationError(f"Invalid business record '{ident}': {e}") from e
    return raw.to_record(now=now)


def parse_records(
    payloads: Iterable[Dict[str, Any]],
    now: Optional[datetime] = None,
) -> List[BusinessRecord]:
    """Validate a sequence of raw payloads, preserving order."""
    return [parse_record(p, now=now) for p in payloads]
