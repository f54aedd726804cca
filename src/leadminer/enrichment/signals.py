"""
Review Signal Extractors (Deterministic)
========================================

Pure functions deriving one enrichment signal each from a business record
or its review list. No I/O, no wall clock: anything time-dependent takes an
explicit reference time.

Every extractor accepts an empty review list and returns a well-defined
"no data" result instead of raising.

Usage:
    trend = calculate_review_trend(record.reviews)
    last = get_last_negative_review(record.reviews, now)
    keywords = extract_negative_keywords(record.reviews, analyzer)
"""

import re
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence

from .enrichment_models import (
    BusinessSize,
    ContactInfo,
    EmailProvenance,
    Engagement,
    KeywordCount,
    LastNegativeReview,
    Recency,
    ResponseRate,
    ReviewTrend,
    SizeTier,
    TrendDirection,
    TrendSeverity,
)
from ..data.data_models import BusinessRecord, Review, ensure_utc
from ..reviews.sentiment import SentimentAnalyzer
from ..rounding import round_half_up

logger = logging.getLogger(__name__)


# =============================================================================
# COMPLAINT LEXICON
# =============================================================================
# Matched as case-insensitive substrings of negative review text.
# Order matters: it breaks ties between equally frequent keywords.

DEFAULT_COMPLAINT_KEYWORDS = (
    "slow", "rude", "dirty", "cold", "wait", "poor", "terrible", "worst",
    "disappointed", "never", "avoid", "bad", "horrible", "disgusting",
    "unprofessional", "delayed", "broken", "outdated", "overpriced",
)

# =============================================================================
# THRESHOLDS
# =============================================================================

MIN_REVIEWS_FOR_TREND = 5
TREND_CHANGE_THRESHOLD = 0.3        # |change| above this = worsening/improving
CRITICAL_DECLINE_THRESHOLD = -0.5   # change below this = critical severity

# (upper bound exclusive, tier, label)
SIZE_TIERS = (
    (10, SizeTier.VERY_SMALL, "Micro (<10 reviews)"),
    (50, SizeTier.SMALL, "Small (10-50 reviews)"),
    (200, SizeTier.MEDIUM, "Medium (50-200 reviews)"),
    (500, SizeTier.LARGE, "Large (200-500 reviews)"),
)
VERY_LARGE_LABEL = "Very Large (500+ reviews)"

HIGH_ENGAGEMENT_RATE = 0.7
MODERATE_ENGAGEMENT_RATE = 0.3

VERY_RECENT_DAYS = 7
RECENT_DAYS = 30

PHONE_PATTERN = re.compile(r"(\+?1?[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}")

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def average_rating(reviews: Sequence[Review]) -> float:
    if not reviews:
        return 0.0
    return sum(r.rating for r in reviews) / len(reviews)


def extract_domain(url: Optional[str]) -> Optional[str]:
    """'https://www.foo.com/menu' -> 'foo.com'."""
    if not url:
        return None
    domain = re.sub(r"^https?://", "", url.strip(), flags=re.IGNORECASE)
    domain = re.sub(r"^www\.", "", domain, flags=re.IGNORECASE)
    domain = domain.split("/")[0].split("?")[0]
    return domain or None


# =============================================================================
# CONTACT INFO
# =============================================================================

def enrich_contact_info(record: BusinessRecord) -> ContactInfo:
    """
    Collect contact channels.

    A missing email is estimated as info@<website domain>; a missing phone
    is looked for inside the address string.
    """
    phone = record.phone
    email = record.email
    website = record.website
    email_type = EmailProvenance.EXPLICIT if email else None

    if not phone and record.address:
        match = PHONE_PATTERN.search(record.address)
        if match:
            phone = match.group(0).strip()

    if not email and website:
        domain = extract_domain(website)
        if domain:
            email = f"info@{domain}"
            email_type = EmailProvenance.ESTIMATED

    return ContactInfo(
        phone=phone,
        email=email,
        website=website,
        has_contact=bool(phone or email or website),
        email_type=email_type,
    )


# =============================================================================
# REVIEW TREND
# =============================================================================

def calculate_review_trend(reviews: Optional[Sequence[Review]]) -> ReviewTrend:
    """
    Compare the newer half of the reviews against the older half.

    Needs at least MIN_REVIEWS_FOR_TREND reviews. Undated reviews sort
    as the oldest.
    """
    if not reviews or len(reviews) < MIN_REVIEWS_FOR_TREND:
        return ReviewTrend(trend=TrendDirection.INSUFFICIENT_DATA, change=0.0)

    newest_first = sorted(reviews, key=lambda r: r.date or _OLDEST, reverse=True)
    mid = len(newest_first) // 2
    recent_avg = average_rating(newest_first[:mid])
    older_avg = average_rating(newest_first[mid:])
    change = recent_avg - older_avg

    if change < -TREND_CHANGE_THRESHOLD:
        trend = TrendDirection.WORSENING
    elif change > TREND_CHANGE_THRESHOLD:
        trend = TrendDirection.IMPROVING
    else:
        trend = TrendDirection.STABLE

    if change < CRITICAL_DECLINE_THRESHOLD:
        severity = TrendSeverity.CRITICAL
    elif change < -TREND_CHANGE_THRESHOLD:
        severity = TrendSeverity.HIGH
    else:
        severity = TrendSeverity.MODERATE

    return ReviewTrend(
        trend=trend,
        change=round_half_up(change, 2),
        recent_avg=round_half_up(recent_avg, 2),
        older_avg=round_half_up(older_avg, 2),
        severity=severity,
    )


# =============================================================================
# BUSINESS SIZE
# =============================================================================

def estimate_business_size(total_reviews: Optional[int]) -> BusinessSize:
    """Bucket a business by its lifetime review count."""
    total = max(0, total_reviews or 0)

    size, category = SizeTier.VERY_LARGE, VERY_LARGE_LABEL
    for upper, tier, label in SIZE_TIERS:
        if total < upper:
            size, category = tier, label
            break

    return BusinessSize(
        size=size,
        category=category,
        total_reviews=total,
        size_score=min(total / 10, 100),
    )


# =============================================================================
# RESPONSE RATE
# =============================================================================

def calculate_response_rate(reviews: Optional[Sequence[Review]]) -> ResponseRate:
    """
    Share of reviews the owner replied to.

    Relies entirely on the provider's owner_response flag; nothing is
    inferred when the provider does not report replies.
    """
    if not reviews:
        return ResponseRate(
            rate=0.0, responded=0, total=0, percentage="0%", engagement=Engagement.LOW,
        )

    responded = sum(1 for r in reviews if r.owner_response)
    total = len(reviews)
    rate = responded / total

    if rate > HIGH_ENGAGEMENT_RATE:
        engagement = Engagement.HIGH
    elif rate > MODERATE_ENGAGEMENT_RATE:
        engagement = Engagement.MODERATE
    else:
        engagement = Engagement.LOW

    return ResponseRate(
        rate=round_half_up(rate, 2),
        responded=responded,
        total=total,
        percentage=f"{int(round_half_up(rate * 100))}%",
        engagement=engagement,
    )


# =============================================================================
# NEGATIVE KEYWORDS
# =============================================================================

def extract_negative_keywords(
    reviews: Optional[Sequence[Review]],
    analyzer: SentimentAnalyzer,
    keywords: Sequence[str] = DEFAULT_COMPLAINT_KEYWORDS,
    limit: int = 5,
) -> List[KeywordCount]:
    """
    Most frequent complaint keywords among negative reviews.

    A review is negative when rated <= 2 or when its text scores negative
    under the analyzer (recomputed here; any stored sentiment is ignored).
    Each keyword counts at most once per review.

    Returns:
        Up to `limit` KeywordCount, count descending, ties in keyword order.
    """
    if not reviews:
        return []

    negative_texts = [
        (r.text or "").lower()
        for r in reviews
        if r.is_negative_rating or analyzer.analyze(r.text).is_negative
    ]
    if not negative_texts:
        return []

    counts: Dict[str, int] = {}
    for text in negative_texts:
        for keyword in keywords:
            if keyword.lower() in text:
                counts[keyword] = counts.get(keyword, 0) + 1

    order = {kw: i for i, kw in enumerate(keywords)}
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], order[kv[0]]))
    return [KeywordCount(word=word, count=count) for word, count in ranked[:limit]]


# =============================================================================
# LAST NEGATIVE REVIEW
# =============================================================================

def get_last_negative_review(
    reviews: Optional[Sequence[Review]],
    now: datetime,
) -> Optional[LastNegativeReview]:
    """Most recent review rated <= 2, or None when there is none."""
    negatives = [
        r for r in reviews or []
        if r.is_negative_rating and r.date is not None
    ]
    if not negatives:
        return None

    now = ensure_utc(now)
    latest = max(negatives, key=lambda r: r.date)
    days_ago = (now - latest.date) // timedelta(days=1)

    if days_ago < VERY_RECENT_DAYS:
        recency = Recency.VERY_RECENT
    elif days_ago < RECENT_DAYS:
        recency = Recency.RECENT
    else:
        recency = Recency.OLD

    return LastNegativeReview(date=latest.date, days_ago=days_ago, recency=recency)
