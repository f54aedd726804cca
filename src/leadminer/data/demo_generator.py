"""
Synthetic demo leads.

Generates realistic-looking poorly rated businesses so the whole pipeline
can run without an Apify token. Output is fully determined by the seed
and the reference time.
"""

import logging
import re
from datetime import datetime, timedelta, timezone
from random import Random
from typing import List, Optional

from .data_models import BusinessRecord, LeadSource, Review

logger = logging.getLogger(__name__)


ADJECTIVES = [
    "Sunrise", "Maple", "Silver", "Golden", "Copper",
    "Urban", "Coastal", "Evergreen", "River", "Harbor",
]
NOUNS = [
    "Bistro", "Cafe", "Auto", "Dental", "Fitness",
    "Grill", "Hotel", "Salon", "Bakery", "Market",
]
CATEGORIES = [
    "Restaurant", "Cafe", "Auto Repair", "Dentist", "Gym",
    "Hotel", "Salon", "Bakery", "Market", "Barber",
]
CITIES = [
    "Austin, TX", "Denver, CO", "Seattle, WA", "Miami, FL", "Chicago, IL",
    "Portland, OR", "San Diego, CA", "Nashville, TN", "Phoenix, AZ", "Boston, MA",
]
STREETS = ["Main St", "Market St", "Broadway", "2nd Ave", "Pine St", "Oak St", "Maple Ave", "Sunset Blvd"]

NEGATIVE_TEXTS = [
    "Long wait and the service was rude.",
    "Not worth the price. Very disappointed.",
    "Dirty tables and cold food.",
    "Terrible experience. Would not return.",
    "Staff was unhelpful and slow.",
]
NEUTRAL_TEXTS = [
    "Okay overall but nothing special.",
    "Average visit, some things could improve.",
    "Decent but the service was inconsistent.",
    "Fine for a quick stop.",
    "Mixed experience, some good some bad.",
]
POSITIVE_TEXTS = [
    "Friendly staff and quick service.",
    "Great value for the price.",
    "Pleasant atmosphere and tasty food.",
    "Solid experience, would come back.",
    "Good service and clean space.",
]

# Rating pools by base rating band: (upper bound, pool)
RATING_POOLS = (
    (2.0, (1, 1, 2, 2, 3)),
    (2.6, (1, 2, 2, 3, 3)),
)
DEFAULT_RATING_POOL = (2, 3, 3, 3, 4)

MAX_REVIEW_AGE_DAYS = 120


def slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def review_text_for_rating(rng: Random, rating: int) -> str:
    if rating <= 2:
        return rng.choice(NEGATIVE_TEXTS)
    if rating == 3:
        return rng.choice(NEUTRAL_TEXTS)
    return rng.choice(POSITIVE_TEXTS)


def generate_phone(rng: Random) -> str:
    area = rng.randint(200, 989)
    prefix = rng.randint(200, 999)
    line = rng.randint(1000, 9999)
    return f"({area}) {prefix}-{line}"


def generate_reviews(rng: Random, count: int, base_rating: float, now: datetime) -> List[Review]:
    pool = DEFAULT_RATING_POOL
    for upper, candidate in RATING_POOLS:
        if base_rating < upper:
            pool = candidate
            break

    reviews = []
    for _ in range(count):
        rating = rng.choice(pool)
        days_ago = rng.randint(1, MAX_REVIEW_AGE_DAYS)
        reviews.append(Review(
            rating=rating,
            text=review_text_for_rating(rng, rating),
            date=now - timedelta(days=days_ago),
        ))
    return reviews


def generate_demo_leads(
    count: int = 50,
    seed: int = 42,
    now: Optional[datetime] = None,
) -> List[BusinessRecord]:
    """
    Generate synthetic poorly rated businesses.

    Args:
        count: Number of businesses
        seed: RNG seed; same seed and now give identical records
        now: Reference time for review dates and scrapedAt

    Returns:
        Business records with ids demo_1..demo_<count>
    """
    now = now or datetime.now(timezone.utc)
    rng = Random(seed)

    leads = []
    used_names = set()

    for i in range(1, count + 1):
        name = f"{rng.choice(ADJECTIVES)} {rng.choice(NOUNS)}"
        if name in used_names:
            name = f"{name} {i}"
        used_names.add(name)

        base_rating = round(1.4 + rng.random() * 1.8, 1)
        review_count = rng.randint(6, 18)
        total_reviews = rng.randint(max(review_count, 10), 350)
        category = rng.choice(CATEGORIES)
        city = rng.choice(CITIES)
        address = f"{rng.randint(100, 999)} {rng.choice(STREETS)}, {city}"
        website = f"https://{slugify(name)}.com"

        leads.append(BusinessRecord(
            id=f"demo_{i}",
            source=LeadSource.DEMO,
            name=name,
            rating=base_rating,
            total_reviews=total_reviews,
            category=category,
            address=address,
            url=website,
            scraped_at=now,
            phone=generate_phone(rng),
            website=website,
            email=f"info@{slugify(name)}.com",
            reviews=tuple(generate_reviews(rng, review_count, base_rating, now)),
        ))

    logger.info(f"Generated {len(leads)} demo leads (seed={seed})")
    return leads
