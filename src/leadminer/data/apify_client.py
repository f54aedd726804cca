"""
Business Review Scraping Client (Apify)
=======================================

Finds poorly rated businesses on Google Maps and TripAdvisor through Apify
actors and normalizes them into raw business records.

Configuration:
    APIFY_TOKEN: Apify API token (from .env)

Strategy:
    For each provider, submit one actor run, poll until it completes,
    then download the default dataset. Only businesses rated at or below
    BAD_RATING_THRESHOLD are kept, with their 10 most recent reviews.
    Results from both providers are merged and de-duplicated.

    A provider failure is logged and contributes no records; the other
    provider still runs.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import requests

from .config import ApifyConfig
from .data_models import BusinessRecord, LeadSource, format_timestamp
from .record_schema import parse_record
from ..errors import ApifyError, RecordValidationError

logger = logging.getLogger(__name__)

MAX_REVIEWS_PER_BUSINESS = 10
DEDUPE_ADDRESS_PREFIX = 20


# =============================================================================
# NORMALIZERS
# =============================================================================

def normalize_google_maps(place: Dict[str, Any], scraped_at: datetime) -> Dict[str, Any]:
    """Map a Google Maps scraper item to a raw business record."""
    categories = place.get("categories") or []
    reviews = (place.get("reviews") or [])[:MAX_REVIEWS_PER_BUSINESS]

    return {
        "id": f"gm_{place.get('placeId')}",
        "source": LeadSource.GOOGLE_MAPS.value,
        "name": place.get("title"),
        "rating": place.get("totalScore"),
        "totalReviews": place.get("reviewsCount") or 0,
        "category": place.get("categoryName") or (categories[0] if categories else "Business"),
        "address": place.get("address"),
        "phone": place.get("phoneUnformatted") or place.get("phone"),
        "website": place.get("website"),
        "email": place.get("email"),
        "reviews": [
            {
                "rating": r.get("stars"),
                "text": r.get("text"),
                "date": r.get("publishedAtDate"),
                "ownerResponse": r.get("responseFromOwnerText"),
            }
            for r in reviews
        ],
        "url": place.get("url"),
        "scrapedAt": format_timestamp(scraped_at),
    }


def normalize_tripadvisor(place: Dict[str, Any], scraped_at: datetime) -> Dict[str, Any]:
    """Map a TripAdvisor scraper item to a raw business record."""
    reviews = (place.get("reviews") or [])[:MAX_REVIEWS_PER_BUSINESS]

    return {
        "id": f"ta_{place.get('id') or place.get('locationId')}",
        "source": LeadSource.TRIPADVISOR.value,
        "name": place.get("name") or place.get("title"),
        "rating": place.get("rating"),
        "totalReviews": place.get("numberOfReviews") or 0,
        "category": place.get("category") or "Business",
        "address": place.get("address"),
        "phone": place.get("phone"),
        "website": place.get("website"),
        "email": place.get("email"),
        "reviews": [
            {
                "rating": r.get("rating"),
                "text": r.get("text") or r.get("title"),
                "date": r.get("publishedDate"),
                "ownerResponse": r.get("ownerResponse"),
            }
            for r in reviews
        ],
        "url": place.get("url"),
        "scrapedAt": format_timestamp(scraped_at),
    }


def is_bad_rating(rating: Any, threshold: float) -> bool:
    """Rated (non-zero) and at or below the threshold."""
    try:
        value = float(rating)
    except (TypeError, ValueError):
        return False
    return 0 < value <= threshold


def deduplicate_leads(leads: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Merge the same business listed twice (name + start of address).

    The copy with more reviews wins and takes the position of the first
    occurrence.
    """
    unique: Dict[str, Dict[str, Any]] = {}
    for lead in leads:
        name = (lead.get("name") or "").lower()
        address = (lead.get("address") or "")[:DEDUPE_ADDRESS_PREFIX].lower()
        key = f"{name}_{address}"

        existing = unique.get(key)
        if existing is None:
            unique[key] = lead
        elif (lead.get("totalReviews") or 0) > (existing.get("totalReviews") or 0):
            unique[key] = lead

    removed = len(leads) - len(unique)
    if removed:
        logger.info(f"Removed {removed} duplicate businesses")
    return list(unique.values())


# =============================================================================
# CLIENT
# =============================================================================

class ApifyReviewClient:
    """
    Review scraping client backed by Apify actors.

    One actor per provider; runs are submitted and polled over the Apify
    REST API.
    """

    APIFY_BASE = "https://api.apify.com/v2"
    GOOGLE_MAPS_ACTOR = "nwua9Gu5YrADL7ZDj"
    TRIPADVISOR_ACTOR = "maxcopell~tripadvisor"
    REVIEWS_PER_PLACE = 20

    def __init__(
        self,
        token: Optional[str] = None,
        config: Optional[ApifyConfig] = None,
        poll_interval: float = 5.0,
    ):
        """
        Initialize client.

        Args:
            token: Apify API token (default: APIFY_TOKEN env var)
            config: Provider settings (default: from environment)
            poll_interval: Seconds between run status checks

        Raises:
            ApifyError: If no token is configured
        """
        self.config = config or ApifyConfig()
        self.token = token or self.config.token
        self.poll_interval = poll_interval

        if not self.token:
            raise ApifyError(
                "Apify token not configured. Set APIFY_TOKEN in .env "
                "(https://console.apify.com/account/integrations)"
            )

        self._requests_made = 0

    def _run_actor(self, actor_id: str, input_data: Dict[str, Any]) -> str:
        """Submit an Apify actor run. Returns run_id."""
        response = requests.post(
            f"{self.APIFY_BASE}/acts/{actor_id}/runs",
            params={"token": self.token},
            json=input_data,
            timeout=30,
        )
        self._requests_made += 1

        if response.status_code == 401:
            raise ApifyError("Invalid Apify token")
        elif response.status_code != 201:
            raise ApifyError(
                f"Apify submit error: {response.status_code} - {response.text[:200]}"
            )

        run_id = response.json().get("data", {}).get("id")
        if not run_id:
            raise ApifyError(f"No run_id in Apify response for actor {actor_id}")

        logger.debug(f"Apify run {run_id} submitted for actor {actor_id}")
        return run_id

    def _poll_run(self, run_id: str) -> List[Dict[str, Any]]:
        """Poll an Apify run until completion. Returns the dataset items."""
        max_wait_seconds = self.config.max_wait_seconds
        start_time = time.time()

        while time.time() - start_time < max_wait_seconds:
            response = requests.get(
                f"{self.APIFY_BASE}/actor-runs/{run_id}",
                params={"token": self.token},
                timeout=15,
            )
            self._requests_made += 1

            if response.status_code != 200:
                logger.warning(f"Poll error for {run_id}: {response.status_code}")
                time.sleep(self.poll_interval)
                continue

            data = response.json().get("data", {})
            status = data.get("status")

            if status == "SUCCEEDED":
                dataset_id = data.get("defaultDatasetId")
                if not dataset_id:
                    return []
                return self._fetch_dataset(dataset_id)

            elif status in ("FAILED", "ABORTED", "TIMED-OUT"):
                raise ApifyError(f"Apify run {run_id} ended with status {status}")

            logger.debug(f"Apify run {run_id}: {status}")
            time.sleep(self.poll_interval)

        raise ApifyError(f"Apify run {run_id} timed out after {max_wait_seconds}s")

    def _fetch_dataset(self, dataset_id: str) -> List[Dict[str, Any]]:
        response = requests.get(
            f"{self.APIFY_BASE}/datasets/{dataset_id}/items",
            params={"token": self.token, "clean": "true"},
            timeout=60,
        )
        self._requests_made += 1

        if response.status_code != 200:
            raise ApifyError(f"Apify dataset error: {response.status_code}")
        return response.json()

    def scrape_google_maps(
        self,
        query: str,
        location: str,
        max_results: int,
        scraped_at: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """Poorly rated Google Maps businesses, as raw records."""
        logger.info(f"Scraping Google Maps: '{query}' in {location}")
        scraped_at = scraped_at or datetime.now(timezone.utc)
        threshold = self.config.bad_rating_threshold

        try:
            run_id = self._run_actor(self.GOOGLE_MAPS_ACTOR, {
                "searchStringsArray": [f"{query} in {location}"],
                "maxCrawledPlacesPerSearch": max_results,
                "language": "en",
                "includeReviews": True,
                "maxReviews": self.REVIEWS_PER_PLACE,
            })
            items = self._poll_run(run_id)
        except (ApifyError, requests.RequestException) as e:
            logger.error(f"Google Maps scraping failed: {e}")
            return []

        leads = [
            normalize_google_maps(place, scraped_at)
            for place in items
            if is_bad_rating(place.get("totalScore"), threshold)
        ]
        logger.info(
            f"Google Maps: {len(items)} businesses, {len(leads)} rated <= {threshold}"
        )
        return leads

    def scrape_tripadvisor(
        self,
        query: str,
        location: str,
        max_results: int,
        scraped_at: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """Poorly rated TripAdvisor businesses, as raw records."""
        logger.info(f"Scraping TripAdvisor: '{query}' in {location}")
        scraped_at = scraped_at or datetime.now(timezone.utc)
        threshold = self.config.bad_rating_threshold

        try:
            run_id = self._run_actor(self.TRIPADVISOR_ACTOR, {
                "locationFullName": location,
                "searchQuery": query,
                "maxItems": max_results,
                "includeReviews": True,
                "maxReviews": self.REVIEWS_PER_PLACE,
            })
            items = self._poll_run(run_id)
        except (ApifyError, requests.RequestException) as e:
            logger.error(f"TripAdvisor scraping failed: {e}")
            return []

        leads = [
            normalize_tripadvisor(place, scraped_at)
            for place in items
            if is_bad_rating(place.get("rating"), threshold)
        ]
        logger.info(
            f"TripAdvisor: {len(items)} businesses, {len(leads)} rated <= {threshold}"
        )
        return leads

    def scrape_all(
        self,
        query: Optional[str] = None,
        location: Optional[str] = None,
        max_results: Optional[int] = None,
    ) -> List[BusinessRecord]:
        """
        Scrape both providers, merge, de-duplicate and validate.

        Returns:
            Business records (possibly empty when both providers fail)
        """
        query = query or self.config.query
        location = location or self.config.location
        max_results = max_results or self.config.max_results
        scraped_at = datetime.now(timezone.utc)

        google_maps = self.scrape_google_maps(query, location, max_results, scraped_at)
        tripadvisor = self.scrape_tripadvisor(query, location, max_results, scraped_at)

        unique = deduplicate_leads(google_maps + tripadvisor)
        logger.info(
            f"Scrape summary: {len(unique)} leads "
            f"(google_maps={len(google_maps)}, tripadvisor={len(tripadvisor)})"
        )

        records = []
        for payload in unique:
            try:
                records.append(parse_record(payload, now=scraped_at))
            except RecordValidationError as e:
                logger.warning(f"Skipping provider item: {e}")

        logger.info(f"Apify client stats: {self.get_stats()}")
        return records

    def get_stats(self) -> Dict[str, Any]:
        """Get client statistics."""
        return {"requests_made": self._requests_made}
