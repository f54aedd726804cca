"""
Lead Exporter
=============

Flattens scored leads into one row per business and writes them as CSV
(for spreadsheets / CRM import) or JSON.

Usage:
    exporter = LeadExporter()
    exporter.export_to_csv(scored, "output/leads.csv")
"""

import csv
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

from ..data.data_models import format_timestamp
from ..data.lead_store import save_json
from ..errors import LeadStoreError
from ..scoring.lead_scorer import ScoredRecord

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


# (row key, CSV header title), in column order
CSV_COLUMNS = (
    ("id", "ID"),
    ("name", "Business Name"),
    ("source", "Source"),
    ("category", "Category"),
    ("rating", "Rating"),
    ("totalReviews", "Total Reviews"),
    ("score", "Lead Score"),
    ("priority", "Priority"),
    ("address", "Address"),
    ("phone", "Phone"),
    ("email", "Email"),
    ("website", "Website"),
    ("url", "Listing URL"),
    ("reviewTrend", "Review Trend"),
    ("trendChange", "Trend Change"),
    ("responseRate", "Response Rate"),
    ("businessSize", "Business Size"),
    ("lastNegativeReviewDate", "Last Negative Review"),
    ("lastNegativeReviewDaysAgo", "Days Since Negative"),
    ("negativeKeywords", "Negative Keywords"),
    ("scrapedAt", "Scraped At"),
)

FIELD_KEYS = [key for key, _ in CSV_COLUMNS]


class LeadExporter:
    """Tabular and JSON export of scored leads."""

    def flatten_lead(self, lead: ScoredRecord) -> Dict[str, Any]:
        """
        One flat row of primitives per lead.

        Missing enrichment sub-blocks become None instead of raising.
        """
        base = lead.enriched.base
        enrichment = lead.enriched.enrichment

        trend = enrichment.review_trend
        response = enrichment.response_rate
        size = enrichment.business_size
        last_negative = enrichment.last_negative_review
        keywords = ", ".join(f"{k.word}:{k.count}" for k in enrichment.negative_review_keywords)

        return {
            "id": base.id,
            "name": base.name,
            "source": base.source.value,
            "category": base.category,
            "rating": base.rating,
            "totalReviews": base.total_reviews,
            "score": lead.score,
            "priority": lead.priority.value,
            "address": base.address,
            "phone": base.phone,
            "email": base.email,
            "website": base.website,
            "url": base.url,
            "reviewTrend": trend.trend.value if trend else None,
            "trendChange": trend.change if trend else None,
            "responseRate": response.percentage if response else None,
            "businessSize": size.category if size else None,
            "lastNegativeReviewDate": format_timestamp(last_negative.date) if last_negative else None,
            "lastNegativeReviewDaysAgo": last_negative.days_ago if last_negative else None,
            "negativeKeywords": keywords,
            "scrapedAt": format_timestamp(base.scraped_at),
        }

    def export_to_csv(self, leads: Sequence[ScoredRecord], path: PathLike) -> Path:
        """
        Write leads to CSV with a header row of column titles.

        None values are written as empty cells.
        """
        path = Path(path)
        rows = [self.flatten_lead(lead) for lead in leads]
        titles = dict(CSV_COLUMNS)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", newline="", encoding="utf-8") as f:
                writer = csv.DictWriter(f, fieldnames=FIELD_KEYS)
                writer.writerow(titles)
                writer.writerows(rows)
        except OSError as e:
            raise LeadStoreError(f"Failed to write {path}: {e}") from e

        logger.info(f"Exported {len(rows)} leads to {path}")
        return path

    def read_csv(self, path: PathLike) -> List[Dict[str, str]]:
        """Read an exported CSV back into rows keyed by field key."""
        path = Path(path)
        try:
            with path.open("r", newline="", encoding="utf-8") as f:
                reader = csv.reader(f)
                header = next(reader, None)
                if header is None:
                    return []
                by_title = {title: key for key, title in CSV_COLUMNS}
                keys = [by_title.get(title, title) for title in header]
                return [dict(zip(keys, row)) for row in reader]
        except OSError as e:
            raise LeadStoreError(f"Failed to read {path}: {e}") from e

    def export_to_json(self, leads: Sequence[ScoredRecord], path: PathLike) -> Path:
        """Full scored records (base + enrichment + score) as a JSON array."""
        return save_json([lead.to_dict() for lead in leads], path)
