"""
Tests for LeadEnricher (batch application of the signal extractors).

Usage:
    pytest tests/test_enricher.py -v
"""

from datetime import datetime, timedelta, timezone

from leadminer.data.data_models import BusinessRecord, LeadSource, Review
from leadminer.enrichment import LeadEnricher, TrendDirection
from leadminer.reviews import SentimentAnalyzer, SentimentLabel


NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_record(record_id="gm_1", reviews=(), **overrides):
    defaults = dict(
        id=record_id,
        source=LeadSource.GOOGLE_MAPS,
        name=f"Business {record_id}",
        rating=2.1,
        total_reviews=80,
        category="Restaurant",
        address="1 Pine St, Denver, CO",
        url="https://maps.example/1",
        scraped_at=NOW,
        website="https://example.com",
        reviews=tuple(reviews),
    )
    defaults.update(overrides)
    return BusinessRecord(**defaults)


def make_reviews():
    return [
        Review(rating=1, text="Rude staff and cold food.", date=NOW - timedelta(days=2)),
        Review(rating=2, text="Dirty tables", date=NOW - timedelta(days=5)),
        Review(rating=1, text="Terrible, never again", date=NOW - timedelta(days=9)),
        Review(rating=4, text="Good service and clean space.", date=NOW - timedelta(days=60)),
        Review(rating=5, text="Great value", date=NOW - timedelta(days=70), owner_response=True),
        Review(rating=4, text="Friendly staff", date=NOW - timedelta(days=80)),
    ]


class TestEnrichLead:

    def setup_method(self):
        self.enricher = LeadEnricher()

    def test_builds_every_block(self):
        enriched = self.enricher.enrich_lead(make_record(reviews=make_reviews()), NOW)
        block = enriched.enrichment

        assert block.contact_info.email == "info@example.com"
        assert block.review_trend.trend == TrendDirection.WORSENING
        assert block.business_size.total_reviews == 80
        assert block.response_rate.responded == 1
        assert block.response_rate.total == 6
        assert block.last_negative_review.days_ago == 2
        assert block.negative_review_keywords[0].word in ("rude", "dirty", "cold", "terrible", "never")

    def test_attaches_fresh_sentiment_to_reviews(self):
        enriched = self.enricher.enrich_lead(make_record(reviews=make_reviews()), NOW)

        sentiments = [r.sentiment for r in enriched.base.reviews]
        assert all(s is not None for s in sentiments)
        assert sentiments[0].label == SentimentLabel.NEGATIVE
        assert sentiments[4].label == SentimentLabel.POSITIVE

    def test_input_record_untouched(self):
        record = make_record(reviews=make_reviews())
        self.enricher.enrich_lead(record, NOW)
        assert all(r.sentiment is None for r in record.reviews)

    def test_record_without_reviews(self):
        enriched = self.enricher.enrich_lead(make_record(reviews=(), total_reviews=5), NOW)
        block = enriched.enrichment

        assert block.review_trend.trend == TrendDirection.INSUFFICIENT_DATA
        assert block.response_rate.total == 0
        assert block.negative_review_keywords == ()
        assert block.last_negative_review is None

    def test_to_dict_layers_enrichment_on_base(self):
        data = self.enricher.enrich_lead(make_record(reviews=make_reviews()), NOW).to_dict()

        assert data["id"] == "gm_1"
        assert data["totalReviews"] == 80
        assert set(data["enrichment"]) == {
            "contactInfo",
            "reviewTrend",
            "businessSize",
            "responseRate",
            "negativeReviewKeywords",
            "lastNegativeReview",
        }
        assert data["reviews"][0]["sentiment"]["sentiment"] == "negative"

    def test_custom_keywords(self):
        enricher = LeadEnricher(keywords=("tables",))
        enriched = enricher.enrich_lead(make_record(reviews=make_reviews()), NOW)

        assert [(k.word, k.count) for k in enriched.enrichment.negative_review_keywords] == [("tables", 1)]

    def test_custom_analyzer(self):
        # Nothing is negative by text, only by rating
        enricher = LeadEnricher(analyzer=SentimentAnalyzer(lexicon={}))
        enriched = enricher.enrich_lead(make_record(reviews=make_reviews()), NOW)

        assert all(r.sentiment.score == 0 for r in enriched.base.reviews)


class TestEnrichLeads:

    def test_preserves_order(self):
        records = [make_record(f"gm_{i}") for i in range(25)]
        enriched = LeadEnricher().enrich_leads(records, now=NOW)

        assert [e.id for e in enriched] == [r.id for r in records]

    def test_empty_batch(self):
        assert LeadEnricher().enrich_leads([], now=NOW) == []

    def test_deterministic_with_fixed_now(self):
        records = [make_record(reviews=make_reviews())]
        first = LeadEnricher().enrich_leads(records, now=NOW)
        second = LeadEnricher().enrich_leads(records, now=NOW)

        assert first == second

    def test_naive_now_treated_as_utc(self):
        records = [make_record(reviews=make_reviews())]
        aware = LeadEnricher().enrich_leads(records, now=NOW)
        naive = LeadEnricher().enrich_leads(records, now=NOW.replace(tzinfo=None))

        assert naive == aware
        assert naive[0].enrichment.last_negative_review.days_ago == 2
