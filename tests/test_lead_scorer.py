"""
Unit tests for the lead scoring rubric.

Checks:
1. Determinism (same inputs + same reference time = same score)
2. Each component's thresholds
3. Priority tier boundaries
4. Ranking: descending, stable, input untouched
5. End-to-end scenarios on enriched records

Usage:
    pytest tests/test_lead_scorer.py -v
"""

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from leadminer.data.data_models import BusinessRecord, LeadSource, Review
from leadminer.enrichment import LeadEnricher
from leadminer.enrichment.enrichment_models import (
    EnrichedRecord,
    EnrichmentBlock,
    Engagement,
    ResponseRate,
    ReviewTrend,
    TrendDirection,
    TrendSeverity,
)
from leadminer.scoring import LeadScorer, PriorityTier, ScoringConfig
from leadminer.scoring.scoring_config import RecentNegativesConfig


NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_review(rating, days_ago, responded=False, text=""):
    return Review(rating=rating, text=text, date=NOW - timedelta(days=days_ago), owner_response=responded)


def make_record(record_id="gm_1", reviews=(), total_reviews=0):
    return BusinessRecord(
        id=record_id,
        source=LeadSource.GOOGLE_MAPS,
        name=f"Business {record_id}",
        rating=2.0,
        total_reviews=total_reviews,
        category="Restaurant",
        address="1 Main St",
        url="",
        scraped_at=NOW,
        reviews=tuple(reviews),
    )


def enrich(record):
    return LeadEnricher().enrich_lead(record, NOW)


def bare(record, **block):
    """Enriched record with a hand-built (possibly partial) enrichment block."""
    return EnrichedRecord(base=record, enrichment=EnrichmentBlock(**block))


def response_rate(rate, total=10):
    return ResponseRate(
        rate=rate,
        responded=int(rate * total),
        total=total,
        percentage=f"{int(rate * 100)}%",
        engagement=Engagement.LOW,
    )


class TestScenarios:

    def setup_method(self):
        self.scorer = LeadScorer()

    def test_struggling_large_business_is_critical(self):
        reviews = [make_review(1, d) for d in (1, 2, 3, 4, 5)] + [make_review(4, 6)]
        lead = enrich(make_record(reviews=reviews, total_reviews=250))

        result = self.scorer.calculate_lead_score(lead, NOW)

        assert result.score >= 90
        assert result.priority == PriorityTier.CRITICAL
        assert result.details["recentNegatives"].to_dict() == {"count": 5, "points": 40}
        assert result.details["lowResponseRate"].to_dict() == {"rate": 0.0, "points": 30}
        assert result.details["businessSize"].to_dict() == {"reviews": 250, "points": 20}

    def test_no_reviews_scores_zero(self):
        lead = enrich(make_record(reviews=(), total_reviews=5))

        result = self.scorer.calculate_lead_score(lead, NOW)

        assert result.score == 0
        assert result.priority == PriorityTier.LOW
        assert result.details == {}

    def test_no_negative_reviews_means_no_negative_or_decline_points(self):
        # Ratings dropping from 5 to 3: worsening, but nothing rated <= 2
        reviews = [make_review(3, d) for d in (1, 2, 3)] + [make_review(5, d) for d in (10, 11, 12)]
        lead = enrich(make_record(reviews=reviews, total_reviews=30))

        assert lead.enrichment.review_trend.trend == TrendDirection.WORSENING
        assert lead.enrichment.last_negative_review is None

        result = self.scorer.calculate_lead_score(lead, NOW)
        assert "recentNegatives" not in result.details
        assert "ratingDecline" not in result.details

    def test_score_is_bounded_integer(self):
        reviews = [make_review(1, d) for d in range(1, 11)]
        lead = enrich(make_record(reviews=reviews, total_reviews=900))

        result = self.scorer.calculate_lead_score(lead, NOW)
        assert isinstance(result.score, int)
        assert 0 <= result.score <= 100

    def test_deterministic(self):
        reviews = [make_review(1, 2), make_review(2, 8), make_review(4, 50)]
        lead = enrich(make_record(reviews=reviews, total_reviews=75))

        first = self.scorer.calculate_lead_score(lead, NOW)
        for _ in range(20):
            assert self.scorer.calculate_lead_score(lead, NOW) == first


class TestRecentNegatives:

    def setup_method(self):
        self.scorer = LeadScorer()

    def points(self, reviews):
        lead = bare(make_record(reviews=reviews))
        factor = self.scorer.score_recent_negatives(lead, NOW)
        return factor.points if factor else 0

    def test_tiers(self):
        assert self.points([make_review(1, 1)] * 5) == 40
        assert self.points([make_review(1, 1)] * 4) == 24
        assert self.points([make_review(2, 1)] * 3) == 24
        assert self.points([make_review(1, 1)] * 2) == 12
        assert self.points([make_review(1, 1)]) == 12
        assert self.points([]) == 0

    def test_window(self):
        lead = bare(make_record(reviews=[
            make_review(1, 30),   # on the cutoff, counted
            make_review(1, 31),   # too old
            make_review(3, 1),    # not negative
        ]))
        assert self.scorer.count_recent_negatives(lead, NOW) == 1

    def test_undated_reviews_not_counted(self):
        lead = bare(make_record(reviews=[Review(rating=1, text="awful")]))
        assert self.scorer.count_recent_negatives(lead, NOW) == 0

    def test_naive_now_treated_as_utc(self):
        lead = bare(make_record(reviews=[make_review(1, 30), make_review(1, 31)]))
        assert self.scorer.count_recent_negatives(lead, NOW.replace(tzinfo=None)) == 1


class TestLowResponseRate:

    def setup_method(self):
        self.scorer = LeadScorer()

    def points(self, block_rate):
        lead = bare(make_record(), response_rate=block_rate)
        factor = self.scorer.score_low_response_rate(lead)
        return factor.points if factor else 0

    def test_tiers(self):
        assert self.points(response_rate(0.0)) == 30
        assert self.points(response_rate(0.1)) == 30
        assert self.points(response_rate(0.2)) == 15
        assert self.points(response_rate(0.49)) == 15
        assert self.points(response_rate(0.5)) == 0
        assert self.points(response_rate(0.9)) == 0

    def test_missing_block_or_no_reviews(self):
        assert self.points(None) == 0
        assert self.points(response_rate(0.0, total=0)) == 0


class TestBusinessSize:

    def setup_method(self):
        self.scorer = LeadScorer()

    def points(self, total):
        factor = self.scorer.score_business_size(bare(make_record(total_reviews=total)))
        return factor.points if factor else 0

    def test_tiers_are_strictly_above(self):
        assert self.points(101) == 20
        assert self.points(100) == 14
        assert self.points(51) == 14
        assert self.points(50) == 8
        assert self.points(21) == 8
        assert self.points(20) == 0
        assert self.points(0) == 0


class TestRatingDecline:

    def setup_method(self):
        self.scorer = LeadScorer()
        self.record = make_record(reviews=[make_review(1, 40)])

    def points(self, trend, record=None):
        factor = self.scorer.score_rating_decline(bare(record or self.record, review_trend=trend))
        return factor.points if factor else 0

    def test_worsening_full_points(self):
        trend = ReviewTrend(trend=TrendDirection.WORSENING, change=-0.4, severity=TrendSeverity.HIGH)
        assert self.points(trend) == 10

    def test_critical_full_points(self):
        trend = ReviewTrend(trend=TrendDirection.STABLE, change=-0.6, severity=TrendSeverity.CRITICAL)
        assert self.points(trend) == 10

    def test_high_severity_half_points(self):
        trend = ReviewTrend(trend=TrendDirection.STABLE, change=-0.35, severity=TrendSeverity.HIGH)
        assert self.points(trend) == 5

    def test_stable_or_improving(self):
        assert self.points(ReviewTrend(trend=TrendDirection.STABLE, severity=TrendSeverity.MODERATE)) == 0
        assert self.points(ReviewTrend(trend=TrendDirection.IMPROVING, severity=TrendSeverity.MODERATE)) == 0
        assert self.points(ReviewTrend(trend=TrendDirection.INSUFFICIENT_DATA)) == 0
        assert self.points(None) == 0

    def test_requires_a_negative_review(self):
        trend = ReviewTrend(trend=TrendDirection.WORSENING, change=-1.0, severity=TrendSeverity.CRITICAL)
        assert self.points(trend, record=make_record(reviews=[make_review(3, 1)])) == 0

    def test_details_inputs(self):
        trend = ReviewTrend(trend=TrendDirection.WORSENING, change=-1.0, severity=TrendSeverity.CRITICAL)
        factor = self.scorer.score_rating_decline(bare(self.record, review_trend=trend))
        assert factor.to_dict() == {"trend": "worsening", "trendScore": "critical", "points": 10}


class TestPriority:

    def setup_method(self):
        self.scorer = LeadScorer()

    def test_boundaries(self):
        assert self.scorer.get_priority_level(100) == PriorityTier.CRITICAL
        assert self.scorer.get_priority_level(80) == PriorityTier.CRITICAL
        assert self.scorer.get_priority_level(79) == PriorityTier.HIGH
        assert self.scorer.get_priority_level(60) == PriorityTier.HIGH
        assert self.scorer.get_priority_level(59) == PriorityTier.MEDIUM
        assert self.scorer.get_priority_level(40) == PriorityTier.MEDIUM
        assert self.scorer.get_priority_level(39) == PriorityTier.LOW
        assert self.scorer.get_priority_level(0) == PriorityTier.LOW


class TestScoreAllLeads:

    def setup_method(self):
        self.scorer = LeadScorer()

    def test_sorted_descending(self):
        leads = [
            bare(make_record("a", total_reviews=0)),
            bare(make_record("b", total_reviews=500)),
            bare(make_record("c", total_reviews=60)),
        ]
        scored = self.scorer.score_all_leads(leads, now=NOW)

        assert [s.id for s in scored] == ["b", "c", "a"]
        assert [s.score for s in scored] == [20, 14, 0]

    def test_ties_keep_input_order(self):
        leads = [bare(make_record(f"lead_{i}", total_reviews=200)) for i in range(6)]
        scored = self.scorer.score_all_leads(leads, now=NOW)

        assert [s.id for s in scored] == [f"lead_{i}" for i in range(6)]

    def test_input_not_mutated(self):
        leads = [bare(make_record("x", total_reviews=10)), bare(make_record("y", total_reviews=300))]
        snapshot = list(leads)

        self.scorer.score_all_leads(leads, now=NOW)
        assert leads == snapshot

    def test_summary_and_top(self):
        leads = [bare(make_record(f"l{i}", total_reviews=i * 40)) for i in range(5)]
        scored = self.scorer.score_all_leads(leads, now=NOW)

        counts = LeadScorer.summarize_distribution(scored)
        assert set(counts) == set(PriorityTier)
        assert sum(counts.values()) == 5
        assert counts[PriorityTier.LOW] == 5

        top = LeadScorer.top_leads(scored, count=2)
        assert [s.id for s in top] == [s.id for s in scored[:2]]

    def test_scored_record_to_dict(self):
        lead = enrich(make_record(reviews=[make_review(1, 1)], total_reviews=120))
        data = self.scorer.score_all_leads([lead], now=NOW)[0].to_dict()

        assert data["id"] == "gm_1"
        assert data["score"] == 12 + 30 + 20
        assert data["priority"] == "high"
        assert data["scoringDetails"]["recentNegatives"] == {"count": 1, "points": 12}
        assert "enrichment" in data

    def test_naive_now_scores_like_utc(self):
        lead = enrich(make_record(reviews=[make_review(1, 1), make_review(2, 10)], total_reviews=120))
        aware = self.scorer.score_all_leads([lead], now=NOW)[0]
        naive = self.scorer.score_all_leads([lead], now=NOW.replace(tzinfo=None))[0]

        assert naive.score == aware.score
        assert naive.details == aware.details


class TestScoringConfig:

    def test_default_weights(self):
        config = ScoringConfig()
        assert config.weights == {
            "recentNegatives": 40,
            "lowResponseRate": 30,
            "businessSize": 20,
            "ratingDecline": 10,
        }
        assert config.validate() is True

    def test_weights_must_sum_to_cap(self):
        bad = ScoringConfig(recent_negatives=RecentNegativesConfig(max_points=50))
        with pytest.raises(ValueError):
            bad.validate()
        with pytest.raises(ValueError):
            LeadScorer(config=bad)

    def test_custom_config_changes_window(self):
        config = ScoringConfig(recent_negatives=replace(RecentNegativesConfig(), window_days=60))
        scorer = LeadScorer(config=config)
        lead = bare(make_record(reviews=[make_review(1, 45)]))

        assert scorer.count_recent_negatives(lead, NOW) == 1
        assert LeadScorer().count_recent_negatives(lead, NOW) == 0
