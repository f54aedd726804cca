"""
LeadMiner Lead Scorer - deterministic opportunity scoring.

Ranks enriched business records by how strong a sales opportunity their
reputation problems represent. Same inputs and reference time always give
the same score, and every awarded point is traceable in the details.

ARCHITECTURE:
- LeadScorer: applies the rubric from scoring_config
- One method per component (recent negatives, response rate, size, decline)
- ScoredRecord: enriched record + score, per-factor details, priority

USAGE:
    scorer = LeadScorer()
    scored = scorer.score_all_leads(enriched, now=run_started_at)

    scored[0].score      # highest first
    scored[0].priority   # PriorityTier.CRITICAL
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from .scoring_config import ScoringConfig, DEFAULT_CONFIG
from ..data.data_models import ensure_utc
from ..enrichment.enrichment_models import EnrichedRecord, TrendDirection, TrendSeverity
from ..rounding import round_points

logger = logging.getLogger(__name__)


class PriorityTier(str, Enum):
    """Priority bucket derived from the final score."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class FactorScore:
    """Points awarded by one rubric component and the inputs behind them."""
    inputs: Dict[str, Any]
    points: int

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.inputs)
        data["points"] = self.points
        return data


@dataclass(frozen=True)
class LeadScore:
    """Rubric outcome for a single lead."""
    score: int
    details: Dict[str, FactorScore]
    priority: PriorityTier


@dataclass(frozen=True)
class ScoredRecord:
    """Enriched record + score, scoring details and priority."""
    enriched: EnrichedRecord
    score: int
    priority: PriorityTier
    details: Dict[str, FactorScore] = field(default_factory=dict)

    @property
    def id(self) -> str:
        return self.enriched.base.id

    @property
    def name(self) -> str:
        return self.enriched.base.name

    def to_dict(self) -> Dict[str, Any]:
        data = self.enriched.to_dict()
        data["score"] = self.score
        data["scoringDetails"] = {name: f.to_dict() for name, f in self.details.items()}
        data["priority"] = self.priority.value
        return data


class LeadScorer:
    """
    Lead scorer - 100% deterministic.

    Evaluates a lead on 4 independent components:
    - RECENT_NEGATIVES (40 pts)
    - LOW_RESPONSE_RATE (30 pts)
    - BUSINESS_SIZE (20 pts)
    - RATING_DECLINE (10 pts)

    The sum is capped at config.max_total_score.
    """

    PROGRESS_EVERY = 10

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self.config.validate()

    # =========================================================================
    # MAIN ENTRY POINTS
    # =========================================================================

    def calculate_lead_score(self, lead: EnrichedRecord, now: datetime) -> LeadScore:
        """
        Score a single enriched lead (0-100).

        Only components that award points appear in the details.
        """
        now = ensure_utc(now)
        components = {
            "recentNegatives": self.score_recent_negatives(lead, now),
            "lowResponseRate": self.score_low_response_rate(lead),
            "businessSize": self.score_business_size(lead),
            "ratingDecline": self.score_rating_decline(lead),
        }
        details = {name: c for name, c in components.items() if c is not None}

        raw_score = sum(c.points for c in details.values())
        score = min(raw_score, self.config.max_total_score)

        return LeadScore(
            score=score,
            details=details,
            priority=self.get_priority_level(score),
        )

    def score_all_leads(
        self,
        leads: Sequence[EnrichedRecord],
        now: Optional[datetime] = None,
    ) -> List[ScoredRecord]:
        """
        Score every lead and sort by score, highest first.

        The sort is stable: equal scores keep their input order.
        The input sequence is not modified.
        """
        now = ensure_utc(now) if now else datetime.now(timezone.utc)
        total = len(leads)
        logger.info(f"Scoring {total} leads...")

        scored = []
        for idx, lead in enumerate(leads, 1):
            result = self.calculate_lead_score(lead, now)
            scored.append(ScoredRecord(
                enriched=lead,
                score=result.score,
                priority=result.priority,
                details=result.details,
            ))
            logger.debug(
                f"Scored {lead.id}: {result.score} ({result.priority.value})",
                extra={"lead_id": lead.id, "score": result.score},
            )
            if idx % self.PROGRESS_EVERY == 0:
                logger.info(f"Scored {idx}/{total}...")

        ranked = sorted(scored, key=lambda s: s.score, reverse=True)
        self.log_score_summary(ranked)
        return ranked

    def get_priority_level(self, score: int) -> PriorityTier:
        """Map a final score to its priority tier."""
        p = self.config.priority
        if score >= p.critical:
            return PriorityTier.CRITICAL
        if score >= p.high:
            return PriorityTier.HIGH
        if score >= p.medium:
            return PriorityTier.MEDIUM
        return PriorityTier.LOW

    # =========================================================================
    # COMPONENTS
    # =========================================================================

    def count_recent_negatives(self, lead: EnrichedRecord, now: datetime) -> int:
        """Reviews rated <= 2 posted within the lookback window."""
        cfg = self.config.recent_negatives
        cutoff = ensure_utc(now) - timedelta(days=cfg.window_days)
        return sum(
            1 for r in lead.base.reviews
            if r.rating <= cfg.negative_rating_max
            and r.date is not None
            and r.date >= cutoff
        )

    def score_recent_negatives(self, lead: EnrichedRecord, now: datetime) -> Optional[FactorScore]:
        cfg = self.config.recent_negatives
        count = self.count_recent_negatives(lead, now)

        for minimum, fraction in cfg.thresholds:
            if count >= minimum:
                return FactorScore(
                    inputs={"count": count},
                    points=round_points(cfg.max_points * fraction),
                )
        return None

    def score_low_response_rate(self, lead: EnrichedRecord) -> Optional[FactorScore]:
        """
        Low owner engagement.

        A business with no reviews has nothing to respond to and earns
        nothing here.
        """
        cfg = self.config.low_response_rate
        response = lead.enrichment.response_rate
        if response is None or response.total == 0:
            return None

        for ceiling, fraction in cfg.thresholds:
            if response.rate < ceiling:
                return FactorScore(
                    inputs={"rate": response.rate},
                    points=round_points(cfg.max_points * fraction),
                )
        return None

    def score_business_size(self, lead: EnrichedRecord) -> Optional[FactorScore]:
        cfg = self.config.business_size
        review_count = lead.base.total_reviews

        for floor, fraction in cfg.thresholds:
            if review_count > floor:
                return FactorScore(
                    inputs={"reviews": review_count},
                    points=round_points(cfg.max_points * fraction),
                )
        return None

    def score_rating_decline(self, lead: EnrichedRecord) -> Optional[FactorScore]:
        """
        Ratings trending down.

        Only counts for businesses that actually have a 1-2 star review.
        """
        cfg = self.config.rating_decline
        trend = lead.enrichment.review_trend
        if trend is None:
            return None

        negative_max = self.config.recent_negatives.negative_rating_max
        if not any(r.rating <= negative_max for r in lead.base.reviews):
            return None

        if trend.trend == TrendDirection.WORSENING or trend.severity == TrendSeverity.CRITICAL:
            fraction = cfg.full_fraction
        elif trend.severity == TrendSeverity.HIGH:
            fraction = cfg.high_severity_fraction
        else:
            return None

        return FactorScore(
            inputs={
                "trend": trend.trend.value,
                "trendScore": trend.severity.value if trend.severity else None,
            },
            points=round_points(cfg.max_points * fraction),
        )

    # =========================================================================
    # SUMMARY
    # =========================================================================

    @staticmethod
    def summarize_distribution(scored: Sequence[ScoredRecord]) -> Dict[PriorityTier, int]:
        """Lead count per priority tier (every tier present)."""
        counts = {tier: 0 for tier in PriorityTier}
        for lead in scored:
            counts[lead.priority] += 1
        return counts

    @staticmethod
    def top_leads(scored: Sequence[ScoredRecord], count: int = 10) -> List[ScoredRecord]:
        return list(scored[:count])

    def log_score_summary(self, scored: Sequence[ScoredRecord]) -> None:
        counts = self.summarize_distribution(scored)
        p = self.config.priority
        logger.info(
            f"Score distribution: critical ({p.critical}+)={counts[PriorityTier.CRITICAL]} "
            f"high ({p.high}-{p.critical - 1})={counts[PriorityTier.HIGH]} "
            f"medium ({p.medium}-{p.high - 1})={counts[PriorityTier.MEDIUM]} "
            f"low (<{p.medium})={counts[PriorityTier.LOW]}"
        )
        for idx, lead in enumerate(scored[:5], 1):
            logger.info(f"  {idx}. {lead.name} (score={lead.score}, priority={lead.priority.value})")
