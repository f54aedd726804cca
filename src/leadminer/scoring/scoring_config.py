"""
Lead scoring thresholds and weights.

Every tunable of the rubric lives here so the scorer itself holds no magic
numbers. A lead's score is the sum of four independent components:

    RECENT_NEGATIVES   (40 pts) - fresh 1-2 star reviews = urgent pain
    LOW_RESPONSE_RATE  (30 pts) - owner is not managing the reputation
    BUSINESS_SIZE      (20 pts) - bigger business = bigger contract
    RATING_DECLINE     (10 pts) - ratings are getting worse

Partial awards are a fraction of the component weight, rounded half up.
"""

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class RecentNegativesConfig:
    """
    RECENT_NEGATIVES (40 points max).

    Counts reviews rated <= 2 posted within the lookback window.
    """
    max_points: int = 40
    window_days: int = 30
    negative_rating_max: int = 2

    # (minimum count, fraction of max_points), first match wins
    thresholds: Tuple[Tuple[int, float], ...] = (
        (5, 1.0),
        (3, 0.6),
        (1, 0.3),
    )


@dataclass(frozen=True)
class LowResponseRateConfig:
    """
    LOW_RESPONSE_RATE (30 points max).

    Rate is strictly below the threshold to earn the fraction.
    """
    max_points: int = 30

    thresholds: Tuple[Tuple[float, float], ...] = (
        (0.2, 1.0),
        (0.5, 0.5),
    )


@dataclass(frozen=True)
class BusinessSizeConfig:
    """
    BUSINESS_SIZE (20 points max).

    Uses the raw lifetime review count, strictly above the threshold.
    Independent from the enrichment size tiers.
    """
    max_points: int = 20

    thresholds: Tuple[Tuple[int, float], ...] = (
        (100, 1.0),
        (50, 0.7),
        (20, 0.4),
    )


@dataclass(frozen=True)
class RatingDeclineConfig:
    """
    RATING_DECLINE (10 points max).

    Full points when the trend is worsening or its severity is critical,
    half when severity is high.
    """
    max_points: int = 10
    full_fraction: float = 1.0
    high_severity_fraction: float = 0.5


@dataclass(frozen=True)
class PriorityThresholds:
    """Minimum final score per priority tier."""
    critical: int = 80
    high: int = 60
    medium: int = 40


@dataclass(frozen=True)
class ScoringConfig:
    """
    Complete lead scoring configuration.

    Single entry point for calibration; inject a modified copy into
    LeadScorer to experiment without touching the scoring code.
    """
    recent_negatives: RecentNegativesConfig = field(default_factory=RecentNegativesConfig)
    low_response_rate: LowResponseRateConfig = field(default_factory=LowResponseRateConfig)
    business_size: BusinessSizeConfig = field(default_factory=BusinessSizeConfig)
    rating_decline: RatingDeclineConfig = field(default_factory=RatingDeclineConfig)
    priority: PriorityThresholds = field(default_factory=PriorityThresholds)

    # Final score cap
    max_total_score: int = 100

    @property
    def weights(self) -> dict:
        """Component weights keyed by factor name."""
        return {
            "recentNegatives": self.recent_negatives.max_points,
            "lowResponseRate": self.low_response_rate.max_points,
            "businessSize": self.business_size.max_points,
            "ratingDecline": self.rating_decline.max_points,
        }

    def validate(self) -> bool:
        """Check the component weights add up to the score cap."""
        total_max = sum(self.weights.values())
        if total_max != self.max_total_score:
            raise ValueError(
                f"Sum of component weights ({total_max}) != max_total_score ({self.max_total_score})"
            )
        p = self.priority
        if not (p.critical > p.high > p.medium >= 0):
            raise ValueError("Priority thresholds must be strictly decreasing")
        return True


DEFAULT_CONFIG = ScoringConfig()
