"""
LeadMiner Scoring Module
========================

Deterministic lead scoring.

Components:
    - LeadScorer: weighted rubric, priority tiers, stable ranking
    - ScoringConfig: every weight and threshold of the rubric

Usage:
    from leadminer.scoring import LeadScorer

    scorer = LeadScorer()
    scored = scorer.score_all_leads(enriched)

    print(scored[0].score, scored[0].priority.value)
"""

from .lead_scorer import (
    LeadScorer,
    LeadScore,
    ScoredRecord,
    FactorScore,
    PriorityTier,
)
from .scoring_config import (
    ScoringConfig,
    DEFAULT_CONFIG,
)

__all__ = [
    "LeadScorer",
    "LeadScore",
    "ScoredRecord",
    "FactorScore",
    "PriorityTier",
    "ScoringConfig",
    "DEFAULT_CONFIG",
]
