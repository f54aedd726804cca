"""
LeadMiner Review Sentiment
==========================

Deterministic lexicon-based sentiment for review texts. No ML.

Modules:
    review_models - SentimentResult, SentimentLabel
    sentiment     - SentimentAnalyzer and the default AFINN-style lexicon
"""

from .review_models import SentimentLabel, SentimentResult, NEUTRAL_SENTIMENT
from .sentiment import SentimentAnalyzer, DEFAULT_SENTIMENT_LEXICON, DEFAULT_NEGATORS

__all__ = [
    "SentimentLabel",
    "SentimentResult",
    "NEUTRAL_SENTIMENT",
    "SentimentAnalyzer",
    "DEFAULT_SENTIMENT_LEXICON",
    "DEFAULT_NEGATORS",
]
