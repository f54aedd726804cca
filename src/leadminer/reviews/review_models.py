"""
Review Sentiment Models
=======================

Structured output of the sentiment lexicon adapter.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple


class SentimentLabel(str, Enum):
    """Categorical polarity of a review text."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class SentimentResult:
    """Lexicon-based polarity of a single text."""
    score: int
    comparative: float
    label: SentimentLabel
    positive_words: Tuple[str, ...] = field(default_factory=tuple)
    negative_words: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_negative(self) -> bool:
        return self.label == SentimentLabel.NEGATIVE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "comparative": self.comparative,
            "sentiment": self.label.value,
            "positive": list(self.positive_words),
            "negative": list(self.negative_words),
        }


NEUTRAL_SENTIMENT = SentimentResult(score=0, comparative=0.0, label=SentimentLabel.NEUTRAL)
