"""
Sentiment Lexicon Adapter (Deterministic)
=========================================

Maps free review text to a polarity score using the AFINN-165 word list
(term -> integer weight, -5..+5), as shipped by the `afinn` package.
No model, no network, fully reproducible.

Usage:
    analyzer = SentimentAnalyzer()
    result = analyzer.analyze("Rude staff and terrible food.")
    result.label   # SentimentLabel.NEGATIVE
"""

import re
import logging
from typing import Dict, Iterable, List, Mapping, Optional

from afinn import Afinn

from .review_models import NEUTRAL_SENTIMENT, SentimentLabel, SentimentResult

logger = logging.getLogger(__name__)


# =============================================================================
# DEFAULT SENTIMENT LEXICON (AFINN-165)
# =============================================================================

def load_afinn_lexicon(language: str = "en") -> Dict[str, int]:
    """
    Single-word AFINN terms for a language.

    Multi-word phrases ("does not work") are skipped: analysis matches
    whole tokens only.
    """
    afinn = Afinn(language=language)
    lexicon = {
        term: int(weight)
        for term, weight in afinn._dict.items()
        if " " not in term
    }
    logger.debug(f"Loaded {len(lexicon)} AFINN terms ({language})")
    return lexicon


DEFAULT_SENTIMENT_LEXICON: Dict[str, int] = load_afinn_lexicon()

# Tokens that invert the weight of the token that follows them.
DEFAULT_NEGATORS = frozenset({
    "not", "no", "never", "non", "don't", "dont", "doesn't", "doesnt",
    "didn't", "didnt", "isn't", "isnt", "wasn't", "wasnt", "won't", "wont",
    "can't", "cant", "cannot", "couldn't", "wouldn't", "shouldn't",
    "aren't", "weren't",
})

_TOKEN_CLEANUP = re.compile(r"[^a-z0-9'\s-]+")


def tokenize(text: str) -> List[str]:
    """Lowercase, strip punctuation (keeping apostrophes/hyphens), split."""
    cleaned = _TOKEN_CLEANUP.sub(" ", text.lower())
    return [t.strip("'-") for t in cleaned.split() if t.strip("'-")]


class SentimentAnalyzer:
    """
    Lexicon-based sentiment scorer.

    Both the lexicon and the negator set are injectable so tests and
    niche deployments can swap them independently.
    """

    def __init__(
        self,
        lexicon: Optional[Mapping[str, int]] = None,
        negators: Optional[Iterable[str]] = None,
    ):
        self.lexicon = dict(lexicon if lexicon is not None else DEFAULT_SENTIMENT_LEXICON)
        self.negators = frozenset(negators if negators is not None else DEFAULT_NEGATORS)

    def analyze(self, text: Optional[str]) -> SentimentResult:
        """
        Score a text.

        Returns:
            SentimentResult; empty or missing text is neutral with score 0.
        """
        if not text:
            return NEUTRAL_SENTIMENT

        tokens = tokenize(text)
        if not tokens:
            return NEUTRAL_SENTIMENT

        score = 0
        positive: List[str] = []
        negative: List[str] = []

        for i, token in enumerate(tokens):
            weight = self.lexicon.get(token)
            if not weight:
                continue
            if i > 0 and tokens[i - 1] in self.negators:
                weight = -weight
            score += weight
            if weight > 0:
                positive.append(token)
            else:
                negative.append(token)

        if score > 0:
            label = SentimentLabel.POSITIVE
        elif score < 0:
            label = SentimentLabel.NEGATIVE
        else:
            label = SentimentLabel.NEUTRAL

        return SentimentResult(
            score=score,
            comparative=score / len(tokens),
            label=label,
            positive_words=tuple(positive),
            negative_words=tuple(negative),
        )
