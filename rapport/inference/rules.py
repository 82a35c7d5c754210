"""Threshold-gated additive scoring shared by the trait analyzers.

A trait is an ordered tuple of ScoringRule entries. Each rule whose predicate
holds adds its delta to a running total; the total is clamped at the end.
"""

from collections.abc import Callable
from dataclasses import dataclass

from rapport.linguistics.features import LinguisticFeatures
from rapport.linguistics.patterns import HorsemenCounts

# (exclusive upper bound, confidence); the last entry is the ceiling
WORD_COUNT_CONFIDENCE: tuple[tuple[float, int], ...] = (
    (50, 10),
    (100, 25),
    (200, 40),
    (500, 60),
    (1000, 75),
    (2000, 85),
    (float("inf"), 95),
)


@dataclass(frozen=True)
class TraitInputs:
    features: LinguisticFeatures
    horsemen: HorsemenCounts = HorsemenCounts()
    repair_attempts: int = 0

    @property
    def total_emotion(self) -> float:
        f = self.features
        return (
            f.positive_emotion_words
            + f.negative_emotion_words
            + f.anxiety_words
            + f.anger_words
            + f.sadness_words
        )


@dataclass(frozen=True)
class ScoringRule:
    predicate: Callable[[TraitInputs], bool]
    delta: float
    indicator: str | None = None


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def apply_rules(
    rules: tuple[ScoringRule, ...],
    inputs: TraitInputs,
    baseline: float = 0.0,
) -> tuple[float, list[str]]:
    """Run a rule table and return the clamped score with fired indicators."""
    score = baseline
    indicators: list[str] = []
    for rule in rules:
        if rule.predicate(inputs):
            score += rule.delta
            if rule.indicator and rule.indicator not in indicators:
                indicators.append(rule.indicator)
    return clamp(score), indicators


def bucket_confidence(value: float, table: tuple[tuple[float, int], ...]) -> int:
    """Look up ``value`` in an ascending (bound, confidence) table; bounds are exclusive."""
    for bound, confidence in table:
        if value < bound:
            return confidence
    return table[-1][1]


def confidence_from_word_count(word_count: int) -> int:
    return bucket_confidence(word_count, WORD_COUNT_CONFIDENCE)
