"""Satir communication modes."""

from dataclasses import dataclass, field
from enum import Enum

from rapport.inference.rules import (
    ScoringRule,
    TraitInputs,
    apply_rules,
    confidence_from_word_count,
)

# The top mode must beat the runner-up by more than this, else MIXED
DOMINANCE_MARGIN = 10


class CommunicationStyle(str, Enum):
    PLACATER = "PLACATER"
    BLAMER = "BLAMER"
    COMPUTER = "COMPUTER"
    DISTRACTER = "DISTRACTER"
    LEVELER = "LEVELER"
    MIXED = "MIXED"


PLACATER_RULES = (
    ScoringRule(lambda x: x.features.tentative_words > 5, 20, "Tentative language (Placater)"),
    ScoringRule(lambda x: x.features.hedging_phrases > 30, 20, "Heavy hedging (Placater)"),
    ScoringRule(lambda x: x.repair_attempts > 3, 15, "Frequent apologies (Placater)"),
    ScoringRule(lambda x: x.features.affiliation_words > 3, 10, "Harmony-seeking language (Placater)"),
)

BLAMER_RULES = (
    ScoringRule(lambda x: x.horsemen.criticism > 2, 25, "Criticism patterns (Blamer)"),
    ScoringRule(lambda x: x.horsemen.contempt > 1, 30, "Contempt patterns (Blamer)"),
    ScoringRule(lambda x: x.features.second_person > 15, 15, '"You"-focused statements (Blamer)'),
    ScoringRule(lambda x: x.features.certainty_words > 5, 10, "Absolutist language (Blamer)"),
    ScoringRule(lambda x: x.features.power_words > 2, 15, "Control language (Blamer)"),
)

COMPUTER_RULES = (
    ScoringRule(
        lambda x: x.features.positive_emotion_words < 2 and x.features.negative_emotion_words < 2,
        25,
        "Low emotional expression (Computer)",
    ),
    ScoringRule(lambda x: x.features.avg_word_length > 5, 10, "Complex vocabulary (Computer)"),
    ScoringRule(lambda x: x.features.third_person > 5, 15, "Impersonal language (Computer)"),
    ScoringRule(
        lambda x: x.features.tentative_words > 3 and x.features.hedging_phrases > 20,
        15,
        "Analytical hedging (Computer)",
    ),
)

DISTRACTER_RULES = (
    ScoringRule(lambda x: x.horsemen.stonewalling > 2, 25, "Topic avoidance (Distracter)"),
    ScoringRule(lambda x: x.features.exclamation_frequency > 30, 15, "Deflecting exclamations (Distracter)"),
    ScoringRule(lambda x: x.features.avg_sentence_length < 5, 10, "Short, fragmented replies (Distracter)"),
)

LEVELER_RULES = (
    ScoringRule(lambda x: x.features.first_person_plural > 3, 20, 'Shared "we" language (Leveler)'),
    ScoringRule(
        lambda x: x.features.positive_emotion_words > 3 and x.features.negative_emotion_words < 3,
        15,
        "Balanced emotional tone (Leveler)",
    ),
    ScoringRule(
        lambda x: x.repair_attempts > 0 and x.horsemen.criticism < 2 and x.horsemen.contempt < 1,
        25,
        "Constructive repair (Leveler)",
    ),
    ScoringRule(lambda x: x.features.affiliation_words > 2, 15, "Connection language (Leveler)"),
    ScoringRule(lambda x: x.features.certainty_words < 3, 10, "Open, non-absolutist language (Leveler)"),
)

MODE_RULES: dict[CommunicationStyle, tuple[ScoringRule, ...]] = {
    CommunicationStyle.PLACATER: PLACATER_RULES,
    CommunicationStyle.BLAMER: BLAMER_RULES,
    CommunicationStyle.COMPUTER: COMPUTER_RULES,
    CommunicationStyle.DISTRACTER: DISTRACTER_RULES,
    CommunicationStyle.LEVELER: LEVELER_RULES,
}


@dataclass(frozen=True)
class CommunicationAnalysis:
    style: CommunicationStyle = CommunicationStyle.MIXED
    scores: dict[str, float] = field(default_factory=dict)
    confidence: int = 0
    indicators: list[str] = field(default_factory=list)


def normalize_scores(raw: dict[str, float]) -> dict[str, float]:
    """Scale scores to sum to 100; all-zero input stays all-zero."""
    total = sum(raw.values())
    if total <= 0:
        return dict(raw)
    return {name: value * 100 / total for name, value in raw.items()}


def classify_communication(scores: dict[str, float]) -> CommunicationStyle:
    """Top scorer wins only by a margin greater than DOMINANCE_MARGIN."""
    ranked = sorted(scores.items(), key=lambda item: item[1], reverse=True)
    if len(ranked) < 2:
        return CommunicationStyle.MIXED
    (top_name, top_score), (_, runner_up) = ranked[0], ranked[1]
    if top_score - runner_up > DOMINANCE_MARGIN:
        return CommunicationStyle(top_name.upper())
    return CommunicationStyle.MIXED


def analyze_communication(inputs: TraitInputs) -> CommunicationAnalysis:
    raw = {}
    indicators: list[str] = []
    for mode, rules in MODE_RULES.items():
        raw[mode.value.lower()], fired = apply_rules(rules, inputs)
        indicators.extend(fired)

    scores = normalize_scores(raw)
    return CommunicationAnalysis(
        style=classify_communication(scores),
        scores=scores,
        confidence=confidence_from_word_count(inputs.features.total_words),
        indicators=indicators,
    )
