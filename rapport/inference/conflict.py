"""Thomas-Kilmann conflict modes."""

from dataclasses import dataclass, field
from enum import Enum

from rapport.inference.rules import (
    ScoringRule,
    TraitInputs,
    apply_rules,
    confidence_from_word_count,
)

LOW_CUT = 40
HIGH_CUT = 60


class ConflictStyle(str, Enum):
    AVOIDING = "avoiding"
    ACCOMMODATING = "accommodating"
    COMPETING = "competing"
    COLLABORATING = "collaborating"
    COMPROMISING = "compromising"


ASSERTIVENESS_RULES = (
    ScoringRule(lambda x: x.features.first_person_singular > 10, 20, "States own needs"),
    ScoringRule(lambda x: x.features.power_words > 2, 20, "Power language"),
    ScoringRule(lambda x: x.horsemen.criticism > 1, 15, "Pushes back critically"),
    ScoringRule(lambda x: x.features.certainty_words > 3, 15, "Certain, direct statements"),
    ScoringRule(lambda x: x.features.achievement_words > 2, 10, "Outcome-focused language"),
    ScoringRule(lambda x: x.horsemen.stonewalling > 2, -10, "Withdraws instead of asserting"),
)

COOPERATIVENESS_RULES = (
    ScoringRule(lambda x: x.features.first_person_plural > 3, 25, 'Shared "we" framing'),
    ScoringRule(
        lambda x: x.features.second_person > 5 and x.horsemen.criticism < 2,
        15,
        "Partner-directed without blame",
    ),
    ScoringRule(lambda x: x.repair_attempts > 1, 20, "Repair attempts"),
    ScoringRule(lambda x: x.features.affiliation_words > 2, 15, "Affiliation language"),
    ScoringRule(lambda x: x.features.positive_emotion_words > 3, 10, "Positive tone"),
    ScoringRule(lambda x: x.features.tentative_words > 3, 10, "Open to other views"),
    ScoringRule(lambda x: x.horsemen.contempt > 1, -20, "Contempt"),
    ScoringRule(lambda x: x.horsemen.stonewalling > 2, -15, "Stonewalling"),
)


@dataclass(frozen=True)
class ConflictStyleAnalysis:
    style: ConflictStyle = ConflictStyle.COMPROMISING
    assertiveness_score: float = 0.0
    cooperativeness_score: float = 0.0
    confidence: int = 0
    indicators: list[str] = field(default_factory=list)


def classify_conflict(assertiveness: float, cooperativeness: float) -> ConflictStyle:
    low_a, high_a = assertiveness < LOW_CUT, assertiveness >= HIGH_CUT
    low_c, high_c = cooperativeness < LOW_CUT, cooperativeness >= HIGH_CUT
    if low_a and low_c:
        return ConflictStyle.AVOIDING
    if low_a and high_c:
        return ConflictStyle.ACCOMMODATING
    if high_a and low_c:
        return ConflictStyle.COMPETING
    if high_a and high_c:
        return ConflictStyle.COLLABORATING
    return ConflictStyle.COMPROMISING


def analyze_conflict_style(inputs: TraitInputs) -> ConflictStyleAnalysis:
    assertiveness, assert_tags = apply_rules(ASSERTIVENESS_RULES, inputs)
    cooperativeness, coop_tags = apply_rules(COOPERATIVENESS_RULES, inputs)
    return ConflictStyleAnalysis(
        style=classify_conflict(assertiveness, cooperativeness),
        assertiveness_score=assertiveness,
        cooperativeness_score=cooperativeness,
        confidence=confidence_from_word_count(inputs.features.total_words),
        indicators=assert_tags + coop_tags,
    )
