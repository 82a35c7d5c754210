from dataclasses import dataclass, field
from enum import Enum

from rapport.inference.rules import (
    ScoringRule,
    TraitInputs,
    apply_rules,
    confidence_from_word_count,
)

# Scores at or above this are "high" on an axis
AXIS_THRESHOLD = 40


class AttachmentStyle(str, Enum):
    SECURE = "SECURE"
    ANXIOUS_PREOCCUPIED = "ANXIOUS_PREOCCUPIED"
    DISMISSIVE_AVOIDANT = "DISMISSIVE_AVOIDANT"
    FEARFUL_AVOIDANT = "FEARFUL_AVOIDANT"
    UNDETERMINED = "UNDETERMINED"


ANXIETY_RULES = (
    ScoringRule(lambda x: x.features.first_person_singular > 10, 15, "High self-focus language"),
    ScoringRule(lambda x: x.features.first_person_singular > 15, 10),
    ScoringRule(lambda x: x.features.negative_emotion_words > 3, 15, "Elevated negative emotion expression"),
    ScoringRule(lambda x: x.features.anxiety_words > 1, 20, "Anxiety-related language"),
    ScoringRule(lambda x: x.features.certainty_words > 5, 10, "Absolutist language patterns"),
    ScoringRule(
        lambda x: x.features.question_frequency > 40, 15, "High question frequency (reassurance-seeking)"
    ),
    ScoringRule(lambda x: x.features.discrepancy_words > 3, 10, "Expressions of unmet expectations"),
    ScoringRule(lambda x: x.horsemen.defensiveness > 2, 10, "Defensive communication patterns"),
)

AVOIDANCE_RULES = (
    ScoringRule(lambda x: x.features.first_person_plural < 2, 20, 'Low shared identity language ("we")'),
    ScoringRule(
        lambda x: x.features.positive_emotion_words < 2 and x.features.negative_emotion_words < 1,
        15,
        "Limited emotional expression",
    ),
    ScoringRule(lambda x: x.features.third_person > 5, 10, "Distancing language patterns"),
    ScoringRule(
        lambda x: x.features.tentative_words > 5 and x.features.positive_emotion_words < 3,
        10,
        "Intellectualized communication",
    ),
    ScoringRule(lambda x: x.horsemen.stonewalling > 2, 20, "Withdrawal/stonewalling patterns"),
    ScoringRule(lambda x: x.features.affiliation_words < 1, 10, "Low connection language"),
    ScoringRule(
        lambda x: x.repair_attempts == 0 and x.features.total_words > 100, 15, "Minimal repair attempts"
    ),
)


@dataclass(frozen=True)
class AttachmentAnalysis:
    style: AttachmentStyle = AttachmentStyle.UNDETERMINED
    anxiety_score: float = 0.0
    avoidance_score: float = 0.0
    confidence: int = 0
    indicators: list[str] = field(default_factory=list)


def classify_attachment(anxiety: float, avoidance: float) -> AttachmentStyle:
    high_anxiety = anxiety >= AXIS_THRESHOLD
    high_avoidance = avoidance >= AXIS_THRESHOLD
    if high_anxiety and high_avoidance:
        return AttachmentStyle.FEARFUL_AVOIDANT
    if high_anxiety:
        return AttachmentStyle.ANXIOUS_PREOCCUPIED
    if high_avoidance:
        return AttachmentStyle.DISMISSIVE_AVOIDANT
    return AttachmentStyle.SECURE


def analyze_attachment(inputs: TraitInputs) -> AttachmentAnalysis:
    anxiety, anxiety_tags = apply_rules(ANXIETY_RULES, inputs)
    avoidance, avoidance_tags = apply_rules(AVOIDANCE_RULES, inputs)
    return AttachmentAnalysis(
        style=classify_attachment(anxiety, avoidance),
        anxiety_score=anxiety,
        avoidance_score=avoidance,
        confidence=confidence_from_word_count(inputs.features.total_words),
        indicators=anxiety_tags + avoidance_tags,
    )
