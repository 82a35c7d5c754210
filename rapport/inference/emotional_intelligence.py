from dataclasses import dataclass, field

from rapport.inference.rules import (
    ScoringRule,
    TraitInputs,
    apply_rules,
    confidence_from_word_count,
)

BASELINE = 50.0

AWARENESS_RULES = (
    ScoringRule(lambda x: x.total_emotion > 3, 15, "Names emotions readily"),
    ScoringRule(lambda x: x.total_emotion > 6, 10),
    ScoringRule(lambda x: x.features.first_person_singular > 8, 10, "Reflects on own experience"),
    ScoringRule(
        lambda x: x.features.hedging_phrases > 15 and x.total_emotion > 2,
        5,
        "Nuanced emotional expression",
    ),
)

EMPATHY_RULES = (
    ScoringRule(
        lambda x: x.features.second_person > 5 and x.horsemen.criticism < 2,
        15,
        "Partner-focused without criticism",
    ),
    ScoringRule(lambda x: x.features.first_person_plural > 3, 10, 'Shared "we" perspective'),
    ScoringRule(lambda x: x.features.question_frequency > 25, 10, "Asks about partner's view"),
    ScoringRule(lambda x: x.repair_attempts > 1, 15, "Repeated repair attempts"),
    ScoringRule(lambda x: x.horsemen.contempt > 1, -20, "Contempt"),
    ScoringRule(lambda x: x.horsemen.criticism > 2, -10, "Frequent criticism"),
)

REGULATION_RULES = (
    ScoringRule(
        lambda x: x.features.negative_emotion_words < 3 and x.features.total_words > 100,
        10,
        "Low negativity over a long exchange",
    ),
    ScoringRule(lambda x: x.repair_attempts > 0, 15, "Makes repair attempts"),
    ScoringRule(lambda x: x.repair_attempts > 2, 10),
    ScoringRule(lambda x: x.horsemen.contempt > 0, -15, "Contempt under stress"),
    ScoringRule(lambda x: x.horsemen.stonewalling > 1, -10, "Shuts down under stress"),
    ScoringRule(lambda x: x.horsemen.defensiveness > 2, -10, "Defensive under stress"),
    ScoringRule(
        lambda x: x.features.tentative_words > 3 and x.features.certainty_words < 4,
        10,
        "Measured, open phrasing",
    ),
)


@dataclass(frozen=True)
class EmotionalIntelligenceScores:
    emotional_awareness: float = BASELINE
    empathy_score: float = BASELINE
    emotional_regulation: float = BASELINE
    confidence: int = 0
    indicators: list[str] = field(default_factory=list)


def analyze_emotional_intelligence(inputs: TraitInputs) -> EmotionalIntelligenceScores:
    awareness, awareness_tags = apply_rules(AWARENESS_RULES, inputs, baseline=BASELINE)
    empathy, empathy_tags = apply_rules(EMPATHY_RULES, inputs, baseline=BASELINE)
    regulation, regulation_tags = apply_rules(REGULATION_RULES, inputs, baseline=BASELINE)

    return EmotionalIntelligenceScores(
        emotional_awareness=awareness,
        empathy_score=empathy,
        emotional_regulation=regulation,
        confidence=confidence_from_word_count(inputs.features.total_words),
        indicators=awareness_tags + empathy_tags + regulation_tags,
    )
