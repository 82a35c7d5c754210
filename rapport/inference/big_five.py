from dataclasses import dataclass, field

from rapport.inference.rules import (
    ScoringRule,
    TraitInputs,
    apply_rules,
    confidence_from_word_count,
)

BASELINE = 50.0

BIG_FIVE_TRAITS = ("openness", "conscientiousness", "extraversion", "agreeableness", "neuroticism")

OPENNESS_RULES = (
    ScoringRule(lambda x: x.features.avg_word_length > 5, 10, "Longer, more varied word choice"),
    ScoringRule(lambda x: x.features.avg_word_length > 6, 5),
    ScoringRule(lambda x: x.features.vocabulary_richness > 0.7, 10, "Rich vocabulary"),
    ScoringRule(lambda x: x.features.vocabulary_richness > 0.8, 5),
    ScoringRule(lambda x: x.features.tentative_words > 4, 5, "Exploratory, tentative phrasing"),
    ScoringRule(lambda x: x.features.question_frequency > 30, 5, "Frequent questions"),
)

CONSCIENTIOUSNESS_RULES = (
    ScoringRule(lambda x: x.features.achievement_words > 2, 15, "Goal and achievement language"),
    ScoringRule(lambda x: x.features.achievement_words > 4, 10),
    ScoringRule(lambda x: x.features.certainty_words > 3, 5, "Decisive language"),
    ScoringRule(lambda x: x.features.discrepancy_words > 3, -5, "Focus on unmet expectations"),
    ScoringRule(lambda x: x.features.negative_emotion_words < 2, 5),
)

EXTRAVERSION_RULES = (
    ScoringRule(lambda x: x.features.positive_emotion_words > 3, 15, "Positive, expressive language"),
    ScoringRule(lambda x: x.features.positive_emotion_words > 5, 10),
    ScoringRule(lambda x: x.features.affiliation_words > 2, 10, "Social connection language"),
    ScoringRule(lambda x: x.features.exclamation_frequency > 20, 10, "Enthusiastic exclamations"),
    ScoringRule(lambda x: x.features.first_person_plural > 3, 5),
    ScoringRule(lambda x: x.features.tentative_words > 5, -10, "Reserved, tentative phrasing"),
)

AGREEABLENESS_RULES = (
    ScoringRule(lambda x: x.features.first_person_plural > 3, 15, 'Shared "we" language'),
    ScoringRule(lambda x: x.features.affiliation_words > 2, 10, "Warm, affiliative language"),
    ScoringRule(lambda x: x.features.positive_emotion_words > 3, 10),
    ScoringRule(lambda x: x.features.power_words > 3, -15, "Control and power language"),
    ScoringRule(lambda x: x.features.anger_words > 2, -10, "Anger language"),
    ScoringRule(lambda x: x.features.hedging_phrases > 20, 5, "Softened, hedged statements"),
)

NEUROTICISM_RULES = (
    ScoringRule(lambda x: x.features.negative_emotion_words > 3, 15, "Elevated negative emotion"),
    ScoringRule(lambda x: x.features.negative_emotion_words > 5, 10),
    ScoringRule(lambda x: x.features.anxiety_words > 1, 15, "Anxiety language"),
    ScoringRule(lambda x: x.features.anxiety_words > 2, 10),
    ScoringRule(lambda x: x.features.first_person_singular > 12, 10, "High self-focus"),
    ScoringRule(lambda x: x.features.sadness_words > 1, 10, "Sadness language"),
    ScoringRule(
        lambda x: x.features.positive_emotion_words > 4 and x.features.negative_emotion_words < 2,
        -10,
        "Positive emotional tone",
    ),
)

BIG_FIVE_RULES: dict[str, tuple[ScoringRule, ...]] = {
    "openness": OPENNESS_RULES,
    "conscientiousness": CONSCIENTIOUSNESS_RULES,
    "extraversion": EXTRAVERSION_RULES,
    "agreeableness": AGREEABLENESS_RULES,
    "neuroticism": NEUROTICISM_RULES,
}


@dataclass(frozen=True)
class BigFiveScores:
    openness: float = BASELINE
    conscientiousness: float = BASELINE
    extraversion: float = BASELINE
    agreeableness: float = BASELINE
    neuroticism: float = BASELINE
    confidence: int = 0
    indicators: list[str] = field(default_factory=list)


def analyze_big_five(inputs: TraitInputs) -> BigFiveScores:
    """Start every trait at 50 and apply its rule table."""
    scores = {}
    indicators: list[str] = []
    for trait, rules in BIG_FIVE_RULES.items():
        scores[trait], fired = apply_rules(rules, inputs, baseline=BASELINE)
        indicators.extend(f"{trait}: {text}" for text in fired)

    return BigFiveScores(
        **scores,
        confidence=confidence_from_word_count(inputs.features.total_words),
        indicators=indicators,
    )
