"""Relationship-level metrics for a two-person session."""

import logging
from dataclasses import asdict, dataclass, field

from rapport.inference.engine import ParticipantFeatures
from rapport.inference.rules import bucket_confidence, clamp

logger = logging.getLogger(__name__)

PATTERN_GAP = 25

COMBINED_WORD_CONFIDENCE: tuple[tuple[float, int], ...] = (
    (100, 15),
    (300, 30),
    (500, 50),
    (1000, 65),
    (2000, 80),
    (float("inf"), 90),
)

RELATIONSHIP_STRENGTHS = (
    "healthy_positive_negative_ratio",
    "balanced_emotional_expression",
    "mutual_repair_attempts",
    "shared_identity",
    "constructive_feedback",
    "shared_enthusiasm",
    "connection_language",
)

GROWTH_OPPORTUNITIES = (
    "increase_positive_interactions",
    "emotional_balance",
    "repair_skills",
    "pursuer_withdrawer_pattern",
    "reduce_contempt",
)


@dataclass(frozen=True)
class PursuerWithdrawer:
    is_pattern: bool = False
    pursuer_id: str | None = None
    withdrawer_id: str | None = None
    confidence: float = 0.0
    indicators: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RelationshipDynamics:
    dominance: dict[str, float]
    topic_initiation: dict[str, float]
    pursuer_withdrawer: PursuerWithdrawer
    emotional_reciprocity: float
    validation_balance: float
    support_balance: float
    escalation_tendency: float
    deescalation_skill: float
    resolution_rate: float
    positive_to_negative_ratio: float
    relationship_strengths: list[str]
    growth_opportunities: list[str]
    confidence: int

    def as_dict(self) -> dict:
        return asdict(self)


def _shares(first: float, second: float) -> tuple[float, float]:
    total = first + second
    if total <= 0:
        return 50.0, 50.0
    return first / total * 100, second / total * 100


def _avg_words_per_message(p: ParticipantFeatures) -> float:
    return p.word_count / max(p.message_count, 1)


def detect_pursuer_withdrawer(p1: ParticipantFeatures, p2: ParticipantFeatures) -> PursuerWithdrawer:
    """Score who pursues engagement; a pattern needs a score gap of PATTERN_GAP."""
    scores = {p1.name: 0.0, p2.name: 0.0}
    indicators: list[str] = []
    f1, f2 = p1.features, p2.features

    def favor(pursuer: ParticipantFeatures, delta: float, message: str):
        scores[pursuer.name] += delta
        indicators.append(message)

    question_gap = f1.question_frequency - f2.question_frequency
    if abs(question_gap) > 10:
        leader = p1 if question_gap > 0 else p2
        favor(leader, 20, f"{leader.name} asks more questions")

    emotion_gap = f1.emotion_volume - f2.emotion_volume
    if abs(emotion_gap) > 2:
        leader = p1 if emotion_gap > 0 else p2
        favor(leader, 15, f"{leader.name} expresses more emotion")

    you_gap = f1.second_person - f2.second_person
    if abs(you_gap) > 5:
        leader = p1 if you_gap > 0 else p2
        favor(leader, 15, f'{leader.name} uses more "you"-directed language')

    if p1.horsemen.stonewalling > p2.horsemen.stonewalling + 1:
        favor(p2, 20, f"{p1.name} shows more withdrawal patterns")
    elif p2.horsemen.stonewalling > p1.horsemen.stonewalling + 1:
        favor(p1, 20, f"{p2.name} shows more withdrawal patterns")

    avg1, avg2 = _avg_words_per_message(p1), _avg_words_per_message(p2)
    if avg1 < avg2 * 0.6:
        favor(p2, 15, f"{p1.name} gives shorter responses")
    elif avg2 < avg1 * 0.6:
        favor(p1, 15, f"{p2.name} gives shorter responses")

    gap = abs(scores[p1.name] - scores[p2.name])
    if gap < PATTERN_GAP:
        return PursuerWithdrawer(indicators=indicators)

    pursuer, withdrawer = (p1, p2) if scores[p1.name] > scores[p2.name] else (p2, p1)
    return PursuerWithdrawer(
        is_pattern=True,
        pursuer_id=pursuer.key,
        withdrawer_id=withdrawer.key,
        confidence=min(100.0, 50 + gap),
        indicators=indicators,
    )


def emotional_reciprocity(p1: ParticipantFeatures, p2: ParticipantFeatures) -> float:
    e1, e2 = p1.features.emotion_volume, p2.features.emotion_volume
    total = e1 + e2
    if total == 0:
        return 50.0
    return float(round((1 - abs(e1 / total - e2 / total)) * 100))


def validation_balance(p1: ParticipantFeatures, p2: ParticipantFeatures) -> float:
    score = 50.0
    pos1, pos2 = p1.features.positive_emotion_words, p2.features.positive_emotion_words
    if pos1 > 2 and pos2 > 2:
        score += 20
    elif pos1 > 2 or pos2 > 2:
        score += 10

    criticism = p1.horsemen.criticism + p2.horsemen.criticism
    if criticism == 0:
        score += 20
    elif criticism <= 2:
        score += 10
    else:
        score -= criticism * 5

    if p1.features.first_person_plural > 2 and p2.features.first_person_plural > 2:
        score += 15
    return clamp(score)


def support_balance(p1: ParticipantFeatures, p2: ParticipantFeatures) -> float:
    score = 50.0
    if p1.repair_attempts > 0 and p2.repair_attempts > 0:
        score += 25
    elif p1.repair_attempts > 0 or p2.repair_attempts > 0:
        score += 10

    aff1, aff2 = p1.features.affiliation_words, p2.features.affiliation_words
    if aff1 > 2 and aff2 > 2:
        score += 15
    elif aff1 > 2 or aff2 > 2:
        score += 5

    score -= (p1.horsemen.contempt + p2.horsemen.contempt) * 15
    return clamp(score)


def escalation_tendency(p1: ParticipantFeatures, p2: ParticipantFeatures) -> float:
    score = 30.0 + (p1.horsemen.total + p2.horsemen.total) * 5
    if p1.features.certainty_words > 5 or p2.features.certainty_words > 5:
        score += 10
    if p1.features.negative_emotion_words > 4 or p2.features.negative_emotion_words > 4:
        score += 15
    return clamp(score)


def deescalation_skill(p1: ParticipantFeatures, p2: ParticipantFeatures) -> float:
    score = 40.0 + (p1.repair_attempts + p2.repair_attempts) * 8
    if p1.features.tentative_words > 3 and p2.features.tentative_words > 3:
        score += 15
    if p1.horsemen.contempt + p2.horsemen.contempt == 0:
        score += 15
    return clamp(score)


def resolution_rate(horsemen_total: int, repairs_total: int) -> float:
    if horsemen_total > 0:
        return clamp(30 + 40 * repairs_total / horsemen_total)
    if repairs_total > 0:
        return 80.0
    return 50.0


def gottman_ratio(positive: float, negative: float) -> float:
    """Positive-to-negative ratio; 10 caps the no-negatives case, 1 when both are 0."""
    if negative == 0:
        return 10.0 if positive > 0 else 1.0
    return round(positive / negative, 1)


def _ratio_inputs(p1: ParticipantFeatures, p2: ParticipantFeatures) -> tuple[float, float]:
    positive = sum(
        p.features.positive_emotion_words + p.features.affiliation_words + p.repair_attempts
        for p in (p1, p2)
    )
    negative = sum(p.features.negative_emotion_words + p.horsemen.total for p in (p1, p2))
    return positive, negative


def _tags(
    p1: ParticipantFeatures,
    p2: ParticipantFeatures,
    ratio: float,
    reciprocity: float,
    pattern: PursuerWithdrawer,
) -> tuple[list[str], list[str]]:
    strengths: list[str] = []
    growth: list[str] = []
    f1, f2 = p1.features, p2.features

    if ratio >= 5:
        strengths.append("healthy_positive_negative_ratio")
    elif ratio < 2:
        growth.append("increase_positive_interactions")

    if reciprocity >= 70:
        strengths.append("balanced_emotional_expression")
    elif reciprocity < 40:
        growth.append("emotional_balance")

    if p1.repair_attempts > 0 and p2.repair_attempts > 0:
        strengths.append("mutual_repair_attempts")
    elif p1.repair_attempts == 0 and p2.repair_attempts == 0:
        growth.append("repair_skills")

    if f1.first_person_plural > 2 and f2.first_person_plural > 2:
        strengths.append("shared_identity")

    if pattern.is_pattern:
        growth.append("pursuer_withdrawer_pattern")

    if p1.horsemen.contempt > 0 or p2.horsemen.contempt > 0:
        growth.append("reduce_contempt")

    if p1.horsemen.criticism <= 1 and p2.horsemen.criticism <= 1:
        strengths.append("constructive_feedback")

    if f1.exclamation_frequency > 15 and f2.exclamation_frequency > 15:
        strengths.append("shared_enthusiasm")

    if f1.affiliation_words > 2 or f2.affiliation_words > 2:
        strengths.append("connection_language")

    return strengths, growth


def analyze_relationship_dynamics(
    p1: ParticipantFeatures,
    p2: ParticipantFeatures,
) -> RelationshipDynamics:
    """Combine two participants' measurements into relationship metrics."""
    if p1.name == p2.name:
        raise ValueError("relationship dynamics need two distinct participants")

    words1, words2 = _shares(p1.word_count, p2.word_count)
    msgs1, msgs2 = _shares(p1.message_count, p2.message_count)

    pattern = detect_pursuer_withdrawer(p1, p2)
    reciprocity = emotional_reciprocity(p1, p2)
    ratio = gottman_ratio(*_ratio_inputs(p1, p2))
    strengths, growth = _tags(p1, p2, ratio, reciprocity, pattern)

    dynamics = RelationshipDynamics(
        dominance={p1.name: words1, p2.name: words2},
        topic_initiation={p1.name: msgs1, p2.name: msgs2},
        pursuer_withdrawer=pattern,
        emotional_reciprocity=reciprocity,
        validation_balance=validation_balance(p1, p2),
        support_balance=support_balance(p1, p2),
        escalation_tendency=escalation_tendency(p1, p2),
        deescalation_skill=deescalation_skill(p1, p2),
        resolution_rate=resolution_rate(
            p1.horsemen.total + p2.horsemen.total, p1.repair_attempts + p2.repair_attempts
        ),
        positive_to_negative_ratio=ratio,
        relationship_strengths=strengths,
        growth_opportunities=growth,
        confidence=bucket_confidence(p1.word_count + p2.word_count, COMBINED_WORD_CONFIDENCE),
    )
    logger.debug("Dynamics for %s/%s: ratio=%.1f", p1.name, p2.name, ratio)
    return dynamics
