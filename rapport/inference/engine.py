from dataclasses import dataclass

from rapport.inference.attachment import AttachmentAnalysis, analyze_attachment
from rapport.inference.big_five import BigFiveScores, analyze_big_five
from rapport.inference.communication import CommunicationAnalysis, analyze_communication
from rapport.inference.conflict import ConflictStyleAnalysis, analyze_conflict_style
from rapport.inference.emotional_intelligence import (
    EmotionalIntelligenceScores,
    analyze_emotional_intelligence,
)
from rapport.inference.rules import TraitInputs
from rapport.linguistics.features import LinguisticFeatures, extract_features
from rapport.linguistics.patterns import HorsemenCounts, detect_four_horsemen, detect_repair_attempts


@dataclass(frozen=True)
class ParticipantFeatures:
    """Everything measured for one speaker in one session."""

    name: str
    features: LinguisticFeatures
    horsemen: HorsemenCounts
    repair_attempts: int
    message_count: int
    identity: str | None = None

    @property
    def word_count(self) -> int:
        return self.features.total_words

    @property
    def key(self) -> str:
        """Durable identity when mapped, otherwise the speaker name."""
        return self.identity or self.name

    def trait_inputs(self) -> TraitInputs:
        return TraitInputs(self.features, self.horsemen, self.repair_attempts)


@dataclass(frozen=True)
class TraitProfile:
    big_five: BigFiveScores
    attachment: AttachmentAnalysis
    communication: CommunicationAnalysis
    conflict: ConflictStyleAnalysis
    emotional_intelligence: EmotionalIntelligenceScores

    @property
    def confidence(self) -> int:
        confidences = (
            self.big_five.confidence,
            self.attachment.confidence,
            self.communication.confidence,
            self.conflict.confidence,
            self.emotional_intelligence.confidence,
        )
        return round(sum(confidences) / len(confidences))

    def numeric_fields(self) -> dict[str, float]:
        """Blendable values keyed by PersonalityProfile column."""
        return {
            "openness": self.big_five.openness,
            "conscientiousness": self.big_five.conscientiousness,
            "extraversion": self.big_five.extraversion,
            "agreeableness": self.big_five.agreeableness,
            "neuroticism": self.big_five.neuroticism,
            "big_five_confidence": self.big_five.confidence,
            "attachment_anxiety": self.attachment.anxiety_score,
            "attachment_avoidance": self.attachment.avoidance_score,
            "repair_initiation": self.conflict.assertiveness_score,
            "repair_receptivity": self.conflict.cooperativeness_score,
            "emotional_awareness": self.emotional_intelligence.emotional_awareness,
            "empathy_score": self.emotional_intelligence.empathy_score,
            "emotional_regulation": self.emotional_intelligence.emotional_regulation,
            "confidence_score": self.confidence,
        }

    def categorical_fields(self) -> dict[str, str]:
        """Classifications that always replace the stored value."""
        return {
            "attachment_style": self.attachment.style.value,
            "communication_style": self.communication.style.value,
            "conflict_style": self.conflict.style.value,
        }


def build_participant(
    name: str,
    contents: list[str],
    identity: str | None = None,
) -> ParticipantFeatures:
    """Run feature extraction and pattern detection over one speaker's messages."""
    text = "\n".join(contents)
    return ParticipantFeatures(
        name=name,
        features=extract_features(text),
        horsemen=detect_four_horsemen(text),
        repair_attempts=detect_repair_attempts(text),
        message_count=len(contents),
        identity=identity,
    )


def infer_traits(participant: ParticipantFeatures) -> TraitProfile:
    inputs = participant.trait_inputs()
    return TraitProfile(
        big_five=analyze_big_five(inputs),
        attachment=analyze_attachment(inputs),
        communication=analyze_communication(inputs),
        conflict=analyze_conflict_style(inputs),
        emotional_intelligence=analyze_emotional_intelligence(inputs),
    )
