import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from rapport.database import Base

# Use timezone-aware timestamp type for all datetime columns
TZDateTime = DateTime(timezone=True)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PersonalityProfile(Base):
    __tablename__ = "personality_profiles"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(100), unique=True, index=True)

    # Big Five
    openness: Mapped[float | None] = mapped_column(Float, nullable=True)
    conscientiousness: Mapped[float | None] = mapped_column(Float, nullable=True)
    extraversion: Mapped[float | None] = mapped_column(Float, nullable=True)
    agreeableness: Mapped[float | None] = mapped_column(Float, nullable=True)
    neuroticism: Mapped[float | None] = mapped_column(Float, nullable=True)
    big_five_confidence: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Attachment
    attachment_style: Mapped[str] = mapped_column(String(30), default="UNDETERMINED")
    attachment_anxiety: Mapped[float | None] = mapped_column(Float, nullable=True)
    attachment_avoidance: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Communication and conflict
    communication_style: Mapped[str] = mapped_column(String(20), default="MIXED")
    conflict_style: Mapped[str | None] = mapped_column(String(20), nullable=True)
    repair_initiation: Mapped[float | None] = mapped_column(Float, nullable=True)
    repair_receptivity: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Emotional intelligence
    emotional_awareness: Mapped[float | None] = mapped_column(Float, nullable=True)
    empathy_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    emotional_regulation: Mapped[float | None] = mapped_column(Float, nullable=True)

    confidence_score: Mapped[float] = mapped_column(Float, default=0.0)
    sessions_analyzed: Mapped[int] = mapped_column(Integer, default=0)

    strengths_narrative: Mapped[str | None] = mapped_column(Text, nullable=True)
    growth_areas_narrative: Mapped[str | None] = mapped_column(Text, nullable=True)
    communication_narrative: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(TZDateTime, default=_utcnow, server_default=func.now())
    last_updated: Mapped[datetime] = mapped_column(
        TZDateTime, default=_utcnow, server_default=func.now(), onupdate=_utcnow
    )


class LinguisticSnapshot(Base):
    __tablename__ = "linguistic_snapshots"
    __table_args__ = (UniqueConstraint("session_id", "participant_name", name="uq_snapshot_session_participant"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    profile_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("personality_profiles.id", ondelete="CASCADE"), index=True
    )
    session_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), index=True)
    participant_name: Mapped[str] = mapped_column(String(100))

    total_words: Mapped[int] = mapped_column(Integer, default=0)
    unique_words: Mapped[int] = mapped_column(Integer, default=0)
    avg_word_length: Mapped[float] = mapped_column(Float, default=0.0)
    avg_sentence_length: Mapped[float] = mapped_column(Float, default=0.0)
    first_person_singular: Mapped[float] = mapped_column(Float, default=0.0)
    first_person_plural: Mapped[float] = mapped_column(Float, default=0.0)
    second_person: Mapped[float] = mapped_column(Float, default=0.0)
    third_person: Mapped[float] = mapped_column(Float, default=0.0)
    positive_emotion_words: Mapped[float] = mapped_column(Float, default=0.0)
    negative_emotion_words: Mapped[float] = mapped_column(Float, default=0.0)
    anxiety_words: Mapped[float] = mapped_column(Float, default=0.0)
    anger_words: Mapped[float] = mapped_column(Float, default=0.0)
    sadness_words: Mapped[float] = mapped_column(Float, default=0.0)
    certainty_words: Mapped[float] = mapped_column(Float, default=0.0)
    tentative_words: Mapped[float] = mapped_column(Float, default=0.0)
    discrepancy_words: Mapped[float] = mapped_column(Float, default=0.0)
    affiliation_words: Mapped[float] = mapped_column(Float, default=0.0)
    achievement_words: Mapped[float] = mapped_column(Float, default=0.0)
    power_words: Mapped[float] = mapped_column(Float, default=0.0)
    question_frequency: Mapped[float] = mapped_column(Float, default=0.0)
    exclamation_frequency: Mapped[float] = mapped_column(Float, default=0.0)
    hedging_phrases: Mapped[float] = mapped_column(Float, default=0.0)

    criticism_count: Mapped[int] = mapped_column(Integer, default=0)
    contempt_count: Mapped[int] = mapped_column(Integer, default=0)
    defensiveness_count: Mapped[int] = mapped_column(Integer, default=0)
    stonewalling_count: Mapped[int] = mapped_column(Integer, default=0)
    repair_attempt_count: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(TZDateTime, default=_utcnow, server_default=func.now())


class RelationshipDynamic(Base):
    __tablename__ = "relationship_dynamics"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    group_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), unique=True, index=True)

    pursuer_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    withdrawer_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    pursuer_withdrawer_confidence: Mapped[float | None] = mapped_column(Float, nullable=True)
    pursuer_withdrawer_indicators: Mapped[list | None] = mapped_column(JSONB, nullable=True)

    dominance: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    topic_initiation: Mapped[dict | None] = mapped_column(JSONB, nullable=True)

    emotional_reciprocity: Mapped[float | None] = mapped_column(Float, nullable=True)
    validation_balance: Mapped[float | None] = mapped_column(Float, nullable=True)
    support_balance: Mapped[float | None] = mapped_column(Float, nullable=True)
    escalation_tendency: Mapped[float | None] = mapped_column(Float, nullable=True)
    deescalation_skill: Mapped[float | None] = mapped_column(Float, nullable=True)
    resolution_rate: Mapped[float | None] = mapped_column(Float, nullable=True)
    positive_to_negative_ratio: Mapped[float | None] = mapped_column(Float, nullable=True)

    relationship_strengths: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    growth_opportunities: Mapped[list | None] = mapped_column(JSONB, nullable=True)

    dynamic_narrative: Mapped[str | None] = mapped_column(Text, nullable=True)
    coaching_focus: Mapped[str | None] = mapped_column(Text, nullable=True)

    confidence_score: Mapped[float] = mapped_column(Float, default=0.0)
    sessions_analyzed: Mapped[int] = mapped_column(Integer, default=0)
    last_updated: Mapped[datetime] = mapped_column(
        TZDateTime, default=_utcnow, server_default=func.now(), onupdate=_utcnow
    )


class Session(Base):
    __tablename__ = "sessions"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    group_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), index=True)
    status: Mapped[str] = mapped_column(String(20), default="PENDING")
    profiled: Mapped[bool] = mapped_column(Boolean, default=False)
    messages: Mapped[list] = mapped_column(JSONB)
    participant_map: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    created_at: Mapped[datetime] = mapped_column(TZDateTime, default=_utcnow, server_default=func.now())


class AnalysisResult(Base):
    __tablename__ = "analysis_results"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("sessions.id", ondelete="CASCADE"), unique=True
    )
    overall_score: Mapped[float] = mapped_column(Float)
    bank_change: Mapped[int] = mapped_column(Integer, default=0)
    green_card_count: Mapped[int] = mapped_column(Integer, default=0)
    yellow_card_count: Mapped[int] = mapped_column(Integer, default=0)
    red_card_count: Mapped[int] = mapped_column(Integer, default=0)
    cards: Mapped[list] = mapped_column(JSONB, default=list)
    horsemen_detected: Mapped[list] = mapped_column(JSONB, default=list)
    four_horsemen: Mapped[list] = mapped_column(JSONB, default=list)
    repair_attempts: Mapped[int] = mapped_column(Integer, default=0)
    topic_tags: Mapped[list] = mapped_column(JSONB, default=list)
    speaker_scores: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    what_went_well: Mapped[str | None] = mapped_column(Text, nullable=True)
    try_next_time: Mapped[str | None] = mapped_column(Text, nullable=True)
    repair_suggestion: Mapped[str | None] = mapped_column(Text, nullable=True)
    safety_flag: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(TZDateTime, default=_utcnow, server_default=func.now())


class PatternInsight(Base):
    __tablename__ = "pattern_insights"
    # One active insight per (subject, pattern_type, category)
    __table_args__ = (
        Index(
            "uq_pattern_insights_active",
            "subject_id",
            "pattern_type",
            "category",
            unique=True,
            postgresql_where=text("NOT dismissed"),
            sqlite_where=text("NOT dismissed"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    subject_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), index=True)
    user_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    pattern_type: Mapped[str] = mapped_column(String(30))
    category: Mapped[str] = mapped_column(String(100))
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text)
    evidence: Mapped[dict] = mapped_column(JSONB)
    confidence: Mapped[float] = mapped_column(Float)
    impact: Mapped[str] = mapped_column(String(10))
    sessions_count: Mapped[int] = mapped_column(Integer, default=0)
    first_occurrence: Mapped[datetime | None] = mapped_column(TZDateTime, nullable=True)
    last_occurrence: Mapped[datetime | None] = mapped_column(TZDateTime, nullable=True)
    acknowledged: Mapped[bool] = mapped_column(Boolean, default=False)
    dismissed: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(TZDateTime, default=_utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        TZDateTime, default=_utcnow, server_default=func.now(), onupdate=_utcnow
    )


class PatternMetricsCache(Base):
    __tablename__ = "pattern_metrics_cache"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    subject_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), unique=True, index=True)
    metrics: Mapped[dict] = mapped_column(JSONB)
    sessions_count: Mapped[int] = mapped_column(Integer, default=0)
    last_updated: Mapped[datetime] = mapped_column(
        TZDateTime, default=_utcnow, server_default=func.now(), onupdate=_utcnow
    )


class ScoringConfig(Base):
    __tablename__ = "scoring_configs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category: Mapped[str] = mapped_column(String(50), unique=True)
    points: Mapped[int] = mapped_column(Integer)
    card_type: Mapped[str | None] = mapped_column(String(10), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
