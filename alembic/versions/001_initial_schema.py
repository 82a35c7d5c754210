"""Initial schema

Revision ID: 001
Revises:
Create Date: 2025-01-01 00:00:00.000000
"""
from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

FEATURE_COLUMNS = (
    "first_person_singular",
    "first_person_plural",
    "second_person",
    "third_person",
    "positive_emotion_words",
    "negative_emotion_words",
    "anxiety_words",
    "anger_words",
    "sadness_words",
    "certainty_words",
    "tentative_words",
    "discrepancy_words",
    "affiliation_words",
    "achievement_words",
    "power_words",
    "question_frequency",
    "exclamation_frequency",
    "hedging_phrases",
)


def _score(name: str) -> sa.Column:
    return sa.Column(name, sa.Float(), nullable=True)


def upgrade() -> None:
    op.create_table(
        "personality_profiles",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.String(100), nullable=False),
        _score("openness"),
        _score("conscientiousness"),
        _score("extraversion"),
        _score("agreeableness"),
        _score("neuroticism"),
        _score("big_five_confidence"),
        sa.Column("attachment_style", sa.String(30), server_default="UNDETERMINED"),
        _score("attachment_anxiety"),
        _score("attachment_avoidance"),
        sa.Column("communication_style", sa.String(20), server_default="MIXED"),
        sa.Column("conflict_style", sa.String(20), nullable=True),
        _score("repair_initiation"),
        _score("repair_receptivity"),
        _score("emotional_awareness"),
        _score("empathy_score"),
        _score("emotional_regulation"),
        sa.Column("confidence_score", sa.Float(), server_default="0"),
        sa.Column("sessions_analyzed", sa.Integer(), server_default="0"),
        sa.Column("strengths_narrative", sa.Text(), nullable=True),
        sa.Column("growth_areas_narrative", sa.Text(), nullable=True),
        sa.Column("communication_narrative", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("last_updated", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_personality_profiles_user_id", "personality_profiles", ["user_id"], unique=True)

    op.create_table(
        "linguistic_snapshots",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("profile_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("session_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("participant_name", sa.String(100), nullable=False),
        sa.Column("total_words", sa.Integer(), server_default="0"),
        sa.Column("unique_words", sa.Integer(), server_default="0"),
        sa.Column("avg_word_length", sa.Float(), server_default="0"),
        sa.Column("avg_sentence_length", sa.Float(), server_default="0"),
        *(sa.Column(name, sa.Float(), server_default="0") for name in FEATURE_COLUMNS),
        sa.Column("criticism_count", sa.Integer(), server_default="0"),
        sa.Column("contempt_count", sa.Integer(), server_default="0"),
        sa.Column("defensiveness_count", sa.Integer(), server_default="0"),
        sa.Column("stonewalling_count", sa.Integer(), server_default="0"),
        sa.Column("repair_attempt_count", sa.Integer(), server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["profile_id"], ["personality_profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("session_id", "participant_name", name="uq_snapshot_session_participant"),
    )
    op.create_index("ix_linguistic_snapshots_profile_id", "linguistic_snapshots", ["profile_id"])
    op.create_index("ix_linguistic_snapshots_session_id", "linguistic_snapshots", ["session_id"])

    op.create_table(
        "relationship_dynamics",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("group_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("pursuer_id", sa.String(100), nullable=True),
        sa.Column("withdrawer_id", sa.String(100), nullable=True),
        _score("pursuer_withdrawer_confidence"),
        sa.Column("pursuer_withdrawer_indicators", postgresql.JSONB(), nullable=True),
        sa.Column("dominance", postgresql.JSONB(), nullable=True),
        sa.Column("topic_initiation", postgresql.JSONB(), nullable=True),
        _score("emotional_reciprocity"),
        _score("validation_balance"),
        _score("support_balance"),
        _score("escalation_tendency"),
        _score("deescalation_skill"),
        _score("resolution_rate"),
        _score("positive_to_negative_ratio"),
        sa.Column("relationship_strengths", postgresql.JSONB(), nullable=True),
        sa.Column("growth_opportunities", postgresql.JSONB(), nullable=True),
        sa.Column("dynamic_narrative", sa.Text(), nullable=True),
        sa.Column("coaching_focus", sa.Text(), nullable=True),
        sa.Column("confidence_score", sa.Float(), server_default="0"),
        sa.Column("sessions_analyzed", sa.Integer(), server_default="0"),
        sa.Column("last_updated", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_relationship_dynamics_group_id", "relationship_dynamics", ["group_id"], unique=True)

    op.create_table(
        "sessions",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("group_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("status", sa.String(20), server_default="PENDING"),
        sa.Column("profiled", sa.Boolean(), server_default="false"),
        sa.Column("messages", postgresql.JSONB(), nullable=False),
        sa.Column("participant_map", postgresql.JSONB(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sessions_group_id", "sessions", ["group_id"])

    op.create_table(
        "analysis_results",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("session_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("overall_score", sa.Float(), nullable=False),
        sa.Column("bank_change", sa.Integer(), server_default="0"),
        sa.Column("green_card_count", sa.Integer(), server_default="0"),
        sa.Column("yellow_card_count", sa.Integer(), server_default="0"),
        sa.Column("red_card_count", sa.Integer(), server_default="0"),
        sa.Column("cards", postgresql.JSONB(), nullable=False),
        sa.Column("horsemen_detected", postgresql.JSONB(), nullable=False),
        sa.Column("four_horsemen", postgresql.JSONB(), nullable=False),
        sa.Column("repair_attempts", sa.Integer(), server_default="0"),
        sa.Column("topic_tags", postgresql.JSONB(), nullable=False),
        sa.Column("speaker_scores", postgresql.JSONB(), nullable=True),
        sa.Column("what_went_well", sa.Text(), nullable=True),
        sa.Column("try_next_time", sa.Text(), nullable=True),
        sa.Column("repair_suggestion", sa.Text(), nullable=True),
        sa.Column("safety_flag", sa.Boolean(), server_default="false"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["session_id"], ["sessions.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("session_id"),
    )

    op.create_table(
        "pattern_insights",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("subject_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.String(100), nullable=True),
        sa.Column("pattern_type", sa.String(30), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("evidence", postgresql.JSONB(), nullable=False),
        sa.Column("confidence", sa.Float(), nullable=False),
        sa.Column("impact", sa.String(10), nullable=False),
        sa.Column("sessions_count", sa.Integer(), server_default="0"),
        sa.Column("first_occurrence", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_occurrence", sa.DateTime(timezone=True), nullable=True),
        sa.Column("acknowledged", sa.Boolean(), server_default="false"),
        sa.Column("dismissed", sa.Boolean(), server_default="false"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_pattern_insights_subject_id", "pattern_insights", ["subject_id"])
    # One active insight per (subject, pattern_type, category)
    op.create_index(
        "uq_pattern_insights_active",
        "pattern_insights",
        ["subject_id", "pattern_type", "category"],
        unique=True,
        postgresql_where=sa.text("NOT dismissed"),
    )

    op.create_table(
        "pattern_metrics_cache",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("subject_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("metrics", postgresql.JSONB(), nullable=False),
        sa.Column("sessions_count", sa.Integer(), server_default="0"),
        sa.Column("last_updated", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_pattern_metrics_cache_subject_id", "pattern_metrics_cache", ["subject_id"], unique=True)

    op.create_table(
        "scoring_configs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column("card_type", sa.String(10), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default="true"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("category"),
    )


def downgrade() -> None:
    op.drop_table("scoring_configs")
    op.drop_table("pattern_metrics_cache")
    op.drop_table("pattern_insights")
    op.drop_table("analysis_results")
    op.drop_table("sessions")
    op.drop_table("relationship_dynamics")
    op.drop_table("linguistic_snapshots")
    op.drop_table("personality_profiles")
