import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rapport.evolution.temporal import session_confidence
from rapport.inference.engine import ParticipantFeatures
from rapport.models import LinguisticSnapshot, PersonalityProfile

logger = logging.getLogger(__name__)

# Floor for the negative-emotion average in the emotion balance ratio
MIN_NEGATIVE_AVERAGE = 0.1

_FEATURE_COLUMNS = (
    "total_words",
    "unique_words",
    "avg_word_length",
    "avg_sentence_length",
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


class SnapshotManager:
    """Per-session linguistic snapshots and the evolution timeline built from them."""

    async def save_snapshot(
        self,
        profile: PersonalityProfile,
        session_id: uuid.UUID,
        participant: ParticipantFeatures,
        db: AsyncSession,
    ) -> LinguisticSnapshot:
        """Store the participant's features, replacing any snapshot for the same session."""
        stmt = select(LinguisticSnapshot).where(
            LinguisticSnapshot.session_id == session_id,
            LinguisticSnapshot.participant_name == participant.name,
        )
        result = await db.execute(stmt)
        snapshot = result.scalar_one_or_none()

        if snapshot is None:
            snapshot = LinguisticSnapshot(session_id=session_id, participant_name=participant.name)
            db.add(snapshot)

        values = participant.features.as_dict()
        snapshot.profile_id = profile.id
        for column in _FEATURE_COLUMNS:
            setattr(snapshot, column, values[column])
        snapshot.criticism_count = participant.horsemen.criticism
        snapshot.contempt_count = participant.horsemen.contempt
        snapshot.defensiveness_count = participant.horsemen.defensiveness
        snapshot.stonewalling_count = participant.horsemen.stonewalling
        snapshot.repair_attempt_count = participant.repair_attempts

        await db.flush()
        return snapshot

    async def get_profile_evolution(self, user_id: str, db: AsyncSession) -> list[dict]:
        """One point per snapshot, oldest first, carrying running averages."""
        stmt = (
            select(LinguisticSnapshot)
            .join(PersonalityProfile, PersonalityProfile.id == LinguisticSnapshot.profile_id)
            .where(PersonalityProfile.user_id == user_id)
            .order_by(LinguisticSnapshot.created_at.asc(), LinguisticSnapshot.id.asc())
        )
        result = await db.execute(stmt)
        snapshots = result.scalars().all()

        if not snapshots:
            logger.info("No snapshots for user %s", user_id)
            return []

        sums = {
            "positive": 0.0,
            "negative": 0.0,
            "self": 0.0,
            "partnership": 0.0,
            "certainty": 0.0,
            "tentative": 0.0,
        }
        timeline = []
        for count, snap in enumerate(snapshots, start=1):
            sums["positive"] += snap.positive_emotion_words
            sums["negative"] += snap.negative_emotion_words
            sums["self"] += snap.first_person_singular
            sums["partnership"] += snap.first_person_plural
            sums["certainty"] += snap.certainty_words
            sums["tentative"] += snap.tentative_words

            avg = {key: total / count for key, total in sums.items()}
            timeline.append({
                "date": snap.created_at,
                "session_id": snap.session_id,
                "confidence": session_confidence(count),
                "traits": {
                    "emotion_balance": avg["positive"] / max(avg["negative"], MIN_NEGATIVE_AVERAGE),
                    "self_focus": avg["self"],
                    "partnership_focus": avg["partnership"],
                    "certainty_level": avg["certainty"],
                    "openness": avg["tentative"],
                },
            })

        return timeline
