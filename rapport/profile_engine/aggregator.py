import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rapport.dynamics.analyzer import RelationshipDynamics, analyze_relationship_dynamics
from rapport.evolution.snapshot import SnapshotManager
from rapport.evolution.temporal import blend_fields
from rapport.inference.big_five import BIG_FIVE_TRAITS
from rapport.inference.engine import ParticipantFeatures, TraitProfile, build_participant, infer_traits
from rapport.locks import KeyedLocks, profile_locks
from rapport.messages import group_by_speaker, parse_messages
from rapport.models import PersonalityProfile, RelationshipDynamic
from rapport.narrative.base import CoupleNarrative, NarrativeGenerator, PersonalityNarratives
from rapport.narrative.descriptions import (
    describe_attachment,
    describe_communication,
    describe_growth,
    describe_strength,
    describe_trait,
)
from rapport.narrative.llm_narrator import get_narrator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParticipantProfile:
    participant: ParticipantFeatures
    traits: TraitProfile
    narratives: PersonalityNarratives

    @property
    def confidence(self) -> int:
        return self.traits.confidence


@dataclass(frozen=True)
class SessionAnalysis:
    profiles: dict[str, ParticipantProfile]
    dynamics: RelationshipDynamics | None = None
    couple_narrative: CoupleNarrative | None = None


def _measure(name: str, contents: list[str], identity: str | None) -> tuple[ParticipantFeatures, TraitProfile]:
    participant = build_participant(name, contents, identity)
    return participant, infer_traits(participant)


class ProfileAggregator:
    """Run the per-session pipeline and fold results into durable profiles."""

    def __init__(
        self,
        narrator: NarrativeGenerator | None = None,
        snapshots: SnapshotManager | None = None,
        locks: KeyedLocks | None = None,
    ):
        self.narrator = narrator or get_narrator()
        self.snapshots = snapshots or SnapshotManager()
        self.locks = locks or profile_locks

    async def analyze_messages(
        self,
        messages: list,
        participant_map: dict[str, str] | None = None,
    ) -> SessionAnalysis:
        """Score every speaker in a session without touching the database.

        Raises TypeError or pydantic.ValidationError for malformed messages.
        """
        parsed = parse_messages(messages)
        participant_map = participant_map or {}
        grouped = group_by_speaker(parsed)

        results = await asyncio.gather(*(
            self._analyze_participant(name, contents, participant_map.get(name))
            for name, contents in grouped.items()
        ))
        profiles = {result.participant.name: result for result in results}

        if len(profiles) != 2:
            return SessionAnalysis(profiles=profiles)

        first, second = (result.participant for result in results)
        dynamics = analyze_relationship_dynamics(first, second)
        couple = await self.narrator.couple(dynamics, first.name, second.name)
        return SessionAnalysis(profiles=profiles, dynamics=dynamics, couple_narrative=couple)

    async def _analyze_participant(
        self, name: str, contents: list[str], identity: str | None
    ) -> ParticipantProfile:
        participant, traits = await asyncio.to_thread(_measure, name, contents, identity)
        narratives = await self.narrator.personality(traits)
        return ParticipantProfile(participant=participant, traits=traits, narratives=narratives)

    async def process_session(
        self,
        session_id: uuid.UUID,
        group_id: uuid.UUID,
        messages: list,
        participant_map: dict[str, str] | None,
        db: AsyncSession,
    ) -> SessionAnalysis:
        """Analyze a session, then persist snapshots, profiles and dynamics.

        Only speakers mapped to a durable identity are persisted. The caller
        owns the transaction and commits.
        """
        analysis = await self.analyze_messages(messages, participant_map)

        mapped = sorted(
            (r for r in analysis.profiles.values() if r.participant.identity is not None),
            key=lambda r: r.participant.identity,
        )
        for result in mapped:
            identity = result.participant.identity
            async with self.locks.hold(("profile", identity)):
                profile = await self._update_profile(identity, result, db)
                await self.snapshots.save_snapshot(profile, session_id, result.participant, db)

        if analysis.dynamics is not None:
            async with self.locks.hold(("dynamic", group_id)):
                await self._update_relationship_dynamic(group_id, analysis.dynamics, analysis.couple_narrative, db)

        logger.info(
            "Processed session %s: %d participants, dynamics=%s",
            session_id,
            len(analysis.profiles),
            analysis.dynamics is not None,
        )
        return analysis

    async def _update_profile(
        self, user_id: str, result: ParticipantProfile, db: AsyncSession
    ) -> PersonalityProfile:
        stmt = select(PersonalityProfile).where(PersonalityProfile.user_id == user_id).with_for_update()
        profile = (await db.execute(stmt)).scalar_one_or_none()

        new_values = result.traits.numeric_fields()
        existing_sessions = profile.sessions_analyzed if profile else 0
        current = {name: getattr(profile, name) for name in new_values} if profile else {}
        blended = blend_fields(current, new_values, existing_sessions)

        # Every value is computed above; assignments below never await, so a
        # cancelled call cannot leave a half-blended row.
        if profile is None:
            profile = PersonalityProfile(user_id=user_id)
            db.add(profile)
        for name, value in blended.items():
            setattr(profile, name, value)
        for name, value in result.traits.categorical_fields().items():
            setattr(profile, name, value)
        profile.strengths_narrative = result.narratives.strengths
        profile.growth_areas_narrative = result.narratives.growth_areas
        profile.communication_narrative = result.narratives.communication
        profile.sessions_analyzed = existing_sessions + 1
        profile.last_updated = datetime.now(timezone.utc)

        await db.flush()
        return profile

    async def _update_relationship_dynamic(
        self,
        group_id: uuid.UUID,
        dynamics: RelationshipDynamics,
        narrative: CoupleNarrative | None,
        db: AsyncSession,
    ) -> RelationshipDynamic:
        stmt = select(RelationshipDynamic).where(RelationshipDynamic.group_id == group_id).with_for_update()
        record = (await db.execute(stmt)).scalar_one_or_none()
        if record is None:
            record = RelationshipDynamic(group_id=group_id, sessions_analyzed=0)
            db.add(record)

        pattern = dynamics.pursuer_withdrawer
        record.pursuer_id = pattern.pursuer_id
        record.withdrawer_id = pattern.withdrawer_id
        record.pursuer_withdrawer_confidence = pattern.confidence if pattern.is_pattern else None
        record.pursuer_withdrawer_indicators = list(pattern.indicators)
        record.dominance = dict(dynamics.dominance)
        record.topic_initiation = dict(dynamics.topic_initiation)
        record.emotional_reciprocity = dynamics.emotional_reciprocity
        record.validation_balance = dynamics.validation_balance
        record.support_balance = dynamics.support_balance
        record.escalation_tendency = dynamics.escalation_tendency
        record.deescalation_skill = dynamics.deescalation_skill
        record.resolution_rate = dynamics.resolution_rate
        record.positive_to_negative_ratio = dynamics.positive_to_negative_ratio
        record.relationship_strengths = list(dynamics.relationship_strengths)
        record.growth_opportunities = list(dynamics.growth_opportunities)
        record.confidence_score = dynamics.confidence
        if narrative is not None:
            record.dynamic_narrative = narrative.dynamic_narrative
            record.coaching_focus = narrative.coaching_focus
        record.sessions_analyzed = (record.sessions_analyzed or 0) + 1
        record.last_updated = datetime.now(timezone.utc)

        await db.flush()
        return record

    async def get_profile(self, user_id: str, db: AsyncSession) -> dict | None:
        """Stored profile with human-readable descriptions, or None."""
        stmt = select(PersonalityProfile).where(PersonalityProfile.user_id == user_id)
        profile = (await db.execute(stmt)).scalar_one_or_none()
        if profile is None:
            return None

        return {
            "profile": profile,
            "trait_descriptions": {
                trait: describe_trait(trait, getattr(profile, trait))
                for trait in BIG_FIVE_TRAITS
                if getattr(profile, trait) is not None
            },
            "attachment_description": describe_attachment(profile.attachment_style),
            "communication_description": describe_communication(profile.communication_style),
        }

    async def get_relationship_dynamic(self, group_id: uuid.UUID, db: AsyncSession) -> dict | None:
        stmt = select(RelationshipDynamic).where(RelationshipDynamic.group_id == group_id)
        record = (await db.execute(stmt)).scalar_one_or_none()
        if record is None:
            return None

        return {
            "dynamic": record,
            "strength_descriptions": [describe_strength(tag) for tag in record.relationship_strengths or []],
            "growth_descriptions": [describe_growth(tag) for tag in record.growth_opportunities or []],
        }

    async def get_profile_evolution(self, user_id: str, db: AsyncSession) -> list[dict]:
        return await self.snapshots.get_profile_evolution(user_id, db)
