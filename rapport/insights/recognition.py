import asyncio
import logging
import uuid
from datetime import datetime, timezone
from itertools import chain

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rapport.config import settings
from rapport.insights.detectors import DETECTORS, Finding, SessionRecord, calculate_metrics
from rapport.locks import KeyedLocks, insight_locks
from rapport.models import AnalysisResult, PatternInsight, PatternMetricsCache, Session

logger = logging.getLogger(__name__)

COMPLETED = "COMPLETED"


def to_record(session: Session, analysis: AnalysisResult) -> SessionRecord:
    return SessionRecord(
        id=str(session.id),
        created_at=session.created_at,
        overall_score=analysis.overall_score,
        topic_tags=tuple(analysis.topic_tags or ()),
        four_horsemen=tuple(analysis.four_horsemen or ()),
        repair_attempts=analysis.repair_attempts or 0,
        green_cards=analysis.green_card_count or 0,
        yellow_cards=analysis.yellow_card_count or 0,
        red_cards=analysis.red_card_count or 0,
    )


class PatternRecognitionEngine:
    """Mines a subject's analysed sessions for recurring patterns.

    A subject is the group (couple or relationship) that owns the sessions.
    """

    def __init__(self, locks: KeyedLocks | None = None, min_sessions: int | None = None):
        self.locks = locks or insight_locks
        self.min_sessions = settings.pattern_min_sessions if min_sessions is None else min_sessions

    async def get_completed_sessions(self, subject_id: uuid.UUID, db: AsyncSession) -> list[SessionRecord]:
        stmt = (
            select(Session, AnalysisResult)
            .join(AnalysisResult, AnalysisResult.session_id == Session.id)
            .where(Session.group_id == subject_id, Session.status == COMPLETED)
            .order_by(Session.created_at.asc())
        )
        result = await db.execute(stmt)
        return [to_record(session, analysis) for session, analysis in result.all()]

    async def analyze_patterns(
        self,
        subject_id: uuid.UUID,
        db: AsyncSession,
        user_id: str | None = None,
    ) -> list[Finding]:
        """Run every detector and upsert the findings, highest confidence first."""
        sessions = await self.get_completed_sessions(subject_id, db)
        if len(sessions) < self.min_sessions:
            logger.info(
                "Not enough sessions for pattern analysis of %s (%d < %d)",
                subject_id,
                len(sessions),
                self.min_sessions,
            )
            return []

        results = await asyncio.gather(*(asyncio.to_thread(detector, sessions) for detector in DETECTORS))
        findings = sorted(chain.from_iterable(results), key=lambda f: f.confidence, reverse=True)

        for finding in findings:
            key = (subject_id, finding.pattern_type.value, finding.category)
            async with self.locks.hold(key):
                await self._store(subject_id, finding, user_id, db)

        logger.info("Stored %d pattern insights for %s", len(findings), subject_id)
        return findings

    async def _store(
        self,
        subject_id: uuid.UUID,
        finding: Finding,
        user_id: str | None,
        db: AsyncSession,
    ) -> PatternInsight:
        stmt = (
            select(PatternInsight)
            .where(
                PatternInsight.subject_id == subject_id,
                PatternInsight.pattern_type == finding.pattern_type.value,
                PatternInsight.category == finding.category,
                PatternInsight.dismissed == False,  # noqa: E712
            )
            .with_for_update()
        )
        insight = (await db.execute(stmt)).scalars().first()

        if insight is None:
            insight = PatternInsight(
                subject_id=subject_id,
                user_id=user_id,
                pattern_type=finding.pattern_type.value,
                category=finding.category,
                first_occurrence=finding.first_occurrence,
            )
            db.add(insight)

        insight.title = finding.title
        insight.description = finding.description
        insight.evidence = finding.evidence
        insight.confidence = finding.confidence
        insight.impact = finding.impact.value
        insight.sessions_count = finding.sessions_count
        insight.last_occurrence = finding.last_occurrence

        await db.flush()
        return insight

    async def get_patterns(
        self,
        subject_id: uuid.UUID,
        db: AsyncSession,
        include_acknowledged: bool = False,
        include_dismissed: bool = False,
    ) -> list[PatternInsight]:
        stmt = select(PatternInsight).where(PatternInsight.subject_id == subject_id)
        if not include_acknowledged:
            stmt = stmt.where(PatternInsight.acknowledged == False)  # noqa: E712
        if not include_dismissed:
            stmt = stmt.where(PatternInsight.dismissed == False)  # noqa: E712
        stmt = stmt.order_by(PatternInsight.confidence.desc(), PatternInsight.created_at.desc())

        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def _get_insight(self, pattern_id: uuid.UUID, db: AsyncSession) -> PatternInsight:
        insight = await db.get(PatternInsight, pattern_id)
        if insight is None:
            raise LookupError(f"Pattern insight {pattern_id} not found")
        return insight

    async def acknowledge_pattern(self, pattern_id: uuid.UUID, db: AsyncSession) -> PatternInsight:
        insight = await self._get_insight(pattern_id, db)
        insight.acknowledged = True
        await db.flush()
        return insight

    async def dismiss_pattern(self, pattern_id: uuid.UUID, db: AsyncSession) -> PatternInsight:
        insight = await self._get_insight(pattern_id, db)
        insight.dismissed = True
        await db.flush()
        return insight

    async def update_metrics_cache(self, subject_id: uuid.UUID, db: AsyncSession) -> PatternMetricsCache | None:
        sessions = await self.get_completed_sessions(subject_id, db)
        if not sessions:
            return None

        metrics = calculate_metrics(sessions)
        stmt = select(PatternMetricsCache).where(PatternMetricsCache.subject_id == subject_id)
        cache = (await db.execute(stmt)).scalar_one_or_none()
        if cache is None:
            cache = PatternMetricsCache(subject_id=subject_id)
            db.add(cache)

        cache.metrics = metrics
        cache.sessions_count = len(sessions)
        cache.last_updated = datetime.now(timezone.utc)
        await db.flush()

        logger.debug("Updated metrics cache for %s", subject_id)
        return cache
