import asyncio
import logging
import uuid
from collections import defaultdict

from sqlalchemy import select

from rapport.analysis.session_analyzer import SessionAnalyzer
from rapport.config import settings
from rapport.database import async_session
from rapport.insights.recognition import PatternRecognitionEngine
from rapport.models import Session
from rapport.narrative.llm_narrator import get_narrator
from rapport.profile_engine.aggregator import ProfileAggregator

logger = logging.getLogger(__name__)


class BatchProcessor:
    def __init__(self, session_factory=None, narrator=None):
        self.session_factory = session_factory or async_session
        narrator = narrator or get_narrator()
        self.analyzer = SessionAnalyzer(narrator)
        self.aggregator = ProfileAggregator(narrator)
        self.recognizer = PatternRecognitionEngine()
        self._progress = {"total": 0, "processed": 0, "failed": 0, "status": "idle"}

    @property
    def progress(self) -> dict:
        return self._progress.copy()

    def _reset(self, status: str, total: int):
        self._progress = {"total": total, "processed": 0, "failed": 0, "status": status}

    async def _select_sessions(self, stmt, limit: int | None, group_id: uuid.UUID | None) -> list[Session]:
        if group_id:
            stmt = stmt.where(Session.group_id == group_id)
        stmt = stmt.order_by(Session.created_at.asc())
        if limit:
            stmt = stmt.limit(limit)
        async with self.session_factory() as db:
            result = await db.execute(stmt)
            return list(result.scalars().all())

    async def analyze_sessions(self, limit: int | None = None, group_id: uuid.UUID | None = None) -> dict:
        """Card-score every pending session."""
        sessions = await self._select_sessions(
            select(Session).where(Session.status == "PENDING"), limit, group_id
        )
        self._reset("analyzing", len(sessions))
        semaphore = asyncio.Semaphore(settings.max_concurrent_sessions)

        async def analyze_one(session: Session):
            async with semaphore:
                try:
                    async with self.session_factory() as db:
                        await self.analyzer.analyze_session(session.id, db)
                        await db.commit()
                    self._progress["processed"] += 1
                except Exception:
                    logger.exception("Failed to analyze session %s", session.id)
                    self._progress["failed"] += 1

        batch_size = settings.batch_chunk_size
        for i in range(0, len(sessions), batch_size):
            batch = sessions[i : i + batch_size]
            await asyncio.gather(*(analyze_one(s) for s in batch))
            logger.info(
                "Analyzed batch %d-%d of %d",
                i,
                min(i + batch_size, len(sessions)),
                len(sessions),
            )

        self._progress["status"] = "analysis_complete"
        return self._progress.copy()

    async def process_profiles(self, limit: int | None = None, group_id: uuid.UUID | None = None) -> dict:
        """Fold completed, not yet profiled sessions into profiles and dynamics.

        Groups run concurrently; sessions within a group run oldest first
        because blending depends on order.
        """
        sessions = await self._select_sessions(
            select(Session).where(Session.status == "COMPLETED", Session.profiled == False),  # noqa: E712
            limit,
            group_id,
        )
        self._reset("profiling", len(sessions))

        by_group: dict[uuid.UUID, list[Session]] = defaultdict(list)
        for session in sessions:
            by_group[session.group_id].append(session)

        semaphore = asyncio.Semaphore(settings.max_concurrent_sessions)

        async def process_group(group_sessions: list[Session]):
            async with semaphore:
                for session in group_sessions:
                    try:
                        await self._process_one(session.id)
                        self._progress["processed"] += 1
                    except Exception:
                        logger.exception("Failed to build profiles for session %s", session.id)
                        self._progress["failed"] += 1

        await asyncio.gather(*(process_group(group) for group in by_group.values()))

        self._progress["status"] = "profiles_complete"
        return self._progress.copy()

    async def _process_one(self, session_id: uuid.UUID):
        async with self.session_factory() as db:
            session = await db.get(Session, session_id)
            await self.aggregator.process_session(
                session.id, session.group_id, session.messages, session.participant_map, db
            )
            session.profiled = True
            await db.commit()

    async def refresh_patterns(self, group_id: uuid.UUID | None = None) -> dict:
        """Re-run pattern recognition and the metrics cache for each group."""
        if group_id:
            group_ids = [group_id]
        else:
            async with self.session_factory() as db:
                stmt = select(Session.group_id).where(Session.status == "COMPLETED").distinct()
                result = await db.execute(stmt)
                group_ids = [row[0] for row in result.all()]

        self._reset("patterns", len(group_ids))
        for gid in group_ids:
            try:
                async with self.session_factory() as db:
                    await self.recognizer.analyze_patterns(gid, db)
                    await self.recognizer.update_metrics_cache(gid, db)
                    await db.commit()
                self._progress["processed"] += 1
            except Exception:
                logger.exception("Failed to refresh patterns for group %s", gid)
                self._progress["failed"] += 1

        self._progress["status"] = "complete"
        return self._progress.copy()

    async def run_full_pipeline(self, limit: int | None = None, group_id: uuid.UUID | None = None) -> dict:
        """Run analysis → profiles → patterns."""
        logger.info("Starting full pipeline")
        await self.analyze_sessions(limit=limit, group_id=group_id)
        await self.process_profiles(limit=limit, group_id=group_id)
        return await self.refresh_patterns(group_id=group_id)
