import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rapport.messages import format_transcript, parse_messages
from rapport.models import AnalysisResult, Session
from rapport.narrative.base import NarrativeGenerator
from rapport.narrative.llm_narrator import get_narrator
from rapport.scoring.cards import CardType, ScoringResult, load_score_overrides, merge_score_table, score_transcript
from rapport.scoring.topics import detect_topics

logger = logging.getLogger(__name__)

COMPLETED = "COMPLETED"


class SessionAnalyzer:
    """Card-scores a stored session and records the analysis result."""

    def __init__(self, narrator: NarrativeGenerator | None = None):
        self.narrator = narrator or get_narrator()

    async def score_session(self, messages: list, db: AsyncSession) -> tuple[ScoringResult, list[str]]:
        parsed = parse_messages(messages)
        transcript = format_transcript(parsed)
        table = merge_score_table(await load_score_overrides(db))
        scoring = score_transcript(transcript, table)
        topics = detect_topics(" ".join(msg.content for msg in parsed))
        return scoring, topics

    async def analyze_session(self, session_id: uuid.UUID, db: AsyncSession) -> AnalysisResult:
        """Score the session, store its AnalysisResult and mark it COMPLETED.

        Re-analysing a session replaces the previous result. Raises
        LookupError if the session does not exist.
        """
        session = await db.get(Session, session_id)
        if session is None:
            raise LookupError(f"Session {session_id} not found")

        scoring, topics = await self.score_session(session.messages, db)
        coaching = await self.narrator.coaching(scoring)

        stmt = select(AnalysisResult).where(AnalysisResult.session_id == session_id)
        record = (await db.execute(stmt)).scalar_one_or_none()
        if record is None:
            record = AnalysisResult(session_id=session_id)
            db.add(record)

        record.overall_score = scoring.overall_score
        record.bank_change = scoring.bank_change
        record.green_card_count = scoring.count(CardType.GREEN)
        record.yellow_card_count = scoring.count(CardType.YELLOW)
        record.red_card_count = scoring.count(CardType.RED)
        record.cards = [card.as_dict() for card in scoring.cards]
        record.horsemen_detected = [detection.as_dict() for detection in scoring.horsemen]
        record.four_horsemen = scoring.horsemen_names
        record.repair_attempts = len(scoring.repair_quotes)
        record.topic_tags = topics
        record.speaker_scores = scoring.speaker_scores
        record.what_went_well = coaching.what_went_well
        record.try_next_time = coaching.try_next_time
        record.repair_suggestion = coaching.repair_suggestion
        record.safety_flag = scoring.safety_flag
        session.status = COMPLETED

        await db.flush()
        logger.info(
            "Analyzed session %s: score=%d bank=%+d cards=%d",
            session_id,
            scoring.overall_score,
            scoring.bank_change,
            len(scoring.cards),
        )
        return record
