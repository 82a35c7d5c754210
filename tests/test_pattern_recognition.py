import uuid
from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from rapport.insights.detectors import (
    Impact,
    PatternType,
    SessionRecord,
    calculate_metrics,
    detect_horsemen_trends,
    detect_positive_patterns,
    detect_time_patterns,
    detect_topic_triggers,
    detect_trends,
)
from rapport.insights.recognition import PatternRecognitionEngine
from rapport.models import AnalysisResult, PatternInsight, Session


def _at(day: int, hour: int = 9) -> datetime:
    # January 2024: the 1st is a Monday, the 6th and 7th a weekend
    return datetime(2024, 1, day, hour, 0, tzinfo=timezone.utc)


def _record(day, score, hour=9, **kwargs):
    return SessionRecord(id=f"s{day}-{hour}", created_at=_at(day, hour), overall_score=score, **kwargs)


class TestTopicTriggers:
    def test_low_scoring_topic(self):
        sessions = [
            _record(1, 100),
            _record(2, 40, topic_tags=("finances",)),
            _record(3, 40, topic_tags=("finances", "finances")),
        ]

        [finding] = detect_topic_triggers(sessions)

        assert finding.pattern_type == PatternType.TOPIC_TRIGGER
        assert finding.category == "finances"
        assert finding.sessions_count == 2
        assert finding.confidence == pytest.approx(0.5 + (2 / 3) * 0.4)
        assert finding.impact == Impact.MEDIUM
        assert [s["id"] for s in finding.evidence["sessions"]] == ["s2-9", "s3-9"]
        assert finding.first_occurrence == _at(2)
        assert finding.last_occurrence == _at(3)

    def test_single_occurrence_ignored(self):
        sessions = [_record(1, 90), _record(2, 20, topic_tags=("work",)), _record(3, 90)]
        assert detect_topic_triggers(sessions) == []

    def test_gap_boundary(self):
        # overall 60, topic average 50: exactly ten below
        sessions = [_record(1, 80), _record(2, 50, topic_tags=("kids",)), _record(3, 50, topic_tags=("kids",))]
        assert [f.category for f in detect_topic_triggers(sessions)] == ["kids"]

    def test_severe_topic_is_high_impact(self):
        sessions = [_record(1, 95), _record(2, 30, topic_tags=("sex",)), _record(3, 30, topic_tags=("sex",))]
        assert detect_topic_triggers(sessions)[0].impact == Impact.HIGH


class TestTimePatterns:
    def test_evening_sessions(self):
        sessions = [
            _record(1, 40, hour=20),
            _record(2, 40, hour=20),
            _record(3, 40, hour=20),
            _record(4, 90),
            _record(5, 90),
        ]

        [finding] = detect_time_patterns(sessions)

        assert finding.category == "evening"
        assert finding.sessions_count == 3
        assert finding.confidence == pytest.approx(0.71)
        assert finding.impact == Impact.MEDIUM

    def test_two_evenings_not_enough(self):
        sessions = [_record(1, 30, hour=21), _record(2, 30, hour=22), _record(3, 90), _record(4, 90)]
        assert detect_time_patterns(sessions) == []

    def test_weekend_worse(self):
        sessions = [_record(6, 50), _record(7, 50), _record(8, 80), _record(9, 80)]

        [finding] = detect_time_patterns(sessions)

        assert finding.category == "weekend"
        assert finding.confidence == 0.7
        assert finding.impact == Impact.MEDIUM
        assert finding.evidence["metrics"]["weekendAverage"] == 50

    def test_weekday_worse(self):
        sessions = [_record(6, 90), _record(7, 90), _record(8, 60), _record(9, 60)]
        assert [f.category for f in detect_time_patterns(sessions)] == ["weekday"]

    def test_weekend_gap_is_inclusive(self):
        at_gap = [_record(6, 65), _record(7, 65), _record(8, 80), _record(9, 80)]
        under_gap = [_record(6, 66), _record(7, 66), _record(8, 80), _record(9, 80)]
        assert len(detect_time_patterns(at_gap)) == 1
        assert detect_time_patterns(under_gap) == []

    def test_weekend_needs_two_each_side(self):
        sessions = [_record(6, 20), _record(8, 90), _record(9, 90), _record(10, 90)]
        assert detect_time_patterns(sessions) == []


class TestTrends:
    def test_improvement(self):
        sessions = [_record(1, 50), _record(2, 50), _record(3, 70), _record(4, 70)]

        [finding] = detect_trends(sessions)

        assert finding.category == "improvement"
        assert finding.confidence == 0.75
        assert finding.impact == Impact.LOW
        assert finding.sessions_count == 4

    def test_severe_decline(self):
        sessions = [_record(1, 80), _record(2, 80), _record(3, 50), _record(4, 50)]
        [finding] = detect_trends(sessions)
        assert finding.category == "decline"
        assert finding.impact == Impact.HIGH

    def test_moderate_decline(self):
        sessions = [_record(1, 80), _record(2, 80), _record(3, 65), _record(4, 65)]
        assert detect_trends(sessions)[0].impact == Impact.MEDIUM

    def test_too_few_sessions(self):
        assert detect_trends([_record(1, 10), _record(2, 10), _record(3, 90)]) == []

    def test_input_order_does_not_matter(self):
        sessions = [_record(4, 70), _record(1, 50), _record(3, 70), _record(2, 50)]
        assert detect_trends(sessions)[0].category == "improvement"

    def test_repair_attempts_rising(self):
        sessions = [
            _record(1, 70),
            _record(2, 70),
            _record(3, 70, repair_attempts=1),
            _record(4, 70, repair_attempts=1),
        ]

        [finding] = detect_trends(sessions)

        assert finding.pattern_type == PatternType.POSITIVE_PATTERN
        assert finding.category == "repair_attempts"
        assert finding.confidence == 0.8

    def test_repair_gain_must_exceed_half(self):
        sessions = [_record(1, 70), _record(2, 70), _record(3, 70, repair_attempts=1), _record(4, 70)]
        assert detect_trends(sessions) == []


class TestHorsemenTrends:
    def test_contempt_is_high_impact(self):
        sessions = [_record(d, 60, four_horsemen=("contempt",) if d <= 2 else ()) for d in range(1, 6)]

        [finding] = detect_horsemen_trends(sessions)

        assert finding.category == "contempt"
        assert finding.impact == Impact.HIGH
        assert finding.confidence == pytest.approx(0.72)

    def test_moderate_prevalence(self):
        sessions = [_record(d, 60, four_horsemen=("criticism",) if d <= 2 else ()) for d in range(1, 6)]
        [finding] = detect_horsemen_trends(sessions)
        assert finding.impact == Impact.MEDIUM

    def test_high_prevalence(self):
        sessions = [_record(d, 60, four_horsemen=("criticism",) if d <= 3 else ()) for d in range(1, 6)]
        assert detect_horsemen_trends(sessions)[0].impact == Impact.HIGH

    def test_rare_horseman_ignored(self):
        sessions = [_record(d, 60, four_horsemen=("stonewalling",) if d == 1 else ()) for d in range(1, 6)]
        assert detect_horsemen_trends(sessions) == []


class TestPositivePatterns:
    def test_green_ratio_and_high_scores(self):
        sessions = [
            _record(1, 80, green_cards=3, yellow_cards=1),
            _record(2, 75, green_cards=2, red_cards=2),
            _record(3, 72, yellow_cards=2),
            _record(4, 50),
            _record(5, 40),
        ]

        findings = {f.category: f for f in detect_positive_patterns(sessions)}

        assert set(findings) == {"green_cards", "high_scores"}
        assert findings["green_cards"].confidence == 0.85
        assert findings["high_scores"].confidence == 0.8
        assert findings["high_scores"].sessions_count == 3

    def test_no_cards(self):
        assert detect_positive_patterns([_record(1, 50), _record(2, 50)]) == []


class TestMetrics:
    def test_calculate_metrics(self):
        sessions = [
            _record(1, 60, topic_tags=("work",), four_horsemen=("criticism",), green_cards=1, red_cards=1),
            _record(6, 80, hour=20, topic_tags=("work", "kids"), repair_attempts=2),
        ]

        metrics = calculate_metrics(sessions)

        assert metrics["topicFrequency"] == {"work": 2, "kids": 1}
        assert metrics["topicScores"]["work"] == 70
        assert metrics["hourlyDistribution"] == {"9": 1, "20": 1}
        assert metrics["weekdayDistribution"] == {"monday": 1, "saturday": 1}
        assert metrics["monthlyScores"] == {"2024-01": {"avg": 70, "count": 2}}
        assert metrics["horsemenTrend"] == {"criticism": 1}
        assert metrics["repairAttemptTrend"] == {"total": 2, "average": 1}
        assert metrics["cardRatioTrend"]["greenRatio"] == 0.5


async def _add_session(db, group_id, day, score, status="COMPLETED", **analysis):
    session = Session(group_id=group_id, status=status, messages=[], created_at=_at(day))
    db.add(session)
    await db.flush()
    db.add(AnalysisResult(session_id=session.id, overall_score=score, **analysis))
    await db.flush()
    return session


@pytest.fixture
def engine(locks):
    return PatternRecognitionEngine(locks=locks)


async def _seed_topic_trigger(db, group_id):
    await _add_session(db, group_id, 1, 100)
    await _add_session(db, group_id, 2, 40, topic_tags=["finances"])
    await _add_session(db, group_id, 3, 40, topic_tags=["finances"])


class TestPatternRecognitionEngine:
    @pytest.mark.asyncio
    async def test_too_few_sessions(self, engine, db, group_id):
        await _add_session(db, group_id, 1, 40, topic_tags=["finances"])
        await _add_session(db, group_id, 2, 40, topic_tags=["finances"])

        assert await engine.analyze_patterns(group_id, db) == []
        assert await engine.get_patterns(group_id, db) == []

    @pytest.mark.asyncio
    async def test_detects_and_stores(self, engine, db, group_id):
        await _seed_topic_trigger(db, group_id)

        findings = await engine.analyze_patterns(group_id, db, user_id="user-alex")
        stored = await engine.get_patterns(group_id, db)

        assert [f.pattern_type for f in findings] == [PatternType.TOPIC_TRIGGER]
        assert len(stored) == 1
        insight = stored[0]
        assert insight.category == "finances"
        assert insight.user_id == "user-alex"
        assert insight.impact == "MEDIUM"
        assert insight.sessions_count == 2
        assert insight.confidence == pytest.approx(0.5 + (2 / 3) * 0.4)

    @pytest.mark.asyncio
    async def test_rerun_updates_in_place(self, engine, db, group_id):
        await _seed_topic_trigger(db, group_id)
        await engine.analyze_patterns(group_id, db)
        [first] = await engine.get_patterns(group_id, db)

        await _add_session(db, group_id, 4, 30, topic_tags=["finances"])
        await engine.analyze_patterns(group_id, db)
        stored = await engine.get_patterns(group_id, db, include_acknowledged=True, include_dismissed=True)

        topic_rows = [p for p in stored if p.pattern_type == "TOPIC_TRIGGER"]
        assert len(topic_rows) == 1
        assert topic_rows[0].id == first.id
        assert topic_rows[0].sessions_count == 3

    @pytest.mark.asyncio
    async def test_dismissed_pattern_is_recreated(self, engine, db, group_id):
        await _seed_topic_trigger(db, group_id)
        await engine.analyze_patterns(group_id, db)
        [original] = await engine.get_patterns(group_id, db)

        await engine.dismiss_pattern(original.id, db)
        assert await engine.get_patterns(group_id, db) == []

        await engine.analyze_patterns(group_id, db)
        active = await engine.get_patterns(group_id, db)
        everything = await engine.get_patterns(group_id, db, include_dismissed=True)

        assert len(active) == 1
        assert active[0].id != original.id
        assert len(everything) == 2

    @pytest.mark.asyncio
    async def test_acknowledge_hides_by_default(self, engine, db, group_id):
        await _seed_topic_trigger(db, group_id)
        await engine.analyze_patterns(group_id, db)
        [insight] = await engine.get_patterns(group_id, db)

        acknowledged = await engine.acknowledge_pattern(insight.id, db)

        assert acknowledged.acknowledged is True
        assert await engine.get_patterns(group_id, db) == []
        assert len(await engine.get_patterns(group_id, db, include_acknowledged=True)) == 1

    @pytest.mark.asyncio
    async def test_unknown_pattern(self, engine, db):
        with pytest.raises(LookupError):
            await engine.acknowledge_pattern(uuid.uuid4(), db)
        with pytest.raises(LookupError):
            await engine.dismiss_pattern(uuid.uuid4(), db)

    @pytest.mark.asyncio
    async def test_only_completed_sessions_count(self, engine, db, group_id):
        await _add_session(db, group_id, 1, 40, topic_tags=["finances"])
        await _add_session(db, group_id, 2, 40, topic_tags=["finances"])
        await _add_session(db, group_id, 3, 100, status="PENDING")

        assert len(await engine.get_completed_sessions(group_id, db)) == 2
        assert await engine.analyze_patterns(group_id, db) == []

    @pytest.mark.asyncio
    async def test_other_subjects_ignored(self, engine, db, group_id):
        await _seed_topic_trigger(db, group_id)
        assert await engine.get_completed_sessions(uuid.uuid4(), db) == []

    @pytest.mark.asyncio
    async def test_metrics_cache(self, engine, db, group_id):
        await _seed_topic_trigger(db, group_id)

        cache = await engine.update_metrics_cache(group_id, db)
        assert cache.sessions_count == 3
        assert cache.metrics["topicFrequency"] == {"finances": 2}

        await _add_session(db, group_id, 4, 90)
        again = await engine.update_metrics_cache(group_id, db)
        assert again.id == cache.id
        assert again.sessions_count == 4

    @pytest.mark.asyncio
    async def test_metrics_cache_without_sessions(self, engine, db, group_id):
        assert await engine.update_metrics_cache(group_id, db) is None


def _insight(group_id, dismissed=False):
    return PatternInsight(
        subject_id=group_id,
        pattern_type="TOPIC_TRIGGER",
        category="finances",
        title="Finances conversations run low",
        description="",
        evidence={},
        confidence=0.7,
        impact="MEDIUM",
        dismissed=dismissed,
    )


class TestActiveInsightIndex:
    @pytest.mark.asyncio
    async def test_second_active_insight_rejected(self, db, group_id):
        db.add(_insight(group_id))
        await db.flush()

        db.add(_insight(group_id))
        with pytest.raises(IntegrityError):
            await db.flush()

    @pytest.mark.asyncio
    async def test_dismissed_rows_do_not_collide(self, db, group_id):
        db.add_all([_insight(group_id, dismissed=True), _insight(group_id, dismissed=True), _insight(group_id)])
        await db.flush()

        count = (await db.execute(select(func.count()).select_from(PatternInsight))).scalar_one()
        assert count == 3
