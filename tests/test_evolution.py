import uuid

import pytest
from sqlalchemy import func, select

from rapport.evolution.snapshot import SnapshotManager
from rapport.evolution.temporal import blend_fields, blend_value, blend_weights, session_confidence
from rapport.inference.engine import ParticipantFeatures
from rapport.linguistics.features import LinguisticFeatures
from rapport.linguistics.patterns import HorsemenCounts
from rapport.models import LinguisticSnapshot, PersonalityProfile


def _participant(name="Alex", repairs=0, horsemen=None, **features):
    return ParticipantFeatures(
        name=name,
        features=LinguisticFeatures(**features),
        horsemen=horsemen or HorsemenCounts(),
        repair_attempts=repairs,
        message_count=1,
        identity="user-alex",
    )


class TestBlendWeights:
    def test_first_blend(self):
        assert blend_weights(1) == (0.5, 0.6)

    def test_weights_overshoot_one(self):
        existing, new = blend_weights(4)
        assert existing == pytest.approx(0.8)
        assert new == pytest.approx(0.24)
        assert existing + new > 1


class TestBlendValue:
    def test_second_session(self):
        assert blend_value(50, 60, 1) == 61

    def test_can_exceed_hundred(self):
        assert blend_value(100, 100, 1) == 110

    def test_missing_existing_takes_new(self):
        assert blend_value(None, 42.5, 3) == 42.5

    def test_result_is_rounded(self):
        assert blend_value(33, 47, 2) == round(33 * 2 / 3 + 47 * 1.2 / 3)

    def test_equal_values_never_shrink(self):
        for n in range(1, 30):
            for value in (0, 10, 55, 100):
                assert blend_value(value, value, n) >= value


class TestBlendFields:
    def test_first_session_stored_verbatim(self):
        new = {"openness": 57.5, "neuroticism": 42.0}
        assert blend_fields({}, new, 0) == new

    def test_blends_each_field(self):
        blended = blend_fields({"openness": 50, "neuroticism": None}, {"openness": 60, "neuroticism": 30}, 1)
        assert blended == {"openness": 61, "neuroticism": 30}


class TestSessionConfidence:
    @pytest.mark.parametrize(
        "index,expected",
        [(1, 20), (2, 40), (4, 40), (5, 60), (9, 60), (10, 80), (19, 80), (20, 90), (100, 90)],
    )
    def test_buckets(self, index, expected):
        assert session_confidence(index) == expected


class TestSnapshotManager:
    @pytest.mark.asyncio
    async def test_save_snapshot_upserts(self, db, session_id):
        profile = PersonalityProfile(user_id="user-alex")
        db.add(profile)
        await db.flush()
        manager = SnapshotManager()

        await manager.save_snapshot(profile, session_id, _participant(total_words=10), db)
        snapshot = await manager.save_snapshot(
            profile,
            session_id,
            _participant(total_words=25, repairs=2, horsemen=HorsemenCounts(criticism=1)),
            db,
        )

        count = (await db.execute(select(func.count()).select_from(LinguisticSnapshot))).scalar_one()
        assert count == 1
        assert snapshot.total_words == 25
        assert snapshot.criticism_count == 1
        assert snapshot.repair_attempt_count == 2
        assert snapshot.profile_id == profile.id

    @pytest.mark.asyncio
    async def test_evolution_timeline(self, db):
        profile = PersonalityProfile(user_id="user-alex")
        db.add(profile)
        await db.flush()
        manager = SnapshotManager()
        first, second = uuid.uuid4(), uuid.uuid4()

        await manager.save_snapshot(
            profile, first, _participant(positive_emotion_words=4, first_person_plural=2), db
        )
        await manager.save_snapshot(
            profile,
            second,
            _participant(positive_emotion_words=2, negative_emotion_words=2, first_person_plural=6),
            db,
        )

        timeline = await manager.get_profile_evolution("user-alex", db)

        assert [point["session_id"] for point in timeline] == [first, second]
        assert [point["confidence"] for point in timeline] == [20, 40]
        # no negative emotion yet, so the 0.1 floor applies
        assert timeline[0]["traits"]["emotion_balance"] == pytest.approx(40)
        assert timeline[1]["traits"]["emotion_balance"] == pytest.approx(3)
        assert timeline[1]["traits"]["partnership_focus"] == pytest.approx(4)

    @pytest.mark.asyncio
    async def test_unknown_user_has_empty_timeline(self, db):
        assert await SnapshotManager().get_profile_evolution("nobody", db) == []
