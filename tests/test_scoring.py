import pytest

from rapport.models import ScoringConfig
from rapport.scoring.cards import (
    BASELINE_SCORE,
    DEFAULT_SCORES,
    CardScore,
    CardType,
    horseman_severity,
    load_score_overrides,
    merge_score_table,
    score_transcript,
)
from rapport.scoring.topics import MAX_TOPICS, detect_topics

THANKS = "Thank you for listening. I appreciate it. I'm sorry for yesterday."
ABSOLUTES = "You always do this. You never listen. Whatever, I don't care."


class TestScoreTranscript:
    def test_thank_you_scenario(self):
        result = score_transcript(THANKS)

        categories = [(c.category, c.card_type) for c in result.cards]
        assert ("appreciation", CardType.GREEN) in categories
        assert result.count(CardType.GREEN) == 3
        assert result.bank_change == 17
        assert result.overall_score == 87
        assert result.overall_score > BASELINE_SCORE
        assert len(result.repair_quotes) == 1
        assert result.safety_flag is False

    def test_absolutist_scenario(self):
        result = score_transcript(ABSOLUTES)

        assert result.count(CardType.YELLOW) == 2
        assert result.count(CardType.RED) == 2
        assert result.bank_change == -16
        assert result.overall_score == 54
        assert result.horsemen_names == ["stonewalling"]
        assert all(h.severity == "severe" for h in result.horsemen)

    def test_whatever_you_say_is_sarcasm_not_stonewalling(self):
        result = score_transcript("Whatever you say.")
        assert [c.category for c in result.cards] == ["mild_sarcasm"]
        assert result.bank_change == -2

    def test_score_clamped_at_zero(self):
        result = score_transcript("You're pathetic. " * 10)
        assert result.bank_change == -80
        assert result.overall_score == 0

    def test_score_clamped_at_hundred(self):
        result = score_transcript("I'm sorry. " * 10)
        assert result.overall_score == 100

    def test_safety_flag_independent_of_points(self):
        result = score_transcript("Thank you. I appreciate you. I'll hurt you if you go.")
        assert result.bank_change > 0
        assert result.safety_flag is True

    @pytest.mark.parametrize(
        "text",
        [
            "That is a threat.",
            "He threatened me last night.",
            "She keeps threatening to go.",
            "Those were threats, not jokes.",
            "I'll hurt him.",
            "I'll kill him.",
            "I'm going to kill it.",
            "He said he would hit you.",
            "Please don't harm yourself.",
            "Sometimes I want to harm myself.",
            "I want to kill myself.",
            "Don't kill yourself over it.",
        ],
    )
    def test_safety_phrasings(self, text):
        result = score_transcript(text)
        assert result.safety_flag is True
        assert result.bank_change == 0
        assert result.cards == []

    def test_no_safety_flag_for_ordinary_talk(self):
        assert score_transcript("We talked about the weekend plans.").safety_flag is False

    def test_speaker_attribution(self):
        result = score_transcript("Alex: Thank you for dinner.\nSam: Whatever.")

        assert result.speaker_scores == {
            "Alex": {"bank_change": 5, "score": 75},
            "Sam": {"bank_change": -6, "score": 64},
        }
        assert {c.speaker for c in result.cards} == {"Alex", "Sam"}

    def test_empty_transcript(self):
        result = score_transcript("")
        assert result.bank_change == 0
        assert result.overall_score == BASELINE_SCORE
        assert result.cards == []


class TestScoreTable:
    def test_override_replaces_default(self):
        table = merge_score_table({"appreciation": CardScore(10, CardType.GREEN)})
        result = score_transcript(THANKS, table)

        assert result.bank_change == 27
        assert DEFAULT_SCORES["appreciation"].points == 5

    def test_override_without_card_type_keeps_points(self):
        table = merge_score_table({"appreciation": CardScore(5, None)})
        result = score_transcript("Thank you.", table)

        assert result.bank_change == 5
        assert result.cards == []

    def test_merged_table_is_read_only(self):
        table = merge_score_table()
        with pytest.raises(TypeError):
            table["appreciation"] = CardScore(1, None)

    def test_severity(self):
        assert horseman_severity(-8) == "severe"
        assert horseman_severity(-6) == "severe"
        assert horseman_severity(-4) == "moderate"
        assert horseman_severity(-2) == "mild"

    @pytest.mark.asyncio
    async def test_load_active_overrides(self, db):
        db.add(ScoringConfig(category="appreciation", points=9, card_type="GREEN", is_active=True))
        db.add(ScoringConfig(category="contempt", points=-20, card_type="RED", is_active=False))
        db.add(ScoringConfig(category="validation", points=2, card_type=None, is_active=True))
        await db.flush()

        overrides = await load_score_overrides(db)

        assert overrides == {
            "appreciation": CardScore(9, CardType.GREEN),
            "validation": CardScore(2, None),
        }


class TestTopics:
    def test_detects_in_table_order(self):
        assert detect_topics("We argued about the dishes and money again") == ["finances", "chores"]

    def test_limit(self):
        text = "money work kids dishes sex mom listen schedule doctor wedding"
        assert len(detect_topics(text)) == MAX_TOPICS
        assert detect_topics(text, limit=2) == ["finances", "work"]

    def test_no_topics(self):
        assert detect_topics("") == []
