from unittest.mock import AsyncMock

import pytest

from rapport.dynamics.analyzer import analyze_relationship_dynamics
from rapport.inference.engine import build_participant, infer_traits
from rapport.narrative.descriptions import describe_growth, describe_strength, describe_trait, trait_level
from rapport.narrative.fallback import (
    DEFAULT_REPAIR,
    DEFAULT_TRY_NEXT,
    DEFAULT_WENT_WELL,
    REPAIR_LINES,
    TRY_NEXT,
    WENT_WELL,
    RuleBasedNarrator,
)
from rapport.narrative.llm_narrator import LLMNarrator, get_narrator, parse_sections
from rapport.scoring.cards import score_transcript

HEADERS = ("STRENGTHS", "GROWTH_AREAS", "COMMUNICATION")


@pytest.fixture
def traits():
    participant = build_participant("Alex", ["We should plan the weekend together.", "I love that idea!"])
    return infer_traits(participant)


class TestParseSections:
    def test_all_sections(self):
        text = "STRENGTHS: Warm.\nGROWTH_AREAS:\nSlow down.\n\nCOMMUNICATION: Direct."
        assert parse_sections(text, HEADERS) == {
            "STRENGTHS": "Warm.",
            "GROWTH_AREAS": "Slow down.",
            "COMMUNICATION": "Direct.",
        }

    def test_missing_section_left_out(self):
        assert parse_sections("STRENGTHS: Warm.", HEADERS) == {"STRENGTHS": "Warm."}

    def test_case_insensitive(self):
        assert parse_sections("strengths: Warm.", HEADERS) == {"STRENGTHS": "Warm."}

    def test_no_sections(self):
        assert parse_sections("Just some prose.", HEADERS) == {}


class TestRuleBasedCoaching:
    @pytest.mark.asyncio
    async def test_positive_session(self, narrator):
        scoring = score_transcript("Thank you for listening. I appreciate it. I'm sorry for yesterday.")
        coaching = await narrator.coaching(scoring)

        assert coaching.what_went_well == WENT_WELL["repair_attempt"]
        assert coaching.try_next_time == DEFAULT_TRY_NEXT
        assert coaching.repair_suggestion == DEFAULT_REPAIR

    @pytest.mark.asyncio
    async def test_harsh_session(self, narrator):
        scoring = score_transcript("You always do this. You never listen. Whatever, I don't care.")
        coaching = await narrator.coaching(scoring)

        assert coaching.what_went_well == DEFAULT_WENT_WELL
        assert coaching.try_next_time == TRY_NEXT["stonewalling"]
        assert coaching.repair_suggestion == REPAIR_LINES["stonewalling"]

    @pytest.mark.asyncio
    async def test_personality_always_filled(self, narrator, traits):
        narratives = await narrator.personality(traits)
        assert narratives.strengths
        assert narratives.growth_areas
        assert narratives.communication

    @pytest.mark.asyncio
    async def test_couple_narrative(self, narrator):
        a = build_participant("Alex", ["We always figure it out together. Thank you."])
        b = build_participant("Sam", ["Yes, we do. I'm sorry about earlier."])
        narrative = await narrator.couple(analyze_relationship_dynamics(a, b), "Alex", "Sam")

        assert "Alex" in narrative.dynamic_narrative
        assert narrative.coaching_focus


class TestLLMNarrator:
    @pytest.mark.asyncio
    async def test_uses_llm_sections(self, mock_llm, traits):
        narrator = LLMNarrator(mock_llm)
        narratives = await narrator.personality(traits)

        assert narratives.strengths == "You listen closely."
        assert narratives.growth_areas == "Say what you need sooner."
        assert narratives.communication == "You are direct and warm."
        mock_llm.generate.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failure_falls_back(self, traits):
        client = AsyncMock()
        client.generate = AsyncMock(side_effect=RuntimeError("provider down"))
        narrator = LLMNarrator(client)

        narratives = await narrator.personality(traits)

        assert narratives == await RuleBasedNarrator().personality(traits)
        assert client.generate.call_count == 2

    @pytest.mark.asyncio
    async def test_empty_reply_falls_back(self, traits):
        client = AsyncMock()
        client.generate = AsyncMock(return_value="   ")
        narrator = LLMNarrator(client)

        narratives = await narrator.personality(traits)

        assert narratives == await RuleBasedNarrator().personality(traits)
        assert client.generate.call_count == 2

    @pytest.mark.asyncio
    async def test_partial_reply_filled_from_fallback(self, traits):
        client = AsyncMock()
        client.generate = AsyncMock(return_value="STRENGTHS: You stay curious.")
        narrator = LLMNarrator(client)

        narratives = await narrator.personality(traits)
        default = await RuleBasedNarrator().personality(traits)

        assert narratives.strengths == "You stay curious."
        assert narratives.growth_areas == default.growth_areas
        assert narratives.communication == default.communication

    @pytest.mark.asyncio
    async def test_unparseable_coaching_falls_back(self, mock_llm):
        scoring = score_transcript("Thank you.")
        coaching = await LLMNarrator(mock_llm).coaching(scoring)
        assert coaching == await RuleBasedNarrator().coaching(scoring)

    @pytest.mark.asyncio
    async def test_coaching_sections(self):
        client = AsyncMock()
        client.generate = AsyncMock(
            return_value="WENT_WELL: You listened.\nTRY_NEXT: Pause first.\nREPAIR: Can we start over?"
        )
        coaching = await LLMNarrator(client).coaching(score_transcript("Thank you."))

        assert coaching.what_went_well == "You listened."
        assert coaching.try_next_time == "Pause first."
        assert coaching.repair_suggestion == "Can we start over?"


class TestNarratorFactory:
    def test_no_provider_is_rule_based(self):
        assert isinstance(get_narrator(), RuleBasedNarrator)


class TestDescriptions:
    @pytest.mark.parametrize(
        "score,level",
        [(0, "low"), (34, "low"), (35, "moderate"), (65, "moderate"), (66, "high"), (100, "high")],
    )
    def test_trait_level(self, score, level):
        assert trait_level(score) == level

    def test_describe_trait(self):
        assert describe_trait("openness", 80)
        assert describe_trait("unknown", 80) == ""

    def test_unknown_tags_echo(self):
        assert describe_strength("made_up") == "made_up"
        assert describe_growth("made_up") == "made_up"
