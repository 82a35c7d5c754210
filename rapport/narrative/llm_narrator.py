import asyncio
import logging
import re

from tenacity import retry, stop_after_attempt, wait_exponential

from rapport.config import settings
from rapport.dynamics.analyzer import RelationshipDynamics
from rapport.inference.engine import TraitProfile
from rapport.llm import LLMClient, get_llm_client
from rapport.narrative.base import (
    CoachingSuggestions,
    CoupleNarrative,
    NarrativeGenerator,
    PersonalityNarratives,
)
from rapport.narrative.fallback import RuleBasedNarrator
from rapport.narrative.prompts import (
    COACHING_SYSTEM_PROMPT,
    COACHING_USER_PROMPT,
    COUPLE_SYSTEM_PROMPT,
    COUPLE_USER_PROMPT,
    PERSONALITY_SYSTEM_PROMPT,
    PERSONALITY_USER_PROMPT,
)
from rapport.scoring.cards import CardType, ScoringResult

logger = logging.getLogger(__name__)


def parse_sections(text: str, headers: tuple[str, ...]) -> dict[str, str]:
    """Split ``HEADER:`` delimited output into a header -> body mapping.

    Headers missing from the text are left out of the result.
    """
    sections = {}
    for i, header in enumerate(headers):
        following = "|".join(re.escape(h) + ":" for h in headers[i + 1:])
        end = rf"(?={following}|$)" if following else "$"
        match = re.search(rf"{re.escape(header)}:\s*(.*?){end}", text, re.IGNORECASE | re.DOTALL)
        if match and match.group(1).strip():
            sections[header] = match.group(1).strip()
    return sections


class LLMNarrator:
    """Narratives from the configured LLM, falling back per call on any failure."""

    def __init__(self, llm_client: LLMClient, fallback: NarrativeGenerator | None = None):
        self.llm = llm_client
        self.fallback = fallback or RuleBasedNarrator()

    @retry(
        stop=stop_after_attempt(settings.narrative_max_attempts),
        wait=wait_exponential(multiplier=0.5, max=8),
        reraise=True,
    )
    async def _complete(self, system: str, user_message: str) -> str:
        text = await asyncio.wait_for(
            self.llm.generate(system=system, user_message=user_message),
            timeout=settings.narrative_timeout_seconds,
        )
        if not text or not text.strip():
            raise ValueError("LLM returned an empty narrative")
        return text

    async def personality(self, traits: TraitProfile) -> PersonalityNarratives:
        default = await self.fallback.personality(traits)
        prompt = PERSONALITY_USER_PROMPT.format(
            openness=traits.big_five.openness,
            conscientiousness=traits.big_five.conscientiousness,
            extraversion=traits.big_five.extraversion,
            agreeableness=traits.big_five.agreeableness,
            neuroticism=traits.big_five.neuroticism,
            attachment_style=traits.attachment.style.value,
            anxiety=traits.attachment.anxiety_score,
            avoidance=traits.attachment.avoidance_score,
            communication_style=traits.communication.style.value,
            conflict_style=traits.conflict.style.value,
            assertiveness=traits.conflict.assertiveness_score,
            cooperativeness=traits.conflict.cooperativeness_score,
            awareness=traits.emotional_intelligence.emotional_awareness,
            empathy=traits.emotional_intelligence.empathy_score,
            regulation=traits.emotional_intelligence.emotional_regulation,
            evidence="; ".join(
                traits.big_five.indicators[:4] + traits.attachment.indicators[:3]
            ) or "none",
        )
        try:
            text = await self._complete(PERSONALITY_SYSTEM_PROMPT, prompt)
        except Exception:
            logger.warning("Personality narrative generation failed, using fallback", exc_info=True)
            return default

        sections = parse_sections(text, ("STRENGTHS", "GROWTH_AREAS", "COMMUNICATION"))
        if not sections:
            logger.warning("Unparseable personality narrative, using fallback")
            return default
        return PersonalityNarratives(
            strengths=sections.get("STRENGTHS", default.strengths),
            growth_areas=sections.get("GROWTH_AREAS", default.growth_areas),
            communication=sections.get("COMMUNICATION", default.communication),
        )

    async def couple(self, dynamics: RelationshipDynamics, name1: str, name2: str) -> CoupleNarrative:
        default = await self.fallback.couple(dynamics, name1, name2)
        prompt = COUPLE_USER_PROMPT.format(
            name1=name1,
            name2=name2,
            dominance=", ".join(f"{k} {v:.0f}%" for k, v in dynamics.dominance.items()),
            reciprocity=dynamics.emotional_reciprocity,
            validation=dynamics.validation_balance,
            support=dynamics.support_balance,
            escalation=dynamics.escalation_tendency,
            deescalation=dynamics.deescalation_skill,
            ratio=dynamics.positive_to_negative_ratio,
            pursuer_withdrawer="yes" if dynamics.pursuer_withdrawer.is_pattern else "no",
            strengths=", ".join(dynamics.relationship_strengths) or "none identified",
            growth=", ".join(dynamics.growth_opportunities) or "none identified",
        )
        try:
            text = await self._complete(COUPLE_SYSTEM_PROMPT, prompt)
        except Exception:
            logger.warning("Couple narrative generation failed, using fallback", exc_info=True)
            return default

        sections = parse_sections(text, ("DYNAMIC_NARRATIVE", "COACHING_FOCUS"))
        if not sections:
            logger.warning("Unparseable couple narrative, using fallback")
            return default
        return CoupleNarrative(
            dynamic_narrative=sections.get("DYNAMIC_NARRATIVE", default.dynamic_narrative),
            coaching_focus=sections.get("COACHING_FOCUS", default.coaching_focus),
        )

    async def coaching(self, scoring: ScoringResult) -> CoachingSuggestions:
        default = await self.fallback.coaching(scoring)
        prompt = COACHING_USER_PROMPT.format(
            overall_score=scoring.overall_score,
            bank_change=scoring.bank_change,
            green=scoring.count(CardType.GREEN),
            yellow=scoring.count(CardType.YELLOW),
            red=scoring.count(CardType.RED),
            horsemen=", ".join(scoring.horsemen_names) or "none",
            repairs=len(scoring.repair_quotes),
        )
        try:
            text = await self._complete(COACHING_SYSTEM_PROMPT, prompt)
        except Exception:
            logger.warning("Coaching generation failed, using fallback", exc_info=True)
            return default

        sections = parse_sections(text, ("WENT_WELL", "TRY_NEXT", "REPAIR"))
        if not sections:
            logger.warning("Unparseable coaching response, using fallback")
            return default
        return CoachingSuggestions(
            what_went_well=sections.get("WENT_WELL", default.what_went_well),
            try_next_time=sections.get("TRY_NEXT", default.try_next_time),
            repair_suggestion=sections.get("REPAIR", default.repair_suggestion),
        )


def get_narrator() -> NarrativeGenerator:
    """LLM-backed narrator when a provider is configured, otherwise the rule-based one."""
    fallback = RuleBasedNarrator()
    if settings.llm_provider == "none":
        return fallback
    try:
        client = get_llm_client()
    except ValueError as exc:
        logger.warning("LLM narratives unavailable (%s), using rule-based narratives", exc)
        return fallback
    return LLMNarrator(client, fallback)
