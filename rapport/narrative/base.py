from dataclasses import dataclass
from typing import Protocol

from rapport.dynamics.analyzer import RelationshipDynamics
from rapport.inference.engine import TraitProfile
from rapport.scoring.cards import ScoringResult


@dataclass(frozen=True)
class PersonalityNarratives:
    strengths: str
    growth_areas: str
    communication: str


@dataclass(frozen=True)
class CoupleNarrative:
    dynamic_narrative: str
    coaching_focus: str


@dataclass(frozen=True)
class CoachingSuggestions:
    what_went_well: str
    try_next_time: str
    repair_suggestion: str


class NarrativeGenerator(Protocol):
    """Turns structured analysis into short natural-language text."""

    async def personality(self, traits: TraitProfile) -> PersonalityNarratives: ...

    async def couple(
        self, dynamics: RelationshipDynamics, name1: str, name2: str
    ) -> CoupleNarrative: ...

    async def coaching(self, scoring: ScoringResult) -> CoachingSuggestions: ...
