"""Rule-based card scorer for session-level behavior scoring.

Each detected category is worth a signed number of points and may carry a
card tier. Tables are immutable; overrides from the configuration store are
merged over the defaults per call.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rapport.models import ScoringConfig

logger = logging.getLogger(__name__)

BASELINE_SCORE = 70
_APOSTROPHES = str.maketrans({"’": "'", "‘": "'"})
_SPEAKER_LINE = re.compile(r"^\s*([^:\n]{1,40}):\s*(.*)$")


class CardType(str, Enum):
    GREEN = "GREEN"
    YELLOW = "YELLOW"
    RED = "RED"


@dataclass(frozen=True)
class CardScore:
    points: int
    card_type: CardType | None


DEFAULT_SCORES: Mapping[str, CardScore] = MappingProxyType({
    # Positive behaviors
    "appreciation": CardScore(5, CardType.GREEN),
    "validation": CardScore(4, CardType.GREEN),
    "curiosity": CardScore(3, CardType.GREEN),
    "repair_attempt": CardScore(7, CardType.GREEN),
    # Mild negatives
    "interrupting": CardScore(-2, CardType.YELLOW),
    "always_never": CardScore(-2, CardType.YELLOW),
    "mild_sarcasm": CardScore(-2, CardType.YELLOW),
    "blame_phrasing": CardScore(-3, CardType.YELLOW),
    # Four horsemen and worse
    "criticism": CardScore(-4, CardType.RED),
    "defensiveness": CardScore(-5, CardType.RED),
    "contempt": CardScore(-8, CardType.RED),
    "stonewalling": CardScore(-6, CardType.RED),
    "threat": CardScore(-10, CardType.RED),
    "name_calling": CardScore(-8, CardType.RED),
})

HORSEMEN_CATEGORIES = ("criticism", "contempt", "defensiveness", "stonewalling")

_FLAGS = re.IGNORECASE

CARD_PATTERNS: Mapping[str, tuple[re.Pattern, ...]] = MappingProxyType({
    "appreciation": (
        re.compile(r"\bthank you\b", _FLAGS),
        re.compile(r"\bi appreciate\b", _FLAGS),
        re.compile(r"\bthat means a lot\b", _FLAGS),
        re.compile(r"\bi'm grateful\b", _FLAGS),
        re.compile(r"\byou're (?:amazing|wonderful|great)\b", _FLAGS),
    ),
    "validation": (
        re.compile(r"\bi understand\b", _FLAGS),
        re.compile(r"\bthat makes sense\b", _FLAGS),
        re.compile(r"\bi can see why\b", _FLAGS),
        re.compile(r"\byou're right\b", _FLAGS),
        re.compile(r"\bi hear you\b", _FLAGS),
    ),
    "curiosity": (
        re.compile(r"\bcan you tell me more\b", _FLAGS),
        re.compile(r"\bwhat do you think\b", _FLAGS),
        re.compile(r"\bhow do you feel\b", _FLAGS),
        re.compile(r"\bi'm curious\b", _FLAGS),
        re.compile(r"\bhelp me understand\b", _FLAGS),
    ),
    "repair_attempt": (
        re.compile(r"\bi'm sorry\b", _FLAGS),
        re.compile(r"\blet's start over\b", _FLAGS),
        re.compile(r"\bcan we take a break\b", _FLAGS),
        re.compile(r"\bi didn't mean\b", _FLAGS),
        re.compile(r"\blet me try again\b", _FLAGS),
        re.compile(r"\bi love you\b", _FLAGS),
    ),
    # Needs turn timing, which plain text does not carry
    "interrupting": (),
    "always_never": (
        re.compile(r"\byou always\b", _FLAGS),
        re.compile(r"\byou never\b", _FLAGS),
        re.compile(r"\bevery single time\b", _FLAGS),
        re.compile(r"\byou're always\b", _FLAGS),
    ),
    "mild_sarcasm": (
        re.compile(r"\boh really\b", _FLAGS),
        re.compile(r"\bsure you do\b", _FLAGS),
        re.compile(r"\bwhatever you say\b", _FLAGS),
        re.compile(r"\bright\.\.\.", _FLAGS),
    ),
    "blame_phrasing": (
        re.compile(r"\byou made me\b", _FLAGS),
        re.compile(r"\bit's your fault\b", _FLAGS),
        re.compile(r"\bbecause of you\b", _FLAGS),
        re.compile(r"\byou're the one who\b", _FLAGS),
    ),
    "criticism": (
        re.compile(r"\byou're so (?:lazy|stupid|useless)\b", _FLAGS),
        re.compile(r"\bwhat's wrong with you\b", _FLAGS),
        re.compile(r"\byou can't do anything\b", _FLAGS),
    ),
    "defensiveness": (
        re.compile(r"\bit's not my fault\b", _FLAGS),
        re.compile(r"\bi didn't do anything\b", _FLAGS),
        re.compile(r"\byou're overreacting\b", _FLAGS),
        re.compile(r"\bthat's not true\b", _FLAGS),
    ),
    "contempt": (
        re.compile(r"\byou're pathetic\b", _FLAGS),
        re.compile(r"\byou disgust me\b", _FLAGS),
        re.compile(r"\*eye roll\*", _FLAGS),
        re.compile(r"\byou're such a\b", _FLAGS),
    ),
    "stonewalling": (
        re.compile(r"\bi don't care\b", _FLAGS),
        re.compile(r"\bwhatever\b(?! you say)", _FLAGS),
        re.compile(r"\bi'm done talking\b", _FLAGS),
        re.compile(r"\bleave me alone\b", _FLAGS),
    ),
    "threat": (
        re.compile(r"\bi'll leave you\b", _FLAGS),
        re.compile(r"\bi'm going to hurt\b", _FLAGS),
        re.compile(r"\byou'll regret\b", _FLAGS),
        re.compile(r"\bi'll make you pay\b", _FLAGS),
    ),
    "name_calling": (
        re.compile(r"\byou (?:idiot|moron|jerk|bitch)\b", _FLAGS),
        re.compile(r"\bstupid\b", _FLAGS),
    ),
})

SAFETY_PATTERNS: tuple[re.Pattern, ...] = (
    # Prefix matches so inflections ("threatened", "hurting") still count
    re.compile(r"\bi'll (?:hurt|kill)", _FLAGS),
    re.compile(r"\bi'm going to (?:hurt|kill)", _FLAGS),
    re.compile(r"\bthreat", _FLAGS),
    re.compile(r"\bhit you", _FLAGS),
    re.compile(r"\bharm (?:yourself|myself)\b", _FLAGS),
    re.compile(r"\bkill (?:yourself|myself)\b", _FLAGS),
)


@dataclass(frozen=True)
class Card:
    category: str
    card_type: CardType
    points: int
    quote: str
    speaker: str | None = None

    def as_dict(self) -> dict:
        return {
            "category": self.category,
            "type": self.card_type.value,
            "points": self.points,
            "quote": self.quote,
            "speaker": self.speaker,
        }


@dataclass(frozen=True)
class HorsemanDetection:
    horseman: str
    quote: str
    severity: str
    speaker: str | None = None

    def as_dict(self) -> dict:
        return {
            "type": self.horseman,
            "quote": self.quote,
            "severity": self.severity,
            "speaker": self.speaker,
        }


@dataclass
class ScoringResult:
    bank_change: int = 0
    overall_score: int = BASELINE_SCORE
    cards: list[Card] = field(default_factory=list)
    horsemen: list[HorsemanDetection] = field(default_factory=list)
    repair_quotes: list[str] = field(default_factory=list)
    safety_flag: bool = False
    speaker_scores: dict[str, dict] = field(default_factory=dict)

    def count(self, card_type: CardType) -> int:
        return sum(1 for card in self.cards if card.card_type == card_type)

    @property
    def horsemen_names(self) -> list[str]:
        seen: list[str] = []
        for detection in self.horsemen:
            if detection.horseman not in seen:
                seen.append(detection.horseman)
        return seen


def merge_score_table(
    overrides: Mapping[str, CardScore] | None = None,
    defaults: Mapping[str, CardScore] = DEFAULT_SCORES,
) -> Mapping[str, CardScore]:
    """Overlay overrides on the defaults and return a read-only table."""
    merged = dict(defaults)
    if overrides:
        merged.update(overrides)
    return MappingProxyType(merged)


async def load_score_overrides(db: AsyncSession) -> dict[str, CardScore]:
    """Read active overrides from the scoring_configs table."""
    result = await db.execute(select(ScoringConfig).where(ScoringConfig.is_active.is_(True)))
    overrides = {}
    for row in result.scalars().all():
        card_type = CardType(row.card_type) if row.card_type else None
        overrides[row.category] = CardScore(row.points, card_type)
    if overrides:
        logger.info("Loaded %d scoring overrides", len(overrides))
    return overrides


def horseman_severity(points: int) -> str:
    magnitude = abs(points)
    if magnitude >= 6:
        return "severe"
    if magnitude >= 4:
        return "moderate"
    return "mild"


def clamp_score(value: float) -> int:
    return int(max(0, min(100, value)))


def _split_speakers(transcript: str) -> list[tuple[str | None, str]]:
    segments = []
    for line in transcript.splitlines():
        if not line.strip():
            continue
        match = _SPEAKER_LINE.match(line)
        if match:
            segments.append((match.group(1).strip(), match.group(2)))
        else:
            segments.append((None, line))
    return segments


def score_transcript(
    transcript: str,
    score_table: Mapping[str, CardScore] | None = None,
) -> ScoringResult:
    """Score a transcript into cards, bank change and an overall score.

    Lines of the form ``Name: text`` attribute cards to a speaker. The safety
    flag is raised independently of the point totals.
    """
    table = score_table if score_table is not None else DEFAULT_SCORES
    text = (transcript or "").translate(_APOSTROPHES)
    result = ScoringResult()
    contributions: dict[str, int] = {}

    for speaker, segment in _split_speakers(text):
        for category, patterns in CARD_PATTERNS.items():
            score = table.get(category)
            if score is None:
                continue
            for pattern in patterns:
                for match in pattern.finditer(segment):
                    quote = match.group(0)
                    result.bank_change += score.points
                    if speaker is not None:
                        contributions[speaker] = contributions.get(speaker, 0) + score.points
                    if score.card_type is not None:
                        result.cards.append(Card(category, score.card_type, score.points, quote, speaker))
                    if category in HORSEMEN_CATEGORIES:
                        result.horsemen.append(
                            HorsemanDetection(category, quote, horseman_severity(score.points), speaker)
                        )
                    if category == "repair_attempt":
                        result.repair_quotes.append(quote)

    result.safety_flag = any(p.search(text) for p in SAFETY_PATTERNS)
    result.overall_score = clamp_score(BASELINE_SCORE + result.bank_change)
    result.speaker_scores = {
        speaker: {"bank_change": points, "score": clamp_score(BASELINE_SCORE + points)}
        for speaker, points in contributions.items()
    }

    if result.safety_flag:
        logger.warning("Safety phrase detected in transcript")
    return result
