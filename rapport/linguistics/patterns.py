"""Gottman four-horsemen and repair-attempt phrase detection.

Every pattern in a list is counted independently, so phrases that overlap
(e.g. "whatever" under both contempt and stonewalling) count in each list.
"""

import re
from dataclasses import asdict, dataclass

_APOSTROPHES = str.maketrans({"’": "'", "‘": "'"})
_FLAGS = re.IGNORECASE | re.MULTILINE


def _compile(*patterns: str) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(p, _FLAGS) for p in patterns)


HORSEMEN_PATTERNS: dict[str, tuple[re.Pattern, ...]] = {
    "criticism": _compile(
        r"\byou always\b",
        r"\byou never\b",
        r"\byou're so\b",
        r"\byou are so\b",
        r"\bwhat's wrong with you\b",
        r"\bwhat is wrong with you\b",
        r"\bwhy can't you\b",
        r"\bwhy do you always\b",
        r"\bwhy don't you ever\b",
        r"\byou should have\b",
        r"\byou shouldn't have\b",
        r"\btypical of you\b",
        r"\bevery time you\b",
        r"\byou're the one who\b",
        r"\byour problem is\b",
    ),
    "contempt": _compile(
        r"\bwhatever\b",
        r"\byeah right\b",
        r"\bsure you (?:did|do|will|are)\b",
        r"\boh please\b",
        r"\bgive me a break\b",
        r"\byou're (?:pathetic|ridiculous|stupid|an idiot|incompetent)\b",
        r"\bare you serious\b",
        r"\byou call that\b",
        r"\bthat's (?:ridiculous|stupid|pathetic)\b",
        r"\bwhat a joke\b",
        r"\byou must be joking\b",
        r"\bof course you (?:would|did|do)\b",
        r"\bas usual\b",
        r"\bhere we go again\b",
    ),
    "defensiveness": _compile(
        r"\bit's not my fault\b",
        r"\bthat's not true\b",
        r"\bi didn't do anything\b",
        r"\bi never said that\b",
        r"\byou're the one who\b",
        r"\bwhat about (?:when you|that time)\b",
        r"\bbut you\b",
        r"\byes,? but\b",
        r"\bi was just\b",
        r"\bi only\b",
        r"\bi had no choice\b",
        r"\byou made me\b",
        r"\bif you hadn't\b",
        r"\bit's because you\b",
        r"\bwell,? you\b",
    ),
    "stonewalling": _compile(
        r"\bi don't want to talk\b",
        r"\bleave me alone\b",
        r"\bi'm done\b",
        r"\bwhatever\b",
        r"\bi don't care\b",
        r"\bfine\b",
        r"^\s*ok\.?\s*$",
        r"\bnothing\b",
        r"\bi give up\b",
        r"\bforget it\b",
        r"\bnever mind\b",
        r"\bi'm out\b",
        r"\.\.\.",
    ),
}

REPAIR_PATTERNS: tuple[re.Pattern, ...] = _compile(
    r"\bi'm sorry\b",
    r"\bi am sorry\b",
    r"\bi apologi[sz]e\b",
    r"\bmy bad\b",
    r"\blet me try again\b",
    r"\bcan we start over\b",
    r"\bi didn't mean\b",
    r"\bi understand (?:that|how|why|your)\b",
    r"\byou're right\b",
    r"\bthat's fair\b",
    r"\bi hear you\b",
    r"\blet's (?:take a break|calm down|step back)\b",
    r"\bi love you\b",
    r"\bwe're (?:on the same team|in this together)\b",
    r"\bhow can i (?:help|make it better|fix this)\b",
    r"\bwhat do you need\b",
    r"\bthank you for\b",
    r"\bi appreciate\b",
    r"\bplease\b",
    r"\blet's (?:figure this out|work on this)\b",
    r"\bi want to understand\b",
)


@dataclass(frozen=True)
class HorsemenCounts:
    criticism: int = 0
    contempt: int = 0
    defensiveness: int = 0
    stonewalling: int = 0

    @property
    def total(self) -> int:
        return self.criticism + self.contempt + self.defensiveness + self.stonewalling

    def present(self) -> list[str]:
        """Names of the horsemen with at least one occurrence."""
        return [name for name, count in asdict(self).items() if count > 0]

    def __add__(self, other: "HorsemenCounts") -> "HorsemenCounts":
        return HorsemenCounts(
            criticism=self.criticism + other.criticism,
            contempt=self.contempt + other.contempt,
            defensiveness=self.defensiveness + other.defensiveness,
            stonewalling=self.stonewalling + other.stonewalling,
        )

    def as_dict(self) -> dict:
        return asdict(self)


def _count(patterns: tuple[re.Pattern, ...], text: str) -> int:
    return sum(len(p.findall(text)) for p in patterns)


def detect_four_horsemen(text: str) -> HorsemenCounts:
    text = (text or "").translate(_APOSTROPHES)
    return HorsemenCounts(**{name: _count(patterns, text) for name, patterns in HORSEMEN_PATTERNS.items()})


def detect_repair_attempts(text: str) -> int:
    return _count(REPAIR_PATTERNS, (text or "").translate(_APOSTROPHES))
