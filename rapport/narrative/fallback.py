"""Deterministic narratives built from the same thresholds the analyzers use."""

from rapport.dynamics.analyzer import RelationshipDynamics
from rapport.inference.attachment import AttachmentStyle
from rapport.inference.communication import CommunicationStyle
from rapport.inference.engine import TraitProfile
from rapport.narrative.base import CoachingSuggestions, CoupleNarrative, PersonalityNarratives
from rapport.scoring.cards import CardType, ScoringResult

STRENGTH_THRESHOLD = 60
GROWTH_THRESHOLD = 60
ATTACHMENT_CONCERN = 50
LOW_AWARENESS = 50
MAX_SENTENCES = 2

DEFAULT_STRENGTHS = "Continue building your communication skills through regular practice and reflection."
DEFAULT_GROWTH = (
    "Every relationship has room for growth. Notice the patterns that work well and the ones "
    "you'd like to change."
)

STYLE_SENTENCES: dict[CommunicationStyle, str] = {
    CommunicationStyle.PLACATER: (
        "You tend to prioritize harmony and sometimes put your partner's needs before your own. "
        "That shows care, and your feelings matter equally."
    ),
    CommunicationStyle.BLAMER: (
        "You communicate directly and assertively. Balancing that with curiosity about your "
        "partner's perspective leads to more productive conversations."
    ),
    CommunicationStyle.COMPUTER: (
        "You bring a thoughtful, analytical approach to discussions. Adding more emotional "
        "expression can help your partner feel connected."
    ),
    CommunicationStyle.DISTRACTER: (
        "You often reach for humor or a change of subject in hard moments. Staying with the "
        "difficult topic a little longer can deepen understanding."
    ),
    CommunicationStyle.LEVELER: (
        "You communicate authentically and directly while remaining respectful, which creates "
        "space for genuine connection."
    ),
}

WENT_WELL = {
    "repair_attempt": "You reached out to repair the connection when it mattered.",
    "appreciation": "You expressed appreciation for each other.",
    "validation": "You acknowledged each other's point of view.",
    "curiosity": "You asked questions to understand each other better.",
}

TRY_NEXT = {
    "threat": "Step away and cool off before saying anything you can't take back.",
    "contempt": "Replace sarcasm or mockery with a direct, specific request.",
    "name_calling": "Describe the behavior that bothered you instead of labeling the person.",
    "stonewalling": 'If you need space, say so: "I need twenty minutes, then I want to come back to this."',
    "defensiveness": "Look for the part of the complaint you can take responsibility for.",
    "criticism": 'Start with "I feel ... when ..." instead of a statement about your partner.',
    "blame_phrasing": "Talk about your own experience rather than who is at fault.",
    "always_never": 'Drop "always" and "never" and describe the specific moment instead.',
    "mild_sarcasm": "Say what you mean plainly; sarcasm hides the real request.",
}

REPAIR_LINES = {
    "contempt": "I'm sorry, that came out harsh. I do respect you.",
    "criticism": "Let me try that again. What I need is...",
    "defensiveness": "You're right, I had a part in this.",
    "stonewalling": "I'm overwhelmed. Can we take a break and come back in twenty minutes?",
}

DEFAULT_WENT_WELL = "You showed up and had this conversation together."
DEFAULT_TRY_NEXT = 'Try using "I" statements to express how you feel.'
DEFAULT_REPAIR = "Let's take a breath and try again. I want to understand you better."


class RuleBasedNarrator:
    """Narrative generator that needs no network access."""

    async def personality(self, traits: TraitProfile) -> PersonalityNarratives:
        return personality_narratives(traits)

    async def couple(self, dynamics: RelationshipDynamics, name1: str, name2: str) -> CoupleNarrative:
        return couple_narrative(dynamics, name1, name2)

    async def coaching(self, scoring: ScoringResult) -> CoachingSuggestions:
        return coaching_suggestions(scoring)


def personality_narratives(traits: TraitProfile) -> PersonalityNarratives:
    big_five = traits.big_five
    eq = traits.emotional_intelligence
    attachment = traits.attachment

    strengths = []
    if big_five.agreeableness > STRENGTH_THRESHOLD:
        strengths.append("You connect naturally with your partner and prioritize harmony.")
    if big_five.openness > STRENGTH_THRESHOLD:
        strengths.append("Your openness to new ideas brings richness to your conversations.")
    if eq.empathy_score > STRENGTH_THRESHOLD:
        strengths.append("Your empathy helps you understand and respond to your partner's needs.")
    if eq.emotional_regulation > STRENGTH_THRESHOLD:
        strengths.append("You stay regulated, which helps keep difficult conversations calm.")
    if attachment.style == AttachmentStyle.SECURE:
        strengths.append("Your secure attachment gives your communication a stable foundation.")

    growth = []
    if big_five.neuroticism > GROWTH_THRESHOLD:
        growth.append("Managing stress and worry can help you communicate more clearly during conflict.")
    if attachment.anxiety_score > ATTACHMENT_CONCERN:
        growth.append("Trusting the relationship's stability may make it easier to voice your needs.")
    if attachment.avoidance_score > ATTACHMENT_CONCERN:
        growth.append("Opening up a little more emotionally could deepen your connection.")
    if eq.emotional_awareness < LOW_AWARENESS:
        growth.append("Pausing to name what you feel can sharpen your self-understanding.")

    communication = STYLE_SENTENCES.get(
        traits.communication.style,
        f"Your {traits.conflict.style.value} approach to conflict shapes how you navigate "
        "disagreements with your partner.",
    )

    return PersonalityNarratives(
        strengths=" ".join(strengths[:MAX_SENTENCES]) or DEFAULT_STRENGTHS,
        growth_areas=" ".join(growth[:MAX_SENTENCES]) or DEFAULT_GROWTH,
        communication=communication,
    )


def couple_narrative(dynamics: RelationshipDynamics, name1: str, name2: str) -> CoupleNarrative:
    narrative = []
    coaching = []

    shares = list(dynamics.dominance.values())
    if len(shares) == 2 and abs(shares[0] - shares[1]) < 20:
        narrative.append(f"{name1} and {name2} share conversation time fairly equally.")
    else:
        dominant = max(dynamics.dominance, key=dynamics.dominance.get)
        other = name2 if dominant == name1 else name1
        narrative.append(
            f"{dominant} tends to take more of the conversation, which can leave {other} "
            "less room to express themselves."
        )
        coaching.append("Practice active listening so both partners have space to share.")

    ratio = dynamics.positive_to_negative_ratio
    if ratio >= 5:
        narrative.append("Your positive-to-negative ratio is healthy, a foundation of warmth.")
    elif ratio < 2:
        narrative.append("There is room for more positive moments to strengthen your connection.")
        coaching.append("Express appreciation, affection and gratitude more often.")

    if dynamics.pursuer_withdrawer.is_pattern:
        coaching.append(
            "Work on the pursue-withdraw cycle: the pursuing partner can give space while the "
            "withdrawing partner practices staying engaged."
        )
    if "reduce_contempt" in dynamics.growth_opportunities:
        coaching.append("Contempt is especially harmful. Replace it with specific, kind requests.")

    return CoupleNarrative(
        dynamic_narrative=" ".join(narrative)
        or f"{name1} and {name2} are building their communication patterns together.",
        coaching_focus=" ".join(coaching)
        or "Keep practicing open, honest communication and appreciation for each other.",
    )


def _costliest(scoring: ScoringResult, tiers: tuple[CardType, ...]) -> str | None:
    cards = [card for card in scoring.cards if card.card_type in tiers]
    if not cards:
        return None
    return min(cards, key=lambda card: card.points).category


def coaching_suggestions(scoring: ScoringResult) -> CoachingSuggestions:
    went_well = DEFAULT_WENT_WELL
    for category in WENT_WELL:
        if any(card.category == category for card in scoring.cards):
            went_well = WENT_WELL[category]
            break

    worst = _costliest(scoring, (CardType.RED, CardType.YELLOW))
    try_next = TRY_NEXT.get(worst, DEFAULT_TRY_NEXT) if worst else DEFAULT_TRY_NEXT

    repair = DEFAULT_REPAIR
    for name in scoring.horsemen_names:
        if name in REPAIR_LINES:
            repair = REPAIR_LINES[name]
            break

    return CoachingSuggestions(what_went_well=went_well, try_next_time=try_next, repair_suggestion=repair)
