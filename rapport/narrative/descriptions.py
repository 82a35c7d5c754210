"""Human-readable descriptions for traits, styles and relationship tags."""

HIGH_TRAIT = 65
LOW_TRAIT = 35

TRAIT_DESCRIPTIONS: dict[str, dict[str, str]] = {
    "openness": {
        "high": "You're curious, creative, and enjoy exploring new ideas and experiences.",
        "moderate": "You balance openness to new experiences with appreciation for the familiar.",
        "low": "You tend to prefer familiar routines and practical, concrete thinking.",
    },
    "conscientiousness": {
        "high": "You're organized, dependable, and goal-oriented in your approach.",
        "moderate": "You balance structure with flexibility in your daily life.",
        "low": "You prefer spontaneity and flexibility over rigid planning.",
    },
    "extraversion": {
        "high": "You draw energy from social interaction and express yourself enthusiastically.",
        "moderate": "You enjoy both social time and quiet reflection.",
        "low": "You recharge through quiet time and prefer deeper one-on-one connections.",
    },
    "agreeableness": {
        "high": "You're naturally cooperative, trusting, and empathetic toward others.",
        "moderate": "You balance compassion for others with attention to your own needs.",
        "low": "You tend to be direct and prioritize honesty over harmony.",
    },
    "neuroticism": {
        "high": "You experience emotions intensely and may be prone to worry or stress.",
        "moderate": "You experience a normal range of emotional ups and downs.",
        "low": "You tend to remain calm and emotionally stable across situations.",
    },
}

ATTACHMENT_DESCRIPTIONS: dict[str, str] = {
    "SECURE": (
        "You tend to feel comfortable with emotional intimacy and are generally trusting. "
        "You can state your needs clearly and respond well to your partner's."
    ),
    "ANXIOUS_PREOCCUPIED": (
        "You may sometimes worry about the stability of your relationship and look to your "
        "partner for reassurance. You value closeness and notice shifts in your partner's mood."
    ),
    "DISMISSIVE_AVOIDANT": (
        "You value independence and may find it hard to fully open up emotionally. "
        "You often prefer to handle things on your own."
    ),
    "FEARFUL_AVOIDANT": (
        "You may want closeness while also feeling uneasy with too much of it, "
        "which can create a push-pull rhythm in the relationship."
    ),
    "UNDETERMINED": "There isn't enough conversation yet to estimate an attachment style.",
}

COMMUNICATION_DESCRIPTIONS: dict[str, str] = {
    "PLACATER": (
        "You tend to prioritize harmony and may put your partner's needs before your own. "
        "Your needs matter too."
    ),
    "BLAMER": (
        "You communicate directly and assertively. That directness can land as criticism, "
        "so pair it with curiosity about your partner's view."
    ),
    "COMPUTER": (
        "You approach conversations analytically. Your partner may sometimes want more "
        "emotional connection alongside the logic."
    ),
    "DISTRACTER": (
        "You often use humor or change the subject when things get hard. It eases tension "
        "but can keep conversations from going deeper."
    ),
    "LEVELER": (
        "You communicate authentically and directly while staying respectful, which makes "
        "room for genuine connection."
    ),
    "MIXED": (
        "Your style shifts with the situation. That flexibility helps, and a bit more "
        "consistency can make you easier to read."
    ),
}

STRENGTH_DESCRIPTIONS: dict[str, str] = {
    "healthy_positive_negative_ratio": (
        "You keep a healthy balance of positive to negative interactions, a strong predictor "
        "of relationship satisfaction."
    ),
    "balanced_emotional_expression": "Both partners express emotions openly and in similar measure.",
    "mutual_repair_attempts": "When things get tense, both of you work to repair the connection.",
    "shared_identity": 'You use "we" language often, a sign of a strong sense of partnership.',
    "constructive_feedback": "You raise concerns without attacking each other's character.",
    "shared_enthusiasm": "You share enthusiasm and energy in your conversations.",
    "connection_language": "Your language reflects care for connection and togetherness.",
}

GROWTH_DESCRIPTIONS: dict[str, str] = {
    "increase_positive_interactions": (
        "Focus on more appreciation, affection and positive feedback in everyday moments."
    ),
    "emotional_balance": "Work toward both partners feeling equally safe sharing feelings.",
    "repair_skills": (
        'Practice repair attempts when things get difficult. A simple "I\'m sorry" or '
        '"Let\'s take a break" goes a long way.'
    ),
    "pursuer_withdrawer_pattern": (
        "Notice when one partner pursues while the other withdraws, and work to meet in the middle."
    ),
    "reduce_contempt": (
        "Contempt (eye-rolling, sarcasm, mockery) is especially harmful. Practice voicing "
        "frustration without attacking."
    ),
}


def trait_level(score: float) -> str:
    if score > HIGH_TRAIT:
        return "high"
    if score < LOW_TRAIT:
        return "low"
    return "moderate"


def describe_trait(trait: str, score: float) -> str:
    return TRAIT_DESCRIPTIONS.get(trait, {}).get(trait_level(score), "")


def describe_attachment(style: str) -> str:
    return ATTACHMENT_DESCRIPTIONS.get(style, ATTACHMENT_DESCRIPTIONS["UNDETERMINED"])


def describe_communication(style: str) -> str:
    return COMMUNICATION_DESCRIPTIONS.get(style, COMMUNICATION_DESCRIPTIONS["MIXED"])


def describe_strength(tag: str) -> str:
    return STRENGTH_DESCRIPTIONS.get(tag, tag)


def describe_growth(tag: str) -> str:
    return GROWTH_DESCRIPTIONS.get(tag, tag)
