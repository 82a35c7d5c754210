"""Word-category dictionaries for feature extraction.

Each category is a frozenset of lowercase tokens. Lists are a replaceable
resource: extend them here and extraction picks them up through CATEGORIES.
"""

FIRST_PERSON_SINGULAR = frozenset({
    "i", "i'm", "i've", "i'll", "i'd", "me", "my", "mine", "myself", "im", "ive",
})

FIRST_PERSON_PLURAL = frozenset({
    "we", "we're", "we've", "we'll", "we'd", "us", "our", "ours", "ourselves", "lets", "let's",
})

SECOND_PERSON = frozenset({
    "you", "you're", "you've", "you'll", "you'd", "your", "yours", "yourself", "yourselves",
    "youre", "u", "ur",
})

THIRD_PERSON = frozenset({
    "he", "he's", "him", "his", "himself", "she", "she's", "her", "hers", "herself",
    "they", "they're", "them", "their", "theirs", "themselves", "it", "it's", "its", "itself",
})

POSITIVE_EMOTION = frozenset({
    "love", "loved", "loving", "happy", "happiness", "glad", "good", "great", "wonderful",
    "amazing", "awesome", "excellent", "fantastic", "beautiful", "nice", "joy", "joyful",
    "excited", "exciting", "fun", "appreciate", "appreciated", "thank", "thanks", "thankful",
    "grateful", "care", "caring", "kind", "sweet", "proud", "hope", "hopeful", "comfortable",
    "calm", "peaceful", "relieved", "enjoy", "enjoyed", "laugh", "smile", "support",
    "supportive", "understand", "trust", "safe", "warm", "best", "better", "lovely",
})

NEGATIVE_EMOTION = frozenset({
    "hate", "hated", "angry", "sad", "hurt", "hurts", "hurting", "bad", "terrible", "awful",
    "horrible", "upset", "annoyed", "annoying", "frustrated", "frustrating", "disappointed",
    "disappointing", "wrong", "unfair", "blame", "stupid", "ridiculous", "worst", "worse",
    "pain", "painful", "miserable", "unhappy", "tired", "sick", "mad", "jealous", "bitter",
    "resent", "resentful", "disgusted", "ugly", "fault", "problem", "fail", "failed",
})

ANXIETY = frozenset({
    "worried", "worry", "worrying", "anxious", "anxiety", "nervous", "afraid", "scared",
    "fear", "fearful", "panic", "stressed", "stress", "stressful", "tense", "uneasy",
    "insecure", "overwhelmed", "uncertain", "unsure", "confused", "frightened", "terrified",
    "dread", "restless",
})

ANGER = frozenset({
    "angry", "mad", "furious", "rage", "hate", "annoyed", "irritated", "pissed", "livid",
    "outraged", "hostile", "fight", "fighting", "argue", "arguing", "yell", "yelling",
    "scream", "screaming", "shout", "shouting", "fed", "sick", "enough",
})

SADNESS = frozenset({
    "sad", "sadness", "cry", "crying", "cried", "tears", "lonely", "alone", "lost", "miss",
    "missed", "missing", "grief", "heartbroken", "depressed", "down", "empty", "hopeless",
    "helpless", "hurt", "unhappy", "sorry", "regret", "disappointed",
})

CERTAINTY = frozenset({
    "always", "never", "definitely", "absolutely", "certainly", "clearly", "obviously",
    "totally", "completely", "entirely", "sure", "certain", "know", "undoubtedly", "every",
    "everything", "nothing", "constantly", "forever", "must", "fact", "exactly", "indeed",
})

TENTATIVE = frozenset({
    "maybe", "perhaps", "possibly", "probably", "might", "could", "guess", "think",
    "suppose", "seems", "seem", "somewhat", "sometimes", "unsure", "wonder", "apparently",
    "likely", "unlikely", "almost", "kinda", "sorta", "hopefully", "potentially",
})

DISCREPANCY = frozenset({
    "should", "shouldn't", "would", "wouldn't", "could", "couldn't", "need", "needs",
    "needed", "want", "wants", "wanted", "wish", "wished", "hope", "hoped", "expect",
    "expected", "ought", "must", "rather", "if",
})

AFFILIATION = frozenset({
    "friend", "friends", "together", "share", "shared", "sharing", "team", "partner",
    "family", "love", "care", "help", "helping", "support", "connect", "connected",
    "connection", "close", "bond", "relationship", "us", "we", "our", "join", "belong",
    "community", "marriage", "married", "couple", "hug", "kiss",
})

ACHIEVEMENT = frozenset({
    "win", "won", "winning", "success", "successful", "succeed", "goal", "goals", "achieve",
    "achieved", "accomplish", "accomplished", "improve", "improved", "improving", "progress",
    "complete", "completed", "finish", "finished", "effort", "work", "working", "earn",
    "earned", "best", "better", "plan", "planned", "focus", "productive", "done",
})

POWER = frozenset({
    "control", "controlling", "force", "forced", "dominate", "demand", "demanded", "insist",
    "command", "order", "boss", "power", "powerful", "strong", "weak", "authority", "rule",
    "rules", "decide", "decided", "decision", "charge", "lead", "superior", "obey", "allow",
    "allowed", "permission", "make",
})

# Field name on LinguisticFeatures -> word set
CATEGORIES: dict[str, frozenset[str]] = {
    "first_person_singular": FIRST_PERSON_SINGULAR,
    "first_person_plural": FIRST_PERSON_PLURAL,
    "second_person": SECOND_PERSON,
    "third_person": THIRD_PERSON,
    "positive_emotion_words": POSITIVE_EMOTION,
    "negative_emotion_words": NEGATIVE_EMOTION,
    "anxiety_words": ANXIETY,
    "anger_words": ANGER,
    "sadness_words": SADNESS,
    "certainty_words": CERTAINTY,
    "tentative_words": TENTATIVE,
    "discrepancy_words": DISCREPANCY,
    "affiliation_words": AFFILIATION,
    "achievement_words": ACHIEVEMENT,
    "power_words": POWER,
}

HEDGING_PHRASES: tuple[str, ...] = (
    "i think",
    "i feel like",
    "i believe",
    "i guess",
    "sort of",
    "kind of",
    "in my opinion",
    "it seems like",
    "maybe",
    "perhaps",
    "probably",
    "not sure",
    "i might be wrong",
    "correct me if",
    "if i remember",
    "as far as i know",
    "to be honest",
    "honestly",
    "actually",
    "basically",
    "essentially",
    "i don't know",
    "i dunno",
)

QUESTION_OPENERS: tuple[str, ...] = (
    "who", "what", "where", "when", "why", "how", "is", "are", "do", "does", "did",
    "can", "could", "would", "should", "will",
)
