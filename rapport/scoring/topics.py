import re

MAX_TOPICS = 5

# topic -> keywords that signal it
COMMON_TOPICS: dict[str, tuple[str, ...]] = {
    "finances": ("money", "finances", "budget", "bills", "spending", "debt", "rent", "savings", "paycheck"),
    "work": ("work", "job", "boss", "office", "career", "overtime", "meeting"),
    "children": ("kids", "children", "child", "son", "daughter", "baby", "school", "parenting"),
    "chores": ("chores", "dishes", "laundry", "cleaning", "housework", "trash", "groceries"),
    "intimacy": ("intimacy", "sex", "affection", "romance", "touch", "date night"),
    "family": ("family", "mom", "dad", "mother", "father", "parents", "in-laws", "sister", "brother"),
    "communication": ("communication", "listen", "listening", "talk", "talking", "ignore", "ignoring"),
    "time": ("time", "schedule", "late", "weekend", "busy", "plans"),
    "health": ("health", "doctor", "sick", "exercise", "sleep", "diet", "therapy"),
    "future": ("future", "wedding", "move", "moving", "house", "retirement", "plans for"),
}

_TOPIC_PATTERNS = {
    topic: re.compile(r"\b(?:" + "|".join(re.escape(k) for k in keywords) + r")\b", re.IGNORECASE)
    for topic, keywords in COMMON_TOPICS.items()
}


def detect_topics(text: str, limit: int = MAX_TOPICS) -> list[str]:
    """Return topic tags mentioned in the text, in table order, at most ``limit``."""
    found = [topic for topic, pattern in _TOPIC_PATTERNS.items() if pattern.search(text or "")]
    return found[:limit]
