import re
from dataclasses import asdict, dataclass

from rapport.linguistics.dictionaries import CATEGORIES, HEDGING_PHRASES, QUESTION_OPENERS
from rapport.messages import SessionMessage, group_by_speaker

_APOSTROPHES = str.maketrans({"’": "'", "‘": "'", "ʼ": "'"})
_DISALLOWED = re.compile(r"[^\w\s'.,!?-]")
_HORIZONTAL_SPACE = re.compile(r"[ \t\r\f\v]+")
_TOKEN_SPLIT = re.compile(r"[\s.,!?]+")
_NON_WORD = re.compile(r"[^a-z']")
_SENTENCE = re.compile(r"[^.!?\n]+[.!?]*")
_HEDGING = re.compile(r"\b(?:" + "|".join(re.escape(p) for p in HEDGING_PHRASES) + r")\b")


@dataclass(frozen=True)
class LinguisticFeatures:
    """Per-speaker feature vector. Category fields are percentages in [0, 100]."""

    total_words: int = 0
    unique_words: int = 0
    sentence_count: int = 0
    avg_word_length: float = 0.0
    avg_sentence_length: float = 0.0

    first_person_singular: float = 0.0
    first_person_plural: float = 0.0
    second_person: float = 0.0
    third_person: float = 0.0

    positive_emotion_words: float = 0.0
    negative_emotion_words: float = 0.0
    anxiety_words: float = 0.0
    anger_words: float = 0.0
    sadness_words: float = 0.0

    certainty_words: float = 0.0
    tentative_words: float = 0.0
    discrepancy_words: float = 0.0

    affiliation_words: float = 0.0
    achievement_words: float = 0.0
    power_words: float = 0.0

    question_frequency: float = 0.0
    exclamation_frequency: float = 0.0
    hedging_phrases: float = 0.0

    @property
    def vocabulary_richness(self) -> float:
        if not self.total_words:
            return 0.0
        return self.unique_words / self.total_words

    @property
    def emotion_volume(self) -> float:
        return self.positive_emotion_words + self.negative_emotion_words

    def as_dict(self) -> dict:
        return asdict(self)


def normalize_text(text: str) -> str:
    """Lowercase, keep word characters, sentence terminators and apostrophes."""
    text = text.lower().translate(_APOSTROPHES)
    text = _DISALLOWED.sub(" ", text)
    return _HORIZONTAL_SPACE.sub(" ", text).strip()


def tokenize(normalized: str) -> list[str]:
    words = []
    for raw in _TOKEN_SPLIT.split(normalized):
        word = _NON_WORD.sub("", raw)
        if word.strip("'"):
            words.append(word)
    return words


def split_sentences(normalized: str) -> list[str]:
    sentences = []
    for match in _SENTENCE.findall(normalized):
        sentence = match.strip()
        if sentence.strip(" .!?,-'"):
            sentences.append(sentence)
    return sentences


def _percentage(count: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return min(100.0, 100.0 * count / total)


def _is_question(sentence: str) -> bool:
    if "?" in sentence:
        return True
    first = sentence.split(" ", 1)[0].strip(",'-")
    return first in QUESTION_OPENERS


def extract_features(text: str) -> LinguisticFeatures:
    """Compute the linguistic feature vector for one blob of text.

    Text with no words yields the all-zero vector.
    """
    normalized = normalize_text(text or "")
    words = tokenize(normalized)
    if not words:
        return LinguisticFeatures()

    sentences = split_sentences(normalized) or [normalized]
    total = len(words)
    n_sentences = len(sentences)

    categories = {
        field: _percentage(sum(1 for w in words if w in vocabulary), total)
        for field, vocabulary in CATEGORIES.items()
    }

    return LinguisticFeatures(
        total_words=total,
        unique_words=len(set(words)),
        sentence_count=n_sentences,
        avg_word_length=sum(len(w) for w in words) / total,
        avg_sentence_length=total / n_sentences,
        question_frequency=_percentage(sum(1 for s in sentences if _is_question(s)), n_sentences),
        exclamation_frequency=_percentage(sum(1 for s in sentences if "!" in s), n_sentences),
        hedging_phrases=_percentage(len(_HEDGING.findall(normalized)), n_sentences),
        **categories,
    )


def extract_features_from_conversation(
    messages: list[SessionMessage],
) -> dict[str, LinguisticFeatures]:
    """Group content by speaker, then extract one feature vector per speaker.

    Each message starts a new sentence, so unpunctuated messages do not run
    together.
    """
    return {
        speaker: extract_features("\n".join(contents))
        for speaker, contents in group_by_speaker(messages).items()
    }
