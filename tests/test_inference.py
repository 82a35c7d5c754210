import pytest

from rapport.inference.attachment import AttachmentStyle, analyze_attachment, classify_attachment
from rapport.inference.big_five import BIG_FIVE_TRAITS, analyze_big_five
from rapport.inference.communication import (
    CommunicationStyle,
    analyze_communication,
    classify_communication,
    normalize_scores,
)
from rapport.inference.conflict import ConflictStyle, analyze_conflict_style, classify_conflict
from rapport.inference.emotional_intelligence import analyze_emotional_intelligence
from rapport.inference.engine import build_participant, infer_traits
from rapport.inference.rules import (
    ScoringRule,
    TraitInputs,
    apply_rules,
    clamp,
    confidence_from_word_count,
)
from rapport.linguistics.features import LinguisticFeatures
from rapport.linguistics.patterns import HorsemenCounts


def _extreme_inputs(high: bool) -> TraitInputs:
    value = 100.0 if high else 0.0
    features = LinguisticFeatures(
        total_words=10**7 if high else 1,
        unique_words=10**7 if high else 1,
        sentence_count=1,
        avg_word_length=50.0 if high else 0.0,
        avg_sentence_length=10**7 if high else 0.0,
        **{
            name: value
            for name in (
                "first_person_singular", "first_person_plural", "second_person", "third_person",
                "positive_emotion_words", "negative_emotion_words", "anxiety_words", "anger_words",
                "sadness_words", "certainty_words", "tentative_words", "discrepancy_words",
                "affiliation_words", "achievement_words", "power_words", "question_frequency",
                "exclamation_frequency", "hedging_phrases",
            )
        },
    )
    n = 1000 if high else 0
    return TraitInputs(features, HorsemenCounts(n, n, n, n), n)


class TestRules:
    @pytest.mark.parametrize(
        "words,expected",
        [(0, 10), (49, 10), (50, 25), (99, 25), (100, 40), (199, 40), (200, 60),
         (499, 60), (500, 75), (999, 75), (1000, 85), (1999, 85), (2000, 95), (10**6, 95)],
    )
    def test_word_count_confidence(self, words, expected):
        assert confidence_from_word_count(words) == expected

    def test_apply_rules_in_order_and_clamped(self):
        rules = (
            ScoringRule(lambda x: True, 80, "big"),
            ScoringRule(lambda x: x.repair_attempts > 0, 50, "repair"),
            ScoringRule(lambda x: False, -500, "never"),
        )
        score, indicators = apply_rules(rules, TraitInputs(LinguisticFeatures(), repair_attempts=1))
        assert score == 100
        assert indicators == ["big", "repair"]

    def test_clamp(self):
        assert clamp(-5) == 0
        assert clamp(105) == 100
        assert clamp(42.5) == 42.5


class TestClamping:
    @pytest.mark.parametrize("high", [True, False])
    def test_scores_stay_in_range(self, high):
        inputs = _extreme_inputs(high)
        big_five = analyze_big_five(inputs)
        attachment = analyze_attachment(inputs)
        eq = analyze_emotional_intelligence(inputs)
        conflict = analyze_conflict_style(inputs)

        values = [getattr(big_five, t) for t in BIG_FIVE_TRAITS]
        values += [attachment.anxiety_score, attachment.avoidance_score]
        values += [eq.emotional_awareness, eq.empathy_score, eq.emotional_regulation]
        values += [conflict.assertiveness_score, conflict.cooperativeness_score]
        assert all(0 <= v <= 100 for v in values)
        for confidence in (big_five.confidence, attachment.confidence, eq.confidence, conflict.confidence):
            assert 0 <= confidence <= 100


class TestBigFive:
    def test_neutral_baseline(self):
        scores = analyze_big_five(TraitInputs(LinguisticFeatures()))
        assert scores.openness == 50
        assert scores.extraversion == 50
        assert scores.agreeableness == 50
        assert scores.neuroticism == 50
        # low negative emotion nudges conscientiousness up
        assert scores.conscientiousness == 55
        assert scores.confidence == 10

    def test_negative_emotion_raises_neuroticism(self):
        features = LinguisticFeatures(total_words=100, negative_emotion_words=6, anxiety_words=3)
        scores = analyze_big_five(TraitInputs(features))
        assert scores.neuroticism == 50 + 15 + 10 + 15 + 10
        assert any(i.startswith("neuroticism:") for i in scores.indicators)


class TestAttachment:
    @pytest.mark.parametrize(
        "anxiety,avoidance,expected",
        [
            (0, 0, AttachmentStyle.SECURE),
            (39, 39, AttachmentStyle.SECURE),
            (40, 39, AttachmentStyle.ANXIOUS_PREOCCUPIED),
            (39, 40, AttachmentStyle.DISMISSIVE_AVOIDANT),
            (40, 40, AttachmentStyle.FEARFUL_AVOIDANT),
            (100, 100, AttachmentStyle.FEARFUL_AVOIDANT),
        ],
    )
    def test_quadrants(self, anxiety, avoidance, expected):
        assert classify_attachment(anxiety, avoidance) == expected

    def test_empty_text_reads_as_avoidant(self):
        analysis = analyze_attachment(TraitInputs(LinguisticFeatures()))
        assert analysis.anxiety_score == 0
        assert analysis.avoidance_score == 45
        assert analysis.style == AttachmentStyle.DISMISSIVE_AVOIDANT

    def test_warm_text_reads_as_secure(self):
        features = LinguisticFeatures(
            total_words=80,
            first_person_plural=6,
            positive_emotion_words=5,
            affiliation_words=4,
        )
        analysis = analyze_attachment(TraitInputs(features, repair_attempts=1))
        assert analysis.style == AttachmentStyle.SECURE


class TestCommunication:
    def test_margin_of_ten_is_mixed(self):
        scores = {"placater": 30, "blamer": 20, "computer": 20, "distracter": 15, "leveler": 15}
        assert classify_communication(scores) == CommunicationStyle.MIXED

    def test_margin_over_ten_wins(self):
        scores = {"placater": 31, "blamer": 20, "computer": 19, "distracter": 15, "leveler": 15}
        assert classify_communication(scores) == CommunicationStyle.PLACATER

    def test_tie_is_mixed(self):
        scores = {"blamer": 40, "leveler": 40, "placater": 20}
        assert classify_communication(scores) == CommunicationStyle.MIXED

    def test_all_zero_is_mixed(self):
        assert classify_communication(normalize_scores({"blamer": 0, "leveler": 0})) == CommunicationStyle.MIXED

    def test_normalized_sum(self):
        analysis = analyze_communication(TraitInputs(LinguisticFeatures()))
        assert sum(analysis.scores.values()) == pytest.approx(100)
        assert analysis.style == CommunicationStyle.COMPUTER

    def test_blamer(self):
        features = LinguisticFeatures(total_words=60, second_person=20, certainty_words=8, power_words=4)
        horsemen = HorsemenCounts(criticism=3, contempt=2)
        analysis = analyze_communication(TraitInputs(features, horsemen))
        assert analysis.style == CommunicationStyle.BLAMER


class TestConflict:
    @pytest.mark.parametrize(
        "assertiveness,cooperativeness,expected",
        [
            (30, 30, ConflictStyle.AVOIDING),
            (39.9, 60, ConflictStyle.ACCOMMODATING),
            (70, 30, ConflictStyle.COMPETING),
            (60, 60, ConflictStyle.COLLABORATING),
            (50, 50, ConflictStyle.COMPROMISING),
            (40, 60, ConflictStyle.COMPROMISING),
        ],
    )
    def test_classification(self, assertiveness, cooperativeness, expected):
        assert classify_conflict(assertiveness, cooperativeness) == expected

    def test_contempt_lowers_cooperativeness(self):
        features = LinguisticFeatures(total_words=50, first_person_plural=5)
        calm = analyze_conflict_style(TraitInputs(features))
        hostile = analyze_conflict_style(TraitInputs(features, HorsemenCounts(contempt=2, stonewalling=3)))
        assert calm.cooperativeness_score == 25
        assert hostile.cooperativeness_score == 0


class TestEmotionalIntelligence:
    def test_repairs_raise_regulation(self):
        base = analyze_emotional_intelligence(TraitInputs(LinguisticFeatures()))
        repaired = analyze_emotional_intelligence(TraitInputs(LinguisticFeatures(), repair_attempts=3))
        assert repaired.emotional_regulation == base.emotional_regulation + 25
        assert repaired.empathy_score == base.empathy_score + 15


class TestTraitProfile:
    def test_full_profile(self):
        participant = build_participant(
            "Alex",
            ["You always do this.", "You never listen.", "Whatever, I don't care."],
            identity="user-alex",
        )
        traits = infer_traits(participant)

        assert participant.key == "user-alex"
        assert participant.message_count == 3
        assert participant.horsemen.stonewalling == 2
        assert traits.confidence == 10

        numeric = traits.numeric_fields()
        assert numeric["confidence_score"] == 10
        assert numeric["repair_initiation"] == traits.conflict.assertiveness_score
        assert set(traits.categorical_fields()) == {"attachment_style", "communication_style", "conflict_style"}

    def test_unmapped_participant_key_is_name(self):
        assert build_participant("Sam", ["hi"]).key == "Sam"
