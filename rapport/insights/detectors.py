"""Cross-session pattern detectors.

Each detector is a pure function over the analysed sessions of one subject
and returns zero or more findings. Confidence is a probability in [0, 1].
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class PatternType(str, Enum):
    TOPIC_TRIGGER = "TOPIC_TRIGGER"
    TIME_PATTERN = "TIME_PATTERN"
    BEHAVIOR_TREND = "BEHAVIOR_TREND"
    HORSEMAN_TREND = "HORSEMAN_TREND"
    POSITIVE_PATTERN = "POSITIVE_PATTERN"


class Impact(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


# Score gaps, in points
TOPIC_GAP = 10
EVENING_GAP = 10
WEEKEND_GAP = 15
TREND_GAP = 10
SEVERE_DECLINE = 20

EVENING_HOURS = range(19, 24)
MIN_TOPIC_OCCURRENCES = 2
MIN_EVENING_SESSIONS = 3
MIN_SESSIONS_PER_SIDE = 2
MIN_TREND_SESSIONS = 4
REPAIR_RATE_GAIN = 0.5

HORSEMAN_PREVALENCE = 0.4
SEVERE_PREVALENCE = 0.6
GREEN_RATIO = 0.5
HIGH_SCORE = 70
HIGH_SCORE_SHARE = 0.6

HORSEMAN_LABELS = {
    "criticism": "Criticism",
    "contempt": "Contempt",
    "defensiveness": "Defensiveness",
    "stonewalling": "Stonewalling",
}

WEEKDAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


@dataclass(frozen=True)
class SessionRecord:
    """An analysed session, flattened for pattern mining."""

    id: str
    created_at: datetime
    overall_score: float
    topic_tags: tuple[str, ...] = ()
    four_horsemen: tuple[str, ...] = ()
    repair_attempts: int = 0
    green_cards: int = 0
    yellow_cards: int = 0
    red_cards: int = 0

    @property
    def card_total(self) -> int:
        return self.green_cards + self.yellow_cards + self.red_cards

    @property
    def is_weekend(self) -> bool:
        return self.created_at.weekday() >= 5


@dataclass
class Finding:
    pattern_type: PatternType
    category: str
    title: str
    description: str
    confidence: float
    impact: Impact
    sessions_count: int
    evidence: dict = field(default_factory=dict)
    first_occurrence: datetime | None = None
    last_occurrence: datetime | None = None


def _average(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _overall_average(sessions: list[SessionRecord]) -> float:
    return _average([s.overall_score for s in sessions])


def _score_impact(score: float) -> Impact:
    if score < 40:
        return Impact.HIGH
    if score < 60:
        return Impact.MEDIUM
    return Impact.LOW


def _evidence(sessions: list[SessionRecord], **metrics) -> dict:
    evidence = {
        "sessions": [
            {"id": s.id, "date": s.created_at.isoformat(), "score": s.overall_score}
            for s in sessions
        ]
    }
    if metrics:
        evidence["metrics"] = metrics
    return evidence


def _chronological(sessions: list[SessionRecord]) -> list[SessionRecord]:
    return sorted(sessions, key=lambda s: s.created_at)


def detect_topic_triggers(sessions: list[SessionRecord]) -> list[Finding]:
    """Topics that recur and score well below the subject's average."""
    by_topic: dict[str, list[SessionRecord]] = defaultdict(list)
    for session in _chronological(sessions):
        for topic in dict.fromkeys(session.topic_tags):
            by_topic[topic].append(session)

    overall = _overall_average(sessions)
    findings = []
    for topic, matched in by_topic.items():
        if len(matched) < MIN_TOPIC_OCCURRENCES:
            continue
        topic_avg = _overall_average(matched)
        if topic_avg > overall - TOPIC_GAP:
            continue

        rate = len(matched) / len(sessions)
        findings.append(Finding(
            pattern_type=PatternType.TOPIC_TRIGGER,
            category=topic,
            title=f'"{topic}" discussions tend to be difficult',
            description=(
                f"{len(matched)} of {len(sessions)} sessions involved {topic}, averaging "
                f"{round(topic_avg)} points ({round(overall - topic_avg)} below your average)."
            ),
            confidence=min(0.9, 0.5 + rate * 0.4),
            impact=_score_impact(topic_avg),
            sessions_count=len(matched),
            evidence=_evidence(
                matched, occurrences=len(matched), averageScore=topic_avg, overallAverage=overall
            ),
            first_occurrence=matched[0].created_at,
            last_occurrence=matched[-1].created_at,
        ))
    return findings


def _evening_pattern(sessions: list[SessionRecord]) -> Finding | None:
    evening = [s for s in _chronological(sessions) if s.created_at.hour in EVENING_HOURS]
    if len(evening) < MIN_EVENING_SESSIONS:
        return None

    overall = _overall_average(sessions)
    evening_avg = _overall_average(evening)
    if evening_avg > overall - EVENING_GAP:
        return None

    return Finding(
        pattern_type=PatternType.TIME_PATTERN,
        category="evening",
        title="Evening conversations tend to be more difficult",
        description=(
            f"Conversations after 7pm average {round(evening_avg)} points, "
            f"{round(overall - evening_avg)} points lower than your overall average."
        ),
        confidence=min(0.85, 0.5 + (len(evening) / len(sessions)) * 0.35),
        impact=_score_impact(evening_avg),
        sessions_count=len(evening),
        evidence=_evidence(
            evening,
            eveningAverage=evening_avg,
            overallAverage=overall,
            eveningSessionCount=len(evening),
        ),
        first_occurrence=evening[0].created_at,
        last_occurrence=evening[-1].created_at,
    )


def _weekend_pattern(sessions: list[SessionRecord]) -> Finding | None:
    ordered = _chronological(sessions)
    weekend = [s for s in ordered if s.is_weekend]
    weekday = [s for s in ordered if not s.is_weekend]
    if len(weekend) < MIN_SESSIONS_PER_SIDE or len(weekday) < MIN_SESSIONS_PER_SIDE:
        return None

    weekend_avg = _overall_average(weekend)
    weekday_avg = _overall_average(weekday)
    if abs(weekend_avg - weekday_avg) < WEEKEND_GAP:
        return None

    if weekend_avg < weekday_avg:
        category, worse, worse_avg, gap, other = "weekend", weekend, weekend_avg, weekday_avg - weekend_avg, "weekdays"
    else:
        category, worse, worse_avg, gap, other = "weekday", weekday, weekday_avg, weekend_avg - weekday_avg, "weekends"

    return Finding(
        pattern_type=PatternType.TIME_PATTERN,
        category=category,
        title=f"{category.capitalize()} conversations tend to be more difficult",
        description=(
            f"{category.capitalize()} conversations average {round(worse_avg)} points, "
            f"{round(gap)} points lower than {other}."
        ),
        confidence=0.7,
        impact=Impact.MEDIUM,
        sessions_count=len(worse),
        evidence=_evidence(worse, weekendAverage=weekend_avg, weekdayAverage=weekday_avg),
        first_occurrence=worse[0].created_at,
        last_occurrence=worse[-1].created_at,
    )


def detect_time_patterns(sessions: list[SessionRecord]) -> list[Finding]:
    return [f for f in (_evening_pattern(sessions), _weekend_pattern(sessions)) if f is not None]


def detect_trends(sessions: list[SessionRecord]) -> list[Finding]:
    """Compare the earlier half of the history against the recent half."""
    ordered = _chronological(sessions)
    if len(ordered) < MIN_TREND_SESSIONS:
        return []

    midpoint = len(ordered) // 2
    earlier, recent = ordered[:midpoint], ordered[midpoint:]
    earlier_avg = _overall_average(earlier)
    recent_avg = _overall_average(recent)
    change = recent_avg - earlier_avg

    findings = []
    if abs(change) >= TREND_GAP:
        improving = change > 0
        if improving:
            impact = Impact.LOW
        elif abs(change) > SEVERE_DECLINE:
            impact = Impact.HIGH
        else:
            impact = Impact.MEDIUM
        findings.append(Finding(
            pattern_type=PatternType.BEHAVIOR_TREND,
            category="improvement" if improving else "decline",
            title=(
                "Your communication is improving!"
                if improving
                else "Your communication scores have been declining"
            ),
            description=(
                f"Your recent sessions average {round(recent_avg)} points, "
                f"{'up' if improving else 'down'} {round(abs(change))} points from earlier sessions."
            ),
            confidence=0.75,
            impact=impact,
            sessions_count=len(ordered),
            evidence=_evidence(
                ordered, earlierAverage=earlier_avg, recentAverage=recent_avg, change=change
            ),
            first_occurrence=ordered[0].created_at,
            last_occurrence=ordered[-1].created_at,
        ))

    earlier_rate = _average([s.repair_attempts for s in earlier])
    recent_rate = _average([s.repair_attempts for s in recent])
    gain = recent_rate - earlier_rate
    if gain > REPAIR_RATE_GAIN:
        findings.append(Finding(
            pattern_type=PatternType.POSITIVE_PATTERN,
            category="repair_attempts",
            title="Your repair attempts are increasing",
            description=(
                f"You're making {round(gain * 100)}% more repair attempts in recent sessions. "
                "This is a key indicator of healthy communication."
            ),
            confidence=0.8,
            impact=Impact.LOW,
            sessions_count=len(ordered),
            evidence=_evidence(ordered, earlierRepairRate=earlier_rate, recentRepairRate=recent_rate),
            first_occurrence=ordered[0].created_at,
            last_occurrence=ordered[-1].created_at,
        ))
    return findings


def detect_horsemen_trends(sessions: list[SessionRecord]) -> list[Finding]:
    by_horseman: dict[str, list[SessionRecord]] = defaultdict(list)
    for session in _chronological(sessions):
        for horseman in dict.fromkeys(session.four_horsemen):
            by_horseman[horseman].append(session)

    findings = []
    for horseman, matched in by_horseman.items():
        prevalence = len(matched) / len(sessions)
        if prevalence < HORSEMAN_PREVALENCE:
            continue

        label = HORSEMAN_LABELS.get(horseman, horseman)
        if horseman == "contempt":
            advice = "Contempt is particularly damaging to relationships."
        else:
            advice = f"Consider working on reducing {label.lower()}."
        severe = horseman == "contempt" or prevalence >= SEVERE_PREVALENCE

        findings.append(Finding(
            pattern_type=PatternType.HORSEMAN_TREND,
            category=horseman,
            title=f"{label} appears frequently in your conversations",
            description=(
                f"{label} was detected in {len(matched)} of {len(sessions)} sessions "
                f"({round(prevalence * 100)}%). {advice}"
            ),
            confidence=min(0.9, 0.6 + prevalence * 0.3),
            impact=Impact.HIGH if severe else Impact.MEDIUM,
            sessions_count=len(matched),
            evidence=_evidence(matched, occurrences=len(matched), prevalence=prevalence),
            first_occurrence=matched[0].created_at,
            last_occurrence=matched[-1].created_at,
        ))
    return findings


def detect_positive_patterns(sessions: list[SessionRecord]) -> list[Finding]:
    ordered = _chronological(sessions)
    findings = []

    total_green = sum(s.green_cards for s in ordered)
    total_cards = sum(s.card_total for s in ordered)
    if total_cards and total_green / total_cards >= GREEN_RATIO:
        ratio = total_green / total_cards
        findings.append(Finding(
            pattern_type=PatternType.POSITIVE_PATTERN,
            category="green_cards",
            title="Strong positive communication patterns",
            description=(
                f"{round(ratio * 100)}% of your interaction cards are positive (green). "
                "You're doing many things well!"
            ),
            confidence=0.85,
            impact=Impact.LOW,
            sessions_count=len(ordered),
            evidence=_evidence(ordered, greenRatio=ratio, totalGreenCards=total_green, totalCards=total_cards),
            first_occurrence=ordered[0].created_at,
            last_occurrence=ordered[-1].created_at,
        ))

    high = [s for s in ordered if s.overall_score >= HIGH_SCORE]
    if high and len(high) >= len(ordered) * HIGH_SCORE_SHARE:
        findings.append(Finding(
            pattern_type=PatternType.POSITIVE_PATTERN,
            category="high_scores",
            title="Consistently strong communication",
            description=(
                f"{len(high)} of your {len(ordered)} sessions scored {HIGH_SCORE} or above. "
                "You're maintaining healthy communication patterns."
            ),
            confidence=0.8,
            impact=Impact.LOW,
            sessions_count=len(high),
            evidence=_evidence(high),
            first_occurrence=high[0].created_at,
            last_occurrence=high[-1].created_at,
        ))
    return findings


DETECTORS = (
    detect_topic_triggers,
    detect_time_patterns,
    detect_trends,
    detect_horsemen_trends,
    detect_positive_patterns,
)


def calculate_metrics(sessions: list[SessionRecord]) -> dict:
    """Aggregate counters cached per subject for dashboards."""
    topic_frequency: dict[str, int] = defaultdict(int)
    topic_scores: dict[str, list[float]] = defaultdict(list)
    hourly: dict[str, int] = defaultdict(int)
    weekdays: dict[str, int] = defaultdict(int)
    monthly: dict[str, list[float]] = defaultdict(list)
    horsemen: dict[str, int] = defaultdict(int)

    for session in sessions:
        for topic in session.topic_tags:
            topic_frequency[topic] += 1
            topic_scores[topic].append(session.overall_score)
        hourly[str(session.created_at.hour)] += 1
        weekdays[WEEKDAY_NAMES[session.created_at.weekday()]] += 1
        monthly[session.created_at.strftime("%Y-%m")].append(session.overall_score)
        for horseman in session.four_horsemen:
            horsemen[horseman] += 1

    total_repairs = sum(s.repair_attempts for s in sessions)
    green = sum(s.green_cards for s in sessions)
    yellow = sum(s.yellow_cards for s in sessions)
    red = sum(s.red_cards for s in sessions)
    total_cards = green + yellow + red

    return {
        "topicFrequency": dict(topic_frequency),
        "topicScores": {topic: _average(scores) for topic, scores in topic_scores.items()},
        "hourlyDistribution": dict(hourly),
        "weekdayDistribution": dict(weekdays),
        "monthlyScores": {
            month: {"avg": _average(scores), "count": len(scores)} for month, scores in monthly.items()
        },
        "horsemenTrend": dict(horsemen),
        "repairAttemptTrend": {
            "total": total_repairs,
            "average": total_repairs / len(sessions) if sessions else 0,
        },
        "cardRatioTrend": {
            "green": green,
            "yellow": yellow,
            "red": red,
            "total": total_cards,
            "greenRatio": green / total_cards if total_cards else 0,
        },
    }
