from collections.abc import Mapping

from rapport.inference.rules import bucket_confidence

# Weight given to the newest session, before dividing by sessions+1.
# existing + new weights sum to (n + 1.2) / (n + 1), a deliberate recency bias.
NEW_SESSION_BOOST = 1.2

SESSION_COUNT_CONFIDENCE: tuple[tuple[float, int], ...] = (
    (2, 20),
    (5, 40),
    (10, 60),
    (20, 80),
    (float("inf"), 90),
)


def blend_weights(existing_sessions: int) -> tuple[float, float]:
    """Return (existing_weight, new_weight) for a profile with ``existing_sessions``."""
    total = existing_sessions + 1
    return existing_sessions / total, NEW_SESSION_BOOST / total


def blend_value(existing: float | None, new: float, existing_sessions: int) -> float:
    """Blend one field; a missing stored value takes the new value."""
    if existing is None:
        return new
    existing_weight, new_weight = blend_weights(existing_sessions)
    return round(existing * existing_weight + new * new_weight)


def blend_fields(
    existing: Mapping[str, float | None],
    new: Mapping[str, float],
    existing_sessions: int,
) -> dict[str, float]:
    """Blend every field in ``new``. The first session stores values verbatim."""
    if existing_sessions <= 0:
        return dict(new)
    return {
        name: blend_value(existing.get(name), value, existing_sessions)
        for name, value in new.items()
    }


def session_confidence(session_index: int) -> int:
    return bucket_confidence(session_index, SESSION_COUNT_CONFIDENCE)


def mean(values: list[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)
