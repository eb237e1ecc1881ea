"""
Mastery math - decay, blending, review scheduling and aggregation.

Pure functions used by the MasteryTracker. Nothing here touches storage.

Model:
    decayed_prior = prior * exp(-DECAY_RATE * elapsed_days)
    attempt       = correct_ratio * min(1, expected_ms / actual_ms)
    new_mastery   = clamp01(0.3 * attempt + 0.7 * decayed_prior)
    next_review   = attempt_time + ceil((new_mastery * 5) ** 2 * jitter) days
"""

import math
import random
from datetime import datetime, timedelta
from typing import Callable, Mapping, Optional

DECAY_RATE = 0.05
CURRENT_ATTEMPT_WEIGHT = 0.3
PRIOR_MASTERY_WEIGHT = 0.7
REVIEW_INTERVAL_SCALE = 5
JITTER_MIN = 0.9
JITTER_MAX = 1.1

SECONDS_PER_DAY = 24 * 60 * 60

JitterSource = Callable[[], float]


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def elapsed_days(last: datetime, current: datetime) -> int:
    """Whole days between two attempts, rounded, never negative."""
    delta = (current - last).total_seconds() / SECONDS_PER_DAY
    return abs(round(delta))


def decay(prior_mastery: float, days: int) -> float:
    """Forgetting: shrink carried-forward mastery by the gap in days."""
    return prior_mastery * math.exp(-DECAY_RATE * days)


def time_factor(expected_ms: float, actual_ms: float) -> float:
    """Ratio of expected to actual time, capped at 1 so speed never over-rewards."""
    return min(1.0, expected_ms / actual_ms)


def blend_mastery(
    correct_ratio: float,
    factor: float,
    prior_mastery: float,
    days: int,
) -> float:
    """
    Blend the current attempt into the decayed prior.

    Args:
        correct_ratio: correct / total for this attempt (0.0-1.0)
        factor: time factor for this attempt (0.0-1.0)
        prior_mastery: stored mastery before this attempt (0.0-1.0)
        days: whole days since the previous attempt

    Returns:
        New mastery level clamped to [0, 1]
    """
    current = correct_ratio * factor
    decayed = decay(prior_mastery, days)
    return clamp01(CURRENT_ATTEMPT_WEIGHT * current + PRIOR_MASTERY_WEIGHT * decayed)


def review_interval_days(mastery_level: float, jitter: float) -> int:
    """Review spacing grows quadratically with mastery."""
    base = (mastery_level * REVIEW_INTERVAL_SCALE) ** 2
    return math.ceil(base * jitter)


def next_review_time(mastery_level: float, attempt_time: datetime, jitter: float) -> datetime:
    return attempt_time + timedelta(days=review_interval_days(mastery_level, jitter))


def random_jitter(rng: Optional[random.Random] = None) -> JitterSource:
    """Jitter uniformly drawn from [0.9, 1.1] to keep reviews from clustering."""
    source = rng or random.Random()

    def draw() -> float:
        return source.uniform(JITTER_MIN, JITTER_MAX)

    return draw


def fixed_jitter(value: float = 1.0) -> JitterSource:
    """Deterministic jitter for tests and reproducible replays."""
    if not JITTER_MIN <= value <= JITTER_MAX:
        raise ValueError(f"Jitter must be within [{JITTER_MIN}, {JITTER_MAX}], got {value}")
    return lambda: value


def path_completion(mastered_items: int, total_items: int) -> float:
    return mastered_items / total_items if total_items > 0 else 0.0


def overall_completion(
    path_completions: Mapping[str, float],
    path_weights: Mapping[str, float],
) -> float:
    """
    Weight-normalized average of per-path completions.

    Paths without a configured weight count with weight 1.
    """
    total_weight = 0.0
    weighted_sum = 0.0
    for path_id, completion in path_completions.items():
        weight = path_weights.get(path_id, 1.0)
        total_weight += weight
        weighted_sum += completion * weight
    return clamp01(weighted_sum / total_weight) if total_weight > 0 else 0.0
