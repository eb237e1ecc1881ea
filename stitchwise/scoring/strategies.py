"""
Speed and consistency strategies.

The speed score has two named strategies. Which one applies is decided by the
session's `response_times_captured` capability flag, never by whether the
optional field happens to be filled in.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from stitchwise.schemas import SessionData

EXPECTED_RESPONSE_TIME_MS = 3000
NEUTRAL_SPEED = 0.5


class SpeedStrategy(ABC):
    name: str

    @abstractmethod
    def speed(self, session: SessionData) -> float:
        """Speed score in [0, 1]."""


class ResponseTimeSpeed(SpeedStrategy):
    """1 - avg/expected, clamped: answering instantly scores 1, at or beyond the baseline 0."""
    name = "response_time"

    def __init__(self, expected_response_time_ms: float = EXPECTED_RESPONSE_TIME_MS):
        self.expected_response_time_ms = expected_response_time_ms

    def speed(self, session: SessionData) -> float:
        times = session.response_times_ms or []
        if not times:
            return 1.0
        average = sum(times) / len(times)
        return max(0.0, min(1.0, 1 - min(1.0, average / self.expected_response_time_ms)))


class NeutralSpeed(SpeedStrategy):
    """Fixed score for clients that cannot time individual answers."""
    name = "neutral"

    def __init__(self, value: float = NEUTRAL_SPEED):
        self.value = value

    def speed(self, session: SessionData) -> float:
        return self.value


def select_speed_strategy(session: SessionData) -> SpeedStrategy:
    if session.response_times_captured:
        return ResponseTimeSpeed()
    return NeutralSpeed()


def consistency_score(sequence: Optional[Sequence[bool]], accuracy: float) -> float:
    """
    1 - streak_breaks / (n - 1) over the per-question correctness sequence.

    Falls back to accuracy when no sequence is supplied; 0 or 1 answers are
    perfectly consistent.
    """
    if sequence is None:
        return accuracy
    if len(sequence) <= 1:
        return 1.0
    breaks = sum(1 for prev, cur in zip(sequence, sequence[1:]) if prev != cur)
    return 1 - breaks / (len(sequence) - 1)
