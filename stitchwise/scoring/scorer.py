"""
SessionScorer - Convert one completed session's tallies into a score.

Provides:
- Points: FTC and EC points, base points, total points
- Ratios: accuracy, consistency, speed
- Bonus: MAX of the consistency, excellence and fluency tier tracks
- Fluency: blink speed (ms per first-time-correct answer) and evolution

The scorer keeps no state between calls and can be shared freely between
threads. The standalone primitives are module-level functions.

Zero blink speed:
- blink_speed() with zero FTC answers returns the whole duration (no error)
- evolution() with a zero blink speed raises DivisionByZero
- score() reports evolution 0 when the blink speed is zero
"""

import math
from numbers import Integral
from typing import Mapping, Union

from pydantic import ValidationError

from stitchwise.errors import (
    DivisionByZero,
    InvalidCount,
    InvalidDuration,
    InvalidScore,
    InvalidSessionData,
)
from stitchwise.schemas import FormulaGeneration, SessionData, SessionScore

from .strategies import consistency_score, select_speed_strategy
from .tiers import (
    CONSISTENCY_LADDER,
    EXCELLENCE_LADDER,
    FLUENCY_LADDER,
    MIN_MULTIPLIER,
    TierLadder,
    check_multiplier,
)

FTC_WEIGHT = 3
EC_WEIGHT = 1
TARGET_BLINK_SPEED_MS = 3000  # evolution scale
RATIO_PRECISION = 2


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _is_count(value) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, Integral):
        return value >= 0
    return isinstance(value, float) and value.is_integer() and value >= 0


def _check_count(value, name: str) -> int:
    if not _is_count(value):
        raise InvalidCount(f"{name} must be a non-negative integer, got {value!r}")
    return int(value)


def _check_duration(value, name: str = "duration_ms") -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not value >= 0 or math.isinf(value):
        raise InvalidDuration(f"{name} must be a non-negative number, got {value!r}")
    return float(value)


# -----------------------------------------------------------------------------
# Standalone primitives
# -----------------------------------------------------------------------------

def ftc_points(ftc_count: int, weight: int = FTC_WEIGHT) -> int:
    """Points for first-time-correct answers."""
    return _check_count(ftc_count, "ftc_count") * weight


def ec_points(ec_count: int, weight: int = EC_WEIGHT) -> int:
    """Points for eventually-correct answers."""
    return _check_count(ec_count, "ec_count") * weight


def blink_speed(duration_ms: float, ftc_count: int) -> float:
    """
    Average milliseconds per first-time-correct answer, rounded to whole ms.

    With no FTC answers the whole session counts as one slow blink and the
    duration itself is returned.

    Raises:
        InvalidDuration: negative duration
        InvalidCount: negative or non-integer FTC count
    """
    duration = _check_duration(duration_ms)
    count = _check_count(ftc_count, "ftc_count")
    if count == 0:
        return duration
    return float(_round_half_up(duration / count))


def evolution(total_points: float, blink_speed_ms: float) -> int:
    """
    Composite progress indicator: total points per blink, scaled by the target blink speed.

    Raises:
        InvalidScore: negative or non-finite points, or a result too large to represent
        InvalidDuration: negative blink speed
        DivisionByZero: blink speed of zero
    """
    if (
        isinstance(total_points, bool)
        or not isinstance(total_points, (int, float))
        or not total_points >= 0
        or math.isinf(total_points)
    ):
        raise InvalidScore(f"total_points must be a finite non-negative number, got {total_points!r}")
    blink = _check_duration(blink_speed_ms, "blink_speed_ms")
    if blink == 0:
        raise DivisionByZero("Cannot compute evolution with a blink speed of zero")
    value = total_points / blink * TARGET_BLINK_SPEED_MS
    if math.isinf(value):
        raise InvalidScore(f"evolution overflows for {total_points!r} points at {blink!r} ms")
    return _round_half_up(value)


def combine_tracks(*multipliers: float) -> float:
    """
    Session bonus: the largest track multiplier, rounded to one decimal.

    Excelling on one axis is enough; the tracks are never averaged.

    Raises:
        InvalidScore: a multiplier outside [MIN_MULTIPLIER, MAX_MULTIPLIER]
    """
    if not multipliers:
        return MIN_MULTIPLIER
    for value in multipliers:
        check_multiplier(value)
    return round(max(multipliers), 1)


def bonus_multiplier(
    ftc_ratio: float,
    blink_speed_ms: float,
    streak_days: int = 0,
    fluency_eligible: bool = True,
) -> float:
    """
    Bonus multiplier from the three tier tracks.

    Args:
        ftc_ratio: First-time-correct answers / questions (0.0-1.0)
        blink_speed_ms: Blink speed of the session
        streak_days: Consecutive practice days before this session
        fluency_eligible: False when the session had no FTC answers, so its
            blink speed is just the session duration

    Raises:
        InvalidScore, InvalidDuration, InvalidCount
    """
    if isinstance(ftc_ratio, bool) or not isinstance(ftc_ratio, (int, float)) or not 0.0 <= ftc_ratio <= 1.0:
        raise InvalidScore(f"ftc_ratio must be between 0 and 1, got {ftc_ratio!r}")
    blink = _check_duration(blink_speed_ms, "blink_speed_ms")
    streak = _check_count(streak_days, "streak_days")

    return combine_tracks(*track_multipliers(ftc_ratio, blink, streak, fluency_eligible))


def track_multipliers(
    ftc_ratio: float,
    blink_speed_ms: float,
    streak_days: int,
    fluency_eligible: bool = True,
    consistency_ladder: TierLadder = CONSISTENCY_LADDER,
    excellence_ladder: TierLadder = EXCELLENCE_LADDER,
    fluency_ladder: TierLadder = FLUENCY_LADDER,
) -> tuple[float, float, float]:
    """(consistency, excellence, fluency) multipliers, unvalidated inputs."""
    return (
        consistency_ladder.multiplier_for(streak_days),
        excellence_ladder.multiplier_for(ftc_ratio),
        fluency_ladder.multiplier_for(blink_speed_ms) if fluency_eligible else MIN_MULTIPLIER,
    )


# -----------------------------------------------------------------------------
# Composite scorer
# -----------------------------------------------------------------------------

def validate_session_data(session: Union[SessionData, Mapping]) -> SessionData:
    """
    Check a session's tallies.

    Raises:
        InvalidSessionData: any malformed count, duration or per-question list
    """
    if not isinstance(session, SessionData):
        try:
            session = SessionData.model_validate(session)
        except ValidationError as exc:
            raise InvalidSessionData(f"Malformed session data: {exc}") from exc

    for name in ("question_count", "ftc_count", "ec_count", "incorrect_count", "streak_days"):
        if not _is_count(getattr(session, name)):
            raise InvalidSessionData(f"{name} must be a non-negative integer, got {getattr(session, name)}")

    if not session.duration_ms >= 0 or math.isinf(session.duration_ms):
        raise InvalidSessionData(f"duration_ms must be a non-negative number, got {session.duration_ms}")

    if session.ftc_count + session.ec_count + session.incorrect_count != session.question_count:
        raise InvalidSessionData(
            "ftc_count + ec_count + incorrect_count must equal question_count "
            f"({session.ftc_count} + {session.ec_count} + {session.incorrect_count} != {session.question_count})"
        )

    if session.correctness_sequence is not None:
        if len(session.correctness_sequence) != session.question_count:
            raise InvalidSessionData("correctness_sequence length must match question_count")

    if session.response_times_captured:
        if session.response_times_ms is None:
            raise InvalidSessionData("response_times_captured is set but no response times were sent")
        if len(session.response_times_ms) != session.question_count:
            raise InvalidSessionData("response_times_ms length must match question_count")
        if any(not t >= 0 for t in session.response_times_ms):
            raise InvalidSessionData("response times must be non-negative")
    elif session.response_times_ms is not None:
        raise InvalidSessionData("response_times_ms sent without response_times_captured")

    return session


class SessionScorer:
    """
    Score completed sessions with the MAX-of-tiers bonus.

    Weights and ladders are fixed at construction; score() is a pure function
    of its input.
    """

    formula = FormulaGeneration.MAX_OF_TIERS

    def __init__(
        self,
        ftc_weight: int = FTC_WEIGHT,
        ec_weight: int = EC_WEIGHT,
        consistency_ladder: TierLadder = CONSISTENCY_LADDER,
        excellence_ladder: TierLadder = EXCELLENCE_LADDER,
        fluency_ladder: TierLadder = FLUENCY_LADDER,
    ):
        self.ftc_weight = ftc_weight
        self.ec_weight = ec_weight
        self.consistency_ladder = consistency_ladder
        self.excellence_ladder = excellence_ladder
        self.fluency_ladder = fluency_ladder

    def score(self, session: Union[SessionData, Mapping]) -> SessionScore:
        """
        Score one session.

        Raises:
            InvalidSessionData: the session fails validation
        """
        session = validate_session_data(session)

        ftc = ftc_points(session.ftc_count, self.ftc_weight)
        ec = ec_points(session.ec_count, self.ec_weight)
        base = ftc + ec

        if session.question_count > 0:
            accuracy = (session.ftc_count + session.ec_count) / session.question_count
            ftc_ratio = session.ftc_count / session.question_count
        else:
            accuracy = 0.0
            ftc_ratio = 0.0

        consistency = consistency_score(session.correctness_sequence, accuracy)
        speed = select_speed_strategy(session).speed(session)

        blink = blink_speed(session.duration_ms, session.ftc_count)
        consistency_mult, excellence_mult, fluency_mult = track_multipliers(
            ftc_ratio,
            blink,
            session.streak_days,
            fluency_eligible=session.ftc_count > 0,
            consistency_ladder=self.consistency_ladder,
            excellence_ladder=self.excellence_ladder,
            fluency_ladder=self.fluency_ladder,
        )
        bonus = combine_tracks(consistency_mult, excellence_mult, fluency_mult)
        total = _round_half_up(base * bonus)

        return SessionScore(
            ftc_points=ftc,
            ec_points=ec,
            base_points=base,
            consistency=round(consistency, RATIO_PRECISION),
            accuracy=round(accuracy, RATIO_PRECISION),
            speed=round(speed, RATIO_PRECISION),
            ftc_ratio=round(ftc_ratio, RATIO_PRECISION),
            consistency_multiplier=consistency_mult,
            excellence_multiplier=excellence_mult,
            fluency_multiplier=fluency_mult,
            bonus_multiplier=bonus,
            blink_speed_ms=blink,
            total_points=total,
            evolution=evolution(total, blink) if blink > 0 else 0,
            formula=self.formula,
        )


_default_scorer = SessionScorer()


def score(session: Union[SessionData, Mapping]) -> SessionScore:
    """Score a session with the default weights and ladders."""
    return _default_scorer.score(session)
