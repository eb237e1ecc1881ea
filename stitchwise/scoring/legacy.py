"""
Superseded additive bonus formula.

    bonus = 1 + 0.1 * consistency + 0.1 * accuracy + 0.1 * speed

Replaced by the MAX-of-tiers multiplier (see tiers.py). Kept only so that
historical session scores can be recomputed for analytics; score() never
calls it.
"""

import logging

from stitchwise.errors import InvalidScore
from stitchwise.schemas import FormulaGeneration

logger = logging.getLogger(__name__)

GENERATION = FormulaGeneration.ADDITIVE
SUPERSEDED_BY = FormulaGeneration.MAX_OF_TIERS

CONSISTENCY_WEIGHT = 0.1
ACCURACY_WEIGHT = 0.1
SPEED_WEIGHT = 0.1


def additive_bonus_multiplier(consistency: float, accuracy: float, speed: float) -> float:
    """
    Legacy bonus multiplier, rounded to two decimals.

    Raises:
        InvalidScore: any score outside [0, 1]
    """
    for name, value in (("consistency", consistency), ("accuracy", accuracy), ("speed", speed)):
        if not 0.0 <= value <= 1.0:
            raise InvalidScore(f"{name} score must be between 0 and 1, got {value}")

    logger.warning(
        f"additive_bonus_multiplier is superseded by {SUPERSEDED_BY.value}; "
        "use it only to replay historical sessions"
    )
    return round(
        1
        + consistency * CONSISTENCY_WEIGHT
        + accuracy * ACCURACY_WEIGHT
        + speed * SPEED_WEIGHT,
        2,
    )
