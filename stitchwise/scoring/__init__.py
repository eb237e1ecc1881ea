"""
Stitchwise Scoring - Session points, bonus tiers and fluency metrics.

This module provides:
- SessionScorer / score: composite session scoring
- Standalone primitives: ftc_points, ec_points, bonus_multiplier, blink_speed, evolution
- Tier ladders and speed strategies
- additive_bonus_multiplier: superseded formula, for replaying old sessions
"""

from .scorer import (
    SessionScorer,
    score,
    validate_session_data,
    ftc_points,
    ec_points,
    blink_speed,
    evolution,
    bonus_multiplier,
    combine_tracks,
    track_multipliers,
    FTC_WEIGHT,
    EC_WEIGHT,
    TARGET_BLINK_SPEED_MS,
)

from .tiers import (
    Tier,
    TierLadder,
    CONSISTENCY_LADDER,
    EXCELLENCE_LADDER,
    FLUENCY_LADDER,
    MIN_MULTIPLIER,
    MAX_MULTIPLIER,
)

from .strategies import (
    SpeedStrategy,
    ResponseTimeSpeed,
    NeutralSpeed,
    select_speed_strategy,
    consistency_score,
    EXPECTED_RESPONSE_TIME_MS,
    NEUTRAL_SPEED,
)

from .legacy import additive_bonus_multiplier

__all__ = [
    # Scorer
    "SessionScorer",
    "score",
    "validate_session_data",
    "ftc_points",
    "ec_points",
    "blink_speed",
    "evolution",
    "bonus_multiplier",
    "combine_tracks",
    "track_multipliers",
    "FTC_WEIGHT",
    "EC_WEIGHT",
    "TARGET_BLINK_SPEED_MS",
    # Tiers
    "Tier",
    "TierLadder",
    "CONSISTENCY_LADDER",
    "EXCELLENCE_LADDER",
    "FLUENCY_LADDER",
    "MIN_MULTIPLIER",
    "MAX_MULTIPLIER",
    # Strategies
    "SpeedStrategy",
    "ResponseTimeSpeed",
    "NeutralSpeed",
    "select_speed_strategy",
    "consistency_score",
    "EXPECTED_RESPONSE_TIME_MS",
    "NEUTRAL_SPEED",
    # Legacy
    "additive_bonus_multiplier",
]
