"""
Bonus tier ladders.

Three independent tracks, each with its own ladder:
- consistency: consecutive practice days
- excellence: first-time-correct ratio within the session
- fluency: blink speed (ms per first-time-correct answer), lower is better

A ladder yields the multiplier of the highest rung the value reaches, or
MIN_MULTIPLIER if it reaches none. The session bonus is the MAX of the three.
"""

from dataclasses import dataclass

from stitchwise.errors import InvalidScore

MIN_MULTIPLIER = 1.0
MAX_MULTIPLIER = 3.0


def clamp_multiplier(value: float) -> float:
    return max(MIN_MULTIPLIER, min(MAX_MULTIPLIER, value))


def check_multiplier(value: float, name: str = "multiplier") -> float:
    if not MIN_MULTIPLIER <= value <= MAX_MULTIPLIER:
        raise InvalidScore(
            f"{name} must be within [{MIN_MULTIPLIER}, {MAX_MULTIPLIER}], got {value}"
        )
    return value


@dataclass(frozen=True)
class Tier:
    threshold: float
    multiplier: float


@dataclass(frozen=True)
class TierLadder:
    name: str
    tiers: tuple[Tier, ...]
    higher_is_better: bool = True  # False: value must be strictly under the threshold

    def reaches(self, value: float, tier: Tier) -> bool:
        if self.higher_is_better:
            return value >= tier.threshold
        return value < tier.threshold

    def multiplier_for(self, value: float) -> float:
        best = MIN_MULTIPLIER
        for tier in self.tiers:
            if self.reaches(value, tier):
                best = max(best, tier.multiplier)
        return clamp_multiplier(best)

    def tier_for(self, value: float) -> Tier | None:
        """Highest rung reached, or None."""
        reached = [tier for tier in self.tiers if self.reaches(value, tier)]
        return max(reached, key=lambda tier: tier.multiplier) if reached else None


CONSISTENCY_LADDER = TierLadder(
    name="consistency",
    tiers=(
        Tier(threshold=3, multiplier=1.5),
        Tier(threshold=7, multiplier=2.0),
        Tier(threshold=14, multiplier=2.5),
        Tier(threshold=30, multiplier=3.0),
    ),
)

EXCELLENCE_LADDER = TierLadder(
    name="excellence",
    tiers=(
        Tier(threshold=0.80, multiplier=1.2),
        Tier(threshold=0.90, multiplier=1.5),
        Tier(threshold=0.95, multiplier=2.0),
        Tier(threshold=1.00, multiplier=3.0),
    ),
)

FLUENCY_LADDER = TierLadder(
    name="fluency",
    tiers=(
        Tier(threshold=10000, multiplier=1.2),
        Tier(threshold=5000, multiplier=1.5),
        Tier(threshold=3000, multiplier=2.0),
        Tier(threshold=2000, multiplier=3.0),
    ),
    higher_is_better=False,
)
