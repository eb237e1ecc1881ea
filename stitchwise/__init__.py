"""
Stitchwise - Mastery tracking and session scoring for practice apps.

Two cooperating components:
- MasteryTracker (stitchwise.tracker): per-item mastery with time decay,
  review scheduling and weighted path/account completion
- SessionScorer (stitchwise.scoring): points, MAX-of-tiers bonus, blink
  speed and evolution for one completed session
"""

from stitchwise.scoring import SessionScorer, score
from stitchwise.tracker import (
    InMemoryProgressStore,
    MasteryTracker,
    SQLiteProgressStore,
    StaticPathConfig,
)

__version__ = "0.1.0"

__all__ = [
    "MasteryTracker",
    "SessionScorer",
    "score",
    "InMemoryProgressStore",
    "SQLiteProgressStore",
    "StaticPathConfig",
]
