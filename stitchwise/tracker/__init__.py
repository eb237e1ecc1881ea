"""
Stitchwise Tracker - Mastery tracking, review scheduling and progress aggregation.

This module provides:
- MasteryTracker: record sessions, read progress, schedule reviews
- ProgressStore: storage port, with in-memory and SQLite implementations
- PathConfig: curriculum configuration port
"""

from .progress import (
    MasteryTracker,
    utc_now,
)

from .storage import (
    ProgressStore,
    InMemoryProgressStore,
)

from .sqlite_store import (
    SQLiteProgressStore,
    DEFAULT_PROGRESS_DIR,
    DEFAULT_PROGRESS_DB,
)

from .paths import (
    PathConfig,
    StaticPathConfig,
)

from .cache import (
    TwoLevelCache,
    KeyedLocks,
)

from .mastery import (
    DECAY_RATE,
    CURRENT_ATTEMPT_WEIGHT,
    PRIOR_MASTERY_WEIGHT,
    blend_mastery,
    decay,
    elapsed_days,
    fixed_jitter,
    next_review_time,
    overall_completion,
    random_jitter,
    review_interval_days,
    time_factor,
)

__all__ = [
    # Tracker
    "MasteryTracker",
    "utc_now",
    # Storage
    "ProgressStore",
    "InMemoryProgressStore",
    "SQLiteProgressStore",
    "DEFAULT_PROGRESS_DIR",
    "DEFAULT_PROGRESS_DB",
    # Paths
    "PathConfig",
    "StaticPathConfig",
    # Cache
    "TwoLevelCache",
    "KeyedLocks",
    # Mastery math
    "DECAY_RATE",
    "CURRENT_ATTEMPT_WEIGHT",
    "PRIOR_MASTERY_WEIGHT",
    "blend_mastery",
    "decay",
    "elapsed_days",
    "fixed_jitter",
    "next_review_time",
    "overall_completion",
    "random_jitter",
    "review_interval_days",
    "time_factor",
]
