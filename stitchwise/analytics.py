"""
Analytics export - mastery rows and session scores as pandas DataFrames.

Used by reporting notebooks and CSV/parquet exports.
"""

from datetime import datetime
from typing import Iterable, Optional

import pandas as pd

from stitchwise.schemas import SessionScore, is_mastered
from stitchwise.tracker import MasteryTracker

MASTERY_COLUMNS = [
    "user_id",
    "path_id",
    "content_id",
    "position",
    "mastery_level",
    "mastered",
    "attempt_count",
    "last_attempt_time",
    "next_review_time",
    "due",
]

SCORE_COLUMNS = list(SessionScore.model_fields)


def mastery_frame(
    tracker: MasteryTracker,
    user_id: str,
    now: Optional[datetime] = None,
) -> pd.DataFrame:
    """
    One row per (path, item) for a user, in path order.

    Items the user has never touched appear with mastery 0 and no times.
    """
    due_ids = {row.content_id for row in tracker.get_due_items(user_id, now)}
    rows = {row.content_id: row for row in tracker.store.list_content_mastery(user_id)}

    records = []
    for path in tracker.paths.all_paths():
        for position, content_id in enumerate(path.content_ids):
            row = rows.get(content_id)
            level = row.mastery_level if row else 0.0
            records.append({
                "user_id": user_id,
                "path_id": path.path_id,
                "content_id": content_id,
                "position": position,
                "mastery_level": level,
                "mastered": is_mastered(level),
                "attempt_count": row.attempt_count if row else 0,
                "last_attempt_time": row.last_attempt_time if row else None,
                "next_review_time": row.next_review_time if row else None,
                "due": content_id in due_ids,
            })

    if not records:
        return pd.DataFrame(columns=MASTERY_COLUMNS)

    frame = pd.DataFrame.from_records(records, columns=MASTERY_COLUMNS)
    for column in ("last_attempt_time", "next_review_time"):
        frame[column] = pd.to_datetime(frame[column], utc=True)
    return frame


def path_summary(frame: pd.DataFrame) -> pd.DataFrame:
    """Per-path mastered/attempted counts and mean mastery from a mastery_frame()."""
    if frame.empty:
        return pd.DataFrame(columns=["path_id", "items", "mastered", "attempted", "mastery_mean"])

    grouped = (
        frame.groupby("path_id", sort=False)
        .agg(
            items=("content_id", "count"),
            mastered=("mastered", "sum"),
            attempted=("attempt_count", lambda s: int((s > 0).sum())),
            mastery_mean=("mastery_level", "mean"),
        )
        .reset_index()
    )
    grouped["mastered"] = grouped["mastered"].astype(int)
    return grouped


def scores_frame(scores: Iterable[SessionScore]) -> pd.DataFrame:
    """One row per scored session."""
    records = [s.model_dump(mode="json") for s in scores]
    if not records:
        return pd.DataFrame(columns=SCORE_COLUMNS)
    return pd.DataFrame.from_records(records, columns=SCORE_COLUMNS)
