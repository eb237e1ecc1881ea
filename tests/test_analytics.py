"""Tests for the pandas analytics export."""

from datetime import timedelta

import pytest

from stitchwise.analytics import (
    MASTERY_COLUMNS,
    SCORE_COLUMNS,
    mastery_frame,
    path_summary,
    scores_frame,
)
from stitchwise.scoring import score

from conftest import START, perfect


class TestMasteryFrame:

    def test_one_row_per_path_item(self, tracker):
        tracker.initialize("alice")
        tracker.record_session("alice", perfect())

        frame = mastery_frame(tracker, "alice", now=START + timedelta(days=3))

        assert list(frame.columns) == MASTERY_COLUMNS
        assert len(frame) == 6  # "shared" appears once per owning path
        row = frame[frame["content_id"] == "add-01"].iloc[0]
        assert row["mastery_level"] == pytest.approx(0.3)
        assert row["attempt_count"] == 1
        assert bool(row["due"]) is True
        assert frame["position"].tolist() == [0, 1, 2, 3, 0, 1]

    def test_untouched_user(self, tracker):
        frame = mastery_frame(tracker, "bob")
        assert len(frame) == 6
        assert (frame["mastery_level"] == 0.0).all()
        assert not frame["due"].any()

    def test_path_summary(self, tracker):
        tracker.initialize("alice")
        for _ in range(5):
            tracker.record_session("alice", perfect("shared", "doubling"))

        summary = path_summary(mastery_frame(tracker, "alice")).set_index("path_id")
        assert summary.loc["addition", "items"] == 4
        assert summary.loc["addition", "mastered"] == 1
        assert summary.loc["doubling", "mastered"] == 1
        assert summary.loc["doubling", "attempted"] == 1


class TestScoresFrame:

    def test_scores_frame(self):
        scores = [
            score({"duration_ms": 240000, "question_count": 20, "ftc_count": 16, "ec_count": 3, "incorrect_count": 1}),
            score({"duration_ms": 24000, "question_count": 20, "ftc_count": 16, "ec_count": 3, "incorrect_count": 1}),
        ]
        frame = scores_frame(scores)

        assert list(frame.columns) == SCORE_COLUMNS
        assert frame["total_points"].tolist() == [61, 153]
        assert frame["formula"].unique().tolist() == ["max_of_tiers"]

    def test_empty(self):
        frame = scores_frame([])
        assert frame.empty
        assert list(frame.columns) == SCORE_COLUMNS
