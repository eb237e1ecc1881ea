"""Tests for the pure mastery math in stitchwise.tracker.mastery."""

import math
import random
from datetime import datetime, timedelta, timezone

import pytest

from stitchwise.tracker.mastery import (
    JITTER_MAX,
    JITTER_MIN,
    blend_mastery,
    clamp01,
    decay,
    elapsed_days,
    fixed_jitter,
    next_review_time,
    overall_completion,
    path_completion,
    random_jitter,
    review_interval_days,
    time_factor,
)

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestElapsedDays:

    def test_same_instant(self):
        assert elapsed_days(T0, T0) == 0

    def test_rounds_to_nearest_day(self):
        assert elapsed_days(T0, T0 + timedelta(hours=11)) == 0
        assert elapsed_days(T0, T0 + timedelta(hours=13)) == 1
        assert elapsed_days(T0, T0 + timedelta(days=10, hours=2)) == 10

    def test_out_of_order_is_absolute(self):
        assert elapsed_days(T0, T0 - timedelta(days=3)) == 3


class TestBlend:

    def test_decay(self):
        assert decay(0.5, 0) == 0.5
        assert decay(0.5, 10) == pytest.approx(0.5 * math.exp(-0.5))

    def test_time_factor_capped(self):
        assert time_factor(30000, 15000) == 1.0
        assert time_factor(30000, 60000) == 0.5

    def test_first_perfect_attempt(self):
        assert blend_mastery(1.0, 1.0, 0.0, 0) == pytest.approx(0.3)

    def test_second_perfect_attempt(self):
        assert blend_mastery(1.0, 1.0, 0.3, 0) == pytest.approx(0.51)

    def test_decayed_prior(self):
        expected = 0.3 + 0.7 * 0.3 * math.exp(-0.05 * 10)
        assert blend_mastery(1.0, 1.0, 0.3, 10) == pytest.approx(expected)

    def test_clamped(self):
        assert clamp01(1.2) == 1.0
        assert clamp01(-0.2) == 0.0

    def test_bounds_hold_for_random_inputs(self):
        rng = random.Random(7)
        for _ in range(500):
            level = blend_mastery(rng.random(), rng.random(), rng.random(), rng.randint(0, 400))
            assert 0.0 <= level <= 1.0


class TestReviewSchedule:

    def test_interval_grows_quadratically(self):
        assert review_interval_days(0.0, 1.0) == 0
        assert review_interval_days(0.3, 1.0) == 3    # 2.25 -> 3
        assert review_interval_days(0.51, 1.0) == 7   # 6.5025 -> 7
        assert review_interval_days(1.0, 1.0) == 25

    def test_jitter_applied_before_ceiling(self):
        assert review_interval_days(1.0, 0.9) == 23   # 22.5 -> 23
        assert review_interval_days(1.0, 1.1) == 28   # 27.5 -> 28

    def test_next_review_time(self):
        assert next_review_time(0.3, T0, 1.0) == T0 + timedelta(days=3)

    def test_fixed_jitter(self):
        assert fixed_jitter(1.05)() == 1.05
        with pytest.raises(ValueError):
            fixed_jitter(1.5)

    def test_random_jitter_range(self):
        draw = random_jitter(random.Random(3))
        for _ in range(200):
            assert JITTER_MIN <= draw() <= JITTER_MAX


class TestCompletion:

    def test_path_completion(self):
        assert path_completion(1, 4) == 0.25
        assert path_completion(0, 0) == 0.0

    def test_overall_is_weighted_average(self):
        result = overall_completion({"a": 0.5, "b": 0.0}, {"a": 2.0, "b": 1.0})
        assert result == pytest.approx(1 / 3)

    def test_missing_weight_defaults_to_one(self):
        assert overall_completion({"a": 1.0, "b": 0.0}, {}) == pytest.approx(0.5)

    def test_no_paths(self):
        assert overall_completion({}, {}) == 0.0
