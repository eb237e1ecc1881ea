"""
Schema validation tests for Stitchwise.

Tests all Pydantic models to ensure they validate correctly.
"""

import pytest
from datetime import datetime, timezone
from pydantic import ValidationError

from stitchwise.schemas import (
    # Curriculum
    LearningPath,
    Curriculum,
    # Progress
    MASTERY_THRESHOLD,
    is_mastered,
    ItemState,
    ContentMastery,
    ItemProgress,
    PathProgressDetails,
    UserProgress,
    # Session
    SessionResult,
    AnswerRecord,
    SessionData,
    FormulaGeneration,
    SessionScore,
)

NOW = datetime(2024, 3, 1, tzinfo=timezone.utc)


class TestCurriculumSchemas:
    """Test learning path and curriculum schemas."""

    def test_learning_path_valid(self):
        path = LearningPath(path_id="addition", content_ids=["a", "b", "c"], weight=2)
        assert path.weight == 2.0
        assert path.position_of("b") == 1
        assert path.position_of("z") is None

    def test_learning_path_default_weight(self):
        assert LearningPath(path_id="p", content_ids=["a"]).weight == 1.0

    def test_learning_path_duplicate_items(self):
        with pytest.raises(ValidationError):
            LearningPath(path_id="p", content_ids=["a", "b", "a"])

    def test_learning_path_empty_item_id(self):
        with pytest.raises(ValidationError):
            LearningPath(path_id="p", content_ids=["a", ""])

    def test_learning_path_weight_must_be_positive(self):
        with pytest.raises(ValidationError):
            LearningPath(path_id="p", content_ids=["a"], weight=0)

    def test_learning_path_empty_id(self):
        with pytest.raises(ValidationError):
            LearningPath(path_id="", content_ids=["a"])

    def test_curriculum_unique_path_ids(self):
        with pytest.raises(ValidationError):
            Curriculum(paths=[
                LearningPath(path_id="p", content_ids=["a"]),
                LearningPath(path_id="p", content_ids=["b"]),
            ])

    def test_curriculum_expected_times_positive(self):
        with pytest.raises(ValidationError):
            Curriculum(
                paths=[LearningPath(path_id="p", content_ids=["a"])],
                expected_times_ms={"a": 0},
            )

    def test_items_may_be_shared_between_paths(self):
        curriculum = Curriculum(paths=[
            LearningPath(path_id="p", content_ids=["a", "shared"]),
            LearningPath(path_id="q", content_ids=["shared"]),
        ])
        assert len(curriculum.paths) == 2


class TestProgressSchemas:
    """Test mastery and progress schemas."""

    def test_threshold(self):
        assert MASTERY_THRESHOLD == 0.8
        assert is_mastered(0.8)
        assert not is_mastered(0.7999)

    def test_content_mastery_defaults(self):
        mastery = ContentMastery(content_id="a", last_attempt_time=NOW)
        assert mastery.mastery_level == 0.0
        assert mastery.attempt_count == 0
        assert mastery.next_review_time is None
        assert mastery.state == ItemState.UNSEEN
        assert mastery.mastered is False

    def test_content_mastery_attempted(self):
        mastery = ContentMastery(
            content_id="a", mastery_level=0.85, attempt_count=4, last_attempt_time=NOW
        )
        assert mastery.state == ItemState.ATTEMPTED
        assert mastery.mastered is True

    def test_content_mastery_level_bounds(self):
        with pytest.raises(ValidationError):
            ContentMastery(content_id="a", mastery_level=1.5, last_attempt_time=NOW)
        with pytest.raises(ValidationError):
            ContentMastery(content_id="a", mastery_level=-0.1, last_attempt_time=NOW)

    def test_content_mastery_serializes_computed_fields(self):
        data = ContentMastery(content_id="a", last_attempt_time=NOW).model_dump(mode="json")
        assert data["state"] == "unseen"
        assert data["mastered"] is False

    def test_path_progress_mastered_count(self):
        details = PathProgressDetails(
            path_id="p",
            completion=0.5,
            items={
                "a": ItemProgress(mastery_level=0.9, attempt_count=5, position=0),
                "b": ItemProgress(mastery_level=0.2, attempt_count=1, position=1),
            },
            last_update=NOW,
        )
        assert details.mastered_count == 1

    def test_user_progress_completion_bounds(self):
        with pytest.raises(ValidationError):
            UserProgress(user_id="u", overall_completion=1.2, last_update=NOW)


class TestSessionSchemas:
    """Test session result, session data and score schemas."""

    def test_session_result_timestamp_optional(self):
        result = SessionResult(
            path_id="p", content_id="a", correct_count=3, total_count=4, completion_time_ms=1000
        )
        assert result.timestamp is None

    def test_session_data_defaults(self):
        session = SessionData(
            duration_ms=1000, question_count=2, ftc_count=1, ec_count=1, incorrect_count=0
        )
        assert session.response_times_captured is False
        assert session.response_times_ms is None
        assert session.correctness_sequence is None
        assert session.streak_days == 0

    def test_from_answers(self):
        answers = [
            AnswerRecord(question_id="q1", correct=True, response_time_ms=1000),
            AnswerRecord(question_id="q2", correct=False, response_time_ms=2000),
            AnswerRecord(question_id="q2", correct=True, first_attempt=False, response_time_ms=1500),
            AnswerRecord(question_id="q3", correct=False, response_time_ms=4000),
        ]
        session = SessionData.from_answers(answers, duration_ms=9000, streak_days=2)

        assert session.question_count == 3
        assert session.ftc_count == 1
        assert session.ec_count == 1
        assert session.incorrect_count == 1
        assert session.correctness_sequence == [True, False, False]
        assert session.response_times_ms == [1000, 3500, 4000]
        assert session.response_times_captured is True
        assert session.streak_days == 2

    def test_from_answers_empty(self):
        session = SessionData.from_answers([], duration_ms=0)
        assert session.question_count == 0
        assert session.correctness_sequence == []

    def test_session_score_formula_default(self):
        score = SessionScore(
            ftc_points=3, ec_points=0, base_points=3,
            consistency=1.0, accuracy=1.0, speed=0.5, ftc_ratio=1.0,
            consistency_multiplier=1.0, excellence_multiplier=3.0, fluency_multiplier=1.0,
            bonus_multiplier=3.0, blink_speed_ms=4000, total_points=9, evolution=7,
        )
        assert score.formula == FormulaGeneration.MAX_OF_TIERS
        assert score.model_dump(mode="json")["formula"] == "max_of_tiers"
