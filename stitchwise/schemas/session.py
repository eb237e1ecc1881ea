"""
Session schemas for Stitchwise.

Defines Pydantic models for:
- SessionResult: one practice session on one content item (mastery input)
- AnswerRecord / SessionData: raw tallies of a session (scoring input)
- SessionScore: points, multipliers and fluency metrics (scoring output)

Range checks for these models live in the tracker and the scorer, which
raise their own domain errors.
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class SessionResult(BaseModel):
    path_id: str
    content_id: str
    correct_count: int
    total_count: int
    completion_time_ms: float
    timestamp: Optional[datetime] = None


class AnswerRecord(BaseModel):
    """A single attempt at a question inside a session."""
    question_id: str
    correct: bool
    first_attempt: bool = True
    response_time_ms: float = 0.0


class SessionData(BaseModel):
    duration_ms: float
    question_count: int
    ftc_count: int
    ec_count: int
    incorrect_count: int
    correctness_sequence: Optional[list[bool]] = None  # per question, True = first-time correct
    response_times_ms: Optional[list[float]] = None
    response_times_captured: bool = False  # selects the speed strategy
    streak_days: int = 0  # consecutive practice days before this session

    @classmethod
    def from_answers(
        cls,
        answers: list[AnswerRecord],
        duration_ms: float,
        streak_days: int = 0,
    ) -> "SessionData":
        """
        Build session tallies from attempt-level answer records.

        A question counts as first-time correct if its first correct answer
        was a first attempt, eventually correct if it was answered correctly
        later, and incorrect if it was never answered correctly. Response
        times are summed per question across attempts.
        """
        order: list[str] = []
        outcome: dict[str, Optional[str]] = {}
        times: dict[str, float] = {}

        for answer in answers:
            qid = answer.question_id
            if qid not in outcome:
                order.append(qid)
                outcome[qid] = None
                times[qid] = 0.0
            times[qid] += answer.response_time_ms
            if answer.correct and outcome[qid] is None:
                outcome[qid] = "ftc" if answer.first_attempt else "ec"

        ftc = sum(1 for qid in order if outcome[qid] == "ftc")
        ec = sum(1 for qid in order if outcome[qid] == "ec")

        return cls(
            duration_ms=duration_ms,
            question_count=len(order),
            ftc_count=ftc,
            ec_count=ec,
            incorrect_count=len(order) - ftc - ec,
            correctness_sequence=[outcome[qid] == "ftc" for qid in order],
            response_times_ms=[times[qid] for qid in order],
            response_times_captured=True,
            streak_days=streak_days,
        )


class FormulaGeneration(str, Enum):
    """Scoring formula generations. Only MAX_OF_TIERS is produced by score()."""
    ADDITIVE = "additive"          # superseded: 1 + weighted sum of scores
    MAX_OF_TIERS = "max_of_tiers"  # canonical


class SessionScore(BaseModel):
    ftc_points: int
    ec_points: int
    base_points: int
    consistency: float = Field(..., ge=0.0, le=1.0)
    accuracy: float = Field(..., ge=0.0, le=1.0)
    speed: float = Field(..., ge=0.0, le=1.0)
    ftc_ratio: float = Field(..., ge=0.0, le=1.0)
    consistency_multiplier: float
    excellence_multiplier: float
    fluency_multiplier: float
    bonus_multiplier: float
    blink_speed_ms: float = Field(..., ge=0.0)
    total_points: int
    evolution: int
    formula: FormulaGeneration = FormulaGeneration.MAX_OF_TIERS
