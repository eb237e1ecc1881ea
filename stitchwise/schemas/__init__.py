"""
Stitchwise Schemas - Pydantic models for the mastery and scoring engine.

This module exports all schema classes for:
- Curriculum: weighted learning paths and expected item times
- Progress: per-item mastery, per-path and account-level progress
- Session: session results, raw session tallies and session scores
"""

# Curriculum schemas
from .curriculum import (
    LearningPath,
    Curriculum,
)

# Progress schemas
from .progress import (
    MASTERY_THRESHOLD,
    is_mastered,
    ItemState,
    ContentMastery,
    ItemProgress,
    PathProgressDetails,
    UserProgress,
)

# Session schemas
from .session import (
    SessionResult,
    AnswerRecord,
    SessionData,
    FormulaGeneration,
    SessionScore,
)

__all__ = [
    # Curriculum
    'LearningPath',
    'Curriculum',
    # Progress
    'MASTERY_THRESHOLD',
    'is_mastered',
    'ItemState',
    'ContentMastery',
    'ItemProgress',
    'PathProgressDetails',
    'UserProgress',
    # Session
    'SessionResult',
    'AnswerRecord',
    'SessionData',
    'FormulaGeneration',
    'SessionScore',
]
