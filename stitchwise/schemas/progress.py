"""
Progress tracking schemas for Stitchwise.

Defines Pydantic models for learner progress including:
- Per-item mastery (one row per user and content item)
- Per-path progress, derived from the mastery rows of the path
- Account-level progress aggregated across weighted paths
"""

from pydantic import BaseModel, Field, computed_field
from typing import Optional
from datetime import datetime
from enum import Enum


# Mastery level at or above which an item counts as mastered
MASTERY_THRESHOLD = 0.8


def is_mastered(mastery_level: float) -> bool:
    """True when a mastery level reaches the mastery threshold."""
    return mastery_level >= MASTERY_THRESHOLD


class ItemState(str, Enum):
    UNSEEN = "unseen"
    ATTEMPTED = "attempted"


class ContentMastery(BaseModel):
    content_id: str
    mastery_level: float = Field(default=0.0, ge=0.0, le=1.0)
    attempt_count: int = Field(default=0, ge=0)
    last_attempt_time: datetime
    next_review_time: Optional[datetime] = None

    @computed_field
    @property
    def state(self) -> ItemState:
        """`unseen` until the first recorded session, `attempted` afterwards."""
        return ItemState.ATTEMPTED if self.attempt_count > 0 else ItemState.UNSEEN

    @computed_field
    @property
    def mastered(self) -> bool:
        return is_mastered(self.mastery_level)


class ItemProgress(BaseModel):
    """Per-item snapshot stored inside a path's progress."""
    mastery_level: float = Field(default=0.0, ge=0.0, le=1.0)
    attempt_count: int = Field(default=0, ge=0)
    position: int = Field(default=0, ge=0)  # index in the path's ordered items


class PathProgressDetails(BaseModel):
    path_id: str
    completion: float = Field(default=0.0, ge=0.0, le=1.0)
    items: dict[str, ItemProgress] = Field(default_factory=dict)
    last_update: datetime

    @computed_field
    @property
    def mastered_count(self) -> int:
        return sum(1 for item in self.items.values() if is_mastered(item.mastery_level))


class UserProgress(BaseModel):
    user_id: str
    overall_completion: float = Field(default=0.0, ge=0.0, le=1.0)
    path_completion: dict[str, float] = Field(default_factory=dict)
    mastered_item_count: int = Field(default=0, ge=0)
    total_item_count: int = Field(default=0, ge=0)
    last_update: datetime
