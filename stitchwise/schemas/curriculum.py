"""
Curriculum schemas for Stitchwise.

A curriculum is a set of weighted learning paths. Each path is an ordered
sequence of content items (stitches); the same item id may not appear twice
in one path.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional


class LearningPath(BaseModel):
    path_id: str = Field(..., min_length=1)
    content_ids: list[str] = Field(default_factory=list)
    weight: float = Field(default=1.0, gt=0.0)

    @field_validator('content_ids')
    @classmethod
    def content_ids_unique(cls, v):
        if len(set(v)) != len(v):
            raise ValueError('content_ids must not repeat within a path')
        if any(not cid for cid in v):
            raise ValueError('content_ids must be non-empty strings')
        return v

    def position_of(self, content_id: str) -> Optional[int]:
        """0-based position of an item in this path, or None if absent."""
        try:
            return self.content_ids.index(content_id)
        except ValueError:
            return None


class Curriculum(BaseModel):
    """Paths plus optional per-item expected completion times."""
    paths: list[LearningPath]
    expected_times_ms: dict[str, float] = Field(default_factory=dict)

    @field_validator('paths')
    @classmethod
    def path_ids_unique(cls, v):
        ids = [p.path_id for p in v]
        if len(set(ids)) != len(ids):
            raise ValueError('path ids must be unique')
        return v

    @field_validator('expected_times_ms')
    @classmethod
    def expected_times_positive(cls, v):
        bad = [cid for cid, ms in v.items() if ms <= 0]
        if bad:
            raise ValueError(f'expected times must be positive: {bad}')
        return v
