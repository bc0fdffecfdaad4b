"""
Pydantic schemas for learner progress.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProgressUpsertRequest(BaseModel):
    """Body for POST /progress."""

    user_id: int
    subtopic_id: int
    completed: bool = False
    db_quiz_score: Optional[int] = Field(default=None, ge=0, le=100)
    ai_quiz_score: Optional[int] = Field(default=None, ge=0, le=100)


class ProgressResponse(BaseModel):
    """Stored progress row for one (user, subtopic)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    subtopic_id: int
    completed: bool
    db_quiz_score: Optional[int] = None
    ai_quiz_score: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
