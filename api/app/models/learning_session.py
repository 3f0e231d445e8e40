"""
LearningSession model.
"""
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
import uuid

from app.utils.time_utils import utc_now, utc_timestamp_column


class LearningSession(SQLModel, table=True):
    """LearningSession table - one continuous study run."""
    __tablename__ = "learning_session"
    
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="user.id", index=True)
    started_at: datetime = Field(default_factory=utc_now, sa_column=utc_timestamp_column())
    ended_at: Optional[datetime] = Field(default=None, sa_column=utc_timestamp_column(nullable=True))
    flashcards_reviewed: int = Field(default=0)  # Never exceeds the number of seeded cards
