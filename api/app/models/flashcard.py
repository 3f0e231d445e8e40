"""
Flashcard model.
"""
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import date, datetime
from sqlalchemy import Column, String as SAString
import uuid

from app.models.enums import FlashcardSource
from app.utils.time_utils import utc_now, utc_timestamp_column

# Review state of a card that has never been rated
INITIAL_INTERVAL = 0
INITIAL_EASE_FACTOR = 2.5
INITIAL_REPETITION_COUNT = 0


class Flashcard(SQLModel, table=True):
    """Flashcard table - question/answer pair with its spaced-repetition state."""
    __tablename__ = "flashcard"
    
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="user.id", index=True)
    front: str
    back: str
    source: str = Field(
        default=FlashcardSource.MANUAL.value,
        sa_column=Column(SAString, nullable=False, default=FlashcardSource.MANUAL.value)
    )  # 'ai' or 'manual'
    generation_session_id: Optional[uuid.UUID] = Field(default=None, foreign_key="generation_session.id")
    
    # Spaced repetition state, changed only by the review scheduler
    interval: int = Field(default=INITIAL_INTERVAL)  # Days until next review
    ease_factor: float = Field(default=INITIAL_EASE_FACTOR)  # Never below 1.3
    repetition_count: int = Field(default=INITIAL_REPETITION_COUNT)
    next_review_date: Optional[date] = Field(default=None, index=True)  # None = due immediately
    
    created_at: datetime = Field(default_factory=utc_now, sa_column=utc_timestamp_column())
    updated_at: datetime = Field(default_factory=utc_now, sa_column=utc_timestamp_column())
