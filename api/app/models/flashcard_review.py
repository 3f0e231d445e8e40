"""
FlashcardReview model.
"""
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid

from app.utils.time_utils import utc_now, utc_timestamp_column


class FlashcardReview(SQLModel, table=True):
    """FlashcardReview table - immutable record of one rating submission."""
    __tablename__ = "flashcard_review"
    
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    flashcard_id: uuid.UUID = Field(foreign_key="flashcard.id", index=True)
    learning_session_id: uuid.UUID = Field(foreign_key="learning_session.id", index=True)
    rating: int  # 1 = Again, 2 = Hard, 3 = Good, 4 = Easy
    previous_interval: int
    new_interval: int
    reviewed_at: datetime = Field(default_factory=utc_now, sa_column=utc_timestamp_column())
