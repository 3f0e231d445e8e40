"""
Learning session schemas.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
import uuid


class StartSessionRequest(BaseModel):
    """Request to start a learning session."""
    limit: int = Field(20, ge=1, le=100, description="Maximum flashcards in the session (1-100)")


class StartSessionResponse(BaseModel):
    """Response from starting a learning session."""
    session_id: uuid.UUID
    flashcards_count: int
    started_at: datetime


class LearningFlashcard(BaseModel):
    """Only what the review UI needs."""
    id: uuid.UUID
    front: str
    back: str

    class Config:
        from_attributes = True


class NextFlashcardResponse(BaseModel):
    """Next card to review, or the completion marker."""
    flashcard: Optional[LearningFlashcard] = None
    remaining_count: int
    reviewed_count: int
    session_complete: bool = False


class SubmitReviewRequest(BaseModel):
    """Rating for the current flashcard: 1 = Again, 2 = Hard, 3 = Good, 4 = Easy."""
    flashcard_id: uuid.UUID
    rating: int = Field(..., ge=1, le=4, strict=True)

    class Config:
        json_schema_extra = {
            "example": {
                "flashcard_id": "3f1c2a9e-5d7b-4c8e-9a1f-2b3c4d5e6f70",
                "rating": 3
            }
        }


class SubmitReviewResponse(BaseModel):
    """Updated schedule of the reviewed flashcard."""
    flashcard_id: uuid.UUID
    previous_interval: int
    new_interval: int
    next_review_date: date
    ease_factor: float


class EndSessionResponse(BaseModel):
    """Summary of a finished learning session."""
    session_id: uuid.UUID
    flashcards_reviewed: int
    started_at: datetime
    ended_at: datetime
    duration_minutes: int


class LearningSessionResponse(BaseModel):
    """Persisted learning session record."""
    id: uuid.UUID
    started_at: datetime
    ended_at: Optional[datetime] = None
    flashcards_reviewed: int

    class Config:
        from_attributes = True
