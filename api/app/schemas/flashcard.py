"""
Flashcard schemas.
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import date, datetime
import uuid

from app.models.enums import FlashcardSource
from app.schemas.common import PaginationResponse
from app.schemas.utils import normalize_card_text


class FlashcardResponse(BaseModel):
    """Flashcard as returned to its owner (user_id is not exposed)."""
    id: uuid.UUID
    front: str
    back: str
    source: FlashcardSource
    generation_session_id: Optional[uuid.UUID] = None
    interval: int
    ease_factor: float
    repetition_count: int
    next_review_date: Optional[date] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class FlashcardsListResponse(BaseModel):
    """Paginated list of flashcards."""
    data: List[FlashcardResponse]
    pagination: PaginationResponse


class CreateFlashcardRequest(BaseModel):
    """Request schema for creating a flashcard manually."""
    front: str = Field(..., min_length=1, max_length=500, description="Question / prompt")
    back: str = Field(..., min_length=1, max_length=1000, description="Answer")

    @field_validator('front', 'back')
    @classmethod
    def validate_text(cls, v):
        return normalize_card_text(v)

    class Config:
        json_schema_extra = {
            "example": {
                "front": "What is the capital of France?",
                "back": "Paris"
            }
        }


class UpdateFlashcardRequest(CreateFlashcardRequest):
    """Request schema for editing front/back. Review state is never touched."""
    pass


class DeleteFlashcardResponse(BaseModel):
    """Response after deleting a flashcard."""
    message: str
    id: uuid.UUID
