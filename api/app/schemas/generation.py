"""
AI generation schemas.
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime
import uuid

from app.models.enums import FlashcardSource
from app.schemas.common import PaginationResponse
from app.schemas.utils import normalize_card_text

SOURCE_TEXT_MIN_LENGTH = 1000
SOURCE_TEXT_MAX_LENGTH = 10000


class GenerateFlashcardsRequest(BaseModel):
    """Request to generate flashcard suggestions from source text."""
    source_text: str = Field(
        ...,
        min_length=SOURCE_TEXT_MIN_LENGTH,
        max_length=SOURCE_TEXT_MAX_LENGTH,
        description="Source text (1000-10000 characters)"
    )


class FlashcardSuggestion(BaseModel):
    """A suggestion returned by the model, not yet saved."""
    temp_id: str = Field(..., description="Temporary id, e.g. 'temp_1'")
    front: str
    back: str


class GenerationResponse(BaseModel):
    """Response from a generation run."""
    session_id: uuid.UUID
    suggestions: List[FlashcardSuggestion]
    generated_count: int
    model_name: str


class AcceptedFlashcard(BaseModel):
    """A suggestion the user kept, possibly edited."""
    temp_id: str = Field(..., min_length=1)
    front: str = Field(..., min_length=1, max_length=1000)
    back: str = Field(..., min_length=1, max_length=5000)

    @field_validator('front', 'back')
    @classmethod
    def validate_text(cls, v):
        return normalize_card_text(v)


class AcceptFlashcardsRequest(BaseModel):
    """Accepted suggestions plus the number rejected."""
    accepted: List[AcceptedFlashcard] = Field(default_factory=list)
    rejected_count: int = Field(..., ge=0, description="Number of rejected suggestions")

    class Config:
        json_schema_extra = {
            "example": {
                "accepted": [
                    {"temp_id": "temp_1", "front": "What is ATP?", "back": "The cell's energy currency"}
                ],
                "rejected_count": 2
            }
        }


class AcceptedFlashcardResponse(BaseModel):
    """Flashcard created from an accepted suggestion."""
    id: uuid.UUID
    front: str
    back: str
    source: FlashcardSource
    generation_session_id: uuid.UUID
    created_at: datetime

    class Config:
        from_attributes = True


class AcceptFlashcardsResponse(BaseModel):
    """Response from accepting suggestions."""
    flashcards: List[AcceptedFlashcardResponse]
    accepted_count: int
    rejected_count: int


class GenerationSessionSummary(BaseModel):
    """Generation history item with a preview instead of the full source text."""
    id: uuid.UUID
    source_text_preview: str
    model_name: str
    generated_count: int
    accepted_count: int
    rejected_count: int
    created_at: datetime


class GenerationSessionsListResponse(BaseModel):
    """Paginated generation history."""
    data: List[GenerationSessionSummary]
    pagination: PaginationResponse
