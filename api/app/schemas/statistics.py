"""
Statistics schemas.
"""
from pydantic import BaseModel


class FlashcardsBySource(BaseModel):
    """Flashcard counts per source."""
    ai: int
    manual: int


class GenerationStatisticsResponse(BaseModel):
    """AI generation statistics for a user."""
    total_sessions: int
    total_generated: int
    total_accepted: int
    total_rejected: int
    acceptance_rate: float  # Percent of generated suggestions that were accepted
    flashcards_by_source: FlashcardsBySource
    ai_usage_percentage: float  # Percent of the collection that came from AI
