"""
Models package - imports all models so SQLModel registers their tables.
"""
from app.models.models import (  # noqa: F401
    FlashcardSource,
    ReviewRating,
    User,
    GenerationSession,
    Flashcard,
    LearningSession,
    FlashcardReview,
)
