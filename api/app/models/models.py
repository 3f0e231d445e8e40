"""
Models module - re-exports all models.

Allows imports like:
    from app.models.models import Flashcard
"""
from app.models.enums import FlashcardSource, ReviewRating
from app.models.user import User
from app.models.generation_session import GenerationSession
from app.models.flashcard import Flashcard
from app.models.learning_session import LearningSession
from app.models.flashcard_review import FlashcardReview

__all__ = [
    'FlashcardSource',
    'ReviewRating',
    'User',
    'GenerationSession',
    'Flashcard',
    'LearningSession',
    'FlashcardReview',
]
