"""
Model enums.
"""
from enum import Enum


class FlashcardSource(str, Enum):
    """Where a flashcard came from."""
    AI = "ai"
    MANUAL = "manual"


class ReviewRating(int, Enum):
    """Recall quality submitted for a reviewed flashcard."""
    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4
