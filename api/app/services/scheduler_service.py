"""
Review scheduler implementing a simplified FSRS-style interval/ease update.

Pure arithmetic: no sessions, storage or users. Intervals are whole days and
the next review date is a UTC calendar date.
"""
import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from app.core.exceptions import InvalidRating
from app.models.enums import ReviewRating
from app.utils.time_utils import utc_today


MIN_EASE_FACTOR = 1.3
MIN_INTERVAL = 1

# Ease adjustments per rating
AGAIN_EASE_PENALTY = 0.2
HARD_EASE_PENALTY = 0.15
EASY_EASE_BONUS = 0.15

# Interval multipliers
HARD_INTERVAL_FACTOR = 1.2
EASY_BONUS_FACTOR = 1.3

VALID_RATINGS = tuple(rating.value for rating in ReviewRating)


@dataclass(frozen=True)
class ReviewState:
    """Outcome of rating a flashcard."""
    interval: int
    ease_factor: float
    next_review_date: date


def validate_rating(rating: int) -> int:
    """
    Ensure a rating is one of 1 (Again), 2 (Hard), 3 (Good), 4 (Easy).

    Raises:
        InvalidRating: If the rating is outside 1-4 or not an integer
    """
    if isinstance(rating, bool) or not isinstance(rating, int) or rating not in VALID_RATINGS:
        raise InvalidRating(
            f"Rating must be an integer between 1 and 4, got {rating!r}",
            details={"field": "rating", "reason": "Rating must be between 1 and 4"}
        )
    return rating


def compute_next_state(
    previous_interval: int,
    previous_ease_factor: float,
    rating: int,
    today: Optional[date] = None
) -> ReviewState:
    """
    Calculate the new interval, ease factor and due date for a rating.

    | rating    | new interval                       | new ease            |
    |-----------|------------------------------------|---------------------|
    | 1 (Again) | 1                                  | max(1.3, ease-0.2)  |
    | 2 (Hard)  | max(1, floor(interval*1.2))        | max(1.3, ease-0.15) |
    | 3 (Good)  | max(1, floor(interval*ease))       | unchanged           |
    | 4 (Easy)  | max(1, floor(interval*ease*1.3))   | ease+0.15           |

    A never-reviewed card (interval 0) always gets a 1-day interval.

    Args:
        previous_interval: Current interval in days (>= 0)
        previous_ease_factor: Current ease factor (>= 1.3)
        rating: User rating 1-4
        today: Date to schedule from (defaults to the current UTC date)

    Returns:
        ReviewState with interval, ease_factor and next_review_date

    Raises:
        InvalidRating: If rating is not 1-4
    """
    validate_rating(rating)

    if today is None:
        today = utc_today()

    ease = previous_ease_factor

    if rating == ReviewRating.AGAIN:
        # Again: start over tomorrow
        new_interval = MIN_INTERVAL
        new_ease = max(MIN_EASE_FACTOR, ease - AGAIN_EASE_PENALTY)
    elif rating == ReviewRating.HARD:
        new_interval = max(MIN_INTERVAL, math.floor(previous_interval * HARD_INTERVAL_FACTOR))
        new_ease = max(MIN_EASE_FACTOR, ease - HARD_EASE_PENALTY)
    elif rating == ReviewRating.GOOD:
        new_interval = max(MIN_INTERVAL, math.floor(previous_interval * ease))
        new_ease = ease
    else:
        new_interval = max(MIN_INTERVAL, math.floor(previous_interval * ease * EASY_BONUS_FACTOR))
        new_ease = ease + EASY_EASE_BONUS

    return ReviewState(
        interval=new_interval,
        ease_factor=new_ease,
        next_review_date=today + timedelta(days=new_interval)
    )
