"""
Flashcard service for the user's flashcard collection (manual CRUD).
"""
import logging
import uuid
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.core.exceptions import DatabaseError, NotFoundError
from app.models.enums import FlashcardSource
from app.models.flashcard import (
    Flashcard,
    INITIAL_EASE_FACTOR,
    INITIAL_INTERVAL,
    INITIAL_REPETITION_COUNT,
)
from app.models.flashcard_review import FlashcardReview
from app.schemas.common import PaginationResponse
from app.schemas.flashcard import FlashcardResponse, FlashcardsListResponse
from app.utils.time_utils import utc_now, utc_today

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "created_at": Flashcard.created_at,
    "updated_at": Flashcard.updated_at,
    "next_review_date": Flashcard.next_review_date,
}


def new_flashcard(
    user_id: uuid.UUID,
    front: str,
    back: str,
    source: FlashcardSource = FlashcardSource.MANUAL,
    generation_session_id: Optional[uuid.UUID] = None
) -> Flashcard:
    """
    Build an unsaved flashcard with the initial review state.

    New cards are due immediately: interval 0, ease 2.5, no repetitions,
    next review today.
    """
    now = utc_now()
    return Flashcard(
        user_id=user_id,
        front=front,
        back=back,
        source=source.value,
        generation_session_id=generation_session_id,
        interval=INITIAL_INTERVAL,
        ease_factor=INITIAL_EASE_FACTOR,
        repetition_count=INITIAL_REPETITION_COUNT,
        next_review_date=utc_today(),
        created_at=now,
        updated_at=now
    )


def get_owned_flashcard(session: Session, user_id: uuid.UUID, flashcard_id: uuid.UUID) -> Flashcard:
    """
    Load a flashcard that belongs to the user.

    Raises:
        NotFoundError: If the flashcard does not exist or belongs to someone else
    """
    flashcard = session.exec(
        select(Flashcard).where(
            Flashcard.id == flashcard_id,
            Flashcard.user_id == user_id
        )
    ).first()
    if not flashcard:
        raise NotFoundError("Flashcard not found")
    return flashcard


def list_flashcards(
    session: Session,
    user_id: uuid.UUID,
    page: int = 1,
    limit: int = 20,
    source: Optional[FlashcardSource] = None,
    sort: str = "created_at",
    order: str = "desc"
) -> FlashcardsListResponse:
    """
    Get a page of the user's flashcards with optional source filter and sorting.

    Args:
        session: Database session
        user_id: Owner of the flashcards
        page: Page number (1-based)
        limit: Page size
        source: Optional filter ('ai' or 'manual')
        sort: created_at, updated_at or next_review_date
        order: asc or desc

    Returns:
        FlashcardsListResponse with data and pagination metadata
    """
    conditions = [Flashcard.user_id == user_id]
    if source is not None:
        conditions.append(Flashcard.source == source.value)

    sort_column = SORTABLE_FIELDS[sort]
    order_by = sort_column.asc() if order == "asc" else sort_column.desc()  # type: ignore[union-attr]
    offset = (page - 1) * limit

    try:
        total = session.exec(
            select(func.count()).select_from(Flashcard).where(*conditions)
        ).one()
        flashcards: List[Flashcard] = list(session.exec(
            select(Flashcard)
            .where(*conditions)
            .order_by(order_by, Flashcard.id)
            .offset(offset)
            .limit(limit)
        ).all())
    except SQLAlchemyError as e:
        logger.error(f"Error fetching flashcards for user {user_id}: {str(e)}")
        raise DatabaseError(f"Database error: {str(e)}") from e

    return FlashcardsListResponse(
        data=[FlashcardResponse.model_validate(flashcard) for flashcard in flashcards],
        pagination=PaginationResponse.build(page=page, limit=limit, total=total)
    )


def create_flashcard(session: Session, user_id: uuid.UUID, front: str, back: str) -> Flashcard:
    """Create a manual flashcard, due immediately."""
    flashcard = new_flashcard(user_id, front, back, source=FlashcardSource.MANUAL)
    try:
        session.add(flashcard)
        session.commit()
        session.refresh(flashcard)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error creating flashcard for user {user_id}: {str(e)}")
        raise DatabaseError("Failed to create flashcard") from e

    logger.info(f"Created manual flashcard {flashcard.id} for user {user_id}")
    return flashcard


def update_flashcard(
    session: Session,
    user_id: uuid.UUID,
    flashcard_id: uuid.UUID,
    front: str,
    back: str
) -> Flashcard:
    """Edit front/back of a flashcard. The review state is left as it is."""
    flashcard = get_owned_flashcard(session, user_id, flashcard_id)
    flashcard.front = front
    flashcard.back = back
    flashcard.updated_at = utc_now()
    try:
        session.add(flashcard)
        session.commit()
        session.refresh(flashcard)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error updating flashcard {flashcard_id}: {str(e)}")
        raise DatabaseError("Failed to update flashcard") from e
    return flashcard


def delete_flashcard(session: Session, user_id: uuid.UUID, flashcard_id: uuid.UUID) -> None:
    """
    Permanently delete a flashcard together with its review records.

    A learning session that still has the card queued skips it on its next fetch.
    """
    flashcard = get_owned_flashcard(session, user_id, flashcard_id)
    try:
        reviews = session.exec(
            select(FlashcardReview).where(FlashcardReview.flashcard_id == flashcard.id)
        ).all()
        for review in reviews:
            session.delete(review)
        session.flush()
        session.delete(flashcard)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error deleting flashcard {flashcard_id}: {str(e)}")
        raise DatabaseError("Failed to delete flashcard") from e

    logger.info(f"Deleted flashcard {flashcard_id} for user {user_id}")
