"""
Learning session service.

Orchestrates a study run: start (select due cards, create the session record,
seed the queue) -> next / review (loop) -> end (stamp ended_at, dispose queue).

The session queue lives in the SessionQueueManager; the flashcard schedule,
review history and session counter live in the database.
"""
import logging
import math
import uuid
from datetime import date
from typing import List

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.core.exceptions import DatabaseError, NoDueCards, NotFoundError, SessionEnded
from app.models.flashcard import Flashcard
from app.models.flashcard_review import FlashcardReview
from app.models.learning_session import LearningSession
from app.schemas.learning import (
    EndSessionResponse,
    LearningFlashcard,
    LearningSessionResponse,
    NextFlashcardResponse,
    StartSessionResponse,
    SubmitReviewResponse,
)
from app.services.scheduler_service import compute_next_state, validate_rating
from app.services.session_queue import SessionQueueManager
from app.utils.time_utils import as_utc, utc_now, utc_today

logger = logging.getLogger(__name__)


def find_due_flashcard_ids(
    session: Session,
    user_id: uuid.UUID,
    as_of: date,
    limit: int
) -> List[uuid.UUID]:
    """
    Ids of the user's flashcards due on `as_of`, never-scheduled cards first,
    then by earliest next_review_date, capped at `limit`.
    """
    query = (
        select(Flashcard.id)
        .where(
            Flashcard.user_id == user_id,
            or_(
                Flashcard.next_review_date <= as_of,  # type: ignore[operator]
                Flashcard.next_review_date.is_(None)  # type: ignore[union-attr]
            )
        )
        .order_by(
            Flashcard.next_review_date.asc().nulls_first(),  # type: ignore[union-attr]
            Flashcard.created_at.asc()  # type: ignore[attr-defined]
        )
        .limit(limit)
    )
    return list(session.exec(query).all())


def get_owned_session(session: Session, user_id: uuid.UUID, session_id: uuid.UUID) -> LearningSession:
    """
    Load a learning session that belongs to the user.

    Raises:
        NotFoundError: If the session does not exist or belongs to someone else
    """
    learning_session = session.exec(
        select(LearningSession).where(
            LearningSession.id == session_id,
            LearningSession.user_id == user_id
        )
    ).first()
    if not learning_session:
        raise NotFoundError("Session not found")
    return learning_session


def start_session(
    session: Session,
    queue: SessionQueueManager,
    user_id: uuid.UUID,
    limit: int = 20
) -> StartSessionResponse:
    """
    Start a learning session over the flashcards due today.

    No session record is created when nothing is due.

    Raises:
        NoDueCards: If the user has no flashcards due for review
        DatabaseError: If reading due cards or creating the session fails
    """
    today = utc_today()

    try:
        flashcard_ids = find_due_flashcard_ids(session, user_id, today, limit)
    except SQLAlchemyError as e:
        logger.error(f"Error fetching due flashcards for user {user_id}: {str(e)}")
        raise DatabaseError(f"Database error: {str(e)}") from e

    if not flashcard_ids:
        raise NoDueCards("No flashcards due for review")

    learning_session = LearningSession(user_id=user_id, flashcards_reviewed=0)
    try:
        session.add(learning_session)
        session.commit()
        session.refresh(learning_session)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error creating learning session for user {user_id}: {str(e)}")
        raise DatabaseError("Failed to create learning session") from e

    queue.seed(learning_session.id, flashcard_ids)

    logger.info(
        f"Started learning session {learning_session.id} for user {user_id} "
        f"with {len(flashcard_ids)} flashcard(s)"
    )
    return StartSessionResponse(
        session_id=learning_session.id,
        flashcards_count=len(flashcard_ids),
        started_at=learning_session.started_at
    )


def get_next_flashcard(
    session: Session,
    queue: SessionQueueManager,
    user_id: uuid.UUID,
    session_id: uuid.UUID
) -> NextFlashcardResponse:
    """
    Return the flashcard at the head of the session queue.

    Cards deleted since the session started are skipped. An exhausted queue
    returns session_complete=True; ending the session is a separate step.
    """
    learning_session = get_owned_session(session, user_id, session_id)

    def load_card(card_id: str):
        return session.exec(
            select(Flashcard).where(
                Flashcard.id == uuid.UUID(card_id),
                Flashcard.user_id == user_id
            )
        ).first()

    flashcard = queue.peek_next(session_id, load_card)

    if queue.is_active(session_id):
        reviewed_count = queue.reviewed(session_id)
    else:
        # Queue lost (ended session or process restart): fall back to the durable counter
        reviewed_count = learning_session.flashcards_reviewed

    if flashcard is None:
        return NextFlashcardResponse(
            flashcard=None,
            remaining_count=0,
            reviewed_count=reviewed_count,
            session_complete=True
        )

    return NextFlashcardResponse(
        flashcard=LearningFlashcard.model_validate(flashcard),
        remaining_count=queue.remaining(session_id),
        reviewed_count=reviewed_count,
        session_complete=False
    )


def submit_review(
    session: Session,
    queue: SessionQueueManager,
    user_id: uuid.UUID,
    session_id: uuid.UUID,
    flashcard_id: uuid.UUID,
    rating: int
) -> SubmitReviewResponse:
    """
    Apply a rating to the flashcard at the head of the session queue.

    The queue check runs first, so an out-of-order or repeated submission is
    rejected before anything is written. The flashcard update, the review
    record and the session counter are then committed in one transaction.
    If that commit fails the card goes back to the head of the queue.

    Raises:
        InvalidRating: If rating is not 1-4
        NotFoundError: If the session or flashcard is not the user's
        SessionEnded: If the session was already ended
        NotQueueHead: If the flashcard is not the next card in the session
        DatabaseError: If the transaction fails (nothing is persisted, the card stays next)
    """
    validate_rating(rating)

    learning_session = get_owned_session(session, user_id, session_id)
    if learning_session.ended_at is not None:
        raise SessionEnded("Session has already ended")

    flashcard = session.exec(
        select(Flashcard).where(
            Flashcard.id == flashcard_id,
            Flashcard.user_id == user_id
        )
    ).first()
    if not flashcard:
        raise NotFoundError("Flashcard not found")

    previous_interval = flashcard.interval
    new_state = compute_next_state(flashcard.interval, flashcard.ease_factor, rating)

    queue.record_reviewed(session_id, flashcard_id)

    now = utc_now()
    flashcard.interval = new_state.interval
    flashcard.ease_factor = new_state.ease_factor
    flashcard.next_review_date = new_state.next_review_date
    flashcard.repetition_count = flashcard.repetition_count + 1
    flashcard.updated_at = now

    review = FlashcardReview(
        flashcard_id=flashcard.id,
        learning_session_id=learning_session.id,
        rating=rating,
        previous_interval=previous_interval,
        new_interval=new_state.interval,
        reviewed_at=now
    )

    learning_session.flashcards_reviewed = learning_session.flashcards_reviewed + 1

    try:
        session.add(flashcard)
        session.add(review)
        session.add(learning_session)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(
            f"Error recording review of flashcard {flashcard_id} in session {session_id}: {str(e)}"
        )
        queue.restore_reviewed(session_id, flashcard_id)
        raise DatabaseError("Failed to record review") from e

    logger.info(
        f"Session {session_id}: flashcard {flashcard_id} rated {rating}, "
        f"interval {previous_interval} -> {new_state.interval}, next review {new_state.next_review_date}"
    )
    return SubmitReviewResponse(
        flashcard_id=flashcard_id,
        previous_interval=previous_interval,
        new_interval=new_state.interval,
        next_review_date=new_state.next_review_date,
        ease_factor=new_state.ease_factor
    )


def end_session(
    session: Session,
    queue: SessionQueueManager,
    user_id: uuid.UUID,
    session_id: uuid.UUID
) -> EndSessionResponse:
    """
    End a learning session and return its summary.

    ended_at is stamped only once; ending again returns the same summary.
    Cards left in the queue stay due and show up in the next session.
    """
    learning_session = get_owned_session(session, user_id, session_id)

    if learning_session.ended_at is None:
        learning_session.ended_at = utc_now()
        try:
            session.add(learning_session)
            session.commit()
            session.refresh(learning_session)
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Error ending learning session {session_id}: {str(e)}")
            raise DatabaseError("Failed to end session") from e

    queue.dispose(session_id)

    started_at = as_utc(learning_session.started_at)
    ended_at = as_utc(learning_session.ended_at)
    elapsed_minutes = (ended_at - started_at).total_seconds() / 60
    # Round half up
    duration_minutes = int(math.floor(elapsed_minutes + 0.5))

    logger.info(
        f"Ended learning session {session_id}: {learning_session.flashcards_reviewed} "
        f"flashcard(s) reviewed in {duration_minutes} minute(s)"
    )
    return EndSessionResponse(
        session_id=learning_session.id,
        flashcards_reviewed=learning_session.flashcards_reviewed,
        started_at=started_at,
        ended_at=ended_at,
        duration_minutes=duration_minutes
    )


def get_session_record(session: Session, user_id: uuid.UUID, session_id: uuid.UUID) -> LearningSessionResponse:
    """Return the persisted learning session record."""
    return LearningSessionResponse.model_validate(get_owned_session(session, user_id, session_id))
