"""
User service for business logic related to user operations.
"""
import logging
import uuid
from typing import Dict

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from app.core.exceptions import AuthenticationError, ConflictError, DatabaseError, NotFoundError
from app.models.models import User, Flashcard, FlashcardReview, LearningSession, GenerationSession

logger = logging.getLogger(__name__)


def register_user(session: Session, email: str, password: str) -> User:
    """
    Create a new account.

    Raises:
        ConflictError: If the email is already registered
    """
    email = email.strip().lower()
    existing_user = session.exec(select(User).where(User.email == email)).first()
    if existing_user:
        raise ConflictError("Email already registered")

    user = User(email=email, password=User.hash_password(password))
    try:
        session.add(user)
        session.commit()
        session.refresh(user)
    except IntegrityError as e:
        session.rollback()
        raise ConflictError("Email already registered") from e

    logger.info(f"Registered user {user.id}")
    return user


def authenticate_user(session: Session, email: str, password: str) -> User:
    """
    Check credentials and return the user.

    Raises:
        AuthenticationError: If the email is unknown or the password is wrong
    """
    user = session.exec(select(User).where(User.email == email.strip().lower())).first()
    if not user or not user.verify_password(password):
        raise AuthenticationError("Invalid email or password")
    return user


def delete_user_data(
    session: Session,
    user_id: uuid.UUID
) -> Dict[str, int]:
    """
    Delete a user account and everything it owns.

    Deletes in the order foreign keys require:
    1. FlashcardReviews (they reference flashcards and learning sessions)
    2. Flashcards (they reference generation sessions)
    3. LearningSessions
    4. GenerationSessions
    5. The User

    Args:
        session: Database session
        user_id: The user whose account should be deleted

    Returns:
        Dict with counts of deleted flashcards, learning sessions and generation sessions

    Raises:
        NotFoundError: If user not found
    """
    user = session.get(User, user_id)
    if not user:
        raise NotFoundError(f"User with id {user_id} not found")

    flashcards = session.exec(select(Flashcard).where(Flashcard.user_id == user_id)).all()
    learning_sessions = session.exec(
        select(LearningSession).where(LearningSession.user_id == user_id)
    ).all()
    generation_sessions = session.exec(
        select(GenerationSession).where(GenerationSession.user_id == user_id)
    ).all()

    flashcard_ids = [flashcard.id for flashcard in flashcards]
    learning_session_ids = [learning_session.id for learning_session in learning_sessions]

    try:
        # 1. Reviews of the user's cards or made in the user's sessions
        if flashcard_ids or learning_session_ids:
            reviews = session.exec(
                select(FlashcardReview).where(
                    or_(
                        FlashcardReview.flashcard_id.in_(flashcard_ids),  # type: ignore
                        FlashcardReview.learning_session_id.in_(learning_session_ids)  # type: ignore
                    )
                )
            ).all()
            for review in reviews:
                session.delete(review)
            session.flush()

        # 2. Flashcards
        for flashcard in flashcards:
            session.delete(flashcard)
        session.flush()

        # 3. Learning sessions and 4. generation sessions
        for learning_session in learning_sessions:
            session.delete(learning_session)
        for generation_session in generation_sessions:
            session.delete(generation_session)
        session.flush()

        # 5. The user
        session.delete(user)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error deleting data for user {user_id}: {str(e)}")
        raise DatabaseError("Failed to delete account") from e

    logger.info(
        f"Deleted user {user_id}: "
        f"{len(flashcards)} flashcards, "
        f"{len(learning_sessions)} learning sessions, "
        f"{len(generation_sessions)} generation sessions"
    )

    return {
        'flashcards_deleted': len(flashcards),
        'learning_sessions_deleted': len(learning_sessions),
        'generation_sessions_deleted': len(generation_sessions)
    }
