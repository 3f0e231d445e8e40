"""
Generation service: AI flashcard generation runs and accepting their suggestions.

Flow:
1. create_generation_session - record the run, call the LLM, store its raw response
2. accept_flashcards - save the suggestions the user kept and update the run's counters
"""
import logging
import uuid
from typing import List

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.core.exceptions import DatabaseError, LLMError, NotFoundError, ServiceUnavailableError
from app.models.enums import FlashcardSource
from app.models.flashcard import Flashcard
from app.models.generation_session import GenerationSession
from app.schemas.common import PaginationResponse
from app.schemas.generation import (
    AcceptedFlashcard,
    AcceptedFlashcardResponse,
    AcceptFlashcardsResponse,
    GenerationResponse,
    GenerationSessionsListResponse,
    GenerationSessionSummary,
)
from app.services.flashcard_service import new_flashcard
from app.services.openrouter_service import OpenRouterError, generate_flashcards, TEMPERATURE, MAX_TOKENS
from app.utils.text_utils import make_preview

logger = logging.getLogger(__name__)


def create_generation_session(session: Session, user_id: uuid.UUID, source_text: str) -> GenerationResponse:
    """
    Generate flashcard suggestions from source text.

    The generation session row is created before the LLM call and kept even if
    the call fails. Failing to store the LLM result afterwards is logged and
    the suggestions are still returned.

    Raises:
        DatabaseError: If the generation session cannot be created
        ServiceUnavailableError: If the LLM provider is temporarily unavailable
        LLMError: If the LLM call fails or returns an unusable response
    """
    generation_session = GenerationSession(
        user_id=user_id,
        source_text=source_text,
        model_name="pending",
        llm_response={},
        generated_count=0,
        accepted_count=0,
        rejected_count=0
    )
    try:
        session.add(generation_session)
        session.commit()
        session.refresh(generation_session)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to create generation session for user {user_id}: {str(e)}")
        raise DatabaseError("Failed to create generation session") from e

    session_id = generation_session.id

    try:
        suggestions, model_name, llm_response = generate_flashcards(source_text)
    except OpenRouterError as e:
        logger.error(f"Generation session {session_id} failed: {e.message}")
        if e.is_retryable:
            raise ServiceUnavailableError(
                "The AI service is temporarily unavailable. Please try again shortly."
            ) from e
        raise LLMError("Error while communicating with the AI service") from e

    generation_session.llm_response = llm_response
    generation_session.model_name = model_name
    generation_session.model_params = {"temperature": TEMPERATURE, "max_tokens": MAX_TOKENS}
    generation_session.generated_count = len(suggestions)
    try:
        session.add(generation_session)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to update generation session {session_id}: {str(e)}")

    logger.info(f"Generation session {session_id}: {len(suggestions)} suggestion(s) from {model_name}")
    return GenerationResponse(
        session_id=session_id,
        suggestions=suggestions,
        generated_count=len(suggestions),
        model_name=model_name
    )


def list_generation_sessions(
    session: Session,
    user_id: uuid.UUID,
    page: int = 1,
    limit: int = 20
) -> GenerationSessionsListResponse:
    """Get the user's generation history, newest first."""
    total = session.exec(
        select(func.count()).select_from(GenerationSession).where(GenerationSession.user_id == user_id)
    ).one()
    generation_sessions = session.exec(
        select(GenerationSession)
        .where(GenerationSession.user_id == user_id)
        .order_by(GenerationSession.created_at.desc(), GenerationSession.id)  # type: ignore[attr-defined]
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()

    data = [
        GenerationSessionSummary(
            id=generation_session.id,
            source_text_preview=make_preview(generation_session.source_text),
            model_name=generation_session.model_name,
            generated_count=generation_session.generated_count,
            accepted_count=generation_session.accepted_count,
            rejected_count=generation_session.rejected_count,
            created_at=generation_session.created_at
        )
        for generation_session in generation_sessions
    ]
    return GenerationSessionsListResponse(
        data=data,
        pagination=PaginationResponse.build(page=page, limit=limit, total=total)
    )


def accept_flashcards(
    session: Session,
    user_id: uuid.UUID,
    session_id: uuid.UUID,
    accepted: List[AcceptedFlashcard],
    rejected_count: int
) -> AcceptFlashcardsResponse:
    """
    Save accepted suggestions as AI flashcards and update the run's counters.

    Raises:
        NotFoundError: If the generation session does not exist or is not the user's
        DatabaseError: If the flashcards cannot be saved
    """
    generation_session = session.exec(
        select(GenerationSession).where(
            GenerationSession.id == session_id,
            GenerationSession.user_id == user_id
        )
    ).first()
    if not generation_session:
        raise NotFoundError("Generation session not found")

    flashcards: List[Flashcard] = [
        new_flashcard(
            user_id,
            item.front,
            item.back,
            source=FlashcardSource.AI,
            generation_session_id=session_id
        )
        for item in accepted
    ]

    if flashcards:
        try:
            for flashcard in flashcards:
                session.add(flashcard)
            session.commit()
            for flashcard in flashcards:
                session.refresh(flashcard)
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Failed to insert accepted flashcards for session {session_id}: {str(e)}")
            raise DatabaseError("Failed to save flashcards") from e

    generation_session.accepted_count = len(accepted)
    generation_session.rejected_count = rejected_count
    try:
        session.add(generation_session)
        session.commit()
    except SQLAlchemyError as e:
        # Flashcards are already saved
        session.rollback()
        logger.error(f"Failed to update metrics of generation session {session_id}: {str(e)}")

    logger.info(
        f"Generation session {session_id}: {len(accepted)} accepted, {rejected_count} rejected"
    )
    return AcceptFlashcardsResponse(
        flashcards=[AcceptedFlashcardResponse.model_validate(flashcard) for flashcard in flashcards],
        accepted_count=len(accepted),
        rejected_count=rejected_count
    )
