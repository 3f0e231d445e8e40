"""
API endpoints for learning sessions.

A session is started over the flashcards due today, then driven by
next / review calls until the queue is exhausted, then ended.
"""
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.config import settings
from app.core.database import get_session
from app.models.models import User
from app.schemas.learning import (
    EndSessionResponse,
    LearningSessionResponse,
    NextFlashcardResponse,
    StartSessionRequest,
    StartSessionResponse,
    SubmitReviewRequest,
    SubmitReviewResponse,
)
from app.services import learning_service
from app.services.session_queue import SessionQueueManager, get_session_queue_manager
from app.api.v1.endpoints.utils import get_current_user

router = APIRouter(prefix="/learning-sessions", tags=["learning-sessions"])


@router.post("", response_model=StartSessionResponse, status_code=status.HTTP_201_CREATED)
async def start_learning_session(
    request: Optional[StartSessionRequest] = None,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    queue: SessionQueueManager = Depends(get_session_queue_manager)
):
    """Start a learning session over the flashcards due today."""
    limit = request.limit if request else settings.learning_session_default_limit
    return learning_service.start_session(session, queue, current_user.id, limit=limit)


@router.get("/{session_id}", response_model=LearningSessionResponse)
async def get_learning_session(
    session_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Get the stored learning session record."""
    return learning_service.get_session_record(session, current_user.id, session_id)


@router.get("/{session_id}/next", response_model=NextFlashcardResponse)
async def get_next_flashcard(
    session_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    queue: SessionQueueManager = Depends(get_session_queue_manager)
):
    """Get the next flashcard to review, or session_complete when none are left."""
    return learning_service.get_next_flashcard(session, queue, current_user.id, session_id)


@router.post("/{session_id}/review", response_model=SubmitReviewResponse)
async def submit_review(
    session_id: uuid.UUID,
    request: SubmitReviewRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    queue: SessionQueueManager = Depends(get_session_queue_manager)
):
    """Rate the current flashcard (1 again, 2 hard, 3 good, 4 easy) and reschedule it."""
    return learning_service.submit_review(
        session,
        queue,
        current_user.id,
        session_id,
        request.flashcard_id,
        request.rating
    )


@router.patch("/{session_id}/end", response_model=EndSessionResponse)
async def end_learning_session(
    session_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    queue: SessionQueueManager = Depends(get_session_queue_manager)
):
    """End the session and get its summary."""
    return learning_service.end_session(session, queue, current_user.id, session_id)
