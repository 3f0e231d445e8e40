"""
API endpoints for AI flashcard generation.
"""
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.database import get_session
from app.models.models import User
from app.schemas.generation import (
    AcceptFlashcardsRequest,
    AcceptFlashcardsResponse,
    GenerateFlashcardsRequest,
    GenerationResponse,
    GenerationSessionsListResponse,
)
from app.services import generation_service
from app.api.v1.endpoints.utils import get_current_user

router = APIRouter(prefix="/generations", tags=["generations"])


@router.post("", response_model=GenerationResponse, status_code=status.HTTP_201_CREATED)
async def generate(
    request: GenerateFlashcardsRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """
    Generate flashcard suggestions from source text.

    Suggestions are not saved; accept the ones to keep with
    POST /generations/{session_id}/accept.
    """
    return generation_service.create_generation_session(session, current_user.id, request.source_text)


@router.get("", response_model=GenerationSessionsListResponse)
async def list_generations(
    page: int = Query(1, ge=1, description="Page number (1-based)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Get the user's generation history."""
    return generation_service.list_generation_sessions(session, current_user.id, page=page, limit=limit)


@router.post("/{session_id}/accept", response_model=AcceptFlashcardsResponse, status_code=status.HTTP_201_CREATED)
async def accept(
    session_id: uuid.UUID,
    request: AcceptFlashcardsRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Save the accepted suggestions of a generation run as flashcards."""
    return generation_service.accept_flashcards(
        session,
        current_user.id,
        session_id,
        request.accepted,
        request.rejected_count
    )
