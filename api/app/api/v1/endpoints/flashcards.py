"""
API endpoints for managing the user's flashcards.
"""
import uuid
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.database import get_session
from app.models.enums import FlashcardSource
from app.models.models import User
from app.schemas.flashcard import (
    CreateFlashcardRequest,
    DeleteFlashcardResponse,
    FlashcardResponse,
    FlashcardsListResponse,
    UpdateFlashcardRequest,
)
from app.services import flashcard_service
from app.api.v1.endpoints.utils import get_current_user

router = APIRouter(prefix="/flashcards", tags=["flashcards"])


@router.get("", response_model=FlashcardsListResponse)
async def list_flashcards(
    page: int = Query(1, ge=1, description="Page number (1-based)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    source: Optional[FlashcardSource] = Query(None, description="Filter by source ('ai' or 'manual')"),
    sort: Literal["created_at", "updated_at", "next_review_date"] = Query("created_at", description="Sort field"),
    order: Literal["asc", "desc"] = Query("desc", description="Sort direction"),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Get a paginated list of the user's flashcards."""
    return flashcard_service.list_flashcards(
        session,
        current_user.id,
        page=page,
        limit=limit,
        source=source,
        sort=sort,
        order=order
    )


@router.post("", response_model=FlashcardResponse, status_code=status.HTTP_201_CREATED)
async def create_flashcard(
    request: CreateFlashcardRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Create a manual flashcard. It is due for review immediately."""
    flashcard = flashcard_service.create_flashcard(session, current_user.id, request.front, request.back)
    return FlashcardResponse.model_validate(flashcard)


@router.get("/{flashcard_id}", response_model=FlashcardResponse)
async def get_flashcard(
    flashcard_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Get a single flashcard."""
    flashcard = flashcard_service.get_owned_flashcard(session, current_user.id, flashcard_id)
    return FlashcardResponse.model_validate(flashcard)


@router.put("/{flashcard_id}", response_model=FlashcardResponse)
async def update_flashcard(
    flashcard_id: uuid.UUID,
    request: UpdateFlashcardRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Edit the front and back of a flashcard."""
    flashcard = flashcard_service.update_flashcard(
        session, current_user.id, flashcard_id, request.front, request.back
    )
    return FlashcardResponse.model_validate(flashcard)


@router.delete("/{flashcard_id}", response_model=DeleteFlashcardResponse)
async def delete_flashcard(
    flashcard_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Permanently delete a flashcard and its review history."""
    flashcard_service.delete_flashcard(session, current_user.id, flashcard_id)
    return DeleteFlashcardResponse(message="Flashcard deleted successfully", id=flashcard_id)
