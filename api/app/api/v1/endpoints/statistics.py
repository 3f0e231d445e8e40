"""
API endpoints for usage statistics.
"""
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.database import get_session
from app.models.models import User
from app.schemas.statistics import GenerationStatisticsResponse
from app.services.statistics_service import get_generation_statistics
from app.api.v1.endpoints.utils import get_current_user

router = APIRouter(prefix="/statistics", tags=["statistics"])


@router.get("/generations", response_model=GenerationStatisticsResponse)
async def generation_statistics(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session)
):
    """Get AI generation statistics for the user."""
    return get_generation_statistics(session, current_user.id)
