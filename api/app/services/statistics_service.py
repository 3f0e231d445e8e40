"""
Statistics service for AI generation usage.
"""
import logging
import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from app.models.enums import FlashcardSource
from app.models.flashcard import Flashcard
from app.models.generation_session import GenerationSession
from app.schemas.statistics import FlashcardsBySource, GenerationStatisticsResponse

logger = logging.getLogger(__name__)


def percentage(part: int, whole: int) -> float:
    """Percent with one decimal; 0 when there is nothing to divide by."""
    if whole <= 0:
        return 0.0
    return round(part / whole * 1000) / 10


def get_generation_statistics(session: Session, user_id: uuid.UUID) -> GenerationStatisticsResponse:
    """
    Aggregate generation counters and the AI/manual split of the collection.
    """
    totals = session.exec(
        select(
            func.count(GenerationSession.id),
            func.coalesce(func.sum(GenerationSession.generated_count), 0),
            func.coalesce(func.sum(GenerationSession.accepted_count), 0),
            func.coalesce(func.sum(GenerationSession.rejected_count), 0),
        ).where(GenerationSession.user_id == user_id)
    ).one()
    total_sessions, total_generated, total_accepted, total_rejected = (int(value) for value in totals)

    source_counts = dict(session.exec(
        select(Flashcard.source, func.count(Flashcard.id))
        .where(Flashcard.user_id == user_id)
        .group_by(Flashcard.source)
    ).all())
    ai_count = int(source_counts.get(FlashcardSource.AI.value, 0))
    manual_count = int(source_counts.get(FlashcardSource.MANUAL.value, 0))

    logger.info(
        f"Generation statistics for user {user_id}: {total_sessions} sessions, "
        f"{total_generated} generated, {total_accepted} accepted"
    )
    return GenerationStatisticsResponse(
        total_sessions=total_sessions,
        total_generated=total_generated,
        total_accepted=total_accepted,
        total_rejected=total_rejected,
        acceptance_rate=percentage(total_accepted, total_generated),
        flashcards_by_source=FlashcardsBySource(ai=ai_count, manual=manual_count),
        ai_usage_percentage=percentage(ai_count, ai_count + manual_count)
    )
