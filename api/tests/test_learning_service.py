import uuid
from datetime import timedelta

import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from app.core.exceptions import (
    DatabaseError,
    InvalidRating,
    NoDueCards,
    NotFoundError,
    NotQueueHead,
    SessionEnded,
)
from app.models.models import Flashcard, FlashcardReview, LearningSession
from app.services import learning_service
from app.services.flashcard_service import delete_flashcard
from app.utils.time_utils import utc_today


def test_start_without_due_cards_creates_nothing(session, queue, user, make_flashcard):
    make_flashcard(user, days_until_due=3)

    with pytest.raises(NoDueCards):
        learning_service.start_session(session, queue, user.id)

    assert session.exec(select(LearningSession)).all() == []


def test_start_selects_due_cards_oldest_first(session, queue, user, other_user, make_flashcard):
    later = make_flashcard(user, front="later", days_until_due=0)
    earliest = make_flashcard(user, front="earliest", days_until_due=-5)
    unscheduled = make_flashcard(user, front="unscheduled", days_until_due=None)
    make_flashcard(user, front="future", days_until_due=1)
    make_flashcard(other_user, front="not mine", days_until_due=-10)

    started = learning_service.start_session(session, queue, user.id, limit=10)

    assert started.flashcards_count == 3
    order = []
    while True:
        response = learning_service.get_next_flashcard(session, queue, user.id, started.session_id)
        if response.session_complete:
            break
        order.append(response.flashcard.id)
        learning_service.submit_review(session, queue, user.id, started.session_id, response.flashcard.id, 3)
    assert order == [unscheduled.id, earliest.id, later.id]


def test_start_respects_limit(session, queue, user, make_flashcard):
    for i in range(5):
        make_flashcard(user, front=f"card {i}", days_until_due=-i)

    started = learning_service.start_session(session, queue, user.id, limit=2)

    assert started.flashcards_count == 2
    assert queue.remaining(started.session_id) == 2


def test_full_session(session, queue, user, make_flashcard):
    for i in range(3):
        make_flashcard(user, front=f"card {i}", days_until_due=-3 + i, interval=4, ease_factor=2.0)

    started = learning_service.start_session(session, queue, user.id)
    assert started.flashcards_count == 3

    for expected_reviewed, rating in enumerate([1, 3, 4]):
        response = learning_service.get_next_flashcard(session, queue, user.id, started.session_id)
        assert response.session_complete is False
        assert response.reviewed_count == expected_reviewed
        assert response.remaining_count == 3 - expected_reviewed

        result = learning_service.submit_review(
            session, queue, user.id, started.session_id, response.flashcard.id, rating
        )
        assert result.previous_interval == 4
        assert result.next_review_date == utc_today() + timedelta(days=result.new_interval)

    final = learning_service.get_next_flashcard(session, queue, user.id, started.session_id)
    assert final.session_complete is True
    assert final.flashcard is None
    assert final.remaining_count == 0
    assert final.reviewed_count == 3

    summary = learning_service.end_session(session, queue, user.id, started.session_id)
    assert summary.flashcards_reviewed == 3
    assert summary.duration_minutes == 0
    assert summary.ended_at >= summary.started_at

    reviews = session.exec(select(FlashcardReview)).all()
    assert sorted(review.rating for review in reviews) == [1, 3, 4]
    assert {review.new_interval for review in reviews} == {1, 8, 10}

    flashcards = session.exec(select(Flashcard)).all()
    assert all(flashcard.repetition_count == 1 for flashcard in flashcards)
    assert all(flashcard.next_review_date > utc_today() for flashcard in flashcards)


def test_review_out_of_order_changes_nothing(session, queue, user, make_flashcard):
    first = make_flashcard(user, front="first", days_until_due=-2)
    second = make_flashcard(user, front="second", days_until_due=-1)
    started = learning_service.start_session(session, queue, user.id)

    with pytest.raises(NotQueueHead):
        learning_service.submit_review(session, queue, user.id, started.session_id, second.id, 3)

    session.refresh(second)
    assert second.interval == 0
    assert second.repetition_count == 0
    assert session.exec(select(FlashcardReview)).all() == []
    assert learning_service.get_next_flashcard(session, queue, user.id, started.session_id).flashcard.id == first.id


def test_review_same_card_twice(session, queue, user, make_flashcard):
    make_flashcard(user)
    make_flashcard(user, front="another")
    started = learning_service.start_session(session, queue, user.id)
    head = learning_service.get_next_flashcard(session, queue, user.id, started.session_id).flashcard

    learning_service.submit_review(session, queue, user.id, started.session_id, head.id, 3)
    with pytest.raises(NotQueueHead):
        learning_service.submit_review(session, queue, user.id, started.session_id, head.id, 3)

    record = session.get(LearningSession, started.session_id)
    assert record.flashcards_reviewed == 1


def test_deleted_card_is_skipped(session, queue, user, make_flashcard):
    flashcard = make_flashcard(user)
    started = learning_service.start_session(session, queue, user.id)

    delete_flashcard(session, user.id, flashcard.id)

    response = learning_service.get_next_flashcard(session, queue, user.id, started.session_id)
    assert response.session_complete is True
    assert response.reviewed_count == 0
    assert response.remaining_count == 0


def test_invalid_rating_is_rejected_before_anything(session, queue, user, make_flashcard):
    flashcard = make_flashcard(user)
    started = learning_service.start_session(session, queue, user.id)

    with pytest.raises(InvalidRating):
        learning_service.submit_review(session, queue, user.id, started.session_id, flashcard.id, 5)

    assert queue.remaining(started.session_id) == 1


def test_review_in_ended_session(session, queue, user, make_flashcard):
    flashcard = make_flashcard(user)
    started = learning_service.start_session(session, queue, user.id)
    learning_service.end_session(session, queue, user.id, started.session_id)

    with pytest.raises(SessionEnded) as exc_info:
        learning_service.submit_review(session, queue, user.id, started.session_id, flashcard.id, 3)
    assert exc_info.value.status_code == 409


def test_end_twice_keeps_first_timestamp(session, queue, user, make_flashcard):
    make_flashcard(user)
    started = learning_service.start_session(session, queue, user.id)

    first = learning_service.end_session(session, queue, user.id, started.session_id)
    second = learning_service.end_session(session, queue, user.id, started.session_id)

    assert first.ended_at == second.ended_at
    assert not queue.is_active(started.session_id)


def test_end_early_leaves_cards_due(session, queue, user, make_flashcard):
    make_flashcard(user, front="one")
    make_flashcard(user, front="two")
    started = learning_service.start_session(session, queue, user.id)
    head = learning_service.get_next_flashcard(session, queue, user.id, started.session_id).flashcard
    learning_service.submit_review(session, queue, user.id, started.session_id, head.id, 3)

    summary = learning_service.end_session(session, queue, user.id, started.session_id)
    assert summary.flashcards_reviewed == 1

    restarted = learning_service.start_session(session, queue, user.id)
    assert restarted.flashcards_count == 1


def test_next_after_queue_lost_uses_stored_counter(session, queue, user, make_flashcard):
    make_flashcard(user)
    started = learning_service.start_session(session, queue, user.id)
    head = learning_service.get_next_flashcard(session, queue, user.id, started.session_id).flashcard
    learning_service.submit_review(session, queue, user.id, started.session_id, head.id, 2)

    queue.dispose(started.session_id)

    response = learning_service.get_next_flashcard(session, queue, user.id, started.session_id)
    assert response.session_complete is True
    assert response.reviewed_count == 1


def test_other_users_session_is_not_found(session, queue, user, other_user, make_flashcard):
    make_flashcard(user)
    started = learning_service.start_session(session, queue, user.id)

    with pytest.raises(NotFoundError):
        learning_service.get_next_flashcard(session, queue, other_user.id, started.session_id)
    with pytest.raises(NotFoundError):
        learning_service.end_session(session, queue, other_user.id, started.session_id)
    with pytest.raises(NotFoundError):
        learning_service.get_session_record(session, other_user.id, uuid.uuid4())


def test_failed_commit_rolls_back_review(session, queue, user, make_flashcard, monkeypatch):
    flashcard = make_flashcard(user, interval=6, ease_factor=2.5, days_until_due=-1)
    later = make_flashcard(user, front="later", days_until_due=0)
    started = learning_service.start_session(session, queue, user.id)

    def failing_commit():
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(session, "commit", failing_commit)
    with pytest.raises(DatabaseError):
        learning_service.submit_review(session, queue, user.id, started.session_id, flashcard.id, 3)
    monkeypatch.undo()

    stored = session.get(Flashcard, flashcard.id)
    assert stored.interval == 6
    assert stored.repetition_count == 0
    assert session.exec(select(FlashcardReview)).all() == []
    assert session.get(LearningSession, started.session_id).flashcards_reviewed == 0

    # The card is still next in the session and can be reviewed again
    assert queue.reviewed(started.session_id) == 0
    assert queue.remaining(started.session_id) == 2
    next_card = learning_service.get_next_flashcard(session, queue, user.id, started.session_id)
    assert next_card.flashcard.id == flashcard.id
    assert next_card.reviewed_count == 0

    learning_service.submit_review(session, queue, user.id, started.session_id, flashcard.id, 3)
    assert learning_service.get_next_flashcard(session, queue, user.id, started.session_id).flashcard.id == later.id
    summary = learning_service.end_session(session, queue, user.id, started.session_id)
    assert summary.flashcards_reviewed == 1


def test_end_after_first_review_leaves_rest_due(session, queue, user, make_flashcard):
    card_a = make_flashcard(user, front="A", days_until_due=-3)
    card_b = make_flashcard(user, front="B", days_until_due=-2)
    card_c = make_flashcard(user, front="C", days_until_due=-1)
    started = learning_service.start_session(session, queue, user.id)

    assert learning_service.get_next_flashcard(session, queue, user.id, started.session_id).flashcard.id == card_a.id
    learning_service.submit_review(session, queue, user.id, started.session_id, card_a.id, 3)
    assert learning_service.get_next_flashcard(session, queue, user.id, started.session_id).flashcard.id == card_b.id

    summary = learning_service.end_session(session, queue, user.id, started.session_id)
    assert summary.flashcards_reviewed == 1

    due = learning_service.find_due_flashcard_ids(session, user.id, utc_today(), limit=20)
    assert due == [card_b.id, card_c.id]
