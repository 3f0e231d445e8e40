"""
Shared fixtures: in-memory SQLite database, in-memory session queues and an
API client wired to both.
"""
import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SESSION_QUEUE_BACKEND"] = "memory"
os.environ["ENVIRONMENT"] = "test"

from datetime import timedelta
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session

from app.core.database import engine, get_session
from app.main import app
from app.models.models import Flashcard, User
from app.services.flashcard_service import new_flashcard
from app.services.session_queue import InMemoryQueueStore, SessionQueueManager, get_session_queue_manager
from app.utils.time_utils import utc_today


@pytest.fixture
def session():
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def queue() -> SessionQueueManager:
    return SessionQueueManager(InMemoryQueueStore())


@pytest.fixture
def client(session, queue):
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_session_queue_manager] = lambda: queue
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def user(session) -> User:
    user = User(email="learner@example.com", password=User.hash_password("correct-horse"))
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def other_user(session) -> User:
    user = User(email="someone.else@example.com", password=User.hash_password("battery-staple"))
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def make_flashcard(session):
    """Factory for flashcards due `days_until_due` days from today."""

    def _make(
        user: User,
        front: str = "What is the capital of France?",
        back: str = "Paris",
        days_until_due: Optional[int] = 0,
        interval: int = 0,
        ease_factor: float = 2.5
    ) -> Flashcard:
        flashcard = new_flashcard(user.id, front, back)
        flashcard.interval = interval
        flashcard.ease_factor = ease_factor
        if days_until_due is None:
            flashcard.next_review_date = None
        else:
            flashcard.next_review_date = utc_today() + timedelta(days=days_until_due)
        session.add(flashcard)
        session.commit()
        session.refresh(flashcard)
        return flashcard

    return _make
