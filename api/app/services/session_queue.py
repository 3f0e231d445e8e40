"""
Session queue manager for learning sessions.

Holds, per active learning session, the ordered queue of flashcard ids still to
be reviewed and a live reviewed counter. The queue lives outside the database:
either in process memory (single instance) or in Redis (shared between
instances), selected with ``SESSION_QUEUE_BACKEND``.

Queue state per session:
    seeded -> active (peek/record cycles) -> complete (queue empty)
                                          -> ended (disposed)
"""
import logging
import threading
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Callable, Dict, List, Optional, Sequence, TypeVar

import redis

from app.core.config import settings
from app.core.exceptions import DuplicateSession, NotQueueHead

logger = logging.getLogger(__name__)

T = TypeVar("T")


class QueueStore(ABC):
    """Storage backend for session queues. Session and card ids are strings."""

    @abstractmethod
    def create(self, session_id: str, card_ids: Sequence[str]) -> bool:
        """Store a new queue with a zero reviewed counter. Returns False if one already exists."""

    @abstractmethod
    def exists(self, session_id: str) -> bool:
        ...

    @abstractmethod
    def head(self, session_id: str) -> Optional[str]:
        """First card id in the queue, or None if the queue is empty or unknown."""

    @abstractmethod
    def remove_head_if(self, session_id: str, card_id: str) -> bool:
        """
        Pop the head only if it is `card_id`, as one atomic step.

        Returns False (queue untouched) when the head is another card or the
        queue is empty or unknown.
        """

    @abstractmethod
    def restore_head(self, session_id: str, card_id: str) -> bool:
        """
        Put `card_id` back at the head and decrement the reviewed counter.

        Returns False for unknown sessions, which are left as they are.
        """

    @abstractmethod
    def length(self, session_id: str) -> int:
        ...

    @abstractmethod
    def reviewed(self, session_id: str) -> int:
        ...

    @abstractmethod
    def increment_reviewed(self, session_id: str) -> int:
        """Increment the reviewed counter and return the new value."""

    @abstractmethod
    def delete(self, session_id: str) -> None:
        ...


class InMemoryQueueStore(QueueStore):
    """Process-local store. Queues are lost when the process restarts."""

    def __init__(self):
        self._queues: Dict[str, List[str]] = {}
        self._reviewed: Dict[str, int] = {}
        self._lock = threading.Lock()

    def create(self, session_id: str, card_ids: Sequence[str]) -> bool:
        with self._lock:
            if session_id in self._queues:
                return False
            self._queues[session_id] = list(card_ids)
            self._reviewed[session_id] = 0
            return True

    def exists(self, session_id: str) -> bool:
        return session_id in self._queues

    def head(self, session_id: str) -> Optional[str]:
        queue = self._queues.get(session_id)
        return queue[0] if queue else None

    def remove_head_if(self, session_id: str, card_id: str) -> bool:
        with self._lock:
            queue = self._queues.get(session_id)
            if not queue or queue[0] != card_id:
                return False
            queue.pop(0)
            return True

    def restore_head(self, session_id: str, card_id: str) -> bool:
        with self._lock:
            queue = self._queues.get(session_id)
            if queue is None:
                return False
            queue.insert(0, card_id)
            self._reviewed[session_id] = max(self._reviewed.get(session_id, 0) - 1, 0)
            return True

    def length(self, session_id: str) -> int:
        return len(self._queues.get(session_id, []))

    def reviewed(self, session_id: str) -> int:
        return self._reviewed.get(session_id, 0)

    def increment_reviewed(self, session_id: str) -> int:
        with self._lock:
            self._reviewed[session_id] = self._reviewed.get(session_id, 0) + 1
            return self._reviewed[session_id]

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._queues.pop(session_id, None)
            self._reviewed.pop(session_id, None)


class RedisQueueStore(QueueStore):
    """
    Redis-backed store shared by all API instances.

    Keys per session (both expire after ``ttl_seconds``):
        learning_session:<id>:queue     list of card ids, head at index 0
        learning_session:<id>:reviewed  integer counter, also marks existence

    Compare-and-pop and restore run as Lua scripts so that concurrent
    instances never pop a card they did not check.
    """

    KEY_PREFIX = "learning_session"

    # KEYS[1] = queue, ARGV[1] = expected head
    REMOVE_HEAD_IF_SCRIPT = """
if redis.call('LINDEX', KEYS[1], 0) == ARGV[1] then
    redis.call('LPOP', KEYS[1])
    return 1
end
return 0
"""

    # KEYS[1] = queue, KEYS[2] = reviewed counter, ARGV[1] = card id, ARGV[2] = ttl
    RESTORE_HEAD_SCRIPT = """
if redis.call('EXISTS', KEYS[2]) == 0 then
    return 0
end
redis.call('LPUSH', KEYS[1], ARGV[1])
redis.call('EXPIRE', KEYS[1], ARGV[2])
if tonumber(redis.call('GET', KEYS[2])) > 0 then
    redis.call('DECR', KEYS[2])
end
return 1
"""

    def __init__(self, client: "redis.Redis", ttl_seconds: int = 86400):
        self._redis = client
        self._ttl = ttl_seconds
        self._remove_head_if = client.register_script(self.REMOVE_HEAD_IF_SCRIPT)
        self._restore_head = client.register_script(self.RESTORE_HEAD_SCRIPT)

    def _queue_key(self, session_id: str) -> str:
        return f"{self.KEY_PREFIX}:{session_id}:queue"

    def _reviewed_key(self, session_id: str) -> str:
        return f"{self.KEY_PREFIX}:{session_id}:reviewed"

    def create(self, session_id: str, card_ids: Sequence[str]) -> bool:
        # SET NX on the counter decides which caller owns the session
        if not self._redis.set(self._reviewed_key(session_id), 0, nx=True, ex=self._ttl):
            return False
        if card_ids:
            self._redis.rpush(self._queue_key(session_id), *card_ids)
            self._redis.expire(self._queue_key(session_id), self._ttl)
        return True

    def exists(self, session_id: str) -> bool:
        return bool(self._redis.exists(self._reviewed_key(session_id)))

    def head(self, session_id: str) -> Optional[str]:
        value = self._redis.lindex(self._queue_key(session_id), 0)
        if value is None:
            return None
        return value.decode() if isinstance(value, bytes) else value

    def remove_head_if(self, session_id: str, card_id: str) -> bool:
        return bool(self._remove_head_if(keys=[self._queue_key(session_id)], args=[card_id]))

    def restore_head(self, session_id: str, card_id: str) -> bool:
        return bool(self._restore_head(
            keys=[self._queue_key(session_id), self._reviewed_key(session_id)],
            args=[card_id, self._ttl]
        ))

    def length(self, session_id: str) -> int:
        return int(self._redis.llen(self._queue_key(session_id)))

    def reviewed(self, session_id: str) -> int:
        value = self._redis.get(self._reviewed_key(session_id))
        return int(value) if value is not None else 0

    def increment_reviewed(self, session_id: str) -> int:
        return int(self._redis.incr(self._reviewed_key(session_id)))

    def delete(self, session_id: str) -> None:
        self._redis.delete(self._queue_key(session_id), self._reviewed_key(session_id))


class SessionQueueManager:
    """Mediates card retrieval and advancement for learning session queues."""

    def __init__(self, store: QueueStore):
        self.store = store

    def seed(self, session_id, card_ids: Sequence) -> None:
        """
        Store the ordered queue of due cards for a new session.

        Raises:
            DuplicateSession: If a queue already exists for this session
        """
        sid = str(session_id)
        if not self.store.create(sid, [str(card_id) for card_id in card_ids]):
            raise DuplicateSession(f"Session queue already exists for session {sid}")
        logger.info(f"Seeded queue for session {sid} with {len(card_ids)} flashcard(s)")

    def peek_next(self, session_id, load_card: Callable[[str], Optional[T]]) -> Optional[T]:
        """
        Return the loaded card at the head of the queue without removing it.

        Cards that `load_card` cannot find (deleted since the session started)
        are dropped from the queue and the next head is tried. The loop is
        bounded by the queue length at call time.

        Args:
            session_id: Learning session id
            load_card: Callable returning the card for an id, or None if it no longer exists

        Returns:
            The loaded card, or None when the session queue is complete
        """
        sid = str(session_id)
        for _ in range(self.store.length(sid)):
            card_id = self.store.head(sid)
            if card_id is None:
                break
            card = load_card(card_id)
            if card is not None:
                return card
            logger.warning(f"Session {sid}: flashcard {card_id} no longer exists, skipping")
            # Another instance may have moved the head already
            self.store.remove_head_if(sid, card_id)
        return None

    def record_reviewed(self, session_id, card_id) -> int:
        """
        Remove `card_id` from the head of the queue and bump the reviewed counter.

        Not idempotent: the second submission for the same card fails because
        the card is no longer at the head.

        Returns:
            The new reviewed count

        Raises:
            NotQueueHead: If `card_id` is not the current head (queue left unchanged)
        """
        sid = str(session_id)
        expected = str(card_id)
        if not self.store.remove_head_if(sid, expected):
            raise NotQueueHead(
                f"Flashcard {expected} is not the next flashcard in session {sid}"
            )
        return self.store.increment_reviewed(sid)

    def restore_reviewed(self, session_id, card_id) -> None:
        """
        Undo a `record_reviewed` whose review could not be saved.

        The card goes back to the head of the queue and the reviewed counter
        drops by one. Nothing happens if the session queue is gone.
        """
        sid = str(session_id)
        if self.store.restore_head(sid, str(card_id)):
            logger.info(f"Session {sid}: flashcard {card_id} returned to the head of the queue")
        else:
            logger.warning(f"Session {sid}: queue no longer exists, flashcard {card_id} not restored")

    def is_active(self, session_id) -> bool:
        """True while a queue (possibly empty) is held for the session."""
        return self.store.exists(str(session_id))

    def remaining(self, session_id) -> int:
        return self.store.length(str(session_id))

    def reviewed(self, session_id) -> int:
        return self.store.reviewed(str(session_id))

    def dispose(self, session_id) -> None:
        """Drop the queue and counter; safe to call for unknown sessions."""
        self.store.delete(str(session_id))


def build_queue_store(backend: str) -> QueueStore:
    """Create the queue store for the configured backend ('memory' or 'redis')."""
    backend = backend.lower()
    if backend == "memory":
        return InMemoryQueueStore()
    if backend == "redis":
        client = redis.Redis.from_url(settings.redis_url, decode_responses=True)
        return RedisQueueStore(client, ttl_seconds=settings.session_queue_ttl_seconds)
    raise ValueError(f"Unknown session queue backend: {backend}")


@lru_cache
def get_session_queue_manager() -> SessionQueueManager:
    """Dependency returning the process-wide session queue manager."""
    logger.info(f"Using '{settings.session_queue_backend}' session queue backend")
    return SessionQueueManager(build_queue_store(settings.session_queue_backend))
