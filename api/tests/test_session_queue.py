import pytest

from app.core.exceptions import DuplicateSession, NotQueueHead
from app.services.session_queue import (
    InMemoryQueueStore,
    RedisQueueStore,
    SessionQueueManager,
    build_queue_store,
)


class FakeRedis:
    """Just enough of redis.Redis (decode_responses=True) for RedisQueueStore."""

    def __init__(self):
        self.data = {}
        self.expirations = {}

    def set(self, key, value, nx=False, ex=None):
        if nx and key in self.data:
            return None
        self.data[key] = str(value)
        if ex is not None:
            self.expirations[key] = ex
        return True

    def get(self, key):
        return self.data.get(key)

    def incr(self, key):
        self.data[key] = str(int(self.data.get(key, 0)) + 1)
        return int(self.data[key])

    def exists(self, key):
        return int(key in self.data)

    def rpush(self, key, *values):
        self.data.setdefault(key, []).extend(values)
        return len(self.data[key])

    def expire(self, key, seconds):
        self.expirations[key] = seconds
        return True

    def lindex(self, key, index):
        values = self.data.get(key, [])
        return values[index] if -len(values) <= index < len(values) else None

    def lpop(self, key):
        values = self.data.get(key)
        if not values:
            return None
        value = values.pop(0)
        if not values:
            del self.data[key]
        return value

    def llen(self, key):
        return len(self.data.get(key, []))

    def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    def register_script(self, script):
        """Run the store's Lua scripts as single Python steps, as Redis runs them atomically."""
        handlers = {
            RedisQueueStore.REMOVE_HEAD_IF_SCRIPT: self._remove_head_if,
            RedisQueueStore.RESTORE_HEAD_SCRIPT: self._restore_head,
        }
        handler = handlers[script]
        return lambda keys=(), args=(), client=None: handler(list(keys), list(args))

    def _remove_head_if(self, keys, args):
        if self.lindex(keys[0], 0) != args[0]:
            return 0
        self.lpop(keys[0])
        return 1

    def _restore_head(self, keys, args):
        queue_key, reviewed_key = keys
        if reviewed_key not in self.data:
            return 0
        self.data.setdefault(queue_key, []).insert(0, str(args[0]))
        self.expirations[queue_key] = int(args[1])
        if int(self.data[reviewed_key]) > 0:
            self.data[reviewed_key] = str(int(self.data[reviewed_key]) - 1)
        return 1


@pytest.fixture(params=["memory", "redis"])
def manager(request):
    if request.param == "memory":
        return SessionQueueManager(InMemoryQueueStore())
    return SessionQueueManager(RedisQueueStore(FakeRedis(), ttl_seconds=60))


CARDS = {"a": "card A", "b": "card B", "c": "card C"}


def load(card_id):
    return CARDS.get(card_id)


def test_seed_and_walk_queue_in_order(manager):
    manager.seed("s1", ["a", "b", "c"])
    assert manager.is_active("s1")
    assert manager.remaining("s1") == 3

    seen = []
    while True:
        card = manager.peek_next("s1", load)
        if card is None:
            break
        seen.append(card)
        manager.record_reviewed("s1", card[-1].lower())

    assert seen == ["card A", "card B", "card C"]
    assert manager.reviewed("s1") == 3
    assert manager.remaining("s1") == 0


def test_peek_does_not_consume(manager):
    manager.seed("s1", ["a", "b"])
    assert manager.peek_next("s1", load) == "card A"
    assert manager.peek_next("s1", load) == "card A"
    assert manager.remaining("s1") == 2


def test_seed_twice_raises(manager):
    manager.seed("s1", ["a"])
    with pytest.raises(DuplicateSession):
        manager.seed("s1", ["b"])
    assert manager.peek_next("s1", load) == "card A"


def test_record_out_of_order_leaves_queue_unchanged(manager):
    manager.seed("s1", ["a", "b"])
    with pytest.raises(NotQueueHead):
        manager.record_reviewed("s1", "b")
    assert manager.remaining("s1") == 2
    assert manager.reviewed("s1") == 0
    assert manager.peek_next("s1", load) == "card A"


def test_record_same_card_twice_fails(manager):
    manager.seed("s1", ["a", "b"])
    assert manager.record_reviewed("s1", "a") == 1
    with pytest.raises(NotQueueHead):
        manager.record_reviewed("s1", "a")
    assert manager.reviewed("s1") == 1


def test_missing_cards_are_skipped(manager):
    manager.seed("s1", ["gone", "a", "also-gone"])
    assert manager.peek_next("s1", load) == "card A"
    assert manager.remaining("s1") == 2
    manager.record_reviewed("s1", "a")
    assert manager.peek_next("s1", load) is None
    assert manager.remaining("s1") == 0


def test_all_cards_missing_completes(manager):
    manager.seed("s1", ["x", "y"])
    assert manager.peek_next("s1", load) is None
    assert manager.reviewed("s1") == 0


def test_unknown_session_behaves_as_empty(manager):
    assert not manager.is_active("nope")
    assert manager.peek_next("nope", load) is None
    assert manager.remaining("nope") == 0
    assert manager.reviewed("nope") == 0
    with pytest.raises(NotQueueHead):
        manager.record_reviewed("nope", "a")


def test_dispose_removes_queue_and_is_idempotent(manager):
    manager.seed("s1", ["a"])
    manager.dispose("s1")
    manager.dispose("s1")
    assert not manager.is_active("s1")
    assert manager.peek_next("s1", load) is None


def test_sessions_are_isolated(manager):
    manager.seed("s1", ["a"])
    manager.seed("s2", ["b"])
    manager.record_reviewed("s1", "a")
    assert manager.peek_next("s2", load) == "card B"
    assert manager.reviewed("s2") == 0


def test_seed_accepts_non_string_ids():
    manager = SessionQueueManager(InMemoryQueueStore())
    manager.seed(42, [1, 2])
    assert manager.peek_next(42, lambda card_id: card_id) == "1"
    assert manager.record_reviewed(42, 1) == 1


def test_redis_keys_expire():
    client = FakeRedis()
    store = RedisQueueStore(client, ttl_seconds=120)
    assert store.create("s1", ["a"])
    assert client.expirations["learning_session:s1:queue"] == 120
    assert client.expirations["learning_session:s1:reviewed"] == 120
    assert not store.create("s1", ["b"])


def test_build_queue_store():
    assert isinstance(build_queue_store("memory"), InMemoryQueueStore)
    assert isinstance(build_queue_store("MEMORY"), InMemoryQueueStore)
    with pytest.raises(ValueError):
        build_queue_store("carrier-pigeon")


@pytest.fixture(params=["memory", "redis"])
def two_instances(request):
    """Two managers sharing one backing store, like two API processes."""
    if request.param == "memory":
        store = InMemoryQueueStore()
        return SessionQueueManager(store), SessionQueueManager(store)
    client = FakeRedis()
    return (
        SessionQueueManager(RedisQueueStore(client, ttl_seconds=60)),
        SessionQueueManager(RedisQueueStore(client, ttl_seconds=60)),
    )


def test_concurrent_review_of_same_head_has_one_winner(two_instances):
    first, second = two_instances
    first.seed("s1", ["a", "b", "c"])

    # Both instances show card A, the first one records it
    assert second.peek_next("s1", load) == "card A"
    assert first.record_reviewed("s1", "a") == 1

    with pytest.raises(NotQueueHead):
        second.record_reviewed("s1", "a")

    assert second.remaining("s1") == 2
    assert second.reviewed("s1") == 1
    assert second.peek_next("s1", load) == "card B"
    assert first.peek_next("s1", load) == "card B"


def test_concurrent_skip_of_missing_card_keeps_next_card(two_instances):
    first, second = two_instances
    first.seed("s1", ["gone", "a", "b"])

    def load_while_other_instance_skips(card_id):
        # The other instance drops the missing card while this one is loading it
        if card_id == "gone":
            assert first.peek_next("s1", load) == "card A"
        return load(card_id)

    assert second.peek_next("s1", load_while_other_instance_skips) == "card A"
    assert second.remaining("s1") == 2
    assert first.record_reviewed("s1", "a") == 1


def test_restore_returns_card_to_head(manager):
    manager.seed("s1", ["a", "b"])
    manager.record_reviewed("s1", "a")

    manager.restore_reviewed("s1", "a")

    assert manager.reviewed("s1") == 0
    assert manager.remaining("s1") == 2
    assert manager.peek_next("s1", load) == "card A"
    assert manager.record_reviewed("s1", "a") == 1


def test_restore_after_dispose_does_nothing(manager):
    manager.seed("s1", ["a"])
    manager.record_reviewed("s1", "a")
    manager.dispose("s1")

    manager.restore_reviewed("s1", "a")

    assert not manager.is_active("s1")
    assert manager.remaining("s1") == 0


def test_redis_review_uses_atomic_script():
    client = FakeRedis()
    store = RedisQueueStore(client, ttl_seconds=60)
    store.create("s1", ["a", "b"])

    assert not store.remove_head_if("s1", "b")
    assert client.data["learning_session:s1:queue"] == ["a", "b"]
    assert store.remove_head_if("s1", "a")
    assert client.data["learning_session:s1:queue"] == ["b"]
    assert not store.remove_head_if("unknown", "a")
