import datetime as dt

import pytest

from incubridge.errors import RateLimited
from incubridge.services.chat_store import (
    ChatHistoryStore,
    ChatMessage,
    ChatService,
    SlidingWindowRateLimiter,
)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def _msg(text, role="user"):
    return ChatMessage(role=role, content=text, timestamp=dt.datetime(2024, 1, 1))


@pytest.fixture
def clock():
    return FakeClock()


def test_history_keeps_messages_in_order(clock):
    store = ChatHistoryStore(ttl_seconds=60, max_messages=10, max_users=10, clock=clock)
    store.append("u1", _msg("a"), _msg("b", role="bot"))
    store.append("u1", _msg("c"))

    assert [m.content for m in store.get("u1")] == ["a", "b", "c"]
    assert store.get("nobody") == []


def test_history_is_capped_per_user(clock):
    store = ChatHistoryStore(ttl_seconds=60, max_messages=3, max_users=10, clock=clock)
    for i in range(5):
        store.append("u1", _msg(str(i)))

    assert [m.content for m in store.get("u1")] == ["2", "3", "4"]


def test_history_expires_after_inactivity(clock):
    store = ChatHistoryStore(ttl_seconds=60, max_messages=10, max_users=10, clock=clock)
    store.append("u1", _msg("hello"))

    clock.advance(59)
    assert len(store.get("u1")) == 1
    # reading does not count as activity
    clock.advance(2)
    assert store.get("u1") == []
    assert len(store) == 0


def test_purge_expired_counts_removed_conversations(clock):
    store = ChatHistoryStore(ttl_seconds=60, max_messages=10, max_users=10, clock=clock)
    store.append("old", _msg("x"))
    clock.advance(30)
    store.append("new", _msg("y"))
    clock.advance(45)

    assert store.purge_expired() == 1
    assert store.get("new") != []


def test_least_recently_used_user_is_evicted(clock):
    store = ChatHistoryStore(ttl_seconds=60, max_messages=10, max_users=2, clock=clock)
    store.append("a", _msg("1"))
    store.append("b", _msg("2"))
    store.append("a", _msg("3"))
    store.append("c", _msg("4"))

    assert store.get("b") == []
    assert len(store.get("a")) == 2
    assert len(store) == 2


def test_clear(clock):
    store = ChatHistoryStore(ttl_seconds=60, max_messages=10, max_users=10, clock=clock)
    store.append("u1", _msg("a"))

    assert store.clear("u1") is True
    assert store.clear("u1") is False
    assert store.get("u1") == []


def test_rate_limiter_sliding_window(clock):
    limiter = SlidingWindowRateLimiter(limit=2, window_seconds=10, clock=clock)

    assert limiter.hit("k")
    clock.advance(4)
    assert limiter.hit("k")
    assert not limiter.hit("k")
    assert limiter.retry_after("k") == pytest.approx(6)

    clock.advance(6)
    assert limiter.hit("k")
    assert limiter.hit("other")


def test_rate_limiter_purges_idle_keys(clock):
    limiter = SlidingWindowRateLimiter(limit=2, window_seconds=10, clock=clock)
    limiter.hit("a")
    clock.advance(5)
    limiter.hit("b")
    clock.advance(6)

    assert limiter.purge_idle() == 1
    assert limiter.retry_after("a") == 0.0


def test_chat_service_answers_and_records(clock):
    service = ChatService(
        history=ChatHistoryStore(ttl_seconds=60, max_messages=10, max_users=10, clock=clock),
        limiter=SlidingWindowRateLimiter(limit=5, window_seconds=60, clock=clock),
    )
    turn = service.chat("u1", "How do I file a trademark?")

    assert turn.topic == "ip"
    history = service.get_history("u1")
    assert [(m.role, m.content) for m in history] == [
        ("user", "How do I file a trademark?"),
        ("bot", turn.reply),
    ]


def test_chat_service_rate_limit(clock):
    service = ChatService(
        history=ChatHistoryStore(ttl_seconds=60, max_messages=10, max_users=10, clock=clock),
        limiter=SlidingWindowRateLimiter(limit=2, window_seconds=60, clock=clock),
    )
    service.chat("u1", "hi")
    service.chat("u1", "hi")

    with pytest.raises(RateLimited) as exc:
        service.chat("u1", "hi")
    assert exc.value.details["retry_after_seconds"] == 60.0
    # the rejected message is not stored
    assert len(service.get_history("u1")) == 4

    clock.advance(61)
    service.chat("u1", "hi")
    purged = service.purge()
    assert purged["rate_limit_keys"] == 0
