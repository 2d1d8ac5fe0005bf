"""
In-process state for the legal chatbot.

ChatHistoryStore          -- per-user conversation, TTL + size bounded
SlidingWindowRateLimiter  -- at most N messages per window per key
ChatService               -- owns both, one instance per process

Nothing here is durable: a restart forgets all conversations. The
maintenance scheduler calls ``ChatService.purge()`` periodically; lookups also
drop expired entries lazily.
"""

from __future__ import annotations

import datetime as dt
import logging
import threading
import time
from collections import OrderedDict, deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, List, Optional

from incubridge import config
from incubridge.errors import RateLimited
from incubridge.services import legal_chatbot

logger = logging.getLogger(__name__)


@dataclass
class ChatMessage:
    role: str  # "user" | "bot"
    content: str
    timestamp: dt.datetime


@dataclass
class _Conversation:
    last_accessed: float
    messages: Deque[ChatMessage] = field(default_factory=deque)


class ChatHistoryStore:
    """
    Thread-safe conversation store.
    Conversations expire after ``ttl_seconds`` without activity; each keeps
    its last ``max_messages`` messages; at most ``max_users`` are held and the
    least recently used one is evicted first.
    """

    def __init__(
        self,
        ttl_seconds: float,
        max_messages: int,
        max_users: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl = ttl_seconds
        self._max_messages = max_messages
        self._max_users = max_users
        self._clock = clock
        self._conversations: "OrderedDict[str, _Conversation]" = OrderedDict()
        self._lock = threading.RLock()

    def append(self, user_id: str, *messages: ChatMessage) -> None:
        now = self._clock()
        with self._lock:
            conv = self._live(user_id, now)
            if conv is None:
                conv = _Conversation(last_accessed=now, messages=deque(maxlen=self._max_messages))
                self._conversations[user_id] = conv
            conv.messages.extend(messages)
            conv.last_accessed = now
            self._conversations.move_to_end(user_id)
            while len(self._conversations) > self._max_users:
                evicted, _ = self._conversations.popitem(last=False)
                logger.debug("Chat history for %s evicted (store full)", evicted)

    def get(self, user_id: str) -> List[ChatMessage]:
        with self._lock:
            conv = self._live(user_id, self._clock())
            return list(conv.messages) if conv else []

    def clear(self, user_id: str) -> bool:
        with self._lock:
            return self._conversations.pop(user_id, None) is not None

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [
                uid for uid, conv in self._conversations.items()
                if now - conv.last_accessed > self._ttl
            ]
            for uid in expired:
                del self._conversations[uid]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._conversations)

    def _live(self, user_id: str, now: float) -> Optional[_Conversation]:
        """Conversation for *user_id* unless expired (called with lock held)."""
        conv = self._conversations.get(user_id)
        if conv is None:
            return None
        if now - conv.last_accessed > self._ttl:
            del self._conversations[user_id]
            return None
        return conv


class SlidingWindowRateLimiter:
    """At most ``limit`` events per ``window_seconds`` for each key."""

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._limit = limit
        self._window = window_seconds
        self._clock = clock
        self._events: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> bool:
        """Record an event for *key*; False (and nothing recorded) if over the limit."""
        now = self._clock()
        with self._lock:
            events = self._events.setdefault(key, deque())
            self._trim(events, now)
            if len(events) >= self._limit:
                return False
            events.append(now)
            return True

    def retry_after(self, key: str) -> float:
        """Seconds until *key* may send again (0 if it may send now)."""
        now = self._clock()
        with self._lock:
            events = self._events.get(key)
            if not events:
                return 0.0
            self._trim(events, now)
            if len(events) < self._limit:
                return 0.0
            return max(0.0, events[0] + self._window - now)

    def purge_idle(self) -> int:
        now = self._clock()
        with self._lock:
            idle = []
            for key, events in self._events.items():
                self._trim(events, now)
                if not events:
                    idle.append(key)
            for key in idle:
                del self._events[key]
        return len(idle)

    def _trim(self, events: Deque[float], now: float) -> None:
        while events and now - events[0] >= self._window:
            events.popleft()


@dataclass
class ChatTurn:
    topic: Optional[str]
    reply: str
    timestamp: dt.datetime


class ChatService:
    """Legal chatbot front: rate limit, answer, remember."""

    def __init__(
        self,
        history: Optional[ChatHistoryStore] = None,
        limiter: Optional[SlidingWindowRateLimiter] = None,
    ):
        self.history = history or ChatHistoryStore(
            ttl_seconds=config.CHAT_HISTORY_TTL_MINUTES * 60,
            max_messages=config.CHAT_HISTORY_MAX_MESSAGES,
            max_users=config.CHAT_HISTORY_MAX_USERS,
        )
        self.limiter = limiter or SlidingWindowRateLimiter(
            limit=config.CHAT_RATE_LIMIT,
            window_seconds=config.CHAT_RATE_WINDOW_SECONDS,
        )

    def chat(self, user_id: str, message: str) -> ChatTurn:
        if not self.limiter.hit(user_id):
            retry = round(self.limiter.retry_after(user_id), 1)
            logger.warning("Chat rate limit hit for %s (retry in %.1fs)", user_id, retry)
            raise RateLimited(
                "Too many messages, please slow down",
                {"retry_after_seconds": retry},
            )

        topic, reply = legal_chatbot.answer(message)
        now = dt.datetime.now(dt.timezone.utc)
        self.history.append(
            user_id,
            ChatMessage(role="user", content=message, timestamp=now),
            ChatMessage(role="bot", content=reply, timestamp=now),
        )
        return ChatTurn(topic=topic, reply=reply, timestamp=now)

    def get_history(self, user_id: str) -> List[ChatMessage]:
        return self.history.get(user_id)

    def clear_history(self, user_id: str) -> bool:
        return self.history.clear(user_id)

    def purge(self) -> dict:
        purged = {
            "conversations": self.history.purge_expired(),
            "rate_limit_keys": self.limiter.purge_idle(),
        }
        if any(purged.values()):
            logger.info("Purged expired chat state: %s", purged)
        return purged


# ---------------------------------------------------------------------------
# Process-wide instance
# ---------------------------------------------------------------------------

_chat_service: Optional[ChatService] = None
_chat_service_lock = threading.Lock()


def get_chat_service() -> ChatService:
    global _chat_service
    with _chat_service_lock:
        if _chat_service is None:
            _chat_service = ChatService()
        return _chat_service


def reset_chat_service() -> None:
    """Drop the process-wide instance (app shutdown, tests)."""
    global _chat_service
    with _chat_service_lock:
        _chat_service = None
