from incubridge.app import app
from incubridge.services.chat_store import (
    ChatHistoryStore,
    ChatService,
    SlidingWindowRateLimiter,
    get_chat_service,
)


async def test_chat_roundtrip(client):
    resp = await client.post(
        "/api/legal/chat", json={"message": "  How do I protect my trademark? ", "userId": "u1"}
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["userMessage"] == "How do I protect my trademark?"
    assert body["topic"] == "ip"
    assert "Trademarks" in body["botResponse"]

    history = (await client.get("/api/legal/chat-history/u1")).json()["history"]
    assert [m["role"] for m in history] == ["user", "bot"]
    assert history[1]["content"] == body["botResponse"]

    resp = await client.delete("/api/legal/chat-history/u1")
    assert resp.status_code == 200
    assert (await client.get("/api/legal/chat-history/u1")).json()["history"] == []


async def test_blank_message_is_rejected(client):
    resp = await client.post("/api/legal/chat", json={"message": "   ", "userId": "u1"})
    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "Message is required"


async def test_chat_rate_limit_returns_429(client):
    service = ChatService(
        history=ChatHistoryStore(ttl_seconds=60, max_messages=10, max_users=10),
        limiter=SlidingWindowRateLimiter(limit=2, window_seconds=60),
    )
    app.dependency_overrides[get_chat_service] = lambda: service

    for _ in range(2):
        resp = await client.post("/api/legal/chat", json={"message": "hello", "userId": "u1"})
        assert resp.status_code == 200

    resp = await client.post("/api/legal/chat", json={"message": "hello", "userId": "u1"})
    assert resp.status_code == 429
    error = resp.json()["error"]
    assert error["kind"] == "rate_limited"
    assert error["details"]["retry_after_seconds"] > 0

    # other users are unaffected
    resp = await client.post("/api/legal/chat", json={"message": "hello", "userId": "u2"})
    assert resp.status_code == 200
