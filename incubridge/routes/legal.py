"""Legal FAQ chatbot endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from incubridge.errors import ValidationFailed
from incubridge.schemas import (
    ChatHistoryResponse,
    ChatMessageOut,
    ChatReply,
    ChatRequest,
    MessageResponse,
)
from incubridge.services.chat_store import ChatService, get_chat_service

router = APIRouter(prefix="/api/legal", tags=["legal"])


@router.post("/chat", response_model=ChatReply)
async def chat(
    req: ChatRequest,
    service: ChatService = Depends(get_chat_service),
):
    message = req.message.strip()
    if not message:
        raise ValidationFailed("Message is required")
    turn = service.chat(req.user_id, message)
    return ChatReply(
        user_message=message,
        bot_response=turn.reply,
        topic=turn.topic,
        timestamp=turn.timestamp,
    )


@router.get("/chat-history/{user_id}", response_model=ChatHistoryResponse)
async def chat_history(
    user_id: str,
    service: ChatService = Depends(get_chat_service),
):
    history = service.get_history(user_id)
    return ChatHistoryResponse(history=[ChatMessageOut.model_validate(m) for m in history])


@router.delete("/chat-history/{user_id}", response_model=MessageResponse)
async def clear_chat_history(
    user_id: str,
    service: ChatService = Depends(get_chat_service),
):
    service.clear_history(user_id)
    return MessageResponse(message="Chat history cleared")
