"""Chat session endpoints: start a thread, send a turn, read history."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status

from pdfchat.api.dependencies import get_chat_service
from pdfchat.assistant.errors import ChatServiceError
from pdfchat.assistant.service import ChatService
from pdfchat.models.schemas import (
    ChatRequest,
    ChatResponse,
    HistoryResponse,
    StartChatResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

Service = Annotated[ChatService, Depends(get_chat_service)]


@router.post(
    "/start-chat",
    response_model=StartChatResponse,
    status_code=status.HTTP_201_CREATED,
)
async def start_chat(service: Service) -> StartChatResponse:
    """Start a new chat thread with the assistant."""
    try:
        thread_id = await service.start_session()
    except ChatServiceError as e:
        raise e.with_summary("Failed to start a new chat thread.")
    return StartChatResponse(thread_id=thread_id, message="New chat thread started.")


@router.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest, service: Service) -> ChatResponse:
    """Send a message (optionally with an uploaded file) and wait for the reply.

    The request is held open until the assistant's run finishes.

    Raises:
        400: threadId or message missing or not a string.
        404: Unknown threadId.
        5xx: Assistant run or gateway failure.
    """
    logger.info(f"Chat turn on thread {request.thread_id}")
    reply = await service.converse(request.thread_id, request.message, request.file_id)
    return ChatResponse(response=reply)


@router.get("/history/{session_id}", response_model=HistoryResponse)
async def history(session_id: str, service: Service) -> HistoryResponse:
    """Return every message of a thread, oldest first."""
    messages = await service.history(session_id)
    return HistoryResponse(history=[m.model_dump(mode="json") for m in messages])
