"""FastAPI dependencies resolving the process-wide chat service."""

from fastapi import Request

from pdfchat.assistant.service import ChatService


def get_chat_service(request: Request) -> ChatService:
    """FastAPI dependency returning the process-wide chat service."""
    return request.app.state.chat_service
