"""Pydantic models for API requests and responses.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - StartChatResponse: New thread identifier
    - ChatRequest: Incoming chat turn with optional attachment
    - ChatResponse: Assistant reply text
    - HistoryResponse: Thread transcript
    - PDFUploadResponse: Stored file reference
    - ErrorResponse: Error body
"""

from pdfchat.models.schemas import (
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    HistoryResponse,
    PDFUploadResponse,
    StartChatResponse,
)

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "ErrorResponse",
    "HistoryResponse",
    "PDFUploadResponse",
    "StartChatResponse",
]
