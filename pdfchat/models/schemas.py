"""Request and response models for the chat API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    """Base for payloads exchanged with the browser in camelCase."""

    model_config = ConfigDict(populate_by_name=True)


class StartChatResponse(CamelModel):
    """Response after a new chat thread is created.

    Attributes:
        thread_id: Identifier to send with subsequent chat requests.
        message: Human-readable confirmation.
    """

    thread_id: str = Field(..., alias="threadId")
    message: str


class ChatRequest(CamelModel):
    """Request payload for the chat endpoint.

    Attributes:
        thread_id: Thread returned by /start-chat.
        message: User's question or prompt.
        file_id: Optional uploaded file to search while answering.
    """

    thread_id: str = Field(..., alias="threadId", min_length=1)
    message: str = Field(..., min_length=1)
    file_id: str | None = Field(None, alias="fileId")


class ChatResponse(BaseModel):
    """The assistant's reply to one chat turn."""

    response: str


class HistoryResponse(BaseModel):
    """Full transcript of a thread, oldest message first.

    Messages are passed through in the assistant API's own JSON shape.
    """

    history: list[dict[str, Any]]


class PDFUploadResponse(CamelModel):
    """Response after a PDF is stored for document search.

    Attributes:
        message: Human-readable confirmation.
        file_id: Gateway file id to pass as fileId in chat requests.
        filename: Original name of the uploaded file.
        pages: Number of pages in the document.
    """

    message: str
    file_id: str = Field(..., alias="fileId")
    filename: str
    pages: int


class ErrorResponse(BaseModel):
    """Error body returned for every failed API request."""

    error: str
    message: str | None = None
