"""PDF upload endpoint.

Validates the upload, stages it on disk and forwards it to the assistant's
file store for document search.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile

from pdfchat.api.dependencies import get_chat_service
from pdfchat.assistant.errors import ChatServiceError, InvalidRequest, PayloadTooLarge
from pdfchat.assistant.service import ChatService
from pdfchat.models.schemas import PDFUploadResponse
from pdfchat.parsing.pdf_parser import PDFParseError, inspect_pdf

logger = logging.getLogger(__name__)

router = APIRouter(tags=["upload"])


def _validate_file_extension(filename: str | None) -> str:
    """Validate that file has .pdf extension.

    Raises:
        InvalidRequest: 400 if the name is missing or not a PDF.
    """
    if not filename:
        raise InvalidRequest("Filename is required")

    if not filename.lower().endswith(".pdf"):
        raise InvalidRequest("Only PDF files are accepted")

    return filename


async def _read_and_validate_size(file: UploadFile, max_size: int) -> bytes:
    """Read file content and validate size.

    Raises:
        PayloadTooLarge: 413 if file exceeds the size limit.
    """
    content = await file.read()

    if len(content) > max_size:
        raise PayloadTooLarge(
            f"File size ({len(content) / (1024 * 1024):.1f}MB) exceeds maximum allowed "
            f"({max_size / (1024 * 1024):.0f}MB)"
        )

    return content


@router.post("/upload-pdf", response_model=PDFUploadResponse)
async def upload_pdf(
    service: Annotated[ChatService, Depends(get_chat_service)],
    file: Annotated[UploadFile | None, File()] = None,
) -> PDFUploadResponse:
    """Upload a PDF for the assistant to search.

    Args:
        file: The uploaded PDF file (multipart/form-data field "file").

    Returns:
        PDFUploadResponse with the file id to pass to /chat.

    Raises:
        400: No file, not a PDF, or unreadable PDF.
        413: File exceeds the configured limit.
        5xx: Staging or gateway failure.
    """
    if file is None:
        logger.info("Upload request without a file")
        raise InvalidRequest("No file uploaded")

    filename = _validate_file_extension(file.filename)
    max_size = service.config.max_upload_size
    content = await _read_and_validate_size(file, max_size)

    try:
        pdf_info = inspect_pdf(content, max_size=max_size)
    except PDFParseError as e:
        logger.warning(f"PDF validation failed for {filename}: {e}")
        raise InvalidRequest(str(e)) from e

    try:
        attachment = await service.upload(content, filename)
    except ChatServiceError as e:
        raise e.with_summary("Failed to process the file upload.")
    logger.info(f"Stored {filename} ({pdf_info.pages} pages) as {attachment.file_id}")

    return PDFUploadResponse(
        message="File uploaded and registered with the assistant.",
        file_id=attachment.file_id,
        filename=filename,
        pages=pdf_info.pages,
    )
