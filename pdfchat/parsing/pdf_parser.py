"""PDF validation using pypdf.

Checks that an upload is a readable PDF before it is staged and sent to the
assistant's file store.
"""

import io
import logging

from pydantic import BaseModel, Field
from pypdf import PdfReader
from pypdf.errors import PdfReadError

logger = logging.getLogger(__name__)

PDF_MAGIC_BYTES = b"%PDF"
DEFAULT_MAX_FILE_SIZE = 50 * 1024 * 1024  # 50MB


class PDFInfo(BaseModel):
    """Summary of a validated PDF.

    Attributes:
        pages: Total number of pages in the document.
        metadata: Document metadata (title, author, etc.).
    """

    pages: int = Field(ge=1)
    metadata: dict[str, str]


class PDFParseError(Exception):
    """Raised when an upload is not a readable PDF."""


def _validate_pdf_bytes(file_content: bytes, max_size: int) -> None:
    if not file_content:
        raise PDFParseError("Empty file provided")

    if len(file_content) > max_size:
        raise PDFParseError(
            f"File size ({len(file_content) / (1024 * 1024):.1f}MB) exceeds maximum "
            f"allowed ({max_size / (1024 * 1024):.0f}MB)"
        )

    if not file_content.lstrip()[:10].startswith(PDF_MAGIC_BYTES):
        raise PDFParseError("Invalid PDF: file does not start with PDF header")


def _read_metadata(reader: PdfReader) -> dict[str, str]:
    fields = {"/Title": "title", "/Author": "author", "/Subject": "subject"}
    metadata: dict[str, str] = {}
    try:
        if reader.metadata:
            for key, name in fields.items():
                value = reader.metadata.get(key)
                if value:
                    metadata[name] = str(value)
    except Exception as e:
        logger.warning(f"Failed to extract some metadata: {e}")
    return metadata


def inspect_pdf(file_content: bytes, max_size: int = DEFAULT_MAX_FILE_SIZE) -> PDFInfo:
    """Validate PDF bytes and report page count and metadata.

    Args:
        file_content: Raw bytes of the PDF file.
        max_size: Largest accepted size in bytes.

    Returns:
        PDFInfo for the document.

    Raises:
        PDFParseError: If the file is empty, too large, not a PDF, corrupt, or has no pages.
    """
    _validate_pdf_bytes(file_content, max_size)

    try:
        reader = PdfReader(io.BytesIO(file_content))
        pages = len(reader.pages)
    except PdfReadError as e:
        raise PDFParseError(f"Corrupt or invalid PDF: {e}") from e
    except Exception as e:
        raise PDFParseError(f"Failed to read PDF: {e}") from e

    if pages == 0:
        raise PDFParseError("PDF contains no pages")

    return PDFInfo(pages=pages, metadata=_read_metadata(reader))
