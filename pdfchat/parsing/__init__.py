"""PDF validation utilities for uploads.

Confirms that uploaded files are readable PDFs before they are forwarded to
the assistant's document store, and reports page count and metadata.
"""

from pdfchat.parsing.pdf_parser import PDFInfo, PDFParseError, inspect_pdf

__all__ = ["PDFInfo", "PDFParseError", "inspect_pdf"]
