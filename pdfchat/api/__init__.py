"""FastAPI endpoints for PDF chat.

HTTP routes with async request handling, all mounted under /api.

Endpoints:
    - POST /api/start-chat: Start a new assistant thread
    - POST /api/chat: Send a chat turn and wait for the reply
    - GET /api/history/{id}: Thread transcript
    - POST /api/upload-pdf: Store a PDF for document search
    - GET /health: Service health status
"""

from pdfchat.api.app import create_app

__all__ = ["create_app"]
