"""Assistant-side chat session and attachment lifecycle.

Wraps the OpenAI Assistants API behind a synchronous request/response
contract.

Responsibilities:
    - Thread registration and liveness checks
    - Staging and uploading PDF attachments for file search
    - Appending user turns, polling runs, and reading back replies
    - Reading full thread transcripts

Maintains clean separation from the HTTP layer.
"""

from pdfchat.assistant.config import AssistantConfig, GatewayConfig, get_assistant_config
from pdfchat.assistant.service import ChatService, build_chat_service

__all__ = [
    "AssistantConfig",
    "ChatService",
    "GatewayConfig",
    "build_chat_service",
    "get_assistant_config",
]
