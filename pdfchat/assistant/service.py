"""Chat service composition.

ChatService owns the session registry and the components that depend on it.
It is built once per process and handed to request handlers, so tests can
substitute a fake gateway and start with an empty registry.
"""

import asyncio
import logging
from openai.types.beta.threads import Message

from pdfchat.assistant.config import AssistantConfig, get_assistant_config
from pdfchat.assistant.conversation import ConversationOrchestrator
from pdfchat.assistant.gateway import AssistantGateway
from pdfchat.assistant.history import HistoryReader
from pdfchat.assistant.registry import SessionRegistry
from pdfchat.assistant.runs import RunPoller, Sleep
from pdfchat.assistant.uploader import AttachmentRef, AttachmentUploader

logger = logging.getLogger(__name__)


class ChatService:
    """Facade over session, attachment, conversation and history operations."""

    def __init__(
        self,
        gateway: AssistantGateway,
        config: AssistantConfig,
        sleep: Sleep | None = None,
    ) -> None:
        self.config = config
        self.registry = SessionRegistry(gateway)
        self.uploader = AttachmentUploader(gateway)
        poller = RunPoller(
            gateway,
            interval=config.poll_interval,
            timeout=config.run_timeout,
            sleep=sleep or asyncio.sleep,
        )
        self.conversations = ConversationOrchestrator(
            self.registry,
            gateway,
            poller,
            config.assistant_id,
            serialize_turns=config.serialize_turns,
        )
        self.history_reader = HistoryReader(self.registry, gateway)

    async def start_session(self) -> str:
        return await self.registry.start_session()

    def is_live(self, thread_id: str) -> bool:
        return self.registry.is_live(thread_id)

    async def upload(self, content: bytes, original_name: str) -> AttachmentRef:
        """Stage received bytes and forward them to the gateway file store."""
        return await self.uploader.stage_and_upload(self.config.upload_dir, original_name, content)

    async def converse(self, thread_id: str, user_text: str, attachment_id: str | None = None) -> str:
        return await self.conversations.converse(thread_id, user_text, attachment_id)

    async def history(self, thread_id: str) -> list[Message]:
        return await self.history_reader.history(thread_id)


def build_chat_service(config: AssistantConfig | None = None) -> ChatService:
    """Create the process-wide chat service from configuration.

    Raises:
        ValidationError: If required configuration is missing.
    """
    config = config or get_assistant_config()
    logger.info(f"Using assistant {config.assistant_id}, staging uploads in {config.upload_dir}")
    return ChatService(AssistantGateway.from_config(config), config)
