"""Transcript reads for registered threads."""

import logging

from openai import OpenAIError
from openai.types.beta.threads import Message

from pdfchat.assistant.errors import ThreadNotFound, UpstreamUnavailable
from pdfchat.assistant.gateway import AssistantGateway
from pdfchat.assistant.registry import SessionRegistry

logger = logging.getLogger(__name__)


class HistoryReader:
    """Returns a thread's messages oldest first, exactly as the gateway reports them."""

    def __init__(self, registry: SessionRegistry, gateway: AssistantGateway) -> None:
        self._registry = registry
        self._gateway = gateway

    async def history(self, thread_id: str) -> list[Message]:
        if not self._registry.is_live(thread_id):
            raise ThreadNotFound(thread_id)
        try:
            messages = await self._gateway.list_messages(thread_id, order="asc")
        except OpenAIError as e:
            logger.error(f"Failed to fetch history for thread {thread_id}: {e}")
            raise UpstreamUnavailable.from_exception(e, "Failed to fetch message history") from e
        logger.info(f"Fetched {len(messages)} messages for thread {thread_id}")
        return messages
