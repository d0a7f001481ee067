"""Thin async wrapper around the OpenAI Assistants API.

Exposes only the thread, message, run and file operations the chat service
relies on. Errors from the OpenAI client are not caught here; the services
wrap them into the chat error taxonomy.
"""

import logging
from typing import IO, Any

from openai import AsyncOpenAI
from openai.types import FileObject
from openai.types.beta import Assistant
from openai.types.beta.threads import Message, Run

from pdfchat.assistant.config import GatewayConfig

logger = logging.getLogger(__name__)

# File purpose that makes uploads searchable by the file_search tool
DOCUMENT_SEARCH_PURPOSE = "assistants"


class AssistantGateway:
    """Request/response access to threads, runs and files.

    Attributes:
        client: The underlying AsyncOpenAI client.
    """

    def __init__(self, client: AsyncOpenAI) -> None:
        self.client = client

    @classmethod
    def from_config(cls, config: GatewayConfig) -> "AssistantGateway":
        """Build a gateway with a client configured from settings."""
        return cls(AsyncOpenAI(api_key=config.api_key, base_url=config.base_url))

    async def create_thread(self) -> str:
        thread = await self.client.beta.threads.create()
        logger.info(f"Created thread {thread.id}")
        return thread.id

    async def create_message(
        self,
        thread_id: str,
        content: str,
        attachments: list[dict[str, Any]] | None = None,
    ) -> Message:
        """Append a user message to a thread.

        Args:
            thread_id: Target thread.
            content: Message text.
            attachments: Optional file attachments with their enabled tools.

        Returns:
            The created message.
        """
        params: dict[str, Any] = {"role": "user", "content": content}
        if attachments:
            params["attachments"] = attachments
        return await self.client.beta.threads.messages.create(thread_id, **params)

    async def create_run(self, thread_id: str, assistant_id: str) -> Run:
        return await self.client.beta.threads.runs.create(thread_id, assistant_id=assistant_id)

    async def retrieve_run(self, thread_id: str, run_id: str) -> Run:
        return await self.client.beta.threads.runs.retrieve(run_id, thread_id=thread_id)

    async def list_messages(
        self,
        thread_id: str,
        order: str = "asc",
        run_id: str | None = None,
        limit: int | None = None,
    ) -> list[Message]:
        """List messages of a thread in a single page.

        Args:
            thread_id: Thread to read.
            order: "asc" for oldest first, "desc" for newest first.
            run_id: Restrict to messages produced by this run.
            limit: Maximum number of messages (gateway default when None).

        Returns:
            Messages in the requested order.
        """
        params: dict[str, Any] = {"order": order}
        if run_id is not None:
            params["run_id"] = run_id
        if limit is not None:
            params["limit"] = limit
        page = await self.client.beta.threads.messages.list(thread_id, **params)
        return list(page.data)

    async def create_file(self, file: tuple[str, IO[bytes]]) -> FileObject:
        """Store a file for document search.

        Args:
            file: (filename, binary stream) pair.

        Returns:
            The stored file object.
        """
        return await self.client.files.create(file=file, purpose=DOCUMENT_SEARCH_PURPOSE)

    async def create_assistant(self, name: str, instructions: str, model: str) -> Assistant:
        """Create an assistant with the file_search tool enabled."""
        return await self.client.beta.assistants.create(
            name=name,
            instructions=instructions,
            model=model,
            tools=[{"type": "file_search"}],
        )
