"""Conversation turns against the assistant's asynchronous run model.

Each turn appends the user's message, starts a run, waits for the run to
finish and reads back the single newest message that run produced. The
caller sees one blocking request/response exchange.
"""

import asyncio
import logging
from collections import defaultdict
from contextlib import AbstractAsyncContextManager, nullcontext

from openai import OpenAIError

from pdfchat.assistant.errors import (
    MalformedUpstreamResponse,
    RunFailed,
    ThreadNotFound,
    UpstreamUnavailable,
)
from pdfchat.assistant.gateway import AssistantGateway
from pdfchat.assistant.registry import SessionRegistry
from pdfchat.assistant.runs import COMPLETED, RunPoller

logger = logging.getLogger(__name__)


def document_search_attachment(file_id: str) -> dict:
    """Attachment entry binding a stored file to the file_search tool."""
    return {"file_id": file_id, "tools": [{"type": "file_search"}]}


class ConversationOrchestrator:
    """Runs user turns on registered threads.

    Concurrent turns on the same thread are not ordered relative to each
    other unless ``serialize_turns`` is set, in which case they queue on a
    per-thread lock.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        gateway: AssistantGateway,
        poller: RunPoller,
        assistant_id: str,
        serialize_turns: bool = False,
    ) -> None:
        self._registry = registry
        self._gateway = gateway
        self._poller = poller
        self._assistant_id = assistant_id
        self._serialize_turns = serialize_turns
        self._turn_locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def _turn_guard(self, thread_id: str) -> AbstractAsyncContextManager:
        if self._serialize_turns:
            return self._turn_locks[thread_id]
        return nullcontext()

    async def converse(
        self,
        thread_id: str,
        user_text: str,
        attachment_id: str | None = None,
    ) -> str:
        """Send a user message and return the assistant's reply.

        Args:
            thread_id: Registered thread to converse on.
            user_text: The user's message.
            attachment_id: Optional stored file to make searchable for this turn.

        Returns:
            Text of the newest assistant message produced by the run.

        Raises:
            ThreadNotFound: If the thread is not registered.
            RunFailed: If the run ended in any status but completed.
            MalformedUpstreamResponse: If the reply is missing or not text.
            RunTimeout: If the configured run timeout elapsed.
            UpstreamUnavailable: If a gateway call failed.
        """
        if not self._registry.is_live(thread_id):
            raise ThreadNotFound(thread_id)

        async with self._turn_guard(thread_id):
            try:
                return await self._run_turn(thread_id, user_text, attachment_id)
            except OpenAIError as e:
                logger.error(f"Gateway error on thread {thread_id}: {e}")
                raise UpstreamUnavailable.from_exception(
                    e, "Failed to get a response from the assistant"
                ) from e

    async def _run_turn(self, thread_id: str, user_text: str, attachment_id: str | None) -> str:
        attachments = [document_search_attachment(attachment_id)] if attachment_id else None
        await self._gateway.create_message(thread_id, user_text, attachments=attachments)
        logger.info(
            f"Added message to thread {thread_id}"
            + (f" with file {attachment_id}" if attachment_id else "")
        )

        run = await self._gateway.create_run(thread_id, self._assistant_id)
        logger.info(f"Started run {run.id} on thread {thread_id}")
        run = await self._poller.wait(thread_id, run)
        logger.info(f"Run {run.id} finished with status {run.status}")

        if run.status != COMPLETED:
            last_error = run.last_error.message if run.last_error else None
            logger.error(f"Run {run.id} on thread {thread_id} ended as {run.status}: {last_error}")
            raise RunFailed(run.status, last_error)

        messages = await self._gateway.list_messages(thread_id, order="desc", run_id=run.id, limit=1)
        if not messages or not messages[0].content or messages[0].content[0].type != "text":
            logger.error(f"Unexpected reply shape from run {run.id}: {messages[:1]}")
            raise MalformedUpstreamResponse("Assistant response was not in the expected text format")

        return messages[0].content[0].text.value
