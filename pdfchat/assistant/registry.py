"""In-process registry of live conversation threads."""

import logging
import threading

from openai import OpenAIError

from pdfchat.assistant.errors import UpstreamUnavailable
from pdfchat.assistant.gateway import AssistantGateway

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Sole authority on whether a thread id is usable.

    Entries are only ever added. Contents live as long as the process and
    are not persisted.
    """

    def __init__(self, gateway: AssistantGateway) -> None:
        self._gateway = gateway
        self._threads: set[str] = set()
        self._lock = threading.Lock()

    async def start_session(self) -> str:
        """Allocate a new thread on the gateway and register it.

        Returns:
            The new thread id.

        Raises:
            UpstreamUnavailable: If the gateway could not create the thread.
        """
        try:
            thread_id = await self._gateway.create_thread()
        except OpenAIError as e:
            logger.error(f"Failed to create thread: {e}")
            raise UpstreamUnavailable.from_exception(e, "Failed to start a new chat thread") from e

        with self._lock:
            self._threads.add(thread_id)
        logger.info(f"Registered thread {thread_id} ({len(self)} live)")
        return thread_id

    def is_live(self, thread_id: str) -> bool:
        with self._lock:
            return thread_id in self._threads

    def __contains__(self, thread_id: object) -> bool:
        return isinstance(thread_id, str) and self.is_live(thread_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._threads)
