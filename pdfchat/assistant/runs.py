"""Run status polling.

A run moves queued -> in_progress -> terminal. The gateway only reports the
current status, so the poller re-reads it on a fixed interval until the run
leaves the pending states.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from openai.types.beta.threads import Run

from pdfchat.assistant.errors import RunTimeout
from pdfchat.assistant.gateway import AssistantGateway

logger = logging.getLogger(__name__)

PENDING_RUN_STATUSES = frozenset({"queued", "in_progress", "cancelling"})
COMPLETED = "completed"

Sleep = Callable[[float], Awaitable[object]]


def is_terminal(run_status: str) -> bool:
    return run_status not in PENDING_RUN_STATUSES


class RunPoller:
    """Waits for runs to reach a terminal status.

    Args:
        gateway: Gateway used to re-read run status.
        interval: Seconds between polls.
        timeout: Overall limit per wait, or None to wait indefinitely.
        sleep: Awaitable delay, replaceable in tests.
    """

    def __init__(
        self,
        gateway: AssistantGateway,
        interval: float = 1.0,
        timeout: float | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._gateway = gateway
        self._interval = interval
        self._timeout = timeout
        self._sleep = sleep

    async def poll(self, thread_id: str, run: Run) -> Run:
        """Re-read the run until its status is terminal."""
        while not is_terminal(run.status):
            await self._sleep(self._interval)
            run = await self._gateway.retrieve_run(thread_id, run.id)
            logger.debug(f"Run {run.id} on thread {thread_id}: {run.status}")
        return run

    def start(self, thread_id: str, run: Run) -> asyncio.Task[Run]:
        """Begin polling in a task the caller may cancel."""
        return asyncio.create_task(self.poll(thread_id, run), name=f"poll-{run.id}")

    async def wait(self, thread_id: str, run: Run) -> Run:
        """Block until the run is terminal.

        Returns:
            The run in its terminal state.

        Raises:
            RunTimeout: If a timeout is configured and elapses first.
        """
        task = self.start(thread_id, run)
        if self._timeout is None:
            return await task
        try:
            return await asyncio.wait_for(task, self._timeout)
        except TimeoutError as e:
            logger.warning(f"Run {run.id} on thread {thread_id} timed out after {self._timeout}s")
            raise RunTimeout(run.id, self._timeout) from e
