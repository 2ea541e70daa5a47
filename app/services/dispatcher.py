"""
Fire-and-forget execution of outbound side effects (push, socket emission).

Callers hand over a coroutine and return immediately. Failures are logged at
the task boundary and never reach the request that scheduled them.
"""
import asyncio
import logging
from typing import Coroutine, Optional, Set

logger = logging.getLogger(__name__)


class BackgroundDispatcher:
    """Schedules unawaited tasks on the running loop and keeps them referenced."""

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(self, coro: Coroutine, description: str) -> Optional[asyncio.Task]:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop, dropping side effect: {description}")
            coro.close()
            return None

        task = loop.create_task(self._guarded(coro, description))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _guarded(self, coro: Coroutine, description: str) -> None:
        try:
            await coro
        except Exception as e:
            logger.error(f"Side effect failed ({description}): {e}", exc_info=True)

    async def drain(self) -> None:
        """Wait for everything scheduled so far (shutdown and tests)"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


dispatcher = BackgroundDispatcher()
