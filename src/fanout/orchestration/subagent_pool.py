"""
The set of in-flight sub-agent tasks owned by one orchestrator.

Adding a task and waiting for "any" task to finish both mutate the same set, so both happen under
one :class:`asyncio.Lock`.  The name counter is advanced under the same lock, which keeps generated
names unique and monotonically increasing per pool.
"""

import asyncio
import itertools
import logging
from typing import (
    Any,
    Callable,
    Coroutine,
    Optional,
    Set,
)

from fanout.core.schema import Transcript

logger = logging.getLogger(__name__)

SubAgentFactory = Callable[[str], Coroutine[Any, Any, Transcript]]


class SubAgentPool:
    """Growable set of sub-agent tasks; no upper bound on how many run at once."""

    def __init__(self, prefix: str = "subagent"):
        self.prefix = prefix
        self._tasks: Set["asyncio.Task[Transcript]"] = set()
        self._lock = asyncio.Lock()
        self._counter = itertools.count()

    @property
    def pending(self) -> int:
        """Number of handles not yet collected by :meth:`wait_next`."""
        return len(self._tasks)

    async def spawn(self, factory: SubAgentFactory) -> str:
        """
        Schedule ``factory(name)`` as a new task and return the generated name.

        The child is never awaited here; it runs concurrently with the caller.
        """
        async with self._lock:
            name = f"{self.prefix}_{next(self._counter)}"
            task = asyncio.create_task(factory(name), name=name)
            self._tasks.add(task)
        logger.info("Started %s (%d pending)", name, len(self._tasks))
        return name

    async def wait_next(self) -> Optional[Transcript]:
        """
        Block until one pending task finishes, remove it and return its transcript.

        Tasks are collected in completion order, not spawn order.  Returns None when nothing is
        pending.  A failed child re-raises its error here.
        """
        async with self._lock:
            if not self._tasks:
                return None
            done, _ = await asyncio.wait(self._tasks, return_when=asyncio.FIRST_COMPLETED)
            task = next(iter(done))
            self._tasks.discard(task)

        logger.info("Collected %s (%d pending)", task.get_name(), len(self._tasks))
        return task.result()

    async def shutdown(self) -> None:
        """Cancel every pending task and discard all results; failures are only logged."""
        async with self._lock:
            tasks, self._tasks = list(self._tasks), set()

        if not tasks:
            return

        for task in tasks:
            task.cancel()
        results = await asyncio.gather(*tasks, return_exceptions=True)

        cancelled = 0
        for task, result in zip(tasks, results):
            if isinstance(result, asyncio.CancelledError):
                cancelled += 1
            elif isinstance(result, BaseException):
                logger.warning("Discarding error from %s: %s", task.get_name(), result)
        logger.info("Shut down %d sub-agents (%d cancelled mid-flight)", len(tasks), cancelled)
