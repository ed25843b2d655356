"""Registry for portfolio snapshot subscribers."""
import asyncio
import inspect
import logging
from typing import Any, Callable, List, Set

logger = logging.getLogger(__name__)


class SnapshotBus:
    """
    Fan-out of immutable snapshots to subscribers.

    Plain callables run inline; coroutine functions are scheduled on the
    running loop. A failing subscriber is logged and never breaks the
    publisher or other subscribers.
    """

    def __init__(self):
        self._subscribers: List[Callable[[Any], Any]] = []
        self._tasks: Set[asyncio.Task] = set()

    def subscribe(self, handler: Callable[[Any], Any]) -> Callable[[], None]:
        self._subscribers.append(handler)

        def unsubscribe() -> None:
            if handler in self._subscribers:
                self._subscribers.remove(handler)

        return unsubscribe

    def publish(self, snapshot: Any) -> None:
        for handler in list(self._subscribers):
            if inspect.iscoroutinefunction(handler):
                self._schedule(handler, snapshot)
                continue
            try:
                handler(snapshot)
            except Exception:
                logger.exception("Snapshot subscriber %r failed", handler)

    def _schedule(self, handler: Callable[[Any], Any], snapshot: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; async subscriber %r skipped", handler)
            return
        task = loop.create_task(handler(snapshot))
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Async snapshot subscriber failed: %s", exc)

    async def drain(self) -> None:
        """Wait for scheduled async subscribers to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def count(self) -> int:
        return len(self._subscribers)
