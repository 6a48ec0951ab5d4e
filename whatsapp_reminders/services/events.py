"""Minimal observer list used for due-reminder events and store change feeds."""

import asyncio
import inspect
from typing import Any, Callable, List, Set

from ..logging_config import get_logger

logger = get_logger(__name__)

Handler = Callable[..., Any]


class Subscribers:
    """Fan a published event out to every registered handler.

    Handlers may be plain callables or coroutine functions. Coroutines are
    scheduled on the running loop and not awaited; with no running loop they
    are closed and skipped. A handler that raises is logged and the remaining
    handlers still run.
    """

    def __init__(self, name: str):
        self.name = name
        self._handlers: List[Handler] = []
        self._pending: Set[asyncio.Task] = set()

    def subscribe(self, handler: Handler) -> Callable[[], None]:
        """Register ``handler``; returns a callable that unregisters it."""
        self._handlers.append(handler)

        def _unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return _unsubscribe

    def __len__(self) -> int:
        return len(self._handlers)

    def publish(self, *args: Any) -> None:
        for handler in list(self._handlers):
            try:
                result = handler(*args)
            except Exception as e:
                logger.error(f"{self.name} subscriber {getattr(handler, '__name__', handler)!r} failed: {e}")
                continue

            if inspect.isawaitable(result):
                self._schedule(result)

    def _schedule(self, awaitable: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"{self.name}: no running event loop, dropping async subscriber")
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return

        task = loop.create_task(self._guard(awaitable))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _guard(self, awaitable: Any) -> None:
        try:
            await awaitable
        except Exception as e:
            logger.error(f"{self.name} async subscriber failed: {e}")
