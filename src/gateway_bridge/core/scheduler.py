# Deferred, single-flight task used to coalesce rapid writes
import asyncio
from typing import Any, Awaitable, Callable, Optional
from ..utils.logging import get_logger

logger = get_logger(__name__)


class DeferredTask:
    """Runs ``callback`` once after the current synchronous unit of work.

    Every ``schedule()`` call made before the callback starts joins the same
    window and receives the same future, which resolves with the callback's
    result or fails with its exception. The window closes as soon as the
    callback starts, so a later ``schedule()`` opens a new window and a new
    run.
    """
    def __init__(self, callback: Callable[[], Awaitable[Any]], name: Optional[str] = None):
        self.callback = callback
        self.name = name or getattr(callback, "__name__", "deferred")
        self.runs = 0
        self._future: Optional[asyncio.Future] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        """True while a window is open and its run has not started yet"""
        return self._future is not None

    def schedule(self) -> asyncio.Future:
        if self._future is None:
            loop = asyncio.get_running_loop()
            self._future = loop.create_future()
            self._task = loop.create_task(self._run(self._future), name=self.name)
            logger.debug(f"Scheduled {self.name}")
        return self._future

    async def _run(self, future: asyncio.Future) -> None:
        self._future = None
        self.runs += 1
        try:
            result = await self.callback()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            logger.debug(f"{self.name} failed: {e}")
            if not future.done():
                future.set_exception(e)
        else:
            if not future.done():
                future.set_result(result)
        finally:
            # Windows nobody awaited must not log "exception was never retrieved"
            if future.done() and not future.cancelled():
                future.exception()
