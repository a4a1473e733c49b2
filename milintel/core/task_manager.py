"""Task registry for the tick loop and fire-and-forget tier runs."""

import asyncio
import signal
import sys
from typing import Coroutine, Dict, Set

from .logger import get_logger

logger = get_logger(__name__)


class TaskManager:
    """Owns every asyncio task the engine spawns so shutdown can cancel them."""

    def __init__(self):
        self._services: Dict[str, asyncio.Task] = {}
        self._runs: Dict[str, Set[asyncio.Task]] = {}

    def register(self, name: str, coro: Coroutine) -> asyncio.Task:
        """Run a long-lived coroutine (tick loop, HTTP server) as a named task."""
        task = asyncio.ensure_future(self._supervise(name, coro))
        self._services[name] = task
        logger.info("service_registered", name=name)
        return task

    def spawn(self, name: str, coro: Coroutine) -> asyncio.Task:
        """Dispatch a one-shot run without waiting on it.

        The task is tracked under ``name`` until it finishes; crashes are
        logged and never propagate to the dispatcher.
        """
        task = asyncio.ensure_future(self._guard(name, coro))
        runs = self._runs.setdefault(name, set())
        runs.add(task)
        task.add_done_callback(runs.discard)
        logger.debug("run_dispatched", name=name, in_flight=len(runs))
        return task

    def in_flight(self, name: str) -> int:
        """Number of unfinished runs dispatched under ``name``."""
        return len(self._runs.get(name, ()))

    async def _supervise(self, name: str, coro: Coroutine) -> None:
        try:
            await coro
            logger.info("service_completed", name=name)
        except asyncio.CancelledError:
            logger.info("service_cancelled", name=name)
            raise
        except Exception as e:
            logger.error("service_crashed", name=name, error=str(e), exc_info=True)

    async def _guard(self, name: str, coro: Coroutine):
        try:
            return await coro
        except asyncio.CancelledError:
            logger.info("run_cancelled", name=name)
            raise
        except Exception as e:
            logger.error("run_crashed", name=name, error=str(e), exc_info=True)
            return None

    async def drain(self) -> None:
        """Wait for every dispatched run to settle."""
        pending = [t for runs in self._runs.values() for t in runs]
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def stop_all(self) -> None:
        """Cancel all running tasks gracefully."""
        tasks = list(self._services.values())
        tasks += [t for runs in self._runs.values() for t in runs]
        logger.info("task_manager_stopping", task_count=len(tasks))
        for task in tasks:
            if not task.done():
                task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("task_manager_stopped")

    async def wait_all(self) -> None:
        """Wait for all long-lived services to complete."""
        if self._services:
            await asyncio.gather(*self._services.values(), return_exceptions=True)


def setup_signal_handlers(manager: TaskManager, loop: asyncio.AbstractEventLoop) -> None:
    """Set up SIGINT/SIGTERM handlers for graceful shutdown."""
    def _handle_signal():
        logger.info("shutdown_signal_received")
        loop.create_task(manager.stop_all())

    if sys.platform != "win32":
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, _handle_signal)
    else:
        # Windows doesn't support add_signal_handler well
        signal.signal(signal.SIGINT, lambda s, f: loop.create_task(manager.stop_all()))
