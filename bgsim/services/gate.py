"""Single-flight access to the combat simulator.

The simulator keeps shared working state (factories, RNG, board buffers)
and must never be entered by two runs at once. ``SimulationGate`` holds an
asyncio lock around a call made on a dedicated worker thread:

- Waiting for the gate is cancellable and a cancelled wait holds nothing.
- Once the worker call has started it cannot be interrupted, so a
  cancellation at that point leaves the gate held until the call returns.
"""

import asyncio
import functools
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeVar

from bgsim.core.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class SimulationGate:
    """Runs blocking simulator calls one at a time."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="simulation")

    @property
    def busy(self) -> bool:
        """Whether a simulation currently holds the gate."""
        return self._lock.locked()

    async def run(self, func: Callable[..., T], *args: Any) -> T:
        """Run ``func(*args)`` on the worker thread while holding the gate.

        Raises:
            asyncio.CancelledError: If the caller is cancelled while waiting
                for the gate or for the worker call.
        """
        await self._lock.acquire()

        handed_to_worker = False
        try:
            loop = asyncio.get_running_loop()
            future = loop.run_in_executor(self._executor, functools.partial(func, *args))
            try:
                return await asyncio.shield(future)
            except asyncio.CancelledError:
                if not future.done():
                    logger.info("Simulation caller cancelled; gate held until the run returns")
                    future.add_done_callback(self._release_after_abandoned_run)
                    handed_to_worker = True
                raise
        finally:
            if not handed_to_worker:
                self._lock.release()

    def _release_after_abandoned_run(self, future: "asyncio.Future[Any]") -> None:
        if not future.cancelled() and future.exception() is not None:
            logger.warning(
                "Abandoned simulation run failed",
                extra={"extra_data": {"error": str(future.exception())}},
            )
        self._lock.release()

    def shutdown(self) -> None:
        """Stop the worker thread; queued runs that have not started are dropped."""
        self._executor.shutdown(wait=False, cancel_futures=True)
