"""Fixed-interval polling with a single-flight guard."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable

from pytacmon._constants import DEFAULT_POLL_INTERVAL_S
from pytacmon.engine import CycleResult, TrackingEngine
from pytacmon.exceptions import TacmonConfigError
from pytacmon.models.events import TrackingEvent

_logger = logging.getLogger(__name__)


class PollingScheduler:
    """Drive a :class:`TrackingEngine` on a fixed interval.

    At most one cycle is in flight at a time: a tick (or :meth:`trigger`)
    that arrives while the engine is still busy is skipped rather than
    queued. Failed cycles are simply retried on the next tick.

    Usage::

        scheduler = PollingScheduler(engine, interval=5.0, on_events=render)
        scheduler.start()
        ...
        await scheduler.stop()
    """

    def __init__(
        self,
        engine: TrackingEngine,
        *,
        interval: float = DEFAULT_POLL_INTERVAL_S,
        on_events: Callable[[list[TrackingEvent]], None] | None = None,
        on_result: Callable[[CycleResult], None] | None = None,
    ) -> None:
        if interval <= 0:
            raise TacmonConfigError(f"poll interval must be positive, got {interval!r}")
        self._engine = engine
        self._interval = interval
        self._on_events = on_events
        self._on_result = on_result
        self._task: asyncio.Task[None] | None = None
        self._skipped_ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def skipped_ticks(self) -> int:
        """Ticks dropped because a cycle was still in flight."""
        return self._skipped_ticks

    def start(self) -> None:
        """Start polling on the running event loop; the first cycle runs immediately."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="pytacmon-poll")

    async def stop(self) -> None:
        """Cancel the polling task and abandon any in-flight cycle."""
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        self._engine.cancel_pending()

    async def trigger(self) -> CycleResult | None:
        """Run one cycle now unless another is in flight (then return ``None``)."""
        if self._engine.busy:
            self._skipped_ticks += 1
            _logger.debug("Cycle still in flight; skipping tick")
            return None

        result = await self._engine.run_cycle()
        self._dispatch(result)
        return result

    async def _run(self) -> None:
        while True:
            try:
                await self.trigger()
            except Exception:
                _logger.exception("Polling cycle failed unexpectedly; retrying on the next tick")
            await asyncio.sleep(self._interval)

    def _dispatch(self, result: CycleResult) -> None:
        if self._on_result is not None:
            try:
                self._on_result(result)
            except Exception:
                _logger.warning("on_result callback failed", exc_info=True)

        if self._on_events is not None and result.events:
            try:
                self._on_events(result.events)
            except Exception:
                _logger.warning("on_events callback failed", exc_info=True)
