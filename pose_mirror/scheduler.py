"""
Fixed-period tick scheduler on the asyncio event loop.

single_flight=True: a tick that comes due while the previous one is still
awaiting detection is dropped.

single_flight=False: ticks start on every period no matter what, so several
detections can be in flight and finish out of order, each applying its
(possibly stale) result when it resolves. This is the known overlap race
of the plain interval timer, kept available behind a flag.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Set

from . import config

logger = logging.getLogger(__name__)

TickFn = Callable[[], Awaitable[None]]


class TickScheduler:
    def __init__(self, tick: TickFn,
                 interval: float = config.TICK_INTERVAL_S,
                 single_flight: bool = config.SINGLE_FLIGHT):
        self.tick = tick
        self.interval = interval
        self.single_flight = single_flight

        self.started = 0
        self.completed = 0
        self.dropped = 0
        self.failures = 0

        self._timer: Optional[asyncio.Task] = None
        self._inflight: Set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def pending(self) -> int:
        return len(self._inflight)

    def start(self):
        if self.running:
            return
        logger.info(f"[Scheduler] Starting (interval={self.interval:.3f}s, "
                    f"single_flight={self.single_flight})")
        self._timer = asyncio.create_task(self._run())

    async def _run(self):
        loop = asyncio.get_running_loop()
        next_at = loop.time()
        while True:
            if self.single_flight and self._inflight:
                self.dropped += 1
                logger.debug("[Scheduler] Tick dropped, previous still pending")
            else:
                task = asyncio.create_task(self._run_tick())
                self._inflight.add(task)
                task.add_done_callback(self._inflight.discard)

            next_at += self.interval
            await asyncio.sleep(max(0.0, next_at - loop.time()))

    async def _run_tick(self):
        self.started += 1
        try:
            await self.tick()
            self.completed += 1
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # Only this tick is lost; the next one runs on schedule
            self.failures += 1
            logger.warning(f"[Scheduler] Tick failed: {e}")

    async def stop(self):
        tasks = list(self._inflight)
        if self._timer is not None:
            tasks.append(self._timer)
        for task in tasks:
            if not task.done():
                task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._timer = None
        self._inflight.clear()
        logger.info(f"[Scheduler] Stopped (completed={self.completed}, "
                    f"dropped={self.dropped}, failures={self.failures})")
