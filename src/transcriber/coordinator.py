"""Poll scheduling, overlap guard and restart supervision."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Protocol, Set

from .metrics import POLL_CYCLE_COUNTER

LOGGER = logging.getLogger("transcriber.coordinator")

MAX_RETRIES = 3
RETRY_DELAY_SECONDS = 5.0


class Watcher(Protocol):
    async def poll_once(self) -> object: ...


class PollState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"


class PollingCoordinator:
    """Runs ``watcher.poll_once`` on a timer, never two cycles at a time."""

    def __init__(self, watcher: Watcher, interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.watcher = watcher
        self.interval_seconds = interval_seconds
        self.state = PollState.IDLE
        self._stop = asyncio.Event()
        self._inflight: Set[asyncio.Task] = set()

    async def tick(self) -> bool:
        """Run one poll cycle unless one is already running.

        Returns ``False`` when the tick was skipped.
        """

        # No await between the check and the transition, so ticks on the
        # same loop cannot both pass the guard.
        if self.state is PollState.POLLING:
            LOGGER.info("Previous Google Drive polling cycle still running, skipping...")
            POLL_CYCLE_COUNTER.labels(outcome="skipped").inc()
            return False

        self.state = PollState.POLLING
        try:
            await self.watcher.poll_once()
            POLL_CYCLE_COUNTER.labels(outcome="completed").inc()
        except Exception:
            LOGGER.exception("Error during polling interval")
            POLL_CYCLE_COUNTER.labels(outcome="error").inc()
        finally:
            self.state = PollState.IDLE
        return True

    def schedule_tick(self) -> asyncio.Task:
        task = asyncio.create_task(self.tick())
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    def stop(self) -> None:
        self._stop.set()

    async def run(self) -> None:
        """Poll immediately, then on every interval until ``stop()`` is called."""

        LOGGER.info("Polling Google Drive every %.0f seconds", self.interval_seconds)
        await self.tick()
        while not self._stop.is_set():
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                self.schedule_tick()
        if self._inflight:
            LOGGER.info("Waiting for the running poll cycle to finish...")
            await asyncio.gather(*self._inflight, return_exceptions=True)
        LOGGER.info("Polling stopped")


async def run_with_retry(
    main: Callable[[], Awaitable[None]],
    *,
    max_retries: int = MAX_RETRIES,
    delay_seconds: float = RETRY_DELAY_SECONDS,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> int:
    """Restart ``main`` after crashes; return the process exit status."""

    retries_left = max_retries
    while True:
        try:
            await main()
            return 0
        except Exception:
            LOGGER.exception("Main process crashed")
            if retries_left <= 0:
                LOGGER.error("Max retries reached. Exiting.")
                return 1
            LOGGER.info(
                "Retrying in %.0f seconds... (%d retries left)", delay_seconds, retries_left
            )
            await sleep(delay_seconds)
            retries_left -= 1
