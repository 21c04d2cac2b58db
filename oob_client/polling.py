"""Background polling loop.

One asyncio task per scheduler. Each tick waits ``interval`` and then runs
a full fetch-decrypt-deliver cycle before waiting again, so ticks never
overlap. ``stop()`` cancels a task that is waiting between ticks, lets an
in-flight tick finish, and returns only after the task has exited.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable

from .decoder import InteractionDecoder, InteractionHandler
from .errors import NetworkError, PollingError, ProtocolError
from .models import PollResponse

log = logging.getLogger(__name__)

Fetch = Callable[[], Awaitable[PollResponse]]
Sleep = Callable[[float], Awaitable[None]]


class PollState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class PollingScheduler:
    def __init__(self, fetch: Fetch, decoder: InteractionDecoder, sleep: Sleep = asyncio.sleep):
        self._fetch = fetch
        self._decoder = decoder
        self._sleep = sleep
        self._task: asyncio.Task | None = None
        self._stopping = False
        self._in_tick = False
        self.state = PollState.IDLE

    @property
    def running(self) -> bool:
        return self.state is PollState.RUNNING

    def start(self, interval: float, handler: InteractionHandler) -> None:
        """Launch the loop on the running event loop."""
        if self.state is PollState.RUNNING:
            raise PollingError("polling is already running")
        if self.state is PollState.STOPPED:
            raise PollingError("polling was stopped; create a new client to poll again")
        if interval <= 0:
            raise ValueError("poll interval must be positive")
        self._task = asyncio.get_running_loop().create_task(self._run(interval, handler), name="oob-poll")
        self.state = PollState.RUNNING
        log.debug("polling started (interval %.2fs)", interval)

    async def stop(self) -> None:
        """Stop the loop and wait for it to exit. No-op unless running."""
        if self.state is not PollState.RUNNING:
            return
        self._stopping = True
        task = self._task
        if not self._in_tick:
            task.cancel()
        await asyncio.wait({task})
        self.state = PollState.STOPPED
        self._task = None
        if not task.cancelled() and task.exception() is not None:
            log.error("polling task exited with an error", exc_info=task.exception())
        log.debug("polling stopped")

    async def poll_once(self, handler: InteractionHandler) -> int:
        """Run one tick. Returns the number of interactions delivered."""
        try:
            response = await self._fetch()
        except (NetworkError, ProtocolError) as exc:
            log.debug("poll tick skipped: %s", exc)
            return 0
        return self._decoder.decode(response, handler)

    async def _run(self, interval: float, handler: InteractionHandler) -> None:
        while not self._stopping:
            await self._sleep(interval)
            if self._stopping:
                break
            self._in_tick = True
            try:
                await self.poll_once(handler)
            except Exception:
                log.exception("poll tick failed")
            finally:
                self._in_tick = False
