"""Best-effort position tracking with bounded waits."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from contextlib import suppress

from libs.core.application.contracts import CapabilityProvider
from libs.core.domain.entities import Coordinates
from libs.core.domain.errors import PermissionDeniedError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SEC = 15.0
DEFAULT_MAX_AGE_SEC = 60.0
DEFAULT_POLL_INTERVAL_SEC = 5.0


class LocationTracker:
    """Keeps the latest position fix; never blocks longer than the timeout."""

    def __init__(
        self,
        provider: CapabilityProvider,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        max_age: float = DEFAULT_MAX_AGE_SEC,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SEC,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._provider = provider
        self._timeout = timeout
        self._max_age = max_age
        self._poll_interval = poll_interval
        self._clock = clock
        self._latest: Coordinates | None = None
        self._received_at: float | None = None
        self._task: asyncio.Task[None] | None = None
        self._stopped: asyncio.Event | None = None
        self.enabled = True
        self.permission_denied = False
        self.error: str | None = None

    @property
    def latest(self) -> Coordinates | None:
        if not self.enabled or self._latest is None or self._received_at is None:
            return None
        if self._clock() - self._received_at > self._max_age:
            return None
        return self._latest

    @property
    def watching(self) -> bool:
        return self._task is not None and not self._task.done()

    async def refresh(self) -> Coordinates | None:
        if not self.enabled:
            return None
        try:
            fix = await asyncio.wait_for(
                self._provider.get_coordinates(),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            self.error = "Location request timed out"
            logger.warning(self.error)
            return self.latest
        except PermissionDeniedError as error:
            self.error = f"Location error: {error}"
            self.permission_denied = True
            self.enabled = False
            logger.warning("Location permission denied; tracking disabled")
            self._cancel_watch()
            return None
        except Exception as error:
            self.error = f"Location error: {error}"
            logger.error("Error getting current position: %s", error)
            return self.latest

        if fix is None:
            return self.latest
        self._latest = fix
        self._received_at = self._clock()
        self.error = None
        return fix

    def start(self) -> None:
        if self.watching or not self.enabled:
            return
        self._stopped = asyncio.Event()
        self._task = asyncio.create_task(self._watch(self._stopped), name="location-watch")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        self._signal_stop()
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task

    async def set_enabled(self, enabled: bool) -> None:
        self.enabled = enabled
        if enabled:
            self.permission_denied = False
            self.start()
        else:
            await self.stop()

    async def _watch(self, stopped: asyncio.Event) -> None:
        # The stop event ends the watch even when a cancel is lost inside wait_for.
        while self.enabled and not stopped.is_set():
            await self.refresh()
            if stopped.is_set():
                break
            with suppress(asyncio.TimeoutError):
                await asyncio.wait_for(stopped.wait(), timeout=self._poll_interval)

    def _signal_stop(self) -> None:
        stopped, self._stopped = self._stopped, None
        if stopped is not None:
            stopped.set()

    def _cancel_watch(self) -> None:
        task, self._task = self._task, None
        self._signal_stop()
        if task is not None and task is not asyncio.current_task():
            task.cancel()
