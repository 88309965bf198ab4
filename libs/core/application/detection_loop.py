"""Self-rescheduling detection cycle over the live frame source."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from contextlib import suppress
from enum import Enum
from typing import Any

from libs.core.application.camera_control import CameraController
from libs.core.application.frame_scorer import ModelHandle, score
from libs.core.domain.entities import Detection, ReadyState
from libs.core.domain.errors import ModelUnavailable

logger = logging.getLogger(__name__)

DEFAULT_TICK_INTERVAL_SEC = 1 / 30

DetectionSubscriber = Callable[[list[Detection]], Any]


class LoopState(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"
    SUSPENDED = "suspended"


class DetectionLoop:
    """Pulls frames, scores them and publishes the detections, one cycle at a time.

    The next cycle is scheduled only after the current one has published, so
    cycles never overlap. All cycles run inside a single task; stopping the
    loop cancels that task and releases the camera.
    """

    def __init__(
        self,
        model_handle: ModelHandle,
        camera: CameraController,
        threshold: Callable[[], float],
        is_active: Callable[[], bool],
        on_detections: DetectionSubscriber | None = None,
        tick_interval: float = DEFAULT_TICK_INTERVAL_SEC,
    ) -> None:
        self._model = model_handle
        self._camera = camera
        self._threshold = threshold
        self._is_active = is_active
        self._on_detections = on_detections
        self._tick_interval = tick_interval
        self._task: asyncio.Task[None] | None = None
        self.state = LoopState.STOPPED
        self.latest_detections: list[Detection] = []
        self.cycles_completed = 0
        self.cycles_failed = 0

    @property
    def is_processing(self) -> bool:
        return self.state is LoopState.RUNNING

    @property
    def started(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if not self._model.loaded:
            raise ModelUnavailable("Detection loop requires a loaded model")
        if self.started:
            return
        self._task = asyncio.create_task(self._run(), name="detection-loop")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
        self.state = LoopState.STOPPED
        self._camera.release()

    async def _run(self) -> None:
        while True:
            try:
                await self._cycle()
            except asyncio.CancelledError:
                raise
            except Exception:
                self.cycles_failed += 1
                logger.exception("Error during detection cycle")
            await asyncio.sleep(self._tick_interval)

    async def _cycle(self) -> None:
        source = self._camera.source
        if (
            source is None
            or not self._is_active()
            or source.ready_state is not ReadyState.READY_FOR_CAPTURE
        ):
            self._suspend()
            return
        if self.state is not LoopState.RUNNING:
            logger.info("Detection loop running")
        self.state = LoopState.RUNNING

        frame = await source.read_frame()
        detections = await score(self._model, frame, self._threshold())
        del frame
        self.latest_detections = detections
        self.cycles_completed += 1
        await self._publish(detections)

    def _suspend(self) -> None:
        if self.state is LoopState.RUNNING:
            self.state = LoopState.SUSPENDED
            logger.info("Detection loop suspended")

    async def _publish(self, detections: list[Detection]) -> None:
        if self._on_detections is None:
            return
        result = self._on_detections(detections)
        if inspect.isawaitable(result):
            await result
