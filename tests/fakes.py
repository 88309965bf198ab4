"""In-memory stand-ins for device capabilities, models and stores."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from typing import Any

from libs.core.domain.entities import (
    AlertDraft,
    AlertRecord,
    CapabilityResult,
    Coordinates,
    EmergencyContact,
    Frame,
    RawPrediction,
    ReadyState,
    VideoDevice,
)
from libs.core.domain.errors import PermissionDeniedError, RecordStoreError

STILL_BYTES = b"jpeg-bytes"


async def wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.001)


class FakeFrameSource:
    def __init__(self, device_id: str | None, events: list[tuple[str, Any]]) -> None:
        self.device_id = device_id
        self.ready_state = ReadyState.READY_FOR_CAPTURE
        self.frames_read = 0
        self.stills_taken = 0
        self.stop_count = 0
        self._events = events

    async def read_frame(self) -> Frame:
        self.frames_read += 1
        return Frame(data=f"frame-{self.frames_read}", width=100, height=100)

    def capture_still(self) -> bytes | None:
        self.stills_taken += 1
        return STILL_BYTES

    def stop(self) -> None:
        self.stop_count += 1
        self.ready_state = ReadyState.ENDED
        self._events.append(("stop", self.device_id))


class FakeProvider:
    def __init__(
        self,
        devices: list[VideoDevice] | None = None,
        coordinates: Coordinates | None = None,
    ) -> None:
        self.devices = devices if devices is not None else [VideoDevice("cam-0")]
        self.coordinates = coordinates
        self.events: list[tuple[str, Any]] = []
        self.sources: list[FakeFrameSource] = []
        self.torch_result = CapabilityResult.SUCCESS
        self.torch_calls: list[bool] = []
        self.camera_error: Exception | None = None
        self.location_error: Exception | None = None
        self.location_delay = 0.0
        self.battery_level: float | None = 0.8
        self.wake_lock = CapabilityResult.UNSUPPORTED

    @property
    def last_source(self) -> FakeFrameSource:
        return self.sources[-1]

    async def list_devices(self) -> list[VideoDevice]:
        return list(self.devices)

    async def open_frame_source(self, device_id: str | None) -> FakeFrameSource:
        if self.camera_error is not None:
            raise self.camera_error
        self.events.append(("open", device_id))
        source = FakeFrameSource(device_id, self.events)
        self.sources.append(source)
        return source

    async def set_torch(self, source: Any, enabled: bool) -> CapabilityResult:
        self.torch_calls.append(enabled)
        if isinstance(self.torch_result, Exception):
            raise self.torch_result
        return self.torch_result

    async def get_coordinates(self) -> Coordinates | None:
        if self.location_delay:
            await asyncio.sleep(self.location_delay)
        if self.location_error is not None:
            raise self.location_error
        return self.coordinates

    async def get_battery_level(self) -> float | None:
        return self.battery_level

    async def request_wake_lock(self) -> CapabilityResult:
        return self.wake_lock


class FakeModel:
    """Returns the configured predictions, or raises the configured errors in turn."""

    def __init__(self, predictions: list[RawPrediction] | None = None) -> None:
        self.predictions = predictions or []
        self.errors: list[Exception] = []
        self.calls = 0

    def predict(self, frame: Frame) -> list[RawPrediction]:
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return list(self.predictions)


def fire(score: float) -> RawPrediction:
    return RawPrediction(box=(0.1, 0.1, 0.5, 0.5), score=score)


class MemoryStorage:
    def __init__(self, items: dict[str, str] | None = None) -> None:
        self.items = dict(items or {})

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value


class RecordingNotifier:
    def __init__(self) -> None:
        self.calls: list[float] = []

    def notify(self, confidence: float) -> None:
        self.calls.append(confidence)


class FakeRecordStore:
    def __init__(self, contacts: list[EmergencyContact] | None = None) -> None:
        self.contacts = contacts or []
        self.drafts: list[AlertDraft] = []
        self.failures = 0
        self.gate: asyncio.Event | None = None

    async def create_alert(self, draft: AlertDraft) -> AlertRecord:
        if self.gate is not None:
            await self.gate.wait()
        if self.failures:
            self.failures -= 1
            raise RecordStoreError("service unavailable")
        self.drafts.append(draft)
        return AlertRecord(
            alert_id=len(self.drafts),
            user_id=1,
            latitude=draft.latitude,
            longitude=draft.longitude,
            confidence=draft.confidence,
            timestamp="2024-01-01T00:00:00+00:00",
            status=draft.status,
            image_data=draft.image_data,
            emergency_contact_id=draft.emergency_contact_id,
        )

    async def list_contacts(self) -> list[EmergencyContact]:
        return list(self.contacts)


def coordinates(latitude: float = 37.7749, longitude: float = -122.4194) -> Coordinates:
    return Coordinates(
        latitude=latitude,
        longitude=longitude,
        accuracy=5.0,
        timestamp=time.time(),
    )


def denied(capability: str) -> PermissionDeniedError:
    return PermissionDeniedError(capability)
