"""Ownership of the capture device: selection, switching, torch and release."""

from __future__ import annotations

import logging

from libs.core.application.contracts import CapabilityProvider, FrameSource
from libs.core.domain.entities import CapabilityResult, VideoDevice
from libs.core.domain.errors import PermissionDeniedError

logger = logging.getLogger(__name__)

POLICY_FIRST = "first"
POLICY_LAST = "last"


def select_device(devices: list[VideoDevice], policy: str) -> VideoDevice | None:
    """Pick a device by policy: "first", "last" or an explicit device id.

    An unknown device id falls back to the last device.
    """
    if not devices:
        return None
    if policy == POLICY_FIRST:
        return devices[0]
    if policy != POLICY_LAST:
        for device in devices:
            if device.device_id == policy:
                return device
        logger.warning("Camera %s not found, using last device", policy)
    return devices[-1]


class CameraController:
    """Acquires one frame source at a time and releases it exactly once."""

    def __init__(
        self,
        provider: CapabilityProvider,
        device_policy: str = POLICY_LAST,
    ) -> None:
        self._provider = provider
        self._device_policy = device_policy
        self._source: FrameSource | None = None
        self.devices: list[VideoDevice] = []
        self.current_device_id: str | None = None
        self.torch_enabled = False
        self.available = True
        self.permission_denied = False

    @property
    def source(self) -> FrameSource | None:
        return self._source

    async def open(self) -> FrameSource:
        self.devices = await self._provider.list_devices()
        device = select_device(self.devices, self._device_policy)
        return await self._acquire(device.device_id if device else None)

    async def switch_device(self, device_id: str) -> FrameSource:
        if device_id == self.current_device_id and self._source is not None:
            return self._source
        return await self._acquire(device_id)

    async def flip(self) -> FrameSource | None:
        if len(self.devices) <= 1:
            return self._source
        ids = [device.device_id for device in self.devices]
        index = ids.index(self.current_device_id) if self.current_device_id in ids else -1
        return await self.switch_device(ids[(index + 1) % len(ids)])

    async def set_torch(self, enabled: bool) -> CapabilityResult:
        if self._source is None:
            self.torch_enabled = False
            return CapabilityResult.UNSUPPORTED
        try:
            result = await self._provider.set_torch(self._source, enabled)
        except Exception as error:
            logger.error("Error toggling torch: %s", error)
            result = CapabilityResult.FAILED
        if result is CapabilityResult.SUCCESS:
            self.torch_enabled = enabled
        else:
            if result is CapabilityResult.UNSUPPORTED:
                logger.info("Torch not supported on this device")
            self.torch_enabled = False
        return result

    def release(self) -> None:
        source, self._source = self._source, None
        if source is None:
            return
        source.stop()
        logger.debug("Released camera %s", self.current_device_id)

    async def _acquire(self, device_id: str | None) -> FrameSource:
        self.release()
        try:
            source = await self._provider.open_frame_source(device_id)
        except PermissionDeniedError:
            self.available = False
            self.permission_denied = True
            logger.warning("Camera access denied")
            raise
        self._source = source
        self.current_device_id = device_id
        self.available = True
        self.permission_denied = False
        logger.info("Camera %s started", device_id or "default")
        if self.torch_enabled:
            await self.set_torch(True)
        return source
