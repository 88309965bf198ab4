"""Wires the capture device, detection loop and alert state machine together."""

from __future__ import annotations

import asyncio
import logging

from libs.core.application.alert_machine import AlertStateMachine
from libs.core.application.camera_control import CameraController
from libs.core.application.contracts import (
    AlertRecordStore,
    CapabilityProvider,
    KeyValueStore,
    Notifier,
)
from libs.core.application.detection_loop import DetectionLoop
from libs.core.application.frame_scorer import ModelHandle
from libs.core.application.location_tracker import LocationTracker
from libs.core.application.sensitivity import threshold_for
from libs.core.application.settings_store import SettingsStore
from libs.core.config import MonitorConfig
from libs.core.domain.entities import (
    AlertRecord,
    CapabilityResult,
    Detection,
    SensitivityLevel,
    SessionStatus,
)
from libs.core.domain.errors import ModelLoadError, PermissionDeniedError

logger = logging.getLogger(__name__)


class MonitoringSession:
    """One monitoring session: start acquires everything, stop releases it."""

    def __init__(
        self,
        config: MonitorConfig,
        provider: CapabilityProvider,
        model_handle: ModelHandle,
        record_store: AlertRecordStore,
        notifier: Notifier,
        storage: KeyValueStore,
    ) -> None:
        self._provider = provider
        self._record_store = record_store
        self._battery_timeout = config.battery_timeout
        self.model = model_handle
        self.settings = SettingsStore(storage)
        self.camera = CameraController(provider, device_policy=config.device_policy)
        self.location = LocationTracker(
            provider,
            timeout=config.location_timeout,
            max_age=config.location_max_age,
            poll_interval=config.location_poll_interval,
        )
        self.alerts = AlertStateMachine(
            record_store=record_store,
            notifier=notifier,
            settings=self.settings,
            capture_snapshot=self._capture_snapshot,
            current_coordinates=lambda: self.location.latest,
            default_contact_id=lambda: self.default_contact_id,
        )
        self.loop = DetectionLoop(
            model_handle=model_handle,
            camera=self.camera,
            threshold=lambda: threshold_for(self.settings.sensitivity),
            is_active=lambda: self.settings.ai_active,
            on_detections=self._on_detections,
            tick_interval=config.tick_interval,
        )
        self.default_contact_id: int | None = None
        self.default_contact_name: str | None = None
        self.battery_level: float | None = None
        self.wake_lock = CapabilityResult.UNSUPPORTED
        self.ai_unavailable = False
        self.running = False

    async def start(self) -> None:
        if self.running:
            return
        self.running = True
        self.settings.load()
        await self._request_wake_lock()
        await self.refresh_battery()
        await self._open_camera()
        await self._resolve_default_contact()

        await self.location.set_enabled(self.settings.location_enabled)

        try:
            await self.model.load()
        except ModelLoadError:
            self.ai_unavailable = True
            logger.error("AI detection unavailable; manual alerts only")
            return
        self.loop.start()

    async def stop(self) -> None:
        if not self.running:
            return
        self.running = False
        await self.loop.stop()
        await self.location.stop()
        logger.info("Monitoring session stopped")

    async def refresh_battery(self) -> float | None:
        try:
            level = await asyncio.wait_for(
                self._provider.get_battery_level(),
                timeout=self._battery_timeout,
            )
        except Exception as error:
            logger.info("Battery status not available: %s", error)
            level = None
        self.battery_level = level
        return level

    def set_sensitivity(self, value: SensitivityLevel | str) -> None:
        self.settings.set_sensitivity(value)

    def toggle_ai(self) -> bool:
        return self.settings.toggle_ai().ai_active

    async def toggle_location(self) -> bool:
        enabled = self.settings.toggle_location().location_enabled
        if self.running:
            await self.location.set_enabled(enabled)
        return enabled

    def trigger_emergency(self) -> bool:
        return self.alerts.escalate_manually()

    async def send_alert(self) -> AlertRecord | None:
        return await self.alerts.confirm()

    def cancel_alert(self) -> bool:
        return self.alerts.cancel()

    def continue_monitoring(self) -> bool:
        return self.alerts.acknowledge()

    def status(self) -> SessionStatus:
        warnings: list[str] = []
        if self.ai_unavailable:
            warnings.append("AI detection unavailable")
        if self.camera.permission_denied:
            warnings.append("Camera access denied")
        elif not self.camera.available:
            warnings.append("Camera unavailable")
        if self.location.permission_denied:
            warnings.append("Location access denied")
        coordinates = self.location.latest
        return SessionStatus(
            monitoring=self.settings.ai_active and self.loop.is_processing,
            ai_unavailable=self.ai_unavailable,
            camera_available=self.camera.available,
            location_available=coordinates is not None,
            battery_level=self.battery_level,
            location_text=coordinates.as_text() if coordinates else "Location unavailable",
            alert_state=self.alerts.state,
            confidence=self.alerts.confidence,
            warnings=warnings,
        )

    def _on_detections(self, detections: list[Detection]) -> None:
        self.alerts.handle_detections(detections)

    def _capture_snapshot(self) -> bytes | None:
        source = self.camera.source
        if source is None:
            return None
        return source.capture_still()

    async def _request_wake_lock(self) -> None:
        try:
            self.wake_lock = await self._provider.request_wake_lock()
        except Exception as error:
            logger.error("Failed to keep screen awake: %s", error)
            self.wake_lock = CapabilityResult.FAILED
        if self.wake_lock is not CapabilityResult.SUCCESS:
            logger.info("Wake lock %s", self.wake_lock.value)

    async def _open_camera(self) -> None:
        try:
            await self.camera.open()
        except PermissionDeniedError:
            logger.warning("Running without camera; manual alerts only")
        except Exception as error:
            self.camera.available = False
            logger.error("Error starting camera: %s", error)

    async def _resolve_default_contact(self) -> None:
        try:
            contacts = await self._record_store.list_contacts()
        except Exception as error:
            logger.error("Error fetching emergency contacts: %s", error)
            return
        default = next((item for item in contacts if item.is_default), None)
        if default is None and contacts:
            default = contacts[0]
        if default is not None:
            self.default_contact_id = default.contact_id
            self.default_contact_name = default.name
