from __future__ import annotations

import base64
import logging
from collections.abc import Callable

from libs.core.application.contracts import AlertRecordStore, Notifier
from libs.core.application.sensitivity import aggregate, threshold_for
from libs.core.application.settings_store import SettingsStore
from libs.core.domain.entities import (
    AlertDraft,
    AlertRecord,
    AlertState,
    AlertStatus,
    Coordinates,
    Detection,
)
from libs.core.domain.errors import CoordinatesUnavailable

logger = logging.getLogger(__name__)

SNAPSHOT_MEDIA_TYPE = "image/jpeg"
PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class AlertStateMachine:
    """Fire alert lifecycle: idle -> pending confirmation -> sent.

    Detection cycles can only move the machine out of idle; every other
    transition is a user action. Out-of-order triggers are ignored.
    """

    def __init__(
        self,
        record_store: AlertRecordStore,
        notifier: Notifier,
        settings: SettingsStore,
        capture_snapshot: Callable[[], bytes | None],
        current_coordinates: Callable[[], Coordinates | None],
        default_contact_id: Callable[[], int | None] = lambda: None,
    ) -> None:
        self._store = record_store
        self._notifier = notifier
        self._settings = settings
        self._capture_snapshot = capture_snapshot
        self._current_coordinates = current_coordinates
        self._default_contact_id = default_contact_id
        self._dispatching = False
        self.state = AlertState.IDLE
        self.confidence = 0.0
        self.snapshot: bytes | None = None
        self.last_alert: AlertRecord | None = None
        self.manual = False

    def handle_detections(self, detections: list[Detection]) -> bool:
        """Escalate to pending confirmation when the detection set qualifies."""
        if self.state is not AlertState.IDLE or not self._settings.ai_active:
            return False
        strongest = aggregate(detections)
        if strongest <= threshold_for(self._settings.sensitivity):
            return False
        self._enter_pending(confidence=strongest * 100, manual=False)
        return True

    def escalate_manually(self) -> bool:
        if self.state is not AlertState.IDLE:
            return False
        self._enter_pending(confidence=0.0, manual=True)
        return True

    async def confirm(self) -> AlertRecord | None:
        if self.state is not AlertState.PENDING_CONFIRMATION or self._dispatching:
            return None
        coordinates = self._current_coordinates()
        if coordinates is None:
            raise CoordinatesUnavailable("Cannot send alert without a location fix")

        draft = AlertDraft(
            latitude=coordinates.latitude,
            longitude=coordinates.longitude,
            confidence=round(self.confidence, 1),
            status=AlertStatus.SENT,
            image_data=encode_snapshot(self.snapshot),
            emergency_contact_id=self._default_contact_id(),
        )
        self._dispatching = True
        try:
            record = await self._store.create_alert(draft)
        except Exception as error:
            logger.error("Failed to send alert: %s", error)
            raise
        finally:
            self._dispatching = False

        self.last_alert = record
        self.state = AlertState.SENT
        self.snapshot = None
        logger.info("Alert %s sent (confidence %.1f)", record.alert_id, record.confidence)
        return record

    def cancel(self) -> bool:
        if self.state is not AlertState.PENDING_CONFIRMATION or self._dispatching:
            return False
        self._reset()
        logger.info("Alert cancelled by user")
        return True

    def acknowledge(self) -> bool:
        if self.state is not AlertState.SENT:
            return False
        self._reset()
        return True

    def _enter_pending(self, confidence: float, manual: bool) -> None:
        self.snapshot = self._take_snapshot()
        self.confidence = confidence
        self.manual = manual
        self.state = AlertState.PENDING_CONFIRMATION
        logger.warning(
            "Fire alert pending confirmation (confidence %.1f, manual=%s)",
            confidence,
            manual,
        )
        if self._settings.notifications_enabled:
            self._notify(confidence)

    def _take_snapshot(self) -> bytes | None:
        try:
            return self._capture_snapshot()
        except Exception as error:
            logger.error("Failed to capture snapshot: %s", error)
            return None

    def _notify(self, confidence: float) -> None:
        try:
            self._notifier.notify(confidence)
        except Exception as error:
            logger.error("Notifier failed: %s", error)

    def _reset(self) -> None:
        self.state = AlertState.IDLE
        self.snapshot = None
        self.confidence = 0.0
        self.manual = False


def encode_snapshot(snapshot: bytes | None) -> str | None:
    if not snapshot:
        return None
    media_type = "image/png" if snapshot.startswith(PNG_SIGNATURE) else SNAPSHOT_MEDIA_TYPE
    encoded = base64.b64encode(snapshot).decode("ascii")
    return f"data:{media_type};base64,{encoded}"
