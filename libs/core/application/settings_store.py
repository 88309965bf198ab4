"""Client settings persisted to a local key-value namespace."""

from __future__ import annotations

import json
import logging

from libs.core.application.contracts import KeyValueStore
from libs.core.domain.entities import MonitorSettings, SensitivityLevel

logger = logging.getLogger(__name__)

SETTINGS_NAMESPACE = "fireGuardSettings"


class SettingsStore:
    """Owns the session settings: loaded once, saved on every mutation."""

    def __init__(
        self,
        storage: KeyValueStore,
        namespace: str = SETTINGS_NAMESPACE,
    ) -> None:
        self._storage = storage
        self._namespace = namespace
        self._settings: MonitorSettings | None = None

    @property
    def settings(self) -> MonitorSettings:
        if self._settings is None:
            return self.load()
        return self._settings

    @property
    def sensitivity(self) -> SensitivityLevel:
        return self.settings.sensitivity

    @property
    def ai_active(self) -> bool:
        return self.settings.ai_active

    @property
    def notifications_enabled(self) -> bool:
        return self.settings.notifications_enabled

    @property
    def location_enabled(self) -> bool:
        return self.settings.location_enabled

    def load(self) -> MonitorSettings:
        raw = self._storage.get_item(self._namespace)
        settings = MonitorSettings()
        if raw:
            try:
                settings = _parse_settings(raw)
            except (ValueError, TypeError) as error:
                logger.warning("Failed to parse saved settings: %s", error)
        self._settings = settings
        return settings

    def update(
        self,
        *,
        sensitivity: SensitivityLevel | str | None = None,
        ai_active: bool | None = None,
        notifications_enabled: bool | None = None,
        location_enabled: bool | None = None,
    ) -> MonitorSettings:
        settings = self.settings
        if sensitivity is not None:
            settings.sensitivity = SensitivityLevel(sensitivity)
        if ai_active is not None:
            settings.ai_active = ai_active
        if notifications_enabled is not None:
            settings.notifications_enabled = notifications_enabled
        if location_enabled is not None:
            settings.location_enabled = location_enabled
        self._save()
        return settings

    def set_sensitivity(self, value: SensitivityLevel | str) -> MonitorSettings:
        return self.update(sensitivity=value)

    def toggle_ai(self) -> MonitorSettings:
        return self.update(ai_active=not self.settings.ai_active)

    def toggle_notifications(self) -> MonitorSettings:
        return self.update(notifications_enabled=not self.settings.notifications_enabled)

    def toggle_location(self) -> MonitorSettings:
        return self.update(location_enabled=not self.settings.location_enabled)

    def _save(self) -> None:
        self._storage.set_item(self._namespace, json.dumps(self.settings.to_dict()))


def _parse_settings(raw: str) -> MonitorSettings:
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("settings payload is not an object")
    defaults = MonitorSettings()
    return MonitorSettings(
        sensitivity=SensitivityLevel(data.get("sensitivity", defaults.sensitivity)),
        ai_active=_as_bool(data.get("aiActive", defaults.ai_active)),
        notifications_enabled=_as_bool(
            data.get("notificationsEnabled", defaults.notifications_enabled)
        ),
        location_enabled=_as_bool(data.get("locationEnabled", defaults.location_enabled)),
    )


def _as_bool(value: object) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f"expected boolean, got {type(value).__name__}")
    return value
