from typing import Awaitable, Iterable, Protocol, TypedDict, Union

from libs.core.domain.entities import (
    AlertDraft,
    AlertRecord,
    AlertStatus,
    CapabilityResult,
    Coordinates,
    EmergencyContact,
    Frame,
    RawPrediction,
    ReadyState,
    SensitivityLevel,
    UserSettings,
    VideoDevice,
)


class NewContact(TypedDict, total=False):
    """Emergency contact payload passed to repositories."""

    name: str
    phone: str
    address: str | None
    is_default: bool


class SettingsUpdate(TypedDict, total=False):
    """Partial settings payload passed to repositories."""

    sensitivity: SensitivityLevel
    notifications_enabled: bool
    location_enabled: bool


class AlertRepository(Protocol):
    """Alert persistence contract."""

    def create(self, user_id: int, draft: AlertDraft) -> AlertRecord: ...

    def get(self, alert_id: int) -> AlertRecord | None: ...

    def list_by_user(self, user_id: int) -> list[AlertRecord]: ...

    def update_status(
        self,
        alert_id: int,
        status: AlertStatus,
    ) -> AlertRecord | None: ...


class EmergencyContactRepository(Protocol):
    """Emergency contact persistence contract."""

    def create(self, user_id: int, contact: NewContact) -> EmergencyContact: ...

    def list(self, user_id: int) -> list[EmergencyContact]: ...

    def get(self, contact_id: int) -> EmergencyContact | None: ...

    def update(
        self,
        contact_id: int,
        changes: NewContact,
    ) -> EmergencyContact | None: ...

    def delete(self, contact_id: int) -> bool: ...


class SettingsRepository(Protocol):
    """Per-user settings persistence contract."""

    def get(self, user_id: int) -> UserSettings | None: ...

    def create(self, user_id: int, values: SettingsUpdate) -> UserSettings: ...

    def update(self, user_id: int, values: SettingsUpdate) -> UserSettings: ...


class AlertRecordStore(Protocol):
    """Record store as seen from the monitoring client."""

    async def create_alert(self, draft: AlertDraft) -> AlertRecord: ...

    async def list_contacts(self) -> list[EmergencyContact]: ...


class FrameSource(Protocol):
    """Live video stream acquired from a capability provider."""

    @property
    def ready_state(self) -> ReadyState: ...

    async def read_frame(self) -> Frame: ...

    def capture_still(self) -> bytes | None: ...

    def stop(self) -> None: ...


class CapabilityProvider(Protocol):
    """Device sensors and media available to a monitoring session."""

    async def list_devices(self) -> list[VideoDevice]: ...

    async def open_frame_source(self, device_id: str | None) -> FrameSource: ...

    async def set_torch(
        self,
        source: FrameSource,
        enabled: bool,
    ) -> CapabilityResult: ...

    async def get_coordinates(self) -> Coordinates | None: ...

    async def get_battery_level(self) -> float | None: ...

    async def request_wake_lock(self) -> CapabilityResult: ...


PredictionResult = Union[Iterable[RawPrediction], Awaitable[Iterable[RawPrediction]]]


class DetectionModel(Protocol):
    """Opaque object-detection model."""

    def predict(self, frame: Frame) -> PredictionResult: ...


class Notifier(Protocol):
    """Fire-and-forget audio/haptic feedback."""

    def notify(self, confidence: float) -> None: ...


class KeyValueStore(Protocol):
    """Local string key-value namespace."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...
