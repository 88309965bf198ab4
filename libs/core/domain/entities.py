from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class SensitivityLevel(str, Enum):
    """User-facing detection sensitivity."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AlertState(str, Enum):
    """Lifecycle of the fire alert within one monitoring session."""

    IDLE = "idle"
    PENDING_CONFIRMATION = "pending_confirmation"
    SENT = "sent"


class AlertStatus(str, Enum):
    """Status stored on a persisted alert record."""

    PENDING = "pending"
    SENT = "sent"
    CANCELED = "canceled"


class ReadyState(str, Enum):
    """Readiness of a live frame source."""

    NOT_READY = "not_ready"
    READY_FOR_CAPTURE = "ready_for_capture"
    ENDED = "ended"


class CapabilityResult(str, Enum):
    """Outcome of an optional device capability request."""

    SUCCESS = "success"
    UNSUPPORTED = "unsupported"
    FAILED = "failed"


@dataclass(frozen=True)
class Frame:
    """One sampled image from a live video source."""

    data: Any
    width: int
    height: int
    captured_at: float = 0.0


@dataclass(frozen=True)
class RawPrediction:
    """Candidate region as produced by the detection model."""

    box: tuple[float, float, float, float]
    score: float
    label: str = "fire"


@dataclass(frozen=True)
class Detection:
    """Scored candidate region in source-frame pixel space."""

    bbox: tuple[float, float, float, float]
    label: str
    score: float


@dataclass(frozen=True)
class Coordinates:
    """Best-effort position fix."""

    latitude: float
    longitude: float
    accuracy: float
    timestamp: float

    def as_text(self) -> str:
        return f"{self.latitude:.4f}, {self.longitude:.4f}"


@dataclass(frozen=True)
class VideoDevice:
    """Video input device reported by the capability provider."""

    device_id: str
    label: str = ""


@dataclass
class AlertDraft:
    """Alert payload built by the state machine before it is persisted."""

    latitude: float
    longitude: float
    confidence: float
    status: AlertStatus = AlertStatus.SENT
    image_data: Optional[str] = None
    emergency_contact_id: Optional[int] = None


@dataclass
class AlertRecord:
    """Persisted emergency alert."""

    alert_id: int
    user_id: int
    latitude: float
    longitude: float
    confidence: float
    timestamp: str
    status: AlertStatus
    image_data: Optional[str] = None
    emergency_contact_id: Optional[int] = None


@dataclass
class EmergencyContact:
    """Person or service notified when an alert is dispatched."""

    contact_id: int
    user_id: int
    name: str
    phone: str
    address: Optional[str] = None
    is_default: bool = False


@dataclass
class UserSettings:
    """Server-side settings record, one per user."""

    settings_id: int
    user_id: int
    sensitivity: SensitivityLevel = SensitivityLevel.MEDIUM
    notifications_enabled: bool = True
    location_enabled: bool = True


@dataclass
class MonitorSettings:
    """Client settings that gate and tune the detection pipeline."""

    sensitivity: SensitivityLevel = SensitivityLevel.MEDIUM
    ai_active: bool = True
    notifications_enabled: bool = True
    location_enabled: bool = True

    def to_dict(self) -> dict[str, object]:
        return {
            "sensitivity": self.sensitivity.value,
            "aiActive": self.ai_active,
            "notificationsEnabled": self.notifications_enabled,
            "locationEnabled": self.location_enabled,
        }


@dataclass
class SessionStatus:
    """Snapshot of a monitoring session for a presentation layer."""

    monitoring: bool
    ai_unavailable: bool
    camera_available: bool
    location_available: bool
    battery_level: float | None
    location_text: str
    alert_state: AlertState
    confidence: float
    warnings: list[str] = field(default_factory=list)
