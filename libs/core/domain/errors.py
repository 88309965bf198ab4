"""Error taxonomy shared by the monitoring pipeline and the alert service."""


class FireWatchError(Exception):
    """Base class for all domain errors."""


class ModelUnavailable(FireWatchError):
    """Raised when the detection model is used before it finished loading."""


class ModelLoadError(FireWatchError):
    """Raised when the detection model cannot be loaded at all."""


class CoordinatesUnavailable(FireWatchError):
    """Raised when an alert is confirmed without a position fix."""


class PermissionDeniedError(FireWatchError):
    """Raised by a capability provider when the user refused access."""

    def __init__(self, capability: str, message: str | None = None) -> None:
        super().__init__(message or f"{capability} access denied")
        self.capability = capability


class RecordStoreError(FireWatchError):
    """Raised when the record store fails to persist or fetch data."""
