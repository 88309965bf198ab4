import logging

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from libs.core.domain.entities import (
    AlertDraft,
    AlertRecord,
    AlertStatus,
    EmergencyContact,
    SensitivityLevel,
    UserSettings,
)
from libs.core.domain.errors import RecordStoreError
from services.alert_api.dependencies import (
    get_alert_repository,
    get_contact_repository,
    get_current_user_id,
    get_settings_repository,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class AlertRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    image_data: str | None = Field(default=None, alias="imageData")
    confidence: float = Field(ge=0.0, le=100.0)
    status: AlertStatus = AlertStatus.PENDING
    emergency_contact_id: int | None = Field(default=None, alias="emergencyContactId")


class AlertStatusRequest(BaseModel):
    status: AlertStatus


class ContactRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    address: str | None = None
    is_default: bool = Field(default=False, alias="isDefault")


class ContactUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(default=None, min_length=1)
    phone: str | None = Field(default=None, min_length=1)
    address: str | None = None
    is_default: bool | None = Field(default=None, alias="isDefault")


class SettingsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sensitivity: SensitivityLevel | None = None
    notifications_enabled: bool | None = Field(default=None, alias="notificationsEnabled")
    location_enabled: bool | None = Field(default=None, alias="locationEnabled")


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/ready")
def ready() -> dict[str, str]:
    return {"status": "ready"}


@router.get("/version")
def version() -> dict[str, str]:
    return {"version": "0.1.0"}


@router.get("/favicon.ico")
def favicon() -> Response:
    return Response(status_code=204)


@router.post("/alerts")
def create_alert(payload: AlertRequest) -> JSONResponse:
    draft = AlertDraft(
        latitude=payload.latitude,
        longitude=payload.longitude,
        confidence=payload.confidence,
        status=payload.status,
        image_data=payload.image_data,
        emergency_contact_id=payload.emergency_contact_id,
    )
    try:
        alert = get_alert_repository().create(get_current_user_id(), draft)
    except RecordStoreError as error:
        logger.error("Error creating alert: %s", error)
        return JSONResponse(status_code=500, content={"message": "Failed to send alert"})

    logger.info("Alert %s stored with status %s", alert.alert_id, alert.status.value)
    return JSONResponse(
        status_code=200,
        content={"message": "Alert sent successfully", "alert": _alert_to_dict(alert)},
    )


@router.get("/alerts")
def list_alerts() -> list[dict[str, object]]:
    alerts = get_alert_repository().list_by_user(get_current_user_id())
    return [_alert_to_dict(alert) for alert in alerts]


@router.patch("/alerts/{alert_id}/status")
def update_alert_status(alert_id: int, payload: AlertStatusRequest) -> dict[str, object]:
    repository = get_alert_repository()
    existing = repository.get(alert_id)
    if existing is None or existing.user_id != get_current_user_id():
        raise HTTPException(status_code=404, detail="Alert not found")
    alert = repository.update_status(alert_id=alert_id, status=payload.status)
    if alert is None:
        raise HTTPException(status_code=404, detail="Alert not found")
    return _alert_to_dict(alert)


@router.get("/emergency-contacts")
def list_contacts() -> list[dict[str, object]]:
    try:
        contacts = get_contact_repository().list(get_current_user_id())
    except RecordStoreError as error:
        logger.error("Error fetching emergency contacts: %s", error)
        raise HTTPException(
            status_code=500, detail="Failed to fetch emergency contacts"
        ) from error
    return [_contact_to_dict(contact) for contact in contacts]


@router.post("/emergency-contacts", status_code=201)
def create_contact(payload: ContactRequest) -> dict[str, object]:
    try:
        contact = get_contact_repository().create(
            get_current_user_id(),
            {
                "name": payload.name,
                "phone": payload.phone,
                "address": payload.address,
                "is_default": payload.is_default,
            },
        )
    except RecordStoreError as error:
        logger.error("Error creating emergency contact: %s", error)
        raise HTTPException(
            status_code=500, detail="Failed to create emergency contact"
        ) from error
    return _contact_to_dict(contact)


@router.get("/emergency-contacts/{contact_id}")
def get_contact(contact_id: int) -> dict[str, object]:
    contact = get_contact_repository().get(contact_id)
    if contact is None or contact.user_id != get_current_user_id():
        raise HTTPException(status_code=404, detail="Emergency contact not found")
    return _contact_to_dict(contact)


@router.put("/emergency-contacts/{contact_id}")
def update_contact(contact_id: int, payload: ContactUpdateRequest) -> dict[str, object]:
    repository = get_contact_repository()
    existing = repository.get(contact_id)
    if existing is None or existing.user_id != get_current_user_id():
        raise HTTPException(status_code=404, detail="Emergency contact not found")
    changes = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key == "address"
    }
    contact = repository.update(contact_id, changes)  # type: ignore[arg-type]
    if contact is None:
        raise HTTPException(status_code=404, detail="Emergency contact not found")
    return _contact_to_dict(contact)


@router.delete("/emergency-contacts/{contact_id}", status_code=204)
def delete_contact(contact_id: int) -> Response:
    repository = get_contact_repository()
    existing = repository.get(contact_id)
    if existing is None or existing.user_id != get_current_user_id():
        raise HTTPException(status_code=404, detail="Emergency contact not found")
    repository.delete(contact_id)
    return Response(status_code=204)


@router.get("/settings")
def get_settings() -> dict[str, object]:
    settings = get_settings_repository().get(get_current_user_id())
    if settings is None:
        raise HTTPException(status_code=404, detail="Settings not found")
    return _settings_to_dict(settings)


@router.put("/settings")
def update_settings(payload: SettingsRequest) -> dict[str, object]:
    values = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None
    }
    try:
        settings = get_settings_repository().update(
            get_current_user_id(), values  # type: ignore[arg-type]
        )
    except RecordStoreError as error:
        logger.error("Error updating settings: %s", error)
        raise HTTPException(status_code=500, detail="Failed to update settings") from error
    return _settings_to_dict(settings)


def _alert_to_dict(alert: AlertRecord) -> dict[str, object]:
    return {
        "id": alert.alert_id,
        "userId": alert.user_id,
        "latitude": alert.latitude,
        "longitude": alert.longitude,
        "imageData": alert.image_data,
        "confidence": alert.confidence,
        "timestamp": alert.timestamp,
        "status": alert.status.value,
        "emergencyContactId": alert.emergency_contact_id,
    }


def _contact_to_dict(contact: EmergencyContact) -> dict[str, object]:
    return {
        "id": contact.contact_id,
        "userId": contact.user_id,
        "name": contact.name,
        "phone": contact.phone,
        "address": contact.address,
        "isDefault": contact.is_default,
    }


def _settings_to_dict(settings: UserSettings) -> dict[str, object]:
    return {
        "id": settings.settings_id,
        "userId": settings.user_id,
        "sensitivity": settings.sensitivity.value,
        "notificationsEnabled": settings.notifications_enabled,
        "locationEnabled": settings.location_enabled,
    }
