"""In-memory record store for alerts, emergency contacts and settings (MVP)."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from libs.core.application.contracts import NewContact, SettingsUpdate
from libs.core.domain.entities import (
    AlertDraft,
    AlertRecord,
    AlertStatus,
    EmergencyContact,
    SensitivityLevel,
    UserSettings,
)

DEFAULT_USER_ID = 1


@dataclass
class InMemoryDatabase:
    """Tables and id sequences shared by the in-memory repositories."""

    alerts: dict[int, AlertRecord] = field(default_factory=dict)
    contacts: dict[int, EmergencyContact] = field(default_factory=dict)
    settings: dict[int, UserSettings] = field(default_factory=dict)
    sequences: dict[str, int] = field(default_factory=dict)

    def next_id(self, table: str) -> int:
        value = self.sequences.get(table, 0) + 1
        self.sequences[table] = value
        return value

    def clear(self) -> None:
        self.alerts.clear()
        self.contacts.clear()
        self.settings.clear()
        self.sequences.clear()


class InMemoryAlertRepository:
    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    def create(self, user_id: int, draft: AlertDraft) -> AlertRecord:
        alert = AlertRecord(
            alert_id=self._db.next_id("alerts"),
            user_id=user_id,
            latitude=draft.latitude,
            longitude=draft.longitude,
            confidence=draft.confidence,
            timestamp=_utc_now_iso(),
            status=draft.status,
            image_data=draft.image_data,
            emergency_contact_id=draft.emergency_contact_id,
        )
        self._db.alerts[alert.alert_id] = alert
        return alert

    def get(self, alert_id: int) -> AlertRecord | None:
        return self._db.alerts.get(alert_id)

    def list_by_user(self, user_id: int) -> list[AlertRecord]:
        alerts = [item for item in self._db.alerts.values() if item.user_id == user_id]
        return sorted(alerts, key=lambda item: (item.timestamp, item.alert_id), reverse=True)

    def update_status(self, alert_id: int, status: AlertStatus) -> AlertRecord | None:
        alert = self._db.alerts.get(alert_id)
        if alert is None:
            return None
        updated = replace(alert, status=status)
        self._db.alerts[alert_id] = updated
        return updated


class InMemoryEmergencyContactRepository:
    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    def create(self, user_id: int, contact: NewContact) -> EmergencyContact:
        record = EmergencyContact(
            contact_id=self._db.next_id("contacts"),
            user_id=user_id,
            name=contact["name"],
            phone=contact["phone"],
            address=contact.get("address"),
            is_default=bool(contact.get("is_default", False)),
        )
        if record.is_default:
            self._clear_default(user_id=user_id, keep_id=record.contact_id)
        self._db.contacts[record.contact_id] = record
        return record

    def list(self, user_id: int) -> list[EmergencyContact]:
        return [item for item in self._db.contacts.values() if item.user_id == user_id]

    def get(self, contact_id: int) -> EmergencyContact | None:
        return self._db.contacts.get(contact_id)

    def update(self, contact_id: int, changes: NewContact) -> EmergencyContact | None:
        contact = self._db.contacts.get(contact_id)
        if contact is None:
            return None
        updated = replace(contact, **changes)
        if changes.get("is_default"):
            self._clear_default(user_id=contact.user_id, keep_id=contact_id)
        self._db.contacts[contact_id] = updated
        return updated

    def delete(self, contact_id: int) -> bool:
        return self._db.contacts.pop(contact_id, None) is not None

    def _clear_default(self, user_id: int, keep_id: int) -> None:
        for contact_id, contact in list(self._db.contacts.items()):
            if contact_id != keep_id and contact.user_id == user_id and contact.is_default:
                self._db.contacts[contact_id] = replace(contact, is_default=False)


class InMemorySettingsRepository:
    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    def get(self, user_id: int) -> UserSettings | None:
        return next(
            (item for item in self._db.settings.values() if item.user_id == user_id),
            None,
        )

    def create(self, user_id: int, values: SettingsUpdate) -> UserSettings:
        settings = UserSettings(
            settings_id=self._db.next_id("settings"),
            user_id=user_id,
            **values,
        )
        self._db.settings[settings.settings_id] = settings
        return settings

    def update(self, user_id: int, values: SettingsUpdate) -> UserSettings:
        existing = self.get(user_id)
        if existing is None:
            return self.create(user_id, values)
        updated = replace(existing, **values)
        self._db.settings[existing.settings_id] = updated
        return updated


class InProcessRecordStore:
    """Async record store that talks to the in-memory repositories directly."""

    def __init__(
        self,
        alerts: InMemoryAlertRepository,
        contacts: InMemoryEmergencyContactRepository,
        user_id: int = DEFAULT_USER_ID,
    ) -> None:
        self._alerts = alerts
        self._contacts = contacts
        self._user_id = user_id

    async def create_alert(self, draft: AlertDraft) -> AlertRecord:
        return self._alerts.create(self._user_id, draft)

    async def list_contacts(self) -> list[EmergencyContact]:
        return self._contacts.list(self._user_id)


def seed_demo_data(db: InMemoryDatabase) -> None:
    """Populate the store with the demo user's contact and settings."""
    InMemoryEmergencyContactRepository(db).create(
        DEFAULT_USER_ID,
        {
            "name": "Local Fire Department",
            "phone": "911",
            "address": "123 Emergency St",
            "is_default": True,
        },
    )
    InMemorySettingsRepository(db).create(
        DEFAULT_USER_ID,
        {
            "sensitivity": SensitivityLevel.MEDIUM,
            "notifications_enabled": True,
            "location_enabled": True,
        },
    )


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
