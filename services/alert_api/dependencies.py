from services.alert_api.infrastructure.memory_store import (
    DEFAULT_USER_ID,
    InMemoryAlertRepository,
    InMemoryDatabase,
    InMemoryEmergencyContactRepository,
    InMemorySettingsRepository,
    seed_demo_data,
)

db = InMemoryDatabase()
alert_repository = InMemoryAlertRepository(db)
contact_repository = InMemoryEmergencyContactRepository(db)
settings_repository = InMemorySettingsRepository(db)
seed_demo_data(db)


def get_alert_repository() -> InMemoryAlertRepository:
    return alert_repository


def get_contact_repository() -> InMemoryEmergencyContactRepository:
    return contact_repository


def get_settings_repository() -> InMemorySettingsRepository:
    return settings_repository


def get_current_user_id() -> int:
    return DEFAULT_USER_ID


def reset_state() -> None:
    db.clear()
    seed_demo_data(db)
