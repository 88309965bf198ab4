"""Async client for the alert service record store."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from libs.core.domain.entities import (
    AlertDraft,
    AlertRecord,
    AlertStatus,
    EmergencyContact,
)
from libs.core.domain.errors import RecordStoreError

logger = logging.getLogger(__name__)


class HttpRecordStore:
    """Record store backed by the alert service HTTP API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def create_alert(self, draft: AlertDraft) -> AlertRecord:
        payload = {
            "latitude": draft.latitude,
            "longitude": draft.longitude,
            "imageData": draft.image_data,
            "confidence": draft.confidence,
            "status": draft.status.value,
            "emergencyContactId": draft.emergency_contact_id,
        }
        body = await self._request("POST", "/alerts", json=payload)
        return alert_from_dict(body["alert"])

    async def list_contacts(self) -> list[EmergencyContact]:
        body = await self._request("GET", "/emergency-contacts")
        return [contact_from_dict(item) for item in body]

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as error:
            message = _error_message(error.response)
            logger.error("%s %s failed: %s", method, path, message)
            raise RecordStoreError(message) from error
        except (httpx.HTTPError, ValueError) as error:
            logger.error("%s %s failed: %s", method, path, error)
            raise RecordStoreError(str(error)) from error


def alert_from_dict(data: dict[str, Any]) -> AlertRecord:
    return AlertRecord(
        alert_id=int(data["id"]),
        user_id=int(data["userId"]),
        latitude=float(data["latitude"]),
        longitude=float(data["longitude"]),
        confidence=float(data["confidence"]),
        timestamp=str(data["timestamp"]),
        status=AlertStatus(data["status"]),
        image_data=data.get("imageData"),
        emergency_contact_id=data.get("emergencyContactId"),
    )


def contact_from_dict(data: dict[str, Any]) -> EmergencyContact:
    return EmergencyContact(
        contact_id=int(data["id"]),
        user_id=int(data["userId"]),
        name=str(data["name"]),
        phone=str(data["phone"]),
        address=data.get("address"),
        is_default=bool(data.get("isDefault", False)),
    )


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return f"HTTP {response.status_code}: {body['message']}"
    return f"HTTP {response.status_code}"
