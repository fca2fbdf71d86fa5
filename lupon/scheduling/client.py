from __future__ import annotations

import logging

import httpx
from flask import current_app, has_app_context

from lupon.config import Config

from .slots import SlotInfo

logger = logging.getLogger(__name__)


class SlotFetchError(RuntimeError):
    pass


class BookingFailed(RuntimeError):
    """The backend refused a booking; ``message`` is its text, unchanged."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def configured_base_url() -> str:
    """API_BASE_URL of the running app, else the environment default."""
    if has_app_context():
        return current_app.config.get("API_BASE_URL") or Config.API_BASE_URL
    return Config.API_BASE_URL


class SchedulingClient:
    def __init__(self, base_url: str | None = None, timeout_seconds: float = 10.0,
                 transport: httpx.BaseTransport | None = None):
        self.base_url = (base_url or configured_base_url()).rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(base_url=self.base_url, timeout=self.timeout_seconds, transport=self.transport)

    def available_slots(self, day) -> SlotInfo:
        day = day.isoformat() if hasattr(day, "isoformat") else str(day)
        try:
            with self._client() as client:
                r = client.get(f"/api/mediation/available-slots/{day}")
                data = r.json()
        except (httpx.HTTPError, ValueError) as e:
            raise SlotFetchError(f"Could not load slots for {day}: {e}") from e

        if not isinstance(data, dict):
            raise SlotFetchError(f"Unexpected response for {day}")
        if not data.get("success"):
            raise SlotFetchError(data.get("error") or f"Could not load slots for {day}")
        return SlotInfo.from_payload(data.get("data") or {})

    def schedule_mediation(self, complaint_id, day, time: str) -> dict:
        day = day.isoformat() if hasattr(day, "isoformat") else str(day)
        payload = {"complaint_id": complaint_id, "date": day, "time": time}
        try:
            with self._client() as client:
                r = client.post("/api/mediation/schedule", json=payload)
                data = r.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Mediation booking for complaint %s failed: %s", complaint_id, e)
            raise BookingFailed(str(e)) from e

        if not isinstance(data, dict):
            raise BookingFailed("Failed to schedule mediation")
        if not data.get("success"):
            raise BookingFailed(data.get("error") or data.get("message") or "Failed to schedule mediation")
        return data
