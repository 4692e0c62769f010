"""HTTP client for the A2UI design service."""
from __future__ import annotations

from typing import Any

import httpx


class ApiClient:
    """HTTP client for the A2UI design service."""

    def __init__(self, api_url: str, transport: httpx.BaseTransport | None = None):
        self.api_url = api_url.rstrip("/")
        self.client = httpx.Client(timeout=30.0, transport=transport)

    def _headers(self) -> dict:
        """Build request headers."""
        return {"Content-Type": "application/json", "Accept": "application/json"}

    def get(self, path: str, params: dict | None = None) -> Any:
        """Make GET request."""
        url = f"{self.api_url}{path}"
        res = self.client.get(url, headers=self._headers(), params=params or {})
        res.raise_for_status()
        return res.json()

    def post(self, path: str, data: dict) -> Any:
        """Make POST request."""
        url = f"{self.api_url}{path}"
        res = self.client.post(url, json=data, headers=self._headers())
        res.raise_for_status()
        return res.json()

    def list_devices(self) -> list[dict]:
        """
        List connected devices.

        Returns [{"id": "...", "platform": "...", "connected_at": "..."}]
        """
        return self.get("/api/devices")

    def push(self, messages: list[Any], device_id: str | None = None) -> int:
        """Push messages to one device, or to every device. Returns the delivery count."""
        data: dict[str, Any] = {"messages": messages}
        if device_id:
            data["device_id"] = device_id
        return self.post("/api/devices/push", data)["pushed"]

    def push_design(self, design_id: str, data_model: dict | None = None) -> int:
        """Push a stored design to every device, optionally with a data overlay."""
        data: dict[str, Any] = {"design_id": design_id}
        if data_model is not None:
            data["data_model"] = data_model
        return self.post("/api/devices/push-design", data)["pushed"]

    def save_design(self, messages: list[Any], design_id: str | None = None) -> dict:
        """Store a design. Returns the saved design."""
        data: dict[str, Any] = {"messages": messages}
        if design_id:
            data["id"] = design_id
        return self.post("/api/designs", data)

    def list_designs(self) -> list[dict]:
        """List stored designs."""
        return self.get("/api/designs")

    def close(self):
        """Close client."""
        self.client.close()
