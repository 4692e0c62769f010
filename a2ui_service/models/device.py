"""Device models: registry entries, push requests, and WebSocket frames."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class DeviceInfo(BaseModel):
    """A connected device as reported by GET /api/devices (no socket handle)."""

    id: str
    platform: str
    connected_at: datetime


class PushRequest(BaseModel):
    """What the client sends to POST /api/devices/push."""

    model_config = {"extra": "forbid"}

    device_id: str | None = None
    messages: list[Any] = Field(min_length=1)


class PushDesignRequest(BaseModel):
    """What the client sends to POST /api/devices/push-design."""

    model_config = {"extra": "forbid"}

    design_id: str = Field(min_length=1)
    data_model: dict[str, Any] | None = None


class PushResponse(BaseModel):
    pushed: int


# ── WebSocket frames ────────────────────────────────────────────────────────


class RegisterFrame(BaseModel):
    """Device → server handshake."""

    type: Literal["register"]
    platform: str = "unknown"
    deviceId: str | None = None


class RegisteredFrame(BaseModel):
    """Server → device handshake acknowledgement."""

    type: Literal["registered"] = "registered"
    deviceId: str


class A2UIMessagesFrame(BaseModel):
    """Server → device push of protocol messages."""

    type: Literal["a2ui_messages"] = "a2ui_messages"
    messages: list[Any]
