"""
Connected device registry.

Tracks every device that completed the WebSocket register handshake and
fans A2UI message batches out to them. A device that fails a send is
dropped from the registry.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol

from a2ui_service.models.device import A2UIMessagesFrame, DeviceInfo

logger = logging.getLogger(__name__)


class DeviceConnection(Protocol):
    async def send_text(self, data: str) -> None: ...


@dataclass
class ConnectedDevice:
    id: str
    platform: str
    connection: DeviceConnection
    connected_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def info(self) -> DeviceInfo:
        return DeviceInfo(id=self.id, platform=self.platform, connected_at=self.connected_at)


def messages_frame(messages: list[Any]) -> str:
    """Serialize a push frame: {"type": "a2ui_messages", "messages": [...]}."""
    return json.dumps(A2UIMessagesFrame(messages=messages).model_dump())


class DeviceRegistry:
    """All connected devices, keyed by device id."""

    def __init__(self) -> None:
        self._devices: dict[str, ConnectedDevice] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._devices)

    def __contains__(self, device_id: object) -> bool:
        return device_id in self._devices

    def list_devices(self) -> list[DeviceInfo]:
        return [d.info() for d in self._devices.values()]

    async def register(self, device_id: str, platform: str, connection: DeviceConnection) -> ConnectedDevice:
        """Add a device. A re-registering id replaces the older connection."""
        device = ConnectedDevice(id=device_id, platform=platform, connection=connection)
        async with self._lock:
            self._devices[device_id] = device
        logger.info("devices: registered %s (%s)", device_id, platform)
        return device

    async def unregister(self, device_id: str, connection: DeviceConnection | None = None) -> None:
        """
        Remove a device. When `connection` is given, only remove the entry if
        it still belongs to that connection (a newer registration wins).
        """
        async with self._lock:
            device = self._devices.get(device_id)
            if device is None:
                return
            if connection is not None and device.connection is not connection:
                return
            del self._devices[device_id]
        logger.info("devices: disconnected %s", device_id)

    async def _send(self, device: ConnectedDevice, payload: str) -> bool:
        try:
            await device.connection.send_text(payload)
            return True
        except Exception as e:
            logger.warning("devices: send to %s failed, dropping: %s", device.id, e)
            await self.unregister(device.id, device.connection)
            return False

    async def push(self, device_id: str, messages: list[Any]) -> bool:
        """Push to one device. Returns False if it is not connected."""
        device = self._devices.get(device_id)
        if device is None:
            return False
        ok = await self._send(device, messages_frame(messages))
        if ok:
            logger.info("devices: pushed %d messages to %s", len(messages), device_id)
        return ok

    async def push_all(self, messages: list[Any]) -> int:
        """Push to every connected device. Returns how many received it."""
        payload = messages_frame(messages)
        devices = list(self._devices.values())
        results = await asyncio.gather(*(self._send(d, payload) for d in devices))
        count = sum(1 for ok in results if ok)
        logger.info("devices: pushed %d messages to %d/%d devices", len(messages), count, len(devices))
        return count
