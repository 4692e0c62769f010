"""
WebSocket endpoint for device connections.

Devices connect at WS_PATH, register, and then receive A2UI message batches
pushed through the device routes.
"""

from __future__ import annotations

import json
import logging
import time

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from a2ui_service.config import settings
from a2ui_service.deps import get_device_registry
from a2ui_service.models.device import RegisteredFrame, RegisterFrame
from a2ui_service.services.device_registry import DeviceRegistry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])


@router.websocket(settings.WS_PATH)
async def device_websocket(websocket: WebSocket, registry: DeviceRegistry = Depends(get_device_registry)) -> None:
    """
    Device connection.

    Protocol:
      Device → Server:  {"type": "register", "platform": "ios", "deviceId": "..."}
      Server → Device:  {"type": "registered", "deviceId": "..."}
                        {"type": "a2ui_messages", "messages": [...]}

    Malformed frames are logged and ignored. Disconnect unregisters the device.
    """
    await websocket.accept()
    device_id = f"device-{int(time.time() * 1000)}"
    registered = False
    logger.info("ws: connection accepted from %s", websocket.client.host if websocket.client else "unknown")

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                msg = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning("ws: malformed frame from %s: %r", device_id, raw[:200])
                continue

            if not isinstance(msg, dict) or msg.get("type") != "register":
                logger.debug("ws: ignoring frame from %s", device_id)
                continue

            try:
                frame = RegisterFrame.model_validate(msg)
            except ValidationError as e:
                logger.warning("ws: bad register frame from %s: %s", device_id, e)
                continue

            new_id = frame.deviceId or device_id
            if registered and new_id != device_id:
                await registry.unregister(device_id, websocket)
            device_id = new_id
            await registry.register(device_id, frame.platform, websocket)
            registered = True
            await websocket.send_text(RegisteredFrame(deviceId=device_id).model_dump_json())
    except WebSocketDisconnect:
        logger.info("ws: %s disconnected", device_id)
    finally:
        if registered:
            await registry.unregister(device_id, websocket)
