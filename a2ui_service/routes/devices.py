"""Device routes — list connected devices, push messages, push a stored design."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from a2ui.kernel.data_model import normalize_overlay
from a2ui.kernel.types import UPDATE_DATA_MODEL
from a2ui.kernel.validator import has_structural_errors, validate
from a2ui_service.deps import get_design_storage, get_device_registry
from a2ui_service.models.design import DesignRejectedResponse, ValidationErrorItem
from a2ui_service.models.device import DeviceInfo, PushDesignRequest, PushRequest, PushResponse
from a2ui_service.services.design_store import DesignStorage
from a2ui_service.services.device_registry import DeviceRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/devices", tags=["devices"])


def with_data_model(messages: list[dict[str, Any]], overlay: dict[str, Any]) -> list[dict[str, Any]]:
    """
    Copy of `messages` with `overlay` merged into every root updateDataModel.

    The design's own value is the base and the overlay wins. Overlay keys may
    be nested objects or flat slash-paths ("/hello/text"). Updates addressed
    to a sub-path are passed through untouched.
    """
    rebuilt: list[dict[str, Any]] = []
    for message in messages:
        body = message.get(UPDATE_DATA_MODEL) if isinstance(message, dict) else None
        if not isinstance(body, dict) or body.get("path") not in (None, "/") or "value" not in body:
            rebuilt.append(message)
            continue
        base = body["value"] if isinstance(body["value"], dict) else {}
        value = normalize_overlay(base, overlay)
        rebuilt.append({UPDATE_DATA_MODEL: {"surfaceId": body.get("surfaceId"), "path": "/", "value": value}})
    return rebuilt


@router.get("", status_code=200)
async def list_devices(registry: DeviceRegistry = Depends(get_device_registry)) -> list[DeviceInfo]:
    """Every device currently registered over the WebSocket."""
    return registry.list_devices()


@router.post(
    "/push",
    status_code=200,
    responses={422: {"model": DesignRejectedResponse}},
)
async def push_messages(req: PushRequest, registry: DeviceRegistry = Depends(get_device_registry)):
    """
    Push a live batch to one device (device_id) or to all of them.

    Structurally broken batches are refused; referential problems are left
    to the devices, which apply live batches best-effort.
    """
    errors = validate(req.messages, complete=False)
    if has_structural_errors(errors):
        body = DesignRejectedResponse(errors=[ValidationErrorItem(**e.to_dict()) for e in errors])
        return JSONResponse(status_code=422, content=body.model_dump())

    if req.device_id:
        if not await registry.push(req.device_id, req.messages):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Device not connected.")
        return PushResponse(pushed=1)

    return PushResponse(pushed=await registry.push_all(req.messages))


@router.post("/push-design", status_code=200)
async def push_design(
    req: PushDesignRequest,
    storage: DesignStorage = Depends(get_design_storage),
    registry: DeviceRegistry = Depends(get_device_registry),
) -> PushResponse:
    """
    Push a stored design to every connected device, optionally personalised
    with a data-model overlay.
    """
    design = await storage.get(req.design_id)
    if design is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Design not found.")

    messages = design.messages
    if req.data_model:
        messages = with_data_model(messages, req.data_model)

    pushed = await registry.push_all(messages)
    logger.info("devices: pushed design %s to %d devices", req.design_id, pushed)
    return PushResponse(pushed=pushed)
