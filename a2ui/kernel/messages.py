"""
A2UI Kernel — Message Codec

Decodes raw JSON envelopes into typed messages and back.
An envelope is decoded by looking at which of the four kind keys it carries;
anything other than exactly one is a decode error.

Also hosts factory helpers for building raw envelopes concisely
(used by tests, the CLI, and the service when rebuilding designs).
"""

from __future__ import annotations

import json
from typing import Any

from a2ui.kernel.types import (
    CREATE_SURFACE,
    DELETE_SURFACE,
    KNOWN_COMPONENT_KEYS,
    MESSAGE_KINDS,
    UPDATE_COMPONENTS,
    UPDATE_DATA_MODEL,
    ActionEvent,
    ChildList,
    ChildTemplate,
    Component,
    ComponentAction,
    CreateSurface,
    DeleteSurface,
    DesignToken,
    Message,
    UpdateComponents,
    UpdateDataModel,
)


class MessageDecodeError(ValueError):
    """Raw envelope does not decode into one of the four message kinds."""

    pass


# ---------------------------------------------------------------------------
# Envelope inspection
# ---------------------------------------------------------------------------


def message_kind(envelope: Any) -> str | None:
    """
    Return the single message kind carried by an envelope, or None when the
    envelope is not an object or carries zero or several kinds.
    """
    if not isinstance(envelope, dict):
        return None
    present = [k for k in MESSAGE_KINDS if k in envelope]
    if len(present) != 1:
        return None
    return present[0]


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _require_surface_id(body: dict[str, Any], kind: str) -> str:
    surface_id = body.get("surfaceId")
    if not isinstance(surface_id, str) or not surface_id:
        raise MessageDecodeError(f"{kind} requires a non-empty 'surfaceId'")
    return surface_id


def decode_component(raw: Any) -> Component:
    """Decode one component, keeping unrecognized keys in `extensions`."""
    if not isinstance(raw, dict):
        raise MessageDecodeError("component must be an object")

    comp_id = raw.get("id")
    if not isinstance(comp_id, str) or not comp_id:
        raise MessageDecodeError("component requires a non-empty 'id'")

    comp_type = raw.get("component", raw.get("componentType"))
    if not isinstance(comp_type, str) or not comp_type:
        raise MessageDecodeError(f"component '{comp_id}' requires a non-empty 'component'")

    children = None
    raw_children = raw.get("children")
    if raw_children is not None:
        if not isinstance(raw_children, dict):
            raise MessageDecodeError(f"component '{comp_id}': 'children' must be an object")
        explicit = raw_children.get("explicitList")
        if explicit is not None and not (
            isinstance(explicit, list) and all(isinstance(c, str) for c in explicit)
        ):
            raise MessageDecodeError(f"component '{comp_id}': 'explicitList' must be a list of ids")
        template = None
        raw_template = raw_children.get("template")
        if isinstance(raw_template, dict):
            template = ChildTemplate(
                data_path=str(raw_template.get("dataPath", "")),
                component_id=str(raw_template.get("componentId", "")),
            )
        children = ChildList(
            explicit_list=list(explicit) if explicit is not None else None,
            template=template,
        )

    action = None
    raw_action = raw.get("action")
    if raw_action is not None:
        event = raw_action.get("event") if isinstance(raw_action, dict) else None
        name = event.get("name") if isinstance(event, dict) else None
        if not isinstance(name, str) or not name:
            raise MessageDecodeError(f"component '{comp_id}': action requires a non-empty event name")
        context = event.get("context")
        action = ComponentAction(
            event=ActionEvent(name=name, context=dict(context) if isinstance(context, dict) else None)
        )

    for key in ("style", "labelStyle"):
        if raw.get(key) is not None and not isinstance(raw[key], dict):
            raise MessageDecodeError(f"component '{comp_id}': '{key}' must be an object")
    for key in ("text", "label"):
        if raw.get(key) is not None and not isinstance(raw[key], str):
            raise MessageDecodeError(f"component '{comp_id}': '{key}' must be a string")

    return Component(
        id=comp_id,
        component_type=comp_type,
        children=children,
        text=raw.get("text"),
        label=raw.get("label"),
        action=action,
        style=dict(raw["style"]) if raw.get("style") is not None else None,
        label_style=dict(raw["labelStyle"]) if raw.get("labelStyle") is not None else None,
        extensions={k: v for k, v in raw.items() if k not in KNOWN_COMPONENT_KEYS},
    )


def _decode_create_surface(body: dict[str, Any]) -> CreateSurface:
    surface_id = _require_surface_id(body, CREATE_SURFACE)
    tokens: dict[str, DesignToken] = {}
    raw_tokens = body.get("designTokens")
    if raw_tokens is not None:
        if not isinstance(raw_tokens, dict):
            raise MessageDecodeError("'designTokens' must be an object")
        for name, raw_token in raw_tokens.items():
            if not isinstance(raw_token, dict) or not isinstance(raw_token.get("value"), str):
                raise MessageDecodeError(f"design token '{name}' requires a string 'value'")
            tokens[name] = DesignToken.from_dict(raw_token)
    return CreateSurface(
        surface_id=surface_id,
        catalog_id=body.get("catalogId"),
        send_data_model=body.get("sendDataModel"),
        design_tokens=tokens,
    )


def _decode_update_components(body: dict[str, Any]) -> UpdateComponents:
    surface_id = _require_surface_id(body, UPDATE_COMPONENTS)
    raw_components = body.get("components")
    if not isinstance(raw_components, list):
        raise MessageDecodeError("updateComponents requires a 'components' array")
    # All-or-nothing: one bad component rejects the whole message
    components = [decode_component(c) for c in raw_components]
    return UpdateComponents(surface_id=surface_id, components=components)


def _decode_update_data_model(body: dict[str, Any]) -> UpdateDataModel:
    surface_id = _require_surface_id(body, UPDATE_DATA_MODEL)
    path = body.get("path")
    if path is not None and not isinstance(path, str):
        raise MessageDecodeError("'path' must be a string")

    if "value" not in body and path is None and "dataModel" in body:
        overlay = body["dataModel"]
        if not isinstance(overlay, dict):
            raise MessageDecodeError("'dataModel' must be an object")
        return UpdateDataModel(surface_id=surface_id, legacy_overlay=overlay)

    return UpdateDataModel(surface_id=surface_id, path=path, value=body.get("value"))


def _decode_delete_surface(body: dict[str, Any]) -> DeleteSurface:
    return DeleteSurface(surface_id=_require_surface_id(body, DELETE_SURFACE))


_DECODERS: dict[str, Any] = {
    CREATE_SURFACE: _decode_create_surface,
    UPDATE_COMPONENTS: _decode_update_components,
    UPDATE_DATA_MODEL: _decode_update_data_model,
    DELETE_SURFACE: _decode_delete_surface,
}


def decode_message(envelope: Any) -> Message:
    """
    Decode one raw envelope into a typed message.
    Raises MessageDecodeError on anything malformed.
    """
    kind = message_kind(envelope)
    if kind is None:
        if isinstance(envelope, dict):
            found = [k for k in MESSAGE_KINDS if k in envelope]
            if found:
                raise MessageDecodeError(f"Ambiguous envelope: carries {', '.join(found)}")
        raise MessageDecodeError("Unknown message kind")

    body = envelope[kind]
    if not isinstance(body, dict):
        raise MessageDecodeError(f"{kind} payload must be an object")
    return _DECODERS[kind](body)


def decode_messages(envelopes: list[Any]) -> list[Message]:
    return [decode_message(e) for e in envelopes]


def encode_message(message: Message) -> dict[str, Any]:
    return message.to_dict()


def parse_messages_json(text: str) -> list[Any]:
    """
    Parse raw envelopes from a JSON array or a JSON-lines stream.
    Returns the raw (undecoded) envelopes; raises json.JSONDecodeError.
    """
    stripped = text.strip()
    if not stripped:
        return []
    if stripped.startswith("["):
        parsed = json.loads(stripped)
        if not isinstance(parsed, list):
            raise ValueError("Expected a JSON array of messages")
        return parsed
    return [json.loads(line) for line in stripped.splitlines() if line.strip()]


# ---------------------------------------------------------------------------
# Envelope factories
# ---------------------------------------------------------------------------


def create_surface(
    surface_id: str,
    *,
    design_tokens: dict[str, Any] | None = None,
    catalog_id: str | None = None,
    send_data_model: bool | None = None,
) -> dict[str, Any]:
    """
    Build a raw createSurface envelope.
    Token values may be given as plain strings for brevity.
    """
    body: dict[str, Any] = {"surfaceId": surface_id}
    if catalog_id is not None:
        body["catalogId"] = catalog_id
    if send_data_model is not None:
        body["sendDataModel"] = send_data_model
    if design_tokens is not None:
        body["designTokens"] = {
            name: (tok if isinstance(tok, dict) else {"value": tok, "collection": ""})
            for name, tok in design_tokens.items()
        }
    return {CREATE_SURFACE: body}


def update_components(surface_id: str, components: list[dict[str, Any]]) -> dict[str, Any]:
    return {UPDATE_COMPONENTS: {"surfaceId": surface_id, "components": components}}


def update_data_model(surface_id: str, value: Any, path: str | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"surfaceId": surface_id}
    if path is not None:
        body["path"] = path
    body["value"] = value
    return {UPDATE_DATA_MODEL: body}


def delete_surface(surface_id: str) -> dict[str, Any]:
    return {DELETE_SURFACE: {"surfaceId": surface_id}}
