"""
A2UI Kernel — Message Validation

Validates a batch of raw envelopes before it is allowed to touch a store.
Never raises: any input, however malformed, yields a list of ValidationError.
Empty list = valid.

Two kinds of error:
  structural  — malformed envelope/component; the message cannot be applied
  referential — dangling child id or missing/duplicate root; reportable,
                the store can still accept the components

Whole-batch rules (a createSurface and an updateComponents must be present)
apply only to complete exports (complete=True). Live incremental updates to a
surface that already exists are validated per message (complete=False).
"""

from __future__ import annotations

from typing import Any

from a2ui.kernel.types import (
    CREATE_SURFACE,
    DELETE_SURFACE,
    MESSAGE_KINDS,
    REFERENTIAL,
    ROOT_COMPONENT_ID,
    STRUCTURAL,
    UPDATE_COMPONENTS,
    UPDATE_DATA_MODEL,
    ValidationError,
)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate(messages: Any, *, complete: bool = True) -> list[ValidationError]:
    """
    Validate a batch of raw message envelopes.

    Rules, in order:
      1. non-empty list (else one error, stop)
      2. each envelope carries exactly one known message kind
      3. per-kind required fields (surfaceId, components array, ...)
      4. per-component required fields (id, component type, children, action)
      5. per-updateComponents referential integrity (child ids, one root)
      6. complete batches only: at least one createSurface and one updateComponents
    """
    if not isinstance(messages, list) or not messages:
        return [_structural("messages", "Expected a non-empty array of messages")]

    errors: list[ValidationError] = []
    seen_kinds: set[str] = set()

    for i, envelope in enumerate(messages):
        path = f"messages[{i}]"
        kind = _envelope_kind(envelope, path, errors)
        if kind is None:
            continue
        seen_kinds.add(kind)

        body = envelope[kind]
        body_path = f"{path}.{kind}"
        if not isinstance(body, dict):
            errors.append(_structural(body_path, f"{kind} payload must be an object"))
            continue

        errors.extend(_VALIDATORS[kind](body, body_path))

    if complete:
        if CREATE_SURFACE not in seen_kinds:
            errors.append(_structural("messages", "Batch must contain a createSurface message"))
        if UPDATE_COMPONENTS not in seen_kinds:
            errors.append(_structural("messages", "Batch must contain an updateComponents message"))

    return errors


def validate_message(envelope: Any, path: str = "messages[0]") -> list[ValidationError]:
    """Validate one envelope on its own (rules 2–5). Used for live updates."""
    errors: list[ValidationError] = []
    kind = _envelope_kind(envelope, path, errors)
    if kind is None:
        return errors
    body = envelope[kind]
    body_path = f"{path}.{kind}"
    if not isinstance(body, dict):
        return [_structural(body_path, f"{kind} payload must be an object")]
    return _VALIDATORS[kind](body, body_path)


def has_structural_errors(errors: list[ValidationError]) -> bool:
    return any(e.is_structural for e in errors)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _structural(path: str, message: str) -> ValidationError:
    return ValidationError(path=path, message=message, kind=STRUCTURAL)


def _referential(path: str, message: str) -> ValidationError:
    return ValidationError(path=path, message=message, kind=REFERENTIAL)


def _is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _envelope_kind(envelope: Any, path: str, errors: list[ValidationError]) -> str | None:
    if not isinstance(envelope, dict):
        errors.append(_structural(path, "Message must be an object"))
        return None
    present = [k for k in MESSAGE_KINDS if k in envelope]
    if not present:
        errors.append(_structural(path, f"Unknown message kind (keys: {sorted(envelope)})"))
        return None
    if len(present) > 1:
        errors.append(_structural(path, f"Ambiguous message: carries {', '.join(present)}"))
        return None
    return present[0]


def _check_surface_id(body: dict, path: str, kind: str) -> list[ValidationError]:
    if not _is_non_empty_str(body.get("surfaceId")):
        return [_structural(f"{path}.surfaceId", f"{kind} requires a non-empty surfaceId")]
    return []


# ---------------------------------------------------------------------------
# Per-kind validators
# ---------------------------------------------------------------------------


def _validate_create_surface(body: dict, path: str) -> list[ValidationError]:
    errors = _check_surface_id(body, path, CREATE_SURFACE)

    tokens = body.get("designTokens")
    if tokens is not None:
        if not isinstance(tokens, dict):
            errors.append(_structural(f"{path}.designTokens", "designTokens must be an object"))
        else:
            for name, token in tokens.items():
                if not isinstance(token, dict) or not isinstance(token.get("value"), str):
                    errors.append(
                        _structural(f"{path}.designTokens.{name}", "Design token requires a string 'value'")
                    )
    return errors


def _validate_update_components(body: dict, path: str) -> list[ValidationError]:
    errors = _check_surface_id(body, path, UPDATE_COMPONENTS)

    components = body.get("components")
    if not isinstance(components, list):
        errors.append(_structural(f"{path}.components", "updateComponents requires a components array"))
        return errors

    ids: set[str] = set()
    root_count = 0
    for j, comp in enumerate(components):
        comp_path = f"{path}.components[{j}]"
        errors.extend(_validate_component(comp, comp_path))
        if isinstance(comp, dict) and _is_non_empty_str(comp.get("id")):
            ids.add(comp["id"])
            if comp["id"] == ROOT_COMPONENT_ID:
                root_count += 1

    # Referential integrity within this one array
    for j, comp in enumerate(components):
        if not isinstance(comp, dict):
            continue
        children = comp.get("children")
        explicit = children.get("explicitList") if isinstance(children, dict) else None
        if not isinstance(explicit, list):
            continue
        for k, child_id in enumerate(explicit):
            if isinstance(child_id, str) and child_id not in ids:
                errors.append(
                    _referential(
                        f"{path}.components[{j}].children.explicitList[{k}]",
                        f"Child '{child_id}' is not defined in this components array",
                    )
                )

    if root_count == 0:
        errors.append(_referential(f"{path}.components", f"Missing '{ROOT_COMPONENT_ID}' component"))
    elif root_count > 1:
        errors.append(
            _referential(f"{path}.components", f"Expected exactly one '{ROOT_COMPONENT_ID}' component, found {root_count}")
        )

    return errors


def _validate_component(comp: Any, path: str) -> list[ValidationError]:
    if not isinstance(comp, dict):
        return [_structural(path, "Component must be an object")]

    errors: list[ValidationError] = []
    if not _is_non_empty_str(comp.get("id")):
        errors.append(_structural(f"{path}.id", "Component requires a non-empty id"))

    comp_type = comp.get("component", comp.get("componentType"))
    if not _is_non_empty_str(comp_type):
        errors.append(_structural(f"{path}.component", "Component requires a non-empty component type"))

    if "children" in comp:
        children = comp["children"]
        if not isinstance(children, dict):
            errors.append(_structural(f"{path}.children", "children must be an object"))
        elif "explicitList" in children:
            explicit = children["explicitList"]
            if not isinstance(explicit, list):
                errors.append(_structural(f"{path}.children.explicitList", "explicitList must be an array"))
            else:
                for k, child_id in enumerate(explicit):
                    if not isinstance(child_id, str):
                        errors.append(
                            _structural(f"{path}.children.explicitList[{k}]", "Child reference must be a string id")
                        )

    if "action" in comp:
        action = comp["action"]
        event = action.get("event") if isinstance(action, dict) else None
        if not isinstance(event, dict) or not _is_non_empty_str(event.get("name")):
            errors.append(_structural(f"{path}.action", "action requires a non-empty event name"))

    for key in ("text", "label"):
        if comp.get(key) is not None and not isinstance(comp[key], str):
            errors.append(_structural(f"{path}.{key}", f"{key} must be a string"))

    for key in ("style", "labelStyle"):
        if comp.get(key) is not None and not isinstance(comp[key], dict):
            errors.append(_structural(f"{path}.{key}", f"{key} must be an object"))

    return errors


def _validate_update_data_model(body: dict, path: str) -> list[ValidationError]:
    errors = _check_surface_id(body, path, UPDATE_DATA_MODEL)

    data_path = body.get("path")
    if data_path is not None and not isinstance(data_path, str):
        errors.append(_structural(f"{path}.path", "path must be a string"))
        return errors

    if data_path is None and "value" not in body and "dataModel" in body:
        if not isinstance(body["dataModel"], dict):
            errors.append(_structural(f"{path}.dataModel", "dataModel must be an object"))
        return errors

    if (data_path is None or data_path == "/") and not isinstance(body.get("value"), dict):
        errors.append(_structural(f"{path}.value", "Root data model value must be an object"))

    return errors


def _validate_delete_surface(body: dict, path: str) -> list[ValidationError]:
    return _check_surface_id(body, path, DELETE_SURFACE)


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------

_VALIDATORS: dict[str, Any] = {
    CREATE_SURFACE: _validate_create_surface,
    UPDATE_COMPONENTS: _validate_update_components,
    UPDATE_DATA_MODEL: _validate_update_data_model,
    DELETE_SURFACE: _validate_delete_surface,
}
