"""
A2UI Kernel — Surface Store

Folds a stream of protocol messages into per-surface state, one message at a
time, in arrival order. Messages are never reordered or coalesced.

  createSurface     → fresh Surface (replaces any existing one with that id)
  updateComponents  → upsert each component by id (full replace per id)
  updateDataModel   → replace the whole model ("/" or no path) or upsert at path
  deleteSurface     → remove the surface; the old handle goes stale

apply() never throws — it always returns an ApplyResult. Updates against a
surface that does not exist are logged and ignored.

Same-surface updates must be serialized by the caller; the store does
unsynchronized read-modify-write on each surface.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any

from a2ui.kernel.data_model import normalize_overlay, set_at_path, split_path
from a2ui.kernel.messages import MessageDecodeError, decode_message
from a2ui.kernel.surface import Surface
from a2ui.kernel.types import (
    CREATE_SURFACE,
    DELETE_SURFACE,
    UPDATE_COMPONENTS,
    UPDATE_DATA_MODEL,
    ApplyResult,
    CreateSurface,
    DeleteSurface,
    Message,
    StoreChange,
    UpdateComponents,
    UpdateDataModel,
    Warning,
)

logger = logging.getLogger(__name__)

Listener = Callable[[StoreChange], None]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _reject(surface_id: str | None, reason: str) -> ApplyResult:
    return ApplyResult(accepted=False, surface_id=surface_id, reason=reason)


def _ok(surface_id: str, warnings: list[Warning] | None = None) -> ApplyResult:
    return ApplyResult(accepted=True, surface_id=surface_id, warnings=warnings or [])


def _component_warnings(surface: Surface) -> list[Warning]:
    """Referential conditions worth reporting after a component update."""
    warnings: list[Warning] = []
    if not surface.is_renderable:
        warnings.append(
            Warning(
                code="MISSING_ROOT",
                message=f"surface '{surface.surface_id}' has no '{surface.root_component_id}' component",
            )
        )
    for parent_id, child_id in surface.components.dangling_references():
        warnings.append(
            Warning(
                code="DANGLING_CHILD",
                message=f"component '{parent_id}' references missing child '{child_id}'",
                details={"parent": parent_id, "child": child_id},
            )
        )
    return warnings


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class SurfaceStore:
    """
    Owns every Surface for one process/session.

    Lifecycle: construct → apply messages → query → dispose.
    Several stores can coexist; there is no module-level registry.
    """

    def __init__(self, *, accept_legacy_data_model: bool = True) -> None:
        self._surfaces: dict[str, Surface] = {}
        self._listeners: list[Listener] = []
        self._accept_legacy_data_model = accept_legacy_data_model
        self._disposed = False

    # -- queries --

    def get_surface(self, surface_id: str) -> Surface | None:
        return self._surfaces.get(surface_id)

    @property
    def surfaces(self) -> Mapping[str, Surface]:
        return MappingProxyType(self._surfaces)

    def __contains__(self, surface_id: object) -> bool:
        return surface_id in self._surfaces

    def __len__(self) -> int:
        return len(self._surfaces)

    # -- subscriptions --

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a "store changed" listener. Returns an unsubscribe callable.
        Listeners run synchronously after each accepted mutation.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, kind: str, surface_id: str) -> None:
        change = StoreChange(kind=kind, surface_id=surface_id)
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                logger.exception("store: listener failed for %s on %s", kind, surface_id)

    # -- mutation --

    def apply(self, message: Message | dict[str, Any]) -> ApplyResult:
        """
        Apply one message (typed, or a raw envelope that is decoded first).
        Each message is all-or-nothing.
        """
        if self._disposed:
            return _reject(None, "STORE_DISPOSED: store has been disposed")

        if isinstance(message, dict):
            try:
                message = decode_message(message)
            except MessageDecodeError as e:
                logger.warning("store: rejecting undecodable message: %s", e)
                return _reject(None, f"INVALID_MESSAGE: {e}")

        handler = _HANDLERS.get(message.kind)
        if handler is None:  # pragma: no cover - every Message kind has a handler
            return _reject(getattr(message, "surface_id", None), f"UNKNOWN_MESSAGE: {message.kind}")

        result = handler(self, message)
        if result.accepted:
            self._notify(message.kind, message.surface_id)
        return result

    def apply_all(self, messages: Iterable[Message | dict[str, Any]]) -> list[ApplyResult]:
        """Left fold over messages in arrival order."""
        return [self.apply(m) for m in messages]

    def dispose(self) -> None:
        """Drop all surfaces (their handles go stale) and all listeners."""
        for surface in self._surfaces.values():
            surface.mark_stale()
        self._surfaces.clear()
        self._listeners.clear()
        self._disposed = True

    # -- handlers --

    def _create_surface(self, msg: CreateSurface) -> ApplyResult:
        previous = self._surfaces.get(msg.surface_id)
        if previous is not None:
            previous.mark_stale()
            logger.debug("store: replacing surface %s", msg.surface_id)

        self._surfaces[msg.surface_id] = Surface(
            msg.surface_id,
            design_tokens=msg.design_tokens,
            catalog_id=msg.catalog_id,
            send_data_model=msg.send_data_model,
        )
        return _ok(msg.surface_id)

    def _update_components(self, msg: UpdateComponents) -> ApplyResult:
        surface = self._surfaces.get(msg.surface_id)
        if surface is None:
            logger.warning("store: updateComponents for unknown surface %s ignored", msg.surface_id)
            return _reject(msg.surface_id, f"SURFACE_NOT_FOUND: '{msg.surface_id}' does not exist")

        surface.components.upsert_all(msg.components)
        warnings = _component_warnings(surface)
        for w in warnings:
            logger.info("store: %s: %s", w.code, w.message)
        return _ok(msg.surface_id, warnings)

    def _update_data_model(self, msg: UpdateDataModel) -> ApplyResult:
        surface = self._surfaces.get(msg.surface_id)
        if surface is None:
            logger.warning("store: updateDataModel for unknown surface %s ignored", msg.surface_id)
            return _reject(msg.surface_id, f"SURFACE_NOT_FOUND: '{msg.surface_id}' does not exist")

        if msg.legacy_overlay is not None:
            if not self._accept_legacy_data_model:
                return _reject(msg.surface_id, "LEGACY_DATA_MODEL: 'dataModel' key is not accepted")
            surface.data_model = normalize_overlay(surface.data_model, msg.legacy_overlay)
            return _ok(msg.surface_id)

        if msg.replaces_root:
            if not isinstance(msg.value, dict):
                logger.warning("store: non-object root value for surface %s ignored", msg.surface_id)
                return _reject(
                    msg.surface_id,
                    f"NON_OBJECT_ROOT_VALUE: root data model must be an object, got {type(msg.value).__name__}",
                )
            surface.data_model = copy.deepcopy(msg.value)
            return _ok(msg.surface_id)

        if not split_path(msg.path or ""):
            return _reject(msg.surface_id, f"INVALID_PATH: '{msg.path}' has no segments")
        set_at_path(surface.data_model, msg.path, copy.deepcopy(msg.value))
        return _ok(msg.surface_id)

    def _delete_surface(self, msg: DeleteSurface) -> ApplyResult:
        surface = self._surfaces.pop(msg.surface_id, None)
        if surface is None:
            logger.warning("store: deleteSurface for unknown surface %s ignored", msg.surface_id)
            return _reject(msg.surface_id, f"SURFACE_NOT_FOUND: '{msg.surface_id}' does not exist")
        surface.mark_stale()
        return _ok(msg.surface_id)


# ---------------------------------------------------------------------------
# Handler dispatch table
# ---------------------------------------------------------------------------

_HANDLERS: dict[str, Any] = {
    CREATE_SURFACE: SurfaceStore._create_surface,
    UPDATE_COMPONENTS: SurfaceStore._update_components,
    UPDATE_DATA_MODEL: SurfaceStore._update_data_model,
    DELETE_SURFACE: SurfaceStore._delete_surface,
}
