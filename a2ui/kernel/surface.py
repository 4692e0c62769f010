"""
A2UI Kernel — Surface

One independently addressable screen: design tokens + component table + data model.
Surfaces are owned by a SurfaceStore; consumers read them through the
accessors below and never mutate them directly.

A handle is live until the store deletes or replaces its surface. After that
it is stale: a frozen snapshot of the state it had at that moment. The store
never writes to a stale handle again, so the accessors keep answering from
that old state. Re-fetch with SurfaceStore.get_surface to see current state.
"""

from __future__ import annotations

import copy
from datetime import datetime
from typing import Any

from a2ui.kernel.components import ComponentTable
from a2ui.kernel.data_model import get_at_path
from a2ui.kernel.resolvers import binding_path, resolve_style, resolve_style_value, resolve_text
from a2ui.kernel.types import (
    ROOT_COMPONENT_ID,
    Component,
    CreateSurface,
    DesignToken,
    Message,
    UpdateComponents,
    UpdateDataModel,
)


class Surface:
    __slots__ = (
        "surface_id",
        "root_component_id",
        "components",
        "data_model",
        "design_tokens",
        "catalog_id",
        "send_data_model",
        "_stale",
    )

    def __init__(
        self,
        surface_id: str,
        *,
        design_tokens: dict[str, DesignToken] | None = None,
        catalog_id: str | None = None,
        send_data_model: bool | None = None,
        root_component_id: str = ROOT_COMPONENT_ID,
    ) -> None:
        self.surface_id = surface_id
        self.root_component_id = root_component_id
        self.components = ComponentTable()
        self.data_model: dict[str, Any] = {}
        self.design_tokens: dict[str, DesignToken] = dict(design_tokens or {})
        self.catalog_id = catalog_id
        self.send_data_model = send_data_model
        self._stale = False

    def __repr__(self) -> str:  # pragma: no cover
        state = "stale" if self._stale else f"{len(self.components)} components"
        return f"Surface({self.surface_id!r}, {state})"

    @property
    def is_stale(self) -> bool:
        """True once the store has deleted or replaced this surface.

        A stale handle still resolves, but against its last state rather than
        whatever now lives under the same surface id.
        """
        return self._stale

    def mark_stale(self) -> None:
        self._stale = True

    @property
    def is_renderable(self) -> bool:
        return self.components.has_root(self.root_component_id)

    # -- consumer contract --

    def component(self, component_id: str) -> Component | None:
        return self.components.get(component_id)

    @property
    def root(self) -> Component | None:
        return self.components.get(self.root_component_id)

    def child_ids(self, component: Component) -> list[str]:
        return self.components.child_ids(component)

    def resolve_style_value(self, style: dict[str, Any] | None, key: str) -> Any:
        return resolve_style_value(style, key, self.design_tokens)

    def resolve_style(self, style: dict[str, Any] | None) -> dict[str, Any]:
        return resolve_style(style, self.design_tokens)

    def resolve_text(self, value: str | None, now: datetime | None = None) -> str:
        """Resolve `${/path}` bindings against this handle's data model (a snapshot once stale)."""
        return resolve_text(value, self.data_model, now)

    # -- export --

    def to_messages(self) -> list[dict[str, Any]]:
        """Re-export current state as a complete envelope batch."""
        create = CreateSurface(
            surface_id=self.surface_id,
            catalog_id=self.catalog_id,
            send_data_model=self.send_data_model,
            design_tokens=dict(self.design_tokens),
        )
        messages: list[Message] = [
            create,
            UpdateComponents(surface_id=self.surface_id, components=self.components.to_list()),
        ]
        if self.data_model:
            messages.append(
                UpdateDataModel(surface_id=self.surface_id, path="/", value=copy.deepcopy(self.data_model))
            )
        return [m.to_dict() for m in messages]

    def data_bindings(self) -> list[dict[str, Any]]:
        """
        Every `${/path}` binding found on a component property.

        Returns [{path, current_value, bound_to}] where `current_value` falls
        back to the binding string itself when the path is unresolved.
        Used by personalization agents to learn what they may overwrite.
        """
        entries: list[dict[str, Any]] = []
        for component in self.components:
            for prop, value in component.to_dict().items():
                path = binding_path(value)
                if path is None:
                    continue
                found, current = get_at_path(self.data_model, path)
                entries.append(
                    {
                        "path": path,
                        "current_value": current if found else value,
                        "bound_to": f"{component.component_type}.{prop} ({component.id})",
                    }
                )
        return entries
