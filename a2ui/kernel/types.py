"""
A2UI Kernel — Shared Types

Data classes used across messages, validator, store, resolvers, and renderer.
These are the contracts that bind the kernel together.

Wire shapes (v0.9):
- `createSurface`     {surfaceId, catalogId?, sendDataModel?, designTokens?}
- `updateComponents`  {surfaceId, components: [Component]}
- `updateDataModel`   {surfaceId, path?, value}
- `deleteSurface`     {surfaceId}

Components keep a side-map of unrecognized keys (`extensions`) so icon names,
urls, svg payloads and anything else a renderer understands survive a
decode/encode cycle untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

# ---------------------------------------------------------------------------
# Protocol constants
# ---------------------------------------------------------------------------

ROOT_COMPONENT_ID = "root"

CREATE_SURFACE = "createSurface"
UPDATE_COMPONENTS = "updateComponents"
UPDATE_DATA_MODEL = "updateDataModel"
DELETE_SURFACE = "deleteSurface"

MESSAGE_KINDS: tuple[str, ...] = (
    CREATE_SURFACE,
    UPDATE_COMPONENTS,
    UPDATE_DATA_MODEL,
    DELETE_SURFACE,
)

# Wire keys decoded into named Component fields. Everything else is an extension.
# "componentType" is a legacy alias for "component".
KNOWN_COMPONENT_KEYS: frozenset[str] = frozenset(
    {
        "id",
        "component",
        "componentType",
        "children",
        "text",
        "label",
        "action",
        "style",
        "labelStyle",
    }
)

# Validation error kinds
STRUCTURAL = "structural"
REFERENTIAL = "referential"


# ---------------------------------------------------------------------------
# Design tokens
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DesignToken:
    """A named style value. `collection` is metadata and never affects resolution."""

    value: str
    collection: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value, "collection": self.collection}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> DesignToken:
        return cls(value=d["value"], collection=d.get("collection", ""))


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------


@dataclass
class ChildTemplate:
    """Repeated children driven by an array in the data model (pass-through only)."""

    data_path: str
    component_id: str

    def to_dict(self) -> dict[str, Any]:
        return {"dataPath": self.data_path, "componentId": self.component_id}


@dataclass
class ChildList:
    explicit_list: list[str] | None = None
    template: ChildTemplate | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        if self.explicit_list is not None:
            d["explicitList"] = list(self.explicit_list)
        if self.template is not None:
            d["template"] = self.template.to_dict()
        return d


@dataclass
class ActionEvent:
    name: str
    context: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"name": self.name}
        if self.context is not None:
            d["context"] = self.context
        return d


@dataclass
class ComponentAction:
    event: ActionEvent

    def to_dict(self) -> dict[str, Any]:
        return {"event": self.event.to_dict()}


@dataclass
class Component:
    """
    One entry in a surface's component table.

    Known fields are typed; `extensions` carries every other wire key verbatim.
    Use `component[key]` / `component.get(key)` to read an extension.
    """

    id: str
    component_type: str
    children: ChildList | None = None
    text: str | None = None
    label: str | None = None
    action: ComponentAction | None = None
    style: dict[str, Any] | None = None
    label_style: dict[str, Any] | None = None
    extensions: dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        return self.extensions[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.extensions.get(key, default)

    @property
    def child_ids(self) -> list[str]:
        if self.children is None or self.children.explicit_list is None:
            return []
        return list(self.children.explicit_list)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"id": self.id, "component": self.component_type}
        if self.children is not None:
            d["children"] = self.children.to_dict()
        if self.text is not None:
            d["text"] = self.text
        if self.label is not None:
            d["label"] = self.label
        if self.action is not None:
            d["action"] = self.action.to_dict()
        if self.style is not None:
            d["style"] = dict(self.style)
        if self.label_style is not None:
            d["labelStyle"] = dict(self.label_style)
        for key, value in self.extensions.items():
            d[key] = value
        return d


# ---------------------------------------------------------------------------
# Messages: a tagged union, exactly one kind per envelope
# ---------------------------------------------------------------------------


@dataclass
class CreateSurface:
    surface_id: str
    catalog_id: str | None = None
    send_data_model: bool | None = None
    design_tokens: dict[str, DesignToken] = field(default_factory=dict)

    kind = CREATE_SURFACE

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"surfaceId": self.surface_id}
        if self.catalog_id is not None:
            body["catalogId"] = self.catalog_id
        if self.send_data_model is not None:
            body["sendDataModel"] = self.send_data_model
        if self.design_tokens:
            body["designTokens"] = {name: t.to_dict() for name, t in self.design_tokens.items()}
        return {CREATE_SURFACE: body}


@dataclass
class UpdateComponents:
    surface_id: str
    components: list[Component] = field(default_factory=list)

    kind = UPDATE_COMPONENTS

    def to_dict(self) -> dict[str, Any]:
        return {
            UPDATE_COMPONENTS: {
                "surfaceId": self.surface_id,
                "components": [c.to_dict() for c in self.components],
            }
        }


@dataclass
class UpdateDataModel:
    """
    `path` None or "/" replaces the whole model with `value`.
    `legacy_overlay` is set only for the old `{dataModel: {...}}` shape.
    """

    surface_id: str
    path: str | None = None
    value: Any = None
    legacy_overlay: dict[str, Any] | None = None

    kind = UPDATE_DATA_MODEL

    @property
    def replaces_root(self) -> bool:
        return self.path is None or self.path == "/"

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"surfaceId": self.surface_id}
        if self.legacy_overlay is not None:
            body["dataModel"] = self.legacy_overlay
            return {UPDATE_DATA_MODEL: body}
        if self.path is not None:
            body["path"] = self.path
        body["value"] = self.value
        return {UPDATE_DATA_MODEL: body}


@dataclass
class DeleteSurface:
    surface_id: str

    kind = DELETE_SURFACE

    def to_dict(self) -> dict[str, Any]:
        return {DELETE_SURFACE: {"surfaceId": self.surface_id}}


Message = Union[CreateSurface, UpdateComponents, UpdateDataModel, DeleteSurface]


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass
class ValidationError:
    """A problem found in an incoming batch. `path` points into the batch."""

    path: str
    message: str
    kind: str = STRUCTURAL

    @property
    def is_structural(self) -> bool:
        return self.kind == STRUCTURAL

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "message": self.message, "kind": self.kind}

    def __str__(self) -> str:
        return f"[{self.path}] {self.message}"


@dataclass
class Warning:
    """A non-fatal issue encountered while applying a message."""

    code: str
    message: str
    details: dict[str, Any] | None = None


@dataclass
class ApplyResult:
    """
    Result of applying one message to a store.
    The store never throws — it always returns one of these.
    """

    accepted: bool
    surface_id: str | None = None
    reason: str | None = None
    warnings: list[Warning] = field(default_factory=list)


@dataclass
class StoreChange:
    """Notification payload sent to store subscribers after an accepted mutation."""

    kind: str
    surface_id: str
