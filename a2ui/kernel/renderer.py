"""
A2UI Kernel — Renderer

Walks a surface's component table from the root and produces fully resolved
output. Pure: reads the surface, never writes to it.

  render_tree(surface)  → nested dict, every token/binding resolved
                          (what previews and code generators consume)
  render_text(surface)  → indented outline for terminals and logs

Deterministic for a fixed `now`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from a2ui.kernel.surface import Surface
from a2ui.kernel.types import Component


def render_tree(surface: Surface, now: datetime | None = None) -> dict[str, Any] | None:
    """
    Resolve the surface into a nested tree rooted at its root component.

    Node shape:
      {id, component, text?, label?, style, labelStyle, action?, extensions, children: [node]}

    Returns None when the surface has no root yet. Dangling children are skipped.
    """
    root = surface.root
    if root is None:
        return None
    now = now or datetime.now()
    return _render_node(surface, root, now, frozenset({root.id}))


def _render_node(surface: Surface, component: Component, now: datetime, branch: frozenset[str]) -> dict[str, Any]:
    node: dict[str, Any] = {
        "id": component.id,
        "component": component.component_type,
    }
    if component.text is not None:
        node["text"] = surface.resolve_text(component.text, now)
    if component.label is not None:
        node["label"] = surface.resolve_text(component.label, now)
    node["style"] = surface.resolve_style(component.style)
    node["labelStyle"] = surface.resolve_style(component.label_style)
    if component.action is not None:
        node["action"] = component.action.to_dict()
    node["extensions"] = dict(component.extensions)
    node["children"] = [
        _render_node(surface, child, now, branch | {child.id})
        for child in surface.components.children(component)
        if child.id not in branch
    ]
    return node


def render_text(surface: Surface, now: datetime | None = None) -> str:
    """
    Indented outline of the resolved tree.

      Card#root
        Text#text1 "Hello!"
        Button#cta "Go" -> open_link
    """
    if surface.root is None:
        return f"(surface '{surface.surface_id}' has no root component)"

    now = now or datetime.now()
    lines: list[str] = []
    for component, depth in surface.components.walk(surface.root_component_id):
        line = f"{'  ' * depth}{component.component_type}#{component.id}"
        if component.text is not None:
            line += f' "{surface.resolve_text(component.text, now)}"'
        elif component.label is not None:
            line += f' "{surface.resolve_text(component.label, now)}"'
        if component.action is not None:
            line += f" -> {component.action.event.name}"
        lines.append(line)
    return "\n".join(lines)
