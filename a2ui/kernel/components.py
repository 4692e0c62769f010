"""
A2UI Kernel — Component Table

A flat, id-keyed registry of component definitions. A later definition with
the same id replaces the earlier one entirely (no field merge).

Child references are by id. A dangling id is reportable but never fatal:
traversal simply skips it.
"""

from __future__ import annotations

from collections.abc import Iterator

from a2ui.kernel.types import ROOT_COMPONENT_ID, Component


class ComponentTable:
    """Insertion-ordered map of component id → Component."""

    def __init__(self, components: list[Component] | None = None) -> None:
        self._components: dict[str, Component] = {}
        if components:
            self.upsert_all(components)

    # -- mutation --

    def upsert(self, component: Component) -> None:
        self._components[component.id] = component

    def upsert_all(self, components: list[Component]) -> None:
        for component in components:
            self.upsert(component)

    def remove(self, component_id: str) -> bool:
        return self._components.pop(component_id, None) is not None

    # -- queries --

    def get(self, component_id: str) -> Component | None:
        return self._components.get(component_id)

    def __contains__(self, component_id: object) -> bool:
        return component_id in self._components

    def __len__(self) -> int:
        return len(self._components)

    def __iter__(self) -> Iterator[Component]:
        return iter(list(self._components.values()))

    @property
    def ids(self) -> list[str]:
        return list(self._components)

    def has_root(self, root_id: str = ROOT_COMPONENT_ID) -> bool:
        return root_id in self._components

    @staticmethod
    def child_ids(component: Component) -> list[str]:
        """Explicit child ids in declared order. Template children are not expanded."""
        return component.child_ids

    def children(self, component: Component) -> list[Component]:
        """Resolved children, skipping ids that are not in the table."""
        return [self._components[cid] for cid in component.child_ids if cid in self._components]

    def dangling_references(self) -> list[tuple[str, str]]:
        """(parent_id, missing_child_id) for every child reference with no definition."""
        missing: list[tuple[str, str]] = []
        for component in self._components.values():
            for cid in component.child_ids:
                if cid not in self._components:
                    missing.append((component.id, cid))
        return missing

    def walk(self, root_id: str = ROOT_COMPONENT_ID) -> Iterator[tuple[Component, int]]:
        """
        Depth-first pre-order walk from `root_id`, yielding (component, depth).
        Dangling ids are skipped; a component already on the current branch
        is not revisited, so reference cycles terminate.
        """
        root = self._components.get(root_id)
        if root is None:
            return

        def _visit(component: Component, depth: int, branch: frozenset[str]) -> Iterator[tuple[Component, int]]:
            yield component, depth
            for child in self.children(component):
                if child.id in branch:
                    continue
                yield from _visit(child, depth + 1, branch | {child.id})

        yield from _visit(root, 0, frozenset({root.id}))

    def to_list(self) -> list[Component]:
        return list(self._components.values())
