"""
A2UI Kernel — Data Model Tree

A surface's data model is a nested JSON object. Two distinct write algorithms:

  set_at_path  — single-branch upsert; siblings outside the path are untouched
  merge        — full recursive overlay; right-hand side wins, arrays replaced whole

Only object keys are traversable. Arrays are opaque leaves.
"""

from __future__ import annotations

import copy
from typing import Any


def split_path(path: str) -> list[str]:
    """
    Split a slash path into segments.

      "/hello/text" → ["hello", "text"]
      "hello/text"  → ["hello", "text"]
      "/"           → []
    """
    return [seg for seg in path.split("/") if seg]


def set_at_path(tree: dict[str, Any], path: str, value: Any) -> dict[str, Any]:
    """
    Upsert `value` at `path` inside `tree` (mutated in place, also returned).

    Missing intermediates are created as empty objects. A non-object found
    mid-path is overwritten by a fresh empty object. An empty path is a no-op.
    """
    parts = split_path(path)
    if not parts:
        return tree

    current = tree
    for part in parts[:-1]:
        nxt = current.get(part)
        if not isinstance(nxt, dict):
            nxt = {}
            current[part] = nxt
        current = nxt
    current[parts[-1]] = value
    return tree


def get_at_path(tree: dict[str, Any], path: str) -> tuple[bool, Any]:
    """
    Walk `tree` object-by-object along `path`.
    Returns (found, value). Arrays and scalars stop the walk.
    """
    current: Any = tree
    for part in split_path(path):
        if not isinstance(current, dict) or part not in current:
            return False, None
        current = current[part]
    return True, current


def merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """
    Recursive overlay merge. Returns a new tree; neither input is modified.

    merge({"a": {"x": 1, "y": 2}}, {"a": {"x": 9}}) → {"a": {"x": 9, "y": 2}}
    merge({"a": [1, 2]}, {"a": [3]})                → {"a": [3]}
    """
    result = copy.deepcopy(base)
    for key, value in overlay.items():
        existing = result.get(key)
        if isinstance(value, dict) and isinstance(existing, dict):
            result[key] = merge(existing, value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def expand_flat_paths(overlay: dict[str, Any]) -> dict[str, Any]:
    """
    Turn legacy flat slash-path keys into nested objects.

      {"/hello/text": "Hi", "other": {"k": 1}}
        → {"hello": {"text": "Hi"}, "other": {"k": 1}}

    Keys without a slash are kept as-is. Expanded branches are merged so two
    flat keys sharing a prefix end up in the same object.
    """
    result: dict[str, Any] = {}
    for key, value in overlay.items():
        if "/" in key:
            branch = set_at_path({}, key, copy.deepcopy(value))
            result = merge(result, branch)
        else:
            result = merge(result, {key: value})
    return result


def normalize_overlay(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Merge an overlay whose keys may be nested objects or flat slash-paths."""
    return merge(base, expand_flat_paths(overlay))
