"""
A2UI Kernel — the pure protocol/state engine.

Components:
  validator   — structural + referential checks on a message batch
  store       — (store, message) → ApplyResult, folds messages into surfaces
  resolvers   — design tokens, data bindings, time templates
  data_model  — path-addressed upsert and recursive overlay merge
  processor   — batch import (all-or-nothing on structure) and live apply (best-effort)

Query helpers (from renderer):
  render_tree, render_text
"""

from a2ui.kernel.components import ComponentTable
from a2ui.kernel.data_model import expand_flat_paths, merge, normalize_overlay, set_at_path
from a2ui.kernel.messages import MessageDecodeError, decode_message, encode_message, parse_messages_json
from a2ui.kernel.processor import BatchRejected, ImportResult, LiveResult, apply_live, import_batch, process_json
from a2ui.kernel.renderer import render_text, render_tree
from a2ui.kernel.resolvers import (
    expand_templates,
    resolve_binding,
    resolve_style,
    resolve_style_value,
    resolve_text,
    resolve_token,
)
from a2ui.kernel.store import SurfaceStore
from a2ui.kernel.surface import Surface
from a2ui.kernel.types import Component, DesignToken, ValidationError
from a2ui.kernel.validator import validate

__all__ = [
    "validate",
    "SurfaceStore",
    "Surface",
    "Component",
    "ComponentTable",
    "DesignToken",
    "ValidationError",
    "MessageDecodeError",
    "decode_message",
    "encode_message",
    "parse_messages_json",
    "BatchRejected",
    "ImportResult",
    "LiveResult",
    "import_batch",
    "apply_live",
    "process_json",
    "resolve_token",
    "resolve_binding",
    "resolve_text",
    "resolve_style",
    "resolve_style_value",
    "expand_templates",
    "set_at_path",
    "merge",
    "expand_flat_paths",
    "normalize_overlay",
    "render_tree",
    "render_text",
]
