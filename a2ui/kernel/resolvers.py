"""
A2UI Kernel — Reference Resolvers

Pure, total functions. Nothing here raises to the caller and nothing writes
back into a surface: resolution happens per render/export call.

  resolve_token     "{Accents.Red}"  → "#ff4245"       (style values only)
  resolve_binding   "${/hello/text}" → "Hi"            (text / label)
  expand_templates  "{{current_day}}" → "Monday"       (render-time clock)

An unresolvable reference falls back to the original literal.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any

from a2ui.kernel.types import DesignToken

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"^\{(.+)\}$", re.DOTALL)
_BINDING_RE = re.compile(r"^\$\{/(.+)\}$", re.DOTALL)
_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_INT_RE = re.compile(r"^[+-]?\d+$")

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


# ---------------------------------------------------------------------------
# Design tokens
# ---------------------------------------------------------------------------


def _coerce_token_value(raw: str) -> int | float | str:
    text = raw.strip()
    if _NUMBER_RE.match(text):
        if _INT_RE.match(text):
            return int(text)
        return float(text)
    return raw


def resolve_token(value: Any, tokens: dict[str, DesignToken]) -> Any:
    """
    Resolve a design-token reference.

    - non-strings pass through unchanged
    - "{Name}" (but never "${...}") looks up Name; numeric token values come
      back as numbers, everything else as the token's string
    - unknown names and plain strings pass through unchanged
    """
    if not isinstance(value, str):
        return value
    if value.startswith("${"):
        return value
    match = _TOKEN_RE.match(value)
    if not match:
        return value

    token = tokens.get(match.group(1))
    if token is None:
        logger.debug("resolve_token: unknown token %r", match.group(1))
        return value
    return _coerce_token_value(token.value)


def resolve_style_value(
    style: dict[str, Any] | None,
    key: str,
    tokens: dict[str, DesignToken],
) -> Any:
    """Resolve one style property. Returns None when the style or key is absent."""
    if not style or key not in style:
        return None
    return resolve_token(style[key], tokens)


def resolve_style(style: dict[str, Any] | None, tokens: dict[str, DesignToken]) -> dict[str, Any]:
    """Resolve every value of a style map (one level; nested values pass through)."""
    if not style:
        return {}
    return {key: resolve_token(value, tokens) for key, value in style.items()}


# ---------------------------------------------------------------------------
# Data bindings
# ---------------------------------------------------------------------------


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def resolve_binding(value: str | None, data_model: dict[str, Any], now: datetime | None = None) -> str:
    """
    Resolve a data-binding reference against a data model.

      None / ""          → ""
      "Static {{x}}"     → literal, template-expanded
      "${/a/b}"          → data_model["a"]["b"] as a string, template-expanded
      "${/missing}"      → the original string, template-expanded

    Object and array leaves count as unresolved.
    """
    if not value:
        return ""

    match = _BINDING_RE.match(value)
    if not match:
        return expand_templates(value, now)

    current: Any = data_model
    for part in match.group(1).split("/"):
        if not isinstance(current, dict) or part not in current:
            logger.debug("resolve_binding: unresolved path %r", value)
            return expand_templates(value, now)
        current = current[part]

    if isinstance(current, (dict, list)):
        logger.debug("resolve_binding: non-scalar leaf at %r", value)
        return expand_templates(value, now)
    if isinstance(current, str):
        return expand_templates(current, now)
    return expand_templates(_stringify(current), now)


def binding_path(value: Any) -> str | None:
    """Return "/a/b" for a "${/a/b}" binding string, else None."""
    if not isinstance(value, str):
        return None
    match = _BINDING_RE.match(value)
    return "/" + match.group(1) if match else None


def resolve_text(value: str | None, data_model: dict[str, Any], now: datetime | None = None) -> str:
    """Resolve a component's `text` or `label`. Alias of resolve_binding."""
    return resolve_binding(value, data_model, now)


# ---------------------------------------------------------------------------
# Time templates
# ---------------------------------------------------------------------------


def _format_time_12h(now: datetime) -> str:
    hour = now.hour % 12 or 12
    suffix = "AM" if now.hour < 12 else "PM"
    return f"{hour}:{now.minute:02d} {suffix}"


def _format_date_medium(now: datetime) -> str:
    return f"{_MONTHS[now.month - 1]} {now.day}, {now.year}"


def expand_templates(text: str, now: datetime | None = None) -> str:
    """
    Substitute render-time clock tokens.

      {{current_time}}      → "3:07 PM"
      {{current_time_24h}}  → "15:07"
      {{current_date}}      → "Oct 19, 2026"
      {{current_day}}       → "Monday"

    No-op unless the text contains "{{". Unknown tokens are left in place.
    """
    if "{{" not in text:
        return text

    now = now or datetime.now()
    result = text
    if "{{current_time}}" in result:
        result = result.replace("{{current_time}}", _format_time_12h(now))
    if "{{current_time_24h}}" in result:
        result = result.replace("{{current_time_24h}}", f"{now.hour:02d}:{now.minute:02d}")
    if "{{current_date}}" in result:
        result = result.replace("{{current_date}}", _format_date_medium(now))
    if "{{current_day}}" in result:
        result = result.replace("{{current_day}}", _WEEKDAYS[now.weekday()])
    return result
