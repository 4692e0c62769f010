"""
A2UI Kernel — Batch Processing

Sits between the validator and the store. Two policies:

  import_batch  — a whole stored/exported design. All-or-nothing on structural
                  errors, which reject the batch before the store is touched.
                  Referential problems (dangling children, missing root) are
                  logged and returned; the store keeps what it can.
  apply_live    — incremental pushes to running surfaces. Best-effort:
                  structurally broken messages are logged and skipped,
                  referential problems are logged and the message applied.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from a2ui.kernel.messages import decode_messages, parse_messages_json
from a2ui.kernel.store import SurfaceStore
from a2ui.kernel.surface import Surface
from a2ui.kernel.types import ApplyResult, ValidationError
from a2ui.kernel.validator import has_structural_errors, validate, validate_message

logger = logging.getLogger(__name__)


class BatchRejected(Exception):
    """A complete batch had structural errors; nothing was applied."""

    def __init__(self, errors: list[ValidationError]) -> None:
        self.errors = errors
        lines = "\n".join(f"  {e}" for e in errors)
        super().__init__(f"Invalid A2UI messages:\n{lines}")


@dataclass
class ImportResult:
    """Outcome of a whole-batch import."""

    surface: Surface | None = None
    errors: list[ValidationError] = field(default_factory=list)
    applied: list[ApplyResult] = field(default_factory=list)


@dataclass
class LiveResult:
    """Outcome of a best-effort live batch."""

    applied: list[ApplyResult] = field(default_factory=list)
    skipped: list[tuple[int, list[ValidationError]]] = field(default_factory=list)
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def last_surface_id(self) -> str | None:
        for result in reversed(self.applied):
            if result.accepted and result.surface_id:
                return result.surface_id
        return None


def import_batch(store: SurfaceStore, messages: Any) -> ImportResult:
    """
    Validate a complete batch and fold it into the store.

    `surface` is the last surface the batch touched (None if it ended on a
    delete). `errors` holds the referential problems the batch was imported
    with. Raises BatchRejected, carrying every error, when any is structural.
    """
    errors = validate(messages, complete=True)
    if has_structural_errors(errors):
        raise BatchRejected(errors)
    for e in errors:
        logger.info("import: %s", e)

    decoded = decode_messages(messages)
    result = ImportResult(errors=errors, applied=store.apply_all(decoded))
    last: str | None = None
    for message, applied in zip(decoded, result.applied):
        if applied.accepted:
            last = message.surface_id
    result.surface = store.get_surface(last) if last else None
    return result


def apply_live(store: SurfaceStore, messages: Any) -> LiveResult:
    """
    Apply an incremental batch, message by message, in arrival order.
    """
    result = LiveResult()
    if not isinstance(messages, list) or not messages:
        result.errors = validate(messages, complete=False)
        logger.warning("live: ignoring empty or non-array batch")
        return result

    for i, envelope in enumerate(messages):
        errors = validate_message(envelope, f"messages[{i}]")
        result.errors.extend(errors)
        if has_structural_errors(errors):
            for e in errors:
                logger.warning("live: skipping message: %s", e)
            result.skipped.append((i, errors))
            continue
        for e in errors:
            logger.info("live: %s", e)

        applied = store.apply(envelope)
        if not applied.accepted:
            logger.warning("live: message %d not applied: %s", i, applied.reason)
        result.applied.append(applied)

    return result


def process_json(store: SurfaceStore, text: str, *, live: bool = False) -> ImportResult | LiveResult:
    """Parse a JSON array / JSON-lines payload and dispatch by policy."""
    messages = parse_messages_json(text)
    if live:
        return apply_live(store, messages)
    return import_batch(store, messages)
