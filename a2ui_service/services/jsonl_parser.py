"""
JSONL stream parser for A2UI message envelopes.

Buffers streaming text until newlines and emits one raw envelope per
complete line. Malformed lines and lines that are not JSON objects are
skipped with a warning. Markdown code fences (what a language model tends
to wrap its output in) are ignored.
"""

from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

_FENCE = "```"


class JSONLParser:
    """
    Parses streaming JSONL into raw A2UI envelopes.

    Accumulates partial chunks in a buffer, emits complete parsed lines
    as they become available. Envelopes are not decoded or validated here;
    that is the kernel's job.
    """

    def __init__(self) -> None:
        self.buffer = ""

    def feed(self, chunk: str) -> list[dict[str, Any]]:
        """
        Feed a text chunk (may be partial), return any complete envelopes.

        Args:
            chunk: Raw text from the stream

        Returns:
            List of envelope dicts for each complete JSONL line
        """
        self.buffer += chunk
        envelopes = []
        while "\n" in self.buffer:
            line, self.buffer = self.buffer.split("\n", 1)
            envelope = self._parse_line(line, "line")
            if envelope is not None:
                envelopes.append(envelope)
        return envelopes

    def flush(self) -> list[dict[str, Any]]:
        """
        Flush any remaining content in the buffer as a final line.

        Call this after the stream ends to handle input with no trailing newline.

        Returns:
            List of envelope dicts (0 or 1 items)
        """
        line = self.buffer
        self.buffer = ""
        envelope = self._parse_line(line, "final chunk")
        return [envelope] if envelope is not None else []

    @staticmethod
    def _parse_line(line: str, what: str) -> dict[str, Any] | None:
        stripped = line.strip()
        if not stripped or stripped.startswith(_FENCE):
            return None
        # Tolerate JSON-array framing split one element per line
        if stripped in ("[", "]"):
            return None
        stripped = stripped.rstrip(",")
        try:
            parsed = json.loads(stripped)
        except json.JSONDecodeError:
            logger.warning("JSONLParser: skipping malformed %s: %r", what, stripped[:200])
            return None
        if not isinstance(parsed, dict):
            logger.warning("JSONLParser: skipping non-object %s: %r", what, stripped[:200])
            return None
        return parsed
