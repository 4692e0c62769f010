"""
Design storage for exported A2UI message batches.

A design is the complete batch a designer exported for one surface. It is
keyed by the surface id of its createSurface message. Batches are validated
by the routes before they reach storage; storage itself only persists.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from a2ui_service.models.design import DESIGN_ID_PATTERN, StoredDesign

logger = logging.getLogger(__name__)

DESIGN_SUFFIX = ".a2ui.json"

_DESIGN_ID_RE = re.compile(DESIGN_ID_PATTERN)


class InvalidDesignId(ValueError):
    """A design id that cannot be used as a file name inside the designs directory."""


def is_valid_design_id(design_id: Any) -> bool:
    return isinstance(design_id, str) and len(design_id) <= 200 and _DESIGN_ID_RE.fullmatch(design_id) is not None


def create_surface_ids(messages: list[Any]) -> list[tuple[int, str]]:
    """(index, surfaceId) of every createSurface message carrying a string surfaceId."""
    found: list[tuple[int, str]] = []
    for i, message in enumerate(messages):
        if isinstance(message, dict) and isinstance(message.get("createSurface"), dict):
            surface_id = message["createSurface"].get("surfaceId")
            if isinstance(surface_id, str) and surface_id:
                found.append((i, surface_id))
    return found


def design_id_for(messages: list[Any], fallback: str) -> str:
    """surfaceId of the first createSurface message, else `fallback`."""
    found = create_surface_ids(messages)
    return found[0][1] if found else fallback


# ---------------------------------------------------------------------------
# Storage protocol
# ---------------------------------------------------------------------------


class DesignStorage:
    """
    Abstract storage interface.
    Implement with a directory of files for production, or in-memory for tests.
    """

    async def list_all(self) -> list[StoredDesign]:
        """All stored designs, ordered by id."""
        raise NotImplementedError

    async def get(self, design_id: str) -> StoredDesign | None:
        """Fetch one design. Returns None if not found."""
        raise NotImplementedError

    async def put(self, design_id: str, messages: list[dict[str, Any]]) -> StoredDesign:
        """Create or overwrite a design."""
        raise NotImplementedError

    async def delete(self, design_id: str) -> bool:
        """Remove a design. Returns False if it did not exist."""
        raise NotImplementedError


class MemoryDesignStorage(DesignStorage):
    """In-memory storage for testing."""

    def __init__(self) -> None:
        self.designs: dict[str, StoredDesign] = {}

    async def list_all(self) -> list[StoredDesign]:
        return [self.designs[k] for k in sorted(self.designs)]

    async def get(self, design_id: str) -> StoredDesign | None:
        return self.designs.get(design_id)

    async def put(self, design_id: str, messages: list[dict[str, Any]]) -> StoredDesign:
        design = StoredDesign(
            id=design_id,
            name=StoredDesign.display_name(design_id),
            messages=messages,
            updated_at=datetime.now(UTC),
        )
        self.designs[design_id] = design
        return design

    async def delete(self, design_id: str) -> bool:
        return self.designs.pop(design_id, None) is not None


class FileDesignStorage(DesignStorage):
    """
    A directory of `<id>.a2ui.json` files, one JSON array per design.

    The design id is the batch's createSurface surfaceId, falling back to the
    file name. Unreadable files are logged and skipped when listing.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _path(self, design_id: str) -> Path:
        if not is_valid_design_id(design_id):
            raise InvalidDesignId(f"Invalid design id: {design_id!r}")
        path = self.directory / f"{design_id}{DESIGN_SUFFIX}"
        if path.resolve().parent != self.directory.resolve():
            raise InvalidDesignId(f"Design id {design_id!r} leaves {self.directory}")
        return path

    def _read(self, path: Path) -> StoredDesign | None:
        try:
            messages = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("designs: skipping unreadable file %s: %s", path.name, e)
            return None
        if not isinstance(messages, list):
            logger.warning("designs: skipping %s: not a JSON array", path.name)
            return None

        design_id = design_id_for(messages, path.name[: -len(DESIGN_SUFFIX)])
        return StoredDesign(
            id=design_id,
            name=StoredDesign.display_name(design_id),
            messages=messages,
            updated_at=datetime.fromtimestamp(path.stat().st_mtime, UTC),
        )

    def _list_sync(self) -> list[StoredDesign]:
        if not self.directory.is_dir():
            return []
        designs = [self._read(p) for p in sorted(self.directory.glob(f"*{DESIGN_SUFFIX}"))]
        return sorted((d for d in designs if d is not None), key=lambda d: d.id)

    def _put_sync(self, design_id: str, messages: list[dict[str, Any]]) -> StoredDesign:
        path = self._path(design_id)
        self.directory.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(messages, indent=2), encoding="utf-8")
        logger.info("designs: saved %s (%d messages)", design_id, len(messages))
        return StoredDesign(
            id=design_id,
            name=StoredDesign.display_name(design_id),
            messages=messages,
            updated_at=datetime.now(UTC),
        )

    async def list_all(self) -> list[StoredDesign]:
        return await asyncio.to_thread(self._list_sync)

    async def get(self, design_id: str) -> StoredDesign | None:
        if not is_valid_design_id(design_id):
            return None
        path = self._path(design_id)
        if path.is_file():
            design = await asyncio.to_thread(self._read, path)
            if design is not None and design.id == design_id:
                return design
        # File name and surfaceId can disagree for hand-copied files
        for design in await self.list_all():
            if design.id == design_id:
                return design
        return None

    async def put(self, design_id: str, messages: list[dict[str, Any]]) -> StoredDesign:
        return await asyncio.to_thread(self._put_sync, design_id, messages)

    async def delete(self, design_id: str) -> bool:
        if not is_valid_design_id(design_id):
            return False
        path = self._path(design_id)
        if not path.is_file():
            return False
        await asyncio.to_thread(path.unlink)
        return True
