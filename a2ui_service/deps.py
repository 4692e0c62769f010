"""
Shared service singletons and their FastAPI dependency providers.

Routes take storage and the device registry through Depends() so tests can
swap them with `app.dependency_overrides`.
"""

from __future__ import annotations

from a2ui.kernel.store import SurfaceStore
from a2ui_service.config import settings
from a2ui_service.services.design_store import DesignStorage, FileDesignStorage
from a2ui_service.services.device_registry import DeviceRegistry

design_storage: DesignStorage = FileDesignStorage(settings.DESIGNS_DIR)
device_registry = DeviceRegistry()


def get_design_storage() -> DesignStorage:
    return design_storage


def get_device_registry() -> DeviceRegistry:
    return device_registry


def new_store() -> SurfaceStore:
    """A fresh, request-scoped store configured from settings."""
    return SurfaceStore(accept_legacy_data_model=settings.ACCEPT_LEGACY_DATA_MODEL)
