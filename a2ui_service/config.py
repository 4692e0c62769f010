"""
A2UI service configuration — all environment variables in one place.

Read from environment at import time. The kernel takes no global config;
anything it needs is passed in by the service.
"""

from __future__ import annotations

import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Application settings from environment variables."""

    # Design storage
    DESIGNS_DIR: str = os.environ.get("A2UI_DESIGNS_DIR", "./designs")

    # Protocol
    ACCEPT_LEGACY_DATA_MODEL: bool = _env_bool("A2UI_ACCEPT_LEGACY_DATA_MODEL", True)

    # Device transport
    WS_PATH: str = os.environ.get("WS_PATH", "/ws")
    RECONNECT_MAX_ATTEMPTS: int = int(os.environ.get("RECONNECT_MAX_ATTEMPTS", "10"))
    RECONNECT_MAX_DELAY: float = float(os.environ.get("RECONNECT_MAX_DELAY", "30"))

    # Application
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").upper()
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development")

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"


# Singleton instance
settings = Settings()

if not settings.WS_PATH.startswith("/"):
    raise RuntimeError("WS_PATH must start with '/'")
if settings.RECONNECT_MAX_ATTEMPTS < 1:
    raise RuntimeError("RECONNECT_MAX_ATTEMPTS must be at least 1")
