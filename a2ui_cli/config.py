"""
Configuration for the A2UI CLI.

API URL resolution order:
  1. --api-url command line flag
  2. A2UI_API_URL environment variable
  3. Fallback: http://localhost:8000

Usage:
  export A2UI_API_URL=http://designer.local:8000
  a2ui devices

  # Or per invocation
  a2ui push tile.a2ui.json --api-url http://localhost:9000
"""

from __future__ import annotations

import os

DEFAULT_API_URL = "http://localhost:8000"


class Config:
    """Config for the A2UI CLI."""

    def __init__(self, api_url_override: str | None = None):
        self._api_url_override = api_url_override

    @property
    def api_url(self) -> str:
        if self._api_url_override:
            return self._api_url_override.rstrip("/")

        env_url = os.environ.get("A2UI_API_URL")
        if env_url:
            return env_url.rstrip("/")

        return DEFAULT_API_URL
