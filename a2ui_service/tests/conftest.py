"""
Pytest configuration and fixtures for the A2UI service tests.

Storage and the device registry are swapped for in-memory instances through
FastAPI dependency overrides; nothing touches the filesystem or network.
"""

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio

from a2ui.kernel.messages import create_surface, update_components, update_data_model
from a2ui_service.deps import get_design_storage, get_device_registry
from a2ui_service.main import app
from a2ui_service.services.design_store import MemoryDesignStorage
from a2ui_service.services.device_registry import DeviceRegistry


def tile_hello_messages() -> list[dict]:
    """A minimal exported design with one binding, one token and an action."""
    return [
        create_surface("tile_hello", design_tokens={"Accents.Red": {"value": "#ff4245", "collection": "Colors"}}),
        update_components(
            "tile_hello",
            [
                {"id": "text1", "component": "Text", "text": "${/text1/content}", "style": {"color": "{Accents.Red}"}},
                {"id": "cta", "component": "Button", "label": "Open", "action": {"event": {"name": "open_link"}}},
                {"id": "root", "component": "Card", "children": {"explicitList": ["text1", "cta"]}},
            ],
        ),
        update_data_model("tile_hello", {"text1": {"content": "Hello!", "size": "m"}}, path="/"),
    ]


class FakeSocket:
    """Records frames sent to a registered device."""

    def __init__(self, fail: bool = False) -> None:
        self.sent: list[str] = []
        self.fail = fail

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise ConnectionError("socket closed")
        self.sent.append(data)


@pytest.fixture
def tile_hello() -> list[dict]:
    return tile_hello_messages()


@pytest.fixture
def fake_socket():
    """Factory for sockets that record what the registry sends them."""
    return FakeSocket


@pytest.fixture
def storage():
    return MemoryDesignStorage()


@pytest.fixture
def registry():
    return DeviceRegistry()


@pytest.fixture
def overrides(storage, registry):
    """Point the app at in-memory storage and a fresh registry."""
    app.dependency_overrides[get_design_storage] = lambda: storage
    app.dependency_overrides[get_device_registry] = lambda: registry
    yield
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(loop_scope="session")
async def async_client(overrides):
    """Async HTTP client against the ASGI app."""
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
