"""
Kernel test configuration.

Shared message fixtures. Everything here is plain data; no IO, no event loop.
"""

from __future__ import annotations

from datetime import datetime

import pytest

from a2ui.kernel.messages import create_surface, update_components, update_data_model

# Monday, 19 Oct 2026, 15:07 local
FIXED_NOW = datetime(2026, 10, 19, 15, 7)


def tile_hello_messages() -> list[dict]:
    """The canonical three-message export produced by the design plugin."""
    return [
        create_surface(
            "tile_hello",
            design_tokens={
                "Accents.Red": {"value": "#ff4245", "collection": "Colors"},
                "Spacing.sm": {"value": "4", "collection": "Spacing"},
            },
        ),
        update_components(
            "tile_hello",
            [
                {
                    "id": "text1",
                    "component": "Text",
                    "text": "${/text1/content}",
                    "style": {"color": "{Accents.Red}", "fontSize": 16},
                },
                {
                    "id": "cta",
                    "component": "Button",
                    "label": "Open",
                    "action": {"event": {"name": "open_link", "context": {"url": "https://example.com"}}},
                    "labelStyle": {"padding": "{Spacing.sm}"},
                },
                {"id": "root", "component": "Card", "children": {"explicitList": ["text1", "cta"]}},
            ],
        ),
        update_data_model("tile_hello", {"text1": {"content": "Hello!"}}, path="/"),
    ]


@pytest.fixture
def tile_hello() -> list[dict]:
    return tile_hello_messages()


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW
