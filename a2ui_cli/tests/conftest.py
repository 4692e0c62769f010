"""
Shared fixtures for CLI tests.
"""

from __future__ import annotations

import json

import pytest


def tile_hello_messages():
    return [
        {"createSurface": {"surfaceId": "tile_hello"}},
        {
            "updateComponents": {
                "surfaceId": "tile_hello",
                "components": [
                    {"id": "root", "component": "Card", "children": {"explicitList": ["text1"]}},
                    {"id": "text1", "component": "Text", "text": "${/text1/content}"},
                ],
            }
        },
        {"updateDataModel": {"surfaceId": "tile_hello", "path": "/", "value": {"text1": {"content": "Hello!"}}}},
    ]


@pytest.fixture
def tile_hello():
    return tile_hello_messages()


@pytest.fixture
def design_file(tmp_path, tile_hello):
    """tile_hello written as a JSON array file."""
    path = tmp_path / "tile_hello.a2ui.json"
    path.write_text(json.dumps(tile_hello))
    return path
