"""Integration tests for design and device routes."""

from __future__ import annotations

import json

import pytest

from a2ui_service.deps import get_design_storage
from a2ui_service.main import app
from a2ui_service.routes.devices import with_data_model
from a2ui_service.services.design_store import FileDesignStorage

pytestmark = pytest.mark.asyncio(loop_scope="session")


# ── design routes ───────────────────────────────────────────────────────────


class TestDesignRoutes:
    """Tests for /api/designs endpoints."""

    async def test_list_empty(self, async_client):
        """GET /api/designs with nothing stored → 200 []."""
        res = await async_client.get("/api/designs")
        assert res.status_code == 200
        assert res.json() == []

    async def test_save_design(self, async_client, tile_hello, storage):
        """POST /api/designs with a valid batch → 201, id from createSurface."""
        res = await async_client.post("/api/designs", json={"messages": tile_hello})
        assert res.status_code == 201
        data = res.json()
        assert data["id"] == "tile_hello"
        assert data["name"] == "tile hello"
        assert data["messages"] == tile_hello
        assert "tile_hello" in storage.designs

    async def test_save_invalid_batch(self, async_client, tile_hello, storage):
        """POST /api/designs missing root → 422 with errors, nothing stored."""
        tile_hello[1]["updateComponents"]["components"].pop()
        res = await async_client.post("/api/designs", json={"messages": tile_hello})
        assert res.status_code == 422
        errors = res.json()["errors"]
        assert any("root" in e["message"] for e in errors)
        assert storage.designs == {}

    async def test_save_empty_batch(self, async_client):
        """POST /api/designs with [] → 422."""
        res = await async_client.post("/api/designs", json={"messages": []})
        assert res.status_code == 422
        assert res.json()["errors"][0]["path"] == "messages"

    async def test_save_mismatched_id(self, async_client, tile_hello):
        """POST /api/designs with an id different from the surfaceId → 422."""
        res = await async_client.post("/api/designs", json={"id": "other", "messages": tile_hello})
        assert res.status_code == 422
        assert res.json()["errors"][0]["path"] == "id"

    async def test_save_unknown_field(self, async_client, tile_hello):
        """Extra request fields are refused."""
        res = await async_client.post("/api/designs", json={"messages": tile_hello, "bogus": 1})
        assert res.status_code == 422

    async def test_save_surface_id_escaping_directory(self, async_client, tmp_path):
        """A createSurface surfaceId is the file name, so path separators are refused."""
        designs_dir = tmp_path / "designs"
        app.dependency_overrides[get_design_storage] = lambda: FileDesignStorage(designs_dir)
        batch = [
            {"createSurface": {"surfaceId": "../escaped"}},
            {"updateComponents": {"surfaceId": "../escaped", "components": [{"id": "root", "component": "Card"}]}},
        ]
        res = await async_client.post("/api/designs", json={"messages": batch})
        assert res.status_code == 422
        assert res.json()["errors"][0]["path"] == "messages[0].createSurface.surfaceId"
        assert not (tmp_path / "escaped.a2ui.json").exists()
        assert not designs_dir.exists()

    async def test_save_multiple_surfaces_refused(self, async_client, tile_hello, storage):
        """A design is keyed by one surface; a second createSurface → 422."""
        other = [
            {"createSurface": {"surfaceId": "other"}},
            {"updateComponents": {"surfaceId": "other", "components": [{"id": "root", "component": "Card"}]}},
        ]
        res = await async_client.post("/api/designs", json={"messages": tile_hello + other})
        assert res.status_code == 422
        assert res.json()["errors"][0]["path"] == "messages"
        assert storage.designs == {}

    async def test_save_batch_deleting_its_surface_refused(self, async_client, tile_hello, storage):
        """A batch that ends by deleting its own surface has nothing to preview."""
        batch = tile_hello + [{"deleteSurface": {"surfaceId": "tile_hello"}}]
        res = await async_client.post("/api/designs", json={"messages": batch})
        assert res.status_code == 422
        assert "leaves no surface" in res.json()["errors"][0]["message"]
        assert storage.designs == {}

    async def test_get_design(self, async_client, tile_hello, storage):
        """GET /api/designs/{id} → 200."""
        await storage.put("tile_hello", tile_hello)
        res = await async_client.get("/api/designs/tile_hello")
        assert res.status_code == 200
        assert res.json()["messages"] == tile_hello

    async def test_get_missing_design(self, async_client):
        """GET /api/designs/{id} for unknown id → 404."""
        res = await async_client.get("/api/designs/nope")
        assert res.status_code == 404

    async def test_preview(self, async_client, tile_hello, storage):
        """GET /api/designs/{id}/preview → resolved tree."""
        await storage.put("tile_hello", tile_hello)
        res = await async_client.get("/api/designs/tile_hello/preview")
        assert res.status_code == 200
        data = res.json()
        assert data["renderable"] is True
        assert data["warnings"] == []
        text1 = data["tree"]["children"][0]
        assert text1["text"] == "Hello!"
        assert text1["style"] == {"color": "#ff4245"}
        assert data["outline"].splitlines()[0] == "Card#root"

    async def test_preview_with_dangling_child(self, async_client, tile_hello, storage):
        """Referential problems don't block a preview; they come back as warnings."""
        tile_hello[1]["updateComponents"]["components"][2]["children"]["explicitList"].append("gone")
        await storage.put("tile_hello", tile_hello)
        res = await async_client.get("/api/designs/tile_hello/preview")
        assert res.status_code == 200
        data = res.json()
        assert [w["code"] for w in data["warnings"]] == ["DANGLING_CHILD"]
        assert [c["id"] for c in data["tree"]["children"]] == ["text1", "cta"]

    async def test_preview_of_broken_stored_design(self, async_client, tile_hello, storage):
        """A stored design that no longer validates → 422 on preview."""
        await storage.put("tile_hello", tile_hello[:1])
        res = await async_client.get("/api/designs/tile_hello/preview")
        assert res.status_code == 422

    async def test_bindings(self, async_client, tile_hello, storage):
        """GET /api/designs/{id}/bindings → every ${/path} with its default."""
        await storage.put("tile_hello", tile_hello)
        res = await async_client.get("/api/designs/tile_hello/bindings")
        assert res.status_code == 200
        assert res.json()["bindings"] == [
            {"path": "/text1/content", "current_value": "Hello!", "bound_to": "Text.text (text1)"}
        ]


# ── device routes ───────────────────────────────────────────────────────────


class TestDeviceRoutes:
    """Tests for /api/devices endpoints."""

    async def test_list_devices(self, async_client, registry, fake_socket):
        await registry.register("phone-1", "ios", fake_socket())
        res = await async_client.get("/api/devices")
        assert res.status_code == 200
        devices = res.json()
        assert [(d["id"], d["platform"]) for d in devices] == [("phone-1", "ios")]
        assert "connected_at" in devices[0]

    async def test_push_to_all(self, async_client, registry, tile_hello, fake_socket):
        a, b = fake_socket(), fake_socket()
        await registry.register("a", "ios", a)
        await registry.register("b", "android", b)
        res = await async_client.post("/api/devices/push", json={"messages": tile_hello})
        assert res.status_code == 200
        assert res.json() == {"pushed": 2}
        assert json.loads(a.sent[0]) == {"type": "a2ui_messages", "messages": tile_hello}

    async def test_push_to_one(self, async_client, registry, tile_hello, fake_socket):
        a, b = fake_socket(), fake_socket()
        await registry.register("a", "ios", a)
        await registry.register("b", "android", b)
        res = await async_client.post("/api/devices/push", json={"device_id": "b", "messages": tile_hello})
        assert res.json() == {"pushed": 1}
        assert a.sent == []
        assert len(b.sent) == 1

    async def test_push_to_unknown_device(self, async_client, tile_hello):
        res = await async_client.post("/api/devices/push", json={"device_id": "ghost", "messages": tile_hello})
        assert res.status_code == 404

    async def test_push_live_update_without_create(self, async_client, registry, fake_socket):
        """Live pushes are not required to be complete batches."""
        await registry.register("a", "ios", fake_socket())
        msg = {"updateDataModel": {"surfaceId": "tile_hello", "path": "/text1/content", "value": "Bye"}}
        res = await async_client.post("/api/devices/push", json={"messages": [msg]})
        assert res.json() == {"pushed": 1}

    async def test_push_structurally_broken(self, async_client, registry, fake_socket):
        await registry.register("a", "ios", fake_socket())
        res = await async_client.post("/api/devices/push", json={"messages": [{"deleteSurface": {}}]})
        assert res.status_code == 422

    async def test_push_with_no_devices(self, async_client, tile_hello):
        res = await async_client.post("/api/devices/push", json={"messages": tile_hello})
        assert res.json() == {"pushed": 0}

    async def test_push_design_with_overlay(self, async_client, registry, storage, tile_hello, fake_socket):
        """POST /api/devices/push-design merges the overlay into the design defaults."""
        sock = fake_socket()
        await registry.register("a", "ios", sock)
        await storage.put("tile_hello", tile_hello)
        res = await async_client.post(
            "/api/devices/push-design",
            json={"design_id": "tile_hello", "data_model": {"text1": {"content": "Hi Sam"}}},
        )
        assert res.json() == {"pushed": 1}

        pushed = json.loads(sock.sent[0])["messages"]
        assert pushed[:2] == tile_hello[:2]
        assert pushed[2] == {
            "updateDataModel": {
                "surfaceId": "tile_hello",
                "path": "/",
                "value": {"text1": {"content": "Hi Sam", "size": "m"}},
            }
        }
        # Stored design is untouched
        assert storage.designs["tile_hello"].messages[2]["updateDataModel"]["value"]["text1"]["content"] == "Hello!"

    async def test_push_design_with_flat_key_overlay(self, async_client, registry, storage, tile_hello, fake_socket):
        """Overlay keys written as slash-paths land on the bound branch."""
        sock = fake_socket()
        await registry.register("a", "ios", sock)
        await storage.put("tile_hello", tile_hello)
        res = await async_client.post(
            "/api/devices/push-design",
            json={"design_id": "tile_hello", "data_model": {"/text1/content": "Yo"}},
        )
        assert res.json() == {"pushed": 1}

        value = json.loads(sock.sent[0])["messages"][2]["updateDataModel"]["value"]
        assert value == {"text1": {"content": "Yo", "size": "m"}}

    async def test_push_design_unknown(self, async_client):
        res = await async_client.post("/api/devices/push-design", json={"design_id": "nope"})
        assert res.status_code == 404


async def test_health(async_client):
    res = await async_client.get("/health")
    assert res.json() == {"status": "ok"}


class TestWithDataModel:
    async def test_sub_path_updates_pass_through(self):
        messages = [
            {"updateDataModel": {"surfaceId": "s", "path": "/a/b", "value": 1}},
            {"updateDataModel": {"surfaceId": "s", "value": {"a": {"b": 2, "c": 3}}}},
        ]
        rebuilt = with_data_model(messages, {"a": {"b": 9}})
        assert rebuilt[0] == messages[0]
        assert rebuilt[1]["updateDataModel"]["value"] == {"a": {"b": 9, "c": 3}}

    async def test_flat_keys_expanded_before_merge(self):
        messages = [{"updateDataModel": {"surfaceId": "s", "path": "/", "value": {"hello": {"text": "Hi", "k": 1}}}}]
        rebuilt = with_data_model(messages, {"/hello/text": "Yo"})
        assert rebuilt[0]["updateDataModel"]["value"] == {"hello": {"text": "Yo", "k": 1}}
