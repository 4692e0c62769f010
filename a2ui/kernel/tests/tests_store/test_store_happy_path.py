"""
A2UI Store -- Happy Path Tests

The canonical createSurface → updateComponents → updateDataModel sequence and
what a consumer can read back from the resulting surface.
"""

from a2ui.kernel.store import SurfaceStore


class TestTileHello:
    def test_all_messages_accepted(self, tile_hello):
        store = SurfaceStore()
        results = store.apply_all(tile_hello)
        assert [r.accepted for r in results] == [True, True, True]
        assert [r.surface_id for r in results] == ["tile_hello"] * 3
        assert all(r.warnings == [] for r in results)

    def test_surface_contents(self, tile_hello):
        store = SurfaceStore()
        store.apply_all(tile_hello)
        surface = store.get_surface("tile_hello")

        assert surface.is_renderable
        assert surface.root.id == "root"
        assert surface.child_ids(surface.root) == ["text1", "cta"]
        assert surface.design_tokens["Accents.Red"].value == "#ff4245"
        assert surface.data_model == {"text1": {"content": "Hello!"}}

    def test_resolution_through_surface(self, tile_hello, fixed_now):
        store = SurfaceStore()
        store.apply_all(tile_hello)
        surface = store.get_surface("tile_hello")
        text1 = surface.component("text1")

        assert surface.resolve_text(text1.text, fixed_now) == "Hello!"
        assert surface.resolve_style_value(text1.style, "color") == "#ff4245"
        assert surface.resolve_style(surface.component("cta").label_style) == {"padding": 4}

    def test_raw_data_model_keeps_references(self, tile_hello):
        # Resolution never writes back into the surface
        store = SurfaceStore()
        store.apply_all(tile_hello)
        surface = store.get_surface("tile_hello")
        surface.resolve_text("${/text1/content}")
        assert surface.component("text1").text == "${/text1/content}"
        assert surface.component("text1").style["color"] == "{Accents.Red}"


class TestExport:
    def test_to_messages_reimports(self, tile_hello):
        store = SurfaceStore()
        store.apply_all(tile_hello)
        exported = store.get_surface("tile_hello").to_messages()
        assert exported == tile_hello

        other = SurfaceStore()
        assert all(r.accepted for r in other.apply_all(exported))
        assert other.get_surface("tile_hello").data_model == {"text1": {"content": "Hello!"}}

    def test_data_bindings(self, tile_hello):
        store = SurfaceStore()
        store.apply_all(tile_hello)
        assert store.get_surface("tile_hello").data_bindings() == [
            {"path": "/text1/content", "current_value": "Hello!", "bound_to": "Text.text (text1)"}
        ]


class TestMultipleSurfaces:
    def test_surfaces_are_independent(self, tile_hello):
        store = SurfaceStore()
        store.apply_all(tile_hello)
        store.apply({"createSurface": {"surfaceId": "other"}})
        store.apply({"updateDataModel": {"surfaceId": "other", "value": {"x": 1}}})

        assert set(store.surfaces) == {"tile_hello", "other"}
        assert store.get_surface("tile_hello").data_model == {"text1": {"content": "Hello!"}}
        assert store.get_surface("other").data_model == {"x": 1}

    def test_stores_are_independent(self, tile_hello):
        a, b = SurfaceStore(), SurfaceStore()
        a.apply_all(tile_hello)
        assert "tile_hello" in a
        assert "tile_hello" not in b
