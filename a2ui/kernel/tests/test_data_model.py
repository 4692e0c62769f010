"""
A2UI Data Model -- Path Upsert and Overlay Merge Tests

Two write algorithms over a nested JSON object:
  set_at_path: single-branch upsert, siblings untouched
  merge:       full recursive overlay, right side wins, arrays replaced whole

Plus the legacy flat-key expansion used by `{dataModel: {...}}` overlays.
"""

import pytest

from a2ui.kernel.data_model import (
    expand_flat_paths,
    get_at_path,
    merge,
    normalize_overlay,
    set_at_path,
    split_path,
)

# ============================================================================
# split_path
# ============================================================================


class TestSplitPath:
    @pytest.mark.parametrize(
        "path,expected",
        [
            ("/hello/text", ["hello", "text"]),
            ("hello/text", ["hello", "text"]),
            ("/", []),
            ("", []),
            ("//a//b/", ["a", "b"]),
        ],
    )
    def test_segments(self, path, expected):
        assert split_path(path) == expected


# ============================================================================
# set_at_path
# ============================================================================


class TestSetAtPath:
    def test_sibling_preserved(self):
        assert set_at_path({"a": {"b": 1, "c": 2}}, "a/b", 9) == {"a": {"b": 9, "c": 2}}

    def test_leading_slash_equivalent(self):
        assert set_at_path({}, "/a/b", 1) == set_at_path({}, "a/b", 1)

    def test_creates_intermediates(self):
        assert set_at_path({}, "/x/y/z", "v") == {"x": {"y": {"z": "v"}}}

    def test_scalar_mid_path_is_replaced(self):
        assert set_at_path({"a": 5}, "/a/b", 1) == {"a": {"b": 1}}

    def test_array_mid_path_is_replaced(self):
        assert set_at_path({"a": [1, 2]}, "/a/b", 1) == {"a": {"b": 1}}

    def test_mutates_in_place(self):
        tree = {"a": {}}
        returned = set_at_path(tree, "/a/b", 1)
        assert returned is tree
        assert tree == {"a": {"b": 1}}

    def test_empty_path_is_noop(self):
        tree = {"a": 1}
        assert set_at_path(tree, "/", {"x": 1}) == {"a": 1}

    def test_value_can_be_object(self):
        assert set_at_path({"a": {"keep": 1}}, "/a/b", {"c": [1]}) == {"a": {"keep": 1, "b": {"c": [1]}}}

    def test_replaces_existing_subtree(self):
        # set_at_path replaces the leaf; it does not merge into it
        assert set_at_path({"a": {"b": {"x": 1}}}, "/a/b", {"y": 2}) == {"a": {"b": {"y": 2}}}


# ============================================================================
# get_at_path
# ============================================================================


class TestGetAtPath:
    def test_found(self):
        assert get_at_path({"a": {"b": "Hi"}}, "/a/b") == (True, "Hi")

    def test_found_falsy(self):
        assert get_at_path({"a": {"b": 0}}, "/a/b") == (True, 0)

    def test_missing(self):
        assert get_at_path({"a": {}}, "/a/b") == (False, None)

    def test_arrays_are_opaque(self):
        assert get_at_path({"a": [{"b": 1}]}, "/a/0/b") == (False, None)

    def test_root(self):
        tree = {"a": 1}
        assert get_at_path(tree, "/") == (True, tree)


# ============================================================================
# merge
# ============================================================================


class TestMerge:
    def test_nested_overlay(self):
        assert merge({"a": {"x": 1, "y": 2}}, {"a": {"x": 9}}) == {"a": {"x": 9, "y": 2}}

    def test_arrays_replaced_whole(self):
        assert merge({"a": [1, 2]}, {"a": [3]}) == {"a": [3]}

    def test_object_replaces_scalar(self):
        assert merge({"a": 1}, {"a": {"b": 2}}) == {"a": {"b": 2}}

    def test_scalar_replaces_object(self):
        assert merge({"a": {"b": 2}}, {"a": None}) == {"a": None}

    def test_new_keys_added(self):
        assert merge({"a": 1}, {"b": 2}) == {"a": 1, "b": 2}

    def test_inputs_untouched(self):
        base = {"a": {"x": 1}}
        overlay = {"a": {"y": {"z": 1}}}
        result = merge(base, overlay)
        result["a"]["y"]["z"] = 99
        assert base == {"a": {"x": 1}}
        assert overlay == {"a": {"y": {"z": 1}}}

    def test_empty_overlay_copies(self):
        base = {"a": {"b": 1}}
        result = merge(base, {})
        assert result == base
        assert result is not base
        assert result["a"] is not base["a"]


# ============================================================================
# Legacy flat keys
# ============================================================================


class TestFlatPaths:
    def test_expand(self):
        overlay = {"/hello/text": "Hi", "other": {"k": 1}}
        assert expand_flat_paths(overlay) == {"hello": {"text": "Hi"}, "other": {"k": 1}}

    def test_shared_prefix(self):
        overlay = {"/a/x": 1, "/a/y": 2}
        assert expand_flat_paths(overlay) == {"a": {"x": 1, "y": 2}}

    def test_flat_and_nested_same_branch(self):
        overlay = {"a": {"x": 1}, "/a/y": 2}
        assert expand_flat_paths(overlay) == {"a": {"x": 1, "y": 2}}

    def test_normalize_overlay_merges_into_base(self):
        base = {"hello": {"text": "old", "color": "red"}}
        result = normalize_overlay(base, {"/hello/text": "new"})
        assert result == {"hello": {"text": "new", "color": "red"}}
        assert base["hello"]["text"] == "old"
