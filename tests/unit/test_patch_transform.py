"""
Unit tests for patch rebasing and pointer helpers.
"""

import copy

import pytest

from shadowsync.patch.pointer import is_prefix, join, rooted, split
from shadowsync.patch.transform import rebase
from shadowsync.utils.errors import ValidationError


class TestPointer:
    """RFC 6901 helpers."""

    @pytest.mark.parametrize("path,expected", [
        ("a", "/a"),
        ("a/b", "/a/b"),
        ("/a", "/a"),
        ("", ""),
    ])
    def test_rooted(self, path, expected):
        assert rooted(path) == expected

    def test_split_and_join_escape_tokens(self):
        assert split("/a~1b/c~0d") == ["a/b", "c~d"]
        assert join(["a/b", "c~d"]) == "/a~1b/c~0d"
        assert split("") == []

    def test_split_rejects_bad_escape(self):
        with pytest.raises(ValidationError):
            split("/a~2")

    def test_is_prefix(self):
        assert is_prefix(["a"], ["a", "b"])
        assert is_prefix(["a", "b"], ["a", "b"])
        assert not is_prefix(["a", "b"], ["a"])
        assert not is_prefix(["x"], ["a", "b"])


class TestRebase:
    """Index shifting and dropping."""

    def test_empty_history_returns_equal_patch(self):
        patch = [{"op": "add", "path": "/b", "value": 3}]
        assert rebase([], patch) == patch

    def test_inputs_are_not_mutated(self):
        history = [[{"op": "add", "path": "/items/0", "value": "x"}]]
        patch = [{"op": "replace", "path": "/items/0", "value": "y"}]
        history_before = copy.deepcopy(history)
        patch_before = copy.deepcopy(patch)

        result = rebase(history, patch)

        assert history == history_before
        assert patch == patch_before
        assert result is not patch

    def test_insert_shifts_same_or_later_indices(self):
        history = [[{"op": "add", "path": "/items/1", "value": "new"}]]
        patch = [
            {"op": "replace", "path": "/items/0", "value": "a"},
            {"op": "replace", "path": "/items/1", "value": "b"},
            {"op": "replace", "path": "/items/3/name", "value": "c"},
        ]

        assert rebase(history, patch) == [
            {"op": "replace", "path": "/items/0", "value": "a"},
            {"op": "replace", "path": "/items/2", "value": "b"},
            {"op": "replace", "path": "/items/4/name", "value": "c"},
        ]

    def test_append_does_not_shift(self):
        history = [[{"op": "add", "path": "/items/-", "value": "x"}]]
        patch = [{"op": "replace", "path": "/items/0", "value": "a"}]
        assert rebase(history, patch) == patch

    def test_remove_shifts_later_indices_down(self):
        history = [[{"op": "remove", "path": "/items/0"}]]
        patch = [{"op": "replace", "path": "/items/2", "value": "c"}]
        assert rebase(history, patch) == [{"op": "replace", "path": "/items/1", "value": "c"}]

    def test_operations_on_removed_location_are_dropped(self):
        history = [[{"op": "remove", "path": "/items/1"}]]
        patch = [
            {"op": "replace", "path": "/items/1", "value": "gone"},
            {"op": "replace", "path": "/items/1/name", "value": "gone"},
            {"op": "add", "path": "/items/1", "value": "kept"},
            {"op": "replace", "path": "/other", "value": 1},
        ]

        assert rebase(history, patch) == [
            {"op": "add", "path": "/items/1", "value": "kept"},
            {"op": "replace", "path": "/other", "value": 1},
        ]

    def test_object_key_removal_drops_nested_operations(self):
        history = [[{"op": "remove", "path": "/config"}]]
        patch = [
            {"op": "replace", "path": "/config/debug", "value": True},
            {"op": "add", "path": "/name", "value": "n"},
        ]
        assert rebase(history, patch) == [{"op": "add", "path": "/name", "value": "n"}]

    def test_move_sources_are_rebased(self):
        history = [[{"op": "add", "path": "/items/0", "value": "x"}]]
        patch = [{"op": "move", "from": "/items/1", "path": "/items/0"}]
        assert rebase(history, patch) == [{"op": "move", "from": "/items/2", "path": "/items/1"}]

    def test_copy_from_removed_location_is_dropped(self):
        history = [[{"op": "remove", "path": "/items/0"}]]
        patch = [{"op": "copy", "from": "/items/0", "path": "/first"}]
        assert rebase(history, patch) == []

    def test_pending_move_acts_as_remove_then_add(self):
        history = [[{"op": "move", "from": "/items/0", "path": "/items/2"}]]
        patch = [{"op": "replace", "path": "/items/1", "value": "b"}]
        # /items/1 becomes /items/0 after the removal, then the insert at 2 leaves it
        assert rebase(history, patch) == [{"op": "replace", "path": "/items/0", "value": "b"}]

    def test_history_applied_in_order(self):
        history = [
            [{"op": "add", "path": "/items/0", "value": "a"}],
            [{"op": "add", "path": "/items/0", "value": "b"}],
        ]
        patch = [{"op": "replace", "path": "/items/0", "value": "z"}]
        assert rebase(history, patch) == [{"op": "replace", "path": "/items/2", "value": "z"}]

    def test_value_operations_pass_through(self):
        history = [[
            {"op": "replace", "path": "/items/0", "value": "x"},
            {"op": "test", "path": "/items/0", "value": "x"},
        ]]
        patch = [{"op": "replace", "path": "/items/0", "value": "y"}]
        assert rebase(history, patch) == patch
