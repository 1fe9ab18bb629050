"""Tests for disclosed attribute path enumeration."""

import pytest

from credential_display.disclosure import get_disclosed_attribute_paths

TREE = {
    "given_name": "Alice",
    "address": {"locality": "Berlin", "geo": {"lat": 52.5, "lon": 13.4}},
    "nationalities": ["DE", "FR"],
}


class TestDepthBudget:
    def test_zero_depth_reports_top_level_keys(self):
        assert get_disclosed_attribute_paths(TREE, 0) == [
            ["given_name"],
            ["address"],
            ["nationalities"],
        ]

    def test_depth_cap_reports_subtree_as_single_path(self):
        assert get_disclosed_attribute_paths(TREE, 1) == [
            ["given_name"],
            ["address", "locality"],
            ["address", "geo"],
            ["nationalities", "0"],
            ["nationalities", "1"],
        ]

    def test_unbounded_depth(self):
        assert get_disclosed_attribute_paths(TREE) == [
            ["given_name"],
            ["address", "locality"],
            ["address", "geo", "lat"],
            ["address", "geo", "lon"],
            ["nationalities", "0"],
            ["nationalities", "1"],
        ]

    @pytest.mark.parametrize("depth", [0, 1, 2, None])
    def test_every_path_is_non_empty(self, depth):
        assert all(len(path) >= 1 for path in get_disclosed_attribute_paths(TREE, depth))

    def test_lists_are_indexed(self):
        paths = get_disclosed_attribute_paths({"nationalities": ["DE", "FR"]}, 2)
        assert paths == [["nationalities", "0"], ["nationalities", "1"]]

    def test_list_elements_share_the_depth_budget(self):
        payload = {"items": [{"a": 1}, {"b": 2}]}
        assert get_disclosed_attribute_paths(payload, 1) == [["items", "0"], ["items", "1"]]
        assert get_disclosed_attribute_paths(payload, 5) == [["items", "0", "a"], ["items", "1", "b"]]

    def test_tuples_are_indexed_like_lists(self):
        assert get_disclosed_attribute_paths({"t": ("x",)}) == [["t", "0"]]


class TestFalsyValues:
    def test_falsy_values_are_skipped_by_default(self):
        payload = {"a": None, "b": "", "c": 0, "d": False, "e": {}, "f": [], "g": "x"}
        assert get_disclosed_attribute_paths(payload, 2) == [["g"]]

    def test_falsy_values_kept_on_request(self):
        payload = {"a": None, "b": {}, "c": {"d": 0}}
        assert get_disclosed_attribute_paths(payload, 2, skip_falsy=False) == [
            ["a"],
            ["b"],
            ["c", "d"],
        ]

    def test_all_falsy_subtree_disappears(self):
        assert get_disclosed_attribute_paths({"x": {"y": None}}, 2) == []

    def test_falsy_list_elements_are_skipped(self):
        assert get_disclosed_attribute_paths({"l": ["", "a", None]}, 2) == [["l", "1"]]

    def test_empty_list_kept_as_leaf(self):
        assert get_disclosed_attribute_paths({"l": []}, 2, skip_falsy=False) == [["l"]]


class TestPrefix:
    def test_prefix_is_prepended(self):
        paths = get_disclosed_attribute_paths({"a": 1}, 0, prefix=("root",))
        assert paths == [["root", "a"]]

    def test_non_string_keys_are_stringified(self):
        assert get_disclosed_attribute_paths({1: "one"}) == [["1"]]
