"""Tests for the membership diff."""

from __future__ import annotations

import pytest

from minio_s3_operator.utils.diff import string_set_diff


class TestStringSetDiff:
    """Test cases for string_set_diff."""

    def test_added_and_removed(self):
        """Test that additions and removals are reported separately."""
        added, removed = string_set_diff(["g1", "g2"], ["g2", "g3"])
        assert added == ["g3"]
        assert removed == ["g1"]

    def test_identical_sets(self):
        """Test that equal inputs produce no changes."""
        assert string_set_diff(["a", "b"], ["b", "a"]) == ([], [])

    def test_empty_old(self):
        """Test that everything is added from an empty set."""
        assert string_set_diff([], ["b", "a"]) == (["a", "b"], [])

    def test_empty_new(self):
        """Test that everything is removed into an empty set."""
        assert string_set_diff(["b", "a"], []) == ([], ["a", "b"])

    def test_duplicates_are_collapsed(self):
        """Test that duplicates in the input do not leak into the output."""
        added, removed = string_set_diff(["a", "a"], ["b", "b", "a"])
        assert added == ["b"]
        assert removed == []

    @pytest.mark.parametrize(
        "old,new",
        [
            (["g1", "g2"], ["g2", "g3"]),
            ([], ["x"]),
            (["x", "y", "z"], ["y"]),
            (["p", "q"], ["r", "s"]),
        ],
    )
    def test_applying_diff_yields_new(self, old, new):
        """Test that (old + added) - removed equals new and the parts are disjoint."""
        added, removed = string_set_diff(old, new)
        assert (set(old) | set(added)) - set(removed) == set(new)
        assert not set(added) & set(removed)
        assert not set(added) & set(old)
        assert set(removed) <= set(old)
