"""Set difference for edge-diffed attributes."""

from __future__ import annotations

from typing import Iterable


def string_set_diff(old: Iterable[str], new: Iterable[str]) -> tuple[list[str], list[str]]:
    """Compare two unordered string collections.

    Args:
        old: Previously declared values
        new: Newly declared values

    Returns:
        Tuple of (added, removed), each sorted and free of duplicates
    """
    old_set = set(old)
    new_set = set(new)
    return sorted(new_set - old_set), sorted(old_set - new_set)
