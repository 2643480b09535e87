"""Classification strategy recommendation."""

from collections import Counter
from typing import Iterable, Mapping

from ledgerclass.domain.entities import HierarchyLevel, Strategy

DEFAULT_DETAIL_THRESHOLD = 15


def recommend(
    siblings_by_level: Mapping[int, int],
    current_level: int,
    detail_threshold: int = DEFAULT_DETAIL_THRESHOLD,
) -> Strategy:
    """Choose how a family should be classified.

    Rules, first match wins:
    1. Inspecting level 4 with 1..detail_threshold level-4 accounts: detail.
    2. Inspecting level 3, or more than detail_threshold level-4 accounts: summary.
    3. Inspecting level 1 or 2: high level.
    4. Anything else: summary.

    Args:
        siblings_by_level: Number of family accounts at each hierarchy level
        current_level: Level under inspection
        detail_threshold: Largest level-4 count still classified row by row

    Returns:
        Strategy
    """
    detail_count = siblings_by_level.get(HierarchyLevel.DETAIL, 0)

    if current_level == HierarchyLevel.DETAIL and 0 < detail_count <= detail_threshold:
        return Strategy.DETAIL_CLASSIFICATION
    if current_level == HierarchyLevel.SUBCATEGORY or detail_count > detail_threshold:
        return Strategy.SUMMARY_CLASSIFICATION
    if current_level <= HierarchyLevel.FAMILY_ROOT:
        return Strategy.HIGH_LEVEL_CLASSIFICATION
    return Strategy.SUMMARY_CLASSIFICATION


def count_by_level(levels: Iterable[int]) -> dict[int, int]:
    """Count occurrences of each hierarchy level."""
    return dict(Counter(HierarchyLevel(level) for level in levels))
