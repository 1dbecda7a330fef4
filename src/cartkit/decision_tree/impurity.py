"""Gini impurity and information gain."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from cartkit.decision_tree.records import count_labels

if TYPE_CHECKING:
    from cartkit.decision_tree.models import PartitionResult, Record


def gini_impurity(subset: Sequence[Record]) -> float:
    """Compute the Gini impurity `1 - sum(p(label) ** 2)` of a subset.

    The impurity is the probability that two records drawn at random from the
    subset carry different labels: `0.0` for a pure subset.

    Args:
        subset (Sequence[Record]): A non-empty sequence of records.

    Returns:
        float: The impurity, in `[0.0, 1.0)`.

    Raises:
        ValueError: If `subset` is empty; its impurity is undefined.
    """
    total = len(subset)
    if total == 0:
        raise ValueError("Gini impurity is undefined for an empty subset.")
    impurity = 1.0
    for count in count_labels(subset).values():
        impurity -= (count / total) ** 2
    return impurity


def information_gain(partition_result: PartitionResult, parent_impurity: float) -> float:
    """Compute the impurity reduction achieved by a split.

    `parent - w * gini(matched) - (1 - w) * gini(unmatched)` with
    `w = |matched| / (|matched| + |unmatched|)`. A side that received no
    records contributes nothing, since its weight is zero.

    Args:
        partition_result (PartitionResult): The two sides of the split.
        parent_impurity (float): Gini impurity of the unsplit dataset.

    Returns:
        float: The weighted information gain.

    Raises:
        ValueError: If both sides are empty.
    """
    matched, unmatched = partition_result
    total = len(matched) + len(unmatched)
    if total == 0:
        raise ValueError("Information gain is undefined when both sides of a split are empty.")
    weight_true = len(matched) / total
    gain = parent_impurity
    if matched:
        gain -= weight_true * gini_impurity(matched)
    if unmatched:
        gain -= (1 - weight_true) * gini_impurity(unmatched)
    return gain
