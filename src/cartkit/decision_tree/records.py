"""Accessors over an ordered dataset of records.

All functions preserve first-seen order so that the enumeration of candidate
splits, and therefore the induced tree, is deterministic.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cartkit.decision_tree.models import FeatureValue, Record


def unique_feature_names(dataset: Sequence[Record]) -> list[str]:
    """Return every feature name present on any record, in first-seen order.

    Args:
        dataset (Sequence[Record]): The records to scan.

    Returns:
        list[str]: Feature names without duplicates.

    Examples:
        >>> from cartkit.decision_tree.models import Record
        >>> unique_feature_names([
        ...     Record(features={"color": "red"}, label="Grape"),
        ...     Record(features={"diameter": 3, "color": "green"}, label="Apple"),
        ... ])
        ['color', 'diameter']
    """
    names: dict[str, None] = {}
    for record in dataset:
        for name in record.features:
            names.setdefault(name)
    return list(names)


def unique_values(dataset: Sequence[Record], feature: str) -> list[FeatureValue]:
    """Return the distinct values of one feature, in first-seen order.

    Records lacking the feature are skipped. Values are keyed by type as well
    as value, so `1`, `1.0` and `"1"` are three distinct values. Every NaN
    shares one key, so at most one NaN is returned.

    Args:
        dataset (Sequence[Record]): The records to scan.
        feature (str): The feature name to collect values for.

    Returns:
        list[FeatureValue]: The distinct values.
    """
    seen: set[tuple[type, FeatureValue | None]] = set()
    values: list[FeatureValue] = []
    for record in dataset:
        if feature not in record.features:
            continue
        value = record.features[feature]
        # NaN != NaN, so distinct NaN objects would otherwise each get a key
        key = (type(value), None if isinstance(value, float) and math.isnan(value) else value)
        if key not in seen:
            seen.add(key)
            values.append(value)
    return values


def count_labels(dataset: Sequence[Record]) -> dict[str, int]:
    """Count how many records carry each label.

    Args:
        dataset (Sequence[Record]): The records to count.

    Returns:
        dict[str, int]: Label to count, in first-seen order. Empty for an
            empty dataset.
    """
    counts: dict[str, int] = {}
    for record in dataset:
        counts[record.label] = counts.get(record.label, 0) + 1
    return counts
