"""Decision tree sub-package: models, impurity, splitting, fitting, and preprocessing."""

from __future__ import annotations

from cartkit.decision_tree.fitting import (
    build_tree,
    build_tree_result,
    classify,
    compute_accuracy,
    extract_rules,
    features_used,
    leaf_count,
    predict,
    tree_depth,
)
from cartkit.decision_tree.impurity import gini_impurity, information_gain
from cartkit.decision_tree.models import (
    DecisionNode,
    DecisionRule,
    FeatureKind,
    FeatureValue,
    InductionResult,
    Leaf,
    PartitionResult,
    Question,
    Record,
    RuleCondition,
    SplitCandidate,
    TreeNode,
)
from cartkit.decision_tree.preprocessing import ExcludedFeature, records_from_frame
from cartkit.decision_tree.records import count_labels, unique_feature_names, unique_values
from cartkit.decision_tree.splitting import find_best_split, partition

__all__ = [
    "DecisionNode",
    "DecisionRule",
    "ExcludedFeature",
    "FeatureKind",
    "FeatureValue",
    "InductionResult",
    "Leaf",
    "PartitionResult",
    "Question",
    "Record",
    "RuleCondition",
    "SplitCandidate",
    "TreeNode",
    "build_tree",
    "build_tree_result",
    "classify",
    "compute_accuracy",
    "count_labels",
    "extract_rules",
    "features_used",
    "find_best_split",
    "gini_impurity",
    "information_gain",
    "leaf_count",
    "partition",
    "predict",
    "records_from_frame",
    "tree_depth",
    "unique_feature_names",
    "unique_values",
]
