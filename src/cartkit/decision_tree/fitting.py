"""Tree induction, prediction, rule extraction, and pipeline orchestration."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import polars as pl
from loguru import logger

from cartkit.config import DEFAULT_CONFIG, InductionConfig, MissingFeaturePolicy
from cartkit.decision_tree.models import (
    DecisionNode,
    DecisionRule,
    InductionResult,
    Leaf,
    Record,
    RuleCondition,
    TreeNode,
)
from cartkit.decision_tree.preprocessing import records_from_frame
from cartkit.decision_tree.splitting import find_best_split, partition
from cartkit.exceptions import InductionError
from cartkit.logging import INDUCTION_LEVEL

# ---------------------------------------------------------------------------
# Module-level constants
# ---------------------------------------------------------------------------

# Gains this close to zero come from splits that leave the label distribution unchanged.
_ZERO_GAIN_TOLERANCE: float = 1e-12
_CONFIDENCE_DECIMAL_PLACES: int = 4

# ---------------------------------------------------------------------------
# Public interface -- Tree induction
# ---------------------------------------------------------------------------


def build_tree(
    dataset: Sequence[Record],
    *,
    config: InductionConfig | None = None,
) -> TreeNode:
    """Induce a binary decision tree from a labeled dataset.

    At each node the best split is searched for. When its gain is zero (a
    pure node, fewer than two records, or no question that helps) the node
    becomes a `Leaf` holding its records; otherwise the records are
    partitioned on the winning question and both sides are induced
    recursively. Every accepted split leaves both sides non-empty, so each
    recursive call sees strictly fewer records and induction terminates.

    Args:
        dataset (Sequence[Record]): The training records, in a fixed order.
        config (InductionConfig | None): Induction options; defaults to
            `InductionConfig()`.

    Returns:
        TreeNode: The root of the induced tree.

    Raises:
        QuestionEvaluationError: If a question cannot be evaluated on some
            record. The error carries the element index, the candidate or
            winning question, and the depth of the failing node in its context.

    Examples:
        >>> tree = build_tree([
        ...     Record(features={"diameter": 3}, label="Apple"),
        ...     Record(features={"diameter": 1}, label="Grape"),
        ... ])
        >>> tree.render().splitlines()
        ['Is diameter >= 3?', '-->True: ', "  Predict {'Apple': 1}", '-->False: ', "  Predict {'Grape': 1}"]
    """
    config = config or DEFAULT_CONFIG
    logger.log(INDUCTION_LEVEL, "Building decision tree", records=len(dataset), parallel=config.parallel)
    try:
        tree = _induce(list(dataset), config=config, depth=0)
    except InductionError as exc:
        logger.warning("Decision tree induction failed", error_type=type(exc).__name__, reason=str(exc))
        raise
    logger.log(INDUCTION_LEVEL, "Decision tree built", depth=tree_depth(tree), leaves=leaf_count(tree))
    return tree


# ---------------------------------------------------------------------------
# Public interface -- Prediction
# ---------------------------------------------------------------------------


def classify(
    tree: TreeNode,
    record: Record | Mapping[str, Any],
    *,
    missing_feature: MissingFeaturePolicy = "no_match",
) -> dict[str, int]:
    """Route a record down the tree and return the label counts of the leaf it reaches.

    Args:
        tree (TreeNode): Root of an induced tree.
        record (Record | Mapping[str, Any]): The record, or its bare feature
            mapping, to classify. Its label, if any, is ignored.
        missing_feature (MissingFeaturePolicy): Policy for features the record lacks.

    Returns:
        dict[str, int]: Label distribution of the reached leaf.

    Raises:
        QuestionEvaluationError: If a question on the path cannot be evaluated.
    """
    return _find_leaf(tree, record, missing_feature=missing_feature).predictions


def predict(
    tree: TreeNode,
    record: Record | Mapping[str, Any],
    *,
    missing_feature: MissingFeaturePolicy = "no_match",
) -> str:
    """Predict the label of a record as the majority label of the leaf it reaches.

    Args:
        tree (TreeNode): Root of an induced tree.
        record (Record | Mapping[str, Any]): The record, or its bare feature
            mapping, to classify.
        missing_feature (MissingFeaturePolicy): Policy for features the record lacks.

    Returns:
        str: The predicted label. Ties go to the label seen first at the leaf.

    Raises:
        ValueError: If the reached leaf is empty (a tree built from no records).
        QuestionEvaluationError: If a question on the path cannot be evaluated.
    """
    label = _find_leaf(tree, record, missing_feature=missing_feature).majority_label
    if label is None:
        raise ValueError("Cannot predict from an empty leaf; the tree was built from an empty dataset.")
    return label


def compute_accuracy(tree: TreeNode, dataset: Sequence[Record]) -> float:
    """Return the fraction of records whose predicted label equals their label.

    Args:
        tree (TreeNode): Root of an induced tree.
        dataset (Sequence[Record]): Labeled records to score.

    Returns:
        float: Accuracy in `[0.0, 1.0]`.

    Raises:
        ValueError: If `dataset` is empty.
    """
    if not dataset:
        raise ValueError("Cannot compute accuracy on an empty dataset.")
    correct = sum(1 for record in dataset if predict(tree, record) == record.label)
    return correct / len(dataset)


# ---------------------------------------------------------------------------
# Public interface -- Rules and tree statistics
# ---------------------------------------------------------------------------


def extract_rules(tree: TreeNode) -> list[DecisionRule]:
    """Extract one human-readable rule per leaf.

    Leaves are visited depth-first with the True branch first, so rules come
    out in the same order as the leaves appear in `tree.render()`.

    Args:
        tree (TreeNode): Root of an induced tree.

    Returns:
        list[DecisionRule]: One rule per leaf.
    """
    rules: list[DecisionRule] = []
    _walk_tree(tree, path_conditions=[], rules=rules)
    return rules


def tree_depth(tree: TreeNode) -> int:
    """Return the number of decision nodes on the longest root-to-leaf path.

    Args:
        tree (TreeNode): Root of a tree.

    Returns:
        int: `0` for a single leaf.
    """
    if isinstance(tree, Leaf):
        return 0
    return 1 + max(tree_depth(tree.true_branch), tree_depth(tree.false_branch))


def leaf_count(tree: TreeNode) -> int:
    """Return the number of leaves in a tree."""
    if isinstance(tree, Leaf):
        return 1
    return leaf_count(tree.true_branch) + leaf_count(tree.false_branch)


def features_used(tree: TreeNode) -> list[str]:
    """Return the features asked about by the tree's decision nodes, in pre-order.

    Args:
        tree (TreeNode): Root of a tree.

    Returns:
        list[str]: Distinct feature names; empty for a single leaf.
    """
    names: dict[str, None] = {}
    stack: list[TreeNode] = [tree]
    while stack:
        node = stack.pop()
        if isinstance(node, DecisionNode):
            names.setdefault(node.question.feature)
            stack.append(node.false_branch)
            stack.append(node.true_branch)
    return list(names)


# ---------------------------------------------------------------------------
# Public interface -- Pipeline orchestration
# ---------------------------------------------------------------------------


def build_tree_result(
    df: pl.DataFrame,
    label: str,
    *,
    features: list[str] | None = None,
    config: InductionConfig | None = None,
) -> InductionResult:
    """Induce a tree from a DataFrame and assemble a structured result.

    Converts the DataFrame to records, induces the tree, extracts its rules,
    and measures training accuracy.

    Args:
        df (pl.DataFrame): Source DataFrame holding features and the label.
        label (str): Name of the label column.
        features (list[str] | None): Feature columns to consider. When `None`,
            all columns except `label` are used.
        config (InductionConfig | None): Induction options.

    Returns:
        InductionResult: The induced tree together with its rules and statistics.

    Raises:
        ColumnsNotFoundError: If `label` or a requested feature column is missing.
        ValueError: If no rows with a non-null label remain.
        QuestionEvaluationError: If induction fails.
    """
    logger.log(INDUCTION_LEVEL, "Building decision tree result", label=label, shape=df.shape)
    records, excluded_features = records_from_frame(df, label, features=features)
    if not records:
        raise ValueError(f"No rows with a non-null '{label}' value remain; cannot induce a tree.")

    tree = build_tree(records, config=config)
    rules = extract_rules(tree)
    return InductionResult(
        label=label,
        tree=tree,
        features_used=features_used(tree),
        features_excluded=[f"{ef.name} ({ef.reason})" for ef in excluded_features],
        rules=rules,
        sample_count=len(records),
        depth=tree_depth(tree),
        leaf_count=leaf_count(tree),
        accuracy=compute_accuracy(tree, records),
    )


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _induce(dataset: list[Record], *, config: InductionConfig, depth: int) -> TreeNode:
    """Recursively induce the subtree for one node.

    Args:
        dataset (list[Record]): Records that reached this node.
        config (InductionConfig): Induction options.
        depth (int): Depth of this node; the root is at depth 0.

    Returns:
        TreeNode: A `Leaf` when no split has positive gain, otherwise a
            `DecisionNode` with both subtrees induced.
    """
    try:
        best = find_best_split(dataset, config=config)
        if best.question is None or abs(best.gain) <= _ZERO_GAIN_TOLERANCE:
            logger.debug("Leaf reached", depth=depth, records=len(dataset))
            return Leaf(records=dataset)

        question = best.question
        try:
            matched, unmatched = partition(dataset, question, missing_feature=config.missing_feature)
        except InductionError as exc:
            exc.add_context(f"question '{question}'")
            raise
    except InductionError as exc:
        exc.add_context(f"depth {depth}")
        raise

    logger.debug(
        "Splitting node",
        depth=depth,
        question=str(question),
        gain=best.gain,
        matched=len(matched),
        unmatched=len(unmatched),
    )
    return DecisionNode(
        question=question,
        true_branch=_induce(matched, config=config, depth=depth + 1),
        false_branch=_induce(unmatched, config=config, depth=depth + 1),
    )


def _find_leaf(
    tree: TreeNode,
    record: Record | Mapping[str, Any],
    *,
    missing_feature: MissingFeaturePolicy,
) -> Leaf:
    """Follow the matching branch at each decision node until a leaf is reached."""
    node = tree
    while isinstance(node, DecisionNode):
        node = node.true_branch if node.question.match(record, missing_feature=missing_feature) else node.false_branch
    return node


def _walk_tree(
    node: TreeNode,
    *,
    path_conditions: list[RuleCondition],
    rules: list[DecisionRule],
) -> None:
    """Recursively walk a tree node and accumulate leaf rules.

    Args:
        node (TreeNode): The current node.
        path_conditions (list[RuleCondition]): Conditions accumulated from
            the root to `node`.
        rules (list[DecisionRule]): Accumulator list; leaf rules are appended in-place.
    """
    if isinstance(node, Leaf):
        rules.append(_build_leaf_rule(node, path_conditions))
        return

    _walk_tree(
        node.true_branch,
        path_conditions=[*path_conditions, RuleCondition(question=node.question, answer=True)],
        rules=rules,
    )
    _walk_tree(
        node.false_branch,
        path_conditions=[*path_conditions, RuleCondition(question=node.question, answer=False)],
        rules=rules,
    )


def _build_leaf_rule(leaf: Leaf, path_conditions: list[RuleCondition]) -> DecisionRule:
    """Construct a rule from a leaf's label distribution.

    Args:
        leaf (Leaf): The leaf to describe.
        path_conditions (list[RuleCondition]): Conditions along the root-to-leaf path.

    Returns:
        DecisionRule: The constructed rule.
    """
    predictions = leaf.predictions
    samples = len(leaf.records)
    prediction = leaf.majority_label
    confidence = predictions[prediction] / samples if prediction is not None else 0.0
    return DecisionRule(
        conditions=path_conditions,
        prediction=prediction,
        samples=samples,
        confidence=round(confidence, _CONFIDENCE_DECIMAL_PLACES),
        predictions=predictions,
    )
