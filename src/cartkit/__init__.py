"""cartkit: CART-style binary decision tree induction over labeled records."""

from loguru import logger

from cartkit.config import InductionConfig
from cartkit.decision_tree import (
    DecisionNode,
    Leaf,
    Question,
    Record,
    TreeNode,
    build_tree,
    build_tree_result,
    predict,
)
from cartkit.logging import PACKAGE_NAME, enable_logging

logger.disable(PACKAGE_NAME)  # noqa: RUF067 - Disable logging for the cartkit package by default

__all__ = [
    "DecisionNode",
    "InductionConfig",
    "Leaf",
    "Question",
    "Record",
    "TreeNode",
    "build_tree",
    "build_tree_result",
    "enable_logging",
    "predict",
]
