"""Pydantic models and question logic for the decision tree module."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, model_validator

from cartkit.config import MissingFeaturePolicy
from cartkit.decision_tree.records import count_labels
from cartkit.exceptions import MissingFeatureError, TypeMismatchError, UnsupportedTypeError

# ---------------------------------------------------------------------------
# Public type aliases
# ---------------------------------------------------------------------------

type FeatureValue = StrictStr | StrictInt | StrictFloat

type FeatureKind = Literal["string", "integer", "float"]

# Rendered between the feature name and the value in `Question.__str__`.
_EQUALITY_OP = "=="
_THRESHOLD_OP = ">="

# Indentation added per tree level by `DecisionNode.render`.
_RENDER_INDENT = "  "

# ---------------------------------------------------------------------------
# Public models -- Records and questions
# ---------------------------------------------------------------------------


class Record(BaseModel):
    """One labeled observation with named scalar attributes.

    Records need not share the same keys, and one feature may hold values of
    different kinds across records of the same dataset.

    Attributes:
        features (dict[str, FeatureValue]): Attribute bag mapping feature name
            to a `str`, `int` or `float` value. Booleans are rejected.
        label (str): The class label of this observation.

    Examples:
        >>> r = Record(features={"color": "green", "diameter": 3}, label="Apple")
        >>> r.features["diameter"]
        3
    """

    model_config = ConfigDict(frozen=True)

    features: dict[str, FeatureValue] = Field(
        description="Attribute bag mapping feature name to a string, integer or float value.",
    )
    label: str = Field(
        description="Class label of this observation.",
    )


class Question(BaseModel):
    """A test on one feature used to split a dataset in two.

    String-valued questions test equality; integer- and float-valued questions
    test `record_value >= value`, which realizes a threshold split on ordinal
    data. The value is stored as given; a value of any other kind is reported
    as `UnsupportedTypeError` when the question is evaluated.

    Attributes:
        feature (str): Feature name the question applies to, e.g. `"diameter"`.
        value (Any): Comparison value, normally `str`, `int` or `float`.

    Examples:
        >>> q = Question(feature="diameter", value=3)
        >>> str(q)
        'Is diameter >= 3?'
        >>> q.match({"diameter": 5})
        True
        >>> Question(feature="color", value="red").match({"diameter": 5})
        False
    """

    model_config = ConfigDict(frozen=True)

    feature: str = Field(
        description="Feature name the question applies to, e.g. 'diameter'.",
    )
    value: Any = Field(
        description="Comparison value: a string for equality tests, an int or float for '>=' thresholds.",
    )

    def __str__(self) -> str:
        """Return the question as `"Is <feature> <op> <value>?"`.

        Returns:
            str: e.g. `"Is color == red?"` or `"Is diameter >= 3?"`.
        """
        op = _EQUALITY_OP if value_kind(self.value) == "string" else _THRESHOLD_OP
        return f"Is {self.feature} {op} {self.value}?"

    def match(
        self,
        record: Record | Mapping[str, Any],
        *,
        missing_feature: MissingFeaturePolicy = "no_match",
    ) -> bool:
        """Evaluate this question against a record.

        Args:
            record (Record | Mapping[str, Any]): The record, or its bare
                feature mapping, to test.
            missing_feature (MissingFeaturePolicy): What to do when the record
                lacks the feature: `"no_match"` answers `False`, `"error"`
                raises `MissingFeatureError`.

        Returns:
            bool: `True` if the record's value satisfies the question.

        Raises:
            TypeMismatchError: If the record's value is not of the question's kind.
            UnsupportedTypeError: If the question's value is not a str, int or float.
            MissingFeatureError: If the feature is absent and `missing_feature="error"`.
        """
        features = record.features if isinstance(record, Record) else record
        if self.feature not in features:
            if missing_feature == "error":
                raise MissingFeatureError(feature=self.feature, question=str(self))
            return False

        target = features[self.feature]
        kind = value_kind(self.value)
        if kind is None:
            raise UnsupportedTypeError(feature=self.feature, value_type=type(self.value).__name__, question=str(self))
        if value_kind(target) != kind:
            raise TypeMismatchError(
                feature=self.feature,
                expected_kind=kind,
                actual_type=type(target).__name__,
                question=str(self),
            )
        if kind == "string":
            return target == self.value
        return target >= self.value


class PartitionResult(NamedTuple):
    """The two halves of a dataset split by a question.

    Attributes:
        matched (list[Record]): Records the question answered `True` for.
        unmatched (list[Record]): Records the question answered `False` for.
    """

    matched: list[Record]
    unmatched: list[Record]


class SplitCandidate(NamedTuple):
    """The outcome of a best-split search.

    Attributes:
        question (Question | None): The winning question, or `None` when no
            question splits the dataset.
        gain (float): Information gain of the winning question; `0.0` when
            `question` is `None`.
    """

    question: Question | None
    gain: float


# ---------------------------------------------------------------------------
# Public models -- Tree nodes
# ---------------------------------------------------------------------------


class Leaf(BaseModel):
    """Terminal tree node holding the records that reached it.

    Attributes:
        records (list[Record]): The training records routed to this leaf.

    Examples:
        >>> leaf = Leaf(records=[Record(features={}, label="Grape")])
        >>> leaf.render("  ")
        "  Predict {'Grape': 1}"
    """

    model_config = ConfigDict(frozen=True)

    records: list[Record] = Field(
        description="Training records routed to this leaf.",
    )

    @property
    def predictions(self) -> dict[str, int]:
        """Label counts of the records at this leaf, in first-seen order."""
        return count_labels(self.records)

    @property
    def majority_label(self) -> str | None:
        """Most frequent label at this leaf; the first seen wins ties. `None` for an empty leaf."""
        predictions = self.predictions
        if not predictions:
            return None
        return max(predictions, key=predictions.__getitem__)

    def is_leaf(self) -> bool:
        """Always `True`."""
        return True

    def render(self, indent: str = "") -> str:
        """Render the label distribution at this leaf.

        Args:
            indent (str): Prefix placed before the line.

        Returns:
            str: `"<indent>Predict {<label>: <count>, ...}"`.
        """
        return f"{indent}Predict {self.predictions}"

    def __str__(self) -> str:
        return self.render()


class DecisionNode(BaseModel):
    """Internal tree node splitting its records on a question.

    Attributes:
        question (Question): The question asked at this node.
        true_branch (Leaf | DecisionNode): Subtree for records the question matches.
        false_branch (Leaf | DecisionNode): Subtree for the remaining records.
    """

    model_config = ConfigDict(frozen=True)

    question: Question = Field(
        description="The question asked at this node.",
    )
    true_branch: Leaf | DecisionNode = Field(
        description="Subtree built from the records the question matches.",
    )
    false_branch: Leaf | DecisionNode = Field(
        description="Subtree built from the records the question does not match.",
    )

    def is_leaf(self) -> bool:
        """Always `False`."""
        return False

    def render(self, indent: str = "") -> str:
        """Render this node and both subtrees, indenting each level by two spaces.

        Args:
            indent (str): Prefix for this node's lines.

        Returns:
            str: `"<indent><question>\\n<indent>-->True: \\n<true>\\n<indent>-->False: \\n<false>"`.
        """
        child_indent = indent + _RENDER_INDENT
        return (
            f"{indent}{self.question}\n"
            f"{indent}-->True: \n{self.true_branch.render(child_indent)}\n"
            f"{indent}-->False: \n{self.false_branch.render(child_indent)}"
        )

    def __str__(self) -> str:
        return self.render()


type TreeNode = Leaf | DecisionNode

# ---------------------------------------------------------------------------
# Public models -- Rules and results
# ---------------------------------------------------------------------------


class RuleCondition(BaseModel):
    """One step of a root-to-leaf path: a question and the answer taken.

    Attributes:
        question (Question): The question asked at the decision node.
        answer (bool): `True` if the path follows the node's True branch.

    Examples:
        >>> str(RuleCondition(question=Question(feature="color", value="red"), answer=False))
        'Is color == red? no'
    """

    question: Question = Field(
        description="The question asked at the decision node.",
    )
    answer: bool = Field(
        description="True if the path follows the True branch of the node.",
    )

    def __str__(self) -> str:
        return f"{self.question} {'yes' if self.answer else 'no'}"


class DecisionRule(BaseModel):
    """A decision rule extracted from one leaf of an induced tree.

    Attributes:
        conditions (list[RuleCondition]): Questions and answers along the path
            from the root to this leaf. Empty for a single-leaf tree.
        prediction (str | None): Majority label at the leaf; `None` only for
            the empty leaf of a tree built from an empty dataset.
        samples (int): Number of training records that reached the leaf.
        confidence (float): Share of the leaf's records carrying the majority
            label, rounded to 4 decimal places.
        predictions (dict[str, int]): Full label distribution at the leaf.
    """

    conditions: list[RuleCondition] = Field(
        description="Questions and answers along the path from the root to this leaf.",
    )
    prediction: str | None = Field(
        description="Majority label at the leaf.",
    )
    samples: int = Field(
        ge=0,
        description="Number of training records that reached the leaf.",
    )
    confidence: float = Field(
        ge=0.0,
        le=1.0,
        description="Share of the leaf's records carrying the majority label.",
    )
    predictions: dict[str, int] = Field(
        description="Label distribution at the leaf.",
    )

    def __str__(self) -> str:
        path = " and ".join(str(condition) for condition in self.conditions) or "always"
        return f"{path} => {self.prediction} ({self.samples} samples, confidence {self.confidence})"


class InductionResult(BaseModel):
    """Structured output of inducing a tree from a DataFrame.

    Attributes:
        label (str): Name of the label column.
        tree (TreeNode): Root of the induced tree.
        features_used (list[str]): Features asked about by at least one
            decision node, in first-use (pre-order) order.
        features_excluded (list[str]): Candidate feature columns left out,
            each annotated with the reason, e.g. `"joined_at (unsupported dtype)"`.
        rules (list[DecisionRule]): One rule per leaf.
        sample_count (int): Number of records the tree was induced from.
        depth (int): Depth of the tree; 0 for a single leaf.
        leaf_count (int): Number of leaves.
        accuracy (float): Fraction of training records the tree predicts correctly.
    """

    label: str = Field(
        description="Name of the label column.",
    )
    tree: Leaf | DecisionNode = Field(
        description="Root of the induced tree.",
    )
    features_used: list[str] = Field(
        description="Features asked about by at least one decision node, in first-use order.",
    )
    features_excluded: list[str] = Field(
        description="Feature columns left out of induction, each annotated with the reason.",
    )
    rules: list[DecisionRule] = Field(
        description="One rule per leaf of the tree.",
    )
    sample_count: int = Field(
        ge=1,
        description="Number of records the tree was induced from.",
    )
    depth: int = Field(
        ge=0,
        description="Depth of the tree; 0 for a single leaf.",
    )
    leaf_count: int = Field(
        ge=1,
        description="Number of leaves in the tree.",
    )
    accuracy: float = Field(
        ge=0.0,
        le=1.0,
        description="Fraction of training records the tree predicts correctly.",
    )

    @model_validator(mode="after")
    def _validate_rules_count_matches_leaf_count(self) -> InductionResult:
        """Validate that the number of rules equals the number of leaves.

        Returns:
            InductionResult: The validated model instance.

        Raises:
            ValueError: If `len(rules)` does not equal `leaf_count`.
        """
        if len(self.rules) != self.leaf_count:
            raise ValueError(f"rules length ({len(self.rules)}) must equal leaf_count ({self.leaf_count})")
        return self


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def value_kind(value: Any) -> FeatureKind | None:
    """Return the kind of a feature or question value.

    Args:
        value (Any): The value to classify.

    Returns:
        FeatureKind | None: `"string"`, `"integer"` or `"float"`, or `None`
            for any other type. `bool` is not an integer here.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return "string"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "float"
    return None
