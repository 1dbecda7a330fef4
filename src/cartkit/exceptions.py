"""Custom exceptions for cartkit.

Induction exceptions (subclass InductionError):
- QuestionEvaluationError: Base class for failures while evaluating a question
  against a record. Also a TypeError, since every failure is a kind mismatch.
- TypeMismatchError: The record's value is not of the kind the question expects.
- UnsupportedTypeError: The question was built with an unsupported value kind.
- MissingFeatureError: The record lacks the feature under the strict policy.

Column validation exceptions (subclass ValueError):
- ColumnsNotFoundError: Raised when requested columns do not exist in a DataFrame.

Induction errors keep their class as they travel from the partitioner through
best-split search up to the tree inducer; each layer only prepends context
via `InductionError.add_context`.
"""

from __future__ import annotations


class InductionError(Exception):
    """Base exception for all tree induction failures.

    Attributes:
        message (str): The original, un-annotated error description.
        context (list[str]): Positional context prepended by each layer the
            error crossed, outermost first, e.g.
            `["depth 0", "candidate 'Is color == red?'", "element 3"]`.

    Examples:
        >>> err = InductionError("boom")
        >>> err.add_context("element 3")
        >>> err.add_context("depth 0")
        >>> str(err)
        'depth 0: element 3: boom'
    """

    message: str
    context: list[str]

    def __init__(self, message: str) -> None:
        """Initialize InductionError.

        Args:
            message (str): Description of the failure.
        """
        super().__init__(message)
        self.message = message
        self.context = []

    def add_context(self, context: str) -> None:
        """Prepend a piece of positional context to this error's message.

        Args:
            context (str): Context describing where the error passed through,
                e.g. `"element 3"` or `"depth 2"`.
        """
        self.context.insert(0, context)
        self.args = (": ".join([*self.context, self.message]),)

    def __repr__(self) -> str:
        """Return detailed representation for debugging.

        Returns:
            str: Representation including the message and the accumulated context.
        """
        return f"{self.__class__.__name__}(message={self.message!r}, context={self.context!r})"


class QuestionEvaluationError(InductionError, TypeError):
    """Base class for failures while evaluating a question against a record.

    Attributes:
        feature (str): The feature name the question tests.
        question (str | None): Rendered form of the question, e.g.
            `"Is diameter >= 3?"`.
        record_index (int | None): Positional index of the offending record in
            the dataset being partitioned. `None` until a partitioner sets it.
    """

    feature: str
    question: str | None
    record_index: int | None

    def __init__(self, message: str, *, feature: str, question: str | None = None) -> None:
        """Initialize QuestionEvaluationError.

        Args:
            message (str): Description of the failure.
            feature (str): The feature name the question tests.
            question (str | None): Rendered form of the question.
        """
        super().__init__(message)
        self.feature = feature
        self.question = question
        self.record_index = None


class TypeMismatchError(QuestionEvaluationError):
    """Raised when a record's feature value is not of the kind a question expects.

    Attributes:
        expected_kind (str): The kind the question compares against:
            `"string"`, `"integer"` or `"float"`.
        actual_type (str): Python type name of the record's value.

    Examples:
        >>> err = TypeMismatchError(feature="diameter", expected_kind="integer", actual_type="str")
        >>> str(err)
        "question expected feature 'diameter' to be integer, but got: str"
    """

    expected_kind: str
    actual_type: str

    def __init__(
        self,
        *,
        feature: str,
        expected_kind: str,
        actual_type: str,
        question: str | None = None,
    ) -> None:
        """Initialize TypeMismatchError.

        Args:
            feature (str): The feature name the question tests.
            expected_kind (str): The value kind the question expects.
            actual_type (str): Python type name of the record's value.
            question (str | None): Rendered form of the question.
        """
        super().__init__(
            f"question expected feature '{feature}' to be {expected_kind}, but got: {actual_type}",
            feature=feature,
            question=question,
        )
        self.expected_kind = expected_kind
        self.actual_type = actual_type


class UnsupportedTypeError(QuestionEvaluationError):
    """Raised when a question's comparison value has an unsupported kind.

    Only `str`, `int` and `float` values are supported; `bool` is rejected
    even though it subclasses `int`.

    Attributes:
        value_type (str): Python type name of the question's value.
    """

    value_type: str

    def __init__(self, *, feature: str, value_type: str, question: str | None = None) -> None:
        """Initialize UnsupportedTypeError.

        Args:
            feature (str): The feature name the question tests.
            value_type (str): Python type name of the unsupported value.
            question (str | None): Rendered form of the question.
        """
        super().__init__(f"unsupported type {value_type}", feature=feature, question=question)
        self.value_type = value_type


class MissingFeatureError(QuestionEvaluationError):
    """Raised when a record lacks a feature and missing features are treated as errors."""

    def __init__(self, *, feature: str, question: str | None = None) -> None:
        """Initialize MissingFeatureError.

        Args:
            feature (str): The feature name the record lacks.
            question (str | None): Rendered form of the question.
        """
        super().__init__(f"record has no value for feature '{feature}'", feature=feature, question=question)


class ColumnsNotFoundError(ValueError):
    """Raised when requested columns do not exist in a DataFrame.

    Attributes:
        missing_columns (list[str]): Column names that were not found.
        available_columns (list[str]): Column names present in the DataFrame.

    Examples:
        >>> err = ColumnsNotFoundError(
        ...     missing_columns=["x", "y"],
        ...     available_columns=["a", "b", "c"],
        ... )
        >>> err.missing_columns
        ['x', 'y']
    """

    missing_columns: list[str]
    available_columns: list[str]

    def __init__(
        self,
        missing_columns: list[str],
        available_columns: list[str],
    ) -> None:
        """Initialize ColumnsNotFoundError.

        Args:
            missing_columns (list[str]): Column names not found in the DataFrame.
            available_columns (list[str]): Column names present in the DataFrame.
        """
        super().__init__(f"Columns not found in DataFrame: {sorted(missing_columns)}")
        self.missing_columns = missing_columns
        self.available_columns = available_columns
