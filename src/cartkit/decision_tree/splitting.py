"""Dataset partitioning and exhaustive best-split search."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor

from loguru import logger

from cartkit.config import DEFAULT_CONFIG, InductionConfig, MissingFeaturePolicy
from cartkit.decision_tree.impurity import gini_impurity, information_gain
from cartkit.decision_tree.models import PartitionResult, Question, Record, SplitCandidate
from cartkit.decision_tree.records import unique_feature_names, unique_values
from cartkit.exceptions import QuestionEvaluationError

# ---------------------------------------------------------------------------
# Public interface -- Partitioning
# ---------------------------------------------------------------------------


def partition(
    dataset: Sequence[Record],
    question: Question,
    *,
    missing_feature: MissingFeaturePolicy = "no_match",
) -> PartitionResult:
    """Split a dataset into the records a question matches and the rest.

    Both sides keep dataset order and together hold every input record
    exactly once.

    Args:
        dataset (Sequence[Record]): The records to split.
        question (Question): The question to evaluate on each record.
        missing_feature (MissingFeaturePolicy): Policy for records lacking the
            question's feature; see `Question.match`.

    Returns:
        PartitionResult: `(matched, unmatched)`.

    Raises:
        QuestionEvaluationError: For the first record (in dataset order) the
            question cannot be evaluated on. The error's `record_index` is set
            and `"element <index>"` is added to its context.
    """
    matched: list[Record] = []
    unmatched: list[Record] = []
    for index, record in enumerate(dataset):
        try:
            is_match = question.match(record, missing_feature=missing_feature)
        except QuestionEvaluationError as exc:
            exc.record_index = index
            exc.add_context(f"element {index}")
            raise
        if is_match:
            matched.append(record)
        else:
            unmatched.append(record)
    return PartitionResult(matched=matched, unmatched=unmatched)


# ---------------------------------------------------------------------------
# Public interface -- Best-split search
# ---------------------------------------------------------------------------


def iter_candidate_questions(dataset: Sequence[Record]) -> Iterator[Question]:
    """Yield one question per observed (feature, value) pair, in first-seen order.

    Args:
        dataset (Sequence[Record]): The records to enumerate candidates from.

    Yields:
        Question: Candidate questions, features outer and values inner.
    """
    for feature in unique_feature_names(dataset):
        for value in unique_values(dataset, feature):
            yield Question(feature=feature, value=value)


def find_best_split(
    dataset: Sequence[Record],
    *,
    config: InductionConfig | None = None,
) -> SplitCandidate:
    """Find the question with the highest information gain on a dataset.

    Every candidate from `iter_candidate_questions` is partitioned; a
    candidate that leaves either side empty does not split the data and is
    skipped. Among the rest, a later candidate replaces the current best when
    its gain is greater than *or equal to* the best so far, so of several
    exactly tied candidates the last one enumerated wins. With a thread pool
    (`config.max_workers > 1`) the scores are gathered in enumeration order
    before this rule is applied, giving the same answer as a sequential scan.

    Args:
        dataset (Sequence[Record]): The records to split.
        config (InductionConfig | None): Induction options; defaults to
            `InductionConfig()`.

    Returns:
        SplitCandidate: The winning question and its gain, or `(None, 0.0)`
            when the dataset has fewer than two records or no candidate splits it.

    Raises:
        QuestionEvaluationError: If any candidate cannot be evaluated; the
            error gains a `"candidate '<question>'"` context entry.
    """
    config = config or DEFAULT_CONFIG
    if len(dataset) < 2:
        return SplitCandidate(question=None, gain=0.0)

    parent_impurity = gini_impurity(dataset)
    candidates = list(iter_candidate_questions(dataset))

    if config.parallel:
        with ThreadPoolExecutor(max_workers=config.max_workers) as executor:
            gains = list(
                executor.map(
                    lambda question: _score_candidate(dataset, question, parent_impurity, config.missing_feature),
                    candidates,
                )
            )
    else:
        gains = [
            _score_candidate(dataset, question, parent_impurity, config.missing_feature) for question in candidates
        ]

    best = SplitCandidate(question=None, gain=0.0)
    for question, gain in zip(candidates, gains, strict=True):
        if gain is not None and gain >= best.gain:
            best = SplitCandidate(question=question, gain=gain)

    logger.debug(
        "Best split found",
        question=str(best.question) if best.question is not None else None,
        gain=best.gain,
        candidates=len(candidates),
        records=len(dataset),
    )
    return best


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _score_candidate(
    dataset: Sequence[Record],
    question: Question,
    parent_impurity: float,
    missing_feature: MissingFeaturePolicy,
) -> float | None:
    """Return the information gain of one candidate, or `None` if it does not split the data.

    Args:
        dataset (Sequence[Record]): The records to split.
        question (Question): The candidate question.
        parent_impurity (float): Gini impurity of `dataset`.
        missing_feature (MissingFeaturePolicy): Policy for absent features.

    Returns:
        float | None: The gain, or `None` when one side of the split is empty.
    """
    try:
        result = partition(dataset, question, missing_feature=missing_feature)
    except QuestionEvaluationError as exc:
        exc.add_context(f"candidate '{question}'")
        raise
    if not result.matched or not result.unmatched:
        return None
    gain = information_gain(result, parent_impurity)
    logger.trace("Scored candidate", question=str(question), gain=gain)
    return gain
