"""Tests for partitioning and best-split search."""

from __future__ import annotations

from collections import Counter

import pytest
from pytest_check import check

from cartkit.config import InductionConfig
from cartkit.decision_tree.models import Question, Record, SplitCandidate
from cartkit.decision_tree.splitting import find_best_split, iter_candidate_questions, partition
from cartkit.exceptions import MissingFeatureError, TypeMismatchError, UnsupportedTypeError


class TestPartition:
    """Tests for `partition`: splits a dataset on a question."""

    def test_diameter_split_on_fruit(self) -> None:
        """Records with diameter 3 go to the matched side, the grapes to the unmatched side."""
        # Arrange
        records = _make_fruit_records()

        # Act
        result = partition(records, Question(feature="diameter", value=3))

        # Assert
        with check:
            assert result.matched == [records[0], records[1], records[4]]
        with check:
            assert result.unmatched == [records[2], records[3]]

    @pytest.mark.parametrize(
        "question",
        [
            Question(feature="color", value="red"),
            Question(feature="color", value="purple"),
            Question(feature="diameter", value=1),
            Question(feature="weight", value=2.0),
        ],
    )
    def test_every_record_lands_on_exactly_one_side(self, question: Question) -> None:
        """The two sides together hold the input multiset, each record once.

        Args:
            question (Question): The question to partition on.
        """
        # Arrange
        records = _make_fruit_records()

        # Act
        matched, unmatched = partition(records, question)

        # Assert
        with check:
            assert len(matched) + len(unmatched) == len(records)
        with check:
            assert _as_multiset(matched + unmatched) == _as_multiset(records)

    def test_empty_dataset(self) -> None:
        """Partitioning nothing yields two empty sides."""
        # Act
        result = partition([], Question(feature="color", value="red"))

        # Assert
        assert result == ([], [])

    def test_type_mismatch_reports_first_failing_index(self) -> None:
        """The first record (in order) whose value has the wrong kind is reported by position."""
        # Arrange
        records = [
            Record(features={"size": 3}, label="a"),
            Record(features={"size": 1}, label="b"),
            Record(features={"size": "big"}, label="a"),
            Record(features={"size": "small"}, label="b"),
        ]

        # Act
        with pytest.raises(TypeMismatchError) as exc_info:
            partition(records, Question(feature="size", value=3))

        # Assert
        error = exc_info.value
        with check:
            assert error.record_index == 2
        with check:
            assert error.context == ["element 2"]
        with check:
            assert str(error) == "element 2: question expected feature 'size' to be integer, but got: str"

    def test_unsupported_question_fails_on_first_record_with_feature(self) -> None:
        """Records lacking the feature answer False before the unsupported value is ever inspected."""
        # Arrange
        records = [Record(features={}, label="a"), Record(features={"size": 3}, label="b")]

        # Act
        with pytest.raises(UnsupportedTypeError) as exc_info:
            partition(records, Question(feature="size", value=[3]))

        # Assert
        assert exc_info.value.record_index == 1

    def test_strict_missing_feature_policy(self) -> None:
        """Under the error policy, a record without the feature aborts the partition."""
        # Arrange
        records = [Record(features={"size": 3}, label="a"), Record(features={}, label="b")]

        # Act / Assert
        with pytest.raises(MissingFeatureError) as exc_info:
            partition(records, Question(feature="size", value=1), missing_feature="error")
        assert exc_info.value.record_index == 1


class TestIterCandidateQuestions:
    """Tests for `iter_candidate_questions`."""

    def test_features_outer_values_inner(self) -> None:
        """Candidates follow first-seen feature order, then first-seen value order."""
        # Act
        rendered = [str(question) for question in iter_candidate_questions(_make_fruit_records())]

        # Assert
        assert rendered == [
            "Is color == green?",
            "Is color == yellow?",
            "Is color == red?",
            "Is diameter >= 3?",
            "Is diameter >= 1?",
        ]


class TestFindBestSplit:
    """Tests for `find_best_split`."""

    def test_fruit_best_question_is_diameter(self) -> None:
        """`Is diameter >= 3?` ties `Is color == red?` on gain and, being enumerated later, wins."""
        # Act
        best = find_best_split(_make_fruit_records())

        # Assert
        with check:
            assert best.question is not None
        with check:
            assert str(best.question) == "Is diameter >= 3?"
        with check:
            assert best.question == Question(feature="diameter", value=3)
        with check:
            assert best.gain == pytest.approx(0.64 - 0.6 * 4 / 9)

    @pytest.mark.parametrize("size", [0, 1])
    def test_tiny_datasets_have_no_split(self, size: int) -> None:
        """Fewer than two records cannot be split.

        Args:
            size (int): Number of records in the dataset.
        """
        # Arrange
        records = _make_fruit_records()[:size]

        # Act / Assert
        assert find_best_split(records) == SplitCandidate(question=None, gain=0.0)

    def test_single_label_dataset_has_zero_gain(self) -> None:
        """A pure dataset cannot be made purer."""
        # Arrange
        records = _make_fruit_records()[2:4] + [Record(features={"color": "purple", "diameter": 2}, label="Grape")]

        # Act
        best = find_best_split(records)

        # Assert
        assert best.gain == 0.0

    def test_identical_features_have_no_split(self) -> None:
        """When every candidate sends all records one way, no question is returned."""
        # Arrange
        records = [
            Record(features={"color": "red"}, label="a"),
            Record(features={"color": "red"}, label="b"),
        ]

        # Act / Assert
        assert find_best_split(records) == SplitCandidate(question=None, gain=0.0)

    def test_candidate_failure_is_annotated(self) -> None:
        """A failing candidate adds its rendered question to the error context."""
        # Arrange
        records = [
            Record(features={"size": 3}, label="a"),
            Record(features={"size": "big"}, label="b"),
        ]

        # Act
        with pytest.raises(TypeMismatchError) as exc_info:
            find_best_split(records)

        # Assert
        with check:
            assert exc_info.value.context == ["candidate 'Is size >= 3?'", "element 1"]
        with check:
            assert exc_info.value.record_index == 1

    @pytest.mark.parametrize("max_workers", [2, 4])
    def test_parallel_search_matches_sequential(self, max_workers: int) -> None:
        """Scoring on a thread pool picks the same question and gain as the sequential scan.

        Args:
            max_workers (int): Thread count for candidate scoring.
        """
        # Arrange
        config = InductionConfig(max_workers=max_workers)

        for records in (_make_fruit_records(), _make_ingredient_records()):
            # Act
            sequential = find_best_split(records)
            parallel = find_best_split(records, config=config)

            # Assert
            with check:
                assert parallel == sequential

    def test_parallel_search_raises_first_failing_candidate(self) -> None:
        """With a thread pool, the error of the earliest failing candidate is raised."""
        # Arrange
        records = [
            Record(features={"size": 3, "color": 1}, label="a"),
            Record(features={"size": "big", "color": "red"}, label="b"),
        ]

        # Act
        with pytest.raises(TypeMismatchError) as exc_info:
            find_best_split(records, config=InductionConfig(max_workers=4))

        # Assert
        assert exc_info.value.context[0] == "candidate 'Is size >= 3?'"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _as_multiset(records: list[Record]) -> Counter[str]:
    """Count records by their JSON form, so equal records are counted together."""
    return Counter(record.model_dump_json() for record in records)


def _make_fruit_records() -> list[Record]:
    """Return the five-record fruit dataset.

    Returns:
        list[Record]: Two apples, two grapes and a lemon described by color and diameter.
    """
    return [
        Record(features={"color": "green", "diameter": 3}, label="Apple"),
        Record(features={"color": "yellow", "diameter": 3}, label="Apple"),
        Record(features={"color": "red", "diameter": 1}, label="Grape"),
        Record(features={"color": "red", "diameter": 1}, label="Grape"),
        Record(features={"color": "yellow", "diameter": 3}, label="Lemon"),
    ]


def _make_ingredient_records() -> list[Record]:
    """Return five recipes described by ingredient quantities.

    Returns:
        list[Record]: Two cakes, an omelette and two bread doughs.
    """
    rows = [
        ({"sugar": 200, "eggs": 4, "flour": 300, "butter": 100, "salt": 15, "chocolate": 0}, "Cake"),
        ({"sugar": 50, "eggs": 4, "flour": 200, "butter": 0, "salt": 5, "chocolate": 200}, "Cake"),
        ({"sugar": 0, "eggs": 4, "flour": 0, "butter": 50, "salt": 15, "chocolate": 0}, "Omelette"),
        ({"sugar": 10, "eggs": 0, "flour": 500, "butter": 50, "salt": 15, "chocolate": 0}, "Bread Dough"),
        ({"sugar": 0, "eggs": 2, "flour": 300, "butter": 20, "salt": 40, "chocolate": 0}, "Bread Dough"),
    ]
    return [Record(features=features, label=label) for features, label in rows]
