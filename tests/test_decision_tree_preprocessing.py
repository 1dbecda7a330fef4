"""Tests for the DataFrame adapter: column classification, filtering, and record conversion."""

from __future__ import annotations

import datetime

import polars as pl
import pytest
from pytest_check import check

from cartkit.decision_tree.models import Record
from cartkit.decision_tree.preprocessing import (
    ExcludedFeature,
    classify_column,
    filter_features,
    records_from_frame,
)
from cartkit.exceptions import ColumnsNotFoundError


class TestClassifyColumn:
    """Tests for classify_column: maps Polars dtypes to feature kinds."""

    @pytest.mark.parametrize(
        "dtype",
        [pl.Int8, pl.Int16, pl.Int32, pl.Int64, pl.UInt8, pl.UInt16, pl.UInt32, pl.UInt64],
    )
    def test_integer_types_return_integer(self, dtype: pl.DataType) -> None:
        """All integer dtypes should classify as 'integer'.

        Args:
            dtype (pl.DataType): A Polars integer dtype to classify.
        """
        assert classify_column(dtype) == "integer"

    @pytest.mark.parametrize("dtype", [pl.Float32, pl.Float64])
    def test_float_types_return_float(self, dtype: pl.DataType) -> None:
        """Float dtypes should classify as 'float'.

        Args:
            dtype (pl.DataType): A Polars float dtype to classify.
        """
        assert classify_column(dtype) == "float"

    @pytest.mark.parametrize("dtype", [pl.String, pl.Utf8, pl.Categorical, pl.Enum(["a", "b"])])
    def test_string_like_types_return_string(self, dtype: pl.DataType) -> None:
        """String, Categorical and Enum dtypes yield Python strings and classify as 'string'.

        Args:
            dtype (pl.DataType): A Polars string-like dtype to classify.
        """
        assert classify_column(dtype) == "string"

    @pytest.mark.parametrize("dtype", [pl.Boolean, pl.Date, pl.Datetime("us"), pl.Duration, pl.List(pl.Int64)])
    def test_other_types_are_excluded(self, dtype: pl.DataType) -> None:
        """Booleans, temporal and nested dtypes have no feature kind.

        Args:
            dtype (pl.DataType): A Polars dtype outside the supported kinds.
        """
        assert classify_column(dtype) == "excluded"


class TestFilterFeatures:
    """Tests for filter_features."""

    def test_keeps_supported_and_reports_excluded(self) -> None:
        """Unsupported and all-null columns are excluded with a reason; order is preserved."""
        # Arrange
        df = pl.DataFrame({
            "color": ["red", "green"],
            "picked_on": [datetime.date(2024, 1, 1), datetime.date(2024, 2, 1)],
            "weight": [1.5, 2.0],
            "notes": pl.Series([None, None], dtype=pl.String),
        })

        # Act
        kept, excluded = filter_features(df, ["color", "picked_on", "weight", "notes"])

        # Assert
        with check:
            assert kept == ["color", "weight"]
        with check:
            assert excluded == [
                ExcludedFeature(name="picked_on", reason="unsupported dtype"),
                ExcludedFeature(name="notes", reason="all values are null"),
            ]


class TestRecordsFromFrame:
    """Tests for records_from_frame."""

    def test_rows_become_records(self) -> None:
        """Each row becomes one record with native Python values, in row order."""
        # Arrange
        df = pl.DataFrame({
            "color": ["green", "red"],
            "diameter": [3, 1],
            "weight": [0.2, 0.01],
            "fruit": ["Apple", "Grape"],
        })

        # Act
        records, excluded = records_from_frame(df, "fruit")

        # Assert
        with check:
            assert records == [
                Record(features={"color": "green", "diameter": 3, "weight": 0.2}, label="Apple"),
                Record(features={"color": "red", "diameter": 1, "weight": 0.01}, label="Grape"),
            ]
        with check:
            assert type(records[0].features["diameter"]) is int
        with check:
            assert excluded == []

    def test_null_features_are_omitted(self) -> None:
        """A null feature value is left out of the record instead of being imputed."""
        # Arrange
        df = pl.DataFrame({"color": ["green", None], "diameter": [None, 1], "fruit": ["Apple", "Grape"]})

        # Act
        records, _ = records_from_frame(df, "fruit")

        # Assert
        with check:
            assert records[0].features == {"color": "green"}
        with check:
            assert records[1].features == {"diameter": 1}

    def test_null_labels_are_dropped_and_labels_cast_to_string(self) -> None:
        """Rows without a label are skipped; integer labels become strings."""
        # Arrange
        df = pl.DataFrame({"diameter": [3, 1, 2], "grade": [1, None, 2]})

        # Act
        records, _ = records_from_frame(df, "grade")

        # Assert
        with check:
            assert [record.label for record in records] == ["1", "2"]
        with check:
            assert [record.features["diameter"] for record in records] == [3, 2]

    def test_feature_subset(self) -> None:
        """Only the requested feature columns are converted."""
        # Arrange
        df = pl.DataFrame({"color": ["green"], "diameter": [3], "fruit": ["Apple"]})

        # Act
        records, _ = records_from_frame(df, "fruit", features=["diameter"])

        # Assert
        assert records[0].features == {"diameter": 3}

    def test_no_usable_features_gives_empty_feature_bags(self) -> None:
        """When every feature is excluded, each row still yields a record with its label."""
        # Arrange
        df = pl.DataFrame({"ripe": [True, False], "fruit": ["Apple", "Grape"]})

        # Act
        records, excluded = records_from_frame(df, "fruit")

        # Assert
        with check:
            assert records == [Record(features={}, label="Apple"), Record(features={}, label="Grape")]
        with check:
            assert excluded == [ExcludedFeature(name="ripe", reason="unsupported dtype")]

    def test_missing_columns_raise(self) -> None:
        """Unknown label or feature columns raise ColumnsNotFoundError listing them."""
        # Arrange
        df = pl.DataFrame({"color": ["green"], "fruit": ["Apple"]})

        # Act
        with pytest.raises(ColumnsNotFoundError) as exc_info:
            records_from_frame(df, "fruit", features=["color", "diameter"])

        # Assert
        with check:
            assert exc_info.value.missing_columns == ["diameter"]
        with check:
            assert exc_info.value.available_columns == ["color", "fruit"]
