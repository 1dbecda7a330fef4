"""DataFrame adapter: column classification, feature filtering, and record conversion."""

from __future__ import annotations

from typing import Any, Literal, NamedTuple

import polars as pl
from loguru import logger

from cartkit.decision_tree.models import FeatureKind, Record
from cartkit.exceptions import ColumnsNotFoundError

type ColumnKind = FeatureKind | Literal["excluded"]

# ---------------------------------------------------------------------------
# Public interface -- Column classification
# ---------------------------------------------------------------------------

_DTYPE_TO_COLUMN_KIND: dict[type[pl.DataType] | pl.DataType, ColumnKind] = {
    pl.Int8: "integer",
    pl.Int16: "integer",
    pl.Int32: "integer",
    pl.Int64: "integer",
    pl.UInt8: "integer",
    pl.UInt16: "integer",
    pl.UInt32: "integer",
    pl.UInt64: "integer",
    pl.Float32: "float",
    pl.Float64: "float",
    pl.String: "string",
    pl.Categorical: "string",
}


def classify_column(dtype: pl.DataType) -> ColumnKind:
    """Classify a Polars column dtype into the feature kind its values take.

    The lookup map uses bare class references as keys, which does not match
    parameterized instances such as `Enum(["a", "b"])`; an `isinstance`
    fallback handles those.

    Args:
        dtype (pl.DataType): The Polars data type of the column to classify.

    Returns:
        ColumnKind: `"integer"`, `"float"`, `"string"`, or `"excluded"` for
            dtypes whose values are not str, int or float (booleans, temporal
            and nested types).
    """
    result = _DTYPE_TO_COLUMN_KIND.get(dtype)
    if result is not None:
        return result
    if isinstance(dtype, (pl.Enum, pl.Categorical)):
        return "string"
    return "excluded"


# ---------------------------------------------------------------------------
# Public interface -- Feature filtering
# ---------------------------------------------------------------------------


class ExcludedFeature(NamedTuple):
    """A feature column that was left out of induction, with the reason.

    Attributes:
        name (str): The column name that was excluded.
        reason (str): Human-readable explanation for the exclusion.
    """

    name: str
    reason: str


def filter_features(
    df: pl.DataFrame,
    feature_columns: list[str],
) -> tuple[list[str], list[ExcludedFeature]]:
    """Partition feature columns into kept and excluded sets.

    Columns are excluded when their dtype does not map to a feature kind or
    when they contain only null values.

    Args:
        df (pl.DataFrame): The input DataFrame to inspect.
        feature_columns (list[str]): Column names to evaluate.

    Returns:
        tuple[list[str], list[ExcludedFeature]]: `(kept_names, excluded_features)`,
            both in the order of `feature_columns`.
    """
    kept: list[str] = []
    excluded: list[ExcludedFeature] = []

    for col_name in feature_columns:
        exclusion_reason = _get_exclusion_reason(df[col_name])
        if exclusion_reason is not None:
            excluded.append(ExcludedFeature(name=col_name, reason=exclusion_reason))
        else:
            kept.append(col_name)

    return kept, excluded


# ---------------------------------------------------------------------------
# Public interface -- Record conversion
# ---------------------------------------------------------------------------


def records_from_frame(
    df: pl.DataFrame,
    label: str,
    *,
    features: list[str] | None = None,
) -> tuple[list[Record], list[ExcludedFeature]]:
    """Convert the rows of a DataFrame into labeled records.

    Rows with a null label are dropped and labels are cast to strings. Null
    feature values are left out of a record's features rather than imputed,
    so questions on that feature answer `False` for the record.

    Args:
        df (pl.DataFrame): The source DataFrame.
        label (str): Name of the label column.
        features (list[str] | None): Feature columns to convert. When `None`,
            all columns except `label` are used.

    Returns:
        tuple[list[Record], list[ExcludedFeature]]: The records, in row order,
            and the feature columns that were left out.

    Raises:
        ColumnsNotFoundError: If `label` or any requested feature column is
            absent from `df`.
    """
    feature_columns = features if features is not None else [col for col in df.columns if col != label]
    missing_columns = [col for col in [label, *feature_columns] if col not in df.columns]
    if missing_columns:
        raise ColumnsNotFoundError(missing_columns=missing_columns, available_columns=list(df.columns))

    df_clean = df.drop_nulls(subset=[label])
    kept_columns, excluded_features = filter_features(df_clean, feature_columns)
    if excluded_features:
        logger.debug("Feature columns excluded", excluded=[f"{ef.name} ({ef.reason})" for ef in excluded_features])

    labels = df_clean[label].cast(pl.String).to_list()
    rows = _iter_feature_rows(df_clean, kept_columns)
    records = [
        Record(features={name: value for name, value in row.items() if value is not None}, label=row_label)
        for row, row_label in zip(rows, labels, strict=True)
    ]
    return records, excluded_features


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _get_exclusion_reason(series: pl.Series) -> str | None:
    """Return the exclusion reason for a column, or `None` if it should be kept.

    Args:
        series (pl.Series): The column to inspect.

    Returns:
        str | None: A human-readable reason string, or `None` if the column
            passes all filters.
    """
    if classify_column(series.dtype) == "excluded":
        return "unsupported dtype"
    if series.is_null().all():
        return "all values are null"
    return None


def _iter_feature_rows(df: pl.DataFrame, columns: list[str]) -> list[dict[str, Any]]:
    """Return one `{column: value}` dict per row, restricted to `columns`."""
    if not columns:
        return [{} for _ in range(df.height)]
    return list(df.select(columns).iter_rows(named=True))
