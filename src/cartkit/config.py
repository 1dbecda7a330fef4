"""Induction configuration."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

type MissingFeaturePolicy = Literal["no_match", "error"]


class InductionConfig(BaseModel):
    """Options controlling how a tree is induced.

    None of these options change which split wins at a node; they only decide
    how absent features are treated and whether candidate scoring is spread
    across threads.

    Attributes:
        missing_feature (MissingFeaturePolicy): `"no_match"` (default) sends a
            record lacking the tested feature down the False branch;
            `"error"` raises `MissingFeatureError` instead.
        max_workers (int | None): Number of threads used to score candidate
            splits. `None` or `1` scores them sequentially.

    Examples:
        >>> InductionConfig().missing_feature
        'no_match'
        >>> InductionConfig(max_workers=4).parallel
        True
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    missing_feature: MissingFeaturePolicy = Field(
        default="no_match",
        description="How to treat a record that lacks the feature a question tests.",
    )
    max_workers: int | None = Field(
        default=None,
        ge=1,
        description="Thread count for scoring candidate splits; None or 1 means sequential.",
    )

    @property
    def parallel(self) -> bool:
        """Whether candidate scoring runs on a thread pool."""
        return self.max_workers is not None and self.max_workers > 1


DEFAULT_CONFIG = InductionConfig()
