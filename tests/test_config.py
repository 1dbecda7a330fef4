"""Tests for InductionConfig."""

from __future__ import annotations

import pytest
from pydantic import ValidationError
from pytest_check import check

from cartkit.config import DEFAULT_CONFIG, InductionConfig


class TestInductionConfig:
    """Tests for InductionConfig defaults and validation."""

    def test_defaults(self) -> None:
        """Verify the default config treats missing features as no-match and runs sequentially."""
        config = InductionConfig()

        with check:
            assert config.missing_feature == "no_match"
        with check:
            assert config.max_workers is None
        with check:
            assert config.parallel is False
        with check:
            assert config == DEFAULT_CONFIG

    @pytest.mark.parametrize(
        ("max_workers", "expected"),
        [(None, False), (1, False), (2, True), (8, True)],
    )
    def test_parallel_requires_more_than_one_worker(self, max_workers: int | None, expected: bool) -> None:
        """Verify a thread pool is used only with more than one worker.

        Args:
            max_workers (int | None): Configured thread count.
            expected (bool): Whether scoring should be parallel.
        """
        assert InductionConfig(max_workers=max_workers).parallel is expected

    @pytest.mark.parametrize("max_workers", [0, -1])
    def test_non_positive_worker_count_rejected(self, max_workers: int) -> None:
        """Verify max_workers must be at least 1.

        Args:
            max_workers (int): An invalid thread count.
        """
        with pytest.raises(ValidationError):
            InductionConfig(max_workers=max_workers)

    def test_unknown_policy_rejected(self) -> None:
        """Verify missing_feature only accepts the known policies."""
        with pytest.raises(ValidationError):
            InductionConfig(missing_feature="impute")

    def test_unknown_option_rejected(self) -> None:
        """Verify typos in option names are not silently ignored."""
        with pytest.raises(ValidationError):
            InductionConfig(max_depth=3)

    def test_config_is_frozen(self) -> None:
        """Verify a config cannot be mutated after construction."""
        config = InductionConfig()

        with pytest.raises(ValidationError):
            config.max_workers = 4
