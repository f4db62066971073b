"""Tests for pydantic models."""

import pytest
from pydantic import ValidationError

from cmdpool.models import Lock, PoolSummary, ProcessError


class TestProcessError:
    """Tests for ProcessError."""

    def test_exit_code_optional(self) -> None:
        """exit_code defaults to None."""
        error = ProcessError(command="make", error="boom")
        assert error.exit_code is None

    def test_is_frozen(self) -> None:
        """Recorded failures cannot be edited."""
        error = ProcessError(command="make", error="boom")
        with pytest.raises(ValidationError):
            error.error = "fine"


class TestPoolSummary:
    """Tests for PoolSummary."""

    def test_ok_without_errors(self) -> None:
        """A summary with no errors is ok."""
        summary = PoolSummary(total=2, completed=2)
        assert summary.ok is True
        assert summary.failed == 0

    def test_failed_counts_errors(self) -> None:
        """failed is the number of errors."""
        summary = PoolSummary(
            total=2,
            completed=2,
            errors=[ProcessError(command="a", error="x"), ProcessError(command="b", error="y")],
        )
        assert summary.failed == 2
        assert summary.ok is False

    def test_json_round_trip(self) -> None:
        """Summaries serialize to JSON and back."""
        summary = PoolSummary(total=1, errors=[ProcessError(command="a", error="x", exit_code=1)])
        assert PoolSummary.model_validate_json(summary.model_dump_json()) == summary


def test_lock_started_at_defaults_to_now() -> None:
    """Lock records get a timestamp."""
    lock = Lock(name="job", pid=1)
    assert lock.started_at is not None
    assert lock.command == ""
