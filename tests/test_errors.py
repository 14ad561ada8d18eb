"""Tests for error classification."""

import pytest

from cronloop.errors import (
    AlreadyRunningError,
    CronLoopError,
    ErrorKind,
    InvalidConfigError,
    InvalidExpressionError,
    NotRunningError,
    UnknownJobError,
)


class TestErrorKind:
    """Tests for ErrorKind enum."""

    def test_kinds_exist(self) -> None:
        """Test all error kinds are defined."""
        assert ErrorKind.CONFIG.value == "config"
        assert ErrorKind.EXPRESSION.value == "expression"
        assert ErrorKind.LIFECYCLE.value == "lifecycle"
        assert ErrorKind.LOOKUP.value == "lookup"


class TestErrors:
    """Tests for the error hierarchy."""

    @pytest.mark.parametrize(
        ("error", "kind"),
        [
            (InvalidConfigError("bad"), ErrorKind.CONFIG),
            (InvalidExpressionError("* *", "too short"), ErrorKind.EXPRESSION),
            (AlreadyRunningError(), ErrorKind.LIFECYCLE),
            (NotRunningError(), ErrorKind.LIFECYCLE),
            (UnknownJobError("abc"), ErrorKind.LOOKUP),
        ],
    )
    def test_kind_and_base(self, error: CronLoopError, kind: ErrorKind) -> None:
        """Test every error carries its kind and derives from CronLoopError."""
        assert isinstance(error, CronLoopError)
        assert isinstance(error, Exception)
        assert error.kind is kind

    def test_str_includes_kind(self) -> None:
        """Test string form is prefixed with the kind."""
        assert str(NotRunningError()) == "[lifecycle] Scheduler is not running"

    def test_invalid_expression_context(self) -> None:
        """Test the offending expression is kept."""
        error = InvalidExpressionError("* *", "expected 5 or 6 fields, got 2")

        assert error.expression == "* *"
        assert error.message == "Invalid cron expression '* *': expected 5 or 6 fields, got 2"

    def test_unknown_job_context(self) -> None:
        """Test the unknown id is kept."""
        error = UnknownJobError("abc")

        assert error.job_id == "abc"
        assert "abc" in str(error)

    def test_config_context(self) -> None:
        """Test keyword context is attached to config errors."""
        error = InvalidConfigError("bad interval", field="tick_interval_ms")

        assert error.context == {"field": "tick_interval_ms"}

    def test_can_be_raised_and_caught(self) -> None:
        """Test errors behave as ordinary exceptions."""
        with pytest.raises(CronLoopError, match="already"):
            raise AlreadyRunningError()
