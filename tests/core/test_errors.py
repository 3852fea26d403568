"""Tests for error types and codes."""

import pytest

from impactlens.core.errors import (
    AnalysisError,
    ConfigError,
    ErrorCode,
    ImpactLensError,
    InternalError,
)


class TestErrorCode:
    """Error code value tests."""

    @pytest.mark.parametrize(
        ("code", "expected_range"),
        [
            (ErrorCode.CONFIG_PARSE_ERROR, 2000),
            (ErrorCode.CONFIG_INVALID_VALUE, 2000),
            (ErrorCode.ANALYSIS_FILE_NOT_FOUND, 3000),
            (ErrorCode.ANALYSIS_INVALID_MODE, 3000),
            (ErrorCode.INTERNAL_ERROR, 9000),
        ],
    )
    def test_given_error_code_when_checked_then_in_correct_range(
        self, code: ErrorCode, expected_range: int
    ) -> None:
        """Error codes fall within their designated numeric range."""
        assert expected_range <= code.value < expected_range + 1000


class TestImpactLensError:
    """Base error behavior tests."""

    def test_given_error_when_to_dict_then_serializes_all_fields(self) -> None:
        """Error serializes to dict with all required fields."""
        # Given
        error = ImpactLensError(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message="Test message",
            retryable=True,
            details={"key": "value"},
        )

        # When
        result = error.to_dict()

        # Then
        assert result == {
            "code": 2001,
            "error": "CONFIG_PARSE_ERROR",
            "message": "Test message",
            "retryable": True,
            "details": {"key": "value"},
        }

    def test_given_error_when_str_then_human_readable(self) -> None:
        """Error string representation is human readable."""
        error = ImpactLensError(code=ErrorCode.INTERNAL_ERROR, message="Something broke")
        assert str(error) == "[9001] INTERNAL_ERROR: Something broke"

    def test_errors_are_raisable(self) -> None:
        """Structured errors behave like ordinary exceptions."""
        with pytest.raises(ImpactLensError):
            raise InternalError.unexpected("boom")


class TestConfigError:
    """ConfigError factory method tests."""

    def test_parse_error_carries_path_and_reason(self) -> None:
        error = ConfigError.parse_error("/repo/.impactlens/config.yaml", "bad indent")
        assert error.code == ErrorCode.CONFIG_PARSE_ERROR
        assert error.details == {"path": "/repo/.impactlens/config.yaml", "reason": "bad indent"}
        assert "bad indent" in error.message

    def test_invalid_value_stringifies_value(self) -> None:
        error = ConfigError.invalid_value("scan.timeout_sec", -1, "Must be positive")
        assert error.code == ErrorCode.CONFIG_INVALID_VALUE
        assert error.details["value"] == "-1"
        assert "scan.timeout_sec" in error.message


class TestAnalysisError:
    """AnalysisError factory method tests."""

    def test_file_not_found(self) -> None:
        error = AnalysisError.file_not_found("src/a.ts")
        assert error.code == ErrorCode.ANALYSIS_FILE_NOT_FOUND
        assert error.details == {"path": "src/a.ts"}
        assert not error.retryable

    def test_invalid_mode(self) -> None:
        error = AnalysisError.invalid_mode("staging")
        assert error.code == ErrorCode.ANALYSIS_INVALID_MODE
        assert "'staging'" in error.message


class TestInternalError:
    """InternalError factory method tests."""

    def test_unexpected_keeps_details(self) -> None:
        error = InternalError.unexpected("chain exhausted", path="a.ts", skips=["x"])
        assert error.error_name == "INTERNAL_ERROR"
        assert error.details == {"path": "a.ts", "skips": ["x"]}
