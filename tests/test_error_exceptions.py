"""
Unit tests for error handling exceptions.
"""

import pytest
from datetime import datetime

from steptree.error_handling.exceptions import (
    StepTreeError, StatusTransitionError, HelperNotFoundError,
    ConfigurationError, AssertionFailedError
)


class TestStepTreeError:
    """Test base exception class."""

    def test_basic_creation(self):
        """Test basic error creation."""
        error = StepTreeError("Test error")
        assert str(error) == "Test error"
        assert error.message == "Test error"
        assert error.error_code == "StepTreeError"
        assert error.details == {}
        assert error.cause is None
        assert isinstance(error.timestamp, datetime)

    def test_with_details(self):
        """Test error with details."""
        details = {"key": "value", "count": 42}
        error = StepTreeError(
            "Test error",
            error_code="TEST001",
            details=details
        )
        assert error.error_code == "TEST001"
        assert error.details == details

    def test_to_dict(self):
        """Test conversion to dictionary."""
        cause = ValueError("Original error")
        error = StepTreeError("Wrapped error", error_code="TEST001", cause=cause)

        result = error.to_dict()

        assert result["error_type"] == "StepTreeError"
        assert result["error_code"] == "TEST001"
        assert result["message"] == "Wrapped error"
        assert result["cause"] == "Original error"
        assert "timestamp" in result


class TestSpecificErrors:
    """Test the tracker's own error types."""

    def test_status_transition_error(self):
        """Test status transition details."""
        error = StatusTransitionError(
            "Cannot move",
            step_name="click",
            current_status="success",
            requested_status="failed"
        )
        assert error.step_name == "click"
        assert error.details["current_status"] == "success"
        assert error.details["requested_status"] == "failed"

    def test_helper_not_found_is_attribute_error(self):
        """Test missing helpers behave like missing attributes."""
        error = HelperNotFoundError("Missing", method_name="teleport", available_helpers=["Browser"])
        assert isinstance(error, AttributeError)
        assert isinstance(error, StepTreeError)
        assert error.details["available_helpers"] == ["Browser"]

    def test_configuration_error(self):
        """Test configuration error option."""
        error = ConfigurationError("Bad option", option="outputStyle")
        assert error.option == "outputStyle"
        assert error.details == {"option": "outputStyle"}


class TestAssertionFailedError:
    """Test assertion failures."""

    def test_message(self):
        """Test the rendered message."""
        error = AssertionFailedError(subject="web page", assertion_type="include", needle="Welcome")
        assert str(error) == 'expected web page to include "Welcome"'
        assert isinstance(error, AssertionError)

    def test_custom_message_prepended(self):
        """Test a custom message comes first."""
        error = AssertionFailedError(
            subject="title", assertion_type="equal", needle="Home", custom_message="Wrong page"
        )
        assert error.message == 'Wrong page\nexpected title to equal "Home"'

    def test_cli_message_with_diff(self):
        """Test the diff lines of the CLI message."""
        error = AssertionFailedError(
            subject="title", assertion_type="equal", needle="Home", actual="Login", expected="Home"
        )
        assert error.cli_message().splitlines() == [
            'expected title to equal "Home"',
            "  + expected - actual",
            "  - Login",
            "  + Home",
        ]

    def test_cli_message_without_diff(self):
        """Test the CLI message without actual and expected values."""
        error = AssertionFailedError(subject="page", assertion_type="be visible")
        assert error.cli_message() == "expected page to be visible"

    def test_stack_starts_with_message(self):
        """Test the stack leads with the message line."""
        with pytest.raises(AssertionFailedError) as exc_info:
            raise AssertionFailedError(subject="page", assertion_type="be visible")

        lines = exc_info.value.stack.split("\n")
        assert lines[0] == "AssertionFailedError: expected page to be visible"
        assert len(lines) > 1
