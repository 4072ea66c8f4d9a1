"""
Custom exception hierarchy for steptree error handling.

Failures raised by the helpers a Step wraps are never converted into these
types; they propagate unchanged. The classes below cover the tracker's own
error conditions and the assertion failures the reporter rewrites for display.
"""

import traceback
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


class StepTreeError(Exception):
    """Base exception for all steptree errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None
        }


class StatusTransitionError(StepTreeError):
    """Raised when a concrete step is moved to a status it cannot reach."""

    def __init__(
        self,
        message: str,
        step_name: str,
        current_status: str,
        requested_status: str,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.step_name = step_name
        self.current_status = current_status
        self.requested_status = requested_status
        self.details.update({
            "step_name": step_name,
            "current_status": current_status,
            "requested_status": requested_status
        })


class HelperNotFoundError(StepTreeError, AttributeError):
    """Raised when no registered helper provides the requested method."""

    def __init__(
        self,
        message: str,
        method_name: str,
        available_helpers: Optional[List[str]] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.method_name = method_name
        self.available_helpers = available_helpers or []
        self.details.update({
            "method_name": method_name,
            "available_helpers": self.available_helpers
        })


class ConfigurationError(StepTreeError):
    """Raised when reporter or runtime configuration is unusable."""

    def __init__(self, message: str, option: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.option = option
        self.details.update({"option": option})


class AssertionFailedError(StepTreeError, AssertionError):
    """
    Assertion failure raised by helpers that verify page state.

    Carries the assertion parameters so the reporter can render a CLI
    friendly message, and exposes a ``stack`` whose first line is the
    message line (stripped by the reporter before re-display).
    """

    def __init__(
        self,
        subject: str,
        assertion_type: str,
        needle: Any = None,
        actual: Any = None,
        expected: Any = None,
        custom_message: Optional[str] = None,
        **kwargs
    ):
        self.subject = subject
        self.assertion_type = assertion_type
        self.needle = needle
        self.actual = actual
        self.expected = expected
        self.custom_message = custom_message
        super().__init__(self._render(), **kwargs)
        self.details.update({
            "subject": subject,
            "assertion_type": assertion_type,
            "needle": needle,
        })

    def _render(self) -> str:
        text = f"expected {self.subject} to {self.assertion_type}"
        if self.needle is not None:
            text += f' "{self.needle}"'
        if self.custom_message:
            text = f"{self.custom_message}\n{text}"
        return text

    def cli_message(self) -> str:
        """Message formatted for terminal output, with a diff when available."""
        lines = [self._render()]
        if self.expected is not None or self.actual is not None:
            lines.append("  + expected - actual")
            lines.append(f"  - {self.actual}")
            lines.append(f"  + {self.expected}")
        return "\n".join(lines)

    @property
    def stack(self) -> str:
        """Message line followed by the formatted traceback frames."""
        head = f"{self.__class__.__name__}: {self.message}"
        frames = traceback.format_tb(self.__traceback__) if self.__traceback__ else []
        return "\n".join([head] + [frame.rstrip("\n") for frame in frames])
