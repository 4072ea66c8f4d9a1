"""
Error handling for steptree.

Failures from wrapped helpers propagate unchanged past a concrete Step and are
absorbed into the status of a MetaStep; the types below cover the tracker's
own error conditions.
"""

from .exceptions import (
    StepTreeError,
    StatusTransitionError,
    HelperNotFoundError,
    ConfigurationError,
    AssertionFailedError,
)

__all__ = [
    "StepTreeError",
    "StatusTransitionError",
    "HelperNotFoundError",
    "ConfigurationError",
    "AssertionFailedError",
]
