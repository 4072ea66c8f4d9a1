"""
Core module exports.

Only the dependency-free types are exported here; import the step model from
``steptree.core.step`` and friends, or from the top-level package.
"""

from steptree.core.dry_run import DryRunValue, is_dry_run_value
from steptree.core.types import (
    ROOT_ID,
    CallTreeNode,
    FrameKind,
    StepStatus,
    SuiteRecord,
    TestRecord,
    TestState,
)

__all__ = [
    # Types
    "ROOT_ID",
    "StepStatus",
    "FrameKind",
    "CallTreeNode",
    "TestState",
    "SuiteRecord",
    "TestRecord",
    # Dry run
    "DryRunValue",
    "is_dry_run_value",
]
