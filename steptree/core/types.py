"""
Core data models and types for steptree.
"""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


ROOT_ID = "0"


class StepStatus(str, Enum):
    """Status of a step execution."""

    PENDING = "pending"
    QUEUED = "queued"
    SUCCESS = "success"
    FAILED = "failed"


class FrameKind(str, Enum):
    """Role a stack frame plays in a call tree."""

    BOUNDARY = "boundary"  # scenario, hook, within or session entry
    GROUPING = "grouping"  # page-object or proxied method call


class CallTreeNode(BaseModel):
    """One entry of a call-tree path derived from a stack trace."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Call-site id (column-line-file hash)")
    parent_id: str = Field(ROOT_ID, description="Id of the enclosing node, ROOT_ID at level 0")
    kind: FrameKind
    description: Optional[str] = Field(
        None, description="Rendering of the step or meta step at this call site"
    )


class TestState(str, Enum):
    """Outcome of a test as reported by the runner."""

    __test__ = False

    PENDING = "pending"
    PASSED = "passed"
    FAILED = "failed"


class SuiteRecord(BaseModel):
    """A suite announced by the runner."""

    title: str
    file: Optional[str] = None


class TestRecord(BaseModel):
    """A test announced by the runner, with the steps it executed."""

    __test__ = False

    model_config = ConfigDict(arbitrary_types_allowed=True)

    title: str
    suite: Optional[str] = None
    steps: List[Any] = Field(default_factory=list, description="Steps in execution order")
    state: TestState = TestState.PENDING
    err: Optional[BaseException] = None
    duration_ms: Optional[int] = None

    @property
    def full_title(self) -> str:
        if self.suite:
            return f"{self.suite}: {self.title}"
        return self.title
