"""
Unit tests for core data types.
"""

import pytest
from pydantic import ValidationError

from steptree.core.types import (
    ROOT_ID,
    CallTreeNode,
    FrameKind,
    StepStatus,
    SuiteRecord,
    TestRecord,
    TestState,
)


class TestCallTreeNode:
    """Tests for CallTreeNode model."""

    def test_defaults(self):
        """Test a node without a parent hangs off the root."""
        node = CallTreeNode(id="5-12-ab12cd", kind=FrameKind.BOUNDARY)
        assert node.parent_id == ROOT_ID
        assert node.description is None

    def test_frozen(self):
        """Test nodes cannot be changed once built."""
        node = CallTreeNode(id="5-12-ab12cd", kind=FrameKind.GROUPING, description="Login: submit")
        with pytest.raises(ValidationError):
            node.description = "changed"

    def test_equality(self):
        """Test nodes compare by value."""
        first = CallTreeNode(id="1-2-x", parent_id="0", kind=FrameKind.GROUPING)
        second = CallTreeNode(id="1-2-x", parent_id="0", kind=FrameKind.GROUPING)
        assert first == second

    def test_kind_from_string(self):
        """Test the kind accepts its string value."""
        assert CallTreeNode(id="a", kind="boundary").kind == FrameKind.BOUNDARY


class TestEnums:
    """Tests for status enums."""

    def test_step_status_values(self):
        """Test step status string values."""
        assert StepStatus.PENDING.value == "pending"
        assert StepStatus.QUEUED.value == "queued"
        assert StepStatus.SUCCESS.value == "success"
        assert StepStatus.FAILED.value == "failed"

    def test_test_state_values(self):
        """Test test state compares to plain strings."""
        assert TestState.PASSED == "passed"
        assert TestState("failed") is TestState.FAILED


class TestRecords:
    """Tests for suite and test records."""

    def test_full_title_with_suite(self):
        """Test the suite title is prefixed."""
        assert TestRecord(title="pays", suite="Checkout").full_title == "Checkout: pays"

    def test_full_title_without_suite(self):
        """Test a test without a suite keeps its title."""
        assert TestRecord(title="pays").full_title == "pays"

    def test_record_defaults(self):
        """Test default record values."""
        record = TestRecord(title="pays")
        assert record.steps == []
        assert record.state == TestState.PENDING
        assert record.err is None
        assert record.duration_ms is None

    def test_steps_not_shared(self):
        """Test each record gets its own step list."""
        first = TestRecord(title="a")
        first.steps.append("step")
        assert TestRecord(title="b").steps == []

    def test_error_kept(self):
        """Test arbitrary exceptions are stored."""
        error = RuntimeError("boom")
        assert TestRecord(title="a", err=error).err is error

    def test_suite_record(self):
        """Test suite record fields."""
        suite = SuiteRecord(title="Checkout", file="checkout_test.py")
        assert suite.title == "Checkout"
        assert suite.file == "checkout_test.py"
