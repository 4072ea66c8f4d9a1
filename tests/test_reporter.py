"""
Tests for the CLI reporter.
"""

import pytest

from steptree import __version__
from steptree.config.settings import ReporterOptions
from steptree.core.types import SuiteRecord, TestRecord, TestState
from steptree.error_handling.exceptions import AssertionFailedError, ConfigurationError
from steptree.monitoring.output import format_duration
from steptree.monitoring.reporter import VERBOSE_HINT, CliReporter
from steptree.orchestration.communication import LifecycleEvent


def raised(error):
    """Return ``error`` after raising it so it carries a traceback."""
    try:
        raise error
    except Exception as caught:
        return caught


def assertion_error():
    return raised(AssertionFailedError(
        subject="web page",
        assertion_type="include",
        needle="Welcome",
        actual="Sign in",
        expected="Welcome",
    ))


@pytest.fixture
def make_reporter(scope, output):
    """Build an attached reporter with the given options."""
    def build(options=None, container=None):
        reporter = CliReporter(scope, options=options or {}, output=output, container=container)
        reporter.attach()
        return reporter
    return build


class TestOptions:
    """Tests for option handling."""

    @pytest.mark.parametrize("options, level", [
        ({}, 0),
        ({"steps": True}, 1),
        ({"debug": True}, 2),
        ({"verbose": True}, 3),
        ({"steps": True, "verbose": True}, 3),
        ({"reporterOptions": {"debug": True}}, 2),
    ])
    def test_level_from_options(self, options, level):
        """The highest verbosity flag wins."""
        assert ReporterOptions.from_mapping(options).level == level

    def test_output_configured(self, make_reporter, output):
        """Options are applied to the output surface."""
        make_reporter({"steps": True, "noreverse": True, "notruncate": True, "outputStyle": "actor"})

        assert output.level == 1
        assert output.reverse is False
        assert output.truncate is False
        assert output.style == "actor"

    def test_invalid_options_rejected(self, scope, output):
        """A reporter cannot be built from unusable options."""
        with pytest.raises(ConfigurationError):
            CliReporter(scope, options={"outputStyle": ["actor"]}, output=output)

    def test_banner(self, make_reporter, printed):
        """The version and test root are printed first."""
        make_reporter()
        lines = printed()
        assert lines[0] == f"steptree v{__version__}"
        assert lines[1].startswith('Using test root "')

    def test_debug_banner_lists_helpers(self, make_reporter, container, printed):
        """At debug level helpers and plugins are listed."""
        container.add_plugin("retryFailedStep", object())
        make_reporter({"debug": True}, container=container)

        assert "Helpers: FakeBrowser" in printed()
        assert "Plugins: retryFailedStep" in printed()

    def test_defaults_from_settings(self, scope, output, monkeypatch):
        """Without options the configured output level is used."""
        from steptree.config.settings import get_settings

        monkeypatch.setenv("STEPTREE_OUTPUT_LEVEL", "2")
        get_settings.cache_clear()

        CliReporter(scope, output=output)

        assert output.level == 2


class TestLifecycle:
    """Tests for event driven accounting."""

    def test_counts_and_result_line(self, make_reporter, scope, printed):
        """Passes, failures and pending tests are counted."""
        reporter = make_reporter()
        events = scope.events
        events.emit(LifecycleEvent.SUITE_STARTED, SuiteRecord(title="Checkout"))
        events.emit(LifecycleEvent.TEST_PASSED, TestRecord(title="pays by card", duration_ms=12))
        events.emit(LifecycleEvent.TEST_FAILED, TestRecord(title="pays by voucher"), assertion_error())
        events.emit(LifecycleEvent.TEST_PENDING, TestRecord(title="pays by cash"))
        events.emit(LifecycleEvent.RUN_ENDED)

        lines = printed()
        assert "Checkout --" in lines
        assert "  ✔ pays by card in 12ms" in lines
        assert "  S pays by cash" in lines
        assert "-- FAILURES:" in lines
        assert any(line.startswith(" FAIL  | 1 passed, 1 failed, 1 skipped") for line in lines)
        assert reporter.pending == 1
        assert reporter.failures[0].state == TestState.FAILED

    def test_ok_result_line(self, make_reporter, scope, printed):
        """A clean run reports OK."""
        make_reporter()
        scope.events.emit(LifecycleEvent.TEST_PASSED, TestRecord(title="works"))
        scope.events.emit(LifecycleEvent.RUN_ENDED)

        assert any(line.startswith(" OK  | 1 passed") for line in printed())
        assert "-- FAILURES:" not in printed()

    def test_steps_collected_per_test(self, make_reporter, scope, actor, printed):
        """Steps started during a test are attached to it."""
        make_reporter({"steps": True})
        test = TestRecord(title="searches", suite="Search")
        scope.events.emit(LifecycleEvent.TEST_STARTED, test)
        actor.click("Search")
        scope.events.emit(LifecycleEvent.TEST_PASSED, test)

        assert [step.name for step in test.steps] == ["click"]
        lines = printed()
        assert "  searches" in lines
        assert '   I click "Search"' in lines
        assert any(line.startswith("  ✔ OK in") for line in lines)


class TestFailureReports:
    """Tests for the failure listing."""

    def test_assertion_message_rewritten(self, make_reporter):
        """Assertion failures use the CLI message and drop the message line."""
        reporter = make_reporter()
        error = assertion_error()
        original_message = error.message
        reporter.on_test_failed(TestRecord(title="greets", suite="Home"), error)

        report = reporter.failure_reports()[0]

        assert report.index == 1
        assert report.title == "Home: greets"
        assert report.message == error.cli_message()
        assert "+ expected - actual" in report.message
        assert not report.stack.startswith("AssertionFailedError")
        assert report.stack.endswith(VERBOSE_HINT)
        assert error.message == original_message

    def test_no_hint_when_verbose(self, make_reporter):
        """The verbosity hint is omitted at verbose level."""
        reporter = make_reporter({"verbose": True})
        reporter.on_test_failed(TestRecord(title="greets"), assertion_error())

        assert not reporter.failure_reports()[0].stack.endswith(VERBOSE_HINT)

    def test_other_errors(self, make_reporter):
        """Other failures show their type and message."""
        reporter = make_reporter()
        reporter.on_test_failed(TestRecord(title="loads"), raised(TimeoutError("page load")))

        report = reporter.failure_reports()[0]

        assert report.message == "TimeoutError: page load"
        assert "raise error" in report.stack

    def test_failure_listing_printed(self, make_reporter, scope, printed):
        """The run end lists every failure with its message."""
        make_reporter()
        scope.events.emit(LifecycleEvent.TEST_FAILED, TestRecord(title="greets"), assertion_error())
        scope.events.emit(LifecycleEvent.RUN_ENDED)

        lines = printed()
        assert "  1) greets" in lines
        assert '     expected web page to include "Welcome"' in lines


class TestFormatDuration:
    """Tests for duration formatting."""

    @pytest.mark.parametrize("duration_ms, expected", [
        (None, "0ms"),
        (250, "250ms"),
        (1500, "2s"),
        (90_000, "2m"),
        (7_200_000, "2h"),
    ])
    def test_format(self, duration_ms, expected):
        assert format_duration(duration_ms) == expected
