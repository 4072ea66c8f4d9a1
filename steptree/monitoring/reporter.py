"""
CLI reporter.

Counts test outcomes from lifecycle events, prints tests (and, from the
``steps`` level up, every step through the tree printer) and lists the
failures with a result line at the end of the run.
"""

import time
import traceback
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from steptree import __version__
from steptree.config.settings import LEVEL_DEBUG, LEVEL_STEPS, LEVEL_VERBOSE, ReporterOptions, get_settings
from steptree.core.types import SuiteRecord, TestRecord, TestState
from steptree.error_handling.exceptions import AssertionFailedError
from steptree.monitoring.logger import get_logger
from steptree.monitoring.output import Output, format_duration
from steptree.monitoring.printer import TreePrinter
from steptree.orchestration.communication import EventDispatcher, LifecycleEvent, StepEvent

if TYPE_CHECKING:
    from steptree.calltree.scope import RunScope
    from steptree.core.container import Container
    from steptree.core.step import Step

logger = get_logger(__name__)

VERBOSE_HINT = "\n\nRun with --verbose flag to see the full stacktrace"


@dataclass
class FailureReport:
    """A failed test as listed at the end of the run."""

    index: int
    title: str
    message: str
    stack: str
    error: Optional[BaseException] = None


class CliReporter:
    """
    Terminal reporter driven by lifecycle and step events.

    Args:
        scope: Run scope whose dispatcher, history and ancestors are used
        options: Reporter options, raw mapping (``reporterOptions`` allowed)
            or None for the configured defaults
        output: Console surface (a default rich console when omitted)
        container: Helpers and plugins listed in the debug banner

    Raises:
        ConfigurationError: The options cannot be parsed
    """

    def __init__(
        self,
        scope: "RunScope",
        options: Union[ReporterOptions, Dict[str, Any], None] = None,
        output: Optional[Output] = None,
        container: Optional["Container"] = None,
    ) -> None:
        settings = get_settings()
        if options is None:
            options = settings.reporter_options()
        elif not isinstance(options, ReporterOptions):
            options = ReporterOptions.from_mapping(options)

        self.scope = scope
        self.options = options
        self.output = output or Output()
        self.output.configure(options)
        self.container = container
        self.printer = TreePrinter(scope, self.output)

        self.passes: List[TestRecord] = []
        self.failures: List[TestRecord] = []
        self.pending = 0
        self.current_test: Optional[TestRecord] = None
        self._started = time.monotonic()
        self._dispatcher: Optional[EventDispatcher] = None

        self.output.print(f"steptree v{__version__}")
        self.output.print(f'Using test root "{settings.test_root.resolve()}"')
        if self.output.level >= LEVEL_DEBUG and container is not None:
            self.output.debug(f"Helpers: {', '.join(container.helpers())}")
            self.output.debug(f"Plugins: {', '.join(container.plugins())}")

    @property
    def show_steps(self) -> bool:
        return self.output.level >= LEVEL_STEPS

    def attach(self, dispatcher: Optional[EventDispatcher] = None) -> None:
        """Subscribe to lifecycle events, and to step events when steps are shown."""
        dispatcher = dispatcher or self.scope.events
        self._dispatcher = dispatcher
        dispatcher.subscribe(LifecycleEvent.SUITE_STARTED, self.on_suite_started)
        dispatcher.subscribe(LifecycleEvent.TEST_STARTED, self.on_test_started)
        dispatcher.subscribe(LifecycleEvent.TEST_PASSED, self.on_test_passed)
        dispatcher.subscribe(LifecycleEvent.TEST_FAILED, self.on_test_failed)
        dispatcher.subscribe(LifecycleEvent.TEST_PENDING, self.on_test_pending)
        dispatcher.subscribe(LifecycleEvent.RUN_ENDED, self.on_run_ended)
        dispatcher.subscribe(StepEvent.STARTED, self.on_step_started)
        if self.show_steps:
            self.printer.attach(dispatcher)
        self._started = time.monotonic()

    def on_suite_started(self, suite: SuiteRecord) -> None:
        self.output.suite_started(suite)

    def on_test_started(self, test: TestRecord) -> None:
        self.current_test = test
        if self.show_steps:
            self.output.test_started(test)

    def on_step_started(self, step: "Step") -> None:
        if self.current_test is not None:
            self.current_test.steps.append(step)

    def on_test_passed(self, test: TestRecord) -> None:
        test.state = TestState.PASSED
        self.passes.append(test)
        if self.show_steps and test.steps:
            self.output.scenario_passed(test)
            return
        self.output.rewind()
        self.output.test_passed(test)

    def on_test_failed(self, test: TestRecord, error: Optional[BaseException] = None) -> None:
        test.state = TestState.FAILED
        if error is not None:
            test.err = error
        self.failures.append(test)
        if self.show_steps and test.steps:
            self.output.scenario_failed(test)
            return
        self.output.rewind()
        self.output.test_failed(test)

    def on_test_pending(self, test: TestRecord) -> None:
        test.state = TestState.PENDING
        self.pending += 1
        self.output.rewind()
        self.output.test_skipped(test)

    def failure_reports(self) -> List[FailureReport]:
        """
        Failures formatted for display.

        Assertion failures use their CLI message and a stack without the
        leading message line. Below verbose level every stack ends with a
        hint to rerun with ``--verbose``. The error objects are not modified.
        """
        reports = []
        for index, test in enumerate(self.failures, start=1):
            error = test.err
            if isinstance(error, AssertionFailedError):
                message = error.cli_message()
                stack = "\n".join(error.stack.split("\n")[1:])
            elif error is not None:
                message = f"{type(error).__name__}: {error}"
                stack = "".join(traceback.format_tb(error.__traceback__)).rstrip("\n")
            else:
                message = "Test failed without an error"
                stack = ""

            if self.output.level < LEVEL_VERBOSE:
                stack += VERBOSE_HINT

            reports.append(FailureReport(
                index=index,
                title=test.full_title,
                message=message,
                stack=stack,
                error=error,
            ))
        return reports

    def on_run_ended(self, *args: Any) -> None:
        self.output.print()
        if self.failures:
            self.output.failures(self.failure_reports())
            self.output.print()

        duration_ms = (time.monotonic() - self._started) * 1000
        self.output.result(
            len(self.passes), len(self.failures), self.pending, format_duration(duration_ms)
        )
        logger.debug(
            f"Run ended: {len(self.passes)} passed, {len(self.failures)} failed, "
            f"{self.pending} pending"
        )
