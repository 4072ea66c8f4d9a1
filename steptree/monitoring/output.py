"""
Terminal output for the step tree reporter.

All console rendering goes through ``Output``; the printer and reporter decide
what to print, this module decides how it looks.
"""

from typing import TYPE_CHECKING, Iterable, Optional, Union

from rich.console import Console
from rich.control import Control
from rich.text import Text

from steptree.config.settings import LEVEL_DEBUG, LEVEL_MINIMAL, LEVEL_STEPS, ReporterOptions
from steptree.core.types import SuiteRecord, TestRecord

if TYPE_CHECKING:
    from steptree.core.step import Step
    from steptree.monitoring.reporter import FailureReport

TICK = "✔"
CROSS = "✖"

STYLES = {
    "suite": "bold",
    "test": "bold magenta",
    "label": "bold",
    "comment": "grey50",
    "debug": "grey50",
    "passed": "bold green",
    "failed": "bold red",
    "pending": "yellow",
    "result_ok": "bold white on green",
    "result_fail": "bold white on red",
}


def format_duration(duration_ms: Optional[float]) -> str:
    """Short human duration: ``250ms``, ``3s``, ``2m``, ``1h``."""
    if duration_ms is None:
        return "0ms"
    duration_ms = float(duration_ms)
    if duration_ms >= 3_600_000:
        return f"{round(duration_ms / 3_600_000)}h"
    if duration_ms >= 60_000:
        return f"{round(duration_ms / 60_000)}m"
    if duration_ms >= 1000:
        return f"{round(duration_ms / 1000)}s"
    return f"{round(duration_ms)}ms"


class Output:
    """
    Rich console surface shared by the tree printer and the CLI reporter.

    ``step_shift`` is the indentation of the next step line; the printer sets
    it when a step starts and resets it when the step finishes.
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        level: int = LEVEL_MINIMAL,
        reverse: bool = True,
        truncate: bool = True,
        style: Optional[str] = None,
    ) -> None:
        self.console = console or Console(highlight=False)
        self.level = level
        self.reverse = reverse
        self.truncate = truncate
        self.style = style
        self.step_shift = 0

    def configure(self, options: ReporterOptions) -> None:
        self.level = options.level
        self.reverse = options.reverse
        self.truncate = options.truncate
        self.style = options.output_style

    def print(self, message: Union[str, Text] = "", style: Optional[str] = None) -> None:
        text = message if isinstance(message, Text) else Text(str(message), style=style or "")
        if self.truncate:
            self.console.print(text, no_wrap=True, overflow="ellipsis", crop=True)
        else:
            self.console.print(text, soft_wrap=True)

    def debug(self, message: str) -> None:
        if self.level >= LEVEL_DEBUG:
            self.print(message, STYLES["debug"])

    def rewind(self) -> None:
        """Move the cursor back to the start of the line on a terminal."""
        if self.reverse and self.console.is_terminal:
            self.console.control(Control.move_to_column(0))

    def suite_started(self, suite: SuiteRecord) -> None:
        self.print(Text.assemble((suite.title, STYLES["suite"]), " --"))

    def test_started(self, test: TestRecord) -> None:
        self.print(Text.assemble("  ", (test.title, STYLES["test"])))

    def test_passed(self, test: TestRecord) -> None:
        self.print(Text.assemble(
            "  ", (TICK, STYLES["passed"]), f" {test.title} ",
            (f"in {format_duration(test.duration_ms)}", STYLES["comment"]),
        ))

    def test_failed(self, test: TestRecord) -> None:
        self.print(Text.assemble(
            "  ", (CROSS, STYLES["failed"]), f" {test.title} ",
            (f"in {format_duration(test.duration_ms)}", STYLES["comment"]),
        ))

    def test_skipped(self, test: TestRecord) -> None:
        self.print(Text.assemble("  ", ("S", STYLES["pending"]), f" {test.title}"))

    def scenario_passed(self, test: TestRecord) -> None:
        self.print(Text.assemble(
            "  ", (f"{TICK} OK", STYLES["passed"]), " ",
            (f"in {format_duration(test.duration_ms)}", STYLES["comment"]),
        ))
        self.print()

    def scenario_failed(self, test: TestRecord) -> None:
        self.print(Text.assemble(
            "  ", (f"{CROSS} FAILED", STYLES["failed"]), " ",
            (f"in {format_duration(test.duration_ms)}", STYLES["comment"]),
        ))
        self.print()

    def label(self, text: str, session_prefix: str = "") -> None:
        """Ancestor label (page-object call or block) at the current shift."""
        if self.level < LEVEL_STEPS or not text:
            return
        self.print(Text.assemble(" " * self.step_shift, session_prefix, (text, STYLES["label"])))

    def step(self, step: "Step") -> None:
        if self.level < LEVEL_STEPS:
            return
        # Steps below a Given/When/Then clause are only shown in debug mode
        if self.level == LEVEL_STEPS and step.has_bdd_ancestor():
            return

        line = Text.assemble(" " * self.step_shift, step.session_prefix, step.to_string())
        if step.comment:
            comment = step.comment.replace("\n", "\n" + " " * 4)
            line.append(comment, style=STYLES["comment"])
        self.print(line)

    def failures(self, reports: Iterable["FailureReport"]) -> None:
        self.print("-- FAILURES:")
        for report in reports:
            self.print()
            self.print(f"  {report.index}) {report.title}")
            self.print(Text(_indent(report.message, 5), style=STYLES["failed"]))
            if report.stack:
                self.print(Text(_indent(report.stack, 5), style=STYLES["comment"]))

    def result(self, passed: int, failed: int, pending: int, duration: str) -> None:
        self.print()
        message = f" {'FAIL' if failed else 'OK'}  | {passed} passed"
        if failed:
            message += f", {failed} failed"
        if pending:
            message += f", {pending} skipped"
        message += "  "
        style = STYLES["result_fail"] if failed else STYLES["result_ok"]
        self.print(Text.assemble((message, style), (f"  // {duration}", STYLES["comment"])))


def _indent(text: str, width: int) -> str:
    pad = " " * width
    return "\n".join(pad + line if line else line for line in text.splitlines())
