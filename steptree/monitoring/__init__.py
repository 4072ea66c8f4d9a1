"""
Monitoring module exports.
"""

from steptree.monitoring.logger import (
    get_logger,
    log_step_event,
    setup_logging,
    JSONFormatter,
    StepLogAdapter,
)

from steptree.monitoring.output import (
    Output,
    format_duration,
)

from steptree.monitoring.printer import TreePrinter

from steptree.monitoring.reporter import (
    CliReporter,
    FailureReport,
)

__all__ = [
    # Logger
    "setup_logging",
    "get_logger",
    "log_step_event",
    "JSONFormatter",
    "StepLogAdapter",

    # Output
    "Output",
    "format_duration",

    # Printer
    "TreePrinter",

    # Reporter
    "CliReporter",
    "FailureReport",
]
