"""
steptree: step tracking and call-tree reporting for test automation.
"""

__version__ = "0.1.0"

from steptree.core.step import UNDEFINED, MetaStep, Step
from steptree.core.actor import Actor
from steptree.core.blocks import gherkin, session, within
from steptree.core.container import Container, PageObjectProxy
from steptree.core.helper import Helper
from steptree.calltree.scope import RunScope, get_run_scope, reset_run_scope
from steptree.monitoring.reporter import CliReporter
from steptree.security.secret import Secret

__all__ = [
    "__version__",
    "Step",
    "MetaStep",
    "UNDEFINED",
    "Actor",
    "Helper",
    "Container",
    "PageObjectProxy",
    "within",
    "session",
    "gherkin",
    "RunScope",
    "get_run_scope",
    "reset_run_scope",
    "CliReporter",
    "Secret",
]
