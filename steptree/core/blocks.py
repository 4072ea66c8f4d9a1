"""
Block helpers that group the steps run inside them.
"""

from typing import Any, Callable, Optional

from steptree.calltree.scope import RunScope, get_run_scope
from steptree.core.step import MetaStep, Step
from steptree.orchestration.communication import StepEvent


def within(locator: Any, fn: Callable[[], Any], scope: Optional[RunScope] = None) -> Any:
    """
    Run ``fn`` with its steps attributed to a ``Within <locator>`` meta step.

    Failures inside the block are recorded on the meta step; the failing step
    itself has already raised through ``fn``.
    """
    meta_step = MetaStep("Within", str(locator), scope=scope or get_run_scope())
    return meta_step.run(fn)


def session(name: str, fn: Callable[[], Any], scope: Optional[RunScope] = None) -> Any:
    """Run ``fn`` with every step it records prefixed by ``[name] ``."""
    scope = scope or get_run_scope()

    def tag(step: Step) -> None:
        step.session_prefix = f"[{name}] "

    with scope.events.subscription(StepEvent.BEFORE, tag):
        return fn()


def gherkin(
    keyword: str,
    text: str,
    fn: Callable[..., Any],
    *args: Any,
    scope: Optional[RunScope] = None,
) -> Any:
    """Run ``fn`` as a Given/When/Then/And clause."""
    meta_step = MetaStep(keyword, text, scope=scope or get_run_scope())
    return meta_step.run(fn, *args)
