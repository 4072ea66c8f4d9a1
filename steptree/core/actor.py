"""
The actor (``I``) through which tests execute steps.
"""

import time
from typing import TYPE_CHECKING, Any, Callable, Optional, Tuple

from steptree.calltree.scope import RunScope
from steptree.core.step import Step
from steptree.monitoring.logger import get_logger, log_step_event
from steptree.orchestration.communication import StepEvent

if TYPE_CHECKING:
    from steptree.core.container import Container
    from steptree.core.helper import Helper

logger = get_logger(__name__)


class Actor:
    """
    Records every helper call as a Step.

    Attribute access returns a recorder for the helper method of that name,
    so ``I.fill_field("#email", "a@b.com")`` runs ``fill_field`` on the first
    helper that provides it and emits the step lifecycle events around it.
    """

    def __init__(
        self,
        container: "Container",
        label: str = "I",
        scope: Optional[RunScope] = None,
    ) -> None:
        self._container = container
        self._label = label
        self._scope = scope or container.scope

    def __getattr__(self, method_name: str) -> Callable[..., Any]:
        if method_name.startswith("_"):
            raise AttributeError(method_name)

        # Raises HelperNotFoundError (an AttributeError) for unknown steps
        helper = self._container.find_helper(method_name)

        def recorder(*args: Any) -> Any:
            return self._record_step(helper, method_name, args)

        recorder.__name__ = method_name
        return recorder

    def _record_step(self, helper: "Helper", method_name: str, args: Tuple[Any, ...]) -> Any:
        events = self._scope.events
        step = Step(helper, method_name, scope=self._scope)
        step.actor = self._label
        step.set_arguments(list(args))

        events.emit(StepEvent.BEFORE, step)
        step.set_call_tree()
        events.emit(StepEvent.STARTED, step)
        log_step_event("started", step.name, step.actor, step.status.value)

        step.started_at = time.time()
        try:
            result = step.run(*args)
        except Exception as error:
            step.finished_at = time.time()
            events.emit(StepEvent.FAILED, step, error)
            log_step_event(
                "failed", step.name, step.actor, step.status.value,
                {"error": str(error)},
            )
            raise
        else:
            step.finished_at = time.time()
            events.emit(StepEvent.PASSED, step)
        finally:
            events.emit(StepEvent.FINISHED, step)
        return result

    def __repr__(self) -> str:
        return f"<Actor {self._label}>"
