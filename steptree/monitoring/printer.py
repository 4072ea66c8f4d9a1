"""
Incremental step tree printer.

For each started step the printer compares the step's call-tree path with
the ancestors already on screen, prints only the labels that came into view
and indents the step by the depth of the ancestors that were already open.
Ancestors stay open after a step finishes and are superseded by the next
step's path.
"""

from typing import TYPE_CHECKING, List, Mapping, Optional

from steptree.config.settings import LEVEL_DEBUG
from steptree.core.types import ROOT_ID, CallTreeNode
from steptree.monitoring.logger import get_logger
from steptree.monitoring.output import Output
from steptree.orchestration.communication import EventDispatcher, LifecycleEvent, StepEvent

if TYPE_CHECKING:
    from steptree.calltree.history import HistoryNode
    from steptree.calltree.scope import RunScope
    from steptree.core.step import MetaStep, Step

logger = get_logger(__name__)

STEP_SHIFT = 3
INDENT = 2
ACTOR_STYLE = "actor"


class TreePrinter:
    """
    Prints steps under their page-object and block ancestors.

    Args:
        scope: Run scope holding the call history and open-ancestor stack
        output: Console surface to print to
    """

    def __init__(self, scope: "RunScope", output: Output) -> None:
        self.scope = scope
        self.output = output
        self._dispatcher: Optional[EventDispatcher] = None

    def attach(self, dispatcher: Optional[EventDispatcher] = None) -> None:
        """Start listening to test and step events."""
        self._dispatcher = dispatcher or self.scope.events
        self._dispatcher.subscribe(LifecycleEvent.TEST_STARTED, self.on_test_started)
        self._dispatcher.subscribe(StepEvent.STARTED, self.on_step_started)
        self._dispatcher.subscribe(StepEvent.FINISHED, self.on_step_finished)

    def detach(self) -> None:
        if self._dispatcher is None:
            return
        self._dispatcher.unsubscribe(LifecycleEvent.TEST_STARTED, self.on_test_started)
        self._dispatcher.unsubscribe(StepEvent.STARTED, self.on_step_started)
        self._dispatcher.unsubscribe(StepEvent.FINISHED, self.on_step_finished)
        self._dispatcher = None

    def on_test_started(self, test=None) -> None:
        self.scope.reset_test()

    def on_step_started(self, step: "Step") -> None:
        self.output.step_shift = STEP_SHIFT

        meta_step = step.meta_step
        if meta_step is not None and meta_step.is_within():
            self._print_meta_chain(step, meta_step)

        if self.output.style != ACTOR_STYLE:
            self._print_ancestors(step)

        self.output.step(step)

    def on_step_finished(self, step: "Step") -> None:
        self.output.step_shift = 0

    def display_path(self, step: "Step") -> List[CallTreeNode]:
        """
        Ancestors of ``step`` worth a label at the current verbosity.

        The leaf is the step itself and is printed as the step line. Below
        debug level only the outermost ancestor is considered.
        """
        path = list(step.call_tree[:-1])
        if self.output.level < LEVEL_DEBUG:
            path = path[:1]
        return path

    def _print_ancestors(self, step: "Step") -> None:
        history = self.scope.history.get()
        open_ancestors = self.scope.open_ancestors
        level: Mapping[str, "HistoryNode"] = history

        for node in self.display_path(step):
            if node.parent_id == ROOT_ID:
                level = history

            entry = level.get(node.id)
            if entry is None:
                # The ancestor is gone; close one level and keep walking
                closed = open_ancestors.pop()
                logger.debug(f"Closed ancestor {closed} at unknown node {node.id}")
                level = {}
                continue

            if open_ancestors.push(node.id):
                self.output.label(entry.description or "", step.session_prefix)
            else:
                # already on screen, only its depth counts
                self.output.step_shift += INDENT
            level = entry.children

    def _print_meta_chain(self, step: "Step", meta_step: "MetaStep") -> None:
        """Print the block chain of ``meta_step``, outermost first."""
        key = meta_step.to_string()
        if key in self.scope.open_ancestors:
            return

        parent = meta_step.parent_meta_step
        if parent is not None:
            self._print_meta_chain(step, parent)

        self.scope.open_ancestors.push(key)
        owner = step.meta_step
        self.scope.events.emit(StepEvent.COMMENT, owner.to_string() + (owner.comment or ""))
        self.output.label(key, step.session_prefix)
