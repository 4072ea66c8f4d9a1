"""
Call-tree construction from captured stack traces.
"""

from typing import TYPE_CHECKING, List, Sequence

from steptree.calltree.classifier import FrameClassifier, innermost_user_frame
from steptree.calltree.frames import Frame, call_site_id
from steptree.core.types import ROOT_ID, CallTreeNode, FrameKind
from steptree.monitoring.logger import get_logger

if TYPE_CHECKING:
    from steptree.calltree.history import HistoryStore

logger = get_logger(__name__)


def build_path(
    frames: Sequence[Frame],
    classifier: FrameClassifier,
    last_page_object: Sequence[CallTreeNode] = (),
) -> List[CallTreeNode]:
    """
    Reduce a stack (outermost frame first) to an ordered call-tree path.

    Boundary frames are each rooted at level 0; only the last boundary before
    a grouping frame matters for display, so they are not chained. Grouping
    frames chain to the previous path entry. When the first grouping frame is
    met with nothing recorded yet, the path is seeded with the call site of the
    most recent page-object call so the step is stitched to that call.

    Args:
        frames: Stack frames, outermost first
        classifier: Boundary/grouping predicates
        last_page_object: Seed prefix from the history store

    Returns:
        Path of nodes, empty when no frame qualifies
    """
    path: List[CallTreeNode] = []

    for frame in frames:
        if classifier.is_boundary(frame):
            path.append(CallTreeNode(
                id=call_site_id(frame),
                parent_id=ROOT_ID,
                kind=FrameKind.BOUNDARY,
            ))
        elif classifier.is_grouping_call(frame):
            if not path:
                path.extend(node.model_copy(update={"description": None}) for node in last_page_object)
            path.append(CallTreeNode(
                id=call_site_id(frame),
                parent_id=path[-1].id if path else ROOT_ID,
                kind=FrameKind.GROUPING,
            ))

    return path


def anchors_steps(step) -> bool:
    """Page-object meta steps anchor the steps they run; blocks and clauses do not."""
    return step.is_meta_step() and not (step.is_bdd() or step.is_within())


class CallTreeBuilder:
    """Builds a step's call tree and merges it into the run's history."""

    def __init__(self, history: "HistoryStore", classifier: FrameClassifier) -> None:
        self.history = history
        self.classifier = classifier

    def build(self, step) -> List[CallTreeNode]:
        """
        Build, annotate and record the call tree of ``step``.

        The last node carries the step's own rendering. A step whose stack
        holds no boundary or grouping frame gets an empty tree and is simply
        not tracked in the history. A page-object call is the exception: it
        is rooted at the user frame that made the call, so the steps it runs
        always have a labelled ancestor to be seeded with.
        """
        page_object = anchors_steps(step)
        path = build_path(
            step.raw_trace,
            self.classifier,
            self.history.get_last_page_object_frame(),
        )
        if not path and page_object:
            caller = innermost_user_frame(step.raw_trace)
            if caller is not None:
                path = [CallTreeNode(id=call_site_id(caller), parent_id=ROOT_ID, kind=FrameKind.BOUNDARY)]
        if not path:
            logger.debug(f"No call tree for step {step.name}")
            return path

        path[-1] = path[-1].model_copy(update={"description": step.summary()})
        self.history.insert(path, page_object=page_object)
        logger.debug(
            f"Call tree for {step.name}: {' > '.join(node.id for node in path)}",
            extra={"step_name": step.name, "call_id": path[-1].id},
        )
        return path
