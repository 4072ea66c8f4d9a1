"""
Run-scoped tracker state.

Everything the builder and printer mutate lives on a ``RunScope`` that is
passed to them explicitly: the call history, the open-ancestor stack, the
meta-step arena and the event dispatcher. Reset it between tests and runs
that share a process.
"""

from typing import TYPE_CHECKING, Dict, Iterator, List, Optional

from steptree.calltree.builder import CallTreeBuilder
from steptree.calltree.classifier import DefaultFrameClassifier, FrameClassifier
from steptree.calltree.history import HistoryStore
from steptree.monitoring.logger import get_logger
from steptree.orchestration.communication import EventDispatcher

if TYPE_CHECKING:
    from steptree.core.step import MetaStep

logger = get_logger(__name__)


class AncestorStack:
    """
    Ids of ancestor labels currently printed and still open, most recent first.

    Pushing an id that is already open is a no-op, so the stack never holds
    duplicates.
    """

    def __init__(self) -> None:
        self._ids: List[str] = []

    def push(self, ancestor_id: str) -> bool:
        """Open ``ancestor_id``; returns False when it was already open."""
        if ancestor_id in self._ids:
            return False
        self._ids.insert(0, ancestor_id)
        return True

    def pop(self) -> Optional[str]:
        """Close the most recently opened ancestor."""
        if not self._ids:
            return None
        return self._ids.pop(0)

    def clear(self) -> None:
        self._ids.clear()

    def __contains__(self, ancestor_id: object) -> bool:
        return ancestor_id in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._ids))

    def __len__(self) -> int:
        return len(self._ids)

    def snapshot(self) -> List[str]:
        return list(self._ids)


class MetaStepArena:
    """
    Flat table of meta steps keyed by integer id.

    Parent links between meta steps are stored as ids on the meta steps
    themselves; the arena resolves them. It also tracks which meta steps are
    running so a meta step started inside another one records its parent.
    """

    def __init__(self) -> None:
        self._records: Dict[int, "MetaStep"] = {}
        self._active: List[int] = []
        self._next_id = 1

    def add(self, meta_step: "MetaStep") -> int:
        meta_id = self._next_id
        self._next_id += 1
        self._records[meta_id] = meta_step
        return meta_id

    def get(self, meta_id: Optional[int]) -> Optional["MetaStep"]:
        if meta_id is None:
            return None
        return self._records.get(meta_id)

    def chain(self, meta_id: Optional[int]) -> List["MetaStep"]:
        """Meta step ``meta_id`` followed by its ancestors, innermost first."""
        chain = []
        seen = set()
        current = self.get(meta_id)
        while current is not None and current.meta_id not in seen:
            seen.add(current.meta_id)
            chain.append(current)
            current = self.get(current.parent_id)
        return chain

    def enter(self, meta_id: int) -> None:
        self._active.append(meta_id)

    def leave(self, meta_id: int) -> None:
        if meta_id in self._active:
            self._active.remove(meta_id)

    def active_id(self) -> Optional[int]:
        """Id of the innermost meta step currently running."""
        return self._active[-1] if self._active else None

    def prune(self) -> int:
        """
        Drop meta steps that are no longer running.

        Running meta steps and their parents are kept. Steps that pointed at a
        dropped meta step resolve to no meta step from then on.

        Returns:
            Number of meta steps dropped
        """
        running = set()
        for meta_id in self._active:
            running.update(meta_step.meta_id for meta_step in self.chain(meta_id))
        finished = [meta_id for meta_id in self._records if meta_id not in running]
        for meta_id in finished:
            del self._records[meta_id]
        return len(finished)

    def clear(self) -> None:
        self._records.clear()
        self._active.clear()

    def __len__(self) -> int:
        return len(self._records)


class RunScope:
    """State shared by the tracker for one test run."""

    def __init__(
        self,
        classifier: Optional[FrameClassifier] = None,
        dispatcher: Optional[EventDispatcher] = None,
        dry_run: bool = False,
    ) -> None:
        self.history = HistoryStore()
        self.open_ancestors = AncestorStack()
        self.meta_steps = MetaStepArena()
        self.classifier = classifier or DefaultFrameClassifier()
        self.events = dispatcher or EventDispatcher()
        self.builder = CallTreeBuilder(self.history, self.classifier)
        self.dry_run = dry_run

    def reset_test(self) -> None:
        """
        Start a test: forget open ancestors, the last page-object call and
        finished meta steps. The call history is kept for the whole run.
        """
        self.open_ancestors.clear()
        self.history.forget_page_object()
        dropped = self.meta_steps.prune()
        if dropped:
            logger.debug(f"Dropped {dropped} finished meta steps")

    def reset(self) -> None:
        """Drop all run state; listeners on the dispatcher are kept."""
        self.history.clear()
        self.open_ancestors.clear()
        self.meta_steps.clear()
        logger.debug("Run scope reset")


_default_scope: Optional[RunScope] = None


def get_run_scope() -> RunScope:
    """Process default scope, created on first use from settings."""
    global _default_scope
    if _default_scope is None:
        from steptree.config.settings import get_settings

        settings = get_settings()
        _default_scope = RunScope(
            classifier=DefaultFrameClassifier(extra_boundary_names=settings.boundary_names),
            dry_run=settings.dry_run,
        )
    return _default_scope


def reset_run_scope() -> None:
    """Discard the process default scope; the next lookup builds a fresh one."""
    global _default_scope
    _default_scope = None
