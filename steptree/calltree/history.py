"""
Run-scoped history of call-tree nodes.
"""

import itertools
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence

from steptree.core.types import ROOT_ID, CallTreeNode, FrameKind
from steptree.monitoring.logger import get_logger

logger = get_logger(__name__)


@dataclass
class HistoryNode:
    """A call site seen during the run and the call sites invoked from it."""

    id: str
    description: Optional[str] = None
    children: Dict[str, "HistoryNode"] = field(default_factory=dict)


class HistoryStore:
    """
    Nested mapping of call-site id to history node.

    Paths are merged in: nodes are found or created under their parent's
    context (the root mapping for level-0 nodes), descriptions are
    overwritten by the latest insertion and children keep first-seen order.
    Single writer (the call-tree builder), read by the printer between steps.
    """

    def __init__(self) -> None:
        self._root: Dict[str, HistoryNode] = {}
        self._last_page_object: List[CallTreeNode] = []

    def insert(self, path: Sequence[CallTreeNode], page_object: bool = False) -> None:
        """
        Merge a call-tree path into the history.

        Args:
            path: Ordered nodes as produced by the call-tree builder
            page_object: The path belongs to a page-object call; its call
                site becomes the seed for steps that cannot see it
        """
        if not path:
            return

        level = self._root
        for node in path:
            if node.parent_id == ROOT_ID:
                level = self._root
            entry = level.get(node.id)
            if entry is None:
                entry = HistoryNode(id=node.id)
                level[node.id] = entry
            if node.description is not None:
                entry.description = node.description
            level = entry.children

        if page_object:
            self._last_page_object = [
                node.model_copy(update={"description": None})
                for node in itertools.takewhile(lambda node: node.kind == FrameKind.BOUNDARY, path)
            ]

    def get(self) -> Mapping[str, HistoryNode]:
        """Read-only view of the root level."""
        return MappingProxyType(self._root)

    def get_last_page_object_frame(self) -> List[CallTreeNode]:
        """
        Root-level call-site nodes of the most recent page-object call.

        Grouping frames are left out: a step run by that call still has them
        on its own stack.
        """
        return list(self._last_page_object)

    def forget_page_object(self) -> None:
        self._last_page_object = []

    def find(self, path: Sequence[CallTreeNode]) -> Optional[HistoryNode]:
        """Resolve the node a path ends at, or None when any level is missing."""
        entry: Optional[HistoryNode] = None
        level: Mapping[str, HistoryNode] = self._root
        for node in path:
            if node.parent_id == ROOT_ID:
                level = self._root
            entry = level.get(node.id)
            if entry is None:
                return None
            level = entry.children
        return entry

    def size(self) -> int:
        """Total number of nodes at all levels."""
        pending = list(self._root.values())
        count = 0
        while pending:
            entry = pending.pop()
            count += 1
            pending.extend(entry.children.values())
        return count

    def clear(self) -> None:
        self._root.clear()
        self._last_page_object = []
        logger.debug("Call history cleared")
