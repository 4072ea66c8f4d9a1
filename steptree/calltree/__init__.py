"""
Call-tree reconstruction: frames, classification, path building and history.
"""

from steptree.calltree.frames import Frame, call_site_id, capture_frames
from steptree.calltree.classifier import (
    BOUNDARY_NAMES,
    DefaultFrameClassifier,
    FrameClassifier,
)
from steptree.calltree.builder import CallTreeBuilder, build_path
from steptree.calltree.history import HistoryNode, HistoryStore
from steptree.calltree.scope import (
    AncestorStack,
    MetaStepArena,
    RunScope,
    get_run_scope,
    reset_run_scope,
)

__all__ = [
    "Frame",
    "call_site_id",
    "capture_frames",
    "BOUNDARY_NAMES",
    "FrameClassifier",
    "DefaultFrameClassifier",
    "build_path",
    "CallTreeBuilder",
    "HistoryNode",
    "HistoryStore",
    "AncestorStack",
    "MetaStepArena",
    "RunScope",
    "get_run_scope",
    "reset_run_scope",
]
