"""
Frame classification for call-tree reconstruction.

The builder only ever asks two questions about a frame: does it open a
scenario, hook, within or session block (a boundary), and is it a call into a
page object or other grouped method (a grouping call). Keeping the heuristic
behind this interface lets tests and alternative runners swap it out.
"""

import os
import sysconfig
from abc import ABC, abstractmethod
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple

from steptree.calltree.frames import Frame

BOUNDARY_NAMES: Tuple[str, ...] = (
    "Scenario",
    "beforeSuite",
    "before",
    "afterSuite",
    "after",
    "within",
    "session",
)

# Iteration helpers and anonymous scopes never represent a page-object call.
EXCLUDED_NAMES: Tuple[str, ...] = (
    "<listcomp>",
    "<dictcomp>",
    "<setcomp>",
    "<genexpr>",
    "<lambda>",
    "<module>",
)

CONTAINER_MODULE = "container.py"

_PACKAGE_DIR = str(Path(__file__).resolve().parent.parent)


class FrameClassifier(ABC):
    """Predicates the call-tree builder uses to read a stack."""

    @abstractmethod
    def is_boundary(self, frame: Frame) -> bool:
        """Whether the frame marks a scenario, hook, within or session entry."""

    @abstractmethod
    def is_grouping_call(self, frame: Frame) -> bool:
        """Whether the frame is a wrapped method call that groups steps."""


@lru_cache(maxsize=None)
def _foreign_roots() -> Tuple[str, ...]:
    roots = set()
    for key in ("stdlib", "platstdlib", "purelib", "platlib"):
        path = sysconfig.get_paths().get(key)
        if path:
            roots.add(os.path.realpath(path))
    return tuple(sorted(roots))


@lru_cache(maxsize=4096)
def is_foreign_file(file_name: str) -> bool:
    """Interpreter internals, the standard library and installed packages."""
    if not file_name or file_name.startswith("<"):
        return True
    path = os.path.realpath(file_name)
    parts = Path(path).parts
    if "site-packages" in parts or "dist-packages" in parts:
        return True
    return any(path.startswith(root + os.sep) for root in _foreign_roots())


@lru_cache(maxsize=4096)
def is_package_file(file_name: str) -> bool:
    """Files belonging to steptree itself."""
    return os.path.realpath(file_name).startswith(_PACKAGE_DIR + os.sep)


class DefaultFrameClassifier(FrameClassifier):
    """
    Name-based classifier for scenario -> block -> page object -> step stacks.

    Boundary frames are recognised by a fixed vocabulary matched
    case-insensitively against the qualified function name, so
    ``test_login_scenario``, ``TestLoginScenario.test_submit`` and
    ``before_suite`` qualify. Grouping frames are ``Class.method`` shaped
    calls from user code; steptree's own internals and the container module
    are excluded.
    """

    def __init__(
        self,
        boundary_names: Optional[Iterable[str]] = None,
        extra_boundary_names: Optional[Iterable[str]] = None,
        excluded_names: Optional[Iterable[str]] = None,
    ) -> None:
        names = list(boundary_names if boundary_names is not None else BOUNDARY_NAMES)
        names.extend(extra_boundary_names or [])
        self.boundary_names = tuple(name.lower() for name in names if name)
        self.excluded_names = tuple(excluded_names if excluded_names is not None else EXCLUDED_NAMES)

    def is_boundary(self, frame: Frame) -> bool:
        if is_foreign_file(frame.file_name):
            return False
        # a nested function is judged by its own name, not its enclosing scope
        name = frame.function_name.rsplit("<locals>.", 1)[-1].lower()
        return any(fragment in name for fragment in self.boundary_names)

    def is_grouping_call(self, frame: Frame) -> bool:
        if is_foreign_file(frame.file_name) or is_package_file(frame.file_name):
            return False
        if os.path.basename(frame.file_name) == CONTAINER_MODULE:
            return False
        if any(name in frame.function_name for name in self.excluded_names):
            return False

        segments = frame.function_name.split(".")
        if len(segments) < 2:
            return False
        # ``outer.<locals>.helper`` is a nested function, not a method
        return not segments[-2].startswith("<")


def innermost_user_frame(frames: Sequence[Frame]) -> Optional[Frame]:
    """Innermost frame of user code, skipping installed libraries and steptree."""
    for frame in reversed(frames):
        if is_foreign_file(frame.file_name) or is_package_file(frame.file_name):
            continue
        return frame
    return None
