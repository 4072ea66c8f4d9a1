"""
Stack frame snapshots used for call-site identification.
"""

import hashlib
import itertools
import sys
import traceback
from dataclasses import dataclass
from functools import lru_cache
from types import CodeType, FrameType
from typing import Tuple


@dataclass(frozen=True)
class Frame:
    """An immutable view of one stack frame."""

    function_name: str
    file_name: str
    line_number: int
    column_number: int = 0

    @property
    def short_name(self) -> str:
        """Function name without its class or enclosing scopes."""
        return self.function_name.rsplit(".", 1)[-1]

    def location(self) -> str:
        return f"{self.file_name}:{self.line_number}"


@lru_cache(maxsize=1024)
def string_hash(text: str) -> str:
    """Short, stable digest of a string (file names hash to the same value all run)."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:12]


def call_site_id(frame: Frame) -> str:
    """Identifier of the physical call site a frame is executing."""
    return f"{frame.column_number}-{frame.line_number}-{string_hash(frame.file_name)}"


@lru_cache(maxsize=8192)
def _column_at(code: CodeType, lasti: int) -> int:
    # co_positions yields one entry per two-byte instruction
    positions = getattr(code, "co_positions", None)
    if positions is None or lasti < 0:
        return 0
    position = next(itertools.islice(positions(), lasti // 2, None), None)
    if not position or position[2] is None:
        return 0
    return position[2]


def _column(frame: FrameType) -> int:
    return _column_at(frame.f_code, frame.f_lasti)


def from_frame(frame: FrameType, line_number: int) -> Frame:
    code = frame.f_code
    return Frame(
        function_name=getattr(code, "co_qualname", code.co_name),
        file_name=code.co_filename,
        line_number=line_number,
        column_number=_column(frame),
    )


def capture_frames(skip: int = 1) -> Tuple[Frame, ...]:
    """
    Snapshot the current call stack, outermost frame first.

    Args:
        skip: Number of innermost frames to leave out, counting
            ``capture_frames`` itself (1 starts the snapshot at its caller)

    Returns:
        Tuple of frames from the outermost call down to the caller
    """
    start = sys._getframe(skip)
    frames = [from_frame(frame, line) for frame, line in traceback.walk_stack(start)]
    frames.reverse()
    return tuple(frames)
