"""
Step and MetaStep records.

Every command executed through the actor is wrapped in a ``Step`` which keeps
its name, arguments, status and the stack it was created from. A ``MetaStep``
wraps a higher-level action (a page-object method, a ``within`` block, a BDD
clause) and attributes the steps executed inside it to that action.
"""

import inspect
import json
import os
import re
import time
from typing import Any, Callable, List, Optional, Tuple

from steptree.calltree.classifier import innermost_user_frame
from steptree.calltree.frames import Frame, capture_frames
from steptree.calltree.scope import RunScope, get_run_scope
from steptree.config.settings import get_settings
from steptree.core.dry_run import DryRunValue
from steptree.core.types import CallTreeNode, StepStatus
from steptree.error_handling.exceptions import StatusTransitionError
from steptree.monitoring.logger import get_logger, log_step_event
from steptree.orchestration.communication import StepEvent
from steptree.security.secret import MASK, Secret, reveal

logger = get_logger(__name__)

BDD_PATTERN = re.compile(r"^(Given|When|Then|And)")
WITHIN_PATTERN = re.compile(r"^(Within)")

_CAMEL_BOUNDARY = re.compile(r"([A-Z])")
_WORD_START = re.compile(r"^(.)|\s(.)")

# Transitions a concrete step may take; anything else is a bookkeeping bug.
ALLOWED_TRANSITIONS = {
    StepStatus.PENDING: {StepStatus.QUEUED, StepStatus.SUCCESS, StepStatus.FAILED},
    StepStatus.QUEUED: {StepStatus.SUCCESS, StepStatus.FAILED},
    StepStatus.SUCCESS: set(),
    StepStatus.FAILED: set(),
}


class _Undefined:
    """Marker for an argument that was explicitly left undefined."""

    _instance: Optional["_Undefined"] = None

    def __new__(cls) -> "_Undefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "undefined"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()


def _has_custom_str(value: Any) -> bool:
    return type(value).__str__ is not object.__str__


def humanize_arg(arg: Any) -> str:
    """Render a single step argument for display."""
    if arg is None:
        return "null"
    if isinstance(arg, Secret):
        return MASK
    if isinstance(arg, (str, int, float, bool)) and not arg:
        return ""
    if isinstance(arg, bool):
        return json.dumps(arg)
    if isinstance(arg, str):
        return f'"{arg}"'
    if isinstance(arg, (list, tuple)):
        try:
            return json.dumps(list(arg), separators=(",", ":"))
        except (TypeError, ValueError):
            return f"[{','.join(str(item) for item in arg)}]"
    if arg is UNDEFINED:
        return "undefined"
    if callable(arg) and not isinstance(arg, DryRunValue):
        try:
            return inspect.getsource(arg).strip()
        except (OSError, TypeError):
            return repr(arg)
    if isinstance(arg, (int, float)):
        return str(arg)
    if isinstance(arg, dict):
        return json.dumps(arg, separators=(",", ":"), default=str)
    if _has_custom_str(arg):
        return str(arg)
    if hasattr(arg, "__dict__"):
        return json.dumps(vars(arg), separators=(",", ":"), default=str)
    return repr(arg)


class Step:
    """
    A single command executed through the actor.

    Args:
        helper: Capability provider whose method the step calls
        name: Step name, also the helper method by default
        scope: Run scope the step records into (process default if omitted)
    """

    def __init__(self, helper: Any, name: str, scope: Optional[RunScope] = None):
        self.actor = "I"
        self.helper = helper
        self.name = name
        self.helper_method = name
        self.status = StepStatus.PENDING
        self.prefix = self.suffix = self.session_prefix = ""
        self.comment = ""
        self.call_tree: List[CallTreeNode] = []
        self.args: List[Any] = []
        self.meta_step_id: Optional[int] = None
        self.started_at: Optional[float] = None
        self.finished_at: Optional[float] = None
        self.scope = scope or get_run_scope()
        self.raw_trace: Tuple[Frame, ...] = capture_frames(skip=2)

    @property
    def meta_step(self) -> Optional["MetaStep"]:
        """Meta step this step is attributed to, resolved through the arena."""
        return self.scope.meta_steps.get(self.meta_step_id)

    @meta_step.setter
    def meta_step(self, meta_step: Optional["MetaStep"]) -> None:
        self.meta_step_id = meta_step.meta_id if meta_step is not None else None

    @property
    def duration(self) -> Optional[float]:
        if self.started_at is None or self.finished_at is None:
            return None
        return self.finished_at - self.started_at

    def set_arguments(self, args: List[Any]) -> None:
        self.args = list(args)

    def set_call_tree(self) -> List[CallTreeNode]:
        """Build this step's call tree and merge it into the run history."""
        self.call_tree = self.scope.builder.build(self)
        return self.call_tree

    def run(self, *args: Any) -> Any:
        """
        Call the helper method with ``args``.

        Secret arguments are unwrapped only for the call itself. During a dry
        run the helper is not called and an inert stub is returned instead.
        The helper's result is returned as-is, so an awaitable must be awaited
        by the caller.

        Raises:
            Exception: Whatever the helper raises, after marking the step failed
        """
        self.args = list(args)
        if self.scope.dry_run:
            self.set_status(StepStatus.SUCCESS)
            return DryRunValue()

        try:
            method = getattr(self.helper, self.helper_method)
            result = method(*[reveal(arg) for arg in self.args])
            self.set_status(StepStatus.SUCCESS)
        except Exception:
            self.set_status(StepStatus.FAILED)
            raise
        return result

    def set_status(self, status: StepStatus) -> None:
        """Move to ``status`` and mirror it onto the meta step chain."""
        status = StepStatus(status)
        if status not in ALLOWED_TRANSITIONS[self.status]:
            raise StatusTransitionError(
                f"Step '{self.name}' cannot move from {self.status.value} to {status.value}",
                step_name=self.name,
                current_status=self.status.value,
                requested_status=status.value,
            )
        self.status = status
        self._propagate_status(status)

    def _propagate_status(self, status: StepStatus) -> None:
        meta_step = self.meta_step
        if meta_step is not None:
            meta_step.set_status(status)

    def humanize(self) -> str:
        """``fillField`` and ``fill_field`` both render as ``fill field``."""
        text = _CAMEL_BOUNDARY.sub(r" \1", self.name)
        text = text.replace("_", " ")
        return _WORD_START.sub(lambda match: match.group(0).lower(), text)

    def humanize_args(self) -> str:
        return ", ".join(humanize_arg(arg) for arg in self.args)

    def actor_text(self) -> str:
        return self.actor

    def summary(self) -> str:
        """Actor, humanized name and arguments, without decoration."""
        parts = (self.actor_text(), self.humanize(), self.humanize_args())
        return " ".join(part for part in parts if part)

    def to_string(self) -> str:
        return f"{self.prefix}{self.summary()}{self.suffix}"

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.summary()!r} {self.status.value}>"

    def to_code(self) -> str:
        return f"{self.prefix}{self.actor}.{self.name}({self.humanize_args()}){self.suffix}"

    def line(self) -> str:
        """Location in the test code this step was called from."""
        frame = innermost_user_frame(self.raw_trace)
        if frame is None:
            return ""
        test_root = str(get_settings().test_root.resolve())
        location = frame.location()
        if location.startswith(test_root + os.sep):
            location = "." + location[len(test_root):]
        return location

    def is_meta_step(self) -> bool:
        return isinstance(self, MetaStep)

    def has_bdd_ancestor(self) -> bool:
        """Whether any meta step above this one is a Given/When/Then/And clause."""
        return any(
            meta_step.is_bdd()
            for meta_step in self.scope.meta_steps.chain(self.meta_step_id)
        )


class MetaStep(Step):
    """
    A grouping step that attributes the steps run inside it to one action.

    While ``run`` executes, every step announced on ``step.before`` is tagged
    with this meta step. Nested meta steps subscribe later than their parents,
    so the innermost one wins. Failures inside ``run`` are recorded in
    ``status`` and not re-raised; the concrete steps report them.
    """

    def __init__(self, actor: str, method: str, scope: Optional[RunScope] = None):
        super().__init__(None, method, scope)
        self.actor = actor
        self.context: Any = None
        self.meta_id = self.scope.meta_steps.add(self)

    @property
    def parent_id(self) -> Optional[int]:
        return self.meta_step_id

    @parent_id.setter
    def parent_id(self, meta_id: Optional[int]) -> None:
        self.meta_step_id = meta_id

    @property
    def parent_meta_step(self) -> Optional["MetaStep"]:
        return self.meta_step

    def is_bdd(self) -> bool:
        return isinstance(self.actor, str) and bool(BDD_PATTERN.match(self.actor))

    def is_within(self) -> bool:
        return isinstance(self.actor, str) and bool(WITHIN_PATTERN.match(self.actor))

    def actor_text(self) -> str:
        if self.is_bdd() or self.is_within():
            return self.actor
        return f"{self.actor}:"

    def humanize(self) -> str:
        return self.name

    def set_context(self, context: Any) -> None:
        self.context = context

    def set_status(self, status: StepStatus) -> None:
        """Mirror a child's status; a failure is never overwritten."""
        status = StepStatus(status)
        if self.status != StepStatus.FAILED:
            self.status = status
        self._propagate_status(status)

    def run(self, fn: Callable[..., Any], *args: Any) -> Any:
        """
        Call ``fn`` with the context (if any) and ``args``.

        Returns:
            The function's result, or None when it raised
        """
        self.status = StepStatus.QUEUED
        self.set_arguments(list(args))

        arena = self.scope.meta_steps
        if self.parent_id is None:
            self.parent_id = arena.active_id()
        self.set_call_tree()

        def tag_step(step: Step) -> None:
            step.meta_step = self

        result = None
        arena.enter(self.meta_id)
        with self.scope.events.subscription(StepEvent.BEFORE, tag_step):
            try:
                self.started_at = time.time()
                if self.context is not None:
                    result = fn(self.context, *self.args)
                else:
                    result = fn(*self.args)
            except Exception as error:
                self.status = StepStatus.FAILED
                logger.debug(
                    f"Meta step '{self.summary()}' failed: {error}",
                    extra={"step_name": self.name, "actor": self.actor, "status": self.status.value},
                )
            finally:
                self.finished_at = time.time()
                arena.leave(self.meta_id)
        log_step_event("meta_step", self.name, self.actor, self.status.value)
        return result
