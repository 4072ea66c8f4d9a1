"""
Orchestration module exports.
"""

from steptree.orchestration.communication import (
    EventDispatcher,
    LifecycleEvent,
    StepEvent,
)

__all__ = [
    "EventDispatcher",
    "LifecycleEvent",
    "StepEvent",
]
