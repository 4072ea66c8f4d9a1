"""
Base class for capability providers.
"""

from typing import Any, Dict, List, Optional

# Helper API that is never exposed as a step
RESERVED_NAMES = frozenset(("name", "config", "provides", "methods"))


class Helper:
    """
    A capability provider whose public methods become actor steps.

    Subclasses implement actions (``fill_field``, ``click``, ...) as plain or
    async methods; the actor wraps each call in a Step.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the helper.

        Args:
            config: Helper specific configuration
        """
        self.config: Dict[str, Any] = dict(config or {})

    @property
    def name(self) -> str:
        return type(self).__name__

    def provides(self, method_name: str) -> bool:
        """Whether this helper exposes ``method_name`` as a step."""
        if method_name.startswith("_") or method_name in RESERVED_NAMES:
            return False
        return callable(getattr(self, method_name, None))

    def methods(self) -> List[str]:
        """Public step methods, sorted by name."""
        return sorted(name for name in dir(self) if self.provides(name))
