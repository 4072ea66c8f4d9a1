"""
Secret values for step arguments.

A value wrapped in ``Secret`` is passed to the helper unchanged but renders as
a fixed mask everywhere a step is displayed or logged.
"""

from typing import Any

MASK = "*****"


class Secret:
    """Wrapper marking a step argument as sensitive."""

    __slots__ = ("_value",)

    def __init__(self, value: Any) -> None:
        self._value = value

    @classmethod
    def secret(cls, value: Any) -> "Secret":
        """Wrap ``value`` unless it is already a secret."""
        if isinstance(value, cls):
            return value
        return cls(value)

    def get(self) -> Any:
        """Return the wrapped value."""
        return self._value

    def __str__(self) -> str:
        return MASK

    def __repr__(self) -> str:
        return f"Secret({MASK})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Secret):
            return self._value == other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash((Secret, self._value))


def reveal(value: Any) -> Any:
    """Unwrap a secret argument; other values pass through."""
    if isinstance(value, Secret):
        return value.get()
    return value
