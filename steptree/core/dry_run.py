"""
Inert stand-in values returned by steps during a dry run.
"""

from typing import Any

PLACEHOLDER = "<VALUE>"


class DryRunValue:
    """Stub whose every attribute, item and call yields another stub."""

    __slots__ = ()

    def __getattr__(self, name: str) -> "DryRunValue":
        if name.startswith("__") and name.endswith("__"):
            raise AttributeError(name)
        return DryRunValue()

    def __getitem__(self, key: Any) -> "DryRunValue":
        return DryRunValue()

    def __call__(self, *args: Any, **kwargs: Any) -> "DryRunValue":
        return DryRunValue()

    def __str__(self) -> str:
        return PLACEHOLDER

    def __repr__(self) -> str:
        return PLACEHOLDER

    def __format__(self, format_spec: str) -> str:
        return PLACEHOLDER


def is_dry_run_value(value: Any) -> bool:
    return isinstance(value, DryRunValue)
