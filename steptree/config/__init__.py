"""
Configuration module exports.
"""

from steptree.config.settings import (
    LEVEL_DEBUG,
    LEVEL_MINIMAL,
    LEVEL_STEPS,
    LEVEL_VERBOSE,
    ReporterOptions,
    Settings,
    get_settings,
)

__all__ = [
    "Settings",
    "ReporterOptions",
    "get_settings",
    "LEVEL_MINIMAL",
    "LEVEL_STEPS",
    "LEVEL_DEBUG",
    "LEVEL_VERBOSE",
]
