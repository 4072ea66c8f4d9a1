"""
Security module exports.
"""

from steptree.security.secret import MASK, Secret, reveal

__all__ = [
    "MASK",
    "Secret",
    "reveal",
]
