"""
Records Module

The fixed-schema entity held by the store.

This module provides:
- The immutable Record value (id, name, score)
- Line encoding used for display and persistence
- Per-line decoding that reports ParseError values instead of raising
- The validation predicate shared by the store and the loader
"""

__version__ = "0.1.0"

from .model import ParseError, Record, SCORE_MAX, SCORE_MIN

__all__ = [
    "ParseError",
    "Record",
    "SCORE_MAX",
    "SCORE_MIN",
]
