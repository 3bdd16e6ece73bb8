"""
Store Module

Record storage and persistence layer.

This module provides:
- In-memory authoritative record map guarded for concurrent access
- Tagged success/failure results for every operation
- Background file loading with a bounded wait
- Atomic full-file saves with a documented copy fallback
"""

__version__ = "0.1.0"

from .outcome import ErrorKind, LoadReport, StoreResult
from .repository import DEFAULT_LOAD_TIMEOUT_S, RecordStore

__all__ = [
    "DEFAULT_LOAD_TIMEOUT_S",
    "ErrorKind",
    "LoadReport",
    "RecordStore",
    "StoreResult",
]
