"""
Tagged outcomes returned by store operations.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    IO = "io"


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    """
    Success-with-value or failure-with-kind.

    Validation, lookup and file problems are reported through this value
    rather than raised, so every call site sees the failure path.
    """

    success: bool
    value: T | None = None
    error: str | None = None
    kind: ErrorKind | None = None

    @classmethod
    def ok(cls, value: T | None = None) -> StoreResult[T]:
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, kind: ErrorKind, error: str) -> StoreResult[T]:
        return cls(success=False, error=error, kind=kind)

    def __bool__(self) -> bool:
        return self.success

    @property
    def is_validation_error(self) -> bool:
        return self.kind is ErrorKind.VALIDATION

    @property
    def is_not_found(self) -> bool:
        return self.kind is ErrorKind.NOT_FOUND

    @property
    def is_io_error(self) -> bool:
        return self.kind is ErrorKind.IO


@dataclass
class LoadReport:
    loaded: int = 0
    skipped: int = 0
    created: bool = False
    completed: bool = True
    cancelled: bool = False
