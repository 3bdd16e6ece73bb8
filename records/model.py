"""
Record value type and its line format.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, replace


SCORE_MIN = 0.0
SCORE_MAX = 100.0

FIELD_DELIMITER = ","
_FIELD_COUNT = 3

_ID_PATTERN = re.compile(r"\+?[0-9]+")
_FLOAT_PATTERN = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")


@dataclass(frozen=True)
class ParseError:
    """A line that could not be decoded into a Record."""

    line: str
    reason: str

    def __str__(self) -> str:
        return f"{self.reason}: {self.line!r}"


@dataclass(frozen=True)
class Record:
    id: int
    name: str
    score: float

    def encode(self) -> str:
        return f"{self.id}{FIELD_DELIMITER}{self.name}{FIELD_DELIMITER}{self.score:.2f}"

    def describe(self) -> str:
        return f"Record{{id={self.id}, name='{self.name}', score={self.score:.2f}}}"

    def validate(self) -> str | None:
        """Return the first violated field constraint, or None if the record is valid."""
        if isinstance(self.id, bool) or not isinstance(self.id, int) or self.id <= 0:
            return "ID must be a positive integer"
        if not isinstance(self.name, str) or not self.name.strip():
            return "Name cannot be empty"
        if isinstance(self.score, bool) or not isinstance(self.score, (int, float)):
            return f"Score must be between {SCORE_MIN:g} and {SCORE_MAX:g}"
        if math.isnan(self.score) or not SCORE_MIN <= self.score <= SCORE_MAX:
            return f"Score must be between {SCORE_MIN:g} and {SCORE_MAX:g}"
        return None

    def normalized(self) -> Record:
        """Copy with the name trimmed and the score stored as a float."""
        return replace(self, name=self.name.strip(), score=float(self.score))

    def has_lossy_name(self) -> bool:
        """True when the name cannot survive an encode/decode round trip."""
        return any(ch in self.name for ch in (FIELD_DELIMITER, "\n", "\r"))

    @classmethod
    def decode(cls, line: str) -> Record | ParseError:
        """
        Decode one persisted line.

        Never raises: malformed input is reported as a ParseError so that a
        loader can skip it and keep going.
        """
        parts = line.strip().split(FIELD_DELIMITER)
        if len(parts) != _FIELD_COUNT:
            return ParseError(line, f"expected {_FIELD_COUNT} fields, got {len(parts)}")

        raw_id, raw_name, raw_score = (part.strip() for part in parts)

        if not _ID_PATTERN.fullmatch(raw_id):
            return ParseError(line, f"id is not an integer: {raw_id!r}")
        record_id = int(raw_id)
        if record_id <= 0:
            return ParseError(line, f"id must be positive: {record_id}")

        if not _FLOAT_PATTERN.fullmatch(raw_score):
            return ParseError(line, f"score is not a number: {raw_score!r}")
        score = float(raw_score)
        if not math.isfinite(score):
            return ParseError(line, f"score is not finite: {raw_score!r}")

        return cls(id=record_id, name=raw_name, score=score)
