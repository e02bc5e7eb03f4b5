"""Error types shared by the stores and the exchange codecs."""

from __future__ import annotations


class NotFoundError(LookupError):
    """Raised when an operation references an id absent from a store."""

    def __init__(self, kind: str, record_id: str) -> None:
        super().__init__(f"{kind} not found: {record_id}")
        self.kind = kind
        self.record_id = record_id


class ParseError(ValueError):
    """Serialized input could not be parsed at all."""


class FormatError(ValueError):
    """Serialized input parsed but lacks the required top-level structure."""


class ValidationError(ValueError):
    """A single record inside a backup failed field validation."""

    def __init__(self, index: int, reason: str) -> None:
        super().__init__(f"Invalid diagram at index {index}: {reason}")
        self.index = index
        self.reason = reason
