"""Error types raised by the matching core."""

from __future__ import annotations


class MatchingError(Exception):
    """Base class for errors surfaced to callers of the matching core."""


class ValidationError(MatchingError):
    """Malformed or out-of-range input for a named field."""

    def __init__(self, field: str, reason: str):
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


class NotFoundError(MatchingError):
    """The seeker profile referenced by id or serial number does not exist."""

    def __init__(self, reference: str):
        super().__init__(f"Profile not found: {reference}")
        self.reference = reference
