"""Custom exception hierarchy for pycharlotte."""

from __future__ import annotations


class RelayError(Exception):
    """Base exception for all pycharlotte errors."""


class RelayConfigError(RelayError):
    """Invalid or missing relay configuration."""


class MappingConfigError(RelayConfigError):
    """Invalid path mapping table entry.

    Raised while the table is being built (unknown unit kind, malformed
    wire name, duplicate wire field), never while deltas are transformed.
    """

    def __init__(self, message: str, *, path: str = "") -> None:
        self.path = path
        super().__init__(message)
