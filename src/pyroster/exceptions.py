"""Custom exception hierarchy for pyroster."""

from __future__ import annotations


class RosterError(Exception):
    """Base exception for all pyroster errors."""


class RosterConfigError(RosterError):
    """Invalid or missing configuration."""


class RosterSourceError(RosterError):
    """Transient failure reported by the user source (simulated network error)."""

    def __init__(self, message: str, *, operation: str = "") -> None:
        self.operation = operation
        super().__init__(message)
