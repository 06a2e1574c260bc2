"""Exceptions raised by the Stand App client."""

from __future__ import annotations


class StandAppError(Exception):
    """Base class for Stand App client errors."""


class ValidationError(StandAppError):
    """Required input was missing, so the request was never sent."""

    def __init__(self, message: str = "Please fill in all fields.", missing: tuple[str, ...] = ()):
        super().__init__(message)
        self.message = message
        self.missing = missing


class StoreError(StandAppError):
    """The persistent store could not be written."""
