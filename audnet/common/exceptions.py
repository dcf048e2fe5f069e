"""
Custom exceptions for audnet.
"""

from typing import Any


class AudnetError(Exception):
    """Base exception for audnet."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigError(AudnetError):
    """Configuration related errors."""

    pass


class BadInputError(AudnetError):
    """Client-correctable problem with a bid request or downstream reply."""

    pass


class TransportError(AudnetError):
    """Downstream call failed before an HTTP response was received."""

    pass
