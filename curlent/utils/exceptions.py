"""Exception hierarchy for curlent.

Errors raised before the transfer loop starts are fatal and surface to the
command line. Errors detected inside the loop are converted into terminal
phases by the lifecycle controller.
"""

from __future__ import annotations

from typing import Any


class CurlentError(Exception):
    """Base exception for all curlent errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize curlent error."""
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class ValidationError(CurlentError):
    """Data validation errors."""


class ConfigurationError(ValidationError):
    """Malformed configuration values or command-line usage."""


class IdentifierError(ValidationError):
    """Malformed magnet URI or unreadable torrent descriptor."""


class IdentifierNotFoundError(IdentifierError):
    """Local torrent descriptor does not exist."""


class NetworkError(CurlentError):
    """Network-related errors."""


class InterfaceDownError(NetworkError):
    """Kill-switch interface is not usable."""


class EngineError(CurlentError):
    """Transfer engine failures."""


class PersistenceError(CurlentError):
    """Engine state could not be saved or loaded."""


class PhaseTransitionError(CurlentError):
    """Attempt to move the lifecycle to an earlier phase."""
