# Exception hierarchy for secureguard.

from __future__ import annotations


class SecureGuardError(Exception):
    """Base class for all errors raised by this package."""


class EmptyInputError(SecureGuardError, ValueError):
    """The user supplied nothing but whitespace."""

    def __init__(self, message: str = "Please enter a URL") -> None:
        super().__init__(message)


class InvalidUrlError(SecureGuardError, ValueError):
    """The input could not be turned into a well-formed http(s) URL."""

    def __init__(
        self,
        message: str = "Please enter a valid URL (e.g., example.com or https://example.com)",
    ) -> None:
        super().__init__(message)


class AiAdapterError(SecureGuardError):
    """The AI provider call failed or returned something unusable."""


class PersistenceError(SecureGuardError):
    """Reading from or writing to the local store failed."""


class CheckInProgressError(SecureGuardError):
    """A check was started while another one was still running."""
