from __future__ import annotations


class GenieError(Exception):
    """Base class for every failure raised by geniewp."""


class InvalidInput(GenieError, ValueError):
    pass


class ThemeAlreadyExists(GenieError):
    pass


class StorageError(GenieError):
    pass


class RemoteAPIError(GenieError):
    """The remote endpoint answered with an error body or a non-success status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransportError(GenieError):
    """The remote endpoint could not be reached."""


class MalformedAIResponse(GenieError):
    pass


class AIUnavailable(GenieError):
    """Informational: generation proceeded without AI content."""
