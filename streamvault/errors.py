"""Exceptions raised across StreamVault."""
from typing import Optional


class FetchError(Exception):
    """Base class for metadata catalog fetch failures."""
    pass


class NotFound(FetchError):
    """The catalog answered 404. Retrying through another route cannot help."""
    pass


class Unauthorized(FetchError):
    """The catalog rejected the API key (401)."""
    pass


class AllStrategiesFailed(FetchError):
    """Every access strategy was tried without a usable response."""

    def __init__(self, message: str, last_error: Optional[BaseException] = None):
        super().__init__(message)
        self.last_error = last_error


class MalformedMessage(Exception):
    """A playback surface message could not be understood."""
    pass


class PersistenceUnavailable(Exception):
    """The local database could not be read or written."""
    pass
