"""
Domain exceptions shared by the storage, AI and route layers.
"""

from typing import Optional


class SereneMindError(Exception):
    """Base class for all application errors."""


class BadRequest(SereneMindError):
    """Client input is missing or invalid."""


class SessionNotFound(SereneMindError):
    """No session record exists for the given id."""

    def __init__(self, session_id: str):
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class StorageUnavailable(SereneMindError):
    """The backing directory cannot be created, read or written."""


class CorruptRecord(SereneMindError):
    """A session file exists but cannot be parsed into a Session."""

    def __init__(self, session_id: str, reason: str):
        super().__init__(f"Corrupt session record {session_id}: {reason}")
        self.session_id = session_id
        self.reason = reason


class ProviderError(SereneMindError):
    """The generative-language provider failed or returned an unusable answer."""

    def __init__(self, message: str, upstream: Optional[BaseException] = None):
        super().__init__(message)
        self.upstream = upstream


class InvalidEvaluationFormat(ProviderError):
    """The evaluation response did not contain a valid evaluation object."""
