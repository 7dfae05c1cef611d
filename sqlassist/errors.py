from __future__ import annotations

from typing import Optional


class AssistantError(Exception):
    """Base class for errors surfaced to callers of the assistant."""

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        super().__init__(message if not details else f"{message}: {details}")


class ValidationError(AssistantError):
    """Required input missing or malformed."""


class SourceUnavailableError(AssistantError):
    """No local data file and no remote connection. Reported as an advisory."""


class EmptySourceError(AssistantError):
    """The data file loaded but produced zero rows."""


class RemoteAuthError(AssistantError):
    """Authentication against the warehouse failed or identified the wrong user."""

    def __init__(self, message: str, details: Optional[str] = None, errno: Optional[int] = None):
        self.errno = errno
        super().__init__(message, details)


class RemoteExecutionError(AssistantError):
    """A statement failed on the warehouse."""


class InternalProcessingError(AssistantError):
    """Unexpected failure while processing a request."""
