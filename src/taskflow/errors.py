"""Error taxonomy shared by the engine, the REST client and the server.

Every failure in the ordering engine is local and recoverable: the
reconciler discards optimistic state and refetches, so none of these
exceptions is fatal to the process.
"""

from __future__ import annotations

from typing import Optional


class TaskflowError(Exception):
    """Base class for all Taskflow errors."""

    def __init__(self, message: str = "", *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(TaskflowError):
    """Malformed input: unknown task/list ids or a rejected request body."""


class NotFoundError(TaskflowError):
    """The moved task or its target list no longer exists (or is not owned)."""


class NetworkError(TaskflowError):
    """A persistence request failed to complete."""


class ConsistencyMismatch(TaskflowError):
    """The server response disagrees with the optimistic local assumption."""


class AuthenticationError(TaskflowError):
    """Missing, invalid or expired bearer token (HTTP 401/403)."""


class InvalidTransition(TaskflowError):
    """A drag event arrived in a phase that does not accept it."""
