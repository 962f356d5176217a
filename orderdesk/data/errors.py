from __future__ import annotations

from typing import Optional


class StoreError(Exception):
    """A remote store call failed (non-2xx response or transport failure)."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NotAuthenticatedError(StoreError):
    """Session token missing, expired or rejected (401/403)."""


class NotFoundError(StoreError):
    """Requested record does not exist (404)."""


class StoreUnavailableError(StoreError):
    """Network-level failure: the store could not be reached."""
