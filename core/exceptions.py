"""Common exception classes for the core package.

All exceptions ultimately inherit from :class:`ReturnTrackerError`, allowing
callers to catch a single base class for any tracker failure while still
distinguishing individual error categories when needed.

Updates:
  v0.3.0 - 2026-04-19 - Add RemoteStoreError for remote persistence failures.
  v0.2.0 - 2026-03-11 - Add RecordValidationError for rejected form input.
  v0.1.0 - 2026-02-04 - Created module.
"""

from __future__ import annotations


class ReturnTrackerError(Exception):
    """Base exception for return tracker failures."""


class RecordNotFoundError(ReturnTrackerError):
    """Raised when a record id does not exist in the collection."""


class RecordValidationError(ReturnTrackerError):
    """Raised when form input cannot produce a valid record."""


class RecordStorageError(ReturnTrackerError):
    """Raised when the record collection cannot be persisted."""


class RemoteStoreError(RecordStorageError):
    """Raised when the remote JSON endpoint fails or rejects a request."""


__all__ = [
    "RecordNotFoundError",
    "RecordStorageError",
    "RecordValidationError",
    "RemoteStoreError",
    "ReturnTrackerError",
]
