"""
Store error taxonomy.

Every failure the store surfaces derives from StoreError. Missing keys are
not errors: get() returns ABSENT instead.
"""

from typing import Iterable, List, Optional


class StoreError(Exception):
    """Base class for all chanstore errors."""


class CorruptStoreError(StoreError):
    """The persisted blob could not be parsed into a snapshot."""


class BackendReadError(StoreError):
    """The durable backend failed to return the persisted blob."""


class SerializationError(StoreError):
    """A value passed to set() cannot be JSON-encoded."""

    def __init__(self, path: str, reason: str):
        self.path = path
        # paths written earlier in the same set() whose persist failed
        self.failed_paths: List[str] = []
        super().__init__(f"Cannot serialize value for {path!r}: {reason}")


class BackendWriteError(StoreError):
    """
    One or more persists to the durable backend failed.

    The in-memory snapshot still holds every write; failed_paths lists the
    mutations whose persist did not settle.
    """

    def __init__(self, message: str, failed_paths: Optional[Iterable[str]] = None):
        self.failed_paths: List[str] = list(failed_paths or [])
        super().__init__(message)


class InvalidPathError(StoreError, ValueError):
    """A path is not a non-empty string."""
