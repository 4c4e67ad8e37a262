"""
Durable backend contract.

A backend is the platform's persistent key-value primitive: it stores one
opaque string per external key and survives process restarts.
"""

from abc import ABC, abstractmethod
from typing import Optional


class DurableBackend(ABC):
    """
    Abstract durable key-value backend.

    Writes are treated as crash-consistent; the store does not compensate
    for partial writes.
    """

    @abstractmethod
    async def read_blob(self, key: str) -> Optional[str]:
        """Return the string stored under key, or None if absent."""

    @abstractmethod
    async def write_blob(self, key: str, data: str) -> None:
        """Store data under key, replacing any previous value. Raise on failure."""

    @abstractmethod
    async def delete_blob(self, key: str) -> None:
        """Remove key. A missing key is not an error."""
