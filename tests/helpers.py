"""Shared test backends."""

import asyncio
from typing import Iterable, Optional

from chanstore.core.storage import MemoryBackend


class FlakyBackend(MemoryBackend):
    """Memory backend whose Nth writes (1-based) raise OSError."""

    def __init__(self, fail_on: Iterable[int] = (), initial=None):
        super().__init__(initial)
        self.fail_on = set(fail_on)
        self.attempts = 0

    async def write_blob(self, key: str, data: str) -> None:
        self.attempts += 1
        if self.attempts in self.fail_on:
            raise OSError("storage full")
        await super().write_blob(key, data)


class BrokenReadBackend(MemoryBackend):
    async def read_blob(self, key: str) -> Optional[str]:
        raise OSError("platform denied access")


class YieldingBackend(MemoryBackend):
    """Memory backend that hands control back to the loop on every write."""

    async def write_blob(self, key: str, data: str) -> None:
        await asyncio.sleep(0)
        await super().write_blob(key, data)
