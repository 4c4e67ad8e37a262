"""In-memory durable backend for tests and ephemeral sessions."""

from typing import Dict, Optional

from chanstore.core.storage.base import DurableBackend


class MemoryBackend(DurableBackend):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.blobs: Dict[str, str] = dict(initial or {})
        self.write_count = 0

    async def read_blob(self, key: str) -> Optional[str]:
        return self.blobs.get(key)

    async def write_blob(self, key: str, data: str) -> None:
        self.blobs[key] = data
        self.write_count += 1

    async def delete_blob(self, key: str) -> None:
        self.blobs.pop(key, None)
