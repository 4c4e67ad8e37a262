"""
Durable Storage Module.

Backends for the single persisted blob:
- MemoryBackend (tests, ephemeral sessions)
- FileBackend (one JSON file per key)
- SQLiteBackend (key-value table)
"""

from chanstore.core.config import StoreConfig
from chanstore.core.storage.base import DurableBackend
from chanstore.core.storage.file_backend import FileBackend
from chanstore.core.storage.memory_backend import MemoryBackend
from chanstore.core.storage.sqlite_adapter import SQLiteBackend


def create_backend(config: StoreConfig) -> DurableBackend:
    """Build the backend named by config.backend, rooted at config.data_dir."""
    if config.backend == "file":
        return FileBackend(config.data_dir)
    if config.backend == "sqlite":
        return SQLiteBackend(config.data_dir / "chanstore.db")
    return MemoryBackend()


__all__ = [
    "DurableBackend",
    "FileBackend",
    "MemoryBackend",
    "SQLiteBackend",
    "create_backend",
]
