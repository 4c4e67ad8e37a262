"""
chanstore

Durable key-value cache for a wallet's state-channel client:
- Hierarchical "/" paths over a single persisted JSON blob
- Directory reads for container paths (channels, proposed app instances)
- Write-through persistence after every mutation
"""

from chanstore.core.config import StoreConfig, load_config
from chanstore.core.errors import (
    StoreError,
    CorruptStoreError,
    BackendReadError,
    BackendWriteError,
    SerializationError,
    InvalidPathError,
)
from chanstore.core.store import ABSENT, Entry, KeyedStore, init

__version__ = "0.1.0"

__all__ = [
    "StoreConfig",
    "load_config",
    "StoreError",
    "CorruptStoreError",
    "BackendReadError",
    "BackendWriteError",
    "SerializationError",
    "InvalidPathError",
    "ABSENT",
    "Entry",
    "KeyedStore",
    "init",
]
