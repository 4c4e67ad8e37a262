"""
Keyed Store - durable cache of state-channel data for the wallet client.

The store keeps a flat snapshot of "<namespace>:<path>" -> string entries
and mirrors the whole snapshot to a single blob in a durable backend after
every mutation. Paths are "/"-separated; a path ending in a container
suffix (e.g. ".../channel") reads as a directory of its children.

Usage:
    store = await init(backend, config)
    await store.set([("root/channel/0xabc", {"nonce": 1})])
    store.get("root/channel")   # {"0xabc": {"nonce": 1}}
"""

import asyncio
import json
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from chanstore.core.config import StoreConfig, load_config
from chanstore.core.errors import (
    BackendReadError,
    BackendWriteError,
    CorruptStoreError,
    InvalidPathError,
    SerializationError,
)
from chanstore.core.storage import DurableBackend, create_backend
from chanstore.core.store.path_index import PathIndex
from chanstore.core.store.values import (
    ABSENT,
    EncodedValue,
    StoredValue,
    encode_value,
)
from chanstore.utils.logger import get_logger, set_level
from chanstore.utils.validation import validate_pair, validate_path

logger = get_logger("store")


def parse_blob(raw: Optional[str]) -> Dict[str, str]:
    """
    Parse a persisted blob into a serialized snapshot.

    An absent or empty blob is an empty snapshot.

    Raises:
        CorruptStoreError: if the blob is not a JSON object of strings
    """
    if not raw:
        return {}

    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise CorruptStoreError(f"Persisted blob is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise CorruptStoreError(
            f"Persisted blob must be a JSON object, got {type(data).__name__}"
        )

    for key, value in data.items():
        if not isinstance(value, str):
            raise CorruptStoreError(
                f"Entry {key!r} must hold a string, got {type(value).__name__}"
            )

    return data


def _unpack_pair(pair: Any) -> Tuple[str, Any]:
    ok, error = validate_pair(pair)
    if not ok:
        raise InvalidPathError(error)

    if isinstance(pair, Mapping):
        path, value = pair["path"], pair["value"]
    elif isinstance(pair, (tuple, list)):
        path, value = pair
    else:
        path, value = pair.path, pair.value

    ok, error = validate_path(path)
    if not ok:
        raise InvalidPathError(error)
    return path, value


class KeyedStore:
    """
    Hierarchical key-value store over a single durable blob.

    Instances are frozen once constructed: attributes cannot be replaced
    or deleted. Obtain one through init() and pass it to every caller that
    needs store access.
    """

    __slots__ = (
        "_backend",
        "_config",
        "_namespace",
        "_entries",
        "_foreign",
        "_index",
        "_lock",
        "_synced",
        "_frozen",
    )

    def __init__(
        self,
        backend: DurableBackend,
        config: StoreConfig,
        snapshot: Optional[Dict[str, str]] = None,
    ):
        """
        Args:
            backend: Durable backend the snapshot is mirrored to
            config: Store configuration
            snapshot: Serialized snapshot as read from the blob
        """
        _set = object.__setattr__
        _set(self, "_backend", backend)
        _set(self, "_config", config)
        _set(self, "_namespace", config.namespace + ":")
        # path -> value for keys under our namespace
        _set(self, "_entries", {})
        # keys of sibling sub-stores sharing the blob, kept verbatim
        _set(self, "_foreign", {})
        _set(self, "_index", PathIndex())
        _set(self, "_lock", asyncio.Lock())
        _set(self, "_synced", True)

        for key, serialized in (snapshot or {}).items():
            if key.startswith(self._namespace):
                path = key[len(self._namespace):]
                self._entries[path] = EncodedValue(serialized)
                self._index.add(path)
            else:
                self._foreign[key] = serialized

        _set(self, "_frozen", True)

    def __setattr__(self, name: str, value: Any):
        raise AttributeError(f"{type(self).__name__} is frozen; cannot set {name!r}")

    def __delattr__(self, name: str):
        raise AttributeError(f"{type(self).__name__} is frozen; cannot delete {name!r}")

    def __repr__(self) -> str:
        return (
            f"KeyedStore(namespace={self._config.namespace!r}, "
            f"entries={len(self._entries)}, synced={self._synced})"
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: str) -> bool:
        return path in self._entries

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def backend(self) -> DurableBackend:
        return self._backend

    @property
    def is_synced(self) -> bool:
        """False when the last persist failed and memory is ahead of the blob."""
        return self._synced

    # =========================================================================
    # Reads
    # =========================================================================

    def get(self, path: str) -> Any:
        """
        Read a path.

        Returns the decoded value on an exact match. A path ending in a
        container suffix with no exact match returns a dict of its
        children keyed by their path relative to it (possibly empty).
        Any other string returns ABSENT.

        Raises:
            InvalidPathError: path is not a string
        """
        if not isinstance(path, str):
            raise InvalidPathError(f"path must be str, got {type(path).__name__}")

        stored = self._entries.get(path)
        if stored is not None:
            return stored.decode()

        if self._is_container(path):
            offset = len(path) + 1
            return {
                child[offset:]: self._entries[child].decode()
                for child in self._index.children(path)
            }

        return ABSENT

    def contains(self, path: str) -> bool:
        return path in self._entries

    def keys(self, prefix: str = "") -> List[str]:
        """List stored paths starting with prefix, in lexical order."""
        return list(self._index.with_prefix(prefix))

    def snapshot(self) -> Dict[str, str]:
        """Copy of the serialized snapshot, exactly as it is persisted."""
        data = dict(self._foreign)
        for path, stored in self._entries.items():
            data[self._namespace + path] = stored.serialized
        return data

    def _is_container(self, path: str) -> bool:
        return path.endswith(self._config.container_suffixes)

    # =========================================================================
    # Writes
    # =========================================================================

    async def set(self, pairs: Iterable[Any]):
        """
        Write (path, value) pairs in order.

        Strings are stored verbatim, anything else as JSON. Each pair is
        persisted before the next is applied (or once at the end when
        batch_writes is enabled).

        Raises:
            InvalidPathError: a pair or its path is malformed
            SerializationError: a value cannot be JSON-encoded; earlier
                pairs stay applied and later ones are not attempted.
                Its failed_paths lists earlier pairs whose persist failed
            BackendWriteError: after the whole batch, if any persist failed
        """
        batch = self._config.batch_writes
        written: List[str] = []
        failed: List[str] = []
        cause: Optional[BaseException] = None

        async with self._lock:
            try:
                for pair in pairs:
                    path, value = _unpack_pair(pair)
                    try:
                        stored = encode_value(path, value)
                    except SerializationError as exc:
                        # same list: a batch-mode flush below may still extend it
                        exc.failed_paths = failed
                        raise
                    self._put(path, stored)
                    written.append(path)

                    if not batch:
                        try:
                            await self._persist()
                        except BackendWriteError as exc:
                            failed.append(path)
                            cause = exc
            finally:
                if batch and written:
                    try:
                        await self._persist()
                    except BackendWriteError as exc:
                        failed.extend(written)
                        cause = exc

        if failed:
            raise BackendWriteError(
                f"Failed to persist {len(failed)} of {len(written)} writes",
                failed_paths=failed,
            ) from cause

    async def reset(self):
        """
        Remove every entry of this store and every key under the client
        prefix (sibling sub-stores sharing the blob), persisting after each
        deletion.

        Raises:
            BackendWriteError: after all deletions, if any persist failed
        """
        prefix = self._config.client_prefix
        batch = self._config.batch_writes
        removed: List[str] = []
        failed: List[str] = []
        cause: Optional[BaseException] = None

        async with self._lock:
            doomed = [
                key for key in sorted(self.snapshot())
                if key.startswith(self._namespace) or key.startswith(prefix)
            ]
            for key in doomed:
                self._remove(key)
                removed.append(key)

                if not batch:
                    try:
                        await self._persist()
                    except BackendWriteError as exc:
                        failed.append(key)
                        cause = exc

            if batch and removed:
                try:
                    await self._persist()
                except BackendWriteError as exc:
                    failed.extend(removed)
                    cause = exc

        logger.info(f"Reset removed {len(removed)} entries under {prefix!r}")

        if failed:
            raise BackendWriteError(
                f"Failed to persist {len(failed)} of {len(removed)} deletions",
                failed_paths=failed,
            ) from cause

    async def flush(self):
        """
        Persist the current snapshot once.

        The store never retries on its own; call this to re-synchronize
        after a BackendWriteError.
        """
        async with self._lock:
            await self._persist()

    def _put(self, path: str, stored: StoredValue):
        self._entries[path] = stored
        self._index.add(path)

    def _remove(self, key: str):
        if key.startswith(self._namespace):
            path = key[len(self._namespace):]
            del self._entries[path]
            self._index.discard(path)
        else:
            del self._foreign[key]

    async def _persist(self):
        blob = json.dumps(self.snapshot())
        try:
            await self._backend.write_blob(self._config.blob_key, blob)
        except Exception as exc:
            object.__setattr__(self, "_synced", False)
            logger.error(f"Persist to {self._config.blob_key!r} failed: {exc}")
            raise BackendWriteError(
                f"Durable write of {self._config.blob_key!r} failed: {exc}"
            ) from exc

        object.__setattr__(self, "_synced", True)
        logger.debug(f"Persisted {len(blob)} chars to {self._config.blob_key!r}")


async def init(
    backend: Optional[DurableBackend] = None,
    config: Optional[StoreConfig] = None,
) -> KeyedStore:
    """
    Materialize a store from the last persisted blob.

    Each call builds a new instance; callers own the once-per-process
    discipline.

    Args:
        backend: Durable backend; defaults to the one named by config
        config: Store configuration; defaults to load_config()

    Raises:
        BackendReadError: the backend read failed
        CorruptStoreError: the blob is not a JSON object of strings
    """
    config = config or load_config()
    set_level(config.log_level)
    backend = backend or create_backend(config)

    try:
        raw = await backend.read_blob(config.blob_key)
    except Exception as exc:
        raise BackendReadError(f"Failed to read {config.blob_key!r}: {exc}") from exc

    store = KeyedStore(backend, config, parse_blob(raw))
    logger.info(
        f"Store initialized from {type(backend).__name__} with {len(store)} entries"
    )
    return store
