"""
Unit tests for durable backends.
"""

import asyncio

import pytest

from chanstore import StoreConfig
from chanstore.core.storage import (
    FileBackend,
    MemoryBackend,
    SQLiteBackend,
    create_backend,
)


@pytest.fixture(params=["memory", "file", "sqlite"])
def backend(request, tmp_path):
    """Each backend implementation, rooted in a temp directory."""
    if request.param == "file":
        yield FileBackend(tmp_path / "blobs")
    elif request.param == "sqlite":
        backend = SQLiteBackend(tmp_path / "db" / "store.db")
        yield backend
        backend.close()
    else:
        yield MemoryBackend()


class TestBackendContract:
    """Behavior every backend shares."""

    def test_missing_key(self, backend):
        """Reading a key that was never written returns None."""
        assert asyncio.run(backend.read_blob("@missing")) is None

    def test_write_then_read(self, backend):
        async def scenario():
            await backend.write_blob("@MetaMask:InstaPay", '{"a": "1"}')
            return await backend.read_blob("@MetaMask:InstaPay")

        assert asyncio.run(scenario()) == '{"a": "1"}'

    def test_overwrite(self, backend):
        """A write replaces the previous blob entirely."""
        async def scenario():
            await backend.write_blob("k", "first")
            await backend.write_blob("k", "second")
            return await backend.read_blob("k")

        assert asyncio.run(scenario()) == "second"

    def test_delete(self, backend):
        """delete_blob removes the key; deleting again is a no-op."""
        async def scenario():
            await backend.write_blob("k", "v")
            await backend.delete_blob("k")
            await backend.delete_blob("k")
            return await backend.read_blob("k")

        assert asyncio.run(scenario()) is None

    def test_keys_are_independent(self, backend):
        async def scenario():
            await backend.write_blob("a", "1")
            await backend.write_blob("b", "2")
            return await backend.read_blob("a"), await backend.read_blob("b")

        assert asyncio.run(scenario()) == ("1", "2")


class TestFileBackend:
    """Tests specific to the file backend."""

    def test_unsafe_key_characters(self, tmp_path):
        """Keys map to safe file names inside the data directory."""
        backend = FileBackend(tmp_path)
        path = backend.path_for("@MetaMask:InstaPay")
        assert path.parent == tmp_path
        assert path.name == "_MetaMask_InstaPay.json"

    def test_no_temp_file_left(self, tmp_path):
        backend = FileBackend(tmp_path)
        asyncio.run(backend.write_blob("k", "v"))
        assert [p.name for p in tmp_path.iterdir()] == ["k.json"]


class TestSQLiteBackend:
    """Tests specific to the SQLite backend."""

    def test_close_releases_connections(self, tmp_path):
        """close() closes every open connection and data stays on disk."""
        backend = SQLiteBackend(tmp_path / "store.db")
        asyncio.run(backend.write_blob("k", "v"))
        assert backend._connections

        backend.close()
        assert backend._connections == []

        reopened = SQLiteBackend(tmp_path / "store.db")
        try:
            assert asyncio.run(reopened.read_blob("k")) == "v"
        finally:
            reopened.close()

    def test_usable_after_close(self, tmp_path):
        """A closed backend reconnects on its next call."""
        backend = SQLiteBackend(tmp_path / "store.db")
        asyncio.run(backend.write_blob("k", "v"))
        backend.close()
        assert asyncio.run(backend.read_blob("k")) == "v"
        backend.close()


class TestCreateBackend:
    """Tests for building a backend from configuration."""

    def test_memory(self):
        assert isinstance(create_backend(StoreConfig()), MemoryBackend)

    def test_file(self, tmp_path):
        backend = create_backend(StoreConfig(backend="file", data_dir=tmp_path))
        assert isinstance(backend, FileBackend)
        assert backend.data_dir == tmp_path

    def test_sqlite(self, tmp_path):
        backend = create_backend(StoreConfig(backend="sqlite", data_dir=tmp_path))
        assert isinstance(backend, SQLiteBackend)
        assert backend.db_path == tmp_path / "chanstore.db"
