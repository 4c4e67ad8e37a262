import asyncio
import json

import pytest

from chanstore import ABSENT, StoreConfig, init
from chanstore.core.storage import FileBackend, SQLiteBackend


@pytest.fixture
def temp_data_dir(tmp_path):
    """Create a temporary directory for store data."""
    data_dir = tmp_path / "wallet_data"
    data_dir.mkdir()
    return data_dir


@pytest.fixture(params=["file", "sqlite"])
def backend_factory(request, temp_data_dir):
    """Return a callable that opens a fresh backend on the same storage."""
    if request.param == "file":
        return lambda: FileBackend(temp_data_dir)
    return lambda: SQLiteBackend(temp_data_dir / "chanstore.db")


CHANNEL_STATE = {
    "multisigAddress": "0x9a2b",
    "userNeuteredExtendedKeys": ["xpub1", "xpub2"],
    "freeBalanceAppInstance": {"latestVersionNumber": 4, "latestTimeout": 172800},
}


def test_state_survives_restart(backend_factory):
    """Test that channel state is preserved across process restarts."""
    config = StoreConfig()

    # 1. First session writes channel state
    async def first_session():
        store = await init(backend_factory(), config)
        await store.set([
            ("store/channel/0x9a2b", CHANNEL_STATE),
            ("store/appInstanceIdToProposedAppInstance/0x01", {"appSeqNo": 1}),
            ("store/xpub", "xpub6CUGRUonZSQ4TWtTMmzXdrXDtypWKiKrhko4egpiMZbpiaQL2jkwSB1icqYh2cfDfVxdx4df189oLKnC5fSwqPfgyP3hooxujYzAu3fDVmz"),
            ("store/counter", 0),
        ])
        return store.snapshot()

    written = asyncio.run(first_session())

    # 2. Second session reads the same blob
    async def second_session():
        return await init(backend_factory(), config)

    store = asyncio.run(second_session())

    assert store.snapshot() == written
    assert store.get("store/channel") == {"0x9a2b": CHANNEL_STATE}
    assert store.get("store/appInstanceIdToProposedAppInstance") == {"0x01": {"appSeqNo": 1}}
    assert store.get("store/xpub").startswith("xpub6CUGR")
    assert store.get("store/counter") == 0
    assert store.get("store/missing") is ABSENT


def test_reset_survives_restart(backend_factory):
    """After reset, a new session finds no client state."""
    config = StoreConfig()

    async def wipe():
        store = await init(backend_factory(), config)
        await store.set([("store/channel/0x1", {"nonce": 1}), ("store/xpub", "xpub")])
        await store.reset()

    asyncio.run(wipe())

    async def reopen():
        return await init(backend_factory(), config)

    store = asyncio.run(reopen())
    assert len(store) == 0
    assert store.get("store/channel") == {}
    assert store.get("store/xpub") is ABSENT


def test_batch_mode_restart(backend_factory):
    """Batched writes are just as durable once set() returns."""
    config = StoreConfig(batch_writes=True)

    async def write():
        store = await init(backend_factory(), config)
        await store.set([("store/channel/a", 1), ("store/channel/b", 2)])

    asyncio.run(write())

    store = asyncio.run(init(backend_factory(), config))
    assert store.get("store/channel") == {"a": 1, "b": 2}


def test_blob_layout(temp_data_dir):
    """The persisted blob is one JSON object of namespaced string entries."""
    backend = FileBackend(temp_data_dir)
    config = StoreConfig()

    async def write():
        store = await init(backend, config)
        await store.set([("store/channel/a", {"n": 1}), ("store/raw", "text")])

    asyncio.run(write())

    blob = json.loads(backend.path_for(config.blob_key).read_text(encoding="utf-8"))
    assert blob == {
        "CF_NODE:store/channel/a": '{"n": 1}',
        "CF_NODE:store/raw": "text",
    }
