import asyncio
import sqlite3
import threading
from pathlib import Path
from typing import List, Optional

from chanstore.core.storage.base import DurableBackend
from chanstore.utils.logger import get_logger

logger = get_logger("storage.sqlite")


class SQLiteBackend(DurableBackend):
    """
    SQLite backend for durable blobs.

    Mirrors the key-value table mobile platforms put behind their async
    storage primitive: one TEXT value per TEXT key. Blocking sqlite calls
    run in a worker thread so the event loop is never stalled.
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._conn_local = threading.local()
        # every per-thread connection, so close() can reach them all
        self._connections: List[sqlite3.Connection] = []
        self._connections_lock = threading.Lock()

        # Ensure directory exists
        if not self.db_path.parent.exists():
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_schema()
        logger.debug(f"SQLiteBackend opened at {self.db_path}")

    def _get_conn(self) -> sqlite3.Connection:
        """Get or create connection for current thread."""
        if not hasattr(self._conn_local, "conn"):
            self._conn_local.conn = sqlite3.connect(
                self.db_path,
                timeout=30.0,
                check_same_thread=False
            )
            self._conn_local.conn.row_factory = sqlite3.Row
            self._conn_local.conn.execute("PRAGMA journal_mode=WAL;")
            # FULL: a committed write must survive power loss
            self._conn_local.conn.execute("PRAGMA synchronous=FULL;")
            with self._connections_lock:
                self._connections.append(self._conn_local.conn)
        return self._conn_local.conn

    def _init_schema(self):
        """Initialize database schema."""
        conn = self._get_conn()
        with conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)

    # =========================================================================
    # Blocking Operations
    # =========================================================================

    def put(self, key: str, value: str):
        """Save a key-value pair."""
        conn = self._get_conn()
        with conn:
            conn.execute(
                "INSERT OR REPLACE INTO kv_store (key, value) VALUES (?, ?)",
                (key, value)
            )

    def get(self, key: str) -> Optional[str]:
        """Get value by key."""
        conn = self._get_conn()
        cursor = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
        row = cursor.fetchone()
        return row['value'] if row else None

    def delete(self, key: str):
        conn = self._get_conn()
        with conn:
            conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))

    def close(self):
        """Close every connection opened by any thread; later calls reopen."""
        with self._connections_lock:
            connections, self._connections = self._connections, []
        for conn in connections:
            conn.close()
        self._conn_local = threading.local()
        logger.debug(f"SQLiteBackend closed {len(connections)} connections")

    # =========================================================================
    # DurableBackend
    # =========================================================================

    async def read_blob(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self.get, key)

    async def write_blob(self, key: str, data: str) -> None:
        await asyncio.to_thread(self.put, key, data)

    async def delete_blob(self, key: str) -> None:
        await asyncio.to_thread(self.delete, key)
