# durable key-value storage backing the in-memory stores
import asyncio
import json
import os.path
from contextlib import asynccontextmanager
from typing import Any, Optional

import aiosqlite

from utils.config import STORAGE_NAMESPACE, STORAGE_PATH
from utils.logger import get_logger

_logger = get_logger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS local_storage (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


class LocalStorage:
    """
    String keys to JSON values, namespaced as "<namespace>:<key>".

    Values are whatever json.dumps accepts; shapes are not versioned, so a
    caller that changes the shape of what it stores must cope on its own.
    """

    def __init__(self, path: str = STORAGE_PATH, namespace: str = STORAGE_NAMESPACE):
        self.path = path
        self.namespace = namespace
        self._initialized = False
        self._init_lock = asyncio.Lock()

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def _init_db(self, conn: aiosqlite.Connection) -> None:
        _logger.info(f"Initializing local storage at {self.path}...")
        await conn.executescript(_SCHEMA)
        await conn.commit()

    @asynccontextmanager
    async def connect(self):
        """Async context manager yielding an aiosqlite connection.

        Creates the parent directory and the storage table on first use.
        """
        if not self._initialized:
            async with self._init_lock:
                if not self._initialized:
                    parent = os.path.dirname(self.path)
                    if parent:
                        os.makedirs(parent, exist_ok=True)
                    async with aiosqlite.connect(self.path) as conn:
                        await self._init_db(conn)
                    self._initialized = True

        conn = await aiosqlite.connect(self.path)
        try:
            yield conn
        finally:
            await conn.close()

    async def get_item(self, key: str) -> Optional[Any]:
        """Decoded value stored under key, or None."""
        async with self.connect() as conn:
            cur = await conn.execute(
                "SELECT value FROM local_storage WHERE key = ?;", (self._key(key),)
            )
            row = await cur.fetchone()
            await cur.close()
        if not row:
            return None
        return json.loads(row[0])

    async def set_item(self, key: str, value: Any) -> None:
        payload = json.dumps(value)
        async with self.connect() as conn:
            await conn.execute(
                """
                INSERT INTO local_storage(key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value;
                """,
                (self._key(key), payload),
            )
            await conn.commit()
        _logger.debug(f"Stored {key} ({len(payload)} bytes)")

    async def remove_item(self, key: str) -> None:
        async with self.connect() as conn:
            await conn.execute(
                "DELETE FROM local_storage WHERE key = ?;", (self._key(key),)
            )
            await conn.commit()

    async def keys(self) -> list:
        """Keys of this namespace, without the prefix."""
        prefix = self._key("")
        async with self.connect() as conn:
            cur = await conn.execute(
                "SELECT key FROM local_storage WHERE key LIKE ? ORDER BY key;",
                (prefix + "%",),
            )
            rows = await cur.fetchall()
            await cur.close()
        return [row[0][len(prefix):] for row in rows]

    async def clear(self) -> None:
        """Remove every key of this namespace."""
        async with self.connect() as conn:
            await conn.execute(
                "DELETE FROM local_storage WHERE key LIKE ?;", (self._key("") + "%",)
            )
            await conn.commit()
