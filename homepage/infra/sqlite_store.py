"""
Embedded SQLite implementation of the KeyValueStore interface.
Keeps every key in a single kv table inside <directory>/store.sqlite3.
"""

import asyncio
import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Optional, Union

from ..domain.ports import KeyValueStore, StoreError


logger = logging.getLogger(__name__)


class SQLiteKeyValueStore(KeyValueStore):
    """
    Durable key-value store on a local SQLite file.

    Each operation uses its own connection and transaction, so SQLite's file
    locking serializes concurrent writes to the same key. Blocking calls run
    in a worker thread to keep the event loop free.
    """

    FILE_NAME = "store.sqlite3"

    def __init__(self, directory: Union[str, Path], busy_timeout: float = 5.0):
        """
        Initialize the store.

        Args:
            directory: Directory that holds the database file
            busy_timeout: Seconds to wait for a competing writer's lock
        """
        self.directory = Path(directory)
        self.db_path = self.directory / self.FILE_NAME
        self.busy_timeout = busy_timeout

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path, timeout=self.busy_timeout)

    async def open(self) -> None:
        """
        Create the directory and the kv table if needed.

        Raises:
            StoreError: If the database cannot be created
        """
        try:
            await asyncio.to_thread(self._init_db)
        except (OSError, sqlite3.Error) as e:
            raise StoreError(f"Failed to open store at {self.db_path}: {e}") from e

        logger.info(
            f"Opened key-value store: {self.db_path}",
            extra={"component": "sqlite_store", "path": str(self.db_path)}
        )

    def _init_db(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        with closing(self._connect()) as conn, conn:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )

    async def close(self) -> None:
        # Connections are per operation, nothing is held open
        logger.info("Key-value store closed", extra={"component": "sqlite_store"})

    async def get(self, key: str) -> Optional[str]:
        try:
            return await asyncio.to_thread(self._get, key)
        except sqlite3.Error as e:
            raise StoreError(f"Failed to read {key}: {e}") from e

    def _get(self, key: str) -> Optional[str]:
        with closing(self._connect()) as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    async def put(self, key: str, value: str) -> None:
        try:
            await asyncio.to_thread(self._put, key, value)
        except sqlite3.Error as e:
            raise StoreError(f"Failed to write {key}: {e}") from e

    def _put(self, key: str, value: str) -> None:
        with closing(self._connect()) as conn, conn:
            conn.execute(
                """
                INSERT INTO kv (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, value),
            )

    async def ping(self) -> bool:
        try:
            await asyncio.to_thread(self._ping)
            return True
        except sqlite3.Error as e:
            logger.warning(f"Store ping failed: {e}", extra={"component": "sqlite_store"})
            return False

    def _ping(self) -> None:
        with closing(self._connect()) as conn:
            conn.execute("SELECT 1 FROM kv LIMIT 1").fetchall()
