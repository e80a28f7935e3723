"""Async SQLite connection manager using aiosqlite."""

from __future__ import annotations

import logging
from pathlib import Path
from types import TracebackType
from typing import Any

import aiosqlite

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS files (
    file_id TEXT PRIMARY KEY,
    path TEXT NOT NULL,
    name TEXT NOT NULL,
    extension TEXT NOT NULL DEFAULT '',
    size INTEGER NOT NULL DEFAULT 0 CHECK (size >= 0),
    created_at TEXT NOT NULL,
    modified_at TEXT NOT NULL,
    mime_type TEXT NOT NULL DEFAULT '',
    processing_status TEXT NOT NULL DEFAULT 'completed' CHECK (
        processing_status IN ('pending', 'processing', 'completed', 'error')
    ),
    tags_json TEXT NOT NULL DEFAULT '[]',
    category TEXT NOT NULL DEFAULT '',
    content_text TEXT NOT NULL DEFAULT '',
    indexed_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_files_name ON files(name);
CREATE INDEX IF NOT EXISTS idx_files_extension ON files(extension);
CREATE INDEX IF NOT EXISTS idx_files_modified ON files(modified_at);
"""


class Database:
    """Async SQLite connection manager using aiosqlite."""

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        self._conn: aiosqlite.Connection | None = None
        self.schema_rebuilt = False

    async def __aenter__(self) -> Database:
        await self.connect()
        return self

    async def connect(self) -> Database:
        """Connect to SQLite and ensure schema."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = await aiosqlite.connect(str(self._db_path))
        self._conn.row_factory = aiosqlite.Row
        await self._conn.execute("PRAGMA journal_mode=WAL")
        await self._conn.execute("PRAGMA synchronous=NORMAL")
        await self._ensure_schema()
        await self._conn.commit()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the SQLite connection."""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None

    @property
    def conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            msg = "Database not connected. Use 'async with Database(path) as db:'"
            raise RuntimeError(msg)
        return self._conn

    async def execute(self, sql: str, params: tuple[Any, ...] = ()) -> aiosqlite.Cursor:
        """Execute a SQL statement."""
        return await self.conn.execute(sql, params)

    async def execute_many(self, sql: str, params_seq: list[tuple[Any, ...]]) -> None:
        """Execute a SQL statement with many parameter sets."""
        await self.conn.executemany(sql, params_seq)

    async def fetch_all(self, sql: str, params: tuple[Any, ...] = ()) -> list[aiosqlite.Row]:
        """Fetch all rows from a query."""
        cursor = await self.conn.execute(sql, params)
        return await cursor.fetchall()  # type: ignore[return-value]

    async def fetch_one(self, sql: str, params: tuple[Any, ...] = ()) -> aiosqlite.Row | None:
        """Fetch a single row from a query."""
        cursor = await self.conn.execute(sql, params)
        return await cursor.fetchone()  # type: ignore[return-value]

    async def commit(self) -> None:
        """Commit the current transaction."""
        await self.conn.commit()

    async def _ensure_schema(self) -> None:
        """Rebuild schema when version changes; otherwise ensure all objects exist."""
        self.schema_rebuilt = False
        await self.conn.execute("""
            CREATE TABLE IF NOT EXISTS app_meta (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)
        row = await self.fetch_one("SELECT value FROM app_meta WHERE key = 'schema_version'")
        current_version = int(row["value"]) if row and str(row["value"]).isdigit() else 0
        if current_version == SCHEMA_VERSION:
            await self.conn.executescript(SCHEMA_SQL)
            return

        self.schema_rebuilt = True
        logger.info("Rebuilding DB schema from version %s to %s", current_version, SCHEMA_VERSION)
        await self.conn.executescript("DROP TABLE IF EXISTS files;")
        await self.conn.executescript(SCHEMA_SQL)
        await self.conn.execute(
            "INSERT OR REPLACE INTO app_meta (key, value) VALUES ('schema_version', ?)",
            (str(SCHEMA_VERSION),),
        )
