"""Locally cached file index backed by SQLite."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from fsearch.models.files import IndexedFile

if TYPE_CHECKING:
    from fsearch.data.db import Database
    from fsearch.data.protocols import IndexListener, Unsubscribe

logger = logging.getLogger(__name__)

_SELECT_FILES_SQL = """
SELECT file_id, path, name, extension, size, created_at, modified_at, mime_type,
       processing_status, tags_json, category, content_text
FROM files
"""

_UPSERT_SQL = """
INSERT OR REPLACE INTO files (
    file_id, path, name, extension, size, created_at, modified_at, mime_type,
    processing_status, tags_json, category, content_text, indexed_at
) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""


class LocalFileIndex:
    """File records written by ingestion and read by the local-index strategy.

    Listeners run as background tasks after every change, so writers never
    wait on a re-issued search. ``drain`` waits for the ones still running.
    """

    def __init__(self, db: Database) -> None:
        self._db = db
        self._listeners: list[IndexListener] = []
        self._pending: set[asyncio.Task[None]] = set()

    async def upsert_files(self, files: Iterable[IndexedFile]) -> int:
        """Insert or replace files by id.

        Returns:
            Number of files written.
        """
        indexed_at = datetime.now(UTC).isoformat()
        rows = [_file_to_row(file, indexed_at) for file in files]
        if not rows:
            return 0
        await self._db.execute_many(_UPSERT_SQL, rows)
        await self._db.commit()
        logger.debug("Indexed %d files", len(rows))
        self._notify()
        return len(rows)

    async def remove_file(self, file_id: str) -> bool:
        cursor = await self._db.execute("DELETE FROM files WHERE file_id = ?", (file_id,))
        await self._db.commit()
        removed = cursor.rowcount > 0
        if removed:
            self._notify()
        return removed

    async def count(self) -> int:
        row = await self._db.fetch_one("SELECT COUNT(*) as cnt FROM files")
        return int(row["cnt"]) if row else 0

    async def get_all_local(self) -> list[IndexedFile]:
        rows = await self._db.fetch_all(f"{_SELECT_FILES_SQL} ORDER BY name COLLATE NOCASE")
        return [_row_to_file(row) for row in rows]

    async def search_local(self, text: str) -> list[IndexedFile]:
        """Case-insensitive substring match over name, content, tags and category.

        A blank query returns every indexed file.
        """
        needle = text.strip().lower()
        if not needle:
            return await self.get_all_local()
        pattern = f"%{_escape_like(needle)}%"
        rows = await self._db.fetch_all(
            f"""{_SELECT_FILES_SQL}
                WHERE LOWER(name) LIKE ? ESCAPE '\\'
                   OR LOWER(content_text) LIKE ? ESCAPE '\\'
                   OR LOWER(tags_json) LIKE ? ESCAPE '\\'
                   OR LOWER(category) LIKE ? ESCAPE '\\'
                ORDER BY name COLLATE NOCASE""",
            (pattern, pattern, pattern, pattern),
        )
        return [_row_to_file(row) for row in rows]

    def subscribe(self, listener: IndexListener) -> Unsubscribe:
        """Register a change listener and return a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def drain(self) -> None:
        """Wait for every scheduled listener run to finish."""
        while self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            task = asyncio.create_task(listener())
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
            task.add_done_callback(_log_listener_failure)


def _log_listener_failure(task: asyncio.Task[None]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.exception("File index listener failed", exc_info=exc)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _file_to_row(file: IndexedFile, indexed_at: str) -> tuple[Any, ...]:
    return (
        file.id,
        file.path,
        file.name,
        file.extension,
        file.size,
        file.created_at.isoformat(),
        file.modified_at.isoformat(),
        file.mime_type,
        file.processing_status.value,
        json.dumps(file.tags),
        file.category,
        file.content,
        indexed_at,
    )


def _row_to_file(row: Any) -> IndexedFile:
    try:
        tags = json.loads(row["tags_json"] or "[]")
    except json.JSONDecodeError:
        logger.warning("Invalid tags JSON for file %s", row["file_id"])
        tags = []
    return IndexedFile(
        id=row["file_id"],
        path=row["path"],
        name=row["name"],
        extension=row["extension"] or "",
        size=int(row["size"] or 0),
        created_at=row["created_at"],
        modified_at=row["modified_at"],
        mime_type=row["mime_type"] or "",
        processing_status=row["processing_status"],
        tags=tags,
        category=row["category"] or "",
        content=row["content_text"] or "",
    )
