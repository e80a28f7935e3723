"""Shared fixtures for fsearch tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest

from fsearch.config import Config
from fsearch.data.db import Database
from fsearch.data.file_index import LocalFileIndex
from fsearch.models.files import IndexedFile
from fsearch.models.search import ResultItem

BASE_TIME = datetime(2024, 1, 1, tzinfo=UTC)

FileFactory = Callable[..., IndexedFile]


def _make_file(file_id: str, name: str | None = None, **overrides: Any) -> IndexedFile:
    name = name or f"file-{file_id}.txt"
    extension = name.rsplit(".", 1)[1] if "." in name else ""
    values: dict[str, Any] = {
        "id": file_id,
        "path": f"/data/{name}",
        "name": name,
        "extension": extension,
        "size": 1024,
        "created_at": BASE_TIME,
        "modified_at": BASE_TIME + timedelta(days=1),
        "mime_type": "text/plain",
    }
    values.update(overrides)
    return IndexedFile(**values)


@pytest.fixture
def make_file() -> FileFactory:
    """Factory for indexed files with sensible defaults."""
    return _make_file


@pytest.fixture
def make_item(make_file: FileFactory) -> Callable[..., ResultItem]:
    """Factory for result items wrapping a generated file."""

    def factory(file_id: str, score: float = 0.5, **file_overrides: Any) -> ResultItem:
        file = make_file(file_id, **file_overrides).to_record()
        return ResultItem(file=file, score=score)

    return factory


@pytest.fixture
async def in_memory_db() -> AsyncGenerator[Database]:
    """SQLite in-memory database for fast unit/integration tests."""
    db = Database(Path(":memory:"))
    await db.__aenter__()
    yield db  # type: ignore[misc]
    await db.__aexit__(None, None, None)


@pytest.fixture
async def file_index(in_memory_db: Database) -> LocalFileIndex:
    return LocalFileIndex(in_memory_db)


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Config with an isolated cache directory and no remote backend."""
    return Config(cache_dir=tmp_path / "cache")
