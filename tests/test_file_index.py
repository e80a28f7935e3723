"""Tests for the SQLite-backed local file index."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import pytest

from fsearch.data.db import SCHEMA_VERSION, Database
from fsearch.data.file_index import LocalFileIndex
from fsearch.models.files import IndexedFile, ProcessingStatus

FileFactory = Callable[..., IndexedFile]


class TestLocalFileIndex:
    @pytest.mark.asyncio
    async def test_upsert_and_list_sorted_by_name(
        self, file_index: LocalFileIndex, make_file: FileFactory
    ) -> None:
        written = await file_index.upsert_files(
            [make_file("1", "zeta.txt"), make_file("2", "Alpha.md"), make_file("3", "beta.pdf")]
        )
        assert written == 3
        assert await file_index.count() == 3
        names = [f.name for f in await file_index.get_all_local()]
        assert names == ["Alpha.md", "beta.pdf", "zeta.txt"]

    @pytest.mark.asyncio
    async def test_upsert_replaces_by_id(
        self, file_index: LocalFileIndex, make_file: FileFactory
    ) -> None:
        await file_index.upsert_files([make_file("1", "old.txt")])
        await file_index.upsert_files([make_file("1", "new.txt")])
        files = await file_index.get_all_local()
        assert [f.name for f in files] == ["new.txt"]

    @pytest.mark.asyncio
    async def test_fields_round_trip(
        self, file_index: LocalFileIndex, make_file: FileFactory
    ) -> None:
        original = make_file(
            "1",
            "Budget 2024.xlsx",
            size=512_000,
            modified_at=datetime(2024, 1, 20, 9, 45, tzinfo=UTC),
            processing_status=ProcessingStatus.PROCESSING,
            tags=["finance", "2024"],
            category="spreadsheet",
            content="quarterly numbers",
        )
        await file_index.upsert_files([original])
        (stored,) = await file_index.get_all_local()
        assert stored == original

    @pytest.mark.asyncio
    async def test_search_matches_name_content_tags_and_category(
        self, file_index: LocalFileIndex, make_file: FileFactory
    ) -> None:
        await file_index.upsert_files(
            [
                make_file("name", "Invoice March.pdf"),
                make_file("content", "a.txt", content="see the INVOICE total"),
                make_file("tag", "b.txt", tags=["invoices"]),
                make_file("category", "c.txt", category="invoice"),
                make_file("none", "d.txt", content="unrelated"),
            ]
        )
        found = {f.id for f in await file_index.search_local("invoice")}
        assert found == {"name", "content", "tag", "category"}

    @pytest.mark.asyncio
    async def test_blank_search_returns_everything(
        self, file_index: LocalFileIndex, make_file: FileFactory
    ) -> None:
        await file_index.upsert_files([make_file("1"), make_file("2")])
        assert len(await file_index.search_local("  ")) == 2

    @pytest.mark.asyncio
    async def test_like_wildcards_are_literal(
        self, file_index: LocalFileIndex, make_file: FileFactory
    ) -> None:
        await file_index.upsert_files(
            [make_file("1", "100% done.txt"), make_file("2", "plain.txt")]
        )
        assert [f.id for f in await file_index.search_local("%")] == ["1"]
        assert await file_index.search_local("_") == []

    @pytest.mark.asyncio
    async def test_remove_file(self, file_index: LocalFileIndex, make_file: FileFactory) -> None:
        await file_index.upsert_files([make_file("1")])
        assert await file_index.remove_file("1") is True
        assert await file_index.remove_file("1") is False
        assert await file_index.count() == 0

    @pytest.mark.asyncio
    async def test_listeners_are_notified_until_unsubscribed(
        self, file_index: LocalFileIndex, make_file: FileFactory
    ) -> None:
        calls: list[str] = []

        async def listener() -> None:
            calls.append("changed")

        unsubscribe = file_index.subscribe(listener)
        await file_index.upsert_files([make_file("1")])
        await file_index.remove_file("1")
        await file_index.remove_file("missing")
        unsubscribe()
        await file_index.upsert_files([make_file("2")])
        await file_index.drain()

        assert calls == ["changed", "changed"]

    @pytest.mark.asyncio
    async def test_writes_do_not_wait_for_listeners(
        self, file_index: LocalFileIndex, make_file: FileFactory
    ) -> None:
        release = asyncio.Event()
        finished: list[str] = []

        async def slow_listener() -> None:
            await release.wait()
            finished.append("done")

        file_index.subscribe(slow_listener)
        assert await file_index.upsert_files([make_file("1")]) == 1
        assert finished == []

        release.set()
        await file_index.drain()
        assert finished == ["done"]

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_break_writes(
        self,
        file_index: LocalFileIndex,
        make_file: FileFactory,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        async def broken() -> None:
            raise RuntimeError("listener bug")

        file_index.subscribe(broken)
        assert await file_index.upsert_files([make_file("1")]) == 1
        await file_index.drain()
        assert await file_index.count() == 1
        assert "File index listener failed" in caplog.text

    @pytest.mark.asyncio
    async def test_empty_upsert_is_a_no_op(self, file_index: LocalFileIndex) -> None:
        calls: list[str] = []

        async def listener() -> None:
            calls.append("changed")

        file_index.subscribe(listener)
        assert await file_index.upsert_files([]) == 0
        assert calls == []


class TestDatabase:
    @pytest.mark.asyncio
    async def test_schema_version_is_recorded(self, in_memory_db: Database) -> None:
        row = await in_memory_db.fetch_one(
            "SELECT value FROM app_meta WHERE key = 'schema_version'"
        )
        assert row is not None
        assert int(row["value"]) == SCHEMA_VERSION
        assert in_memory_db.schema_rebuilt is True

    @pytest.mark.asyncio
    async def test_reopening_keeps_data(self, tmp_path: Path, make_file: FileFactory) -> None:
        db_path = tmp_path / "index.db"
        async with Database(db_path) as db:
            await LocalFileIndex(db).upsert_files([make_file("1")])
        async with Database(db_path) as db:
            assert db.schema_rebuilt is False
            assert await LocalFileIndex(db).count() == 1

    @pytest.mark.asyncio
    async def test_conn_requires_connection(self, tmp_path: Path) -> None:
        db = Database(tmp_path / "x.db")
        with pytest.raises(RuntimeError, match="not connected"):
            _ = db.conn
