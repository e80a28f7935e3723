"""Bounded, deduplicated query history."""

from __future__ import annotations

DEFAULT_CAPACITY = 20


class HistoryLedger:
    """Most-recent-first list of past queries without duplicates."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY, entries: list[str] | None = None) -> None:
        if capacity < 1:
            msg = f"History capacity must be positive, got {capacity}"
            raise ValueError(msg)
        self._capacity = capacity
        self._entries: list[str] = []
        for entry in reversed(entries or []):
            self.add(entry)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def entries(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def add(self, query: str) -> bool:
        """Move ``query`` to the front. Blank queries are ignored.

        Returns:
            True if the ledger changed.
        """
        if not query.strip():
            return False
        self._entries = [query, *(item for item in self._entries if item != query)]
        del self._entries[self._capacity :]
        return True

    def clear(self) -> None:
        self._entries = []

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, query: object) -> bool:
        return query in self._entries
