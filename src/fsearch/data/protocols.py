"""Protocol definitions for search collaborators."""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from typing import Any, Protocol

from result import Result

from fsearch.models.files import IndexedFile
from fsearch.models.search import FilterSet, RemoteSearchResponse

IndexListener = Callable[[], Coroutine[Any, Any, None]]
Unsubscribe = Callable[[], None]


class SemanticResolver(Protocol):
    """AI-backed resolver. Also used for the hybrid endpoint."""

    async def resolve(
        self, text: str, limit: int = 20, offset: int = 0
    ) -> Result[RemoteSearchResponse, str]: ...


class KeywordBackend(Protocol):
    """Plain full-text and filter backend."""

    async def resolve(
        self,
        text: str,
        filters: FilterSet | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Result[RemoteSearchResponse, str]: ...


class LocalFileIndexProtocol(Protocol):
    """Locally cached file set populated by an external ingestion process."""

    async def search_local(self, text: str) -> list[IndexedFile]: ...

    async def get_all_local(self) -> list[IndexedFile]: ...

    def subscribe(self, listener: IndexListener) -> Unsubscribe: ...


class SuggestionBackend(Protocol):
    """Remote query-completion service."""

    async def suggest(self, partial: str) -> Result[list[str], str]: ...
