"""Service container with DI wiring."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from fsearch.data.db import Database
from fsearch.data.file_index import LocalFileIndex
from fsearch.data.remote import (
    HYBRID_PATH,
    HttpBackend,
    HttpKeywordBackend,
    HttpSemanticResolver,
    HttpSuggestionBackend,
)
from fsearch.services.history import HistoryLedger
from fsearch.services.search_session import SearchSession
from fsearch.services.strategies import default_chain
from fsearch.services.suggestion_service import SuggestionResolver

if TYPE_CHECKING:
    from fsearch.config import Config


@dataclass
class ServiceContainer:
    """Holds the search session and its collaborators. Built once at startup."""

    db: Database
    index: LocalFileIndex
    session: SearchSession
    remotes: list[HttpBackend] = field(default_factory=list)

    @classmethod
    async def create(cls, config: Config) -> ServiceContainer:
        """Async factory that wires all dependencies."""
        db = Database(config.db_path)
        await db.__aenter__()
        index = LocalFileIndex(db)

        semantic = hybrid = keyword = suggest = None
        if config.remote_enabled:
            url, timeout = config.backend_url, config.request_timeout
            semantic = HttpSemanticResolver(url, timeout)
            hybrid = HttpSemanticResolver(url, timeout, path=HYBRID_PATH)
            keyword = HttpKeywordBackend(url, timeout)
            suggest = HttpSuggestionBackend(url, timeout)
        remotes = [remote for remote in (semantic, hybrid, keyword, suggest) if remote is not None]

        chain = default_chain(
            semantic=semantic,
            keyword=keyword,
            index=index,
            hybrid=hybrid,
            synthetic_fallback=config.enable_synthetic_fallback,
        )
        session = SearchSession(
            chain,
            suggestions=SuggestionResolver(suggest, limit=config.suggestion_limit),
            history=HistoryLedger(config.history_capacity),
            index=index,
            items_per_page=config.items_per_page,
        )
        session.attach()
        return cls(db=db, index=index, session=session, remotes=remotes)

    async def close(self) -> None:
        """Shut down all services."""
        self.session.close()
        await self.index.drain()
        for remote in self.remotes:
            await remote.close()
        await self.db.__aexit__(None, None, None)
