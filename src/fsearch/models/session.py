"""Search session snapshot model."""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field

from fsearch.models.search import (
    FilterSet,
    ResultItem,
    SearchOutcome,
    SortDirection,
    SortKey,
    StrategyId,
)


class SessionState(BaseModel):
    """Immutable snapshot of a search session.

    The session replaces the whole snapshot on every change, so a value read
    by a consumer never changes underneath it.
    """

    model_config = ConfigDict(frozen=True)

    query: str = ""
    filters: FilterSet = Field(default_factory=FilterSet)
    sort_key: SortKey = SortKey.RELEVANCE
    sort_direction: SortDirection = SortDirection.DESC
    current_page: int = Field(default=1, ge=1)
    items_per_page: int = Field(default=20, ge=1)
    results: tuple[ResultItem, ...] = ()
    total: int = Field(default=0, ge=0)
    outcome: SearchOutcome | None = None
    selected_ids: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()
    history: tuple[str, ...] = ()
    is_searching: bool = False
    last_strategy: StrategyId | None = None
    last_error: str | None = None
    preferred_strategy: StrategyId | None = None

    @property
    def max_page(self) -> int:
        return math.ceil(self.total / self.items_per_page)

    @property
    def result_ids(self) -> tuple[str, ...]:
        return tuple(item.file.id for item in self.results)
