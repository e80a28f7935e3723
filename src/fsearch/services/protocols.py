"""Protocol definitions for services."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from fsearch.models.search import FilterSet, SortDirection, SortKey, StrategyId
from fsearch.models.session import SessionState


class SearchSessionProtocol(Protocol):
    """The whole surface result grids, filter panels and pagers may call."""

    @property
    def state(self) -> SessionState: ...

    async def search(
        self,
        text: str,
        filters: FilterSet | Mapping[str, Any] | None = None,
        *,
        prefer: StrategyId | None = None,
    ) -> SessionState: ...

    def clear_search(self) -> SessionState: ...

    async def set_filters(self, partial: FilterSet | Mapping[str, Any]) -> SessionState: ...

    def set_sorting(
        self, key: SortKey | str, direction: SortDirection | str = SortDirection.DESC
    ) -> SessionState: ...

    async def go_to_page(self, page: int) -> SessionState: ...

    def toggle_result_selection(self, result_id: str) -> SessionState: ...

    def select_all_results(self) -> SessionState: ...

    def clear_selection(self) -> SessionState: ...

    async def get_suggestions(self, partial: str) -> list[str]: ...

    def add_to_history(self, text: str) -> SessionState: ...

    def clear_history(self) -> SessionState: ...
