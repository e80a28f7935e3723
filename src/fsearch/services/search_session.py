"""Search session: the orchestrator UI layers talk to."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from fsearch.models.search import (
    FilterSet,
    Query,
    SearchOutcome,
    SortDirection,
    SortKey,
    StrategyId,
)
from fsearch.models.session import SessionState
from fsearch.services.history import HistoryLedger
from fsearch.services.pagination import clamp_page, is_valid_page, offset_for
from fsearch.services.ranking import sort_results
from fsearch.services.suggestion_service import SuggestionResolver

if TYPE_CHECKING:
    from fsearch.data.protocols import LocalFileIndexProtocol, Unsubscribe
    from fsearch.services.strategies import StrategyChain

logger = logging.getLogger(__name__)

EXHAUSTED_MESSAGE = "All search sources failed"
INVALID_FILTERS_MESSAGE = "Invalid filters"


class SearchSession:
    """Owns query, filter, sort, page, selection, suggestion and history state.

    Every change replaces the whole ``SessionState`` snapshot. Each dispatch
    carries a sequence number and only the most recently issued one may write
    its outcome; earlier dispatches that resolve late are discarded.
    """

    def __init__(
        self,
        chain: StrategyChain,
        suggestions: SuggestionResolver | None = None,
        history: HistoryLedger | None = None,
        index: LocalFileIndexProtocol | None = None,
        items_per_page: int = 20,
    ) -> None:
        self._chain = chain
        self._suggestions = suggestions or SuggestionResolver()
        self._history = history or HistoryLedger()
        self._index = index
        self._unsubscribe: Unsubscribe | None = None
        self._sequence = 0
        self._suggestion_sequence = 0
        self._last_query: Query | None = None
        self._state = SessionState(items_per_page=items_per_page, history=self._history.entries)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def last_query(self) -> Query | None:
        """The most recently dispatched query."""
        return self._last_query

    def attach(self) -> None:
        """Re-issue the active search whenever the local index changes."""
        if self._index is not None and self._unsubscribe is None:
            self._unsubscribe = self._index.subscribe(self._on_index_changed)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    # Searching

    async def search(
        self,
        text: str,
        filters: FilterSet | Mapping[str, Any] | None = None,
        *,
        prefer: StrategyId | None = None,
    ) -> SessionState:
        """Resolve ``text`` and publish the sorted outcome. Never raises.

        ``filters`` replaces the current filter set when given. The search runs
        at the current page; a page past the end of the new result set is
        clamped and refetched.
        """
        state = self._state
        try:
            effective = _coerce_filters(filters, state.filters)
        except ValidationError as exc:
            return self._reject_filters(exc)
        return await self._dispatch(text, effective, state.current_page, prefer)

    def clear_search(self) -> SessionState:
        """Reset the search but keep history and filters."""
        self._sequence += 1
        self._replace(
            query="",
            results=(),
            total=0,
            outcome=None,
            current_page=1,
            selected_ids=(),
            suggestions=(),
            is_searching=False,
            last_error=None,
        )
        return self._state

    async def set_filters(self, partial: FilterSet | Mapping[str, Any]) -> SessionState:
        """Merge ``partial`` into the filters and re-run an active search."""
        try:
            merged = self._state.filters.merge(partial)
        except ValidationError as exc:
            return self._reject_filters(exc)
        self._replace(filters=merged)
        state = self._state
        if state.query.strip():
            return await self._dispatch(
                state.query, merged, state.current_page, state.preferred_strategy
            )
        return state

    def set_sorting(
        self, key: SortKey | str, direction: SortDirection | str = SortDirection.DESC
    ) -> SessionState:
        """Re-sort the current results without querying again."""
        try:
            sort_key = SortKey(key)
        except ValueError:
            logger.warning("Unknown sort key %r, using relevance", key)
            sort_key = SortKey.RELEVANCE
        try:
            sort_direction = SortDirection(direction)
        except ValueError:
            logger.warning("Unknown sort direction %r, using desc", direction)
            sort_direction = SortDirection.DESC
        self._replace(
            sort_key=sort_key,
            sort_direction=sort_direction,
            results=sort_results(self._state.results, sort_key, sort_direction),
        )
        return self._state

    async def go_to_page(self, page: int) -> SessionState:
        """Fetch ``page`` of the current search; out-of-range pages are ignored."""
        state = self._state
        if not is_valid_page(page, state.total, state.items_per_page):
            logger.debug("Ignoring page %d (max page %d)", page, state.max_page)
            return state
        return await self._dispatch(state.query, state.filters, page, state.preferred_strategy)

    # Selection

    def toggle_result_selection(self, result_id: str) -> SessionState:
        state = self._state
        if result_id not in state.result_ids:
            return state
        if result_id in state.selected_ids:
            selected = tuple(item for item in state.selected_ids if item != result_id)
        else:
            selected = (*state.selected_ids, result_id)
        self._replace(selected_ids=selected)
        return self._state

    def select_all_results(self) -> SessionState:
        self._replace(selected_ids=self._state.result_ids)
        return self._state

    def clear_selection(self) -> SessionState:
        self._replace(selected_ids=())
        return self._state

    # Suggestions and history

    async def get_suggestions(self, partial: str) -> list[str]:
        self._suggestion_sequence += 1
        sequence = self._suggestion_sequence
        try:
            suggestions = await self._suggestions.get_suggestions(partial)
        except Exception:
            logger.exception("Suggestion lookup failed for %r", partial)
            suggestions = []
        if sequence == self._suggestion_sequence:
            self._replace(suggestions=tuple(suggestions))
        return suggestions

    def add_to_history(self, text: str) -> SessionState:
        if self._history.add(text):
            self._replace(history=self._history.entries)
        return self._state

    def clear_history(self) -> SessionState:
        self._history.clear()
        self._replace(history=())
        return self._state

    # Internals

    async def _dispatch(
        self,
        text: str,
        filters: FilterSet,
        page: int,
        prefer: StrategyId | None,
    ) -> SessionState:
        self._sequence += 1
        sequence = self._sequence
        per_page = self._state.items_per_page
        query = Query(
            text=text,
            filters=filters,
            limit=per_page,
            offset=offset_for(page, per_page),
            sequence=sequence,
        )
        self._last_query = query
        self._replace(
            query=text,
            filters=filters,
            current_page=page,
            preferred_strategy=prefer,
            selected_ids=(),
            is_searching=True,
        )

        try:
            outcome = await self._chain.resolve(query, prefer=prefer)
        except Exception as exc:
            logger.exception("Search failed for %r", text)
            if sequence == self._sequence:
                self._replace(
                    results=(),
                    total=0,
                    outcome=None,
                    current_page=1,
                    selected_ids=(),
                    is_searching=False,
                    last_error=f"Search failed: {exc}",
                )
            return self._state

        if sequence != self._sequence:
            logger.debug("Discarding outcome of query #%d, #%d is newer", sequence, self._sequence)
            return self._state

        clamped = clamp_page(page, outcome.total, per_page)
        if clamped != page and outcome.total > 0:
            logger.debug("Page %d is past the end, refetching page %d", page, clamped)
            return await self._dispatch(text, filters, clamped, prefer)

        self._apply(outcome, text, clamped)
        return self._state

    def _apply(self, outcome: SearchOutcome, text: str, page: int) -> None:
        state = self._state
        if text.strip():
            self._history.add(text)
        changes: dict[str, Any] = {
            "results": sort_results(outcome.results, state.sort_key, state.sort_direction),
            "total": outcome.total,
            "outcome": outcome,
            "current_page": page,
            "selected_ids": (),
            "is_searching": False,
            "last_strategy": outcome.strategy_used,
            "last_error": _error_message(outcome),
            "history": self._history.entries,
        }
        if outcome.suggestions:
            changes["suggestions"] = outcome.suggestions
        self._replace(**changes)

    def _replace(self, **changes: Any) -> None:
        self._state = self._state.model_copy(update=changes)

    def _reject_filters(self, exc: ValidationError) -> SessionState:
        logger.warning("Rejected invalid filters: %s", exc)
        self._replace(last_error=f"{INVALID_FILTERS_MESSAGE}: {exc}")
        return self._state

    async def _on_index_changed(self) -> None:
        state = self._state
        if state.outcome is None and not state.query.strip():
            return
        logger.debug("Local index changed, re-running %r", state.query)
        await self._dispatch(
            state.query, state.filters, state.current_page, state.preferred_strategy
        )


def _error_message(outcome: SearchOutcome) -> str | None:
    if not outcome.exhausted:
        return None
    if outcome.errors:
        return f"{EXHAUSTED_MESSAGE}: {'; '.join(outcome.errors)}"
    return EXHAUSTED_MESSAGE


def _coerce_filters(
    filters: FilterSet | Mapping[str, Any] | None, current: FilterSet
) -> FilterSet:
    if filters is None:
        return current
    if isinstance(filters, FilterSet):
        return filters
    return FilterSet.model_validate(filters)
