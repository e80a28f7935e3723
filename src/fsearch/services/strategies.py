"""Ordered-fallback query dispatch over heterogeneous search sources."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

from result import Err

from fsearch.models.search import Query, RemoteSearchResponse, ResultItem, SearchOutcome, StrategyId
from fsearch.services.synthetic import synthetic_results

if TYPE_CHECKING:
    from fsearch.data.protocols import KeywordBackend, LocalFileIndexProtocol, SemanticResolver
    from fsearch.models.files import IndexedFile

logger = logging.getLogger(__name__)

# Local relevance weights: name, content, tags, category.
_NAME_WEIGHT = 10
_CONTENT_WEIGHT = 5
_TAG_WEIGHT = 3
_CATEGORY_WEIGHT = 1
_MAX_LOCAL_WEIGHT = _NAME_WEIGHT + _CONTENT_WEIGHT + _TAG_WEIGHT + _CATEGORY_WEIGHT
_UNRANKED_SCORE = 0.85
_SNIPPET_CHARS = 200


class StrategyUnavailable(Exception):
    """A source could not answer: unreachable, unconfigured or erroring."""

    def __init__(self, strategy_id: StrategyId, reason: str) -> None:
        super().__init__(f"{strategy_id.value}: {reason}")
        self.strategy_id = strategy_id
        self.reason = reason


class SearchStrategy(Protocol):
    """One pluggable source able to resolve a query."""

    strategy_id: StrategyId

    async def resolve(self, query: Query) -> SearchOutcome: ...


class SemanticStrategy:
    """Natural-language query against the AI-backed resolver."""

    strategy_id = StrategyId.SEMANTIC

    def __init__(self, resolver: SemanticResolver | None) -> None:
        self._resolver = resolver

    async def resolve(self, query: Query) -> SearchOutcome:
        if self._resolver is None:
            raise StrategyUnavailable(self.strategy_id, "no resolver configured")
        _require_text(self.strategy_id, query)
        response = await self._resolver.resolve(query.text, query.limit, query.offset)
        if isinstance(response, Err):
            raise StrategyUnavailable(self.strategy_id, response.err_value)
        return _outcome_from_response(response.ok_value, self.strategy_id)


class HybridStrategy(SemanticStrategy):
    """Combined keyword and semantic resolver, selected explicitly."""

    strategy_id = StrategyId.HYBRID


class KeywordStrategy:
    """Plain full-text and filter backend."""

    strategy_id = StrategyId.REGULAR

    def __init__(self, backend: KeywordBackend | None) -> None:
        self._backend = backend

    async def resolve(self, query: Query) -> SearchOutcome:
        if self._backend is None:
            raise StrategyUnavailable(self.strategy_id, "no keyword backend configured")
        _require_text(self.strategy_id, query)
        response = await self._backend.resolve(
            query.text, query.filters, query.limit, query.offset
        )
        if isinstance(response, Err):
            raise StrategyUnavailable(self.strategy_id, response.err_value)
        return _outcome_from_response(response.ok_value, self.strategy_id)


class LocalIndexStrategy:
    """Substring search over the locally cached file index.

    A blank query lists every indexed file. Filters and paging are applied here
    because the index has no notion of either.
    """

    strategy_id = StrategyId.FILE_SERVICE

    def __init__(self, index: LocalFileIndexProtocol | None) -> None:
        self._index = index

    async def resolve(self, query: Query) -> SearchOutcome:
        if self._index is None:
            raise StrategyUnavailable(self.strategy_id, "no local index configured")
        text = query.text.strip()
        files = await self._index.search_local(text) if text else await self._index.get_all_local()
        if not files:
            reason = "no local matches" if text else "local index is empty"
            raise StrategyUnavailable(self.strategy_id, reason)

        candidates = [file for file in files if query.filters.matches(file)]
        if text:
            scored = [(file, _local_relevance(file, text.lower())) for file in candidates]
            scored.sort(key=lambda pair: pair[1], reverse=True)
        else:
            scored = [(file, _UNRANKED_SCORE) for file in candidates]

        window = scored[query.offset : query.offset + query.limit]
        return SearchOutcome(
            results=tuple(_local_item(file, score, query.text) for file, score in window),
            total=len(scored),
            strategy_used=StrategyId.FILE_SERVICE if text else StrategyId.ALL_FILES,
        )


class SyntheticStrategy:
    """Locally generated results for offline and development use. Never empty."""

    strategy_id = StrategyId.MOCK

    async def resolve(self, query: Query) -> SearchOutcome:
        items = synthetic_results(query.text)
        return SearchOutcome(
            results=tuple(items[query.offset : query.offset + query.limit]),
            total=len(items),
            strategy_used=self.strategy_id,
        )


class StrategyChain:
    """Tries each strategy in priority order; the first success wins.

    Failures are logged and collected for diagnostics. When every strategy
    fails the chain returns an empty, exhausted outcome instead of raising.
    """

    def __init__(
        self,
        strategies: Sequence[SearchStrategy],
        alternates: Sequence[SearchStrategy] = (),
    ) -> None:
        self._strategies = list(strategies)
        self._alternates = list(alternates)

    @property
    def strategy_ids(self) -> list[StrategyId]:
        return [strategy.strategy_id for strategy in self._strategies]

    async def resolve(self, query: Query, prefer: StrategyId | None = None) -> SearchOutcome:
        started = time.perf_counter()
        errors: list[str] = []
        for strategy in self._ordered(prefer):
            attempt_started = time.perf_counter()
            try:
                outcome = await strategy.resolve(query)
            except StrategyUnavailable as exc:
                logger.warning("Search strategy %s unavailable: %s", exc.strategy_id, exc.reason)
                errors.append(str(exc))
                continue
            except Exception as exc:
                logger.warning("Search strategy %s failed", strategy.strategy_id, exc_info=True)
                errors.append(f"{strategy.strategy_id.value}: {exc}")
                continue
            elapsed_ms = _elapsed_ms(attempt_started)
            logger.debug(
                "Query #%d resolved by %s: %d of %d results in %d ms",
                query.sequence,
                outcome.strategy_used,
                len(outcome.results),
                outcome.total,
                elapsed_ms,
            )
            return outcome.model_copy(update={"elapsed_ms": elapsed_ms, "errors": tuple(errors)})

        logger.warning("All search strategies failed for query %r", query.text)
        return SearchOutcome.exhausted_chain(errors, _elapsed_ms(started))

    def _ordered(self, prefer: StrategyId | None) -> list[SearchStrategy]:
        if prefer is None:
            return list(self._strategies)
        preferred = next(
            (s for s in [*self._alternates, *self._strategies] if s.strategy_id == prefer),
            None,
        )
        if preferred is None:
            logger.warning("Preferred strategy %s is not registered", prefer)
            return list(self._strategies)
        return [preferred, *(s for s in self._strategies if s is not preferred)]


def default_chain(
    semantic: SemanticResolver | None = None,
    keyword: KeywordBackend | None = None,
    index: LocalFileIndexProtocol | None = None,
    hybrid: SemanticResolver | None = None,
    synthetic_fallback: bool = True,
) -> StrategyChain:
    """Semantic, keyword, local index, then synthetic; hybrid as an alternate."""
    strategies: list[SearchStrategy] = [
        SemanticStrategy(semantic),
        KeywordStrategy(keyword),
        LocalIndexStrategy(index),
    ]
    if synthetic_fallback:
        strategies.append(SyntheticStrategy())
    return StrategyChain(strategies, alternates=[HybridStrategy(hybrid)])


def _require_text(strategy_id: StrategyId, query: Query) -> None:
    if not query.text.strip():
        raise StrategyUnavailable(strategy_id, "blank query")


def _outcome_from_response(
    response: RemoteSearchResponse, strategy_id: StrategyId
) -> SearchOutcome:
    return SearchOutcome(
        results=tuple(response.results),
        total=max(response.total, len(response.results)),
        strategy_used=strategy_id,
        expanded_query=response.expanded_query,
        suggestions=tuple(response.suggestions),
    )


def _local_relevance(file: IndexedFile, needle: str) -> float:
    score = 0
    if needle in file.name.lower():
        score += _NAME_WEIGHT
    if needle in file.content.lower():
        score += _CONTENT_WEIGHT
    if any(needle in tag.lower() for tag in file.tags):
        score += _TAG_WEIGHT
    if needle in file.category.lower():
        score += _CATEGORY_WEIGHT
    return score / _MAX_LOCAL_WEIGHT


def _local_item(file: IndexedFile, score: float, text: str) -> ResultItem:
    if len(file.content) > _SNIPPET_CHARS:
        snippet = f"{file.content[:_SNIPPET_CHARS]}..."
    else:
        snippet = file.content or f"Content from {file.name}"
    highlights = tuple(h for h in (text.strip(), *file.tags) if h)
    return ResultItem(file=file.to_record(), score=score, snippet=snippet, highlights=highlights)


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
