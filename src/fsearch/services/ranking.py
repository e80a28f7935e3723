"""Client-side ordering of search results."""

from __future__ import annotations

import locale
from collections.abc import Callable, Iterable
from typing import Any

from fsearch.models.files import as_utc
from fsearch.models.search import ResultItem, SortDirection, SortKey


def _by_score(item: ResultItem) -> float:
    return item.score


def _by_name(item: ResultItem) -> tuple[str, str]:
    return (locale.strxfrm(item.file.name.casefold()), item.file.name)


def _by_size(item: ResultItem) -> int:
    return item.file.size


def _by_modified(item: ResultItem) -> float:
    return as_utc(item.file.modified_at).timestamp()


def _by_created(item: ResultItem) -> float:
    return as_utc(item.file.created_at).timestamp()


def _by_extension(item: ResultItem) -> tuple[str, str]:
    extension = item.file.extension or ""
    return (extension.casefold(), extension)


_SORT_VALUES: dict[SortKey, Callable[[ResultItem], Any]] = {
    SortKey.RELEVANCE: _by_score,
    SortKey.NAME: _by_name,
    SortKey.SIZE: _by_size,
    SortKey.MODIFIED: _by_modified,
    SortKey.CREATED: _by_created,
    SortKey.TYPE: _by_extension,
}


def sort_value(item: ResultItem, key: SortKey | str) -> Any:
    """Comparison basis of ``item`` under ``key``."""
    return _SORT_VALUES[SortKey(key)](item)


def compare_results(
    a: ResultItem,
    b: ResultItem,
    key: SortKey | str = SortKey.RELEVANCE,
    direction: SortDirection | str = SortDirection.DESC,
) -> int:
    """Three-way comparison of two results.

    Returns a negative number when ``a`` sorts before ``b``. ``desc`` negates
    the base comparison, so ``relevance``/``desc`` puts the highest score first.
    """
    left, right = sort_value(a, key), sort_value(b, key)
    base = (left > right) - (left < right)
    return -base if SortDirection(direction) is SortDirection.DESC else base


def sort_results(
    results: Iterable[ResultItem],
    key: SortKey | str = SortKey.RELEVANCE,
    direction: SortDirection | str = SortDirection.DESC,
) -> tuple[ResultItem, ...]:
    """Stable sort of ``results``; equal items keep their input order in both directions."""
    return tuple(
        sorted(
            results,
            key=_SORT_VALUES[SortKey(key)],
            reverse=SortDirection(direction) is SortDirection.DESC,
        )
    )
