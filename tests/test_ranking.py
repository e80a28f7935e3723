"""Tests for client-side result ordering."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

import pytest

from fsearch.models.search import ResultItem, SortDirection, SortKey
from fsearch.services.ranking import compare_results, sort_results

ItemFactory = Callable[..., ResultItem]


@pytest.fixture
def results(make_item: ItemFactory) -> list[ResultItem]:
    """Results with distinct values for every sort key."""
    return [
        make_item(
            "a",
            score=0.4,
            name="banana.md",
            size=300,
            created_at=datetime(2024, 1, 3, tzinfo=UTC),
            modified_at=datetime(2024, 2, 1, tzinfo=UTC),
        ),
        make_item(
            "b",
            score=0.9,
            name="Apple.pdf",
            size=100,
            created_at=datetime(2024, 1, 1, tzinfo=UTC),
            modified_at=datetime(2024, 2, 3, tzinfo=UTC),
        ),
        make_item(
            "c",
            score=0.6,
            name="cherry.xlsx",
            size=200,
            created_at=datetime(2024, 1, 2, tzinfo=UTC),
            modified_at=datetime(2024, 2, 2, tzinfo=UTC),
        ),
    ]


def _ids(items: tuple[ResultItem, ...]) -> list[str]:
    return [item.file.id for item in items]


def test_relevance_desc_puts_highest_score_first(results: list[ResultItem]) -> None:
    assert _ids(sort_results(results, SortKey.RELEVANCE, SortDirection.DESC)) == ["b", "c", "a"]


def test_name_is_case_insensitive(results: list[ResultItem]) -> None:
    assert _ids(sort_results(results, SortKey.NAME, SortDirection.ASC)) == ["b", "a", "c"]


@pytest.mark.parametrize(
    ("key", "expected"),
    [
        (SortKey.SIZE, ["b", "c", "a"]),
        (SortKey.CREATED, ["b", "c", "a"]),
        (SortKey.MODIFIED, ["a", "c", "b"]),
        (SortKey.TYPE, ["a", "b", "c"]),
    ],
)
def test_ascending_order_per_key(
    results: list[ResultItem], key: SortKey, expected: list[str]
) -> None:
    assert _ids(sort_results(results, key, SortDirection.ASC)) == expected


@pytest.mark.parametrize("key", list(SortKey))
def test_asc_is_reverse_of_desc_without_ties(results: list[ResultItem], key: SortKey) -> None:
    ascending = sort_results(results, key, SortDirection.ASC)
    descending = sort_results(results, key, SortDirection.DESC)
    assert list(ascending) == list(reversed(descending))


@pytest.mark.parametrize("key", list(SortKey))
@pytest.mark.parametrize("direction", list(SortDirection))
def test_sorting_is_idempotent(
    results: list[ResultItem], key: SortKey, direction: SortDirection
) -> None:
    once = sort_results(results, key, direction)
    assert sort_results(once, key, direction) == once


def test_ties_keep_input_order_in_both_directions(make_item: ItemFactory) -> None:
    tied = [make_item(str(i), score=0.5) for i in range(5)]
    assert _ids(sort_results(tied, SortKey.RELEVANCE, SortDirection.DESC)) == list("01234")
    assert _ids(sort_results(tied, SortKey.RELEVANCE, SortDirection.ASC)) == list("01234")


def test_empty_extension_sorts_first(make_item: ItemFactory) -> None:
    items = [make_item("1", name="notes.txt"), make_item("2", name="Makefile")]
    assert _ids(sort_results(items, SortKey.TYPE, SortDirection.ASC)) == ["2", "1"]


def test_mixed_naive_and_aware_timestamps(make_item: ItemFactory) -> None:
    items = [
        make_item("late", modified_at=datetime(2024, 5, 1)),
        make_item("early", modified_at=datetime(2024, 4, 1, tzinfo=UTC)),
    ]
    assert _ids(sort_results(items, SortKey.MODIFIED, SortDirection.ASC)) == ["early", "late"]


def test_compare_results_sign(results: list[ResultItem]) -> None:
    apple, banana = results[1], results[0]
    assert compare_results(apple, banana, SortKey.NAME, SortDirection.ASC) < 0
    assert compare_results(apple, banana, SortKey.NAME, SortDirection.DESC) > 0
    assert compare_results(apple, apple, SortKey.SIZE, SortDirection.ASC) == 0


def test_string_keys_are_accepted(results: list[ResultItem]) -> None:
    assert sort_results(results, "size", "asc") == sort_results(
        results, SortKey.SIZE, SortDirection.ASC
    )


def test_sort_does_not_mutate_input(results: list[ResultItem]) -> None:
    before = list(results)
    sort_results(results, SortKey.NAME, SortDirection.DESC)
    assert results == before
