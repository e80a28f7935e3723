"""Pydantic models for fsearch."""

from fsearch.models.files import FileRecord, IndexedFile, ProcessingStatus, as_utc
from fsearch.models.search import (
    DateRange,
    FilterSet,
    Query,
    RemoteSearchResponse,
    ResultItem,
    SearchOutcome,
    SizeRange,
    SortDirection,
    SortKey,
    StrategyId,
)
from fsearch.models.session import SessionState

__all__ = [
    "DateRange",
    "FileRecord",
    "FilterSet",
    "IndexedFile",
    "ProcessingStatus",
    "Query",
    "RemoteSearchResponse",
    "ResultItem",
    "SearchOutcome",
    "SessionState",
    "SizeRange",
    "SortDirection",
    "SortKey",
    "StrategyId",
    "as_utc",
]
