"""Search request and outcome models."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fsearch.models.files import FileRecord, as_utc


class StrategyId(StrEnum):
    """Provenance tag recorded on every outcome."""

    SEMANTIC = "semantic"
    HYBRID = "hybrid"
    REGULAR = "regular"
    FILE_SERVICE = "file_service"
    ALL_FILES = "all_files"
    MOCK = "mock"
    NONE = "none"


class SortKey(StrEnum):
    RELEVANCE = "relevance"
    NAME = "name"
    SIZE = "size"
    MODIFIED = "modified"
    CREATED = "created"
    TYPE = "type"


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"


class SizeRange(BaseModel):
    """Inclusive byte-size bounds."""

    model_config = ConfigDict(frozen=True)

    min: int | None = None
    max: int | None = None

    def contains(self, size: int) -> bool:
        if self.min is not None and size < self.min:
            return False
        return self.max is None or size <= self.max


class DateRange(BaseModel):
    """Inclusive modification-time bounds."""

    model_config = ConfigDict(frozen=True)

    start: datetime | None = None
    end: datetime | None = None

    def contains(self, value: datetime) -> bool:
        moment = as_utc(value)
        if self.start is not None and moment < as_utc(self.start):
            return False
        return self.end is None or moment <= as_utc(self.end)


class FilterSet(BaseModel):
    """Named facet constraints. Every facet is optional."""

    model_config = ConfigDict(frozen=True)

    file_types: tuple[str, ...] | None = None
    date_range: DateRange | None = None
    size_range: SizeRange | None = None
    tags: tuple[str, ...] | None = None
    categories: tuple[str, ...] | None = None

    def merge(self, partial: FilterSet | Mapping[str, Any]) -> FilterSet:
        """Shallow-merge the facets explicitly present in ``partial``.

        List facets are replaced, not unioned.
        """
        update = partial if isinstance(partial, FilterSet) else FilterSet.model_validate(partial)
        changes = {name: getattr(update, name) for name in update.model_fields_set}
        return self.model_copy(update=changes)

    def matches(self, record: FileRecord) -> bool:
        if self.file_types:
            wanted = {file_type.lower().lstrip(".") for file_type in self.file_types}
            if record.extension.lower() not in wanted:
                return False
        if self.size_range is not None and not self.size_range.contains(record.size):
            return False
        if self.date_range is not None and not self.date_range.contains(record.modified_at):
            return False
        if self.tags and not set(self.tags) & set(record.tags):
            return False
        return not self.categories or record.category in self.categories

    def to_payload(self) -> dict[str, Any]:
        """JSON body fragment for remote backends, unset facets omitted."""
        return self.model_dump(mode="json", exclude_none=True)


class Query(BaseModel):
    """One dispatch through the strategy chain."""

    model_config = ConfigDict(frozen=True)

    text: str = ""
    filters: FilterSet = Field(default_factory=FilterSet)
    limit: int = Field(default=20, ge=1)
    offset: int = Field(default=0, ge=0)
    sequence: int = 0


class ResultItem(BaseModel):
    """A ranked hit."""

    model_config = ConfigDict(frozen=True)

    file: FileRecord
    score: float = 0.0
    snippet: str = ""
    highlights: tuple[str, ...] = ()

    @field_validator("score")
    @classmethod
    def _clamp_score(cls, value: float) -> float:
        return min(max(value, 0.0), 1.0)


class SearchOutcome(BaseModel):
    """The result of resolving a query, with provenance."""

    model_config = ConfigDict(frozen=True)

    results: tuple[ResultItem, ...] = ()
    total: int = Field(default=0, ge=0)
    strategy_used: StrategyId = StrategyId.NONE
    elapsed_ms: int = Field(default=0, ge=0)
    expanded_query: str | None = None
    suggestions: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()
    exhausted: bool = False

    @classmethod
    def exhausted_chain(cls, errors: list[str], elapsed_ms: int = 0) -> SearchOutcome:
        return cls(errors=tuple(errors), elapsed_ms=elapsed_ms, exhausted=True)


class RemoteSearchResponse(BaseModel):
    """Wire payload returned by the semantic, hybrid and keyword backends."""

    results: list[ResultItem] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    execution_time_ms: int = 0
    search_type: str = ""
    expanded_query: str | None = None
    suggestions: list[str] = Field(default_factory=list)
