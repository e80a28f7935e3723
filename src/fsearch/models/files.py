"""File record models."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class ProcessingStatus(StrEnum):
    """Ingestion state of a file."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class FileRecord(BaseModel):
    """A file known to one of the search sources."""

    id: str
    path: str
    name: str
    extension: str = ""
    size: int = Field(default=0, ge=0)
    created_at: datetime
    modified_at: datetime
    mime_type: str = ""
    processing_status: ProcessingStatus = ProcessingStatus.COMPLETED
    tags: list[str] = Field(default_factory=list)
    category: str = ""


class IndexedFile(FileRecord):
    """A file record together with the text extracted during ingestion."""

    content: str = ""

    def to_record(self) -> FileRecord:
        return FileRecord.model_validate(self.model_dump(exclude={"content"}))


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC so mixed values stay comparable."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
