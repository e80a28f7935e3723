"""Deterministic offline data: sample files and static suggestion phrases."""

from __future__ import annotations

import random
from datetime import datetime

from fsearch.models.files import FileRecord
from fsearch.models.search import ResultItem

MATCHED_SCORE_RANGE = (0.85, 1.0)
UNMATCHED_SCORE_RANGE = (0.3, 0.7)


def _sample(
    file_id: str,
    path: str,
    name: str,
    extension: str,
    size: int,
    created: str,
    modified: str,
    mime_type: str,
) -> FileRecord:
    return FileRecord(
        id=file_id,
        path=path,
        name=name,
        extension=extension,
        size=size,
        created_at=datetime.fromisoformat(created),
        modified_at=datetime.fromisoformat(modified),
        mime_type=mime_type,
    )


SAMPLE_FILES: tuple[FileRecord, ...] = (
    _sample(
        "1",
        "/Users/documents/project-proposal.pdf",
        "Project Proposal.pdf",
        "pdf",
        2_048_576,
        "2024-01-15T10:30:00+00:00",
        "2024-01-20T14:45:00+00:00",
        "application/pdf",
    ),
    _sample(
        "2",
        "/Users/documents/meeting-notes.md",
        "Meeting Notes.md",
        "md",
        4_096,
        "2024-01-18T09:15:00+00:00",
        "2024-01-18T16:20:00+00:00",
        "text/markdown",
    ),
    _sample(
        "3",
        "/Users/code/metamind/src/main.rs",
        "main.rs",
        "rs",
        8_192,
        "2024-01-10T11:00:00+00:00",
        "2024-01-22T13:30:00+00:00",
        "text/rust",
    ),
    _sample(
        "4",
        "/Users/images/vacation-photo.jpg",
        "Vacation Photo.jpg",
        "jpg",
        1_536_000,
        "2024-01-05T18:22:00+00:00",
        "2024-01-05T18:22:00+00:00",
        "image/jpeg",
    ),
    _sample(
        "5",
        "/Users/spreadsheets/budget-2024.xlsx",
        "Budget 2024.xlsx",
        "xlsx",
        512_000,
        "2024-01-01T00:00:00+00:00",
        "2024-01-20T09:45:00+00:00",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ),
)

SUGGESTION_PHRASES: tuple[str, ...] = (
    "photos from last week",
    "PDF documents about project",
    "code files modified today",
    "presentations larger than 10MB",
    "images from vacation",
    "spreadsheets containing budget",
    "markdown files with meeting notes",
    "rust code files",
    "documents created this month",
    "files modified recently",
)


def is_match(record: FileRecord, text: str) -> bool:
    """Whether ``record`` matches ``text`` by name, path or extension."""
    needle = text.strip().lower()
    extension = record.extension.lower()
    if needle in record.name.lower() or needle in record.path.lower():
        return True
    if not extension:
        return False
    return needle in extension or extension in needle.split()


def synthetic_results(
    text: str, candidates: tuple[FileRecord, ...] = SAMPLE_FILES
) -> list[ResultItem]:
    """Score every candidate: matches first in the high band, the rest below.

    Scores are drawn from a generator seeded with the query, so the same text
    always yields the same outcome.
    """
    rng = random.Random(f"synthetic:{text}")
    matched = [record for record in candidates if is_match(record, text)]
    unmatched = [record for record in candidates if not is_match(record, text)]
    low, high = MATCHED_SCORE_RANGE
    items = [_item(record, text, low + rng.random() * (high - low)) for record in matched]
    low, high = UNMATCHED_SCORE_RANGE
    items.extend(_item(record, text, low + rng.random() * (high - low)) for record in unmatched)
    return items


def static_suggestions(partial: str, limit: int = 5) -> list[str]:
    needle = partial.strip().lower()
    return [phrase for phrase in SUGGESTION_PHRASES if needle in phrase.lower()][:limit]


def _item(record: FileRecord, text: str, score: float) -> ResultItem:
    stem = record.name.rsplit(".", 1)[0]
    highlights = (text, stem) if text.strip() else (stem,)
    return ResultItem(
        file=record,
        score=score,
        snippet=f'Content snippet from {record.name} matching "{text}"...',
        highlights=highlights,
    )
