"""Result ordering: relevance, recency and due date."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from record_search.types import FinancialRecord, SearchRecord


class SortOption(str, Enum):
    RELEVANCE = "relevance"
    MOST_RECENT = "most_recent"
    DUE_FIRST = "due_first"
    DUE_LAST = "due_last"


def _timestamp(value: datetime) -> float:
    return value.timestamp()


def sort_by_recency(records: list[SearchRecord]) -> list[SearchRecord]:
    return sorted(records, key=lambda record: _timestamp(record.updated_at), reverse=True)


def sort_by_relevance(
    records: list[SearchRecord], scores: dict[str, float]
) -> list[SearchRecord]:
    """Descending score, ties broken by the most recently updated record."""
    return sorted(
        records,
        key=lambda record: (scores.get(record.id, 0.0), _timestamp(record.updated_at)),
        reverse=True,
    )


def _due_timestamp(record: SearchRecord) -> float:
    if isinstance(record, FinancialRecord) and record.due_date is not None:
        return _timestamp(record.due_date)
    return _timestamp(record.updated_at)


def sort_records(records: list[SearchRecord], option: SortOption | str) -> list[SearchRecord]:
    """Reorder already-ranked results; `relevance` keeps the given order."""
    option = SortOption(option)
    if option is SortOption.MOST_RECENT:
        return sort_by_recency(records)
    if option is SortOption.DUE_FIRST:
        return sorted(records, key=_due_timestamp)
    if option is SortOption.DUE_LAST:
        return sorted(records, key=_due_timestamp, reverse=True)
    return list(records)
