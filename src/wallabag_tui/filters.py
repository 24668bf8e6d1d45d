from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Tuple

from .datamodels import Entry, TableFilters, TableOptions

STAR_MARK = "⭐"
ARCHIVED_MARK = "✓"
DATE_FORMAT = "%Y-%m-%d"

Row = Tuple[str, str, str, str, str, str]


def matches(entry: Entry, filters: TableFilters) -> bool:
    if filters.unread and entry.archived:
        return False
    if filters.starred and not entry.starred:
        return False
    if filters.archived and not entry.archived:
        return False
    if filters.public and not entry.public:
        return False
    if filters.search:
        needle = filters.search.lower()
        if needle not in entry.title.lower() and needle not in entry.domain_name.lower():
            return False
    return True


def _sort_value(entry: Entry, field: str) -> float:
    value = getattr(entry, field, None)
    if isinstance(value, datetime):
        return value.timestamp()
    return 0.0


def visible_entries(entries: Iterable[Entry], options: TableOptions) -> List[Entry]:
    """Filter then sort entries; ties keep ID ascending."""
    rows = sorted(
        (e for e in entries if matches(e, options.filters)), key=lambda e: e.id
    )
    # list.sort is stable even with reverse=True, so equal keys stay in ID order.
    rows.sort(
        key=lambda e: _sort_value(e, options.sorts.field),
        reverse=options.sorts.order == "desc",
    )
    return rows


def table_row(entry: Entry) -> Row:
    return (
        str(entry.id),
        entry.title,
        entry.domain_name,
        STAR_MARK if entry.starred else " ",
        ARCHIVED_MARK if entry.archived else " ",
        entry.updated.strftime(DATE_FORMAT) if entry.updated else "",
    )


def table_rows(entries: Iterable[Entry]) -> List[Row]:
    return [table_row(e) for e in entries]


def find_entry_index(entries: Iterable[Entry], entry_id: int) -> int:
    """Linear scan for an entry by ID; -1 when absent."""
    for index, entry in enumerate(entries):
        if entry.id == entry_id:
            return index
    return -1
