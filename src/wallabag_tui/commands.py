from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class RequestSync:
    """Run the cache gate, then either load the cache or count remote entries."""

    use_cache: bool = True


@dataclass(frozen=True)
class FetchEntries:
    total: int
    per_page: int
    sort_field: str
    sort_order: str


@dataclass(frozen=True)
class UpdateEntryStatus:
    entry_id: int
    archived: bool
    starred: bool
    public: bool


@dataclass(frozen=True)
class AddEntry:
    url: str


@dataclass(frozen=True)
class DeleteEntry:
    entry_id: int


@dataclass(frozen=True)
class SelectEntry:
    entry_id: int


@dataclass(frozen=True)
class ScheduleClear:
    delay: float


@dataclass(frozen=True)
class ScheduleTick:
    delay: float


@dataclass(frozen=True)
class OpenInBrowser:
    url: str


Command = Union[
    Quit,
    RequestSync,
    FetchEntries,
    UpdateEntryStatus,
    AddEntry,
    DeleteEntry,
    SelectEntry,
    ScheduleClear,
    ScheduleTick,
    OpenInBrowser,
]
