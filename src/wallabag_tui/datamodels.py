from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Optional

from .errors import DecodeError

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

SORT_FIELDS = ("created", "updated")
SORT_ORDERS = ("asc", "desc")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a wallabag timestamp such as ``2023-01-31T10:00:00+0100``."""
    if not value:
        return None
    if not isinstance(value, str):
        raise DecodeError(f"Invalid timestamp: {value!r}")
    try:
        return datetime.strptime(value, TIMESTAMP_FORMAT)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise DecodeError(f"Invalid timestamp: {value!r}") from e


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.isoformat()
    return value.strftime(TIMESTAMP_FORMAT)


def _flag(value: Any) -> bool:
    # The API sends 0/1 for is_archived/is_starred and a bool for is_public.
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if value is None:
        return False
    raise DecodeError(f"Invalid flag value: {value!r}")


# --- Data models ---
@dataclass(frozen=True)
class Entry:
    id: int
    title: str
    domain_name: str = ""
    url: str = ""
    content: str = ""
    archived: bool = False
    starred: bool = False
    public: bool = False
    reading_time: int = 0
    created: Optional[datetime] = None
    updated: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: Any) -> Entry:
        """Build an Entry from a wallabag API item."""
        if not isinstance(data, dict):
            raise DecodeError("Entry payload is not an object")
        try:
            entry_id = data["id"]
        except KeyError as e:
            raise DecodeError("Entry payload has no id") from e
        if isinstance(entry_id, bool) or not isinstance(entry_id, int):
            raise DecodeError(f"Invalid entry id: {entry_id!r}")
        return cls(
            id=entry_id,
            title=data.get("title") or "",
            domain_name=data.get("domain_name") or "",
            url=data.get("url") or "",
            content=data.get("content") or "",
            archived=_flag(data.get("is_archived")),
            starred=_flag(data.get("is_starred")),
            public=_flag(data.get("is_public")),
            reading_time=data.get("reading_time") or 0,
            created=parse_timestamp(data.get("created_at")),
            updated=parse_timestamp(data.get("updated_at")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "domain_name": self.domain_name,
            "url": self.url,
            "content": self.content,
            "archived": self.archived,
            "starred": self.starred,
            "public": self.public,
            "reading_time": self.reading_time,
            "created": format_timestamp(self.created),
            "updated": format_timestamp(self.updated),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Entry:
        return cls(
            id=data["id"],
            title=data["title"],
            domain_name=data.get("domain_name", ""),
            url=data.get("url", ""),
            content=data.get("content", ""),
            archived=data.get("archived", False),
            starred=data.get("starred", False),
            public=data.get("public", False),
            reading_time=data.get("reading_time", 0),
            created=parse_timestamp(data.get("created")),
            updated=parse_timestamp(data.get("updated")),
        )


@dataclass(frozen=True)
class TableFilters:
    unread: bool = False
    starred: bool = False
    archived: bool = False
    public: bool = False
    search: str = ""

    def toggle(self, name: str) -> TableFilters:
        """Flip one flag, keeping unread and archived mutually exclusive."""
        if name == "unread":
            unread = not self.unread
            return replace(self, unread=unread, archived=self.archived and not unread)
        if name == "archived":
            archived = not self.archived
            return replace(self, archived=archived, unread=self.unread and not archived)
        if name == "starred":
            return replace(self, starred=not self.starred)
        if name == "public":
            return replace(self, public=not self.public)
        raise ValueError(f"Unknown filter: {name}")


@dataclass(frozen=True)
class TableSorts:
    field: str = "created"
    order: str = "desc"

    def toggle_order(self) -> TableSorts:
        return replace(self, order="asc" if self.order == "desc" else "desc")

    def next_field(self) -> TableSorts:
        index = SORT_FIELDS.index(self.field) if self.field in SORT_FIELDS else -1
        return replace(self, field=SORT_FIELDS[(index + 1) % len(SORT_FIELDS)])


@dataclass(frozen=True)
class TableOptions:
    filters: TableFilters = field(default_factory=TableFilters)
    sorts: TableSorts = field(default_factory=TableSorts)
