from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest

from wallabag_tui.config import ClientConfig
from wallabag_tui.datamodels import Entry
from wallabag_tui.errors import TransportError
from wallabag_tui.gateway.base import Gateway

BASE_TIME = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_entry(entry_id: int, **kwargs) -> Entry:
    defaults = dict(
        title=f"Article {entry_id}",
        domain_name="example.com",
        url=f"https://example.com/{entry_id}",
        content=f"<p>Body of article {entry_id}</p>",
        created=BASE_TIME + timedelta(days=entry_id),
        updated=BASE_TIME + timedelta(days=entry_id),
    )
    defaults.update(kwargs)
    return Entry(id=entry_id, **defaults)


class FakeGateway(Gateway):
    """In-memory gateway recording every call."""

    def __init__(self, total: int = 0, pages: Optional[Dict[int, List[Entry]]] = None):
        self.total = total
        self.pages = pages or {}
        self.failing_pages: set[int] = set()
        self.count_error: Optional[Exception] = None
        self.update_response = b""
        self.added: Optional[Entry] = None
        self.error: Optional[Exception] = None
        self.calls: List[tuple] = []

    def count(self) -> int:
        self.calls.append(("count",))
        if self.count_error:
            raise self.count_error
        return self.total

    def fetch_page(self, per_page, page, sort_field, sort_order):
        self.calls.append(("fetch_page", per_page, page, sort_field, sort_order))
        if page in self.failing_pages:
            raise TransportError(f"page {page} failed")
        return list(self.pages.get(page, []))

    def update_status(self, entry_id, archived, starred, public):
        self.calls.append(("update_status", entry_id, archived, starred, public))
        if self.error:
            raise self.error
        return self.update_response

    def add_entry(self, url):
        self.calls.append(("add_entry", url))
        if self.error:
            raise self.error
        return self.added

    def delete_entry(self, entry_id):
        self.calls.append(("delete_entry", entry_id))
        if self.error:
            raise self.error


@pytest.fixture
def config(tmp_path):
    return ClientConfig(
        wallabag_url="https://wallabag.example.org",
        client_id="client",
        client_secret="secret",
        username="reader",
        password="hunter2",
        entries_per_api_call=55,
        default_unread=False,
        cache_path=str(tmp_path / "cache" / "entries.json"),
    )


@pytest.fixture
def gateway():
    return FakeGateway()
