from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from ..datamodels import Entry


class Gateway(ABC):
    """Abstract base class for the remote read-later service."""

    @abstractmethod
    def count(self) -> int:
        """Return the total number of entries on the server."""
        pass

    @abstractmethod
    def fetch_page(
        self, per_page: int, page: int, sort_field: str, sort_order: str
    ) -> List[Entry]:
        """Return one page of entries, pages numbered from 1."""
        pass

    @abstractmethod
    def update_status(
        self, entry_id: int, archived: bool, starred: bool, public: bool
    ) -> bytes:
        """Patch the status flags of an entry and return the raw response body."""
        pass

    @abstractmethod
    def add_entry(self, url: str) -> Entry:
        """Save a new URL and return the created entry."""
        pass

    @abstractmethod
    def delete_entry(self, entry_id: int) -> None:
        """Delete an entry."""
        pass
