from __future__ import annotations

import json
import logging
import os
import stat
from typing import List

from .datamodels import Entry
from .errors import CacheError, DecodeError, SecurityError

logger = logging.getLogger("wallabag_tui")

UNSAFE_READ_BITS = stat.S_IRGRP | stat.S_IROTH


class EntryCache:
    """Whole-snapshot cache of the last successfully synchronized entries."""

    def __init__(self, path: str):
        self.path = path

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def check_permissions(self) -> None:
        """Raise SecurityError if users other than the owner can read the cache."""
        try:
            mode = os.stat(self.path).st_mode
        except FileNotFoundError:
            return
        except OSError as e:
            raise CacheError(f"Couldn't stat cache file {self.path}: {e}") from e
        if mode & UNSAFE_READ_BITS:
            logger.warning("Refusing cache file %s with mode %o", self.path, stat.S_IMODE(mode))
            raise SecurityError(
                f"Cache file {self.path} is readable by other users, refusing to use it"
            )

    def read(self) -> List[Entry]:
        """Return the cached entries, or an empty list when there is no cache."""
        self.check_permissions()
        if not self.exists():
            return []
        try:
            with open(self.path, "rb") as f:
                data = json.loads(f.read().decode("utf-8"))
            entries = [Entry.from_dict(item) for item in data["entries"]]
        except (OSError, UnicodeDecodeError, ValueError, KeyError, TypeError, DecodeError) as e:
            logger.warning("Failed to read cache file %s: %s", self.path, e)
            raise CacheError(f"Couldn't load the entries from cache: {e}") from e
        logger.debug("Loaded %d entries from cache %s", len(entries), self.path)
        return entries

    def write(self, entries: List[Entry]) -> None:
        """Replace the snapshot atomically with an owner-only file."""
        payload = json.dumps({"entries": [e.to_dict() for e in entries]}).encode("utf-8")
        tmp_path = self.path + ".tmp"
        try:
            os.makedirs(os.path.dirname(self.path) or ".", mode=0o700, exist_ok=True)
            fd = os.open(tmp_path, os.O_CREAT | os.O_TRUNC | os.O_WRONLY, 0o600)
            with os.fdopen(fd, "wb") as f:
                os.fchmod(f.fileno(), 0o600)
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.warning("Failed to write cache file %s: %s", self.path, e)
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise CacheError(f"Couldn't write cache file {self.path}: {e}") from e
        logger.debug("Cached %d entries to %s", len(entries), self.path)

    def clear(self) -> None:
        try:
            os.unlink(self.path)
            logger.info("Cache cleared.")
        except FileNotFoundError:
            pass
