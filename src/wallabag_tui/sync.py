from __future__ import annotations

import logging
import math
from typing import List

from .cache import EntryCache
from .config import ClientConfig
from .datamodels import Entry
from .errors import CacheError, DecodeError, SecurityError, TransportError
from .gateway.base import Gateway
from .messages import CountReceived, EntriesLoaded, ErrorKind, ErrorOccurred, Msg

logger = logging.getLogger("wallabag_tui")


def required_api_calls(total: int, per_page: int) -> int:
    """Number of page requests needed to fetch ``total`` entries."""
    if per_page < 1:
        raise ValueError("per_page must be positive")
    return max(1, math.ceil(total / per_page))


class Synchronizer:
    """Refreshes the local entry set from the cache or the remote service.

    Each public method returns exactly one message and never raises for
    expected failures, so it can run as a worker whose result is dispatched.
    """

    def __init__(self, config: ClientConfig, gateway: Gateway, cache: EntryCache):
        self.config = config
        self.gateway = gateway
        self.cache = cache

    def start(self, use_cache: bool = True) -> Msg:
        """Check the cache gate, then answer from cache or count remote entries."""
        try:
            self.cache.check_permissions()
            if use_cache:
                cached = self.cache.read()
                if cached:
                    logger.info("Loaded %d entries from cache", len(cached))
                    return EntriesLoaded(tuple(cached), from_cache=True)
        except SecurityError as e:
            return ErrorOccurred(
                ErrorKind.SECURITY, "Couldn't read cache file for security reasons", e
            )
        except CacheError as e:
            return ErrorOccurred(ErrorKind.CACHE, "Couldn't load the entries from cache", e)

        try:
            total = self.gateway.count()
        except TransportError as e:
            return ErrorOccurred(
                ErrorKind.TRANSPORT,
                "Couldn't retrieve the total number of entries from wallabag API",
                e,
            )
        except DecodeError as e:
            return ErrorOccurred(
                ErrorKind.DECODE, "Response from wallabag API is not valid", e
            )
        return CountReceived(total)

    def fetch_entries(
        self, total: int, per_page: int, sort_field: str, sort_order: str
    ) -> Msg:
        """Fetch every page sequentially, then write the snapshot to the cache."""
        calls = required_api_calls(total, per_page)
        logger.debug("%d API calls will be needed to wallabag API", calls)

        entries: List[Entry] = []
        for page in range(1, calls + 1):
            try:
                batch = self.gateway.fetch_page(per_page, page, sort_field, sort_order)
            except TransportError as e:
                logger.warning("Sync aborted at page %d/%d: %s", page, calls, e)
                return ErrorOccurred(
                    ErrorKind.TRANSPORT, "Couldn't retrieve the entries from wallabag API", e
                )
            except DecodeError as e:
                logger.warning("Sync aborted at page %d/%d: %s", page, calls, e)
                return ErrorOccurred(
                    ErrorKind.DECODE, "Response from wallabag API is not valid", e
                )
            logger.debug("Entries, batch %d: adding %d entries", page, len(batch))
            entries.extend(batch)

        logger.info("Retrieved %d entries from wallabag", len(entries))
        try:
            self.cache.write(entries)
        except CacheError as e:
            return EntriesLoaded(tuple(entries), cache_warning=str(e))
        return EntriesLoaded(tuple(entries))
