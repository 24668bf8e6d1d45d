from __future__ import annotations

import json
import logging
from urllib.parse import urlparse

from .datamodels import Entry
from .errors import DecodeError, TransportError, ValidationError
from .gateway.base import Gateway
from .messages import (
    EntryAdded,
    EntryDeleted,
    EntryUpdated,
    ErrorKind,
    ErrorOccurred,
    Msg,
)

logger = logging.getLogger("wallabag_tui")


def validate_url(url: str) -> str:
    """Return the stripped URL, or raise ValidationError if it can't be saved."""
    candidate = url.strip()
    parsed = urlparse(candidate)
    if parsed.scheme not in ("http", "https") or not parsed.netloc or " " in candidate:
        raise ValidationError(f"Invalid URL: {url!r}")
    return candidate


def update_entry_status(
    gateway: Gateway, entry_id: int, archived: bool, starred: bool, public: bool
) -> Msg:
    try:
        raw = gateway.update_status(entry_id, archived, starred, public)
    except (TransportError, DecodeError) as e:
        return ErrorOccurred(ErrorKind.TRANSPORT, "Couldn't update the selected entry", e)

    try:
        entry = Entry.from_api(json.loads(raw))
    except (ValueError, DecodeError) as e:
        # The PATCH went through, so the server may already hold the new flags.
        logger.warning("Undecodable update response for entry %d: %s", entry_id, e)
        return ErrorOccurred(
            ErrorKind.DECODE,
            "Response from wallabag is not valid, the entry may have been updated anyway."
            " Reload to check.",
            e,
        )
    logger.info("Entry %d updated", entry.id)
    return EntryUpdated(entry)


def add_entry(gateway: Gateway, url: str) -> Msg:
    try:
        url = validate_url(url)
    except ValidationError as e:
        return ErrorOccurred(ErrorKind.VALIDATION, "Invalid URL", e)

    try:
        entry = gateway.add_entry(url)
    except TransportError as e:
        return ErrorOccurred(ErrorKind.TRANSPORT, "Couldn't add the entry", e)
    except DecodeError as e:
        return ErrorOccurred(
            ErrorKind.DECODE,
            "Response from wallabag is not valid, the entry may have been added anyway."
            " Reload to check.",
            e,
        )
    logger.info("Entry %d added from %s", entry.id, url)
    return EntryAdded(entry)


def delete_entry(gateway: Gateway, entry_id: int) -> Msg:
    try:
        gateway.delete_entry(entry_id)
    except (TransportError, DecodeError) as e:
        return ErrorOccurred(ErrorKind.TRANSPORT, "Couldn't delete the entry", e)
    logger.info("Entry %d deleted", entry_id)
    return EntryDeleted(entry_id)
