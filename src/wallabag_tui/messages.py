from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

from textual.message import Message as TextualMessage

from .datamodels import Entry


class ErrorKind(Enum):
    TRANSPORT = "transport"
    DECODE = "decode"
    SECURITY = "security"
    VALIDATION = "validation"
    CACHE = "cache"


@dataclass(frozen=True)
class ErrorOccurred:
    kind: ErrorKind
    message: str
    cause: Optional[BaseException] = field(default=None, compare=False)


@dataclass(frozen=True)
class CountReceived:
    total: int


@dataclass(frozen=True)
class EntriesLoaded:
    entries: Tuple[Entry, ...]
    from_cache: bool = False
    cache_warning: str = ""


@dataclass(frozen=True)
class EntryUpdated:
    entry: Entry


@dataclass(frozen=True)
class EntryAdded:
    entry: Entry


@dataclass(frozen=True)
class EntryDeleted:
    entry_id: int


@dataclass(frozen=True)
class StatusCleared:
    pass


@dataclass(frozen=True)
class RowSelected:
    entry_id: int


@dataclass(frozen=True)
class KeyPressed:
    key: str


@dataclass(frozen=True)
class Resized:
    width: int
    height: int


@dataclass(frozen=True)
class SpinnerTicked:
    pass


Msg = Union[
    ErrorOccurred,
    CountReceived,
    EntriesLoaded,
    EntryUpdated,
    EntryAdded,
    EntryDeleted,
    StatusCleared,
    RowSelected,
    KeyPressed,
    Resized,
    SpinnerTicked,
]


class ModelMessage(TextualMessage):
    """Carries a state machine message through Textual's message queue."""

    def __init__(self, msg: Msg) -> None:
        self.msg = msg
        super().__init__()
