from __future__ import annotations

import re
import textwrap
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple

from bs4 import BeautifulSoup

from .config import CONTENT_WIDTH, ClientConfig
from .datamodels import Entry, TableOptions
from .filters import find_entry_index, visible_entries

SPINNER_FRAMES = ("⣾", "⣽", "⣻", "⢿", "⡿", "⣟", "⣯", "⣷")

BLOCK_TAGS = ["p", "div", "li", "h1", "h2", "h3", "h4", "h5", "h6", "blockquote", "pre", "tr"]
PARAGRAPH_BREAK = re.compile(r"\n\s*\n")

# Lines used by the header and footer around the main area.
HEADER_HEIGHT = 2
FOOTER_HEIGHT = 4
# Lines used by the table's own header and borders.
TABLE_CHROME = 4


class View(Enum):
    LIST = "list"
    DETAIL = "detail"
    HELP = "help"
    DIALOG = "dialog"


@dataclass(frozen=True)
class TermSize:
    width: int = 80
    height: int = 24


# --- Sub components ---
@dataclass(frozen=True)
class TableState:
    entries: Tuple[Entry, ...] = ()
    cursor: int = 0
    height: int = 10

    def with_entries(self, entries: Tuple[Entry, ...]) -> TableState:
        return replace(self, entries=entries, cursor=self._clamp(self.cursor, len(entries)))

    def move(self, delta: int) -> TableState:
        return replace(self, cursor=self._clamp(self.cursor + delta, len(self.entries)))

    def goto_top(self) -> TableState:
        return replace(self, cursor=0)

    def goto_bottom(self) -> TableState:
        return replace(self, cursor=max(0, len(self.entries) - 1))

    def selected(self) -> Optional[Entry]:
        if not self.entries:
            return None
        return self.entries[self.cursor]

    def window(self) -> Tuple[int, int]:
        """Start and end indexes of the rows that fit, keeping the cursor visible."""
        height = max(1, self.height)
        start = max(0, min(self.cursor - height // 2, len(self.entries) - height))
        return start, min(len(self.entries), start + height)

    @staticmethod
    def _clamp(cursor: int, size: int) -> int:
        if size == 0:
            return 0
        return max(0, min(cursor, size - 1))


@dataclass(frozen=True)
class ViewportState:
    width: int = CONTENT_WIDTH
    height: int = 20
    lines: Tuple[str, ...] = ()
    offset: int = 0

    def set_content(self, text: str) -> ViewportState:
        lines = tuple(text.split("\n"))
        return replace(self, lines=lines, offset=self._clamp(self.offset, lines, self.height))

    def half_view_down(self) -> ViewportState:
        return replace(
            self, offset=self._clamp(self.offset + self.height // 2, self.lines, self.height)
        )

    def half_view_up(self) -> ViewportState:
        return replace(
            self, offset=self._clamp(self.offset - self.height // 2, self.lines, self.height)
        )

    def goto_top(self) -> ViewportState:
        return replace(self, offset=0)

    def visible_lines(self) -> Tuple[str, ...]:
        return self.lines[self.offset : self.offset + self.height]

    @staticmethod
    def _clamp(offset: int, lines: Tuple[str, ...], height: int) -> int:
        return max(0, min(offset, len(lines) - height))


@dataclass(frozen=True)
class SpinnerState:
    frame: int = 0

    def advance(self) -> SpinnerState:
        return SpinnerState((self.frame + 1) % len(SPINNER_FRAMES))

    @property
    def glyph(self) -> str:
        return SPINNER_FRAMES[self.frame]


@dataclass(frozen=True)
class DialogState:
    message: str = ""
    show_input: bool = False
    input_value: str = ""
    action: str = ""

    @property
    def active(self) -> bool:
        return bool(self.message)


# --- Model ---
@dataclass(frozen=True)
class Model:
    config: ClientConfig
    options: TableOptions = field(default_factory=TableOptions)
    entries: Tuple[Entry, ...] = ()
    table: TableState = field(default_factory=TableState)
    viewport: ViewportState = field(default_factory=ViewportState)
    dialog: DialogState = field(default_factory=DialogState)
    spinner: SpinnerState = field(default_factory=SpinnerState)
    term_size: TermSize = field(default_factory=TermSize)
    status_message: str = ""
    ready: bool = False
    reloading: bool = True
    show_help: bool = False
    selected_id: int = 0
    total_on_server: int = 0

    @property
    def view(self) -> View:
        if self.dialog.active:
            return View.DIALOG
        if self.show_help:
            return View.HELP
        if self.selected_id > 0:
            return View.DETAIL
        return View.LIST

    def find_entry(self, entry_id: int) -> Optional[Entry]:
        """Resolve an ID against the current entries; None when it is gone."""
        index = find_entry_index(self.entries, entry_id)
        return self.entries[index] if index >= 0 else None

    def selected_entry(self) -> Optional[Entry]:
        if self.selected_id <= 0:
            return None
        return self.find_entry(self.selected_id)

    def with_entries(self, entries: Tuple[Entry, ...]) -> Model:
        """Replace the entries and recompute the visible rows."""
        return replace(self, entries=entries).refresh_rows()

    def with_options(self, options: TableOptions) -> Model:
        return replace(self, options=options).refresh_rows()

    def refresh_rows(self) -> Model:
        rows = tuple(visible_entries(self.entries, self.options))
        return replace(self, table=self.table.with_entries(rows))

    def resized(self, width: int, height: int) -> Model:
        """Recompute every size dependent sub component."""
        main_height = max(1, height - HEADER_HEIGHT - FOOTER_HEIGHT)
        table = replace(self.table, height=max(1, main_height - TABLE_CHROME))
        viewport = replace(
            self.viewport, width=min(CONTENT_WIDTH, width), height=max(1, main_height - 2)
        )
        return replace(
            self,
            term_size=TermSize(width, height),
            table=table,
            viewport=viewport,
            ready=True,
        )


def new_model(config: ClientConfig) -> Model:
    return Model(config=config, options=config.table_options())


def html_to_text(html: str, width: int = CONTENT_WIDTH) -> str:
    """Convert article HTML into readable text wrapped at ``width`` columns."""
    soup = BeautifulSoup(html or "", "lxml")
    for tag in soup(["script", "style"]):
        tag.decompose()
    for br in soup.find_all("br"):
        br.replace_with("\n")
    for block in soup.find_all(BLOCK_TAGS):
        block.append("\n\n")
    paragraphs = [" ".join(p.split()) for p in PARAGRAPH_BREAK.split(soup.get_text())]
    wrapped = [textwrap.fill(p, width=max(10, width)) for p in paragraphs if p]
    return "\n\n".join(wrapped)


def detail_content(model: Model, entry_id: int) -> str:
    """Title and wrapped content for the detail viewport."""
    entry = model.find_entry(entry_id)
    if entry is None:
        return "Entry not found\n\nThe entry may have been deleted."
    flags = []
    if entry.starred:
        flags.append("starred")
    if entry.archived:
        flags.append("archived")
    if entry.public:
        flags.append("public")
    header = entry.title
    if flags:
        header += f"  [{', '.join(flags)}]"
    meta = entry.domain_name
    if entry.reading_time:
        meta += f" - ~{entry.reading_time} min read"
    content = html_to_text(entry.content, model.viewport.width) or "No content"
    return f"{header}\n{meta}\n\n{content}"
