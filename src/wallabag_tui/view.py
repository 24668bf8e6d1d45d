from __future__ import annotations

from rich import box
from rich.align import Align
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from .filters import table_row
from .model import Model, View

APP_TITLE = "Wallabag"

HELP_TEXT = """Help:
  Keybinds
    On all screens:
    - ctrl+c: quit
    - ?: help (this page)

    On listing page:
    - r: reload articles from wallabag via APIs, takes time depending on the number of articles saved
    - u: toggle display only unread articles (disable archived filter)
    - s: toggle display only starred articles
    - a: toggle archived only articles (disable unread filter)
    - p: toggle display only public articles
    - /: search titles and domains
    - o: toggle sort order, f: change sort field
    - n: save a new URL
    - d: delete the selected article
    - ↑ or k / ↓ or j: move up / down one item in the list
    - page down / page up: move up / down 10 items in the list
    - home: go to the top of the list
    - end: go to bottom of the list
    - enter: select entry to read content
    - q: quit

    On detail page:
    - q: return to list
    - ↑ or k / ↓ or j: go up / down
    - a: toggle archived, s: toggle starred, p: toggle public
    - d: delete this article
    - o: open in browser

    On help page:
    - q: return to list
"""

LIST_KEYS = "[r]eload -- Toggles: [u]nread, [s]tarred, [a]rchived, [p]ublic -- [/] search -- [?] help"
DETAIL_KEYS = "[q] back -- Toggles: [a]rchived, [s]tarred, [p]ublic -- [d]elete -- [o]pen"
DIALOG_KEYS = "[enter] confirm -- [esc] cancel"


def render(model: Model) -> RenderableType:
    """Compose the whole frame: header, main area and footer."""
    return Group(header_view(model), main_view(model), footer_view(model))


def subtitle(model: Model) -> str:
    if model.reloading or not model.ready:
        return ""
    filters = model.options.filters
    parts = []
    if filters.unread:
        parts.append("Unread")
    if filters.starred:
        parts.append("Starred")
    if filters.archived:
        parts.append("Archived")
    if filters.public:
        parts.append("Public")
    if filters.search:
        parts.append(f'"{filters.search}"')
    return " - " + " - ".join(parts or ["All"])


def header_view(model: Model) -> RenderableType:
    title = Text(APP_TITLE, style="bold")
    title.append(subtitle(model))
    return Group(Align.center(title), Rule(style="dim"))


def footer_view(model: Model) -> RenderableType:
    text = Text(justify="center")
    if not model.reloading:
        text.append(str(model.total_on_server), style="bold")
        text.append(" articles loaded from wallabag")
        sorts = model.options.sorts
        text.append(f" -- sorted by {sorts.field} {sorts.order}", style="dim")
    if model.status_message:
        text.append("\n")
        text.append(model.status_message, style="bold green")
    text.append("\n")
    view = model.view
    if view is View.DIALOG:
        text.append(DIALOG_KEYS)
    elif view is View.DETAIL:
        text.append(DETAIL_KEYS)
    else:
        text.append(LIST_KEYS)
    return Group(Rule(style="dim"), text)


def main_view(model: Model) -> RenderableType:
    if not model.ready:
        return Text("\n   Initializing…")
    view = model.view
    if view is View.DIALOG:
        return dialog_view(model)
    if model.reloading:
        return reloading_view(model)
    if view is View.HELP:
        return Text(HELP_TEXT)
    if view is View.DETAIL:
        return entry_detail_view(model)
    return list_view(model)


def reloading_view(model: Model) -> RenderableType:
    text = f"{model.spinner.glyph} Loading all"
    if model.total_on_server > 0:
        text += f" {model.total_on_server}"
    text += " entries from wallabag…"
    return Align.center(Text(text, style="magenta"))


def dialog_view(model: Model) -> RenderableType:
    dialog = model.dialog
    body = Text(dialog.message)
    if dialog.show_input:
        body.append("\n\n> ")
        body.append(dialog.input_value, style="bold")
        body.append("█", style="blink")
    return Align.center(
        Panel(body, box=box.ROUNDED, border_style="red", width=min(72, model.term_size.width)),
        vertical="middle",
    )


def entry_detail_view(model: Model) -> RenderableType:
    lines = model.viewport.visible_lines()
    if not lines:
        return Text("Content loading…")
    content = Text("\n".join(lines))
    if model.viewport.offset == 0:
        content.stylize("bold", 0, len(lines[0]))
    return Align.center(Panel(content, box=box.ROUNDED, width=model.viewport.width + 4))


def list_view(model: Model) -> RenderableType:
    width = max(20, model.term_size.width)
    base = max(1, width // 20)
    table = Table(box=box.SIMPLE_HEAD, expand=True, show_edge=False, header_style="bold")
    table.add_column("ID", width=base * 2, no_wrap=True)
    table.add_column("Title", width=base * 10, no_wrap=True)
    table.add_column("Domain", width=base * 4, no_wrap=True)
    table.add_column("⭐", width=base, no_wrap=True)
    table.add_column("✓", width=base, no_wrap=True)
    table.add_column("Updated date", width=base * 2, no_wrap=True)

    start, end = model.table.window()
    for index in range(start, end):
        entry = model.table.entries[index]
        row = table_row(entry)
        cells = [Text(cell) for cell in row]
        if not entry.archived:
            cells[1].stylize("bold")
        style = "#ffffaf on #5f00d7" if index == model.table.cursor else None
        table.add_row(*cells, style=style)

    if not model.table.entries:
        return Group(table, Align.center(Text("No entries match the current filters.", style="dim")))
    return table
