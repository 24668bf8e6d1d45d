from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Tuple

from .commands import (
    AddEntry,
    Command,
    DeleteEntry,
    FetchEntries,
    OpenInBrowser,
    Quit,
    RequestSync,
    ScheduleClear,
    ScheduleTick,
    SelectEntry,
    UpdateEntryStatus,
)
from .config import SPINNER_INTERVAL, STATUS_CLEAR_DELAY
from .datamodels import Entry
from .filters import find_entry_index
from .messages import (
    CountReceived,
    EntriesLoaded,
    EntryAdded,
    EntryDeleted,
    EntryUpdated,
    ErrorKind,
    ErrorOccurred,
    KeyPressed,
    Msg,
    Resized,
    RowSelected,
    SpinnerTicked,
    StatusCleared,
)
from .model import DialogState, Model, View, detail_content

logger = logging.getLogger("wallabag_tui")

Result = Tuple[Model, List[Command]]

ERROR_HEADINGS = {
    ErrorKind.TRANSPORT: "Error",
    ErrorKind.DECODE: "Unconfirmed response",
    ErrorKind.SECURITY: "Security error",
    ErrorKind.VALIDATION: "Invalid input",
    ErrorKind.CACHE: "Cache error",
}

DELETE_ACTION = "delete-entry"
ADD_ACTION = "add-entry"
SEARCH_ACTION = "search"

FILTER_KEYS = {"u": "unread", "s": "starred", "a": "archived", "p": "public"}
STATUS_KEYS = {"a": "archived", "s": "starred", "p": "public"}
PAGE_SIZE = 10


def init_commands() -> List[Command]:
    """Commands issued once at startup."""
    return [RequestSync(use_cache=True), ScheduleTick(SPINNER_INTERVAL)]


def error_dialog_text(error: ErrorOccurred) -> str:
    return f"{ERROR_HEADINGS[error.kind]}:\n{error.message}"


# --- Dispatcher ---
def update(model: Model, msg: Msg) -> Result:
    """Apply one message and return the next model plus follow-up commands."""
    if model.config.debug:
        logger.debug(
            "Update message received, type: %s, view: %s", type(msg).__name__, model.view.value
        )

    commands: List[Command] = []

    match msg:
        case KeyPressed(key="ctrl+c"):
            return model, [Quit()]
        case KeyPressed(key="?") if not model.reloading and not model.dialog.active:
            return replace(model, show_help=not model.show_help), []
        case ErrorOccurred():
            logger.error("%s: %s (%s)", msg.kind.value, msg.message, msg.cause)
            model = replace(
                model, reloading=False, dialog=DialogState(message=error_dialog_text(msg))
            )
        case EntryUpdated(entry=entry):
            model = _replace_entry(model, entry)
            model = replace(model, status_message=f"Entry {entry.id} updated")
            commands.append(ScheduleClear(STATUS_CLEAR_DELAY))
        case EntryAdded(entry=entry):
            model = _add_entry(model, entry)
            model = replace(model, status_message=f"Entry {entry.id} added")
            commands.append(ScheduleClear(STATUS_CLEAR_DELAY))
        case EntryDeleted(entry_id=entry_id):
            model = _remove_entry(model, entry_id)
            model = replace(model, status_message=f"Entry {entry_id} deleted")
            commands.append(ScheduleClear(STATUS_CLEAR_DELAY))
        case StatusCleared():
            model = replace(model, status_message="")
        case RowSelected(entry_id=entry_id):
            model = replace(model, selected_id=entry_id)
            viewport = model.viewport.goto_top().set_content(detail_content(model, entry_id))
            model = replace(model, viewport=viewport)
        case CountReceived(total=total):
            model = replace(model, total_on_server=total)
            sorts = model.options.sorts
            commands.append(
                FetchEntries(total, model.config.entries_per_api_call, sorts.field, sorts.order)
            )
        case EntriesLoaded():
            model = _apply_entries(model, msg)
        case SpinnerTicked():
            if model.reloading:
                model = replace(model, spinner=model.spinner.advance())
                commands.append(ScheduleTick(SPINNER_INTERVAL))
        case _:
            pass

    view = model.view
    if view is View.DIALOG:
        model, more = update_dialog_view(msg, model)
    elif view is View.HELP:
        model, more = update_help_view(msg, model)
    elif view is View.DETAIL:
        model, more = update_entry_view(msg, model)
    else:
        model, more = update_list_view(msg, model)
    return model, commands + more


# --- Entry set changes ---
def _replace_entry(model: Model, entry: Entry) -> Model:
    index = find_entry_index(model.entries, entry.id)
    if index < 0:
        logger.debug("Updated entry %d is no longer in the local set", entry.id)
        return model
    entries = model.entries[:index] + (entry,) + model.entries[index + 1 :]
    return _refresh_detail(model.with_entries(entries), entry.id)


def _add_entry(model: Model, entry: Entry) -> Model:
    # wallabag answers with the existing entry when a URL is saved twice.
    if find_entry_index(model.entries, entry.id) >= 0:
        return _replace_entry(model, entry)
    return model.with_entries(model.entries + (entry,))


def _remove_entry(model: Model, entry_id: int) -> Model:
    entries = tuple(e for e in model.entries if e.id != entry_id)
    model = model.with_entries(entries)
    if model.selected_id == entry_id:
        model = replace(model, selected_id=0, viewport=model.viewport.goto_top())
    return model


def _apply_entries(model: Model, msg: EntriesLoaded) -> Model:
    # Overlapping reloads are not cancelled: the last applied result wins.
    model = replace(model, reloading=False, total_on_server=len(msg.entries))
    model = model.with_entries(msg.entries)
    if model.selected_id > 0:
        model = _refresh_detail(model, model.selected_id)
    if msg.cache_warning:
        model = replace(
            model,
            dialog=DialogState(
                message=error_dialog_text(
                    ErrorOccurred(
                        ErrorKind.CACHE,
                        f"Entries loaded, but they could not be cached.\n{msg.cache_warning}",
                    )
                )
            ),
        )
    return model


def _refresh_detail(model: Model, entry_id: int) -> Model:
    if model.selected_id != entry_id:
        return model
    return replace(model, viewport=model.viewport.set_content(detail_content(model, entry_id)))


def _delete_dialog(model: Model, entry_id: int, title: str) -> Model:
    return replace(
        model,
        dialog=DialogState(
            message=f"Delete entry {entry_id}?\n{title}\n\n[enter] confirm, [esc] cancel",
            action=f"{DELETE_ACTION}:{entry_id}",
        ),
    )


# --- View updaters ---
def update_dialog_view(msg: Msg, model: Model) -> Result:
    dialog = model.dialog
    match msg:
        case KeyPressed(key="enter"):
            return _confirm_dialog(replace(model, dialog=DialogState()), dialog)
        case KeyPressed(key="escape"):
            return replace(model, dialog=DialogState()), []
        case KeyPressed(key="q") if not dialog.show_input:
            return replace(model, dialog=DialogState()), []
        case KeyPressed(key="backspace") if dialog.show_input:
            return replace(model, dialog=replace(dialog, input_value=dialog.input_value[:-1])), []
        case KeyPressed(key="space") if dialog.show_input:
            return replace(model, dialog=replace(dialog, input_value=dialog.input_value + " ")), []
        case KeyPressed(key=key) if dialog.show_input and len(key) == 1:
            return replace(model, dialog=replace(dialog, input_value=dialog.input_value + key)), []
        case Resized(width=width, height=height):
            return model.resized(width, height), []
    return model, []


def _confirm_dialog(model: Model, dialog: DialogState) -> Result:
    action, _, argument = dialog.action.partition(":")
    if action == DELETE_ACTION:
        return model, [DeleteEntry(int(argument))]
    if action == ADD_ACTION:
        return replace(model, status_message="Adding entry…"), [AddEntry(dialog.input_value)]
    if action == SEARCH_ACTION:
        filters = replace(model.options.filters, search=dialog.input_value.strip())
        return model.with_options(replace(model.options, filters=filters)), []
    return model, []


def update_help_view(msg: Msg, model: Model) -> Result:
    match msg:
        case KeyPressed(key="q" | "escape"):
            return replace(model, show_help=False), []
        case Resized(width=width, height=height):
            return model.resized(width, height), []
    return model, []


def update_entry_view(msg: Msg, model: Model) -> Result:
    match msg:
        case KeyPressed(key="j" | "down"):
            return replace(model, viewport=model.viewport.half_view_down()), []
        case KeyPressed(key="k" | "up"):
            return replace(model, viewport=model.viewport.half_view_up()), []
        case KeyPressed(key="q" | "escape" | "backspace"):
            return replace(model, selected_id=0, viewport=model.viewport.goto_top()), []
        case KeyPressed(key=key) if key in STATUS_KEYS:
            entry = model.selected_entry()
            if entry is None:
                return model, []
            flags = {
                "archived": entry.archived,
                "starred": entry.starred,
                "public": entry.public,
            }
            flags[STATUS_KEYS[key]] = not flags[STATUS_KEYS[key]]
            return (
                replace(model, status_message=f"Updating entry {entry.id}…"),
                [UpdateEntryStatus(entry.id, **flags)],
            )
        case KeyPressed(key="d"):
            entry = model.selected_entry()
            if entry is None:
                return model, []
            return _delete_dialog(model, entry.id, entry.title), []
        case KeyPressed(key="o"):
            entry = model.selected_entry()
            if entry is None or not entry.url:
                return model, []
            return model, [OpenInBrowser(entry.url)]
        case Resized(width=width, height=height):
            model = model.resized(width, height)
            return _refresh_detail(model, model.selected_id), []
    return model, []


def update_list_view(msg: Msg, model: Model) -> Result:
    table = model.table
    match msg:
        case KeyPressed(key="j" | "down"):
            return replace(model, table=table.move(1)), []
        case KeyPressed(key="k" | "up"):
            return replace(model, table=table.move(-1)), []
        case KeyPressed(key="pagedown"):
            return replace(model, table=table.move(PAGE_SIZE)), []
        case KeyPressed(key="pageup"):
            return replace(model, table=table.move(-PAGE_SIZE)), []
        case KeyPressed(key="home"):
            return replace(model, table=table.goto_top()), []
        case KeyPressed(key="end"):
            return replace(model, table=table.goto_bottom()), []
        case KeyPressed(key="q"):
            return model, [Quit()]
        case KeyPressed(key="r"):
            logger.info("Loading entries from API")
            commands: List[Command] = [RequestSync(use_cache=False)]
            if not model.reloading:
                commands.append(ScheduleTick(SPINNER_INTERVAL))
            return replace(model, reloading=True, total_on_server=0), commands
        case KeyPressed(key=key) if key in FILTER_KEYS:
            filters = model.options.filters.toggle(FILTER_KEYS[key])
            return model.with_options(replace(model.options, filters=filters)), []
        case KeyPressed(key="o"):
            sorts = model.options.sorts.toggle_order()
            return model.with_options(replace(model.options, sorts=sorts)), []
        case KeyPressed(key="f"):
            sorts = model.options.sorts.next_field()
            return model.with_options(replace(model.options, sorts=sorts)), []
        case KeyPressed(key="enter"):
            entry = table.selected()
            if entry is None:
                return model, []
            return model, [SelectEntry(entry.id)]
        case KeyPressed(key="/"):
            dialog = DialogState(
                message="Search titles and domains:",
                show_input=True,
                input_value=model.options.filters.search,
                action=SEARCH_ACTION,
            )
            return replace(model, dialog=dialog), []
        case KeyPressed(key="n"):
            dialog = DialogState(message="URL to save:", show_input=True, action=ADD_ACTION)
            return replace(model, dialog=dialog), []
        case KeyPressed(key="d"):
            entry = table.selected()
            if entry is None:
                return model, []
            return _delete_dialog(model, entry.id, entry.title), []
        case Resized(width=width, height=height):
            return model.resized(width, height), []
    return model, []
