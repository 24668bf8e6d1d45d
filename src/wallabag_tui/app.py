from __future__ import annotations

import logging
import webbrowser
from functools import partial
from typing import Any, Iterable, Optional

from textual import events
from textual.app import App, ComposeResult
from textual.css.query import NoMatches
from textual.worker import Worker, WorkerState

from . import mutations
from .cache import EntryCache
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
from .config import ClientConfig
from .gateway.base import Gateway
from .gateway.wallabag import WallabagGateway
from .messages import (
    ErrorKind,
    ErrorOccurred,
    KeyPressed,
    ModelMessage,
    Msg,
    Resized,
    RowSelected,
    SpinnerTicked,
    StatusCleared,
)
from .model import new_model
from .sync import Synchronizer
from .update import init_commands, update
from .view import render
from .widgets import Frame

logger = logging.getLogger("wallabag_tui")


class WallabagApp(App, inherit_bindings=False):
    """Runs the state machine: events in, commands out, one frame per change."""

    TITLE = "Wallabag"
    CSS_PATH = "app.css"
    ENABLE_COMMAND_PALETTE = False

    def __init__(
        self,
        config: ClientConfig,
        gateway: Optional[Gateway] = None,
        cache: Optional[EntryCache] = None,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.config = config
        self.gateway = gateway or WallabagGateway(config)
        self.cache = cache or EntryCache(config.cache_path)
        self.synchronizer = Synchronizer(config, self.gateway, self.cache)
        self.model = new_model(config)

    def compose(self) -> ComposeResult:
        yield Frame(id="frame")

    def on_mount(self) -> None:
        self.apply_message(Resized(self.size.width, self.size.height))
        self.perform_commands(init_commands())

    # --- Events in ---
    def on_key(self, event: events.Key) -> None:
        event.stop()
        key = event.character if event.is_printable and event.character else event.key
        self.apply_message(KeyPressed(key))

    def on_resize(self, event: events.Resize) -> None:
        self.apply_message(Resized(event.size.width, event.size.height))

    def on_model_message(self, message: ModelMessage) -> None:
        self.apply_message(message.msg)

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        if event.state is WorkerState.SUCCESS:
            result = getattr(event.worker, "result", None)
            if result is not None:
                self.apply_message(result)
        elif event.state is WorkerState.ERROR:
            error = getattr(event.worker, "error", None)
            logger.error("Worker %s failed: %s", event.worker.name, error)
            self.apply_message(
                ErrorOccurred(ErrorKind.TRANSPORT, f"Unexpected failure in {event.worker.name}", error)
            )

    # --- State machine ---
    def apply_message(self, msg: Msg) -> None:
        self.model, commands = update(self.model, msg)
        self.refresh_frame()
        self.perform_commands(commands)

    def refresh_frame(self) -> None:
        try:
            self.query_one(Frame).show(render(self.model))
        except NoMatches:
            pass

    # --- Commands out ---
    def perform_commands(self, commands: Iterable[Command]) -> None:
        for command in commands:
            self.perform_command(command)

    def perform_command(self, command: Command) -> None:
        match command:
            case Quit():
                self.exit()
            case RequestSync(use_cache=use_cache):
                self._run_in_thread(partial(self.synchronizer.start, use_cache), "sync_start")
            case FetchEntries(total=total, per_page=per_page, sort_field=field, sort_order=order):
                self._run_in_thread(
                    partial(self.synchronizer.fetch_entries, total, per_page, field, order),
                    "entries_loader",
                )
            case UpdateEntryStatus(entry_id=entry_id, archived=archived, starred=starred, public=public):
                self._run_in_thread(
                    partial(
                        mutations.update_entry_status,
                        self.gateway,
                        entry_id,
                        archived,
                        starred,
                        public,
                    ),
                    "entry_updater",
                )
            case AddEntry(url=url):
                self._run_in_thread(partial(mutations.add_entry, self.gateway, url), "entry_adder")
            case DeleteEntry(entry_id=entry_id):
                self._run_in_thread(
                    partial(mutations.delete_entry, self.gateway, entry_id), "entry_deleter"
                )
            case SelectEntry(entry_id=entry_id):
                self.post_message(ModelMessage(RowSelected(entry_id)))
            case ScheduleClear(delay=delay):
                self.set_timer(delay, partial(self.post_message, ModelMessage(StatusCleared())))
            case ScheduleTick(delay=delay):
                self.set_timer(delay, partial(self.post_message, ModelMessage(SpinnerTicked())))
            case OpenInBrowser(url=url):
                webbrowser.open(url)

    def _run_in_thread(self, work, name: str) -> None:
        self.run_worker(work, name=name, thread=True, exit_on_error=False)
