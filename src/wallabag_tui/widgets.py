from __future__ import annotations

from rich.console import RenderableType
from textual.widgets import Static


class Frame(Static):
    """Displays the frame composed from the current model."""

    def show(self, renderable: RenderableType) -> None:
        self.update(renderable)
