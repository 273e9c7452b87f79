"""Select dialog: a single-choice list modal that returns the chosen value or None."""

from __future__ import annotations

from typing import Dict, Optional

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Label, ListItem, ListView, Static


class SelectDialog(ModalScreen[Optional[str]]):
    """Pick one value from a list, e.g. an LLM provider or a model name.

    Args:
        prompt: Header text displayed above the list.
        choices: Values the user can pick from. The dialog returns one of these.
        labels: Optional display text per value (defaults to the value itself).
        current: Value to highlight initially; marked with a bullet.
    """

    CSS = """
    SelectDialog {
        align: center middle;
    }

    SelectDialog > Vertical {
        width: 60;
        max-width: 90%;
        height: auto;
        max-height: 80%;
        border: thick $accent;
        background: $surface;
        padding: 1 2;
    }

    SelectDialog #prompt {
        width: 100%;
        margin-bottom: 1;
    }

    SelectDialog ListView {
        width: 100%;
        height: auto;
        max-height: 20;
        margin-bottom: 1;
    }

    SelectDialog ListItem {
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=False),
    ]

    def __init__(
        self,
        prompt: str,
        choices: list[str],
        labels: Optional[Dict[str, str]] = None,
        current: Optional[str] = None,
        **kwargs,
    ) -> None:
        super().__init__(classes="dialog", **kwargs)
        self._prompt = prompt
        self._choices = list(choices)
        self._labels = labels or {}
        self._current = current

    def _label_for(self, choice: str) -> str:
        text = self._labels.get(choice, choice)
        marker = "● " if choice == self._current else "  "
        return marker + text

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static(self._prompt, id="prompt")
            # ListItem names are CSS identifiers, so keep the value by position
            yield ListView(
                *[ListItem(Label(self._label_for(c), markup=False)) for c in self._choices],
                id="select-list",
            )

    def on_mount(self) -> None:
        list_view = self.query_one("#select-list", ListView)
        if self._current in self._choices:
            list_view.index = self._choices.index(self._current)
        list_view.focus()

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        """User pressed Enter on a highlighted item."""
        index = event.list_view.index
        if index is None or not 0 <= index < len(self._choices):
            self.dismiss(None)
            return
        self.dismiss(self._choices[index])

    def action_cancel(self) -> None:
        self.dismiss(None)
