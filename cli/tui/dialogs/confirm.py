"""Confirm dialog: a modal that asks a yes/no question and returns a bool."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Center, Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Static


class ConfirmDialog(ModalScreen[bool]):
    """Ask the user to confirm an action such as quitting while loans execute.

    Args:
        message: The question to display (Rich markup allowed).
        title: Optional bold heading above the message.
        yes_label: Caption of the confirming button.
        no_label: Caption of the refusing button.
    """

    CSS = """
    ConfirmDialog {
        align: center middle;
    }

    ConfirmDialog > Vertical {
        width: 60;
        max-width: 80%;
        height: auto;
        max-height: 80%;
        border: thick $accent;
        background: $surface;
        padding: 1 2;
    }

    ConfirmDialog #title {
        width: 100%;
        text-align: center;
        text-style: bold;
        color: $accent;
    }

    ConfirmDialog #message {
        width: 100%;
        text-align: center;
        margin-bottom: 1;
    }

    ConfirmDialog Horizontal {
        width: 100%;
        height: auto;
        align-horizontal: center;
    }

    ConfirmDialog Button {
        margin: 0 1;
        min-width: 10;
    }
    """

    BINDINGS = [
        Binding("y", "yes", "Yes", show=False),
        Binding("n", "no", "No", show=False),
        Binding("escape", "no", "Cancel", show=False),
    ]

    def __init__(
        self,
        message: str,
        title: str = "",
        yes_label: str = "Yes",
        no_label: str = "No",
        **kwargs,
    ) -> None:
        super().__init__(classes="dialog", **kwargs)
        self._message = message
        self._title = title
        self._yes_label = yes_label
        self._no_label = no_label

    def compose(self) -> ComposeResult:
        with Vertical():
            if self._title:
                yield Static(self._title, id="title")
            yield Static(self._message, id="message")
            with Center():
                with Horizontal():
                    yield Button(self._yes_label, variant="primary", id="yes")
                    yield Button(self._no_label, id="no")

    def on_mount(self) -> None:
        self.query_one("#yes", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "yes")

    def action_yes(self) -> None:
        self.dismiss(True)

    def action_no(self) -> None:
        self.dismiss(False)
