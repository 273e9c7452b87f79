"""Text input dialog: a free-text entry modal that returns the string or None."""

from __future__ import annotations

import math
from typing import Callable, Optional

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Center, Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Static

# Returns an error message for invalid input, or None when the value is accepted
Validator = Callable[[str], Optional[str]]


def positive_number(value: str) -> Optional[str]:
    """Validator for numeric settings such as the simulator delay."""
    try:
        number = float(value)
    except ValueError:
        return "Please enter a number."
    if not math.isfinite(number):
        return "Please enter a finite number."
    if number < 0:
        return "Value must not be negative."
    return None


class TextInputDialog(ModalScreen[Optional[str]]):
    """A modal dialog with a single-line text input.

    Args:
        prompt: Label text displayed above the input.
        default: Initial value for the input field.
        password: Mask the typed characters (API keys).
        placeholder: Hint shown while the input is empty.
        validator: Optional check run on submit; its message is shown inline.
    """

    CSS = """
    TextInputDialog {
        align: center middle;
    }

    TextInputDialog > Vertical {
        width: 70;
        max-width: 90%;
        height: auto;
        max-height: 80%;
        border: thick $accent;
        background: $surface;
        padding: 1 2;
    }

    TextInputDialog #prompt {
        width: 100%;
        margin-bottom: 1;
    }

    TextInputDialog Input {
        width: 100%;
        margin-bottom: 1;
    }

    TextInputDialog #input-error {
        width: 100%;
        color: $error;
        height: auto;
    }

    TextInputDialog Horizontal {
        width: 100%;
        height: auto;
        align-horizontal: center;
    }

    TextInputDialog Button {
        margin: 0 1;
        min-width: 10;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=False),
    ]

    def __init__(
        self,
        prompt: str,
        default: str = "",
        password: bool = False,
        placeholder: str = "",
        validator: Optional[Validator] = None,
        **kwargs,
    ) -> None:
        super().__init__(classes="dialog", **kwargs)
        self._prompt = prompt
        self._default = default
        self._password = password
        self._placeholder = placeholder
        self._validator = validator

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static(self._prompt, id="prompt")
            yield Input(
                value=self._default,
                password=self._password,
                placeholder=self._placeholder,
                id="text-input",
            )
            yield Static("", id="input-error")
            with Center():
                with Horizontal():
                    yield Button("OK", variant="primary", id="ok")
                    yield Button("Cancel", id="cancel")

    def on_mount(self) -> None:
        self.query_one("#text-input", Input).focus()

    def _submit(self, value: str) -> None:
        value = value.strip()
        if self._validator is not None:
            error = self._validator(value)
            if error:
                self.query_one("#input-error", Static).update(error)
                return
        self.dismiss(value)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Enter key inside the Input submits the dialog."""
        self._submit(event.value)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "ok":
            self._submit(self.query_one("#text-input", Input).value)
        else:
            self.dismiss(None)

    def action_cancel(self) -> None:
        self.dismiss(None)
