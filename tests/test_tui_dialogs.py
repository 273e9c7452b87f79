"""
Tests for Textual TUI modal dialogs.

Tests ConfirmDialog, SelectDialog and TextInputDialog using Textual's
run_test() + Pilot API.
"""

import unittest
from unittest import IsolatedAsyncioTestCase

from textual.app import App, ComposeResult
from textual.widgets import Input, Static


# ── Minimal host app for dialog testing ─────────────────────────


class DialogTestApp(App):
    """Minimal app that hosts a dialog for testing."""

    def __init__(self, dialog, **kwargs):
        super().__init__(**kwargs)
        self._dialog = dialog
        self.dialog_result = "NOT_SET"

    def compose(self) -> ComposeResult:
        yield Static("Dialog Test Host")

    def on_mount(self) -> None:
        def _capture(result):
            self.dialog_result = result

        self.push_screen(self._dialog, callback=_capture)


# ── ConfirmDialog Tests ─────────────────────────────────────────


class TestConfirmDialog(IsolatedAsyncioTestCase):
    """Test ConfirmDialog returns True/False based on user action."""

    async def test_confirm_yes_button(self):
        """Clicking Yes button should return True."""
        from cli.tui.dialogs.confirm import ConfirmDialog

        app = DialogTestApp(ConfirmDialog("Quit anyway?", title="Quit FlashFlow"))
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.click("#yes")
            await pilot.pause()
            self.assertIs(app.dialog_result, True)

    async def test_confirm_no_button(self):
        """Clicking No button should return False."""
        from cli.tui.dialogs.confirm import ConfirmDialog

        app = DialogTestApp(ConfirmDialog("Quit anyway?"))
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.click("#no")
            await pilot.pause()
            self.assertIs(app.dialog_result, False)

    async def test_confirm_y_key(self):
        from cli.tui.dialogs.confirm import ConfirmDialog

        app = DialogTestApp(ConfirmDialog("Proceed?"))
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("y")
            await pilot.pause()
            self.assertIs(app.dialog_result, True)

    async def test_confirm_escape_returns_false(self):
        from cli.tui.dialogs.confirm import ConfirmDialog

        app = DialogTestApp(ConfirmDialog("Proceed?"))
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("escape")
            await pilot.pause()
            self.assertIs(app.dialog_result, False)

    async def test_confirm_custom_labels(self):
        from textual.widgets import Button
        from cli.tui.dialogs.confirm import ConfirmDialog

        app = DialogTestApp(ConfirmDialog("Execute?", yes_label="Execute", no_label="Back"))
        async with app.run_test() as pilot:
            await pilot.pause()
            self.assertEqual(str(app.screen.query_one("#yes", Button).label), "Execute")
            self.assertEqual(str(app.screen.query_one("#no", Button).label), "Back")


# ── SelectDialog Tests ──────────────────────────────────────────


class TestSelectDialog(IsolatedAsyncioTestCase):
    """Test SelectDialog returns the highlighted choice."""

    async def test_enter_selects_first(self):
        from cli.tui.dialogs.select import SelectDialog

        app = DialogTestApp(SelectDialog("Provider", ["openai", "gemini"]))
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("enter")
            await pilot.pause()
            self.assertEqual(app.dialog_result, "openai")

    async def test_current_is_preselected(self):
        from cli.tui.dialogs.select import SelectDialog

        dialog = SelectDialog(
            "Provider",
            ["openai", "gemini"],
            labels={"openai": "OpenAI", "gemini": "Google Gemini"},
            current="gemini",
        )
        app = DialogTestApp(dialog)
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("enter")
            await pilot.pause()
            self.assertEqual(app.dialog_result, "gemini")

    async def test_navigate_down(self):
        from cli.tui.dialogs.select import SelectDialog

        app = DialogTestApp(SelectDialog("Model", ["gpt-4o", "gpt-4o-mini", "gpt-4.1"]))
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("down")
            await pilot.press("down")
            await pilot.press("enter")
            await pilot.pause()
            self.assertEqual(app.dialog_result, "gpt-4.1")

    async def test_escape_returns_none(self):
        from cli.tui.dialogs.select import SelectDialog

        app = DialogTestApp(SelectDialog("Model", ["gpt-4o"]))
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("escape")
            await pilot.pause()
            self.assertIsNone(app.dialog_result)

    def test_label_marks_current(self):
        from cli.tui.dialogs.select import SelectDialog

        dialog = SelectDialog("Provider", ["openai", "gemini"], labels={"gemini": "Google Gemini"}, current="gemini")
        self.assertEqual(dialog._label_for("gemini"), "● Google Gemini")
        self.assertEqual(dialog._label_for("openai"), "  openai")


# ── TextInputDialog Tests ───────────────────────────────────────


class TestTextInputDialog(IsolatedAsyncioTestCase):
    """Test TextInputDialog submit, cancel and validation."""

    async def test_enter_returns_default(self):
        from cli.tui.dialogs.text_input import TextInputDialog

        app = DialogTestApp(TextInputDialog("Delay", default="2.0"))
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("enter")
            await pilot.pause()
            self.assertEqual(app.dialog_result, "2.0")

    async def test_typed_value_is_stripped(self):
        from cli.tui.dialogs.text_input import TextInputDialog

        app = DialogTestApp(TextInputDialog("API key", password=True))
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("space", "s", "k", "1", "space")
            await pilot.press("enter")
            await pilot.pause()
            self.assertEqual(app.dialog_result, "sk1")

    async def test_cancel_button_returns_none(self):
        from cli.tui.dialogs.text_input import TextInputDialog

        app = DialogTestApp(TextInputDialog("API key"))
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.click("#cancel")
            await pilot.pause()
            self.assertIsNone(app.dialog_result)

    async def test_escape_returns_none(self):
        from cli.tui.dialogs.text_input import TextInputDialog

        app = DialogTestApp(TextInputDialog("API key"))
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("escape")
            await pilot.pause()
            self.assertIsNone(app.dialog_result)

    async def test_validator_blocks_invalid_value(self):
        from cli.tui.dialogs.text_input import TextInputDialog, positive_number

        app = DialogTestApp(TextInputDialog("Delay", default="soon", validator=positive_number))
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("enter")
            await pilot.pause()
            # Dialog stays open with an inline error
            self.assertEqual(app.dialog_result, "NOT_SET")
            self.assertIsInstance(app.screen, TextInputDialog)

            app.screen.query_one("#text-input", Input).value = "1.5"
            await pilot.press("enter")
            await pilot.pause()
            self.assertEqual(app.dialog_result, "1.5")


class TestPositiveNumber(unittest.TestCase):

    def test_messages(self):
        from cli.tui.dialogs.text_input import positive_number

        self.assertIsNone(positive_number("0"))
        self.assertIsNone(positive_number("2.5"))
        self.assertEqual(positive_number("abc"), "Please enter a number.")
        self.assertEqual(positive_number("-1"), "Value must not be negative.")

    def test_rejects_non_finite(self):
        from cli.tui.dialogs.text_input import positive_number

        for value in ("nan", "inf", "-inf", "1e400"):
            self.assertEqual(positive_number(value), "Please enter a finite number.")


if __name__ == "__main__":
    unittest.main()
