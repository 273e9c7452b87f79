"""
Main dashboard screen for the FlashFlow TUI.

Displays the transactions table, the session cost bar and footer key-binding
hints. This is the default screen pushed by FlashFlowApp on startup.
"""

from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.screen import Screen
from textual.timer import Timer
from textual.widgets import Footer, Header, Static

from cli.tui.widgets.cost_bar import CostBar
from cli.tui.widgets.transactions_table import TransactionsTable


class MainScreen(Screen):
    """Transaction dashboard: monitor live and past flash loan transactions."""

    BINDINGS = [
        Binding("n", "new_loan", "New Loan", show=True),
        Binding("a", "about", "About", show=True),
        Binding("s", "settings", "Settings", show=True),
        Binding("q", "quit", "Quit", show=True),
    ]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._refresh_timer: Timer | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield Static(
            "[bold]Transaction Dashboard[/bold]  [dim]Monitor live and past flash loan transactions.[/dim]",
            id="dashboard-title",
        )
        yield TransactionsTable(id="transactions-table")
        yield CostBar(id="cost-bar", classes="cost-bar")
        yield Footer()

    def on_mount(self) -> None:
        """Set up a 1-second periodic refresh for the table and cost bar."""
        self.title = "FlashFlow"
        self._refresh_timer = self.set_interval(1.0, self._refresh)
        self._refresh()

    def on_screen_suspend(self) -> None:
        if self._refresh_timer is not None:
            self._refresh_timer.pause()

    def on_screen_resume(self) -> None:
        if self._refresh_timer is not None:
            self._refresh_timer.resume()
        self._refresh()

    def _refresh(self) -> None:
        """Poll TransactionManager and LLMUsageTracker to update widgets."""
        self.query_one("#transactions-table", TransactionsTable).refresh_transactions()
        self.query_one("#cost-bar", CostBar).refresh_cost()

    def on_transactions_table_transaction_selected(
        self, message: TransactionsTable.TransactionSelected
    ) -> None:
        """Enter on a row opens the transaction detail screen."""
        from cli.tui.screens.transaction_detail import TransactionDetailScreen

        self.app.push_screen(TransactionDetailScreen(transaction_id=message.transaction_id))

    # ── Action handlers (delegate to app-level actions) ──────────

    def action_new_loan(self) -> None:
        self.app.action_new_loan()

    def action_about(self) -> None:
        self.app.action_about()

    def action_settings(self) -> None:
        self.app.action_settings()

    def action_quit(self) -> None:
        self.app.action_quit()
