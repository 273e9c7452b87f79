"""
Transactions table widget for the FlashFlow dashboard.

Displays every flash loan executed in the session in a DataTable with
asset, amount, result and relative time, newest first.
"""

from __future__ import annotations

import math
from datetime import datetime

from rich.markup import escape
from textual.message import Message
from textual.widgets import DataTable

from core.models import ASSET_SYMBOLS, format_profit
from core.transaction_manager import Transaction, TransactionManager, TransactionStatus

PLACEHOLDER_KEY = "__placeholder__"
EMPTY_TEXT = "No transactions yet."


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_relative_time(when: datetime, now: datetime | None = None) -> str:
    """Relative time in date-fns 'formatDistanceToNow' wording, e.g. '5 minutes ago'."""
    now = now or datetime.now()
    seconds = max(0, int((now - when).total_seconds()))
    minutes = _round_half_up(seconds / 60)
    if seconds < 30:
        text = "less than a minute"
    elif minutes <= 1:
        text = "1 minute"
    elif minutes < 45:
        text = f"{minutes} minutes"
    elif minutes < 90:
        text = "about 1 hour"
    elif minutes < 24 * 60:
        text = f"about {_round_half_up(minutes / 60)} hours"
    elif minutes < 42 * 60:
        text = "1 day"
    else:
        text = f"{_round_half_up(minutes / (24 * 60))} days"
    return f"{text} ago"


def format_amount(amount: float) -> str:
    if float(amount).is_integer():
        return f"{int(amount):,}"
    return f"{amount:,.4f}".rstrip("0").rstrip(".")


def format_result(tx: Transaction) -> str:
    """Rich markup for the Result column."""
    if tx.status == TransactionStatus.COMPLETED:
        if tx.profit:
            return f"[green]+{format_profit(tx.profit, tx.asset)}[/]"
        return "[green]Success[/]"
    if tx.status == TransactionStatus.FAILED:
        error = tx.error or "Unknown error"
        if len(error) > 32:
            error = error[:31] + "…"
        return f"[red]Failed[/] [dim]{escape(error)}[/]"
    if tx.status == TransactionStatus.EXECUTING:
        return "[bold cyan]Executing[/]"
    return "[dim]Pending[/]"


class TransactionsTable(DataTable):
    """DataTable showing all flash loan transactions in the current session."""

    class TransactionSelected(Message):
        """Emitted when a transaction row is selected via Enter."""

        def __init__(self, transaction_id: str) -> None:
            super().__init__()
            self.transaction_id = transaction_id

    _placeholder_visible = False

    def on_mount(self) -> None:
        self.add_columns("Asset", "Amount", "Result", "Time")
        self.cursor_type = "row"
        self.zebra_stripes = True
        self.refresh_transactions()

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        row_key = event.row_key
        if row_key is not None and str(row_key.value) != PLACEHOLDER_KEY:
            self.post_message(self.TransactionSelected(str(row_key.value)))

    def refresh_transactions(self) -> None:
        """Poll TransactionManager and rebuild rows when the order changed."""
        if not self.columns:
            return
        transactions = TransactionManager.get_instance().get_all()

        if not transactions:
            self._show_placeholder()
            return

        if self._placeholder_visible:
            self._remove_placeholder()

        existing_keys = [str(k.value) for k in self.rows]
        current_keys = [tx.id for tx in transactions]

        if existing_keys != current_keys:
            # A new transaction goes on top, so rebuild rather than append
            self.clear()
            for tx in transactions:
                self.add_row(*self._cells(tx), key=tx.id)
            return

        column_keys = list(self.columns.keys())
        for tx in transactions:
            for col_idx, value in enumerate(self._cells(tx)):
                self.update_cell(tx.id, column_keys[col_idx], value, update_width=True)

    @staticmethod
    def _cells(tx: Transaction) -> tuple[str, str, str, str]:
        symbol = ASSET_SYMBOLS.get(tx.asset, "")
        asset = f"{symbol} {tx.asset}".strip()
        return (
            asset,
            format_amount(tx.amount),
            format_result(tx),
            format_relative_time(tx.timestamp),
        )

    def _show_placeholder(self) -> None:
        if self._placeholder_visible:
            return
        self.clear()
        self.add_row("", f"[dim]{EMPTY_TEXT}[/]", "", "", key=PLACEHOLDER_KEY)
        self._placeholder_visible = True

    def _remove_placeholder(self) -> None:
        self.clear()
        self._placeholder_visible = False
