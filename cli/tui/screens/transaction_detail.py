"""
Transaction detail screen.

Live view of a single flash loan: the executor log on the left, status and
metadata on the right. Opened with Enter on a dashboard row.
"""

from __future__ import annotations

from rich.markup import escape
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import Screen
from textual.timer import Timer
from textual.widgets import Footer, Header, Static

from core.models import format_profit
from core.transaction_manager import Transaction, TransactionManager, TransactionStatus
from cli.tui.widgets.log_viewer import LogViewer
from cli.tui.widgets.transactions_table import format_amount, format_relative_time


class TransactionDetailScreen(Screen):
    """Detail view for a single transaction with live log and metadata."""

    BINDINGS = [
        Binding("escape", "back", "Back", show=True),
    ]

    CSS = """
    TransactionDetailScreen #detail-layout {
        layout: horizontal;
        height: 1fr;
        overflow: hidden;
    }

    TransactionDetailScreen #log-panel {
        width: 1fr;
        height: 100%;
        overflow: hidden;
    }

    TransactionDetailScreen #side-panel {
        layout: vertical;
        width: 44;
        height: 100%;
        padding: 0 1;
        overflow: hidden;
    }

    TransactionDetailScreen #metadata, TransactionDetailScreen #logic {
        height: auto;
        padding: 1;
        border: tall $border;
        border-title-color: cyan;
        border-title-style: bold;
        background: $surface;
    }

    TransactionDetailScreen #logic {
        max-height: 1fr;
        overflow-y: auto;
    }

    TransactionDetailScreen .log-viewer {
        height: 100%;
    }
    """

    def __init__(self, transaction_id: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self.transaction_id = transaction_id
        self._refresh_timer: Timer | None = None

    def compose(self) -> ComposeResult:
        tx = TransactionManager.get_instance().get(self.transaction_id)

        yield Header(show_clock=True)
        with Container(id="detail-layout"):
            with Container(id="log-panel"):
                yield LogViewer(id="log-viewer", classes="log-viewer")
            with Container(id="side-panel"):
                meta = Static(self._build_metadata_text(tx), id="metadata")
                meta.border_title = "Transaction"
                yield meta
                logic = Static(tx.execution_logic if tx else "", id="logic", markup=False)
                logic.border_title = "Execution Logic"
                yield logic
        yield Footer()

    def on_mount(self) -> None:
        self.title = f"Transaction {self.transaction_id}"
        self.query_one("#log-viewer", LogViewer).transaction_id = self.transaction_id
        self._refresh_timer = self.set_interval(0.5, self._refresh)

    def on_screen_suspend(self) -> None:
        if self._refresh_timer is not None:
            self._refresh_timer.pause()

    def on_screen_resume(self) -> None:
        if self._refresh_timer is not None:
            self._refresh_timer.resume()

    def _refresh(self) -> None:
        """Fetch new log lines and update the metadata panel."""
        tx = TransactionManager.get_instance().get(self.transaction_id)
        if tx is None:
            return

        self.query_one("#log-viewer", LogViewer).refresh_log()
        self.query_one("#metadata", Static).update(self._build_metadata_text(tx))

        # Nothing changes once the transaction has settled
        if not tx.is_active and self._refresh_timer is not None:
            self._refresh_timer.stop()
            self._refresh_timer = None

    def _build_metadata_text(self, tx: Transaction | None) -> str:
        if tx is None:
            return "[dim]Transaction not found[/]"

        lines = [
            f"[bold]ID:[/]      {tx.id}",
            f"[bold]Status:[/]  {self._format_status(tx.status)}",
            f"[bold]Asset:[/]   {tx.asset}",
            f"[bold]Amount:[/]  {format_amount(tx.amount)}",
            f"[bold]Sent:[/]    {tx.timestamp:%H:%M:%S} ({format_relative_time(tx.timestamp)})",
        ]

        elapsed = tx.elapsed
        lines.append(f"[bold]Elapsed:[/] {elapsed:.1f}s" if elapsed is not None else "[bold]Elapsed:[/] -")
        lines.append(f"[bold]LLM cost:[/] ${tx.llm_cost:.4f}")

        if tx.status == TransactionStatus.COMPLETED:
            profit = f"+{format_profit(tx.profit, tx.asset)}" if tx.profit else "-"
            lines.append(f"[bold]Profit:[/]  [green]{profit}[/]")
        if tx.error:
            lines.append("")
            lines.append(f"[bold red]Error:[/] [red]{escape(tx.error)}[/]")

        return "\n".join(lines)

    @staticmethod
    def _format_status(status: TransactionStatus) -> str:
        status_map = {
            TransactionStatus.COMPLETED: "[green bold]COMPLETED[/]",
            TransactionStatus.FAILED: "[red bold]FAILED[/]",
            TransactionStatus.EXECUTING: "[bold cyan]EXECUTING[/]",
            TransactionStatus.PENDING: "[dim]PENDING[/]",
        }
        return status_map.get(status, status.value)

    def action_back(self) -> None:
        self.app.pop_screen()
