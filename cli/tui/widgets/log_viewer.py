"""
Log viewer widget for the FlashFlow transaction detail screen.

Tails the log buffer of a single transaction, fetching new lines
incrementally from TransactionManager.
"""

from __future__ import annotations

from textual.reactive import reactive
from textual.widgets import RichLog

from core.transaction_manager import TransactionManager


class LogViewer(RichLog):
    """Scrolling log viewer that tails output for a specific transaction."""

    transaction_id: reactive[str | None] = reactive(None)

    def watch_transaction_id(self, old_value: str | None, new_value: str | None) -> None:
        """When transaction_id changes, clear the log and load existing lines."""
        self.clear()
        if new_value is not None:
            tm = TransactionManager.get_instance()
            for line in tm.get_log(new_value):
                self.write(line)
            # Advance the read cursor past what was just written
            tm.get_new_log(new_value)

    def refresh_log(self) -> None:
        """Fetch and display new log lines for the current transaction."""
        if self.transaction_id is None:
            return
        for line in TransactionManager.get_instance().get_new_log(self.transaction_id):
            self.write(line)
