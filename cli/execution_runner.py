"""
Background execution runner for the FlashFlow dashboard.

Runs the placeholder executor in daemon threads and reports status to
TransactionManager. Log records emitted from a worker thread are routed into
the owning transaction's log buffer.
"""

import asyncio
import logging
import threading
from typing import Dict, Optional

from core.blockchain_simulator import execute_transaction
from core.models import TransactionInput
from core.transaction_manager import Transaction, TransactionManager

logger = logging.getLogger(__name__)


class TransactionLogHandler(logging.Handler):
    """Routes logging module output to per-transaction log buffers via thread ID."""

    def __init__(self):
        super().__init__()
        self._lock_registry = threading.Lock()
        self._registry: Dict[int, Transaction] = {}

    def register(self, tx: Transaction) -> None:
        tid = threading.current_thread().ident
        with self._lock_registry:
            self._registry[tid] = tx

    def unregister(self) -> None:
        tid = threading.current_thread().ident
        with self._lock_registry:
            self._registry.pop(tid, None)

    def emit(self, record: logging.LogRecord) -> None:
        tid = record.thread
        with self._lock_registry:
            tx = self._registry.get(tid)
        if tx is not None:
            try:
                tx.append_log(self.format(record))
            except Exception:
                self.handleError(record)


class ExecutionRunner:
    """Runs flash loan executions in background threads, reporting to TransactionManager."""

    def __init__(self, delay: Optional[float] = None):
        self.delay = delay
        self._tx_manager = TransactionManager.get_instance()
        self._log_handler: Optional[TransactionLogHandler] = None
        self._install_log_handler()

    def _install_log_handler(self) -> None:
        """Install a TransactionLogHandler on the root logger, once per process."""
        root = logging.getLogger()
        for handler in root.handlers:
            if isinstance(handler, TransactionLogHandler):
                self._log_handler = handler
                return
        self._log_handler = TransactionLogHandler()
        self._log_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        root.addHandler(self._log_handler)
        # The root level may be WARNING when logging was never configured
        if root.level > logging.INFO:
            root.setLevel(logging.INFO)

    def start_execution(self, tx_id: str, is_viable: bool = True) -> Optional[threading.Thread]:
        """Start executing a transaction in a background daemon thread."""
        tx = self._tx_manager.get(tx_id)
        if not tx:
            logger.warning("Unknown transaction %s", tx_id)
            return None

        thread = threading.Thread(
            target=self._execution_worker,
            args=(tx, is_viable),
            daemon=True,
            name=f"execute-{tx_id}",
        )
        tx.thread = thread
        thread.start()
        return thread

    def _execution_worker(self, tx: Transaction, is_viable: bool) -> None:
        """Background thread: Pending -> Executing -> Completed | Failed."""
        if self._log_handler:
            self._log_handler.register(tx)

        self._tx_manager.start(tx.id)
        logger.info("Executing flash loan %s: %s %s", tx.id, tx.amount, tx.asset)

        try:
            result = asyncio.run(
                execute_transaction(
                    TransactionInput(execution_logic=tx.execution_logic, is_viable=is_viable),
                    delay=self.delay,
                )
            )
            if result.success:
                self._tx_manager.complete(tx.id, result.profit)
                logger.info("Transaction %s completed", tx.id)
            else:
                self._tx_manager.fail(tx.id, result.error or "Unknown error")
                logger.info("Transaction %s failed: %s", tx.id, result.error)

        except Exception as e:
            logger.exception("Transaction %s crashed", tx.id)
            self._tx_manager.fail(tx.id, str(e)[:200])

        finally:
            if self._log_handler:
                self._log_handler.unregister()
