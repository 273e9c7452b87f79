"""
Session transaction ledger for the FlashFlow dashboard.

Thread-safe singleton that tracks every flash loan the user executed in the
current session (pending, executing, completed, failed). Used by the
dashboard for rendering and by ExecutionRunner for status updates.
"""

import random
import string
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

_ID_ALPHABET = string.ascii_lowercase + string.digits
MAX_LOG_LINES = 500


class TransactionStatus(Enum):
    PENDING = "Pending"
    EXECUTING = "Executing"
    COMPLETED = "Completed"
    FAILED = "Failed"


def new_transaction_id() -> str:
    """Return an id like 'fl-k3v9x0a2q'."""
    return "fl-" + "".join(random.choices(_ID_ALPHABET, k=9))


@dataclass
class Transaction:
    """A single flash loan sent to the (placeholder) network."""

    id: str
    asset: str
    amount: float
    status: TransactionStatus = TransactionStatus.PENDING
    timestamp: datetime = field(default_factory=datetime.now)
    profit: Optional[float] = None
    error: Optional[str] = None
    execution_logic: str = ""
    llm_cost: float = 0.0
    thread: Optional[threading.Thread] = field(default=None, repr=False)
    started_at: Optional[float] = None
    ended_at: Optional[float] = None
    _log_lines: List[str] = field(default_factory=list, repr=False)
    _log_cursor: int = field(default=0, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def elapsed(self) -> Optional[float]:
        if self.started_at is None:
            return None
        end = self.ended_at or time.time()
        return end - self.started_at

    @property
    def is_active(self) -> bool:
        return self.status in (TransactionStatus.PENDING, TransactionStatus.EXECUTING)

    # ── Log buffer ──

    def append_log(self, line: str) -> None:
        with self._lock:
            self._log_lines.append(line)
            overflow = len(self._log_lines) - MAX_LOG_LINES
            if overflow > 0:
                del self._log_lines[:overflow]
                self._log_cursor = max(0, self._log_cursor - overflow)

    def get_all_log_lines(self) -> List[str]:
        with self._lock:
            return list(self._log_lines)

    def get_new_log_lines(self) -> List[str]:
        """Lines appended since the previous call."""
        with self._lock:
            lines = self._log_lines[self._log_cursor:]
            self._log_cursor = len(self._log_lines)
            return lines


class TransactionManager:
    """Thread-safe singleton registry for all transactions in the session."""

    _instance: Optional["TransactionManager"] = None
    _instance_lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> "TransactionManager":
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        with cls._instance_lock:
            cls._instance = cls()

    def __init__(self):
        self._lock = threading.Lock()
        self._transactions: Dict[str, Transaction] = {}

    def create_transaction(
        self,
        asset: str,
        amount: float,
        execution_logic: str = "",
        llm_cost: float = 0.0,
    ) -> Transaction:
        """Register a new pending transaction and return it."""
        with self._lock:
            tx_id = new_transaction_id()
            while tx_id in self._transactions:
                tx_id = new_transaction_id()
            tx = Transaction(
                id=tx_id,
                asset=asset,
                amount=amount,
                execution_logic=execution_logic,
                llm_cost=llm_cost,
            )
            self._transactions[tx_id] = tx
        return tx

    def start(self, tx_id: str) -> None:
        """Mark a transaction as executing."""
        with self._lock:
            tx = self._transactions.get(tx_id)
            if tx:
                tx.status = TransactionStatus.EXECUTING
                tx.started_at = time.time()

    def complete(self, tx_id: str, profit: Optional[float] = None) -> None:
        """Mark a transaction as completed."""
        with self._lock:
            tx = self._transactions.get(tx_id)
            if tx:
                tx.status = TransactionStatus.COMPLETED
                tx.ended_at = time.time()
                tx.profit = profit

    def fail(self, tx_id: str, error: str) -> None:
        """Mark a transaction as failed."""
        with self._lock:
            tx = self._transactions.get(tx_id)
            if tx:
                tx.status = TransactionStatus.FAILED
                tx.ended_at = time.time()
                tx.error = error

    def get(self, tx_id: str) -> Optional[Transaction]:
        with self._lock:
            return self._transactions.get(tx_id)

    def get_all(self) -> List[Transaction]:
        """Return all transactions, newest first."""
        with self._lock:
            txs = list(self._transactions.values())
        return sorted(txs, key=lambda t: t.timestamp, reverse=True)

    def get_active(self) -> List[Transaction]:
        """Return transactions that are PENDING or EXECUTING."""
        return [t for t in self.get_all() if t.is_active]

    def session_profit(self) -> Dict[str, float]:
        """Total profit of completed transactions, per asset."""
        totals: Dict[str, float] = {}
        for tx in self.get_all():
            if tx.status == TransactionStatus.COMPLETED and tx.profit:
                totals[tx.asset] = totals.get(tx.asset, 0.0) + tx.profit
        return totals

    def get_log(self, tx_id: str) -> List[str]:
        tx = self.get(tx_id)
        return tx.get_all_log_lines() if tx else []

    def get_new_log(self, tx_id: str) -> List[str]:
        tx = self.get(tx_id)
        return tx.get_new_log_lines() if tx else []

    @property
    def has_active(self) -> bool:
        with self._lock:
            return any(t.is_active for t in self._transactions.values())

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._transactions)
