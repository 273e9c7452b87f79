"""
Tests for core/transaction_manager.py: session transaction ledger.
"""

import re
import threading
import unittest
from datetime import datetime, timedelta

from core.transaction_manager import (
    MAX_LOG_LINES,
    Transaction,
    TransactionManager,
    TransactionStatus,
    new_transaction_id,
)


class TestTransactionId(unittest.TestCase):

    def test_format(self):
        for _ in range(20):
            self.assertRegex(new_transaction_id(), r"^fl-[a-z0-9]{9}$")


class TestTransaction(unittest.TestCase):

    def test_defaults(self):
        tx = Transaction(id="fl-test", asset="ETH", amount=1000)
        self.assertEqual(tx.status, TransactionStatus.PENDING)
        self.assertTrue(tx.is_active)
        self.assertIsNone(tx.elapsed)

    def test_new_log_lines_cursor(self):
        tx = Transaction(id="fl-test", asset="ETH", amount=1)
        tx.append_log("one")
        tx.append_log("two")
        self.assertEqual(tx.get_new_log_lines(), ["one", "two"])
        self.assertEqual(tx.get_new_log_lines(), [])
        tx.append_log("three")
        self.assertEqual(tx.get_new_log_lines(), ["three"])
        self.assertEqual(tx.get_all_log_lines(), ["one", "two", "three"])

    def test_log_buffer_bounded(self):
        tx = Transaction(id="fl-test", asset="ETH", amount=1)
        for i in range(MAX_LOG_LINES + 10):
            tx.append_log(str(i))
        lines = tx.get_all_log_lines()
        self.assertEqual(len(lines), MAX_LOG_LINES)
        self.assertEqual(lines[0], "10")


class TestTransactionManager(unittest.TestCase):

    def setUp(self):
        TransactionManager.reset()
        self.tm = TransactionManager.get_instance()

    def tearDown(self):
        TransactionManager.reset()

    def test_singleton(self):
        self.assertIs(self.tm, TransactionManager.get_instance())

    def test_create_transaction(self):
        tx = self.tm.create_transaction("ETH", 1000.0, execution_logic="// code")
        self.assertTrue(re.match(r"^fl-", tx.id))
        self.assertIs(self.tm.get(tx.id), tx)
        self.assertEqual(tx.execution_logic, "// code")
        self.assertEqual(self.tm.count, 1)
        self.assertTrue(self.tm.has_active)
        self.assertEqual(tx.llm_cost, 0.0)

    def test_create_transaction_with_llm_cost(self):
        tx = self.tm.create_transaction("DAI", 50.0, llm_cost=0.0031)
        self.assertAlmostEqual(self.tm.get(tx.id).llm_cost, 0.0031)

    def test_lifecycle_completed(self):
        tx = self.tm.create_transaction("ETH", 1000.0)
        self.tm.start(tx.id)
        self.assertEqual(tx.status, TransactionStatus.EXECUTING)
        self.assertIsNotNone(tx.started_at)
        self.tm.complete(tx.id, 0.25)
        self.assertEqual(tx.status, TransactionStatus.COMPLETED)
        self.assertEqual(tx.profit, 0.25)
        self.assertFalse(tx.is_active)
        self.assertFalse(self.tm.has_active)
        self.assertGreaterEqual(tx.elapsed, 0)

    def test_lifecycle_failed(self):
        tx = self.tm.create_transaction("DAI", 50.0)
        self.tm.start(tx.id)
        self.tm.fail(tx.id, "Insufficient liquidity for arbitrage.")
        self.assertEqual(tx.status, TransactionStatus.FAILED)
        self.assertEqual(tx.error, "Insufficient liquidity for arbitrage.")
        self.assertIsNone(tx.profit)

    def test_unknown_id_is_ignored(self):
        self.tm.start("fl-missing")
        self.tm.complete("fl-missing", 1.0)
        self.tm.fail("fl-missing", "x")
        self.assertIsNone(self.tm.get("fl-missing"))
        self.assertEqual(self.tm.get_log("fl-missing"), [])

    def test_get_all_newest_first(self):
        old = self.tm.create_transaction("ETH", 1.0)
        new = self.tm.create_transaction("DAI", 2.0)
        old.timestamp = datetime.now() - timedelta(minutes=5)
        self.assertEqual([t.id for t in self.tm.get_all()], [new.id, old.id])

    def test_get_active(self):
        a = self.tm.create_transaction("ETH", 1.0)
        b = self.tm.create_transaction("ETH", 2.0)
        self.tm.complete(a.id, 0.1)
        self.assertEqual([t.id for t in self.tm.get_active()], [b.id])

    def test_session_profit_per_asset(self):
        for asset, profit in (("ETH", 0.1), ("ETH", 0.2), ("DAI", 0.3)):
            tx = self.tm.create_transaction(asset, 1.0)
            self.tm.complete(tx.id, profit)
        failed = self.tm.create_transaction("ETH", 1.0)
        self.tm.fail(failed.id, "nope")

        totals = self.tm.session_profit()
        self.assertAlmostEqual(totals["ETH"], 0.3)
        self.assertAlmostEqual(totals["DAI"], 0.3)

    def test_get_new_log(self):
        tx = self.tm.create_transaction("ETH", 1.0)
        tx.append_log("INFO: executing")
        self.assertEqual(self.tm.get_new_log(tx.id), ["INFO: executing"])
        self.assertEqual(self.tm.get_new_log(tx.id), [])
        self.assertEqual(self.tm.get_log(tx.id), ["INFO: executing"])

    def test_concurrent_creates(self):
        def worker():
            for _ in range(50):
                self.tm.create_transaction("ETH", 1.0)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(self.tm.count, 200)
        self.assertEqual(len({t.id for t in self.tm.get_all()}), 200)


if __name__ == "__main__":
    unittest.main()
