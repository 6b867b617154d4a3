"""Unit tests for keyed locks."""

import threading
import time

from rentledger.services.locks import KeyedLocks, contract_lock, invoice_lock


class TestKeyedLocks:
    """Test per-key mutual exclusion."""

    def test_reentrant_for_same_thread(self):
        locks = KeyedLocks()
        with locks.hold("a"):
            with locks.hold("a"):
                pass

    def test_same_key_serializes(self):
        locks = KeyedLocks()
        active = []
        overlaps = []

        def worker():
            with locks.hold("invoice-1"):
                active.append(1)
                if len(active) > 1:
                    overlaps.append(True)
                time.sleep(0.01)
                active.pop()

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert overlaps == []

    def test_different_keys_do_not_block(self):
        locks = KeyedLocks()
        entered = threading.Event()

        def other():
            with locks.hold("b"):
                entered.set()

        with locks.hold("a"):
            thread = threading.Thread(target=other)
            thread.start()
            assert entered.wait(timeout=2)
            thread.join()

    def test_invoice_and_contract_scopes_are_distinct(self):
        """Holding contract 1 does not hold invoice 1."""
        entered = threading.Event()

        def other():
            with invoice_lock(1):
                entered.set()

        with contract_lock(1):
            thread = threading.Thread(target=other)
            thread.start()
            assert entered.wait(timeout=2)
            thread.join()

    def test_unused_locks_are_released(self):
        locks = KeyedLocks()
        with locks.hold("temp"):
            pass
        assert "temp" not in locks._locks
