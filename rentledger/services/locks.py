"""Per-invoice and per-contract mutual exclusion.

Every mutation of one invoice (bill edit, penalty, payment insert/update/delete,
status transition) runs inside ``invoice_lock(invoice_id)``; invoice creation
runs inside ``contract_lock(contract_id)``. Lock order is always
contract -> invoice, and payment paths never take a contract lock, so the two
cannot deadlock.

These locks serialize writers inside one process. Services additionally load
the invoice row with ``SELECT ... FOR UPDATE`` so that databases with row locks
(PostgreSQL) serialize writers across processes too.
"""

import threading
from contextlib import contextmanager
from typing import Hashable, Iterator
from weakref import WeakValueDictionary


class _KeyLock:
    """Weak-referenceable holder for one re-entrant lock."""

    __slots__ = ("lock", "__weakref__")

    def __init__(self) -> None:
        self.lock = threading.RLock()


class KeyedLocks:
    """Registry of re-entrant locks, one per key.

    Locks are held weakly and disappear once nobody references them.
    """

    def __init__(self) -> None:
        self._locks: WeakValueDictionary = WeakValueDictionary()
        self._guard = threading.Lock()

    def _get(self, key: Hashable) -> _KeyLock:
        with self._guard:
            holder = self._locks.get(key)
            if holder is None:
                holder = _KeyLock()
                self._locks[key] = holder
            return holder

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        """Hold the lock for ``key`` for the duration of the block."""
        holder = self._get(key)
        with holder.lock:
            yield


# Process-wide registry shared by all services
_registry = KeyedLocks()


def invoice_lock(invoice_id: int):
    """Mutual-exclusion scope for all writes to one invoice."""
    return _registry.hold(("invoice", invoice_id))


def contract_lock(contract_id: int):
    """Mutual-exclusion scope for invoice creation on one contract."""
    return _registry.hold(("contract", contract_id))


__all__ = ["KeyedLocks", "invoice_lock", "contract_lock"]
