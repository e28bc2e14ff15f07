"""Anahtar bazlı kilit unit testleri."""

import threading

import pytest

from stock_engine.errors import InsufficientStockError, LockTimeoutError
from stock_engine.models.inventory import StockRecord
from stock_engine.services.locking import KeyLock
from stock_engine.services.stock_ledger import StockLedger
from stock_engine.services.transfer_orchestrator import TransferOrchestrator
from stock_engine.storage.memory import InMemoryStore


class TestKeyLock:

    def test_acquire_and_release(self):
        lock = KeyLock()
        assert lock.acquire((1, 1), "writer-a") is True
        assert lock.is_locked((1, 1)) is True
        assert lock.release((1, 1), "writer-a") is True
        assert lock.is_locked((1, 1)) is False

    def test_wrong_owner_cannot_release(self):
        lock = KeyLock()
        lock.acquire((1, 1), "writer-a")
        assert lock.release((1, 1), "writer-b") is False
        assert lock.is_locked((1, 1)) is True

    def test_release_unknown_key(self):
        assert KeyLock().release((9, 9), "writer-a") is False

    def test_acquire_times_out(self):
        lock = KeyLock(timeout=0.01)
        lock.acquire((1, 1), "writer-a")
        assert lock.acquire((1, 1), "writer-b") is False

    def test_hold_releases_on_error(self):
        lock = KeyLock()
        with pytest.raises(RuntimeError):
            with lock.hold((1, 1), (1, 2), owner="writer-a"):
                assert lock.is_locked((1, 1)) and lock.is_locked((1, 2))
                raise RuntimeError("boom")
        assert not lock.is_locked((1, 1))
        assert not lock.is_locked((1, 2))

    def test_hold_times_out(self):
        lock = KeyLock(timeout=0.01)
        lock.acquire((1, 2), "writer-b")
        with pytest.raises(LockTimeoutError):
            with lock.hold((1, 1), (1, 2), owner="writer-a"):
                pass
        assert not lock.is_locked((1, 1))


class TestConcurrentTransfers:

    def test_concurrent_transfers_never_oversell(self):
        """Aynı kaynaktan eşzamanlı transferler stoğu sıfırın altına düşüremez."""
        store = InMemoryStore([StockRecord(id=1, product_id=1, warehouse_id=1, quantity=50)])
        transfers = InMemoryStore([])
        orch = TransferOrchestrator(StockLedger(store), transfers)
        failures = []

        def worker(target):
            try:
                orch.execute(1, 1, target, 10)
            except InsufficientStockError:
                failures.append(target)

        threads = [threading.Thread(target=worker, args=(2 + i % 3,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        records = store.load_all()
        assert all(r.quantity >= 0 for r in records)
        assert sum(r.quantity for r in records) == 50
        assert len(transfers.load_all()) == 5
        assert len(failures) == 3
        assert orch.ledger.get_quantity(1, 1) == 0
