"""Eşzamanlı stok erişim kontrolü.

Aynı (ürün, depo) anahtarına dokunan değiştirici işlemler sırayla çalışır.
Birden fazla anahtar her zaman sıralı alınır; kilitlenme oluşmaz.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Hashable, Iterator

from stock_engine.errors import LockTimeoutError

logger = logging.getLogger(__name__)


class KeyLock:
    """Anahtar bazlı kilit kayıt defteri."""

    def __init__(self, timeout: float = 10.0) -> None:
        self.timeout = timeout
        self._locks: dict[Hashable, threading.Lock] = {}
        self._lock_owners: dict[Hashable, str] = {}
        self._master_lock = threading.Lock()

    def _get_lock(self, key: Hashable) -> threading.Lock:
        with self._master_lock:
            if key not in self._locks:
                self._locks[key] = threading.Lock()
            return self._locks[key]

    def acquire(self, key: Hashable, owner: str) -> bool:
        """Bir anahtar için kilit alır."""
        acquired = self._get_lock(key).acquire(timeout=self.timeout)
        if acquired:
            self._lock_owners[key] = owner
            logger.debug("Kilit alındı: %s -> %s", owner, key)
        else:
            logger.warning("Kilit alınamadı: %s -> %s (timeout)", owner, key)
        return acquired

    def release(self, key: Hashable, owner: str) -> bool:
        """Bir anahtar kilidini serbest bırakır."""
        if key not in self._locks:
            return False

        current = self._lock_owners.get(key)
        if current != owner:
            logger.warning("Kilit sahibi uyuşmazlığı: %s != %s", owner, current)
            return False

        del self._lock_owners[key]
        self._locks[key].release()
        return True

    def is_locked(self, key: Hashable) -> bool:
        """Anahtarın kilitli olup olmadığını kontrol eder."""
        if key not in self._locks:
            return False
        return self._locks[key].locked()

    @contextmanager
    def hold(self, *keys: Hashable, owner: str = "stock-engine") -> Iterator[None]:
        """Verilen anahtarların hepsini sıralı alır, çıkışta bırakır."""
        ordered = sorted(set(keys), key=repr)
        taken: list[Hashable] = []
        try:
            for key in ordered:
                if not self.acquire(key, owner):
                    raise LockTimeoutError(f"Kilit alınamadı: {key}")
                taken.append(key)
            yield
        finally:
            for key in reversed(taken):
                self.release(key, owner)
