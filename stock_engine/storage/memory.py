"""Bellek içi depo. Testler ve tek süreçli demo kullanımı için."""

from __future__ import annotations

import copy
import threading
from typing import Iterable, Optional

from stock_engine.errors import PersistenceError
from stock_engine.storage.base import EntityStore, T


class InMemoryStore(EntityStore[T]):
    """Kayıtları kopyalayarak saklar; dışarıdan gelen nesneler paylaşılmaz."""

    def __init__(self, items: Optional[Iterable[T]] = None):
        self._items: list[T] = copy.deepcopy(list(items or []))
        self._lock = threading.Lock()
        self.save_count = 0
        # Testler için: True ise bir sonraki save_all PersistenceError fırlatır
        self.fail_next_save = False

    def load_all(self) -> list[T]:
        with self._lock:
            return copy.deepcopy(self._items)

    def save_all(self, items: list[T]) -> None:
        with self._lock:
            if self.fail_next_save:
                self.fail_next_save = False
                raise PersistenceError("Bellek deposuna yazma hatası (simüle)")
            self._items = copy.deepcopy(list(items))
            self.save_count += 1
