"""Uyarı onaylarının ürün bazında kalıcı saklanması."""

from __future__ import annotations

import copy
import logging
import threading
from typing import Optional

from stock_engine.models.inventory import AlertRecord
from stock_engine.storage.base import EntityStore

logger = logging.getLogger(__name__)


class AcknowledgementStore:
    """productId anahtarlı AlertRecord deposu. Stok durumundan bağımsızdır."""

    def __init__(self, store: EntityStore[AlertRecord]):
        self._store = store
        self._lock = threading.Lock()

    def get(self, product_id: int) -> Optional[AlertRecord]:
        for record in self._store.load_all():
            if record.product_id == product_id:
                return record
        return None

    def list_all(self) -> list[AlertRecord]:
        return self._store.load_all()

    def upsert(self, record: AlertRecord) -> AlertRecord:
        """Kaydı ekler veya aynı ürünün mevcut kaydını değiştirir."""
        with self._lock:
            records = self._store.load_all()
            for i, existing in enumerate(records):
                if existing.product_id == record.product_id:
                    records[i] = copy.copy(record)
                    break
            else:
                records.append(copy.copy(record))
            # Yazma hatası (PersistenceError) çağırana iletilir
            self._store.save_all(records)
        logger.debug("Onay kaydı yazıldı: ürün=%s", record.product_id)
        return copy.copy(record)
