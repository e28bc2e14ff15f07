"""Stock Ledger - (ürün, depo) bazında stok miktarlarının tek sahibi.

- Depo-ürün çifti başına en fazla bir stok kaydı tutar
- Atomik debit/credit işlemleri sağlar
- Stok miktarı hiçbir zaman negatif olmaz
- Her değişiklikten sonra koleksiyonun tamamı tek seferde yazılır
"""

from __future__ import annotations

import copy
import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from stock_engine.errors import (
    DuplicateStockRecordError,
    InsufficientStockError,
    InvalidQuantityError,
    PersistenceError,
    StockRecordNotFoundError,
)
from stock_engine.models.inventory import StockRecord, utc_now
from stock_engine.storage.base import EntityStore

logger = logging.getLogger(__name__)


def _require_int(value: object, name: str = "amount") -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidQuantityError(f"{name} tam sayı olmalıdır: {value!r}")
    return value


def _require_positive(amount: object) -> int:
    amount = _require_int(amount)
    if amount <= 0:
        raise InvalidQuantityError(f"Miktar pozitif olmalıdır: {amount}")
    return amount


class LedgerStage:
    """Yüklenmiş koleksiyonun kopyası üzerinde hazırlanan değişiklikler.

    Değişiklikler `StockLedger.transaction` çıkışında tek bir yazımla
    yazılır; hata olursa hiçbiri görünür olmaz.
    """

    def __init__(self, records: list[StockRecord], clock: Callable[[], str]):
        self.original = copy.deepcopy(records)
        self.records = records
        self._clock = clock
        self._index: dict[tuple[int, int], StockRecord] = {r.key: r for r in records}
        self.dirty: dict[tuple[int, int], StockRecord] = {}

    @property
    def changed(self) -> bool:
        return bool(self.dirty)

    def _touch(self, record: StockRecord) -> None:
        self.dirty[record.key] = record

    def get(self, product_id: int, warehouse_id: int) -> Optional[StockRecord]:
        return self._index.get((product_id, warehouse_id))

    def quantity(self, product_id: int, warehouse_id: int) -> int:
        record = self.get(product_id, warehouse_id)
        return record.quantity if record else 0

    def _next_id(self) -> int:
        return max((r.id for r in self.records), default=0) + 1

    def _create(self, product_id: int, warehouse_id: int, quantity: int) -> StockRecord:
        record = StockRecord(
            id=self._next_id(),
            product_id=product_id,
            warehouse_id=warehouse_id,
            quantity=quantity,
            last_updated=self._clock(),
        )
        self.records.append(record)
        self._index[record.key] = record
        self._touch(record)
        return record

    def debit(self, product_id: int, warehouse_id: int, amount: int) -> StockRecord:
        amount = _require_positive(amount)
        record = self.get(product_id, warehouse_id)
        available = record.quantity if record else 0
        if record is None or available < amount:
            raise InsufficientStockError(available=available, requested=amount)

        record.quantity -= amount
        record.last_updated = self._clock()
        self._touch(record)
        return record

    def credit(self, product_id: int, warehouse_id: int, amount: int) -> StockRecord:
        amount = _require_positive(amount)
        record = self.get(product_id, warehouse_id)
        if record is None:
            return self._create(product_id, warehouse_id, amount)

        record.quantity += amount
        record.last_updated = self._clock()
        self._touch(record)
        return record

    def register(self, product_id: int, warehouse_id: int, quantity: int) -> StockRecord:
        quantity = _require_int(quantity, "quantity")
        if quantity < 0:
            raise InvalidQuantityError(f"Stok miktarı negatif olamaz: {quantity}")
        if self.get(product_id, warehouse_id) is not None:
            raise DuplicateStockRecordError(
                f"Stok kaydı zaten mevcut: ürün={product_id}, depo={warehouse_id}"
            )
        return self._create(product_id, warehouse_id, quantity)

    def set_quantity(self, product_id: int, warehouse_id: int, quantity: int) -> StockRecord:
        quantity = _require_int(quantity, "quantity")
        if quantity < 0:
            raise InvalidQuantityError(f"Stok miktarı negatif olamaz: {quantity}")
        record = self.get(product_id, warehouse_id)
        if record is None:
            raise StockRecordNotFoundError(
                f"Stok kaydı bulunamadı: ürün={product_id}, depo={warehouse_id}"
            )
        record.quantity = quantity
        record.last_updated = self._clock()
        self._touch(record)
        return record


class StockLedger:
    """Stok kayıtlarının otoriter kaynağı."""

    def __init__(self, store: EntityStore[StockRecord], clock: Callable[[], str] = utc_now):
        self._store = store
        self._clock = clock
        # Tüm koleksiyonu yeniden yazan oku-değiştir-yaz döngüsünü sıralar
        self.write_lock = threading.RLock()

    # --- Okuma ---
    # Her okuma depodan tek bir anlık görüntü alır; başka süreçlerin
    # yazdıkları bir sonraki çağrıda görünür.

    def _view(self) -> list[StockRecord]:
        return self._store.load_all()

    def snapshot(self) -> list[StockRecord]:
        """Depodaki tüm kayıtların güncel kopyası."""
        return self._view()

    def get_record(self, product_id: int, warehouse_id: int) -> Optional[StockRecord]:
        for record in self._view():
            if record.product_id == product_id and record.warehouse_id == warehouse_id:
                return record
        return None

    def get_quantity(self, product_id: int, warehouse_id: int) -> int:
        """Kayıt yoksa 0 döner (yokluk sıfır stok demektir)."""
        record = self.get_record(product_id, warehouse_id)
        return record.quantity if record else 0

    def aggregate_by_product(self, product_id: int) -> int:
        """Bir ürünün tüm depolardaki toplam stok miktarı."""
        return sum(r.quantity for r in self._view() if r.product_id == product_id)

    def totals_by_product(self) -> dict[int, int]:
        totals: dict[int, int] = {}
        for record in self._view():
            totals[record.product_id] = totals.get(record.product_id, 0) + record.quantity
        return totals

    def list_records(
        self, product_id: Optional[int] = None, warehouse_id: Optional[int] = None
    ) -> list[StockRecord]:
        records = self.snapshot()
        if product_id is not None:
            records = [r for r in records if r.product_id == product_id]
        if warehouse_id is not None:
            records = [r for r in records if r.warehouse_id == warehouse_id]
        return records

    # --- Yazma ---

    def prepare(self) -> LedgerStage:
        """Taze yüklenmiş koleksiyon üzerinde yazılmayan bir hazırlık kopyası.

        Değişiklikleri kendi atomik yolundan yazan çağıranlar (TransferCommitter)
        için; koleksiyon kaydedilmez.
        """
        return LedgerStage(self._store.load_all(), self._clock)

    @contextmanager
    def transaction(self) -> Iterator[LedgerStage]:
        """Taze yüklenmiş koleksiyon üzerinde değişiklik hazırlar ve tek seferde yazar.

        Yazma başarısız olursa PersistenceError yukarı iletilir; depo önceki
        haliyle kalır. Blok içindeki hatalarda hazırlanan kopya atılır,
        hiçbir şey yazılmaz.
        """
        with self.write_lock:
            stage = self.prepare()
            yield stage
            if not stage.changed:
                return
            try:
                self._store.save_changes(stage.records, list(stage.dirty.values()))
            except PersistenceError:
                logger.error("Stok koleksiyonu yazılamadı, değişiklikler uygulanmadı")
                raise

    def restore(self, records: list[StockRecord]) -> None:
        """Verilen kayıt kümesini aynen geri yazar (transfer geri alma)."""
        with self.write_lock:
            self._store.save_all(records)

    def debit(self, product_id: int, warehouse_id: int, amount: int) -> StockRecord:
        """Stoktan düşer. Yetersiz stokta InsufficientStockError(available)."""
        with self.transaction() as stage:
            record = stage.debit(product_id, warehouse_id, amount)
        logger.debug("Debit: ürün=%s depo=%s miktar=%s kalan=%s", product_id, warehouse_id, amount, record.quantity)
        return copy.copy(record)

    def credit(self, product_id: int, warehouse_id: int, amount: int) -> StockRecord:
        """Stoğa ekler; kayıt yoksa oluşturur."""
        with self.transaction() as stage:
            record = stage.credit(product_id, warehouse_id, amount)
        logger.debug("Credit: ürün=%s depo=%s miktar=%s yeni=%s", product_id, warehouse_id, amount, record.quantity)
        return copy.copy(record)

    def register_stock(self, product_id: int, warehouse_id: int, quantity: int) -> StockRecord:
        """Yeni bir ürün/depo çifti için ilk stok kaydını oluşturur."""
        with self.transaction() as stage:
            record = stage.register(product_id, warehouse_id, quantity)
        logger.info("Stok kaydı oluşturuldu: ürün=%s depo=%s miktar=%s", product_id, warehouse_id, quantity)
        return copy.copy(record)

    def set_quantity(self, product_id: int, warehouse_id: int, quantity: int) -> StockRecord:
        """Mevcut bir kaydın miktarını doğrudan ayarlar (manuel sayım düzeltmesi)."""
        with self.transaction() as stage:
            record = stage.set_quantity(product_id, warehouse_id, quantity)
        logger.info("Stok güncellendi: ürün=%s depo=%s miktar=%s", product_id, warehouse_id, quantity)
        return copy.copy(record)
