"""Transfer Orchestrator - Depolar arası stok transferi.

- Transfer isteğini mutasyondan önce doğrular
- Kaynaktan düşer, hedefe ekler (hedef kaydı yoksa oluşturur)
- Tamamlanan transferi geçmişe ekler

İki yazma yolu vardır:
- TransferCommitter varsa (DynamoDB) stok satırları ve transfer kaydı tek
  atomik işlemde yazılır; yalnızca (ürün, depo) kilitleri tutulur, farklı
  anahtarlara dokunan transferler paralel ilerler.
- Yoksa (JSON, bellek) depo koleksiyonu bütün olarak yazıldığından tüm
  yazımlar ledger kilidiyle sıralanır. Stok yazılamazsa transfer kaydı
  eklenmez; transfer kaydı yazılamazsa stok eski haline geri yazılır.

Özellik: Transfer öncesi ve sonrası toplam stok korunur.
Özellik: Negatif stok yasağı.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from stock_engine.errors import (
    InsufficientStockError,
    InvalidQuantityError,
    PersistenceError,
    SameWarehouseError,
    SourceNotFoundError,
)
from stock_engine.models.inventory import Transfer, TransferStatus, utc_now
from stock_engine.services.locking import KeyLock
from stock_engine.services.stock_ledger import StockLedger
from stock_engine.storage.base import EntityStore, TransferCommitter

logger = logging.getLogger(__name__)


class TransferOrchestrator:
    """Depolar arası transfer işlemlerini yürüten servis."""

    def __init__(
        self,
        ledger: StockLedger,
        transfer_store: EntityStore[Transfer],
        locks: Optional[KeyLock] = None,
        clock: Callable[[], str] = utc_now,
        committer: Optional[TransferCommitter] = None,
    ):
        self.ledger = ledger
        self.transfer_store = transfer_store
        self.committer = committer
        self._locks = locks or KeyLock()
        self._clock = clock

    # --- Transfer öncesi validasyon ---

    def validate(
        self, product_id: int, from_warehouse_id: int, to_warehouse_id: int, quantity: int
    ) -> None:
        """Transfer isteğini ledger'ın mevcut durumuna göre doğrular.

        Kontroller (sırayla):
        - Transfer miktarı pozitif tam sayı mı
        - Kaynak ve hedef farklı mı
        - Kaynak depoda stok kaydı var mı
        - Kaynak depoda yeterli stok var mı
        """
        self._validate_request(from_warehouse_id, to_warehouse_id, quantity)
        source = self.ledger.get_record(product_id, from_warehouse_id)
        self._validate_source(product_id, from_warehouse_id, quantity, source)

    @staticmethod
    def _validate_request(from_warehouse_id: int, to_warehouse_id: int, quantity: int) -> None:
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise InvalidQuantityError(f"Transfer miktarı tam sayı olmalıdır: {quantity!r}")
        if quantity <= 0:
            raise InvalidQuantityError("Quantity must be greater than 0")
        if from_warehouse_id == to_warehouse_id:
            raise SameWarehouseError("Source and destination warehouses must be different")

    @staticmethod
    def _validate_source(product_id: int, from_warehouse_id: int, quantity: int, source) -> None:
        if source is None:
            raise SourceNotFoundError(
                f"Product {product_id} not found in source warehouse {from_warehouse_id}"
            )
        if quantity > source.quantity:
            raise InsufficientStockError(available=source.quantity, requested=quantity)

    # --- Atomik transfer işlemi ---

    def execute(
        self,
        product_id: int,
        from_warehouse_id: int,
        to_warehouse_id: int,
        quantity: int,
        notes: Optional[str] = None,
    ) -> Transfer:
        """Transferi gerçekleştirir ve tamamlanmış Transfer kaydını döndürür."""
        try:
            self._validate_request(from_warehouse_id, to_warehouse_id, quantity)
        except (InvalidQuantityError, SameWarehouseError) as e:
            logger.warning("Transfer reddedildi: %s", e)
            raise

        src_key = (product_id, from_warehouse_id)
        tgt_key = (product_id, to_warehouse_id)

        with self._locks.hold(src_key, tgt_key, owner="transfer"):
            if self.committer is not None:
                transfer = self._execute_committed(
                    product_id, from_warehouse_id, to_warehouse_id, quantity, notes
                )
            else:
                with self.ledger.write_lock:
                    transfer = self._execute_staged(
                        product_id, from_warehouse_id, to_warehouse_id, quantity, notes
                    )

        logger.info(
            "Transfer tamamlandı: #%s ürün=%s %s -> %s x%s",
            transfer.id, product_id, from_warehouse_id, to_warehouse_id, quantity,
        )
        return transfer

    def _execute_committed(
        self,
        product_id: int,
        from_warehouse_id: int,
        to_warehouse_id: int,
        quantity: int,
        notes: Optional[str],
    ) -> Transfer:
        """Stok satırlarını ve transfer kaydını TransferCommitter ile tek seferde yazar."""
        stage = self.ledger.prepare()
        try:
            self._validate_source(
                product_id, from_warehouse_id, quantity, stage.get(product_id, from_warehouse_id)
            )
        except (SourceNotFoundError, InsufficientStockError) as e:
            logger.warning("Transfer reddedildi: %s", e)
            raise

        target_created = stage.get(product_id, to_warehouse_id) is None
        source = stage.debit(product_id, from_warehouse_id, quantity)
        target = stage.credit(product_id, to_warehouse_id, quantity)
        transfer = self._new_transfer(
            self.transfer_store.load_all(),
            product_id, from_warehouse_id, to_warehouse_id, quantity, notes,
        )

        try:
            self.committer.commit_transfer(source, target, target_created, transfer)
        except (SourceNotFoundError, InsufficientStockError) as e:
            # Kaynak doğrulamadan sonra başka bir süreç tarafından değiştirildi
            logger.warning("Transfer reddedildi: %s", e)
            raise
        except PersistenceError:
            logger.error("Transfer iptal: atomik yazım başarısız, hiçbir değişiklik uygulanmadı")
            raise
        return transfer

    def _execute_staged(
        self,
        product_id: int,
        from_warehouse_id: int,
        to_warehouse_id: int,
        quantity: int,
        notes: Optional[str],
    ) -> Transfer:
        """Stok koleksiyonunu yazar, ardından geçmişe ekler; ledger kilidi altında çağrılır."""
        try:
            with self.ledger.transaction() as stage:
                self._validate_source(
                    product_id, from_warehouse_id, quantity, stage.get(product_id, from_warehouse_id)
                )
                stage.debit(product_id, from_warehouse_id, quantity)
                stage.credit(product_id, to_warehouse_id, quantity)
        except (SourceNotFoundError, InsufficientStockError) as e:
            logger.warning("Transfer reddedildi: %s", e)
            raise
        except PersistenceError:
            logger.error("Transfer iptal: stok yazılamadı, transfer kaydı eklenmedi")
            raise

        return self._append_transfer(
            product_id, from_warehouse_id, to_warehouse_id, quantity, notes, stage.original
        )

    def _new_transfer(
        self,
        history: list[Transfer],
        product_id: int,
        from_warehouse_id: int,
        to_warehouse_id: int,
        quantity: int,
        notes: Optional[str],
    ) -> Transfer:
        return Transfer(
            id=max((t.id for t in history), default=0) + 1,
            product_id=product_id,
            from_warehouse_id=from_warehouse_id,
            to_warehouse_id=to_warehouse_id,
            quantity=quantity,
            date=self._clock(),
            status=TransferStatus.COMPLETED,
            notes=notes or "",
        )

    def _append_transfer(
        self,
        product_id: int,
        from_warehouse_id: int,
        to_warehouse_id: int,
        quantity: int,
        notes: Optional[str],
        stock_before: list,
    ) -> Transfer:
        """Transfer kaydını geçmişe ekler; başarısızsa stoğu geri yazar."""
        try:
            history = self.transfer_store.load_all()
            transfer = self._new_transfer(
                history, product_id, from_warehouse_id, to_warehouse_id, quantity, notes
            )
            self.transfer_store.save_all(history + [transfer])
            return transfer
        except PersistenceError as e:
            logger.error("Transfer kaydı yazılamadı, stok geri alınıyor: %s", e)
            try:
                self.ledger.restore(stock_before)
            except PersistenceError as restore_error:
                logger.error("Stok geri yazılamadı: %s", restore_error)
                raise PersistenceError(
                    f"Transfer kaydı yazılamadı ve stok geri alınamadı: {restore_error}"
                ) from e
            raise

    # --- Transfer geçmişi ---

    def get_transfer(self, transfer_id: int) -> Optional[Transfer]:
        for transfer in self.transfer_store.load_all():
            if transfer.id == transfer_id:
                return transfer
        return None

    def list_transfers(
        self,
        product_id: Optional[int] = None,
        warehouse_id: Optional[int] = None,
        since_days: Optional[int] = None,
        newest_first: bool = True,
    ) -> list[Transfer]:
        """Transfer geçmişini filtreli olarak döndürür.

        warehouse_id verilirse kaynak veya hedefi o depo olan transferler döner.
        since_days verilirse son N gün içindeki transferler döner.
        """
        transfers = self.transfer_store.load_all()
        if product_id is not None:
            transfers = [t for t in transfers if t.product_id == product_id]
        if warehouse_id is not None:
            transfers = [
                t for t in transfers
                if t.from_warehouse_id == warehouse_id or t.to_warehouse_id == warehouse_id
            ]
        if since_days is not None:
            cutoff = datetime.utcnow() - timedelta(days=since_days)
            transfers = [t for t in transfers if _parse_date(t.date) >= cutoff]

        transfers.sort(key=lambda t: (_parse_date(t.date), t.id), reverse=newest_first)
        return transfers


def _parse_date(value: str) -> datetime:
    # Bazı kayıtlar "Z" sonekli UTC tarihi taşır
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.replace(tzinfo=None) - (parsed.utcoffset() or timedelta(0))
    return parsed
