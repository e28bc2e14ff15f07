"""Stok motorunun dış dünyaya açılan yüzü.

Sunum katmanı (MCP sunucusu) yalnızca bu sınıfı kullanır:

    execute_transfer(product_id, from_warehouse_id, to_warehouse_id, quantity, notes=None)
    acknowledge_alert(product_id, notes=None)
    list_alerts()
    get_stock_quantity(product_id, warehouse_id)
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from stock_engine.config import Settings
from stock_engine.models.inventory import AlertRecord, AlertView, StockRecord, Transfer
from stock_engine.services.acknowledgement_store import AcknowledgementStore
from stock_engine.services.alert_classifier import AlertClassifier, filter_alerts, sort_alerts
from stock_engine.services.inventory_summary import InventorySummary, build_inventory_summary
from stock_engine.services.locking import KeyLock
from stock_engine.services.stock_ledger import StockLedger
from stock_engine.services.transfer_orchestrator import TransferOrchestrator
from stock_engine.storage.base import EntityStore, ProductCatalog, TransferCommitter, WarehouseCatalog

logger = logging.getLogger(__name__)


class InventoryService:
    """Ledger, transfer ve uyarı servislerini bir araya getirir."""

    def __init__(
        self,
        products: ProductCatalog,
        warehouses: WarehouseCatalog,
        stock_store: EntityStore[StockRecord],
        transfer_store: EntityStore[Transfer],
        alert_store: EntityStore[AlertRecord],
        lock_timeout: float = 10.0,
        committer: Optional[TransferCommitter] = None,
    ):
        self.products = products
        self.warehouses = warehouses
        self.ledger = StockLedger(stock_store)
        self.locks = KeyLock(timeout=lock_timeout)
        self.transfers = TransferOrchestrator(
            self.ledger, transfer_store, locks=self.locks, committer=committer
        )
        self.acknowledgements = AcknowledgementStore(alert_store)
        self.alerts = AlertClassifier(self.ledger, products, self.acknowledgements)

    @classmethod
    def from_stores(cls, stores: dict[str, Any], lock_timeout: float = 10.0) -> InventoryService:
        return cls(
            products=stores["products"],
            warehouses=stores["warehouses"],
            stock_store=stores["stock"],
            transfer_store=stores["transfers"],
            alert_store=stores["alerts"],
            lock_timeout=lock_timeout,
            committer=stores.get("committer"),
        )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **kwargs: Any) -> InventoryService:
        """Yapılandırmaya göre depoları seçer (memory / json / dynamodb)."""
        settings = settings or Settings.from_env()

        if settings.backend == "dynamodb":
            from stock_engine.storage.dynamodb import create_dynamodb_stores

            stores = create_dynamodb_stores(
                region_name=settings.region,
                table_prefix=settings.table_prefix,
                dynamodb_resource=kwargs.get("dynamodb_resource"),
                dynamodb_client=kwargs.get("dynamodb_client"),
            )
        elif settings.backend == "memory":
            from stock_engine.storage.memory import InMemoryStore
            from stock_engine.storage.base import StoreCatalog, StoreWarehouseCatalog

            stores = {
                "products": StoreCatalog(InMemoryStore(kwargs.get("products", []))),
                "warehouses": StoreWarehouseCatalog(InMemoryStore(kwargs.get("warehouses", []))),
                "stock": InMemoryStore(kwargs.get("stock", [])),
                "transfers": InMemoryStore(kwargs.get("transfers", [])),
                "alerts": InMemoryStore(kwargs.get("alerts", [])),
            }
        else:
            from stock_engine.storage.json_files import create_json_stores

            stores = create_json_stores(settings.data_dir)

        logger.info("Stok servisi başlatıldı (backend: %s)", settings.backend)
        return cls.from_stores(stores, lock_timeout=settings.lock_timeout)

    # --- Dışa açık işlemler ---

    def execute_transfer(
        self,
        product_id: int,
        from_warehouse_id: int,
        to_warehouse_id: int,
        quantity: int,
        notes: Optional[str] = None,
    ) -> Transfer:
        return self.transfers.execute(product_id, from_warehouse_id, to_warehouse_id, quantity, notes)

    def acknowledge_alert(self, product_id: int, notes: Optional[str] = None) -> AlertRecord:
        return self.alerts.acknowledge(product_id, notes)

    def clear_alert_acknowledgement(self, product_id: int) -> AlertRecord:
        return self.alerts.clear_acknowledgement(product_id)

    def list_alerts(
        self,
        view: str = "all",
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
    ) -> list[AlertView]:
        """Ürün başına bir uyarı satırı; isteğe bağlı süzme ve sıralama."""
        alerts = self.alerts.list_alerts()
        if view != "all" or category or search:
            alerts = filter_alerts(alerts, view=view, category=category, search=search)
        if sort_by:
            alerts = sort_alerts(alerts, sort_by)
        return alerts

    def get_stock_quantity(self, product_id: int, warehouse_id: int) -> int:
        return self.ledger.get_quantity(product_id, warehouse_id)

    # --- Yardımcı sorgular ve doğrudan stok düzenleme ---

    def list_transfers(
        self,
        product_id: Optional[int] = None,
        warehouse_id: Optional[int] = None,
        since_days: Optional[int] = None,
    ) -> list[Transfer]:
        return self.transfers.list_transfers(
            product_id=product_id, warehouse_id=warehouse_id, since_days=since_days
        )

    def list_stock(
        self, product_id: Optional[int] = None, warehouse_id: Optional[int] = None
    ) -> list[StockRecord]:
        return self.ledger.list_records(product_id=product_id, warehouse_id=warehouse_id)

    def register_stock(self, product_id: int, warehouse_id: int, quantity: int) -> StockRecord:
        with self.locks.hold((product_id, warehouse_id), owner="register"):
            return self.ledger.register_stock(product_id, warehouse_id, quantity)

    def update_stock(self, product_id: int, warehouse_id: int, quantity: int) -> StockRecord:
        with self.locks.hold((product_id, warehouse_id), owner="update"):
            return self.ledger.set_quantity(product_id, warehouse_id, quantity)

    def inventory_summary(self) -> InventorySummary:
        return build_inventory_summary(
            self.products.list_products(),
            self.warehouses.list_warehouses(),
            self.ledger.snapshot(),
            self.alerts.list_alerts(),
        )
