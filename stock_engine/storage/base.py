"""Depolama arayüzleri (port).

Servisler yalnızca bu arayüzlere bağlıdır; dosya yolu veya tablo adı görmez.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

from stock_engine.models.inventory import Product, StockRecord, Transfer, Warehouse

T = TypeVar("T")


class EntityStore(ABC, Generic[T]):
    """Bir varlık tipinin tüm koleksiyonunu okuyup yazan depo."""

    @abstractmethod
    def load_all(self) -> list[T]:
        """Tüm kayıtları döndürür."""
        ...

    @abstractmethod
    def save_all(self, items: list[T]) -> None:
        """Koleksiyonun tamamını yazar. Okuyucular yarım yazılmış veri görmez."""
        ...

    def save_changes(self, items: list[T], changed: list[T]) -> None:
        """Yalnızca değişen kayıtları yazabilen depolar bunu geçersiz kılar.

        items koleksiyonun yeni halidir; varsayılan olarak tamamı yazılır.
        """
        self.save_all(items)


class ProductCatalog(ABC):
    """Ürün kataloğu (salt okunur)."""

    @abstractmethod
    def list_products(self) -> list[Product]:
        ...

    def get_product(self, product_id: int) -> Optional[Product]:
        for product in self.list_products():
            if product.id == product_id:
                return product
        return None


class WarehouseCatalog(ABC):
    """Depo kataloğu (salt okunur)."""

    @abstractmethod
    def list_warehouses(self) -> list[Warehouse]:
        ...

    def get_warehouse(self, warehouse_id: int) -> Optional[Warehouse]:
        for warehouse in self.list_warehouses():
            if warehouse.id == warehouse_id:
                return warehouse
        return None


class StoreCatalog(ProductCatalog):
    """Herhangi bir EntityStore[Product] üzerinde ürün kataloğu."""

    def __init__(self, store: EntityStore[Product]):
        self._store = store

    def list_products(self) -> list[Product]:
        return self._store.load_all()


class StoreWarehouseCatalog(WarehouseCatalog):
    """Herhangi bir EntityStore[Warehouse] üzerinde depo kataloğu."""

    def __init__(self, store: EntityStore[Warehouse]):
        self._store = store

    def list_warehouses(self) -> list[Warehouse]:
        return self._store.load_all()


class TransferCommitter(ABC):
    """Bir transferin stok ve geçmiş yazımlarını tek atomik işlemde uygular.

    Koleksiyonu bütün olarak yazamayan backend'ler (DynamoDB) bunu sağlar;
    ya üç değişikliğin hepsi görünür ya hiçbiri.
    """

    @abstractmethod
    def commit_transfer(
        self,
        source: StockRecord,
        target: StockRecord,
        target_created: bool,
        transfer: Transfer,
    ) -> None:
        """source ve target transfer sonrası halleridir.

        Kaynak eşzamanlı olarak değişmişse InsufficientStockError veya
        SourceNotFoundError, diğer hatalarda PersistenceError fırlatır.
        """
        ...
