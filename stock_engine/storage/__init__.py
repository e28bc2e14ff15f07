from stock_engine.storage.base import (
    EntityStore,
    ProductCatalog,
    StoreCatalog,
    StoreWarehouseCatalog,
    TransferCommitter,
    WarehouseCatalog,
)
from stock_engine.storage.json_files import JsonFileStore, create_json_stores
from stock_engine.storage.memory import InMemoryStore

__all__ = [
    "EntityStore",
    "InMemoryStore",
    "JsonFileStore",
    "ProductCatalog",
    "StoreCatalog",
    "StoreWarehouseCatalog",
    "TransferCommitter",
    "WarehouseCatalog",
    "create_json_stores",
]
