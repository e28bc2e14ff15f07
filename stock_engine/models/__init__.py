from stock_engine.models.inventory import (
    AlertRecord,
    AlertSeverity,
    AlertView,
    Product,
    StockRecord,
    StockStatus,
    Transfer,
    TransferStatus,
    Warehouse,
)

__all__ = [
    "AlertRecord",
    "AlertSeverity",
    "AlertView",
    "Product",
    "StockRecord",
    "StockStatus",
    "Transfer",
    "TransferStatus",
    "Warehouse",
]
