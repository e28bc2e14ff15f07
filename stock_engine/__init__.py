from stock_engine.config import Settings
from stock_engine.services.inventory_service import InventoryService

__all__ = ["InventoryService", "Settings"]
