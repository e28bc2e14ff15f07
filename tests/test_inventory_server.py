"""Inventory MCP sunucusu araç testleri (bellek içi servis ile)."""

import asyncio
import json

import pytest

from mcp_servers import inventory_server
from stock_engine import InventoryService, Settings
from stock_engine.models.inventory import Product, StockRecord, Warehouse
from stock_engine.storage.memory import InMemoryStore


@pytest.fixture(autouse=True)
def service():
    svc = InventoryService.from_settings(
        Settings(backend="memory"),
        products=[Product(id=1, sku="ELC-1", name="Scanner", category="Electronics", unit_cost=10.0, reorder_point=100)],
        warehouses=[Warehouse(id=1, code="W1", name="One"), Warehouse(id=2, code="W2", name="Two")],
        stock=[StockRecord(id=1, product_id=1, warehouse_id=1, quantity=50)],
    )
    inventory_server.set_service(svc)
    yield svc
    inventory_server.set_service(None)


def _call(name, arguments):
    contents = asyncio.run(inventory_server.call_tool(name, arguments))
    return json.loads(contents[0].text)


class TestTools:

    def test_lists_all_tools(self):
        tools = asyncio.run(inventory_server.list_tools())
        assert {t.name for t in tools} == {
            "execute_transfer", "acknowledge_alert", "list_alerts", "get_stock_quantity",
            "list_transfers", "list_stock", "inventory_summary",
        }

    def test_execute_transfer(self):
        result = _call("execute_transfer", {"product_id": 1, "from_warehouse_id": 1, "to_warehouse_id": 2, "quantity": 20})
        assert result["success"] is True
        assert result["data"]["quantity"] == 20
        assert result["data"]["status"] == "completed"
        assert _call("get_stock_quantity", {"product_id": 1, "warehouse_id": 2})["data"]["quantity"] == 20

    def test_insufficient_stock_reports_available(self):
        result = _call("execute_transfer", {"product_id": 1, "from_warehouse_id": 1, "to_warehouse_id": 2, "quantity": 80})
        assert result["success"] is False
        assert result["error_type"] == "InsufficientStockError"
        assert result["available"] == 50
        assert result["error"] == "Insufficient stock. Available: 50"

    def test_validation_error(self):
        result = _call("execute_transfer", {"product_id": 1, "from_warehouse_id": 1, "to_warehouse_id": 1, "quantity": 5})
        assert result["success"] is False
        assert result["error_type"] == "SameWarehouseError"

    def test_persistence_error_is_generic(self, service):
        service.transfers.transfer_store.fail_next_save = True
        result = _call("execute_transfer", {"product_id": 1, "from_warehouse_id": 1, "to_warehouse_id": 2, "quantity": 5})
        assert result["success"] is False
        assert result["error_type"] == "PersistenceError"
        assert "not applied" in result["error"]
        assert service.get_stock_quantity(1, 1) == 50

    def test_busy_stock_is_retryable(self, service):
        service.locks.timeout = 0.01
        assert service.locks.acquire((1, 1), "other-writer")
        try:
            result = _call("execute_transfer", {"product_id": 1, "from_warehouse_id": 1, "to_warehouse_id": 2, "quantity": 5})
        finally:
            service.locks.release((1, 1), "other-writer")
        assert result["success"] is False
        assert result["error_type"] == "LockTimeoutError"
        assert result["retryable"] is True
        assert "retry" in result["error"]
        assert service.get_stock_quantity(1, 1) == 50

    def test_acknowledge_and_clear(self):
        result = _call("acknowledge_alert", {"product_id": 1, "notes": "ordered"})
        assert result["data"]["acknowledged"] is True
        assert _call("list_alerts", {"view": "acknowledged"})["count"] == 1

        result = _call("acknowledge_alert", {"product_id": 1, "acknowledged": False})
        assert result["data"]["acknowledged"] is False
        assert result["data"]["notes"] == "ordered"

    def test_acknowledge_unknown_product(self):
        result = _call("acknowledge_alert", {"product_id": 99})
        assert result["success"] is False
        assert result["error_type"] == "ProductNotFoundError"

    def test_list_alerts(self):
        result = _call("list_alerts", {})
        assert result["count"] == 1
        assert result["data"][0]["status"] == "low"
        assert result["data"][0]["recommendedOrder"] == 150

    def test_list_alerts_invalid_view(self):
        result = _call("list_alerts", {"view": "everything"})
        assert result["success"] is False
        assert result["error_type"] == "ValueError"

    def test_history_stock_and_summary(self):
        _call("execute_transfer", {"product_id": 1, "from_warehouse_id": 1, "to_warehouse_id": 2, "quantity": 5, "notes": "x"})
        assert _call("list_transfers", {"warehouse_id": 2})["count"] == 1
        assert _call("list_stock", {"product_id": 1})["count"] == 2
        summary = _call("inventory_summary", {})["data"]
        assert summary["totalUnits"] == 50
        assert summary["totalValue"] == 500.0

    def test_unknown_tool(self):
        with pytest.raises(ValueError):
            asyncio.run(inventory_server.call_tool("drop_tables", {}))


def test_memory_store_used_by_fixture(service):
    assert isinstance(service.transfers.transfer_store, InMemoryStore)
