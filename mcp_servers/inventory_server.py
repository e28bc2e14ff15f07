"""
Inventory MCP Server

Provides tools for executing stock transfers, reading stock levels and
listing / acknowledging reorder alerts.

Backend is selected by STOCK_BACKEND (json | memory | dynamodb), see stock_engine.config.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from mcp.server import Server
from mcp.types import Tool, TextContent

from stock_engine.config import Settings, configure_logging
from stock_engine.errors import (
    InsufficientStockError,
    InventoryError,
    LockTimeoutError,
    PersistenceError,
    ValidationError,
)
from stock_engine.services.inventory_service import InventoryService

logger = logging.getLogger(__name__)

app = Server("inventory")

_service: Optional[InventoryService] = None


def get_service() -> InventoryService:
    global _service
    if _service is None:
        _service = InventoryService.from_settings(Settings.from_env())
    return _service


def set_service(service: Optional[InventoryService]) -> None:
    """Tests inject an in-memory service here."""
    global _service
    _service = service


def _result(data):
    return [TextContent(type="text", text=json.dumps(data, indent=2, ensure_ascii=False))]


@app.list_tools()
async def list_tools() -> List[Tool]:
    return [
        Tool(name="execute_transfer", description="Move stock of one product between two warehouses",
             inputSchema={"type": "object", "properties": {
                 "product_id": {"type": "integer"}, "from_warehouse_id": {"type": "integer"},
                 "to_warehouse_id": {"type": "integer"}, "quantity": {"type": "integer", "minimum": 1},
                 "notes": {"type": "string"}
             }, "required": ["product_id", "from_warehouse_id", "to_warehouse_id", "quantity"]}),
        Tool(name="acknowledge_alert", description="Acknowledge the reorder alert of a product",
             inputSchema={"type": "object", "properties": {
                 "product_id": {"type": "integer"}, "notes": {"type": "string"},
                 "acknowledged": {"type": "boolean", "default": True}
             }, "required": ["product_id"]}),
        Tool(name="list_alerts", description="List derived stock alerts, one per product",
             inputSchema={"type": "object", "properties": {
                 "view": {"type": "string", "enum": ["all", "critical", "low", "overstocked", "acknowledged"]},
                 "category": {"type": "string"}, "search": {"type": "string"},
                 "sort_by": {"type": "string", "enum": ["severity", "name", "stock-asc", "stock-desc", "recommended-desc"]}
             }}),
        Tool(name="get_stock_quantity", description="Get quantity of a product held in a warehouse",
             inputSchema={"type": "object", "properties": {
                 "product_id": {"type": "integer"}, "warehouse_id": {"type": "integer"}
             }, "required": ["product_id", "warehouse_id"]}),
        Tool(name="list_transfers", description="Get transfer history, optionally filtered by product, warehouse or age",
             inputSchema={"type": "object", "properties": {
                 "product_id": {"type": "integer"}, "warehouse_id": {"type": "integer"},
                 "since_days": {"type": "integer", "minimum": 0}
             }}),
        Tool(name="list_stock", description="List stock records, optionally filtered by product or warehouse",
             inputSchema={"type": "object", "properties": {
                 "product_id": {"type": "integer"}, "warehouse_id": {"type": "integer"}
             }}),
        Tool(name="inventory_summary", description="Totals by value, category and warehouse plus open alert counts",
             inputSchema={"type": "object", "properties": {}}),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: dict) -> List[TextContent]:
    handlers = {
        "execute_transfer": lambda a: execute_transfer(a["product_id"], a["from_warehouse_id"], a["to_warehouse_id"], a["quantity"], a.get("notes")),
        "acknowledge_alert": lambda a: acknowledge_alert(a["product_id"], a.get("notes"), a.get("acknowledged", True)),
        "list_alerts": lambda a: list_alerts(a.get("view", "all"), a.get("category"), a.get("search"), a.get("sort_by")),
        "get_stock_quantity": lambda a: get_stock_quantity(a["product_id"], a["warehouse_id"]),
        "list_transfers": lambda a: list_transfers(a.get("product_id"), a.get("warehouse_id"), a.get("since_days")),
        "list_stock": lambda a: list_stock(a.get("product_id"), a.get("warehouse_id")),
        "inventory_summary": lambda a: inventory_summary(),
    }
    handler = handlers.get(name)
    if not handler:
        raise ValueError(f"Unknown tool: {name}")
    return _result(handler(arguments))


def _error(e: Exception) -> Dict[str, Any]:
    if isinstance(e, InsufficientStockError):
        return {"success": False, "error": str(e), "error_type": type(e).__name__, "available": e.available}
    if isinstance(e, LockTimeoutError):
        # Another writer holds the same product/warehouse, nothing was applied
        return {"success": False, "error": f"Resource busy, retry the operation: {e}",
                "error_type": type(e).__name__, "retryable": True}
    if isinstance(e, (ValidationError, ValueError)):
        return {"success": False, "error": str(e), "error_type": type(e).__name__}
    # Persistence details stay in the server log
    logger.error("Tool failed: %s", e)
    return {"success": False, "error": "Internal storage error, operation not applied", "error_type": type(e).__name__}


# --- Implementation ---

def execute_transfer(product_id: int, from_wh: int, to_wh: int, quantity: int, notes: Optional[str] = None) -> Dict:
    try:
        transfer = get_service().execute_transfer(product_id, from_wh, to_wh, quantity, notes)
        return {"success": True, "data": transfer.to_dict()}
    except InventoryError as e:
        return _error(e)


def acknowledge_alert(product_id: int, notes: Optional[str] = None, acknowledged: bool = True) -> Dict:
    try:
        service = get_service()
        if acknowledged:
            record = service.acknowledge_alert(product_id, notes)
        else:
            record = service.clear_alert_acknowledgement(product_id)
        return {"success": True, "data": record.to_dict()}
    except InventoryError as e:
        return _error(e)


def list_alerts(view: str = "all", category: Optional[str] = None,
                search: Optional[str] = None, sort_by: Optional[str] = None) -> Dict:
    try:
        alerts = get_service().list_alerts(view=view, category=category, search=search, sort_by=sort_by)
        return {"success": True, "count": len(alerts), "data": [a.to_dict() for a in alerts]}
    except (ValueError, PersistenceError) as e:
        return _error(e)


def get_stock_quantity(product_id: int, warehouse_id: int) -> Dict:
    try:
        qty = get_service().get_stock_quantity(product_id, warehouse_id)
        return {"success": True, "data": {"productId": product_id, "warehouseId": warehouse_id, "quantity": qty}}
    except PersistenceError as e:
        return _error(e)


def list_transfers(product_id: Optional[int] = None, warehouse_id: Optional[int] = None,
                   since_days: Optional[int] = None) -> Dict:
    try:
        transfers = get_service().list_transfers(product_id, warehouse_id, since_days)
        return {"success": True, "count": len(transfers), "data": [t.to_dict() for t in transfers]}
    except PersistenceError as e:
        return _error(e)


def list_stock(product_id: Optional[int] = None, warehouse_id: Optional[int] = None) -> Dict:
    try:
        records = get_service().list_stock(product_id, warehouse_id)
        return {"success": True, "count": len(records), "data": [r.to_dict() for r in records]}
    except PersistenceError as e:
        return _error(e)


def inventory_summary() -> Dict:
    try:
        return {"success": True, "data": get_service().inventory_summary().to_dict()}
    except PersistenceError as e:
        return _error(e)


if __name__ == "__main__":
    import asyncio
    from mcp.server.stdio import stdio_server

    configure_logging(Settings.from_env().log_level)

    async def run():
        async with stdio_server() as (read, write):
            await app.run(read, write, app.create_initialization_options())

    asyncio.run(run())
