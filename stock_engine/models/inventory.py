"""Depo, ürün, stok ve transfer veri modelleri.

Kalıcı JSON dosyaları camelCase alan adları kullanır (productId, warehouseId,
lastUpdated ...). Her model `to_dict` / `from_dict` ile bu şekle dönüşür.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


def utc_now() -> str:
    """ISO-8601 zaman damgası döndürür."""
    return datetime.utcnow().isoformat()


class TransferStatus(str, Enum):
    COMPLETED = "completed"


class StockStatus(str, Enum):
    OUT_OF_STOCK = "out_of_stock"
    CRITICAL = "critical"
    LOW = "low"
    ADEQUATE = "adequate"
    OVERSTOCKED = "overstocked"


class AlertSeverity(str, Enum):
    CRITICAL = "critical"
    MEDIUM = "medium"
    LOW = "low"


@dataclass
class Product:
    id: int
    sku: str
    name: str
    category: str
    unit_cost: float = 0.0
    reorder_point: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sku": self.sku,
            "name": self.name,
            "category": self.category,
            "unitCost": self.unit_cost,
            "reorderPoint": self.reorder_point,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Product:
        return cls(
            id=int(data["id"]),
            sku=data["sku"],
            name=data.get("name", ""),
            category=data.get("category", ""),
            unit_cost=float(data.get("unitCost", 0.0)),
            reorder_point=int(data.get("reorderPoint", 0)),
        )


@dataclass
class Warehouse:
    id: int
    code: str
    name: str
    location: str = ""
    capacity: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "location": self.location,
            "capacity": self.capacity,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Warehouse:
        return cls(
            id=int(data["id"]),
            code=data.get("code", ""),
            name=data.get("name", ""),
            location=data.get("location", ""),
            capacity=int(data.get("capacity", 0)),
        )


@dataclass
class StockRecord:
    id: int
    product_id: int
    warehouse_id: int
    quantity: int
    last_updated: str = field(default_factory=utc_now)

    @property
    def key(self) -> tuple[int, int]:
        return (self.product_id, self.warehouse_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "productId": self.product_id,
            "warehouseId": self.warehouse_id,
            "quantity": self.quantity,
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: dict) -> StockRecord:
        return cls(
            id=int(data["id"]),
            product_id=int(data["productId"]),
            warehouse_id=int(data["warehouseId"]),
            quantity=int(data["quantity"]),
            last_updated=data.get("lastUpdated") or utc_now(),
        )


@dataclass(frozen=True)
class Transfer:
    id: int
    product_id: int
    from_warehouse_id: int
    to_warehouse_id: int
    quantity: int
    date: str = field(default_factory=utc_now)
    status: TransferStatus = TransferStatus.COMPLETED
    notes: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "productId": self.product_id,
            "fromWarehouseId": self.from_warehouse_id,
            "toWarehouseId": self.to_warehouse_id,
            "quantity": self.quantity,
            "date": self.date,
            "status": self.status.value,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Transfer:
        return cls(
            id=int(data["id"]),
            product_id=int(data["productId"]),
            from_warehouse_id=int(data["fromWarehouseId"]),
            to_warehouse_id=int(data["toWarehouseId"]),
            quantity=int(data["quantity"]),
            date=data.get("date") or utc_now(),
            status=TransferStatus(data.get("status", TransferStatus.COMPLETED.value)),
            notes=data.get("notes") or "",
        )


@dataclass
class AlertRecord:
    """Bir ürün uyarısı için kalıcı onay durumu."""

    product_id: int
    acknowledged: bool = False
    acknowledged_at: Optional[str] = None
    notes: str = ""

    def to_dict(self) -> dict:
        return {
            "productId": self.product_id,
            "acknowledged": self.acknowledged,
            "acknowledgedAt": self.acknowledged_at,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> AlertRecord:
        return cls(
            product_id=int(data["productId"]),
            acknowledged=bool(data.get("acknowledged", False)),
            acknowledged_at=data.get("acknowledgedAt"),
            notes=data.get("notes") or "",
        )


@dataclass
class AlertView:
    """Her okumada yeniden hesaplanan uyarı satırı (kalıcı değil)."""

    product_id: int
    sku: str
    name: str
    category: str
    current_stock: int
    reorder_point: int
    status: StockStatus
    severity: AlertSeverity
    recommended_order: int
    acknowledged: bool = False
    acknowledged_at: Optional[str] = None
    notes: str = ""

    def to_dict(self) -> dict:
        return {
            "productId": self.product_id,
            "sku": self.sku,
            "name": self.name,
            "category": self.category,
            "currentStock": self.current_stock,
            "reorderPoint": self.reorder_point,
            "status": self.status.value,
            "severity": self.severity.value,
            "recommendedOrder": self.recommended_order,
            "acknowledged": self.acknowledged,
            "acknowledgedAt": self.acknowledged_at,
            "notes": self.notes,
        }
