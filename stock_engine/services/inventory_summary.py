"""Stok özet göstergeleri (toplam birim, toplam değer, kategori/depo kırılımı)."""

from __future__ import annotations

from dataclasses import dataclass, field

from stock_engine.models.inventory import (
    AlertSeverity,
    AlertView,
    Product,
    StockRecord,
    StockStatus,
    Warehouse,
)


@dataclass
class WarehouseTotals:
    warehouse_id: int
    code: str
    units: int
    value: float


@dataclass
class InventorySummary:
    total_units: int
    total_value: float
    critical_alerts: int
    low_stock_alerts: int
    overstocked: int
    acknowledged: int
    units_by_category: dict[str, int] = field(default_factory=dict)
    warehouses: list[WarehouseTotals] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "totalUnits": self.total_units,
            "totalValue": self.total_value,
            "criticalAlerts": self.critical_alerts,
            "lowStockAlerts": self.low_stock_alerts,
            "overstocked": self.overstocked,
            "acknowledged": self.acknowledged,
            "unitsByCategory": dict(self.units_by_category),
            "warehouses": [
                {"warehouseId": w.warehouse_id, "code": w.code, "units": w.units, "value": w.value}
                for w in self.warehouses
            ],
        }


def build_inventory_summary(
    products: list[Product],
    warehouses: list[Warehouse],
    records: list[StockRecord],
    alerts: list[AlertView],
) -> InventorySummary:
    """Ürün, depo, stok ve uyarı listelerinden özet üretir.

    Uyarı sayıları yalnızca onaylanmamış uyarıları içerir (overstocked hariç).
    """
    unit_cost = {p.id: p.unit_cost for p in products}

    total_units = sum(r.quantity for r in records)
    total_value = sum(unit_cost.get(r.product_id, 0.0) * r.quantity for r in records)

    by_product: dict[int, int] = {}
    for r in records:
        by_product[r.product_id] = by_product.get(r.product_id, 0) + r.quantity

    units_by_category: dict[str, int] = {}
    for p in products:
        units_by_category[p.category] = units_by_category.get(p.category, 0) + by_product.get(p.id, 0)

    warehouse_totals = []
    for w in warehouses:
        held = [r for r in records if r.warehouse_id == w.id]
        warehouse_totals.append(
            WarehouseTotals(
                warehouse_id=w.id,
                code=w.code,
                units=sum(r.quantity for r in held),
                value=round(sum(unit_cost.get(r.product_id, 0.0) * r.quantity for r in held), 2),
            )
        )

    return InventorySummary(
        total_units=total_units,
        total_value=round(total_value, 2),
        critical_alerts=sum(
            1 for a in alerts if a.severity == AlertSeverity.CRITICAL and not a.acknowledged
        ),
        low_stock_alerts=sum(1 for a in alerts if a.status == StockStatus.LOW and not a.acknowledged),
        overstocked=sum(1 for a in alerts if a.status == StockStatus.OVERSTOCKED),
        acknowledged=sum(1 for a in alerts if a.acknowledged),
        units_by_category=units_by_category,
        warehouses=warehouse_totals,
    )
