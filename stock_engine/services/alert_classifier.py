"""Alert Classifier - Ürün bazında stok durumu ve uyarı şiddeti.

- Her ürünün tüm depolardaki toplam stoğunu yeniden sipariş noktasıyla karşılaştırır
- Durum / şiddet / önerilen sipariş üçlüsünü hesaplar
- Kalıcı onay (acknowledgement) bilgisini sonuçla birleştirir

Sınıflandırma tablosu tek kaynaktır; tüm çağıranlar `classify` kullanır.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from stock_engine.errors import ProductNotFoundError
from stock_engine.models.inventory import (
    AlertRecord,
    AlertSeverity,
    AlertView,
    Product,
    StockStatus,
    utc_now,
)
from stock_engine.services.acknowledgement_store import AcknowledgementStore
from stock_engine.services.stock_ledger import StockLedger
from stock_engine.storage.base import ProductCatalog

logger = logging.getLogger(__name__)

# (koşul(q, R), durum, şiddet) - ilk eşleşen kazanır
CLASSIFICATION_RULES: list[tuple[Callable[[int, int], bool], StockStatus, AlertSeverity]] = [
    (lambda q, r: q == 0, StockStatus.OUT_OF_STOCK, AlertSeverity.CRITICAL),
    (lambda q, r: q < r * 0.5, StockStatus.CRITICAL, AlertSeverity.CRITICAL),
    (lambda q, r: q < r, StockStatus.LOW, AlertSeverity.MEDIUM),
    (lambda q, r: q > r * 3, StockStatus.OVERSTOCKED, AlertSeverity.LOW),
]
DEFAULT_CLASSIFICATION = (StockStatus.ADEQUATE, AlertSeverity.LOW)

SEVERITY_ORDER = {AlertSeverity.CRITICAL: 0, AlertSeverity.MEDIUM: 1, AlertSeverity.LOW: 2}

ALERT_VIEWS = ("all", "critical", "low", "overstocked", "acknowledged")
SORT_KEYS = ("severity", "name", "stock-asc", "stock-desc", "recommended-desc")


def classify(current_stock: int, reorder_point: int) -> tuple[StockStatus, AlertSeverity]:
    """Toplam stok ve yeniden sipariş noktasına göre durum ve şiddeti döndürür."""
    for condition, status, severity in CLASSIFICATION_RULES:
        if condition(current_stock, reorder_point):
            return status, severity
    return DEFAULT_CLASSIFICATION


def recommended_order(current_stock: int, reorder_point: int) -> int:
    """Yeniden sipariş noktasının iki katına ulaşmak için önerilen miktar."""
    return max(0, reorder_point * 2 - current_stock)


def build_alert_view(product: Product, current_stock: int, record: Optional[AlertRecord]) -> AlertView:
    status, severity = classify(current_stock, product.reorder_point)
    return AlertView(
        product_id=product.id,
        sku=product.sku,
        name=product.name,
        category=product.category,
        current_stock=current_stock,
        reorder_point=product.reorder_point,
        status=status,
        severity=severity,
        recommended_order=recommended_order(current_stock, product.reorder_point),
        acknowledged=record.acknowledged if record else False,
        acknowledged_at=record.acknowledged_at if record else None,
        notes=record.notes if record else "",
    )


class AlertClassifier:
    """Stok uyarılarını türeten ve onaylarını yöneten servis."""

    def __init__(
        self,
        ledger: StockLedger,
        products: ProductCatalog,
        acknowledgements: AcknowledgementStore,
        clock: Callable[[], str] = utc_now,
    ):
        self.ledger = ledger
        self.products = products
        self.acknowledgements = acknowledgements
        self._clock = clock

    def list_alerts(self) -> list[AlertView]:
        """Katalogdaki her ürün için tam olarak bir uyarı satırı döndürür."""
        totals = self.ledger.totals_by_product()
        records = {r.product_id: r for r in self.acknowledgements.list_all()}
        alerts = [
            build_alert_view(product, totals.get(product.id, 0), records.get(product.id))
            for product in self.products.list_products()
        ]
        logger.debug("%d ürün için uyarı hesaplandı", len(alerts))
        return alerts

    def get_alert(self, product_id: int) -> AlertView:
        product = self._require_product(product_id)
        return build_alert_view(
            product,
            self.ledger.aggregate_by_product(product_id),
            self.acknowledgements.get(product_id),
        )

    def acknowledge(self, product_id: int, notes: Optional[str] = None) -> AlertRecord:
        """Uyarıyı onaylar. Aynı notlarla tekrar çağrı aynı durumu üretir (zaman hariç)."""
        self._require_product(product_id)
        record = AlertRecord(
            product_id=product_id,
            acknowledged=True,
            acknowledged_at=self._clock(),
            notes=notes or "",
        )
        saved = self.acknowledgements.upsert(record)
        logger.info("Uyarı onaylandı: ürün=%s", product_id)
        return saved

    def clear_acknowledgement(self, product_id: int) -> AlertRecord:
        """Onayı kaldırır; notlar korunur."""
        self._require_product(product_id)
        existing = self.acknowledgements.get(product_id)
        record = AlertRecord(
            product_id=product_id,
            acknowledged=False,
            acknowledged_at=None,
            notes=existing.notes if existing else "",
        )
        saved = self.acknowledgements.upsert(record)
        logger.info("Uyarı onayı kaldırıldı: ürün=%s", product_id)
        return saved

    def _require_product(self, product_id: int) -> Product:
        product = self.products.get_product(product_id)
        if product is None:
            raise ProductNotFoundError(f"Ürün bulunamadı: {product_id}")
        return product


def filter_alerts(
    alerts: list[AlertView],
    view: str = "all",
    category: Optional[str] = None,
    search: Optional[str] = None,
) -> list[AlertView]:
    """Uyarıları görünüm, kategori ve arama terimine göre süzer."""
    if view not in ALERT_VIEWS:
        raise ValueError(f"Geçersiz uyarı görünümü: {view}")

    if view == "critical":
        alerts = [a for a in alerts if a.severity == AlertSeverity.CRITICAL and not a.acknowledged]
    elif view == "low":
        alerts = [a for a in alerts if a.status == StockStatus.LOW and not a.acknowledged]
    elif view == "overstocked":
        alerts = [a for a in alerts if a.status == StockStatus.OVERSTOCKED]
    elif view == "acknowledged":
        alerts = [a for a in alerts if a.acknowledged]

    if category:
        alerts = [a for a in alerts if a.category == category]
    if search:
        term = search.lower()
        alerts = [a for a in alerts if term in a.name.lower() or term in a.sku.lower()]
    return list(alerts)


def sort_alerts(alerts: list[AlertView], sort_by: str = "severity") -> list[AlertView]:
    if sort_by == "severity":
        return sorted(alerts, key=lambda a: SEVERITY_ORDER[a.severity])
    if sort_by == "name":
        return sorted(alerts, key=lambda a: a.name.lower())
    if sort_by == "stock-asc":
        return sorted(alerts, key=lambda a: a.current_stock)
    if sort_by == "stock-desc":
        return sorted(alerts, key=lambda a: a.current_stock, reverse=True)
    if sort_by == "recommended-desc":
        return sorted(alerts, key=lambda a: a.recommended_order, reverse=True)
    raise ValueError(f"Geçersiz sıralama: {sort_by}")
