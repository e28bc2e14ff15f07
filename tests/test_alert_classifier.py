"""Alert Classifier unit testleri."""

import pytest

from stock_engine.errors import PersistenceError, ProductNotFoundError
from stock_engine.models.inventory import (
    AlertRecord,
    AlertSeverity,
    Product,
    StockRecord,
    StockStatus,
)
from stock_engine.services.acknowledgement_store import AcknowledgementStore
from stock_engine.services.alert_classifier import (
    AlertClassifier,
    classify,
    filter_alerts,
    recommended_order,
    sort_alerts,
)
from stock_engine.services.stock_ledger import StockLedger
from stock_engine.storage.base import StoreCatalog
from stock_engine.storage.memory import InMemoryStore


class _Clock:
    def __init__(self):
        self.ticks = 0

    def __call__(self):
        self.ticks += 1
        return f"2026-10-01T12:00:{self.ticks:02d}"


def _products():
    return [
        Product(id=1, sku="ELC-1", name="Scanner", category="Electronics", unit_cost=10.0, reorder_point=100),
        Product(id=2, sku="PKG-1", name="Box", category="Packaging", unit_cost=1.0, reorder_point=100),
        Product(id=3, sku="SAF-1", name="Gloves", category="Safety", unit_cost=2.0, reorder_point=100),
    ]


def _create_classifier(stock=None, alerts=None):
    """stock: {(product_id, warehouse_id): quantity}"""
    records = [
        StockRecord(id=i + 1, product_id=p, warehouse_id=w, quantity=q)
        for i, ((p, w), q) in enumerate((stock or {}).items())
    ]
    alert_store = InMemoryStore(alerts or [])
    classifier = AlertClassifier(
        StockLedger(InMemoryStore(records)),
        StoreCatalog(InMemoryStore(_products())),
        AcknowledgementStore(alert_store),
        clock=_Clock(),
    )
    return classifier, alert_store


class TestClassification:
    """Sınır değerleri (R=100)."""

    @pytest.mark.parametrize(
        "quantity, status, severity",
        [
            (0, StockStatus.OUT_OF_STOCK, AlertSeverity.CRITICAL),
            (1, StockStatus.CRITICAL, AlertSeverity.CRITICAL),
            (49, StockStatus.CRITICAL, AlertSeverity.CRITICAL),
            (50, StockStatus.LOW, AlertSeverity.MEDIUM),
            (99, StockStatus.LOW, AlertSeverity.MEDIUM),
            (100, StockStatus.ADEQUATE, AlertSeverity.LOW),
            (300, StockStatus.ADEQUATE, AlertSeverity.LOW),
            (301, StockStatus.OVERSTOCKED, AlertSeverity.LOW),
        ],
    )
    def test_boundaries(self, quantity, status, severity):
        assert classify(quantity, 100) == (status, severity)

    def test_odd_reorder_point_half(self):
        # R=7 -> yarısı 3.5; 3 kritik, 4 düşük
        assert classify(3, 7)[0] == StockStatus.CRITICAL
        assert classify(4, 7)[0] == StockStatus.LOW

    def test_zero_reorder_point(self):
        assert classify(0, 0)[0] == StockStatus.OUT_OF_STOCK
        assert classify(1, 0)[0] == StockStatus.OVERSTOCKED

    def test_recommended_order(self):
        assert recommended_order(30, 100) == 170
        assert recommended_order(250, 100) == 0
        assert recommended_order(200, 100) == 0
        assert recommended_order(0, 100) == 200


class TestListAlerts:

    def test_one_row_per_product(self):
        classifier, _ = _create_classifier({(1, 1): 20, (1, 2): 20, (2, 1): 400})
        alerts = classifier.list_alerts()
        assert [a.product_id for a in alerts] == [1, 2, 3]

    def test_aggregates_across_warehouses(self):
        classifier, _ = _create_classifier({(1, 1): 20, (1, 2): 40})
        alert = classifier.get_alert(1)
        assert alert.current_stock == 60
        assert alert.status == StockStatus.LOW
        assert alert.severity == AlertSeverity.MEDIUM
        assert alert.recommended_order == 140

    def test_product_without_stock_is_out_of_stock(self):
        classifier, _ = _create_classifier({(1, 1): 20})
        alert = classifier.get_alert(3)
        assert alert.current_stock == 0
        assert alert.status == StockStatus.OUT_OF_STOCK

    def test_defaults_without_acknowledgement(self):
        classifier, _ = _create_classifier()
        alert = classifier.get_alert(1)
        assert alert.acknowledged is False
        assert alert.acknowledged_at is None
        assert alert.notes == ""

    def test_merges_persisted_acknowledgement(self):
        record = AlertRecord(product_id=2, acknowledged=True, acknowledged_at="2026-09-02T09:15:00", notes="PO raised")
        classifier, _ = _create_classifier(alerts=[record])
        alerts = {a.product_id: a for a in classifier.list_alerts()}
        assert alerts[2].acknowledged is True
        assert alerts[2].notes == "PO raised"
        assert alerts[1].acknowledged is False

    def test_unknown_product(self):
        classifier, _ = _create_classifier()
        with pytest.raises(ProductNotFoundError):
            classifier.get_alert(42)

    def test_alert_view_to_dict(self):
        classifier, _ = _create_classifier({(1, 1): 30})
        data = classifier.get_alert(1).to_dict()
        assert data["status"] == "critical"
        assert data["severity"] == "critical"
        assert data["recommendedOrder"] == 170
        assert data["currentStock"] == 30


class TestAcknowledgement:

    def test_acknowledge(self):
        classifier, store = _create_classifier()
        record = classifier.acknowledge(1, "ordered")
        assert record.acknowledged is True
        assert record.acknowledged_at is not None
        assert record.notes == "ordered"
        assert len(store.load_all()) == 1

    def test_acknowledge_is_idempotent(self):
        classifier, store = _create_classifier()
        first = classifier.acknowledge(1, "x")
        second = classifier.acknowledge(1, "x")
        assert (first.acknowledged, first.notes) == (second.acknowledged, second.notes) == (True, "x")
        # Yalnızca zaman damgası yenilenir
        assert second.acknowledged_at != first.acknowledged_at
        assert len(store.load_all()) == 1

    def test_acknowledge_without_notes(self):
        classifier, _ = _create_classifier()
        assert classifier.acknowledge(1).notes == ""

    def test_acknowledge_unknown_product(self):
        classifier, store = _create_classifier()
        with pytest.raises(ProductNotFoundError):
            classifier.acknowledge(42, "x")
        assert store.load_all() == []

    def test_acknowledge_persistence_failure(self):
        classifier, store = _create_classifier()
        store.fail_next_save = True
        with pytest.raises(PersistenceError):
            classifier.acknowledge(1, "x")
        assert classifier.get_alert(1).acknowledged is False

    def test_clear_acknowledgement_keeps_notes(self):
        classifier, _ = _create_classifier()
        classifier.acknowledge(1, "ordered")
        record = classifier.clear_acknowledgement(1)
        assert record.acknowledged is False
        assert record.acknowledged_at is None
        assert record.notes == "ordered"
        assert classifier.get_alert(1).acknowledged is False

    def test_acknowledgement_independent_of_stock(self):
        classifier, _ = _create_classifier({(1, 1): 10})
        classifier.acknowledge(1, "x")
        classifier.ledger.credit(1, 1, 500)
        alert = classifier.get_alert(1)
        assert alert.status == StockStatus.OVERSTOCKED
        assert alert.acknowledged is True


class TestFilterAndSort:

    def _alerts(self):
        classifier, _ = _create_classifier({(1, 1): 10, (2, 1): 60, (3, 1): 500})
        classifier.acknowledge(1, "done")
        return classifier.list_alerts()

    def test_critical_view_excludes_acknowledged(self):
        assert filter_alerts(self._alerts(), view="critical") == []

    def test_low_view(self):
        assert [a.product_id for a in filter_alerts(self._alerts(), view="low")] == [2]

    def test_overstocked_view(self):
        assert [a.product_id for a in filter_alerts(self._alerts(), view="overstocked")] == [3]

    def test_acknowledged_view(self):
        assert [a.product_id for a in filter_alerts(self._alerts(), view="acknowledged")] == [1]

    def test_category_and_search(self):
        alerts = self._alerts()
        assert [a.product_id for a in filter_alerts(alerts, category="Safety")] == [3]
        assert [a.product_id for a in filter_alerts(alerts, search="pkg")] == [2]
        assert [a.product_id for a in filter_alerts(alerts, search="scan")] == [1]

    def test_invalid_view(self):
        with pytest.raises(ValueError):
            filter_alerts([], view="everything")

    def test_sort_by_severity(self):
        assert [a.product_id for a in sort_alerts(self._alerts(), "severity")] == [1, 2, 3]

    def test_sort_by_stock_and_recommended(self):
        alerts = self._alerts()
        assert [a.product_id for a in sort_alerts(alerts, "stock-desc")] == [3, 2, 1]
        assert [a.product_id for a in sort_alerts(alerts, "stock-asc")] == [1, 2, 3]
        assert [a.product_id for a in sort_alerts(alerts, "recommended-desc")] == [1, 2, 3]

    def test_invalid_sort(self):
        with pytest.raises(ValueError):
            sort_alerts([], "price")
