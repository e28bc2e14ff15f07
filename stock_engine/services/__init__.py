from stock_engine.services.acknowledgement_store import AcknowledgementStore
from stock_engine.services.alert_classifier import AlertClassifier, classify, recommended_order
from stock_engine.services.locking import KeyLock
from stock_engine.services.stock_ledger import StockLedger
from stock_engine.services.transfer_orchestrator import TransferOrchestrator

__all__ = [
    "AcknowledgementStore",
    "AlertClassifier",
    "KeyLock",
    "StockLedger",
    "TransferOrchestrator",
    "classify",
    "recommended_order",
]
