"""Stok motoru hata sınıfları.

Validasyon hataları her zaman durum değişikliğinden önce fırlatılır.
"""

from __future__ import annotations

from typing import Optional


class InventoryError(Exception):
    """Tüm stok motoru hatalarının temel sınıfı."""
    pass


class ValidationError(InventoryError):
    """İstek validasyon hatası."""
    pass


class InvalidQuantityError(ValidationError):
    """Miktar pozitif değil."""
    pass


class SameWarehouseError(ValidationError):
    """Kaynak ve hedef depo aynı."""
    pass


class SourceNotFoundError(ValidationError):
    """Kaynak depoda ürün için stok kaydı yok."""
    pass


class InsufficientStockError(ValidationError):
    """Yetersiz stok hatası."""

    def __init__(self, available: int, requested: Optional[int] = None, message: Optional[str] = None):
        self.available = available
        self.requested = requested
        if message is None:
            message = f"Insufficient stock. Available: {available}"
        super().__init__(message)


class DuplicateStockRecordError(ValidationError):
    """Aynı ürün/depo çifti için ikinci kayıt oluşturulamaz."""
    pass


class StockRecordNotFoundError(ValidationError):
    """Ürün/depo çifti için stok kaydı bulunamadı."""
    pass


class ProductNotFoundError(ValidationError):
    """Ürün katalogda yok."""
    pass


class PersistenceError(InventoryError):
    """Depolama okuma/yazma hatası."""
    pass


class LockTimeoutError(InventoryError):
    """Kaynak kilidi zaman aşımı içinde alınamadı."""
    pass
