"""Düz JSON dosyası tabanlı depo.

Her varlık tipi veri dizininde tek bir JSON dizisi olarak tutulur
(products.json, warehouses.json, stock.json, transfers.json, alerts.json).
Yazma işlemi aynı dizinde geçici dosyaya yapılır ve `os.replace` ile
yerine taşınır; okuyucular hiçbir zaman yarım dosya görmez.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Union

from stock_engine.errors import PersistenceError
from stock_engine.models.inventory import AlertRecord, Product, StockRecord, Transfer, Warehouse
from stock_engine.storage.base import EntityStore, StoreCatalog, StoreWarehouseCatalog, T

logger = logging.getLogger(__name__)

FILE_NAMES = {
    "products": "products.json",
    "warehouses": "warehouses.json",
    "stock": "stock.json",
    "transfers": "transfers.json",
    "alerts": "alerts.json",
}


class JsonFileStore(EntityStore[T]):
    """Tek bir JSON dosyasını okuyan/yazan depo."""

    def __init__(
        self,
        path: Union[str, Path],
        from_dict: Callable[[dict], T],
        to_dict: Callable[[T], dict],
    ):
        self.path = Path(path)
        self._from_dict = from_dict
        self._to_dict = to_dict

    def load_all(self) -> list[T]:
        # Dosya yoksa koleksiyon boş kabul edilir
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw: Any = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("JSON okuma hatası [%s]: %s", self.path, e)
            raise PersistenceError(f"{self.path.name} okunamadı: {e}") from e

        if not isinstance(raw, list):
            raise PersistenceError(f"{self.path.name} bir JSON dizisi değil")
        try:
            return [self._from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError) as e:
            raise PersistenceError(f"{self.path.name} geçersiz kayıt içeriyor: {e}") from e

    def save_all(self, items: list[T]) -> None:
        payload = [self._to_dict(item) for item in items]
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as e:
            logger.error("JSON yazma hatası [%s]: %s", self.path, e)
            raise PersistenceError(f"{self.path.name} yazılamadı: {e}") from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)


def _store(data_dir: Path, name: str, model: Any) -> JsonFileStore:
    return JsonFileStore(data_dir / FILE_NAMES[name], model.from_dict, model.to_dict)


def create_json_stores(data_dir: Union[str, Path]) -> dict[str, Any]:
    """Veri dizini için tüm depoları ve katalogları oluşturur."""
    data_dir = Path(data_dir)
    return {
        "products": StoreCatalog(_store(data_dir, "products", Product)),
        "warehouses": StoreWarehouseCatalog(_store(data_dir, "warehouses", Warehouse)),
        "stock": _store(data_dir, "stock", StockRecord),
        "transfers": _store(data_dir, "transfers", Transfer),
        "alerts": _store(data_dir, "alerts", AlertRecord),
    }
