"""Merkezi yapılandırma. .env dosyasını yükler ve ayarları ortamdan okur."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

# Proje kökündeki .env dosyasını bul ve yükle
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

BACKENDS = ("memory", "json", "dynamodb")
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass
class Settings:
    backend: str = "json"
    data_dir: str = "data_layer/data"
    region: str = "us-west-2"
    table_prefix: str = ""
    lock_timeout: float = 10.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Settings:
        """Ortam değişkenlerinden ayarları okur."""
        env = os.environ if environ is None else environ

        backend = env.get("STOCK_BACKEND", "json").strip().lower()
        if backend not in BACKENDS:
            raise ValueError(f"Geçersiz STOCK_BACKEND: {backend} (beklenen: {', '.join(BACKENDS)})")

        raw_timeout = env.get("STOCK_LOCK_TIMEOUT", "10")
        try:
            lock_timeout = float(raw_timeout)
        except ValueError:
            raise ValueError(f"Geçersiz STOCK_LOCK_TIMEOUT: {raw_timeout}") from None
        if lock_timeout <= 0:
            raise ValueError("STOCK_LOCK_TIMEOUT pozitif olmalıdır")

        return cls(
            backend=backend,
            data_dir=env.get("STOCK_DATA_DIR", "data_layer/data"),
            region=env.get("AWS_DEFAULT_REGION", "us-west-2"),
            table_prefix=env.get("STOCK_TABLE_PREFIX", ""),
            lock_timeout=lock_timeout,
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    """Giriş noktaları için temel log yapılandırması."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
