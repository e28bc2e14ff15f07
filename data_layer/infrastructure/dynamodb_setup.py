"""DynamoDB tablo oluşturma ve başlangıç verisi yükleme.

5 tablo: Products, Warehouses, Stock, Transfers, Alerts
Kullanım:
    python -m data_layer.infrastructure.dynamodb_setup            # tabloları oluştur + veriyi yükle
    python -m data_layer.infrastructure.dynamodb_setup --delete   # tabloları sil
"""
import argparse
import json
import logging
from pathlib import Path
from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from stock_engine.config import Settings, configure_logging
from stock_engine.storage.dynamodb import TABLES, to_dynamo

logger = logging.getLogger(__name__)

BOTO_CONFIG = Config(retries={"max_attempts": 3})
DATA_DIR = Path(__file__).resolve().parent.parent / "data"

# JSON dosyası -> varlık adı
SEED_FILES = {
    "products": "products.json",
    "warehouses": "warehouses.json",
    "stock": "stock.json",
    "transfers": "transfers.json",
    "alerts": "alerts.json",
}


def table_definitions(table_prefix: str = "") -> list[dict]:
    """Her varlık için tek anahtarlı (N tipi) tablo tanımı üretir."""
    definitions = []
    for table_name, key_name in TABLES.values():
        definitions.append({
            "TableName": table_prefix + table_name,
            "KeySchema": [{"AttributeName": key_name, "KeyType": "HASH"}],
            "AttributeDefinitions": [{"AttributeName": key_name, "AttributeType": "N"}],
            "BillingMode": "PAY_PER_REQUEST",
        })
    return definitions


def _client(region: str, client: Optional[Any] = None) -> Any:
    return client or boto3.client("dynamodb", region_name=region, config=BOTO_CONFIG)


def create_tables(region: str, table_prefix: str = "", client: Optional[Any] = None) -> list[str]:
    """Eksik tabloları oluşturur; mevcut olanları atlar. Oluşturulanları döndürür."""
    dynamodb = _client(region, client)
    created = []
    for table_def in table_definitions(table_prefix):
        table_name = table_def["TableName"]
        try:
            dynamodb.describe_table(TableName=table_name)
            logger.info("%s zaten mevcut, atlanıyor", table_name)
        except ClientError as e:
            if e.response["Error"]["Code"] != "ResourceNotFoundException":
                raise
            logger.info("%s oluşturuluyor...", table_name)
            dynamodb.create_table(**table_def)
            # Tablonun aktif olmasını bekle
            dynamodb.get_waiter("table_exists").wait(TableName=table_name)
            created.append(table_name)
    return created


def load_seed_data(
    region: str,
    table_prefix: str = "",
    data_dir: Path = DATA_DIR,
    dynamodb_resource: Optional[Any] = None,
) -> dict[str, int]:
    """JSON başlangıç verisini tablolara yükler. Tablo başına yüklenen kayıt sayısını döndürür."""
    dynamodb = dynamodb_resource or boto3.resource("dynamodb", region_name=region, config=BOTO_CONFIG)
    loaded = {}
    for entity, file_name in SEED_FILES.items():
        path = Path(data_dir) / file_name
        if not path.exists():
            logger.warning("%s bulunamadı, atlanıyor", path)
            continue
        with open(path, "r", encoding="utf-8") as f:
            items = to_dynamo(json.load(f))

        table_name = table_prefix + TABLES[entity][0]
        table = dynamodb.Table(table_name)
        with table.batch_writer() as batch:
            for item in items:
                batch.put_item(Item=item)
        loaded[table_name] = len(items)
        logger.info("%s: %d kayıt yüklendi", table_name, len(items))
    return loaded


def delete_tables(region: str, table_prefix: str = "", client: Optional[Any] = None) -> None:
    """Tüm tabloları siler (dikkatli kullan)."""
    dynamodb = _client(region, client)
    for table_def in table_definitions(table_prefix):
        table_name = table_def["TableName"]
        try:
            dynamodb.delete_table(TableName=table_name)
            logger.info("%s silindi", table_name)
        except ClientError:
            logger.info("%s bulunamadı, atlanıyor", table_name)


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Stok tablolarını oluşturur ve başlangıç verisini yükler")
    parser.add_argument("--delete", action="store_true", help="Tabloları sil")
    parser.add_argument("--data-dir", default=str(DATA_DIR), help="Başlangıç JSON dosyalarının dizini")
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    configure_logging(settings.log_level)

    if args.delete:
        delete_tables(settings.region, settings.table_prefix)
        return
    create_tables(settings.region, settings.table_prefix)
    load_seed_data(settings.region, settings.table_prefix, Path(args.data_dir))


if __name__ == "__main__":
    main()
