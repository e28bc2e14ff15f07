"""DynamoDB tabanlı depo (boto3).

Her varlık tipi kendi tablosunda tutulur. Kayıtlar JSON dosyalarıyla aynı
camelCase şekliyle yazılır; float değerler Decimal'e çevrilir.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Callable, Optional

import boto3
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError

from stock_engine.errors import InsufficientStockError, PersistenceError, SourceNotFoundError
from stock_engine.models.inventory import AlertRecord, Product, StockRecord, Transfer, Warehouse
from stock_engine.storage.base import (
    EntityStore,
    StoreCatalog,
    StoreWarehouseCatalog,
    T,
    TransferCommitter,
)

logger = logging.getLogger(__name__)

# {varlık: (tablo adı, anahtar alanı)}
TABLES = {
    "products": ("Products", "id"),
    "warehouses": ("Warehouses", "id"),
    "stock": ("Stock", "id"),
    "transfers": ("Transfers", "id"),
    "alerts": ("Alerts", "productId"),
}


def to_dynamo(obj: Any) -> Any:
    """float değerleri Decimal'e çevirir (DynamoDB float kabul etmez)."""
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, dict):
        return {k: to_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [to_dynamo(i) for i in obj]
    return obj


def from_dynamo(obj: Any) -> Any:
    """Decimal değerleri int/float'a geri çevirir."""
    if isinstance(obj, Decimal):
        return int(obj) if obj == int(obj) else float(obj)
    if isinstance(obj, dict):
        return {k: from_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [from_dynamo(i) for i in obj]
    return obj


class DynamoDBStore(EntityStore[T]):
    """Bir DynamoDB tablosunu koleksiyon olarak okuyan/yazan depo."""

    def __init__(
        self,
        table: Any,
        key_name: str,
        from_dict: Callable[[dict], T],
        to_dict: Callable[[T], dict],
    ):
        self.table = table
        self.key_name = key_name
        self._from_dict = from_dict
        self._to_dict = to_dict

    def _scan_items(self, **kwargs: Any) -> list[dict]:
        items: list[dict] = []
        response = self.table.scan(**kwargs)
        items.extend(response.get("Items", []))
        while "LastEvaluatedKey" in response:
            response = self.table.scan(ExclusiveStartKey=response["LastEvaluatedKey"], **kwargs)
            items.extend(response.get("Items", []))
        return items

    def load_all(self) -> list[T]:
        try:
            raw = self._scan_items()
        except (ClientError, BotoCoreError) as e:
            logger.error("DynamoDB okuma hatası [%s]: %s", self.table.name, e)
            raise PersistenceError(f"{self.table.name} okunamadı: {e}") from e
        records = [self._from_dict(from_dynamo(item)) for item in raw]
        # Scan sırası garanti değil; id/anahtar sırasına göre döndür
        return sorted(records, key=lambda r: self._to_dict(r)[self.key_name])

    def save_all(self, items: list[T]) -> None:
        payload = [to_dynamo(self._to_dict(item)) for item in items]
        new_keys = {p[self.key_name] for p in payload}
        try:
            existing = self._scan_items(ProjectionExpression="#k", ExpressionAttributeNames={"#k": self.key_name})
            stale = [e[self.key_name] for e in existing if e[self.key_name] not in new_keys]
            with self.table.batch_writer() as batch:
                for item in payload:
                    batch.put_item(Item=item)
                for key in stale:
                    batch.delete_item(Key={self.key_name: key})
        except (ClientError, BotoCoreError) as e:
            logger.error("DynamoDB yazma hatası [%s]: %s", self.table.name, e)
            raise PersistenceError(f"{self.table.name} yazılamadı: {e}") from e

    def save_changes(self, items: list[T], changed: list[T]) -> None:
        """Yalnızca değişen satırları yazar; diğer süreçlerin satırlarına dokunmaz.

        Tek satırlık değişiklik (kayıt ekleme, miktar düzeltme) tek bir
        put_item ile atomik olarak yazılır.
        """
        payload = [to_dynamo(self._to_dict(item)) for item in changed]
        try:
            if len(payload) == 1:
                self.table.put_item(Item=payload[0])
            else:
                with self.table.batch_writer() as batch:
                    for item in payload:
                        batch.put_item(Item=item)
        except (ClientError, BotoCoreError) as e:
            logger.error("DynamoDB yazma hatası [%s]: %s", self.table.name, e)
            raise PersistenceError(f"{self.table.name} yazılamadı: {e}") from e


class DynamoDBTransferCommitter(TransferCommitter):
    """Kaynak düşümü, hedef ekleme ve transfer kaydını tek `transact_write_items` ile yazar.

    Kaynak güncellemesi `quantity >= :qty` koşulu taşır; başka bir süreç stoğu
    arada düşürdüyse işlem tümden iptal edilir ve hiçbir değişiklik görünmez.
    """

    def __init__(self, client: Any, stock_table: str, transfer_table: str):
        self.client = client
        self.stock_table = stock_table
        self.transfer_table = transfer_table
        self._serializer = TypeSerializer()
        self._deserializer = TypeDeserializer()

    def _item(self, data: dict) -> dict:
        return {k: self._serializer.serialize(v) for k, v in to_dynamo(data).items()}

    def _key(self, record: StockRecord) -> dict:
        return {"id": self._serializer.serialize(record.id)}

    def commit_transfer(
        self,
        source: StockRecord,
        target: StockRecord,
        target_created: bool,
        transfer: Transfer,
    ) -> None:
        qty = self._serializer.serialize(transfer.quantity)
        items = [
            {"Update": {
                "TableName": self.stock_table,
                "Key": self._key(source),
                "UpdateExpression": "SET quantity = quantity - :qty, lastUpdated = :ts",
                "ConditionExpression": "attribute_exists(id) AND quantity >= :qty",
                "ExpressionAttributeValues": {":qty": qty, ":ts": {"S": source.last_updated}},
                "ReturnValuesOnConditionCheckFailure": "ALL_OLD",
            }},
        ]
        if target_created:
            items.append({"Put": {
                "TableName": self.stock_table,
                "Item": self._item(target.to_dict()),
                "ConditionExpression": "attribute_not_exists(id)",
            }})
        else:
            items.append({"Update": {
                "TableName": self.stock_table,
                "Key": self._key(target),
                "UpdateExpression": "SET quantity = quantity + :qty, lastUpdated = :ts",
                "ConditionExpression": "attribute_exists(id)",
                "ExpressionAttributeValues": {":qty": qty, ":ts": {"S": target.last_updated}},
            }})
        items.append({"Put": {
            "TableName": self.transfer_table,
            "Item": self._item(transfer.to_dict()),
            "ConditionExpression": "attribute_not_exists(id)",
        }})

        try:
            self.client.transact_write_items(TransactItems=items)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "TransactionCanceledException":
                self._raise_cancelled(e, transfer.quantity)
            logger.error("DynamoDB transfer yazma hatası: %s", e)
            raise PersistenceError(f"Transfer yazılamadı: {e}") from e
        except BotoCoreError as e:
            logger.error("DynamoDB transfer yazma hatası: %s", e)
            raise PersistenceError(f"Transfer yazılamadı: {e}") from e

    def _raise_cancelled(self, error: ClientError, quantity: int) -> None:
        reasons = error.response.get("CancellationReasons") or []
        source_reason = reasons[0] if reasons else {}
        if source_reason.get("Code") == "ConditionalCheckFailed":
            old = source_reason.get("Item")
            if not old:
                raise SourceNotFoundError("Kaynak stok kaydı bulunamadı") from error
            available = from_dynamo(self._deserializer.deserialize(old["quantity"]))
            raise InsufficientStockError(available=available, requested=quantity) from error

        codes = [r.get("Code", "None") for r in reasons]
        logger.error("DynamoDB transfer işlemi iptal edildi: %s", codes)
        raise PersistenceError(f"Transfer işlemi iptal edildi: {codes}") from error


def create_dynamodb_stores(
    region_name: str = "us-west-2",
    table_prefix: str = "",
    dynamodb_resource: Optional[Any] = None,
    dynamodb_client: Optional[Any] = None,
) -> dict[str, Any]:
    """Tüm tablolar için depoları, katalogları ve atomik transfer yazıcısını oluşturur."""
    dynamodb = dynamodb_resource or boto3.resource("dynamodb", region_name=region_name)
    # transact_write_items tipli (low-level) öznitelik değerleri bekler
    client = dynamodb_client or boto3.client("dynamodb", region_name=region_name)

    def store(name: str, model: Any) -> DynamoDBStore:
        table_name, key_name = TABLES[name]
        return DynamoDBStore(dynamodb.Table(table_prefix + table_name), key_name, model.from_dict, model.to_dict)

    return {
        "products": StoreCatalog(store("products", Product)),
        "warehouses": StoreWarehouseCatalog(store("warehouses", Warehouse)),
        "stock": store("stock", StockRecord),
        "transfers": store("transfers", Transfer),
        "alerts": store("alerts", AlertRecord),
        "committer": DynamoDBTransferCommitter(
            client,
            stock_table=table_prefix + TABLES["stock"][0],
            transfer_table=table_prefix + TABLES["transfers"][0],
        ),
    }
