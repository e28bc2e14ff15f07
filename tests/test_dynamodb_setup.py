"""DynamoDB kurulum betiği testleri (boto3 mock)."""

import json
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from data_layer.infrastructure.dynamodb_setup import (
    create_tables,
    delete_tables,
    load_seed_data,
    table_definitions,
)


def _not_found():
    return ClientError({"Error": {"Code": "ResourceNotFoundException", "Message": "missing"}}, "DescribeTable")


class TestTableDefinitions:

    def test_five_tables_with_prefix(self):
        definitions = table_definitions("dev-")
        assert [d["TableName"] for d in definitions] == [
            "dev-Products", "dev-Warehouses", "dev-Stock", "dev-Transfers", "dev-Alerts",
        ]

    def test_alerts_keyed_by_product(self):
        alerts = table_definitions()[-1]
        assert alerts["KeySchema"] == [{"AttributeName": "productId", "KeyType": "HASH"}]
        assert alerts["AttributeDefinitions"][0]["AttributeType"] == "N"


class TestCreateTables:

    def test_creates_missing_tables(self):
        client = MagicMock()
        client.describe_table.side_effect = _not_found()
        created = create_tables("us-west-2", client=client)
        assert len(created) == 5
        assert client.create_table.call_count == 5
        client.get_waiter.assert_called_with("table_exists")

    def test_skips_existing_tables(self):
        client = MagicMock()
        assert create_tables("us-west-2", client=client) == []
        client.create_table.assert_not_called()

    def test_other_errors_propagate(self):
        client = MagicMock()
        client.describe_table.side_effect = ClientError(
            {"Error": {"Code": "AccessDeniedException", "Message": "no"}}, "DescribeTable"
        )
        with pytest.raises(ClientError):
            create_tables("us-west-2", client=client)

    def test_delete_ignores_missing(self):
        client = MagicMock()
        client.delete_table.side_effect = [None, _not_found(), None, None, None]
        delete_tables("us-west-2", table_prefix="dev-", client=client)
        assert client.delete_table.call_count == 5


class TestLoadSeedData:

    def test_loads_files_into_prefixed_tables(self, tmp_path):
        (tmp_path / "products.json").write_text(json.dumps([
            {"id": 1, "sku": "A", "name": "Alpha", "category": "C", "unitCost": 2.5, "reorderPoint": 10}
        ]))
        (tmp_path / "stock.json").write_text(json.dumps([
            {"id": 1, "productId": 1, "warehouseId": 1, "quantity": 5, "lastUpdated": "t"},
            {"id": 2, "productId": 1, "warehouseId": 2, "quantity": 0, "lastUpdated": "t"},
        ]))
        resource = MagicMock()

        loaded = load_seed_data("us-west-2", "dev-", tmp_path, dynamodb_resource=resource)

        assert loaded == {"dev-Products": 1, "dev-Stock": 2}
        batch = resource.Table.return_value.batch_writer.return_value.__enter__.return_value
        first_item = batch.put_item.call_args_list[0].kwargs["Item"]
        assert first_item["unitCost"] == Decimal("2.5")

    def test_bundled_seed_data(self):
        resource = MagicMock()
        loaded = load_seed_data("us-west-2", dynamodb_resource=resource)
        assert loaded == {"Products": 4, "Warehouses": 3, "Stock": 5, "Transfers": 1, "Alerts": 1}
