"""Yapılandırma testleri."""

import pytest

from stock_engine.config import Settings


class TestSettings:

    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.backend == "json"
        assert settings.data_dir == "data_layer/data"
        assert settings.region == "us-west-2"
        assert settings.table_prefix == ""
        assert settings.lock_timeout == 10.0
        assert settings.log_level == "INFO"

    def test_reads_environment(self):
        settings = Settings.from_env({
            "STOCK_BACKEND": " DynamoDB ",
            "STOCK_DATA_DIR": "/srv/stock",
            "AWS_DEFAULT_REGION": "eu-central-1",
            "STOCK_TABLE_PREFIX": "test-",
            "STOCK_LOCK_TIMEOUT": "2.5",
            "LOG_LEVEL": "debug",
        })
        assert settings.backend == "dynamodb"
        assert settings.data_dir == "/srv/stock"
        assert settings.region == "eu-central-1"
        assert settings.table_prefix == "test-"
        assert settings.lock_timeout == 2.5
        assert settings.log_level == "DEBUG"

    def test_invalid_backend(self):
        with pytest.raises(ValueError, match="STOCK_BACKEND"):
            Settings.from_env({"STOCK_BACKEND": "sqlite"})

    @pytest.mark.parametrize("timeout", ["abc", "0", "-1"])
    def test_invalid_lock_timeout(self, timeout):
        with pytest.raises(ValueError, match="STOCK_LOCK_TIMEOUT"):
            Settings.from_env({"STOCK_LOCK_TIMEOUT": timeout})
