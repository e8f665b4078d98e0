"""
Unit tests for configuration loading.
"""

import json

import pytest

from erth_sdk.config import FeeConfig, NetworkConfig, PollConfig
from erth_sdk.constants import DEFAULT_LCD_URL, MAINNET_CONSENSUS_IO_PUBKEY
from erth_sdk.errors import ValidationError


class TestNetworkConfig:

    @pytest.mark.unit
    def test_mainnet_defaults(self):
        config = NetworkConfig.mainnet()

        assert config.lcd_url == DEFAULT_LCD_URL
        assert config.chain_id is None
        assert config.address_prefix == "secret"
        assert config.consensus_io_pubkey == MAINNET_CONSENSUS_IO_PUBKEY
        assert config.fee.gas_limit == 5_000_000
        assert config.fee.amount == "100000"
        assert config.fee.denom == "uscrt"
        assert config.poll == PollConfig(initial_delay=2.0, retry_delay=3.0, max_retries=5, timeout=60.0)

    @pytest.mark.unit
    def test_from_file(self, tmp_path):
        path = tmp_path / "network_config.json"
        path.write_text(json.dumps({
            "lcd_url": "https://pulsar.lcd.test",
            "chain_id": "pulsar-3",
            "fee": {"gas_limit": 400000, "amount": 5000, "granter": "secret1granter"},
            "poll": {"max_retries": 2}
        }))

        config = NetworkConfig.from_file(str(path))

        assert config.lcd_url == "https://pulsar.lcd.test"
        assert config.chain_id == "pulsar-3"
        assert config.fee.gas_limit == 400000
        assert config.fee.amount == "5000"
        assert config.fee.denom == "uscrt"
        assert config.fee.granter == "secret1granter"
        assert config.poll.max_retries == 2
        assert config.poll.retry_delay == 3.0

    @pytest.mark.unit
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            NetworkConfig.from_file(str(tmp_path / "nope.json"))

    @pytest.mark.unit
    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("ERTH_LCD_URL", "https://env.lcd.test")
        monkeypatch.setenv("ERTH_CHAIN_ID", "secret-4")
        monkeypatch.setenv("ERTH_GAS_LIMIT", "250000")
        monkeypatch.setenv("ERTH_FEE_GRANTER", "secret1payer")
        monkeypatch.delenv("ERTH_CONSENSUS_IO_PUBKEY", raising=False)

        config = NetworkConfig.from_env()

        assert config.lcd_url == "https://env.lcd.test"
        assert config.chain_id == "secret-4"
        assert config.fee.gas_limit == 250000
        assert config.fee.granter == "secret1payer"
        assert config.consensus_io_pubkey == MAINNET_CONSENSUS_IO_PUBKEY


class TestFeeConfig:

    @pytest.mark.unit
    @pytest.mark.parametrize("kwargs", [
        {"gas_limit": 0},
        {"gas_limit": -1},
        {"amount": "1.5"},
        {"amount": "abc"},
    ])
    def test_invalid_fee(self, kwargs):
        with pytest.raises(ValidationError):
            FeeConfig(**kwargs)
