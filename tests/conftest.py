"""
ERTH SDK Test Configuration

Shared fixtures and test utilities.
"""

import pytest
from unittest.mock import Mock
from pathlib import Path
import sys

# Ensure erth_sdk is importable without installation
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from erth_sdk.config import NetworkConfig, PollConfig
from erth_sdk.core.address import AddressCodec
from erth_sdk.core.cipher import MessageCipher
from erth_sdk.models import Account, BroadcastResult
from erth_sdk.providers import MemoryKeyProvider


# =============================================================================
# Test Keys (DO NOT USE IN PRODUCTION)
# =============================================================================

@pytest.fixture
def test_private_key():
    """Test private key - DO NOT USE IN PRODUCTION."""
    return "0000000000000000000000000000000000000000000000000000000000000001"


@pytest.fixture
def test_public_key():
    """Compressed public key for test_private_key (the generator point)."""
    return bytes.fromhex("0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798")


@pytest.fixture
def test_account_id():
    """RIPEMD160(SHA256(test_public_key))."""
    return bytes.fromhex("751e76e8199196d454941c45d1b3a323f1433bd6")


@pytest.fixture
def test_seed():
    return "test wallet encryption seed"


@pytest.fixture
def signer(test_private_key, test_seed):
    return MemoryKeyProvider(test_private_key, encryption_seed=test_seed)


# =============================================================================
# Component Fixtures
# =============================================================================

@pytest.fixture
def codec():
    return AddressCodec()


@pytest.fixture
def cipher():
    return MessageCipher()


@pytest.fixture
def contract_address(codec):
    """A well-formed contract address."""
    return codec.encode(bytes(range(20)))


@pytest.fixture
def other_contract_address(codec):
    return codec.encode(bytes(range(100, 120)))


@pytest.fixture
def fast_poll():
    """Poll budget without sleeps."""
    return PollConfig(initial_delay=0, retry_delay=0, max_retries=5, timeout=10)


@pytest.fixture
def network_config(fast_poll):
    return NetworkConfig(lcd_url="https://lcd.test", chain_id=None, poll=fast_poll)


# =============================================================================
# Mock Fixtures
# =============================================================================

@pytest.fixture
def mock_api(signer):
    """Mock LCDClient for isolated pipeline testing."""
    api = Mock()
    api.fetch_chain_id.return_value = "secret-4"
    api.fetch_account.return_value = Account(
        address=signer.address,
        account_number=12345,
        sequence=7
    )
    api.fetch_code_hash.return_value = "ab" * 32
    api.broadcast.return_value = BroadcastResult(code=0, tx_hash="A" * 64)
    return api


@pytest.fixture
def confirmed_result():
    return BroadcastResult(
        code=0,
        tx_hash="A" * 64,
        raw_log="[]",
        height=100,
        events=[{"type": "message", "attributes": []}]
    )


# =============================================================================
# Marker Helpers
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (mocked services)")
    config.addinivalue_line("markers", "security: Security-focused tests")
