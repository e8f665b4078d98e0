"""
ERTH SDK - Secret Network Contract Client

A Python SDK for encrypted contract execution and queries on Secret Network.

Usage:
    from erth_sdk import ErthClient, MnemonicKeyProvider, NetworkConfig
    
    client = ErthClient(NetworkConfig.mainnet(), MnemonicKeyProvider(phrase))
    result = client.execute("secret1contract...", {"claim": {}})
    print(result.tx_hash, result.status)
    
    balance = client.snip20_balance("secret1token...", viewing_key)

Lower-level pieces (cipher, transaction builder, LCD client) are exported
for callers that need to drive the pipeline themselves.
"""

from .client import ErthClient
from .config import NetworkConfig, FeeConfig, PollConfig
from .cancellation import CancelToken
from .models import (
    Account,
    BroadcastResult,
    Coin,
    ContractCall,
    ContractMessage,
    EncryptedEnvelope,
    ExecuteMessage,
    ExecutionResult,
    SignDoc,
    SignedTx,
    TransactionRecord,
    TxStatus,
    UnsignedTx,
)

# Key providers
from .providers import (
    WalletKeyProvider,
    MemoryKeyProvider,
    MnemonicKeyProvider,
    EnvKeyProvider,
)

# Error types
from .errors import (
    ErthError,
    ValidationError,
    UnsupportedFundsFormat,
    CryptoError,
    InvalidAddress,
    SigningError,
    SignerFailure,
    NetworkError,
    APIError,
    AccountNotFoundError,
    ChainError,
    ContractQueryError,
    ParseError,
    OperationCancelledError,
)

# Pipeline
from .pipeline import PipelineCoordinator, PipelineHandle, PipelineState
from .confirmation import ConfirmationTracker

# Events and logging
from .events import EventEmitter, EventType, Event
from .logging import StructuredLogger, LogLevel, create_file_logger

# Core / infra
from .core import AddressCodec, MessageCipher, TransactionBuilder
from .infra import LCDClient
from .protocols import SNIP20Protocol

__version__ = "0.1.0"
__all__ = [
    "ErthClient",
    "NetworkConfig",
    "FeeConfig",
    "PollConfig",
    "CancelToken",
    "Account",
    "BroadcastResult",
    "Coin",
    "ContractCall",
    "ContractMessage",
    "EncryptedEnvelope",
    "ExecuteMessage",
    "ExecutionResult",
    "SignDoc",
    "SignedTx",
    "TransactionRecord",
    "TxStatus",
    "UnsignedTx",
    "WalletKeyProvider",
    "MemoryKeyProvider",
    "MnemonicKeyProvider",
    "EnvKeyProvider",
    "ErthError",
    "ValidationError",
    "UnsupportedFundsFormat",
    "CryptoError",
    "InvalidAddress",
    "SigningError",
    "SignerFailure",
    "NetworkError",
    "APIError",
    "AccountNotFoundError",
    "ChainError",
    "ContractQueryError",
    "ParseError",
    "OperationCancelledError",
    "PipelineCoordinator",
    "PipelineHandle",
    "PipelineState",
    "ConfirmationTracker",
    "EventEmitter",
    "EventType",
    "Event",
    "StructuredLogger",
    "LogLevel",
    "create_file_logger",
    "AddressCodec",
    "MessageCipher",
    "TransactionBuilder",
    "LCDClient",
    "SNIP20Protocol",
]
