"""
ERTH SDK - Main Client

High-level interface for contract execution and queries.
This is the primary entry point for SDK users.
"""

import logging
from typing import Any, Callable, List, Optional, Union

import requests

from .cancellation import CancelToken
from .config import NetworkConfig
from .confirmation import ConfirmationTracker
from .core.address import AddressCodec
from .core.cipher import MessageCipher
from .core.transaction import TransactionBuilder
from .events import EventEmitter, EventType
from .infra.api import LCDClient
from .logging import StructuredLogger
from .models import ContractCall, ExecutionResult, TxStatus
from .pipeline import PipelineCoordinator, PipelineHandle
from .protocols.snip20 import SNIP20Protocol
from .providers import WalletKeyProvider, MnemonicKeyProvider


class ErthClient:
    """
    High-level client for Secret Network contracts.
    
    Provides simple one-line methods for:
    - Executing one or many contract calls in one transaction
    - Encrypted contract queries
    - SNIP-20 token transfers, sends and balance queries
    
    Example:
        client = ErthClient.from_config("network_config.json", MnemonicKeyProvider(phrase))
        
        result = client.execute("secret1contract...", {"claim": {}})
        print(result.tx_hash, result.status)
        
        info = client.query("secret1token...", SNIP20Protocol.token_info())
        
        @client.on(EventType.AFTER_BROADCAST)
        def on_broadcast(event):
            print(f"Broadcast: {event.data['tx_hash']}")
    """
    
    def __init__(
        self,
        config: NetworkConfig,
        signer: WalletKeyProvider,
        api: Optional[LCDClient] = None,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize client.
        
        Args:
            config: Network configuration.
            signer: Wallet key provider used for signing and encryption.
            api: Optional LCDClient instance.
            session: Optional requests session for the default LCDClient.
            logger: Optional Python logger for structured logging.
        """
        self.config = config
        self.signer = signer
        self.api = api or LCDClient(config.lcd_url, config.request_timeout, session)
        
        self.events = EventEmitter()
        self.logger = StructuredLogger(logger=logger)
        self.codec = AddressCodec(config.address_prefix)
        self.cipher = MessageCipher(config.consensus_io_pubkey)
        self.builder = TransactionBuilder(config.fee, config.address_prefix)
        self.confirmations = ConfirmationTracker(self.api, config.poll, self.events)
        self.pipeline = PipelineCoordinator(
            api=self.api,
            signer=signer,
            config=config,
            cipher=self.cipher,
            builder=self.builder,
            tracker=self.confirmations,
            events=self.events,
            structured_logger=self.logger
        )
    
    @classmethod
    def from_config(cls, config_path: str, signer: WalletKeyProvider) -> "ErthClient":
        """
        Create client from a network_config.json file.
        
        Args:
            config_path: Path to the JSON network configuration.
            signer: Wallet key provider (keys never live in the config file).
        """
        return cls(NetworkConfig.from_file(config_path), signer)
    
    @classmethod
    def from_mnemonic(
        cls,
        mnemonic: str,
        config: Optional[NetworkConfig] = None,
        account_index: int = 0
    ) -> "ErthClient":
        config = config or NetworkConfig.mainnet()
        return cls(config, MnemonicKeyProvider(mnemonic, account_index, config.address_prefix))
    
    @property
    def address(self) -> str:
        return self.signer.address
    
    # =========================================================================
    # Contract Operations
    # =========================================================================
    
    def execute(
        self,
        contract: str,
        msg: Any,
        code_hash: Optional[str] = None,
        funds: Any = None,
        memo: str = "",
        cancel: Optional[CancelToken] = None
    ) -> ExecutionResult:
        """Execute a single contract call."""
        return self.execute_many(
            [ContractCall(contract=contract, msg=msg, code_hash=code_hash, funds=funds)],
            memo=memo,
            cancel=cancel
        )
    
    def execute_many(
        self,
        calls: List[ContractCall],
        memo: str = "",
        cancel: Optional[CancelToken] = None
    ) -> ExecutionResult:
        """Execute several contract calls atomically in one transaction."""
        return self.pipeline.execute(calls, memo=memo, cancel=cancel)
    
    def submit(
        self,
        calls: Union[ContractCall, List[ContractCall]],
        memo: str = "",
        timeout: Optional[float] = None
    ) -> PipelineHandle:
        """Run an execution in the background; see PipelineCoordinator.submit."""
        if isinstance(calls, ContractCall):
            calls = [calls]
        return self.pipeline.submit(calls, memo=memo, timeout=timeout)
    
    def query(
        self,
        contract: str,
        query: Any,
        code_hash: Optional[str] = None,
        cancel: Optional[CancelToken] = None
    ) -> dict:
        """Encrypted smart query; returns the decoded JSON answer."""
        return self.pipeline.query(contract, query, code_hash=code_hash, cancel=cancel)
    
    # =========================================================================
    # SNIP-20 Operations
    # =========================================================================
    
    def snip20_send(
        self,
        token: str,
        recipient: str,
        amount: Union[int, str],
        msg: Any = None,
        recipient_code_hash: Optional[str] = None,
        token_code_hash: Optional[str] = None,
        memo: str = ""
    ) -> ExecutionResult:
        """Send tokens to a contract, forwarding `msg` to its receive hook."""
        return self.execute(
            token,
            SNIP20Protocol.send(recipient, amount, msg, recipient_code_hash),
            code_hash=token_code_hash,
            memo=memo
        )
    
    def snip20_transfer(
        self,
        token: str,
        recipient: str,
        amount: Union[int, str],
        token_code_hash: Optional[str] = None,
        memo: str = ""
    ) -> ExecutionResult:
        return self.execute(
            token,
            SNIP20Protocol.transfer(recipient, amount),
            code_hash=token_code_hash,
            memo=memo
        )
    
    def set_viewing_key(self, token: str, key: str, token_code_hash: Optional[str] = None) -> ExecutionResult:
        return self.execute(token, SNIP20Protocol.set_viewing_key(key), code_hash=token_code_hash)
    
    def snip20_balance(self, token: str, viewing_key: str, token_code_hash: Optional[str] = None) -> dict:
        """Balance of the client's own address, authenticated by a viewing key."""
        return self.query(token, SNIP20Protocol.balance(self.address, viewing_key), code_hash=token_code_hash)
    
    def token_info(self, token: str, token_code_hash: Optional[str] = None) -> dict:
        return self.query(token, SNIP20Protocol.token_info(), code_hash=token_code_hash)
    
    # =========================================================================
    # Confirmation / Events
    # =========================================================================
    
    def get_status(self, tx_hash: str) -> TxStatus:
        """Current status of a previously broadcast transaction."""
        return self.confirmations.get_status(tx_hash)
    
    def on(self, event_type: EventType) -> Callable:
        """
        Decorator to register event handler.
        
        Example:
            @client.on(EventType.TX_CONFIRMED)
            def handle_confirmed(event):
                print(f"Confirmed: {event.data['tx_hash']}")
        """
        return self.events.on(event_type)
    
    def close(self) -> None:
        self.pipeline.close()
