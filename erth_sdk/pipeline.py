"""
ERTH SDK - Pipeline Coordinator

Runs one execute or query operation end to end:

    VALIDATING -> FETCHING_ACCOUNT -> ENCRYPTING -> BUILDING
        -> BROADCASTING -> CONFIRMING -> DONE | FAILED

Each operation runs sequentially on one worker and re-fetches the account
(sequence) every time; nothing is cached across operations.
"""

import base64
import binascii
import json
import logging
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from .cancellation import CancelToken
from .config import NetworkConfig
from .confirmation import ConfirmationTracker
from .core.cipher import MessageCipher
from .core.transaction import TransactionBuilder
from .errors import (
    ChainError,
    ContractQueryError,
    CryptoError,
    ErthError,
    ParseError,
    ValidationError,
)
from .events import EventEmitter, EventType
from .infra.api import LCDClient
from .logging import StructuredLogger
from .models import (
    ContractCall,
    ExecuteMessage,
    ExecutionResult,
    TransactionRecord,
    TxStatus,
)
from .providers import WalletKeyProvider

logger = logging.getLogger(__name__)


class PipelineState(Enum):
    """Steps of an operation."""
    VALIDATING = "validating"
    FETCHING_ACCOUNT = "fetching_account"
    ENCRYPTING = "encrypting"
    BUILDING = "building"
    BROADCASTING = "broadcasting"
    CONFIRMING = "confirming"
    DONE = "done"
    FAILED = "failed"


# After an accepted broadcast the transaction exists on chain; cancelling
# then only cuts confirmation short.
_CANCELLABLE_STATES = frozenset({
    PipelineState.VALIDATING,
    PipelineState.FETCHING_ACCOUNT,
    PipelineState.ENCRYPTING,
    PipelineState.BUILDING,
    PipelineState.BROADCASTING,
})


def serialize_msg(msg: Any) -> str:
    """Contract message as compact JSON text; strings pass through untouched."""
    if isinstance(msg, str):
        return msg
    return json.dumps(msg, separators=(",", ":"))


@dataclass
class PipelineHandle:
    """A submitted operation: its future plus the token that cancels it."""
    operation_id: str
    future: Future
    cancel_token: CancelToken
    
    def cancel(self, reason: str = "cancelled") -> None:
        """Signal the worker; blocking steps end at their next check."""
        self.cancel_token.cancel(reason)
        self.future.cancel()
    
    def result(self, timeout: Optional[float] = None) -> ExecutionResult:
        return self.future.result(timeout)
    
    def done(self) -> bool:
        return self.future.done()


class PipelineCoordinator:
    """
    Coordinates cipher, builder, LCD client and confirmation tracker.
    
    Example:
        coordinator = PipelineCoordinator(api, signer, config=NetworkConfig.mainnet())
        result = coordinator.execute([
            ContractCall(contract="secret1...", msg={"claim": {}})
        ])
        print(result.tx_hash, result.status)
    """
    
    def __init__(
        self,
        api: LCDClient,
        signer: WalletKeyProvider,
        config: Optional[NetworkConfig] = None,
        cipher: Optional[MessageCipher] = None,
        builder: Optional[TransactionBuilder] = None,
        tracker: Optional[ConfirmationTracker] = None,
        events: Optional[EventEmitter] = None,
        structured_logger: Optional[StructuredLogger] = None,
        max_workers: int = 4
    ):
        self.config = config or NetworkConfig()
        self.api = api
        self.signer = signer
        self.events = events or EventEmitter()
        self.cipher = cipher or MessageCipher(self.config.consensus_io_pubkey)
        self.builder = builder or TransactionBuilder(self.config.fee, self.config.address_prefix)
        self.tracker = tracker or ConfirmationTracker(api, self.config.poll, self.events)
        self.log = structured_logger or StructuredLogger(component="erth-sdk.pipeline")
        self.max_workers = max_workers
        self._executor: Optional[ThreadPoolExecutor] = None
    
    # =========================================================================
    # State Machine
    # =========================================================================
    
    def _transition(self, operation_id: str, state: PipelineState, cancel: CancelToken, **data) -> None:
        logger.debug("Operation %s -> %s", operation_id, state.value)
        self.events.emit(EventType.STATE_CHANGED, {
            "operation_id": operation_id,
            "state": state,
            **data
        })
        if state in _CANCELLABLE_STATES:
            cancel.check(state.value)
    
    def _fail(self, operation_id: str, error: Exception) -> None:
        self.events.emit(EventType.STATE_CHANGED, {
            "operation_id": operation_id,
            "state": PipelineState.FAILED,
            "error": str(error)
        })
        self.events.emit(EventType.ON_ERROR, {
            "operation_id": operation_id,
            "error": error,
            "error_type": type(error).__name__,
            "message": str(error)
        })
    
    def _validate(self, calls: Sequence[ContractCall]) -> List[str]:
        if not calls:
            raise ValidationError("At least one contract call is required")
        
        payloads = []
        for index, call in enumerate(calls):
            if not call.contract:
                raise ValidationError("Contract address is required", {"message_index": index})
            if call.msg is None or call.msg == "" or call.msg == {}:
                raise ValidationError(
                    "Contract message is required",
                    {"message_index": index, "contract": call.contract}
                )
            try:
                payload = serialize_msg(call.msg)
            except (TypeError, ValueError) as e:
                raise ValidationError(
                    f"Contract message is not JSON serializable: {e}",
                    {"message_index": index, "contract": call.contract}
                )
            try:
                self.builder.parse_coins(call.funds)
            except ErthError as e:
                raise e.with_context(message_index=index, contract=call.contract)
            payloads.append(payload)
        return payloads
    
    def _code_hash(self, contract: str, code_hash: Optional[str], cache: Dict[str, str], cancel: CancelToken) -> str:
        if code_hash:
            return code_hash
        if contract not in cache:
            cache[contract] = self.api.fetch_code_hash(contract, cancel=cancel)
        return cache[contract]
    
    # =========================================================================
    # Execute
    # =========================================================================
    
    def execute(
        self,
        messages: Sequence[ContractCall],
        memo: str = "",
        cancel: Optional[CancelToken] = None
    ) -> ExecutionResult:
        """
        Encrypt, sign, broadcast and (best effort) confirm contract calls.
        
        Args:
            messages: Contract calls, executed in order in one transaction.
            memo: Transaction memo.
            cancel: Token checked before every step and every network call.
        
        Returns:
            ExecutionResult; status is CONFIRMED, UNCONFIRMED_TIMEOUT, or
            REJECTED when the block execution itself failed.
        
        Raises:
            ValidationError: Bad input, raised before any network call.
            AccountNotFoundError: Raised before any encryption.
            ChainError: Broadcast rejected (code != 0); never retried.
            OperationCancelledError: Token cancelled or deadline passed before
                the broadcast was accepted; afterwards cancelling only ends
                confirmation early (status UNCONFIRMED_TIMEOUT).
        """
        return self._run(uuid.uuid4().hex[:12], messages, memo, cancel or CancelToken())
    
    def _run(
        self,
        operation_id: str,
        messages: Sequence[ContractCall],
        memo: str,
        cancel: CancelToken
    ) -> ExecutionResult:
        with self.log.operation("execute") as op:
            op.add_detail("operation_id", operation_id)
            op.add_detail("message_count", len(messages))
            try:
                result = self._execute(operation_id, messages, memo, cancel)
            except Exception as e:
                self._fail(operation_id, e)
                raise
            op.set_tx_hash(result.tx_hash)
            op.add_detail("status", result.status.value)
        return result
    
    def _execute(
        self,
        operation_id: str,
        calls: Sequence[ContractCall],
        memo: str,
        cancel: CancelToken
    ) -> ExecutionResult:
        self._transition(operation_id, PipelineState.VALIDATING, cancel)
        payloads = self._validate(calls)
        
        self._transition(operation_id, PipelineState.FETCHING_ACCOUNT, cancel)
        sender = self.signer.address
        chain_id = self.config.chain_id or self.api.fetch_chain_id(cancel=cancel)
        account = self.api.fetch_account(sender, cancel=cancel)
        
        self._transition(operation_id, PipelineState.ENCRYPTING, cancel)
        seed = self.signer.encryption_seed
        code_hashes: Dict[str, str] = {}
        encrypted = []
        nonces = []
        for index, (call, payload) in enumerate(zip(calls, payloads)):
            try:
                code_hash = self._code_hash(call.contract, call.code_hash, code_hashes, cancel)
                self.events.emit(EventType.BEFORE_ENCRYPT, {
                    "operation_id": operation_id,
                    "message_index": index,
                    "contract": call.contract
                })
                envelope = self.cipher.encrypt(code_hash, payload, seed)
            except ErthError as e:
                raise e.with_context(message_index=index, contract=call.contract)
            nonces.append(envelope.nonce)
            encrypted.append(ExecuteMessage(
                sender=sender,
                contract=call.contract,
                encrypted_payload=envelope.to_bytes(),
                code_hash=code_hash,
                funds=call.funds
            ))
        
        self._transition(operation_id, PipelineState.BUILDING, cancel)
        self.events.emit(EventType.BEFORE_SIGN, {
            "operation_id": operation_id,
            "chain_id": chain_id,
            "account_number": account.account_number,
            "sequence": account.sequence
        })
        signed = self.builder.build(encrypted, memo, account, chain_id, self.signer)
        
        self._transition(operation_id, PipelineState.BROADCASTING, cancel, tx_hash=signed.tx_hash)
        self.events.emit(EventType.BEFORE_BROADCAST, {
            "operation_id": operation_id,
            "tx_hash": signed.tx_hash,
            "size": len(signed.tx_bytes)
        })
        broadcast = self.api.broadcast(signed.tx_bytes, cancel=cancel)
        tx_hash = broadcast.tx_hash or signed.tx_hash
        self.events.emit(EventType.AFTER_BROADCAST, {
            "operation_id": operation_id,
            "tx_hash": tx_hash,
            "code": broadcast.code
        })
        
        if not broadcast.success:
            raise ChainError(
                broadcast.raw_log,
                code=broadcast.code,
                tx_hash=tx_hash,
                codespace=broadcast.codespace
            )
        
        record = TransactionRecord(tx_hash=tx_hash, broadcast=broadcast)
        self.log.info("Broadcast accepted", operation="execute", tx_hash=tx_hash)
        
        self._transition(operation_id, PipelineState.CONFIRMING, cancel, tx_hash=tx_hash)
        self._confirm(record, cancel)
        
        self._transition(operation_id, PipelineState.DONE, cancel, tx_hash=tx_hash, status=record.status)
        return ExecutionResult(sender=sender, record=record, nonces=nonces)
    
    def _confirm(self, record: TransactionRecord, cancel: CancelToken) -> None:
        """Enrich the record; failures here never change the outcome."""
        try:
            confirmed = self.tracker.poll_confirmation(record.tx_hash, cancel=cancel)
        except ErthError as e:
            logger.warning("Confirmation of %s failed: %s", record.tx_hash, e)
            confirmed = None
        
        record.confirmed = confirmed
        if confirmed is None:
            record.status = TxStatus.UNCONFIRMED_TIMEOUT
            self.events.emit(EventType.TX_UNCONFIRMED, {"tx_hash": record.tx_hash})
        elif not confirmed.success:
            record.status = TxStatus.REJECTED
            logger.warning("Transaction %s failed in block: %s", record.tx_hash, confirmed.raw_log)
            self.events.emit(EventType.TX_CONFIRMED, {"tx_hash": record.tx_hash, "result": confirmed})
        else:
            record.status = TxStatus.CONFIRMED
            self.events.emit(EventType.TX_CONFIRMED, {"tx_hash": record.tx_hash, "result": confirmed})
    
    # =========================================================================
    # Query
    # =========================================================================
    
    def query(
        self,
        contract: str,
        query: Any,
        code_hash: Optional[str] = None,
        cancel: Optional[CancelToken] = None
    ) -> dict:
        """
        Run an encrypted smart query and decrypt the answer.
        
        Args:
            contract: Contract address.
            query: Query message, JSON string or JSON-serializable object.
            code_hash: Contract code hash; fetched when omitted.
            cancel: Cancellation token.
        
        Returns:
            Decoded JSON object.
        
        Raises:
            ContractQueryError: Contract error, with its encrypted part decrypted.
            ParseError: Response data is not base64, or not JSON under any decoding.
        """
        cancel = cancel or CancelToken()
        payload = self._validate([ContractCall(contract=contract, msg=query)])[0]
        
        with self.log.operation("query") as op:
            op.add_detail("contract", contract)
            cancel.check("query")
            code_hash = self._code_hash(contract, code_hash, {}, cancel)
            seed = self.signer.encryption_seed
            envelope = self.cipher.encrypt(code_hash, payload, seed)
            
            try:
                data = self.api.query_contract(contract, envelope.to_bytes(), cancel=cancel)
            except ContractQueryError as e:
                raise ContractQueryError(
                    self._decrypt_error(e.raw_log, envelope.nonce, seed),
                    code=e.code
                ) from e
            
            try:
                ciphertext = base64.b64decode(data, validate=True)
            except (binascii.Error, TypeError) as e:
                raise ParseError(f"Query data is not base64: {e}", raw=data) from e
            
            plaintext = self.cipher.decrypt(ciphertext, envelope.nonce, seed)
            return self.cipher.decode_response(plaintext)
    
    def _decrypt_error(self, message: str, nonce: bytes, seed: str) -> str:
        try:
            return self.cipher.decrypt_error_message(message, nonce, seed)
        except (CryptoError, ValueError) as e:
            logger.debug("Could not decrypt contract error: %s", e)
            return message
    
    # =========================================================================
    # Background Execution
    # =========================================================================
    
    def submit(
        self,
        messages: Sequence[ContractCall],
        memo: str = "",
        timeout: Optional[float] = None
    ) -> PipelineHandle:
        """
        Run `execute` on a worker thread.
        
        Args:
            messages: Contract calls.
            memo: Transaction memo.
            timeout: Overall deadline in seconds for the whole operation.
        
        Returns:
            PipelineHandle; `result()` blocks, `cancel()` stops the worker
            at its next blocking step.
        """
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix="erth-pipeline"
            )
        operation_id = uuid.uuid4().hex[:12]
        token = CancelToken(timeout=timeout)
        future = self._executor.submit(self._run, operation_id, messages, memo, token)
        return PipelineHandle(operation_id=operation_id, future=future, cancel_token=token)
    
    def close(self) -> None:
        """Shut down the worker pool, waiting for running operations."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
    
    def __enter__(self) -> "PipelineCoordinator":
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
