"""
ERTH SDK - Data Models

Core data structures used throughout the SDK.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
from enum import Enum

from .constants import NONCE_SIZE, X25519_KEY_SIZE, ENVELOPE_HEADER_SIZE


class TxStatus(Enum):
    """Lifecycle of a submitted transaction."""
    SUBMITTED = "submitted"                  # Accepted into the mempool
    CONFIRMED = "confirmed"                  # Execution data indexed
    REJECTED = "rejected"                    # code != 0
    UNCONFIRMED_TIMEOUT = "unconfirmed"      # Poll budget exhausted


@dataclass(frozen=True)
class Coin:
    """Denomination + integer amount (kept as a string, as on the wire)."""
    denom: str
    amount: str
    
    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"
    
    def to_dict(self) -> dict:
        return {"denom": self.denom, "amount": self.amount}


@dataclass(frozen=True)
class ContractMessage:
    """Plaintext contract message, constructed per call."""
    plaintext_json: str
    code_hash: Optional[str] = None
    
    @property
    def plaintext(self) -> bytes:
        """Bytes that get encrypted: code hash (if any) followed by the JSON."""
        return ((self.code_hash or "") + self.plaintext_json).encode("utf-8")


@dataclass(frozen=True)
class EncryptedEnvelope:
    """
    Encrypted contract message.
    
    Layout: nonce(32) || sender_x25519_pubkey(32) || aes_siv_ciphertext.
    """
    nonce: bytes
    public_key: bytes
    ciphertext: bytes
    
    def __post_init__(self):
        if len(self.nonce) != NONCE_SIZE:
            raise ValueError(f"Nonce must be {NONCE_SIZE} bytes, got {len(self.nonce)}")
        if len(self.public_key) != X25519_KEY_SIZE:
            raise ValueError(f"Public key must be {X25519_KEY_SIZE} bytes, got {len(self.public_key)}")
    
    def to_bytes(self) -> bytes:
        return self.nonce + self.public_key + self.ciphertext
    
    @classmethod
    def from_bytes(cls, data: bytes) -> "EncryptedEnvelope":
        if len(data) < ENVELOPE_HEADER_SIZE:
            raise ValueError(f"Envelope must be at least {ENVELOPE_HEADER_SIZE} bytes, got {len(data)}")
        return cls(
            nonce=data[:NONCE_SIZE],
            public_key=data[NONCE_SIZE:ENVELOPE_HEADER_SIZE],
            ciphertext=data[ENVELOPE_HEADER_SIZE:]
        )


@dataclass(frozen=True)
class Account:
    """On-chain account metadata. Fetched fresh for every transaction."""
    address: str
    account_number: int
    sequence: int


@dataclass
class ContractCall:
    """One caller-level contract call, before encryption."""
    contract: str
    msg: Any  # JSON string or JSON-serialisable object
    code_hash: Optional[str] = None
    funds: Any = None  # "1000uscrt", list of Coin, or list of dicts


@dataclass(frozen=True)
class ExecuteMessage:
    """An encrypted contract call, ready for the transaction builder."""
    sender: str
    contract: str
    encrypted_payload: bytes
    code_hash: Optional[str] = None
    funds: Any = None


@dataclass(frozen=True)
class UnsignedTx:
    """Serialized body and auth info; the signature covers these exact bytes."""
    body_bytes: bytes
    auth_info_bytes: bytes


@dataclass(frozen=True)
class SignDoc:
    """The document whose serialization gets signed."""
    body_bytes: bytes
    auth_info_bytes: bytes
    chain_id: str
    account_number: int


@dataclass(frozen=True)
class SignedTx:
    """Serialized TxRaw ready for broadcast."""
    tx_bytes: bytes
    body_bytes: bytes
    auth_info_bytes: bytes
    signature: bytes
    tx_hash: str


@dataclass
class BroadcastResult:
    """Result of a broadcast or a transaction lookup."""
    code: int
    tx_hash: str
    raw_log: str = ""
    codespace: str = ""
    height: int = 0
    gas_used: int = 0
    gas_wanted: int = 0
    data: str = ""
    logs: List[Dict[str, Any]] = field(default_factory=list)
    events: List[Dict[str, Any]] = field(default_factory=list)
    raw: Dict[str, Any] = field(default_factory=dict)
    
    @property
    def success(self) -> bool:
        return self.code == 0
    
    @property
    def has_execution_data(self) -> bool:
        """True once the tx has been executed and indexed, not merely found."""
        return bool(self.raw_log or self.logs or self.data or self.events)
    
    @classmethod
    def from_response(cls, data: dict) -> "BroadcastResult":
        """Create from an LCD `{"tx_response": {...}}` body."""
        tx = data.get("tx_response") or {}
        return cls(
            code=int(tx.get("code", 0) or 0),
            tx_hash=tx.get("txhash", ""),
            raw_log=tx.get("raw_log", "") or "",
            codespace=tx.get("codespace", "") or "",
            height=int(tx.get("height", 0) or 0),
            gas_used=int(tx.get("gas_used", 0) or 0),
            gas_wanted=int(tx.get("gas_wanted", 0) or 0),
            data=tx.get("data", "") or "",
            logs=tx.get("logs") or [],
            events=tx.get("events") or [],
            raw=data
        )


@dataclass
class TransactionRecord:
    """Lifecycle record of one submitted transaction (not persisted)."""
    tx_hash: str
    status: TxStatus = TxStatus.SUBMITTED
    broadcast: Optional[BroadcastResult] = None
    confirmed: Optional[BroadcastResult] = None
    
    @property
    def result(self) -> Optional[BroadcastResult]:
        """Best available detail: confirmation if present, else the broadcast."""
        return self.confirmed or self.broadcast


@dataclass
class ExecutionResult:
    """Outcome of a completed execute pipeline."""
    sender: str
    record: TransactionRecord
    nonces: List[bytes] = field(default_factory=list)
    
    @property
    def tx_hash(self) -> str:
        return self.record.tx_hash
    
    @property
    def status(self) -> TxStatus:
        return self.record.status
    
    @property
    def result(self) -> Optional[BroadcastResult]:
        return self.record.result
