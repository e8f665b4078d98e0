"""
ERTH SDK - Transaction Builder

Builds, signs and serializes Secret Network execute transactions.

Workflow:
1. Decode sender and contract addresses
2. Wrap each encrypted message as MsgExecuteContract inside an Any
3. Build the body (messages + memo) and auth info (signer + fee)
4. Sign the SignDoc through the wallet key provider
5. Assemble TxRaw: body bytes + auth info bytes + signature
"""

import hashlib
import logging
import re
from typing import TYPE_CHECKING, List, Optional, Sequence

from ..config import FeeConfig
from ..constants import (
    ADDRESS_PREFIX,
    MSG_EXECUTE_CONTRACT_TYPE_URL,
    SECP256K1_PUBKEY_TYPE_URL,
    SIGN_MODE_DIRECT,
)
from ..errors import ErthError, SignerFailure, UnsupportedFundsFormat, ValidationError
from ..models import Account, Coin, ExecuteMessage, SignDoc, SignedTx, UnsignedTx
from . import proto
from .address import AddressCodec

if TYPE_CHECKING:
    from ..providers import WalletKeyProvider

logger = logging.getLogger(__name__)

COIN_PATTERN = re.compile(r"^(\d+)([a-zA-Z][a-zA-Z0-9/:._-]{1,127})$")
SIGNATURE_SIZE = 64


class TransactionBuilder:
    """
    Builds signed transactions from encrypted execute messages.
    
    Gas and fee are flat configuration values, identical for single and
    multi-message transactions.
    """
    
    def __init__(self, fee: Optional[FeeConfig] = None, address_prefix: str = ADDRESS_PREFIX):
        """
        Initialize transaction builder.
        
        Args:
            fee: Fee configuration (gas limit, flat amount, optional granter).
            address_prefix: Bech32 prefix of sender and contract addresses.
        """
        self.fee = fee or FeeConfig()
        self.codec = AddressCodec(address_prefix)
    
    # =========================================================================
    # Funds
    # =========================================================================
    
    @staticmethod
    def parse_coins(funds) -> List[Coin]:
        """
        Parse attached funds.
        
        Accepts "1000uscrt", "1000uscrt,5ibc/ABC", a list of Coin, or a list
        of {"denom", "amount"} dicts. None or "" means no funds.
        
        Raises:
            UnsupportedFundsFormat: Malformed entry.
        """
        if funds is None or funds == "":
            return []
        
        if isinstance(funds, str):
            coins = []
            for part in funds.split(","):
                match = COIN_PATTERN.match(part.strip())
                if not match:
                    raise UnsupportedFundsFormat(funds)
                coins.append(Coin(denom=match.group(2), amount=match.group(1)))
            return coins
        
        if isinstance(funds, Coin):
            funds = [funds]
        if not isinstance(funds, (list, tuple)):
            raise UnsupportedFundsFormat(funds, "expected a coin string or a list of coins")
        
        coins = []
        for entry in funds:
            if isinstance(entry, Coin):
                coin = entry
            elif isinstance(entry, dict) and "denom" in entry and "amount" in entry:
                coin = Coin(denom=str(entry["denom"]), amount=str(entry["amount"]))
            else:
                raise UnsupportedFundsFormat(funds, f"unsupported entry {entry!r}")
            if not coin.amount.isdigit() or not coin.denom:
                raise UnsupportedFundsFormat(funds, f"invalid coin {coin}")
            coins.append(coin)
        return coins
    
    # =========================================================================
    # Body / Auth Info / SignDoc
    # =========================================================================
    
    def _execute_msg(self, message: ExecuteMessage):
        msg = proto.MsgExecuteContract(
            sender=self.codec.decode(message.sender),
            contract=self.codec.decode(message.contract),
            msg=message.encrypted_payload,
        )
        for coin in self.parse_coins(message.funds):
            msg.sent_funds.add(denom=coin.denom, amount=coin.amount)
        return msg
    
    def build_body(self, messages: Sequence[ExecuteMessage], memo: str = "") -> bytes:
        """
        Serialize the TxBody.
        
        Raises:
            InvalidAddress, UnsupportedFundsFormat: With `message_index` and
                `contract` attached to the error details.
        """
        body = proto.TxBody(memo=memo or "")
        for index, message in enumerate(messages):
            try:
                msg = self._execute_msg(message)
            except ErthError as e:
                raise e.with_context(message_index=index, contract=message.contract)
            body.messages.add(
                type_url=MSG_EXECUTE_CONTRACT_TYPE_URL,
                value=proto.serialize(msg)
            )
        return proto.serialize(body)
    
    def build_auth_info(self, public_key: bytes, sequence: int) -> bytes:
        """Serialize AuthInfo for a single SIGN_MODE_DIRECT signer."""
        auth_info = proto.AuthInfo()
        
        signer_info = auth_info.signer_infos.add()
        signer_info.public_key.type_url = SECP256K1_PUBKEY_TYPE_URL
        signer_info.public_key.value = proto.serialize(proto.PubKey(key=public_key))
        signer_info.mode_info.single.mode = SIGN_MODE_DIRECT
        signer_info.sequence = sequence
        
        auth_info.fee.amount.add(denom=self.fee.denom, amount=str(self.fee.amount))
        auth_info.fee.gas_limit = self.fee.gas_limit
        if self.fee.granter:
            auth_info.fee.granter = self.fee.granter
        
        return proto.serialize(auth_info)
    
    @staticmethod
    def build_sign_doc(unsigned: UnsignedTx, chain_id: str, account_number: int) -> SignDoc:
        return SignDoc(
            body_bytes=unsigned.body_bytes,
            auth_info_bytes=unsigned.auth_info_bytes,
            chain_id=chain_id,
            account_number=account_number
        )
    
    @staticmethod
    def serialize_sign_doc(sign_doc: SignDoc) -> bytes:
        """The exact bytes the signer hashes and signs."""
        return proto.serialize(proto.SignDoc(
            body_bytes=sign_doc.body_bytes,
            auth_info_bytes=sign_doc.auth_info_bytes,
            chain_id=sign_doc.chain_id,
            account_number=sign_doc.account_number
        ))
    
    @staticmethod
    def tx_hash(tx_bytes: bytes) -> str:
        """Transaction hash as reported by the chain (uppercase hex SHA-256)."""
        return hashlib.sha256(tx_bytes).hexdigest().upper()
    
    # =========================================================================
    # Build
    # =========================================================================
    
    def _sign(self, signer: "WalletKeyProvider", sign_doc_bytes: bytes) -> bytes:
        try:
            signature = signer.sign(sign_doc_bytes)
        except Exception as e:
            raise SignerFailure(f"Signer failed: {e}", {"signer": type(signer).__name__})
        
        if not isinstance(signature, (bytes, bytearray)) or len(signature) != SIGNATURE_SIZE:
            length = len(signature) if isinstance(signature, (bytes, bytearray)) else None
            raise SignerFailure(
                f"Signer returned an unusable signature (expected {SIGNATURE_SIZE} bytes)",
                {"length": length}
            )
        return bytes(signature)
    
    def build(
        self,
        messages: Sequence[ExecuteMessage],
        memo: str,
        account: Account,
        chain_id: str,
        signer: "WalletKeyProvider"
    ) -> SignedTx:
        """
        Build and sign a transaction.
        
        Args:
            messages: Encrypted execute messages, in transaction order.
            memo: Transaction memo.
            account: Fresh account number and sequence of the signer.
            chain_id: Chain id the SignDoc commits to.
            signer: Wallet key provider; its address must match every sender.
        
        Returns:
            SignedTx with the serialized TxRaw and its hash.
        
        Raises:
            ValidationError: No messages, or a sender differs from the signer.
            InvalidAddress: Undecodable sender or contract address.
            UnsupportedFundsFormat: Malformed funds.
            SignerFailure: Signer raised or returned a bad signature.
        """
        if not messages:
            raise ValidationError("Transaction needs at least one message")
        
        signer_address = signer.address
        for index, message in enumerate(messages):
            if message.sender != signer_address:
                raise ValidationError(
                    "Message sender does not match signer address",
                    {"message_index": index, "sender": message.sender, "signer": signer_address}
                )
        
        body_bytes = self.build_body(messages, memo)
        auth_info_bytes = self.build_auth_info(signer.public_key, account.sequence)
        unsigned = UnsignedTx(body_bytes=body_bytes, auth_info_bytes=auth_info_bytes)
        
        sign_doc = self.build_sign_doc(unsigned, chain_id, account.account_number)
        signature = self._sign(signer, self.serialize_sign_doc(sign_doc))
        
        tx_bytes = proto.serialize(proto.TxRaw(
            body_bytes=body_bytes,
            auth_info_bytes=auth_info_bytes,
            signatures=[signature]
        ))
        tx_hash = self.tx_hash(tx_bytes)
        
        logger.debug("Built tx %s with %d message(s), %d bytes", tx_hash, len(messages), len(tx_bytes))
        return SignedTx(
            tx_bytes=tx_bytes,
            body_bytes=body_bytes,
            auth_info_bytes=auth_info_bytes,
            signature=signature,
            tx_hash=tx_hash
        )
