"""
ERTH SDK - Message Cipher

Contract message encryption for Secret Network compute calls.

Each wallet gets a deterministic x25519 keypair; the symmetric key for a
message is HKDF(shared_secret || nonce), so the random 32-byte nonce is the
only per-message source of key freshness and must never be reused.
"""

import base64
import binascii
import hashlib
import json
import logging
import os
import re
from typing import Optional, Tuple, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey, X25519PublicKey
from cryptography.hazmat.primitives.ciphers.aead import AESSIV
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from ..constants import (
    MAINNET_CONSENSUS_IO_PUBKEY,
    HKDF_SALT,
    ENCRYPTION_SEED_PREFIX,
    NONCE_SIZE,
    X25519_KEY_SIZE,
)
from ..errors import CryptoError, ParseError
from ..models import ContractMessage, EncryptedEnvelope

logger = logging.getLogger(__name__)

# Contract errors come back as "... encrypted: <base64>: ..."
ENCRYPTED_ERROR_PATTERN = re.compile(r"encrypted: ([A-Za-z0-9+/]+={0,2})")


def normalize_code_hash(code_hash: Optional[str]) -> str:
    """Lowercase hex without a 0x prefix; empty string when absent."""
    if not code_hash:
        return ""
    code_hash = code_hash.strip()
    if code_hash[:2].lower() == "0x":
        code_hash = code_hash[2:]
    return code_hash.lower()


class MessageCipher:
    """
    Encrypts contract messages and decrypts the paired responses.
    
    The consensus IO public key is injected so a key rotation is a
    configuration change, not a code change.
    
    Example:
        cipher = MessageCipher()
        envelope = cipher.encrypt(code_hash, '{"balance":{}}', seed)
        ...
        plaintext = cipher.decrypt(ciphertext, envelope.nonce, seed)
    """
    
    def __init__(self, consensus_io_pubkey: Union[str, bytes] = MAINNET_CONSENSUS_IO_PUBKEY):
        if isinstance(consensus_io_pubkey, str):
            try:
                consensus_io_pubkey = base64.b64decode(consensus_io_pubkey, validate=True)
            except binascii.Error as e:
                raise CryptoError(f"Consensus IO public key is not valid base64: {e}")
        if len(consensus_io_pubkey) != X25519_KEY_SIZE:
            raise CryptoError(
                f"Consensus IO public key must be {X25519_KEY_SIZE} bytes, "
                f"got {len(consensus_io_pubkey)}"
            )
        self._consensus_io_pubkey = X25519PublicKey.from_public_bytes(consensus_io_pubkey)
    
    # =========================================================================
    # Key Derivation
    # =========================================================================
    
    @staticmethod
    def derive_keypair(wallet_seed: str) -> Tuple[bytes, bytes]:
        """
        Derive the wallet's x25519 keypair.
        
        Args:
            wallet_seed: Wallet secret (the mnemonic for mnemonic wallets).
        
        Returns:
            (private_key, public_key), 32 bytes each.
        """
        digest = bytearray(hashlib.sha256(ENCRYPTION_SEED_PREFIX + wallet_seed.encode("utf-8")).digest())
        digest[0] &= 248
        digest[31] &= 127
        digest[31] |= 64
        private_key = bytes(digest)
        
        public_key = X25519PrivateKey.from_private_bytes(private_key).public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw
        )
        return private_key, public_key
    
    def _derive_key(self, private_key: bytes, nonce: bytes) -> bytes:
        if len(nonce) != NONCE_SIZE:
            raise CryptoError(f"Nonce must be {NONCE_SIZE} bytes, got {len(nonce)}")
        
        shared_secret = X25519PrivateKey.from_private_bytes(private_key).exchange(self._consensus_io_pubkey)
        return HKDF(
            algorithm=hashes.SHA256(),
            length=32,
            salt=HKDF_SALT,
            info=b""
        ).derive(shared_secret + nonce)
    
    # =========================================================================
    # Encrypt / Decrypt
    # =========================================================================
    
    def encrypt(
        self,
        code_hash: Optional[str],
        plaintext_json: str,
        wallet_seed: str,
        nonce: Optional[bytes] = None
    ) -> EncryptedEnvelope:
        """
        Encrypt a contract message.
        
        Args:
            code_hash: Contract code hash, prepended to the message when present.
            plaintext_json: Serialized JSON message.
            wallet_seed: Wallet secret the x25519 keypair is derived from.
            nonce: Fixed 32-byte nonce (tests only). Random when omitted.
        
        Returns:
            EncryptedEnvelope; `to_bytes()` is the on-chain `msg` blob.
        
        Raises:
            CryptoError: Bad nonce length or cipher failure.
        """
        if nonce is None:
            nonce = os.urandom(NONCE_SIZE)
        
        private_key, public_key = self.derive_keypair(wallet_seed)
        key = self._derive_key(private_key, nonce)
        message = ContractMessage(plaintext_json=plaintext_json, code_hash=normalize_code_hash(code_hash) or None)
        plaintext = message.plaintext
        
        try:
            ciphertext = AESSIV(key).encrypt(plaintext, [b""])
        except ValueError as e:
            raise CryptoError(f"AES-SIV encryption failed: {e}")
        
        logger.debug("Encrypted %d byte message", len(plaintext))
        return EncryptedEnvelope(nonce=nonce, public_key=public_key, ciphertext=ciphertext)
    
    def decrypt(self, ciphertext: bytes, nonce: bytes, wallet_seed: str) -> bytes:
        """
        Decrypt a response encrypted under the key of the paired request.
        
        Args:
            ciphertext: SIV tag followed by the encrypted bytes.
            nonce: The nonce the request was encrypted with.
            wallet_seed: Wallet secret the request was encrypted with.
        
        Returns:
            Plaintext bytes; b"" for an empty ciphertext.
        
        Raises:
            CryptoError: Authentication failed.
        """
        if not ciphertext:
            return b""
        
        private_key, _ = self.derive_keypair(wallet_seed)
        key = self._derive_key(private_key, nonce)
        
        try:
            return AESSIV(key).decrypt(ciphertext, [b""])
        except InvalidTag:
            raise CryptoError("AES-SIV authentication failed", {"ciphertext_length": len(ciphertext)})
    
    # =========================================================================
    # Response Decoding
    # =========================================================================
    
    @staticmethod
    def _parse_json(text: str) -> Optional[dict]:
        text = text.strip()
        if not text:
            return {}
        value = json.loads(text)
        if isinstance(value, list):
            return {"data": value}
        if isinstance(value, dict):
            return value
        return None
    
    @classmethod
    def decode_response(cls, plaintext: bytes) -> dict:
        """
        Turn decrypted response bytes into a JSON object.
        
        Tries direct JSON, then base64-wrapped JSON. Empty input yields {},
        arrays are wrapped as {"data": [...]}.
        
        Raises:
            ParseError: Neither decoding produced a JSON object.
        """
        try:
            text = plaintext.decode("utf-8")
        except UnicodeDecodeError:
            raise ParseError("Response is not valid UTF-8", raw=plaintext)
        
        try:
            result = cls._parse_json(text)
            if result is not None:
                return result
        except json.JSONDecodeError:
            pass
        
        try:
            unwrapped = base64.b64decode(text.strip(), validate=True).decode("utf-8")
            result = cls._parse_json(unwrapped)
        except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ParseError(f"Failed to parse decrypted response as JSON: {e}", raw=plaintext)
        
        if result is None:
            raise ParseError("Decrypted response is not a JSON object or array", raw=plaintext)
        return result
    
    def decrypt_error_message(self, message: str, nonce: bytes, wallet_seed: str) -> str:
        """
        Replace the encrypted segment of a contract error with its plaintext.
        
        Messages without an `encrypted: <base64>` segment are returned as is.
        """
        match = ENCRYPTED_ERROR_PATTERN.search(message)
        if not match:
            return message
        
        plaintext = self.decrypt(base64.b64decode(match.group(1)), nonce, wallet_seed)
        return message[:match.start()] + plaintext.decode("utf-8", errors="replace") + message[match.end():]
