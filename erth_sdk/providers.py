"""
ERTH SDK - Key Providers

Abstract interface for wallet key material with multiple backend
implementations. The pipeline only ever sees the public key, the address,
the encryption seed and a `sign` capability.
"""

import hashlib
import os
from abc import ABC, abstractmethod
from typing import Optional

from embit import bip32, bip39, ec
from embit.util import secp256k1

from .constants import ADDRESS_PREFIX, DERIVATION_PATH
from .core.address import AddressCodec


class WalletKeyProvider(ABC):
    """
    Abstract base class for wallet key providers.
    
    Implementations keep the private key to themselves: the SDK core asks
    for signatures, never for key bytes.
    
    Example implementations:
    - MemoryKeyProvider: raw private key already in memory (tests, tools)
    - MnemonicKeyProvider: BIP-39 mnemonic, BIP-44 path for coin type 529
    - EnvKeyProvider: mnemonic injected through an environment variable
    """
    
    address_prefix: str = ADDRESS_PREFIX
    
    @property
    @abstractmethod
    def public_key(self) -> bytes:
        """33-byte compressed secp256k1 public key."""
        pass
    
    @property
    @abstractmethod
    def encryption_seed(self) -> str:
        """Secret the contract-message x25519 keypair is derived from."""
        pass
    
    @abstractmethod
    def sign(self, sign_doc_bytes: bytes) -> bytes:
        """
        Sign a serialized SignDoc.
        
        Args:
            sign_doc_bytes: Exact SignDoc bytes; hashed with SHA-256 here.
        
        Returns:
            64-byte compact (r||s) low-S ECDSA signature.
        """
        pass
    
    @property
    def address(self) -> str:
        """Bech32 account address derived from the public key."""
        return AddressCodec(self.address_prefix).from_public_key(self.public_key)
    
    def verify(self, sign_doc_bytes: bytes, signature: bytes) -> bool:
        """Check a compact signature against this provider's public key."""
        try:
            pubkey = ec.PublicKey.parse(self.public_key)
            sig = ec.Signature(secp256k1.ecdsa_signature_parse_compact(signature))
            return pubkey.verify(sig, hashlib.sha256(sign_doc_bytes).digest())
        except Exception:
            return False
    
    def __repr__(self) -> str:
        """Safe representation that doesn't leak key material."""
        return f"{type(self).__name__}(address={self.address})"
    
    def __getstate__(self):
        raise TypeError(f"{type(self).__name__} cannot be pickled (contains secret material)")
    
    def __reduce__(self):
        raise TypeError(f"{type(self).__name__} cannot be pickled (contains secret material)")


class _PrivateKeySigner(WalletKeyProvider):
    """Shared signing logic for providers backed by an embit PrivateKey."""
    
    def __init__(self, private_key: ec.PrivateKey, encryption_seed: str, address_prefix: str):
        self._private_key = private_key
        self._public_key = private_key.get_public_key().sec()
        self._encryption_seed = encryption_seed
        self.address_prefix = address_prefix
    
    @property
    def public_key(self) -> bytes:
        return self._public_key
    
    @property
    def encryption_seed(self) -> str:
        return self._encryption_seed
    
    def sign(self, sign_doc_bytes: bytes) -> bytes:
        digest = hashlib.sha256(sign_doc_bytes).digest()
        signature = self._private_key.sign(digest)
        sig = secp256k1.ecdsa_signature_parse_der(signature.serialize())
        return secp256k1.ecdsa_signature_serialize_compact(secp256k1.ecdsa_signature_normalize(sig))


class MemoryKeyProvider(_PrivateKeySigner):
    """
    Key provider with a raw private key in memory.
    
    WARNING: Only use for testing or when the key is already in memory.
    
    Example:
        provider = MemoryKeyProvider("abc123...", encryption_seed="my seed")
    """
    
    def __init__(
        self,
        private_key_hex: str,
        encryption_seed: Optional[str] = None,
        address_prefix: str = ADDRESS_PREFIX
    ):
        """
        Args:
            private_key_hex: 64-character hex private key.
            encryption_seed: Encryption seed; defaults to the private key hex.
            address_prefix: Bech32 prefix for the derived address.
        """
        if len(private_key_hex) != 64:
            raise ValueError("Private key must be 64 hex characters (32 bytes)")
        
        super().__init__(
            ec.PrivateKey(bytes.fromhex(private_key_hex)),
            encryption_seed or private_key_hex,
            address_prefix
        )


class MnemonicKeyProvider(_PrivateKeySigner):
    """
    Key provider for a BIP-39 mnemonic wallet.
    
    The signing key sits at m/44'/529'/0'/0/{account_index}; the mnemonic
    itself is the encryption seed, matching the reference wallets.
    """
    
    def __init__(
        self,
        mnemonic: str,
        account_index: int = 0,
        address_prefix: str = ADDRESS_PREFIX
    ):
        mnemonic = " ".join(mnemonic.split())
        if not bip39.mnemonic_is_valid(mnemonic):
            raise ValueError("Invalid BIP-39 mnemonic")
        
        root = bip32.HDKey.from_seed(bip39.mnemonic_to_seed(mnemonic))
        child = root.derive(DERIVATION_PATH.format(index=account_index))
        super().__init__(child.key, mnemonic, address_prefix)


class EnvKeyProvider(MnemonicKeyProvider):
    """
    Mnemonic provider that reads the phrase from an environment variable.
    
    Example:
        export ERTH_MNEMONIC="word1 word2 ..."
        
        provider = EnvKeyProvider()
    """
    
    def __init__(
        self,
        env_var: str = "ERTH_MNEMONIC",
        account_index: int = 0,
        address_prefix: str = ADDRESS_PREFIX
    ):
        mnemonic = os.environ.get(env_var)
        if not mnemonic:
            raise ValueError(
                f"Environment variable {env_var} not set. "
                f"Set it with: export {env_var}=\"<your mnemonic>\""
            )
        super().__init__(mnemonic, account_index, address_prefix)
