"""
ERTH SDK - Address Codec

Bech32 encoding and decoding of account addresses (BIP-173, not bech32m).
"""

from typing import List, Optional

from embit.hashes import hash160

from ..constants import ADDRESS_PREFIX, ADDRESS_LENGTH
from ..errors import InvalidAddress


CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
GENERATORS = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)
CHECKSUM_LENGTH = 6
MAX_ADDRESS_LENGTH = 90


def _polymod(values: List[int]) -> int:
    chk = 1
    for value in values:
        top = chk >> 25
        chk = (chk & 0x1FFFFFF) << 5 ^ value
        for i, gen in enumerate(GENERATORS):
            if (top >> i) & 1:
                chk ^= gen
    return chk


def _hrp_expand(hrp: str) -> List[int]:
    return [ord(c) >> 5 for c in hrp] + [0] + [ord(c) & 31 for c in hrp]


def _create_checksum(hrp: str, data: List[int]) -> List[int]:
    polymod = _polymod(_hrp_expand(hrp) + data + [0] * CHECKSUM_LENGTH) ^ 1
    return [(polymod >> 5 * (5 - i)) & 31 for i in range(CHECKSUM_LENGTH)]


def _verify_checksum(hrp: str, data: List[int]) -> bool:
    return _polymod(_hrp_expand(hrp) + data) == 1


class AddressCodec:
    """
    Converts between bech32 address strings and raw 20-byte account ids.
    
    Example:
        codec = AddressCodec()
        raw = codec.decode("secret1...")
        assert codec.encode(raw) == "secret1..."
    """
    
    def __init__(self, prefix: str = ADDRESS_PREFIX):
        self.prefix = prefix
    
    # =========================================================================
    # Bit Conversion
    # =========================================================================
    
    @staticmethod
    def convert_bits(data, from_bits: int, to_bits: int, pad: bool) -> Optional[List[int]]:
        """
        Regroup a sequence of `from_bits`-wide integers into `to_bits`-wide ones.
        
        Returns:
            The regrouped values, or None if the input has out-of-range
            values or (when pad is False) non-zero leftover bits.
        """
        acc = 0
        bits = 0
        result = []
        maxv = (1 << to_bits) - 1
        max_acc = (1 << (from_bits + to_bits - 1)) - 1
        for value in data:
            if value < 0 or value >> from_bits:
                return None
            acc = ((acc << from_bits) | value) & max_acc
            bits += from_bits
            while bits >= to_bits:
                bits -= to_bits
                result.append((acc >> bits) & maxv)
        if pad:
            if bits:
                result.append((acc << (to_bits - bits)) & maxv)
        elif bits >= from_bits or ((acc << (to_bits - bits)) & maxv):
            return None
        return result
    
    # =========================================================================
    # Decode / Encode
    # =========================================================================
    
    def decode(self, address: str, verify_checksum: bool = True) -> bytes:
        """
        Decode a bech32 address to its raw account id.
        
        Args:
            address: Address string, e.g. "secret1...".
            verify_checksum: Reject addresses whose checksum does not verify.
        
        Returns:
            20 raw bytes.
        
        Raises:
            InvalidAddress: Wrong prefix, bad character, bad checksum or length.
        """
        if not isinstance(address, str) or not address:
            raise InvalidAddress(str(address), "empty address")
        if len(address) > MAX_ADDRESS_LENGTH:
            raise InvalidAddress(address, "too long")
        if address.lower() != address and address.upper() != address:
            raise InvalidAddress(address, "mixed case")
        
        normalized = address.lower()
        sep = normalized.rfind("1")
        if sep < 1 or sep + CHECKSUM_LENGTH + 1 > len(normalized):
            raise InvalidAddress(address, "missing separator or checksum")
        
        hrp = normalized[:sep]
        if hrp != self.prefix:
            raise InvalidAddress(address, f"expected prefix {self.prefix!r}, got {hrp!r}")
        
        data = []
        for char in normalized[sep + 1:]:
            index = CHARSET.find(char)
            if index == -1:
                raise InvalidAddress(address, f"invalid character {char!r}")
            data.append(index)
        
        if verify_checksum and not _verify_checksum(hrp, data):
            raise InvalidAddress(address, "checksum mismatch")
        
        decoded = self.convert_bits(data[:-CHECKSUM_LENGTH], 5, 8, pad=False)
        if decoded is None:
            raise InvalidAddress(address, "invalid padding")
        if len(decoded) != ADDRESS_LENGTH:
            raise InvalidAddress(address, f"expected {ADDRESS_LENGTH} bytes, got {len(decoded)}")
        return bytes(decoded)
    
    def encode(self, raw: bytes) -> str:
        """Encode a raw account id as a bech32 address."""
        if len(raw) != ADDRESS_LENGTH:
            raise InvalidAddress(raw.hex(), f"expected {ADDRESS_LENGTH} bytes, got {len(raw)}")
        data = self.convert_bits(raw, 8, 5, pad=True)
        combined = data + _create_checksum(self.prefix, data)
        return self.prefix + "1" + "".join(CHARSET[d] for d in combined)
    
    def from_public_key(self, public_key: bytes) -> str:
        """Derive the account address of a 33-byte compressed secp256k1 key."""
        if len(public_key) != 33:
            raise InvalidAddress(public_key.hex(), "public key must be 33 bytes compressed")
        return self.encode(hash160(public_key))
    
    def is_valid(self, address: str) -> bool:
        try:
            self.decode(address)
            return True
        except InvalidAddress:
            return False
