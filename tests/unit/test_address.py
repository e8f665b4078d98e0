"""
Unit tests for AddressCodec (bech32 addresses).
"""

import pytest

from erth_sdk.core.address import AddressCodec, CHARSET, _verify_checksum
from erth_sdk.errors import InvalidAddress, CryptoError


def _data(chars):
    return [CHARSET.index(c) for c in chars]


class TestBech32Checksum:
    """BIP-173 reference vectors for the checksum polymod."""

    @pytest.mark.unit
    @pytest.mark.parametrize("hrp,data", [
        ("a", "2uel5l"),
        ("abcdef", "qpzry9x8gf2tvdw0s3jn54khce6mua7lmqqqxw"),
        ("bc", "qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t4"),
    ])
    def test_valid_vectors(self, hrp, data):
        """Test that published valid strings verify."""
        assert _verify_checksum(hrp, _data(data)) is True

    @pytest.mark.unit
    def test_corrupted_vector(self):
        """Test that a single changed character breaks the checksum."""
        assert _verify_checksum("bc", _data("qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t5")) is False

    @pytest.mark.unit
    def test_convert_bits_matches_reference(self):
        """Test 8->5 regrouping against the P2WPKH reference program."""
        program = bytes.fromhex("751e76e8199196d454941c45d1b3a323f1433bd6")
        assert AddressCodec.convert_bits(program, 8, 5, pad=True) == _data("w508d6qejxtdg4y5r3zarvary0c5xw7k")

    @pytest.mark.unit
    def test_convert_bits_strict_rejects_padding(self):
        """Test that non-zero leftover bits are rejected in strict mode."""
        assert AddressCodec.convert_bits([31, 31], 5, 8, pad=False) is None

    @pytest.mark.unit
    def test_convert_bits_rejects_out_of_range(self):
        assert AddressCodec.convert_bits([32], 5, 8, pad=False) is None


class TestAddressRoundTrip:
    """Encode/decode consistency."""

    @pytest.mark.unit
    @pytest.mark.parametrize("raw", [
        bytes(20),
        bytes(range(20)),
        b"\xff" * 20,
        bytes.fromhex("751e76e8199196d454941c45d1b3a323f1433bd6"),
    ])
    def test_decode_encode(self, codec, raw):
        """Test that decode(encode(b)) == b."""
        address = codec.encode(raw)
        assert address.startswith("secret1")
        assert codec.decode(address) == raw

    @pytest.mark.unit
    def test_zero_address_shape(self, codec):
        """Test the data part length (32 symbols + 6 checksum)."""
        address = codec.encode(bytes(20))
        assert address.startswith("secret1" + "q" * 32)
        assert len(address) == len("secret1") + 32 + 6

    @pytest.mark.unit
    def test_uppercase_accepted(self, codec):
        raw = bytes(range(20))
        assert codec.decode(codec.encode(raw).upper()) == raw

    @pytest.mark.unit
    def test_from_public_key(self, codec, test_public_key, test_account_id):
        """Test address derivation from a compressed public key."""
        assert codec.decode(codec.from_public_key(test_public_key)) == test_account_id

    @pytest.mark.unit
    def test_custom_prefix(self):
        codec = AddressCodec(prefix="cosmos")
        address = codec.encode(bytes(20))
        assert address.startswith("cosmos1")
        assert codec.decode(address) == bytes(20)


class TestAddressRejection:
    """Malformed addresses raise InvalidAddress."""

    @pytest.mark.unit
    def test_wrong_prefix(self, codec):
        address = AddressCodec(prefix="cosmos").encode(bytes(20))
        with pytest.raises(InvalidAddress, match="prefix"):
            codec.decode(address)

    @pytest.mark.unit
    def test_invalid_character(self, codec):
        """Test that 'b' (not in the bech32 alphabet) is rejected."""
        address = codec.encode(bytes(20))
        bad = address[:10] + "b" + address[11:]
        with pytest.raises(InvalidAddress, match="character"):
            codec.decode(bad)

    @pytest.mark.unit
    def test_bad_checksum(self, codec):
        address = codec.encode(bytes(range(20)))
        last = "q" if address[-1] != "q" else "p"
        with pytest.raises(InvalidAddress, match="checksum"):
            codec.decode(address[:-1] + last)

    @pytest.mark.unit
    def test_bad_checksum_accepted_without_verification(self, codec):
        """Test that diagnostics mode skips the checksum only."""
        raw = bytes(range(20))
        address = codec.encode(raw)
        last = "q" if address[-1] != "q" else "p"
        assert codec.decode(address[:-1] + last, verify_checksum=False) == raw

    @pytest.mark.unit
    def test_wrong_length(self):
        """Test that a valid bech32 string with a 32-byte payload is rejected."""
        codec = AddressCodec()
        data = AddressCodec.convert_bits(bytes(32), 8, 5, pad=True)
        from erth_sdk.core.address import _create_checksum
        address = "secret1" + "".join(CHARSET[d] for d in data + _create_checksum("secret", data))
        with pytest.raises(InvalidAddress, match="20 bytes"):
            codec.decode(address)

    @pytest.mark.unit
    def test_mixed_case(self, codec):
        address = codec.encode(bytes(range(20)))
        with pytest.raises(InvalidAddress, match="mixed case"):
            codec.decode(address[:8] + address[8:].upper())

    @pytest.mark.unit
    @pytest.mark.parametrize("address", ["", "secret", "secret1", "secret1qqqq"])
    def test_truncated(self, codec, address):
        with pytest.raises(InvalidAddress):
            codec.decode(address)

    @pytest.mark.unit
    def test_invalid_address_is_crypto_error(self, codec):
        """Test the error taxonomy."""
        with pytest.raises(CryptoError):
            codec.decode("secret1invalid")

    @pytest.mark.unit
    def test_is_valid(self, codec, contract_address):
        assert codec.is_valid(contract_address) is True
        assert codec.is_valid(contract_address[:-1]) is False

    @pytest.mark.unit
    def test_encode_wrong_length(self, codec):
        with pytest.raises(InvalidAddress):
            codec.encode(bytes(19))
