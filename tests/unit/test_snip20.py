"""
Unit tests for SNIP-20 message builders.
"""

import base64
import json

import pytest

from erth_sdk.errors import ValidationError
from erth_sdk.protocols import SNIP20Protocol


class TestExecuteMessages:

    @pytest.mark.unit
    def test_send_with_hook(self):
        msg = SNIP20Protocol.send(
            "secret1recipient",
            1000,
            msg={"swap": {"min_out": "5"}},
            recipient_code_hash="cd" * 32,
            memo="swap"
        )

        body = msg["send"]
        assert body["recipient"] == "secret1recipient"
        assert body["amount"] == "1000"
        assert body["recipient_code_hash"] == "cd" * 32
        assert body["memo"] == "swap"
        assert json.loads(base64.b64decode(body["msg"])) == {"swap": {"min_out": "5"}}

    @pytest.mark.unit
    def test_send_minimal(self):
        assert SNIP20Protocol.send("secret1r", "42") == {
            "send": {"recipient": "secret1r", "amount": "42"}
        }

    @pytest.mark.unit
    def test_hook_string_passes_through(self):
        assert base64.b64decode(SNIP20Protocol.encode_hook('{"a":1}')) == b'{"a":1}'

    @pytest.mark.unit
    def test_transfer(self):
        assert SNIP20Protocol.transfer("secret1r", 7, memo="rent") == {
            "transfer": {"recipient": "secret1r", "amount": "7", "memo": "rent"}
        }

    @pytest.mark.unit
    @pytest.mark.parametrize("amount", [-1, "1.5", "ten", ""])
    def test_bad_amount(self, amount):
        with pytest.raises(ValidationError):
            SNIP20Protocol.transfer("secret1r", amount)

    @pytest.mark.unit
    def test_set_viewing_key(self):
        assert SNIP20Protocol.set_viewing_key("hunter2") == {"set_viewing_key": {"key": "hunter2"}}
        with pytest.raises(ValidationError):
            SNIP20Protocol.set_viewing_key("")


class TestQueries:

    @pytest.mark.unit
    def test_balance(self):
        assert SNIP20Protocol.balance("secret1me", "vk") == {
            "balance": {"address": "secret1me", "key": "vk"}
        }

    @pytest.mark.unit
    @pytest.mark.parametrize("address,key", [("", "vk"), ("secret1me", "")])
    def test_balance_requires_credentials(self, address, key):
        with pytest.raises(ValidationError):
            SNIP20Protocol.balance(address, key)

    @pytest.mark.unit
    def test_token_info(self):
        assert SNIP20Protocol.token_info() == {"token_info": {}}
