"""
ERTH SDK - SNIP-20 Protocol

Message builders for SNIP-20 token contracts. Every builder returns a plain
dict that can be passed as `ContractCall.msg` or as a query.
"""

import base64
import json
from typing import Any, Optional, Union

from ..errors import ValidationError


def _amount(amount: Union[int, str]) -> str:
    """Uint128 amounts travel as decimal strings."""
    value = str(amount)
    if not value.isdigit():
        raise ValidationError(f"Token amount must be a non-negative integer, got {amount!r}")
    return value


class SNIP20Protocol:
    """
    SNIP-20 message formats.
    
    Execute:
        {"send": {"recipient", "recipient_code_hash"?, "amount", "msg"?, "memo"?}}
        {"transfer": {"recipient", "amount", "memo"?}}
        {"set_viewing_key": {"key"}}
    
    Query:
        {"balance": {"address", "key"}}
        {"token_info": {}}
    """
    
    @staticmethod
    def encode_hook(msg: Any) -> str:
        """Base64 of the JSON hook message forwarded to the recipient contract."""
        if not isinstance(msg, str):
            msg = json.dumps(msg, separators=(",", ":"))
        return base64.b64encode(msg.encode("utf-8")).decode("ascii")
    
    # =========================================================================
    # Execute Messages
    # =========================================================================
    
    @classmethod
    def send(
        cls,
        recipient: str,
        amount: Union[int, str],
        msg: Any = None,
        recipient_code_hash: Optional[str] = None,
        memo: Optional[str] = None
    ) -> dict:
        """
        Build a `send` message (transfer plus receiver callback).
        
        Args:
            recipient: Receiving address or contract.
            amount: Token amount in the smallest unit.
            msg: Hook message for the recipient contract (encoded as base64 JSON).
            recipient_code_hash: Code hash of a recipient contract.
            memo: Optional memo.
        """
        body = {"recipient": recipient, "amount": _amount(amount)}
        if recipient_code_hash:
            body["recipient_code_hash"] = recipient_code_hash
        if msg is not None:
            body["msg"] = cls.encode_hook(msg)
        if memo:
            body["memo"] = memo
        return {"send": body}
    
    @classmethod
    def transfer(cls, recipient: str, amount: Union[int, str], memo: Optional[str] = None) -> dict:
        body = {"recipient": recipient, "amount": _amount(amount)}
        if memo:
            body["memo"] = memo
        return {"transfer": body}
    
    @classmethod
    def set_viewing_key(cls, key: str) -> dict:
        if not key:
            raise ValidationError("Viewing key must not be empty")
        return {"set_viewing_key": {"key": key}}
    
    # =========================================================================
    # Queries
    # =========================================================================
    
    @classmethod
    def balance(cls, address: str, key: str) -> dict:
        """Balance query authenticated by a viewing key."""
        if not address or not key:
            raise ValidationError("Balance queries require an address and a viewing key")
        return {"balance": {"address": address, "key": key}}
    
    @classmethod
    def token_info(cls) -> dict:
        return {"token_info": {}}
