"""
ERTH SDK - Error Types

Specific exception classes for each failure class of the pipeline.
"""

from typing import Optional


class ErthError(Exception):
    """Base exception for all ERTH SDK errors."""
    
    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
    
    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def with_context(self, **context) -> "ErthError":
        """Attach operation-level context (message index, contract) and return self."""
        for key, value in context.items():
            self.details.setdefault(key, value)
        return self


# =============================================================================
# Validation Errors
# =============================================================================

class ValidationError(ErthError):
    """Missing or malformed caller input. Never retried."""
    pass


class UnsupportedFundsFormat(ValidationError):
    """Coin string or coin entry could not be parsed."""
    
    def __init__(self, funds, reason: str = "expected <amount><denom>"):
        super().__init__(f"Unsupported funds format: {funds!r} ({reason})", {"funds": str(funds)})
        self.funds = funds


# =============================================================================
# Cryptographic Errors
# =============================================================================

class CryptoError(ErthError):
    """AES-SIV failure, invalid key or nonce length, or bad address encoding."""
    pass


class InvalidAddress(CryptoError):
    """Bech32 address has a wrong prefix, bad character, checksum or length."""
    
    def __init__(self, address: str, reason: str):
        super().__init__(f"Invalid address {address!r}: {reason}", {"address": address})
        self.address = address
        self.reason = reason


# =============================================================================
# Signing Errors
# =============================================================================

class SigningError(ErthError):
    """Error during signature creation."""
    pass


class SignerFailure(SigningError):
    """External signer raised or returned an unusable signature."""
    pass


# =============================================================================
# Network Errors
# =============================================================================

class NetworkError(ErthError):
    """HTTP transport failure or unexpected status from the LCD gateway."""
    pass


class APIError(NetworkError):
    """Non-2xx response from the LCD gateway."""
    
    def __init__(self, message: str, status_code: Optional[int] = None, endpoint: Optional[str] = None):
        super().__init__(message, {"status_code": status_code, "endpoint": endpoint})
        self.status_code = status_code
        self.endpoint = endpoint


class AccountNotFoundError(NetworkError):
    """The chain has no account for this address (HTTP 404). Not retried."""
    
    def __init__(self, address: str):
        super().__init__(f"Account not found: {address}", {"address": address})
        self.address = address


# =============================================================================
# Chain Errors
# =============================================================================

class ChainError(ErthError):
    """Transaction or query rejected by chain logic."""
    
    def __init__(
        self,
        raw_log: str,
        code: Optional[int] = None,
        tx_hash: Optional[str] = None,
        codespace: Optional[str] = None
    ):
        message = f"Transaction failed: Code {code}. {raw_log}" if code is not None else raw_log
        super().__init__(message, {"code": code, "tx_hash": tx_hash, "codespace": codespace})
        self.raw_log = raw_log
        self.code = code
        self.tx_hash = tx_hash
        self.codespace = codespace


class ContractQueryError(ChainError):
    """Smart query rejected by the contract; raw_log may hold an encrypted error."""
    
    def __init__(self, raw_log: str, code: Optional[int] = None):
        super().__init__(raw_log, code=code)
        self.message = f"Query failed: Code {code}. {raw_log}" if code is not None else f"Query failed: {raw_log}"
        self.args = (self.message,)


# =============================================================================
# Parse Errors
# =============================================================================

class ParseError(ErthError):
    """Response body is not valid JSON under any supported decoding."""
    
    def __init__(self, message: str, raw=None):
        super().__init__(message, {"raw_length": len(raw) if raw is not None else 0})
        self.raw = raw


# =============================================================================
# Cancellation
# =============================================================================

class OperationCancelledError(ErthError):
    """Operation was cancelled or ran past its deadline."""
    pass
