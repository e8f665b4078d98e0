"""Core layer package."""

from .address import AddressCodec
from .cipher import MessageCipher
from .transaction import TransactionBuilder

__all__ = ["AddressCodec", "MessageCipher", "TransactionBuilder"]
